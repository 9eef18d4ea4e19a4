from datetime import timedelta

import pytest
from sqlalchemy import delete, func, select, update

from conftest import API, auth_headers, token_pair
from officefood.core.constants import TokenType, UserRole
from officefood.core.exceptions import Unauthorized
from officefood.models.users import User
from officefood.services import auth_service as auth_service_module
from officefood.services import otp_service as otp_service_module
from officefood.services.auth_service import AuthService
from officefood.services.token_service import TokenService, build_claims

PHONE = "+15550001111"


def _login(client, phone=PHONE):
    sent = client.post(f"{API}/auth/send-otp", json={"phone": phone})
    assert sent.status_code == 200
    verified = client.post(f"{API}/auth/verify-otp", json={"phone": phone, "code": sent.json()["otp"]})
    assert verified.status_code == 200
    return verified.json()


class TestOtpLogin:
    def test_first_login_creates_user_and_code_is_single_use(self, client, db):
        sent = client.post(f"{API}/auth/send-otp", json={"phone": PHONE})
        assert sent.status_code == 200
        assert sent.json() == {"message": "OTP sent successfully", "expiresIn": 300, "otp": "123456"}

        verified = client.post(f"{API}/auth/verify-otp", json={"phone": PHONE, "code": "123456"})
        assert verified.status_code == 200
        body = verified.json()
        assert body["accessToken"]
        assert body["refreshToken"]
        assert body["user"]["phone"] == PHONE
        assert body["user"]["role"] == UserRole.USER
        assert body["user"]["name"] is None
        assert body["user"]["email"] is None
        assert body["user"]["companyId"] is None

        user = db.execute(select(User).where(User.phone == PHONE)).scalar_one()
        assert user.id == body["user"]["id"]

        again = client.post(f"{API}/auth/verify-otp", json={"phone": PHONE, "code": "123456"})
        assert again.status_code == 401
        assert again.json() == {"message": "Invalid OTP"}

    def test_existing_user_is_reused(self, client, db, factory):
        company = factory.company()
        existing = factory.user(company=company, phone=PHONE, name="Jane")

        body = _login(client)

        assert body["user"]["id"] == existing.id
        assert body["user"]["name"] == "Jane"
        assert body["user"]["companyId"] == company.id
        assert db.execute(select(func.count()).select_from(User)).scalar_one() == 1

    def test_wrong_code_is_rejected(self, client):
        client.post(f"{API}/auth/send-otp", json={"phone": PHONE})
        response = client.post(f"{API}/auth/verify-otp", json={"phone": PHONE, "code": "000000"})
        assert response.status_code == 401
        assert response.json() == {"message": "Invalid OTP"}

    def test_phone_is_normalized(self, client, db):
        response = client.post(f"{API}/auth/send-otp", json={"phone": "+1 (555) 000-1111"})
        assert response.status_code == 200
        body = _login(client, "+1 555 000 1111")
        assert body["user"]["phone"] == PHONE

    @pytest.mark.parametrize("phone", ["5550001111", "+0123", "not-a-phone", ""])
    def test_invalid_phone(self, client, phone):
        response = client.post(f"{API}/auth/send-otp", json={"phone": phone})
        assert response.status_code == 400
        assert "message" in response.json()

    def test_code_hidden_in_production(self, client, monkeypatch):
        monkeypatch.setattr(auth_service_module.configs, "ENVIRONMENT", "production")
        monkeypatch.setattr(otp_service_module.configs, "ENVIRONMENT", "production")
        response = client.post(f"{API}/auth/send-otp", json={"phone": PHONE})
        assert response.status_code == 200
        assert response.json() == {"message": "OTP sent successfully", "expiresIn": 300}


class TestRefresh:
    def test_issues_new_pair_from_current_user_record(self, client, db):
        tokens = _login(client)
        db.execute(update(User).where(User.phone == PHONE).values(role=UserRole.ADMIN, name="Promoted"))
        db.commit()

        response = client.post(f"{API}/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
        assert response.status_code == 200
        claims = TokenService().decode(response.json()["accessToken"], TokenType.ACCESS)
        assert claims["role"] == UserRole.ADMIN
        assert claims["name"] == "Promoted"
        TokenService().decode(response.json()["refreshToken"], TokenType.REFRESH)

    def test_access_token_is_not_a_refresh_token(self, client):
        tokens = _login(client)
        response = client.post(f"{API}/auth/refresh", json={"refreshToken": tokens["accessToken"]})
        assert response.status_code == 401
        assert response.json() == {"message": "Invalid refresh token"}

    def test_garbage_token(self, client):
        response = client.post(f"{API}/auth/refresh", json={"refreshToken": "not.a.jwt"})
        assert response.status_code == 401

    def test_deleted_user(self, client, db):
        tokens = _login(client)
        db.execute(delete(User).where(User.phone == PHONE))
        db.commit()
        response = client.post(f"{API}/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
        assert response.status_code == 401

    def test_deactivated_user_can_still_refresh(self, db, factory):
        user = factory.user(is_active=False)
        refreshed = AuthService(db).refresh(token_pair(user)["refreshToken"])
        assert refreshed["accessToken"]


class TestValidate:
    def test_returns_current_claims(self, db, factory):
        company = factory.company()
        user = factory.user(company=company)
        claims = AuthService(db).validate({"id": user.id})
        assert claims == {
            "id": user.id,
            "phone": user.phone,
            "name": user.name,
            "email": None,
            "role": UserRole.USER,
            "companyId": company.id,
        }

    def test_deactivated_user_is_rejected(self, db, factory):
        user = factory.user(is_active=False)
        with pytest.raises(Unauthorized):
            AuthService(db).validate({"id": user.id})

    def test_unknown_user_is_rejected(self, db):
        with pytest.raises(Unauthorized):
            AuthService(db).validate({"id": "missing"})

    def test_gate_rejects_deactivated_user_with_valid_token(self, client, factory):
        user = factory.user(company=factory.company())
        headers = auth_headers(user)
        assert client.get(f"{API}/users/profile", headers=headers).status_code == 200

        user.is_active = False
        factory.db.commit()

        response = client.get(f"{API}/users/profile", headers=headers)
        assert response.status_code == 401
        assert response.json() == {"message": "User not found or inactive"}


class TestTokens:
    def _claims(self):
        return {"id": "u-1", "phone": PHONE, "name": None, "email": None, "role": UserRole.USER, "companyId": None}

    def test_claims_carry_identity_fields(self):
        tokens = TokenService()
        payload = tokens.decode(tokens.create_access_token(self._claims()), TokenType.ACCESS)
        assert build_claims(payload) == self._claims()
        assert payload["sub"] == "u-1"
        assert payload["type"] == TokenType.ACCESS
        assert payload["exp"] - payload["iat"] == 60 * 60

    def test_refresh_token_lives_thirty_days(self):
        tokens = TokenService()
        payload = tokens.decode(tokens.create_refresh_token(self._claims()), TokenType.REFRESH)
        assert payload["exp"] - payload["iat"] == 30 * 24 * 60 * 60

    def test_expired(self):
        tokens = TokenService()
        tokens.access_ttl = timedelta(seconds=-5)
        with pytest.raises(Unauthorized, match="Token expired"):
            tokens.decode(tokens.create_access_token(self._claims()), TokenType.ACCESS)

    def test_wrong_secret(self):
        token = TokenService(secret="other-secret").create_access_token(self._claims())
        with pytest.raises(Unauthorized, match="Invalid token"):
            TokenService().decode(token, TokenType.ACCESS)

    def test_wrong_type(self):
        tokens = TokenService()
        with pytest.raises(Unauthorized, match="Invalid token"):
            tokens.decode(tokens.create_refresh_token(self._claims()), TokenType.ACCESS)

    def test_missing(self):
        with pytest.raises(Unauthorized, match="Missing token"):
            TokenService().decode("", TokenType.ACCESS)


class TestLogout:
    def test_logout(self, client):
        tokens = _login(client)
        response = client.post(f"{API}/auth/logout", headers={"Authorization": f"Bearer {tokens['accessToken']}"})
        assert response.status_code == 200
        assert response.json() == {"message": "Logged out successfully"}

    def test_logout_requires_token(self, client):
        response = client.post(f"{API}/auth/logout")
        assert response.status_code == 401
