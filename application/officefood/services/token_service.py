from datetime import datetime, timedelta, timezone
from typing import Dict
from jose import JWTError, ExpiredSignatureError, jwt
from officefood.config.settings import OfficeFoodConfigs
from officefood.core.constants import TokenType
from officefood.core.exceptions import Unauthorized
from officefood.logging.utils import get_app_logger

logger = get_app_logger(__name__)
configs = OfficeFoodConfigs()

CLAIM_KEYS = ("id", "phone", "name", "email", "role", "companyId")


def build_claims(user: Dict) -> Dict:
    """Claim set carried by both credentials, taken from a serialized user."""
    return {key: user.get(key) for key in CLAIM_KEYS}


class TokenService:
    """Signs and verifies HS256 access/refresh credentials with python-jose"""

    def __init__(self, secret: str = configs.JWT_SECRET, algorithm: str = configs.JWT_ALGORITHM):
        self.secret = secret
        self.algorithm = algorithm
        self.access_ttl = timedelta(minutes=configs.ACCESS_TOKEN_EXPIRE_MINUTES)
        self.refresh_ttl = timedelta(days=configs.REFRESH_TOKEN_EXPIRE_DAYS)

    def _encode(self, claims: Dict, token_type: str, expires_delta: timedelta) -> str:
        to_encode = dict(claims)
        now = datetime.now(timezone.utc)
        to_encode.update({
            "sub": claims["id"],
            "type": token_type,
            "iat": now,
            "exp": now + expires_delta,
        })
        return jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def create_access_token(self, claims: Dict) -> str:
        return self._encode(claims, TokenType.ACCESS, self.access_ttl)

    def create_refresh_token(self, claims: Dict) -> str:
        return self._encode(claims, TokenType.REFRESH, self.refresh_ttl)

    def issue_pair(self, user: Dict) -> Dict[str, str]:
        claims = build_claims(user)
        return {
            "accessToken": self.create_access_token(claims),
            "refreshToken": self.create_refresh_token(claims),
        }

    def decode(self, token: str, expected_type: str) -> Dict:
        """
        Verify signature, expiry and credential type.

        Raises:
            Unauthorized: on any verification failure
        """
        if not token:
            raise Unauthorized("Missing token")
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            logger.warning(f"token_expired | expected_type={expected_type}")
            raise Unauthorized("Token expired")
        except JWTError as e:
            logger.warning(f"token_invalid | expected_type={expected_type} error={e}")
            raise Unauthorized("Invalid token")

        if payload.get("type") != expected_type or not payload.get("id"):
            logger.warning(f"token_wrong_type | expected_type={expected_type} type={payload.get('type')}")
            raise Unauthorized("Invalid token")
        return payload
