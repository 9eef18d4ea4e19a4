from typing import Dict, Optional
from sqlalchemy.orm import Session
from officefood.config.settings import OfficeFoodConfigs
from officefood.core.constants import LOGOUT_MESSAGE, OTP_SENT_MESSAGE, TokenType
from officefood.core.exceptions import RateLimited, Unauthorized
from officefood.logging.utils import get_app_logger
from officefood.middlewares.request_context import request_context
from officefood.repository.users import UsersRepository
from officefood.services.otp_attempts import OTPAttemptGuard
from officefood.services.otp_service import OTPService
from officefood.services.token_service import TokenService, build_claims

logger = get_app_logger(__name__)
configs = OfficeFoodConfigs()


class AuthService:
    """
    Phone + OTP login and credential lifecycle.

    AWAITING_OTP -> AUTHENTICATED on a successful verify; failed verifies keep
    the caller in AWAITING_OTP until the attempt guard locks the phone.
    """

    def __init__(self, db: Session, attempt_guard: Optional[OTPAttemptGuard] = None,
                 token_service: Optional[TokenService] = None):
        request_context.module_name = 'auth_service'
        self.db = db
        self.otp_service = OTPService(db)
        self.users = UsersRepository(db)
        self.attempt_guard = attempt_guard or OTPAttemptGuard()
        self.tokens = token_service or TokenService()

    def send_otp(self, phone: str) -> Dict:
        code = self.otp_service.generate(phone)
        self.attempt_guard.reset(phone)

        response = {"message": OTP_SENT_MESSAGE, "expiresIn": configs.OTP_EXPIRES_IN}
        if not configs.is_production:
            logger.info(f"otp_issued | phone={phone} otp={code}")
            response["otp"] = code
        else:
            logger.info(f"otp_issued | phone={phone}")
        return response

    def verify_otp(self, phone: str, code: str) -> Dict:
        if self.attempt_guard.is_locked(phone):
            logger.warning(f"otp_verify_locked | phone={phone}")
            raise RateLimited("Too many failed attempts, request a new OTP later")

        if not self.otp_service.verify(phone, code):
            self.attempt_guard.register_failure(phone)
            raise Unauthorized("Invalid OTP")

        try:
            user = self.users.get_by_phone(phone)
            if user is None:
                user = self.users.create(phone)

            tokens = self.tokens.issue_pair(user)
            self.otp_service.mark_used(phone, code)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.attempt_guard.reset(phone)
        request_context.user_id = user["id"]
        logger.info(f"login_succeeded | user_id={user['id']} role={user['role']}")
        return {**tokens, "user": build_claims(user)}

    def refresh(self, refresh_token: str) -> Dict:
        try:
            payload = self.tokens.decode(refresh_token, TokenType.REFRESH)
        except Unauthorized:
            raise Unauthorized("Invalid refresh token")

        user = self.users.get_by_id(payload["id"])
        if user is None:
            logger.warning(f"refresh_rejected | user_id={payload['id']}")
            raise Unauthorized("Invalid refresh token")

        logger.info(f"tokens_refreshed | user_id={user['id']}")
        return self.tokens.issue_pair(user)

    def validate(self, claims: Dict) -> Dict:
        """Re-check the caller against the current user record."""
        user = self.users.get_by_id(claims.get("id"))
        if user is None or not user["isActive"]:
            logger.warning(f"auth_validate_rejected | user_id={claims.get('id')}")
            raise Unauthorized("User not found or inactive")
        return build_claims(user)

    def logout(self, user_id: Optional[str] = None) -> Dict:
        logger.info(f"logout | user_id={user_id}")
        return {"message": LOGOUT_MESSAGE}
