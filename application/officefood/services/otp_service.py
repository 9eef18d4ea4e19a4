import hashlib
import secrets
from datetime import timedelta
from sqlalchemy.orm import Session
from officefood.logging.utils import get_app_logger
from officefood.config.settings import OfficeFoodConfigs
from officefood.middlewares.request_context import request_context
from officefood.repository.otp import OTPRepository
from officefood.utils.datetime_helpers import utc_now

logger = get_app_logger(__name__)
configs = OfficeFoodConfigs()


class OTPService:
    """
    Issues and checks one-time codes stored in the otp_codes table.

    - At most one usable code per phone: issuing deletes older rows first.
    - Codes are stored as SHA-256 digests.
    - Mismatches are reported as False, never raised.
    """

    def __init__(self, db: Session):
        request_context.module_name = 'otp_service'
        self.db = db
        self.repository = OTPRepository(db)
        self.otp_length = configs.OTP_LENGTH
        self.otp_expiry = configs.OTP_EXPIRES_IN

    def generate_code(self) -> str:
        """
        Numeric code of the configured length.

        Outside production the fixed MOCK_OTP_CODE is returned so test clients
        can log in deterministically.
        """
        if not configs.is_production:
            return configs.MOCK_OTP_CODE
        low = 10 ** (self.otp_length - 1)
        high = (10 ** self.otp_length) - 1
        return str(low + secrets.randbelow(high - low + 1))

    def hash_otp(self, otp: str) -> str:
        return hashlib.sha256(otp.encode()).hexdigest()

    def generate(self, phone: str) -> str:
        """
        Issue a new code for `phone`, replacing any previous one.

        Returns:
            str: the plain code, for delivery to the user
        """
        code = self.generate_code()
        expires_at = utc_now() + timedelta(seconds=self.otp_expiry)
        removed = self.repository.delete_for_phone(phone)
        self.repository.create(phone, self.hash_otp(code), expires_at)
        self.db.commit()
        logger.info(f"otp_generated | phone={phone} replaced={removed} expires_in={self.otp_expiry}")
        return code

    def verify(self, phone: str, code: str) -> bool:
        """True iff an unused, unexpired code matches. No side effects."""
        if not code or not code.isdigit() or len(code) != self.otp_length:
            logger.warning(f"otp_verify_rejected | phone={phone} reason=format")
            return False
        record = self.repository.find_valid(phone, self.hash_otp(code), utc_now())
        if record is None:
            logger.warning(f"otp_verify_failed | phone={phone}")
            return False
        logger.info(f"otp_verified | phone={phone}")
        return True

    def mark_used(self, phone: str, code: str) -> int:
        """Flag matching codes as used. Runs in the caller's transaction."""
        updated = self.repository.mark_used(phone, self.hash_otp(code))
        logger.info(f"otp_marked_used | phone={phone} count={updated}")
        return updated

    def cleanup_expired(self) -> int:
        """Delete expired or used codes; returns how many rows were removed."""
        deleted = self.repository.delete_expired_or_used(utc_now())
        self.db.commit()
        logger.info(f"otp_cleanup_completed | deleted={deleted}")
        return deleted
