"""
OTP Repository

Handles database operations for issued OTP codes.
"""

from datetime import datetime
from typing import Dict, Optional
from sqlalchemy import delete, or_, select, update
from sqlalchemy.orm import Session
from officefood.models.otp import OtpCode
from officefood.logging.utils import get_app_logger

logger = get_app_logger("officefood.otp_repository")


class OTPRepository:
    """Repository for OTP operations"""

    def __init__(self, db: Session):
        self.db = db

    def delete_for_phone(self, phone: str) -> int:
        result = self.db.execute(delete(OtpCode).where(OtpCode.phone == phone))
        return result.rowcount or 0

    def create(self, phone: str, code_hash: str, expires_at: datetime) -> Dict:
        otp = OtpCode(phone=phone, code=code_hash, expires_at=expires_at, is_used=False)
        self.db.add(otp)
        self.db.flush()
        return {"id": otp.id, "phone": otp.phone, "expiresAt": otp.expires_at, "isUsed": otp.is_used}

    def find_valid(self, phone: str, code_hash: str, now: datetime) -> Optional[Dict]:
        """Unused record for (phone, code) that expires strictly after `now`."""
        row = self.db.execute(
            select(OtpCode).where(
                OtpCode.phone == phone,
                OtpCode.code == code_hash,
                OtpCode.is_used.is_(False),
                OtpCode.expires_at > now,
            ).limit(1)
        ).scalar_one_or_none()
        if row is None:
            return None
        return {"id": row.id, "phone": row.phone, "expiresAt": row.expires_at, "isUsed": row.is_used}

    def mark_used(self, phone: str, code_hash: str) -> int:
        result = self.db.execute(
            update(OtpCode)
            .where(OtpCode.phone == phone, OtpCode.code == code_hash)
            .values(is_used=True)
        )
        return result.rowcount or 0

    def delete_expired_or_used(self, now: datetime) -> int:
        result = self.db.execute(
            delete(OtpCode).where(or_(OtpCode.expires_at < now, OtpCode.is_used.is_(True)))
        )
        return result.rowcount or 0

    def count_enabled(self, phone: str, now: datetime) -> int:
        rows = self.db.execute(
            select(OtpCode.id).where(
                OtpCode.phone == phone,
                OtpCode.is_used.is_(False),
                OtpCode.expires_at > now,
            )
        ).all()
        return len(rows)
