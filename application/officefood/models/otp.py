"""
OTP Model
Stores hashed OTP codes for phone number authentication
"""

from sqlalchemy import Column, String, Boolean, TIMESTAMP, Index
from officefood.models.common import CommonModel


class OtpCode(CommonModel):
    """
    One row per issued code. `code` holds the SHA-256 hex digest, never the
    plain value. Older rows for a phone are deleted when a new code is issued.
    """
    __tablename__ = "otp_codes"

    phone = Column(String(20), nullable=False, index=True)
    code = Column(String(64), nullable=False)
    expires_at = Column(TIMESTAMP(timezone=True), nullable=False)
    is_used = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index('idx_otp_codes_phone_code', 'phone', 'code'),
    )

    def __repr__(self):
        return f"<OtpCode(id={self.id}, phone='{self.phone}', is_used={self.is_used})>"
