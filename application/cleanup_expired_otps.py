#!/usr/bin/env python3
"""
Maintenance sweep: delete OTP codes that are expired or already used.
Meant to be run periodically (cron / scheduled job), never per request.
"""
import sys

from officefood.connections.database import get_db_session
from officefood.logging.utils import get_app_logger
from officefood.services.otp_service import OTPService

logger = get_app_logger("officefood.cleanup_expired_otps")


def main() -> int:
    with get_db_session() as db:
        deleted = OTPService(db).cleanup_expired()
    print(f"Deleted {deleted} expired or used OTP codes")
    return 0


if __name__ == "__main__":
    sys.exit(main())
