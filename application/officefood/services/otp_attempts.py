from typing import Optional
import redis
from officefood.logging.utils import get_app_logger
from officefood.config.settings import OfficeFoodConfigs
from officefood.connections.redis_wrapper import RedisWrapper, safe_key_part

logger = get_app_logger(__name__)
configs = OfficeFoodConfigs()


class OTPAttemptGuard:
    """
    Counts failed OTP verifications per phone in Redis and locks the phone
    once OTP_MAX_ATTEMPTS is reached within the attempt window.

    When Redis is unavailable every check passes (no lockout) and the outage
    is logged.
    """

    CACHE_PREFIX = "otp_attempts:"

    def __init__(self, redis_client: Optional[RedisWrapper] = None):
        self.enabled = configs.OTP_ATTEMPT_LIMIT_ENABLED
        self.max_attempts = configs.OTP_MAX_ATTEMPTS
        self.window = configs.OTP_ATTEMPT_WINDOW_SECONDS
        self._redis = redis_client

    def _get_redis_client(self) -> Optional[RedisWrapper]:
        if not self.enabled:
            return None
        if self._redis is None:
            self._redis = RedisWrapper(database=configs.REDIS_CACHE_DB)
        if not getattr(self._redis, "connected", False):
            logger.error("otp_attempt_guard_unavailable | reason=redis_not_connected")
            return None
        return self._redis

    def get_cache_key(self, phone: str) -> str:
        return f"{self.CACHE_PREFIX}{safe_key_part(phone)}"

    def failures(self, phone: str) -> int:
        client = self._get_redis_client()
        if client is None:
            return 0
        try:
            return client.get_int(self.get_cache_key(phone))
        except redis.exceptions.RedisError as e:
            logger.error(f"otp_attempt_guard_read_failed | phone={phone} error={e}")
            return 0

    def is_locked(self, phone: str) -> bool:
        return self.failures(phone) >= self.max_attempts

    def register_failure(self, phone: str) -> int:
        client = self._get_redis_client()
        if client is None:
            return 0
        try:
            count = client.incr_with_ttl(self.get_cache_key(phone), self.window)
        except redis.exceptions.RedisError as e:
            logger.error(f"otp_attempt_guard_write_failed | phone={phone} error={e}")
            return 0
        logger.warning(f"otp_failed_attempt | phone={phone} count={count} max={self.max_attempts}")
        return count

    def reset(self, phone: str) -> None:
        client = self._get_redis_client()
        if client is None:
            return
        try:
            client.delete(self.get_cache_key(phone))
        except redis.exceptions.RedisError as e:
            logger.error(f"otp_attempt_guard_reset_failed | phone={phone} error={e}")
