import redis
from urllib.parse import quote_plus

# Logger
from officefood.logging.utils import get_app_logger
logger = get_app_logger("redis_wrapper")

# Settings
from officefood.config.settings import OfficeFoodConfigs
configs = OfficeFoodConfigs()

REDIS_URL = configs.REDIS_URL


def safe_key_part(part: str) -> str:
    """Encode dynamic key segments so Redis keys contain only URL-safe chars."""
    return quote_plus(str(part), safe='')


class RedisWrapper:
    def __init__(self, redis_uri=REDIS_URL, database=None):
        if database is not None:
            redis_uri = f"{redis_uri}/{database}"
        try:
            self.redis_client = redis.from_url(redis_uri, socket_connect_timeout=2)
            self.redis_client.ping()
            self.connected = True
        except redis.exceptions.RedisError as e:
            logger.error(f"redis_connect_failed | uri={redis_uri} error={e}")
            self.redis_client = None
            self.connected = False

    def incr_with_ttl(self, key, ttl_seconds: int) -> int:
        """Increment a counter; the TTL is set when the counter is created."""
        count = int(self.redis_client.incr(key))
        if count == 1:
            self.redis_client.expire(key, ttl_seconds)
        return count

    def get_int(self, key) -> int:
        value = self.redis_client.get(key)
        return int(value) if value is not None else 0

    def delete(self, key):
        return self.redis_client.delete(key) > 0
