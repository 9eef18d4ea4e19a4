"""
Logging configuration for the OfficeFood API.
Local JSON files by default, Firehose shipping when enabled.
"""

# Settings
from officefood.config.settings import OfficeFoodConfigs
configs = OfficeFoodConfigs()

class LoggingConfig:
    """Logging configuration read once from settings"""

    # Core settings
    LOG_DIR = configs.LOG_DIR
    FIREHOSE_ENABLED = configs.FIREHOSE_ENABLED
    AUDIT_LOGGING_ENABLED = configs.AUDIT_LOGGING_ENABLED
    CAPTURE_RESPONSE_BODY = configs.CAPTURE_RESPONSE_BODY

    # Stream Names
    APP_LOGS_STREAM_NAME = configs.APP_LOGS_STREAM_NAME
    AUDIT_LOGS_STREAM_NAME = configs.AUDIT_LOGS_STREAM_NAME
    AUDIT_LOGS_GET_STREAM_NAME = configs.AUDIT_LOGS_GET_STREAM_NAME
    LOG_BUFFER_TIMEOUT = configs.LOG_BUFFER_TIMEOUT

    # Buffer sizes
    APP_LOGS_CAPACITY = configs.APP_LOGS_CAPACITY
    AUDIT_LOGS_CAPACITY = configs.AUDIT_LOGS_CAPACITY

    # Firehose settings
    FIREHOSE_REGION_NAME = configs.FIREHOSE_REGION_NAME
    FIREHOSE_ACCESS_KEY_ID = configs.FIREHOSE_ACCESS_KEY_ID
    FIREHOSE_SECRET_ACCESS_KEY = configs.FIREHOSE_SECRET_ACCESS_KEY
    FIREHOSE_RETRY_COUNT = configs.FIREHOSE_RETRY_COUNT
    FIREHOSE_RETRY_DELAY = configs.FIREHOSE_RETRY_DELAY

    @classmethod
    def is_valid_config(cls):
        """Only Firehose needs credentials; local files always work"""
        if cls.FIREHOSE_ENABLED:
            if not cls.FIREHOSE_ACCESS_KEY_ID or not cls.FIREHOSE_SECRET_ACCESS_KEY:
                return False, "Firehose credentials not configured"
        return True, "Configuration is valid"
