"""
Logging handlers for the OfficeFood API.
Firehose-backed buffered handlers with a local-file fallback.
"""
import logging
import os
import time
from logging.handlers import MemoryHandler

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from officefood.logging.config import LoggingConfig
from officefood.logging.formatters import AppLogsJSONFormatter, AuditLogsJSONFormatter

# Settings
from officefood.config.settings import OfficeFoodConfigs
configs = OfficeFoodConfigs()

LOG_DEBUG_PRINTS = configs.LOG_DEBUG_PRINTS

def dbg(msg: str) -> None:
    """Print buffer/flush traces when LOG_DEBUG_PRINTS is on"""
    if LOG_DEBUG_PRINTS:
        print(msg)


class FireHoseHandler(logging.Handler):
    """Kinesis Firehose sink with exponential backoff"""

    def __init__(self, stream_name: str):
        super().__init__()
        self.stream_name = stream_name
        self.client = boto3.client(
            "firehose",
            region_name=LoggingConfig.FIREHOSE_REGION_NAME,
            aws_access_key_id=LoggingConfig.FIREHOSE_ACCESS_KEY_ID,
            aws_secret_access_key=LoggingConfig.FIREHOSE_SECRET_ACCESS_KEY,
            config=Config(connect_timeout=10, read_timeout=30, retries={"max_attempts": 2}),
        )
        self.retry_count = LoggingConfig.FIREHOSE_RETRY_COUNT
        self.retry_delay = LoggingConfig.FIREHOSE_RETRY_DELAY

    def bulk_insert(self, records) -> bool:
        if not records:
            return True

        pending = records
        for attempt in range(self.retry_count):
            try:
                response = self.client.put_record_batch(
                    DeliveryStreamName=self.stream_name,
                    Records=pending,
                )
            except (BotoCoreError, ClientError) as e:
                dbg(f"[Firehose:{self.stream_name}] attempt={attempt + 1} error={e}")
            else:
                failed = response.get("FailedPutCount", 0)
                dbg(f"[Firehose:{self.stream_name}] attempt={attempt + 1} total={len(pending)} failed={failed}")
                if failed == 0:
                    return True
                # resend only the rejected records
                results = response.get("RequestResponses", [])
                pending = [rec for rec, res in zip(pending, results) if res.get("ErrorCode")] or pending

            if attempt < self.retry_count - 1:
                time.sleep(self.retry_delay * (2 ** attempt))
        return False


class BufferedFirehoseHandler(MemoryHandler):
    """Buffers records and ships them on capacity or after LOG_BUFFER_TIMEOUT seconds"""

    def __init__(self, stream_name: str, capacity: int, formatter: logging.Formatter):
        target = FireHoseHandler(stream_name)
        super().__init__(capacity=capacity, target=target)
        self.stream_name = stream_name
        self.buffer_timeout = LoggingConfig.LOG_BUFFER_TIMEOUT
        self.last_flush = time.time()
        self.setFormatter(formatter)
        target.setFormatter(formatter)

    def shouldFlush(self, record):
        expired = time.time() - self.last_flush >= self.buffer_timeout
        return expired or super().shouldFlush(record)

    def flush(self):
        self.acquire()
        try:
            if self.target and self.buffer:
                records = [{"Data": (self.format(record) + "\n").encode("utf-8")} for record in self.buffer]
                ok = self.target.bulk_insert(records)
                dbg(f"[Buffer:{self.stream_name}] flushed count={len(records)} ok={ok}")
                self.buffer.clear()
                self.last_flush = time.time()
        finally:
            self.release()


_handlers = {}

def get_local_file_handler(name: str = 'app', audit: bool = False):
    os.makedirs(LoggingConfig.LOG_DIR, exist_ok=True)
    handler = logging.FileHandler(os.path.join(LoggingConfig.LOG_DIR, f'{name}.log'))
    handler.setFormatter(AuditLogsJSONFormatter() if audit else AppLogsJSONFormatter())
    return handler


def get_app_handler():
    if not LoggingConfig.FIREHOSE_ENABLED:
        return get_local_file_handler('app')
    if 'app' not in _handlers:
        stream = LoggingConfig.APP_LOGS_STREAM_NAME or 'officefood-app-logs'
        _handlers['app'] = BufferedFirehoseHandler(stream, LoggingConfig.APP_LOGS_CAPACITY, AppLogsJSONFormatter())
    return _handlers['app']


def get_audit_handler(method: str = ''):
    if not LoggingConfig.FIREHOSE_ENABLED:
        return get_local_file_handler('audit', audit=True)
    if method.upper() == 'GET':
        key, stream = 'audit_get', LoggingConfig.AUDIT_LOGS_GET_STREAM_NAME or 'officefood-audit-get-logs'
    else:
        key, stream = 'audit_all', LoggingConfig.AUDIT_LOGS_STREAM_NAME or 'officefood-audit-logs'
    if key not in _handlers:
        _handlers[key] = BufferedFirehoseHandler(stream, LoggingConfig.AUDIT_LOGS_CAPACITY, AuditLogsJSONFormatter())
    return _handlers[key]


def flush_all_handlers():
    for handler in _handlers.values():
        handler.flush()
