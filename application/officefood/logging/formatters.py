"""
JSON formatters for OfficeFood logging
"""
import json
import logging
from datetime import datetime, timezone

# Settings
from officefood.config.settings import OfficeFoodConfigs
configs = OfficeFoodConfigs()

# record attribute -> default, copied onto every app log line
APP_CONTEXT_FIELDS = (
    ('request_id', ''),
    ('request_method', ''),
    ('request_path', ''),
    ('user_id', ''),
    ('company_id', ''),
    ('session_id', ''),
    ('order_id', ''),
)

AUDIT_FIELDS = (
    ('user_id', ''),
    ('request_id', ''),
    ('duration', 0.0),
    ('hostname', ''),
    ('app_name', ''),
    ('module_name', ''),
    ('request_method', ''),
    ('request_path', ''),
    ('size_in_bytes', 0),
    ('status_code', 0),
    ('version', ''),
)


def _to_json(value) -> str:
    return json.dumps(value, ensure_ascii=False, default=str) if value else ''


class BaseJSONFormatter(logging.Formatter):
    """One JSON object per record; subclasses choose the extra fields."""

    include_message = True
    fields = ()

    def format(self, record):
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'module': record.module,
            'function': record.funcName,
            'line_number': record.lineno,
            'environment': configs.APPLICATION_ENVIRONMENT,
            'service': configs.APP_NAME,
        }
        if self.include_message:
            entry['message'] = record.getMessage()
        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)

        for name, default in self.fields:
            entry[name] = getattr(record, name, default)
        self.add_extra_fields(entry, record)
        return json.dumps(entry, ensure_ascii=False, default=str)

    def add_extra_fields(self, entry, record):
        pass


class AppLogsJSONFormatter(BaseJSONFormatter):
    fields = APP_CONTEXT_FIELDS


class AuditLogsJSONFormatter(BaseJSONFormatter):
    """Audit records carry their payload in extras, not in the message"""

    include_message = False
    fields = AUDIT_FIELDS

    def add_extra_fields(self, entry, record):
        entry['request'] = _to_json(getattr(record, 'request', None))
        entry['response'] = _to_json(getattr(record, 'response', None))
