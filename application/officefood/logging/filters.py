"""
Logging filters that copy request context onto log records
"""
import logging
import uuid
from officefood.middlewares.request_context import request_context


class RequestContextFilter(logging.Filter):
    def filter(self, record):
        record.request_id = getattr(request_context, 'request_id', None) or str(uuid.uuid4())
        record.request_method = getattr(request_context, 'request_method', '') or ''
        record.request_path = getattr(request_context, 'request_path', '') or ''
        record.user_id = getattr(request_context, 'user_id', '') or ''
        return True


class BusinessContextFilter(logging.Filter):
    def filter(self, record):
        record.company_id = getattr(request_context, 'company_id', '') or ''
        record.session_id = getattr(request_context, 'session_id', '') or ''
        record.order_id = getattr(request_context, 'order_id', '') or ''
        return True
