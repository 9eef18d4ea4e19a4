"""
Logger factories for the OfficeFood API
"""
import logging
import atexit

from officefood.logging.config import LoggingConfig
from officefood.logging.handlers import get_app_handler, get_audit_handler, flush_all_handlers
from officefood.logging.filters import RequestContextFilter, BusinessContextFilter
from officefood.logging.slack_handler import slack_handler


def get_app_logger(name: str = 'officefood'):
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = get_app_handler()
        handler.addFilter(RequestContextFilter())
        handler.addFilter(BusinessContextFilter())
        logger.addHandler(handler)
        logger.addHandler(slack_handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def init_audit_logger(method: str = ''):
    logger_name = "officefood.audit.get" if method.upper() == 'GET' else "officefood.audit.all"
    logger = logging.getLogger(logger_name)
    if not logger.handlers:
        handler = get_audit_handler(method)
        handler.addFilter(RequestContextFilter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def initialize_logging():
    is_valid, message = LoggingConfig.is_valid_config()
    if not is_valid:
        print(f"Warning: {message}")
    atexit.register(flush_all_handlers)
    print("Logging system initialized (OfficeFood)")
