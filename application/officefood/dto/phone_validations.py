from pydantic import BaseModel, field_validator
import re

from officefood.logging.utils import get_app_logger
logger = get_app_logger('phone_number_validations')

E164_PATTERN = re.compile(r'^\+[1-9]\d{1,14}$')


class PhoneNumberValidator(BaseModel):
    phone_number: str

    @field_validator('phone_number')
    @classmethod
    def validate_phone_number(cls, v):
        if not v:
            logger.error("invalid_phone_number | reason=empty")
            raise ValueError('Phone number is required')

        # Drop spaces, dashes, dots and brackets
        cleaned = re.sub(r'[\s\-().]', '', v)
        if E164_PATTERN.match(cleaned):
            return cleaned
        logger.error(f"invalid_phone_number | reason=format value={v}")
        raise ValueError('Invalid phone number format. Expected E.164, e.g. +15550001111')


def validate_phone_number(phone: str) -> str:
    return PhoneNumberValidator(phone_number=phone).phone_number
