from pydantic import BaseModel, ConfigDict, Field, field_validator
from officefood.dto.phone_validations import validate_phone_number


class SendOTPRequest(BaseModel):
    """Request model for requesting an OTP"""
    phone: str = Field(..., description="Phone number in E.164 format (e.g., +15550001111)")

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        return validate_phone_number(v)


class VerifyOTPRequest(BaseModel):
    """Request model for verifying an OTP"""
    phone: str = Field(..., description="Phone number in E.164 format")
    code: str = Field(..., min_length=1, max_length=12, description="OTP code received by the user")

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        return validate_phone_number(v)

    @field_validator('code')
    @classmethod
    def strip_code(cls, v):
        return v.strip()


class RefreshTokenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str = Field(..., alias="refreshToken", min_length=1)
