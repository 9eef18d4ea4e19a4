from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class UserProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = Field(None)
