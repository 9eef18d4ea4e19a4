from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator
from typing import Optional
from decimal import Decimal
from officefood.logging.utils import get_app_logger

logger = get_app_logger('menu_dto')


def _check_price(v: Decimal) -> Decimal:
    if v is not None and v != v.quantize(Decimal("0.01")):
        logger.error(f"invalid_menu_price | price={v}")
        raise ValueError("price must have at most 2 decimal places")
    return v


class MenuItemCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    price: Decimal = Field(..., ge=0, max_digits=10)
    category: str = Field(..., min_length=1, max_length=50)
    image_url: Optional[HttpUrl] = Field(None, alias="imageUrl")
    is_available: bool = Field(True, alias="isAvailable")

    @field_validator('price')
    @classmethod
    def validate_price(cls, v):
        return _check_price(v)


class MenuItemUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10)
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    image_url: Optional[HttpUrl] = Field(None, alias="imageUrl")
    is_available: Optional[bool] = Field(None, alias="isAvailable")

    @field_validator('price')
    @classmethod
    def validate_price(cls, v):
        return _check_price(v)

    @field_validator('name', 'price', 'category', 'is_available', mode='before')
    @classmethod
    def reject_null(cls, v, info):
        # omit the field to leave it unchanged; these columns are NOT NULL
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v
