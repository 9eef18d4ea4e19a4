from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from officefood.core.constants import OrderStatus
from officefood.logging.utils import get_app_logger

logger = get_app_logger('orders_dto')


class OrderItemCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    menu_item_id: str = Field(..., alias="menuItemId", min_length=1, max_length=36)
    quantity: int = Field(..., ge=1, description="Number of portions, at least 1")
    notes: Optional[str] = Field(None, max_length=200)


class OrderCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId", min_length=1, max_length=36)
    items: List[OrderItemCreate] = Field(..., min_length=1, description="At least one line item")
    notes: Optional[str] = Field(None, max_length=500)


class OrderUpdate(BaseModel):
    status: Optional[str] = Field(None, description="One of PENDING, CONFIRMED, PREPARING, READY, DELIVERED, CANCELLED")
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        if v is None:
            return v
        value = v.upper()
        if not OrderStatus.is_valid(value):
            logger.error(f"invalid_order_status | status={v}")
            raise ValueError(f"Invalid status: {v}")
        return value
