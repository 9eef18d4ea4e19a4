from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class OrderSessionCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    start_time: datetime = Field(..., alias="startTime", description="ISO-8601 start of the ordering window")
    end_time: datetime = Field(..., alias="endTime", description="ISO-8601 end of the ordering window")


class OrderSessionUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    start_time: Optional[datetime] = Field(None, alias="startTime")
    end_time: Optional[datetime] = Field(None, alias="endTime")
    is_active: Optional[bool] = Field(None, alias="isActive")
