import uuid

from sqlalchemy import Column, TIMESTAMP, String
from sqlalchemy.sql import func
from officefood.connections.database import Base
from officefood.utils.datetime_helpers import utc_now


def generate_uuid() -> str:
    return str(uuid.uuid4())


class CommonModel(Base):
    """Base model with common fields for all models"""
    __abstract__ = True

    id = Column(String(36), primary_key=True, default=generate_uuid)

    created_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now()
    )

    updated_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
        server_default=func.now()
    )
