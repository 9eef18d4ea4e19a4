from sqlalchemy import Column, String, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from officefood.core.constants import UserRole
from officefood.models.common import CommonModel


class User(CommonModel):
    """Employee account, created on first successful OTP login"""
    __tablename__ = "users"

    phone = Column(String(20), nullable=False, unique=True, index=True)
    name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True)
    role = Column(String(10), nullable=False, default=UserRole.USER, server_default=UserRole.USER)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="SET NULL"), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    company = relationship("Company", back_populates="users")
    orders = relationship("Order", back_populates="user")

    def __repr__(self):
        return f"<User(id={self.id}, phone='{self.phone}', role='{self.role}')>"
