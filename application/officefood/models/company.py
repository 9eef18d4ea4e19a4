from sqlalchemy import Column, String, Text
from sqlalchemy.orm import relationship
from officefood.models.common import CommonModel


class Company(CommonModel):
    __tablename__ = "companies"

    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)

    users = relationship("User", back_populates="company")
    menu_items = relationship("MenuItem", back_populates="company")
    order_sessions = relationship("OrderSession", back_populates="company")

    def __repr__(self):
        return f"<Company(id={self.id}, name='{self.name}')>"
