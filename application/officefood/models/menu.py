from sqlalchemy import Column, String, Text, Boolean, DECIMAL, ForeignKey, Index
from sqlalchemy.orm import relationship
from officefood.models.common import CommonModel


class MenuItem(CommonModel):
    __tablename__ = "menu_items"

    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(DECIMAL(10, 2), nullable=False)
    category = Column(String(50), nullable=False)
    image_url = Column(String(1024), nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)

    company = relationship("Company", back_populates="menu_items")

    __table_args__ = (
        Index('idx_menu_items_company_category', 'company_id', 'category'),
    )

    def __repr__(self):
        return f"<MenuItem(id={self.id}, name='{self.name}', price={self.price})>"
