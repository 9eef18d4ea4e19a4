"""
SQLAlchemy ORM models for order sessions, orders and their line items.
"""

from sqlalchemy import Column, Integer, String, Text, Boolean, DECIMAL, TIMESTAMP, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship
from officefood.core.constants import OrderStatus
from officefood.models.common import CommonModel


class OrderSession(CommonModel):
    """
    Time window opened by an administrator. `is_active` is toggled by hand;
    start/end times are informational and do not gate ordering.
    """
    __tablename__ = "order_sessions"

    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    start_time = Column(TIMESTAMP(timezone=True), nullable=False)
    end_time = Column(TIMESTAMP(timezone=True), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by_id = Column(String(36), ForeignKey("users.id"), nullable=False)

    company = relationship("Company", back_populates="order_sessions")
    created_by = relationship("User")
    orders = relationship("Order", back_populates="session", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<OrderSession(id={self.id}, title='{self.title}', is_active={self.is_active})>"


class Order(CommonModel):
    __tablename__ = "orders"

    status = Column(String(20), nullable=False, default=OrderStatus.PENDING, index=True)
    total_amount = Column(DECIMAL(10, 2), nullable=False)
    notes = Column(Text, nullable=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    session_id = Column(String(36), ForeignKey("order_sessions.id", ondelete="CASCADE"), nullable=False, index=True)

    user = relationship("User", back_populates="orders")
    session = relationship("OrderSession", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index('idx_orders_session_created', 'session_id', 'created_at'),
        Index('idx_orders_user_created', 'user_id', 'created_at'),
    )

    def __repr__(self):
        return f"<Order(id={self.id}, status='{self.status}', total_amount={self.total_amount})>"


class OrderItem(CommonModel):
    """Order line; `price` is the menu price captured when the order was placed"""
    __tablename__ = "order_items"

    quantity = Column(Integer, nullable=False)
    price = Column(DECIMAL(10, 2), nullable=False)
    notes = Column(Text, nullable=True)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    menu_item_id = Column(String(36), ForeignKey("menu_items.id"), nullable=False, index=True)

    order = relationship("Order", back_populates="items")
    menu_item = relationship("MenuItem")

    __table_args__ = (
        CheckConstraint('quantity >= 1', name='ck_order_items_quantity_positive'),
    )

    def __repr__(self):
        return f"<OrderItem(id={self.id}, order_id='{self.order_id}', quantity={self.quantity}, price={self.price})>"
