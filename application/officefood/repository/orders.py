"""
Orders Repository

Order and order item reads/writes. Includes are explicit flags rather than
implicit relationship loading.
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload
from officefood.core.constants import OrderStatus
from officefood.models.orders import Order, OrderItem, OrderSession
from officefood.repository.menu import menu_item_summary
from officefood.repository.users import user_summary
from officefood.utils.datetime_helpers import to_iso
from officefood.logging.utils import get_app_logger

logger = get_app_logger("officefood.orders_repository")


def session_summary(session: OrderSession) -> Dict:
    return {
        "id": session.id,
        "title": session.title,
        "startTime": to_iso(session.start_time),
        "endTime": to_iso(session.end_time),
    }


def serialize_order_item(item: OrderItem) -> Dict:
    return {
        "id": item.id,
        "quantity": item.quantity,
        "price": float(item.price),
        "notes": item.notes,
        "menuItem": menu_item_summary(item.menu_item) if item.menu_item else None,
    }


def serialize_order(order: Order, include_session: bool = True, include_user: bool = False) -> Dict:
    data = {
        "id": order.id,
        "status": order.status,
        "totalAmount": float(order.total_amount),
        "notes": order.notes,
        "userId": order.user_id,
        "sessionId": order.session_id,
        "createdAt": to_iso(order.created_at),
        "updatedAt": to_iso(order.updated_at),
        "orderItems": [serialize_order_item(item) for item in order.items],
    }
    if include_session:
        data["session"] = session_summary(order.session)
    if include_user:
        data["user"] = user_summary(order.user)
    return data


def _order_query():
    return select(Order).options(
        selectinload(Order.items).selectinload(OrderItem.menu_item),
        selectinload(Order.session),
        selectinload(Order.user),
    )


class OrdersRepository:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, user_id: str, session_id: str, total_amount: Decimal,
                     notes: Optional[str], lines: List[Dict]) -> str:
        """
        Insert the order and its lines in the caller's transaction.

        Args:
            lines: dicts with menu_item_id, quantity, price (snapshot) and notes

        Returns:
            id of the new order
        """
        order = Order(
            user_id=user_id,
            session_id=session_id,
            status=OrderStatus.PENDING,
            total_amount=total_amount,
            notes=notes,
        )
        order.items = [
            OrderItem(
                menu_item_id=line["menu_item_id"],
                quantity=line["quantity"],
                price=line["price"],
                notes=line.get("notes"),
            )
            for line in lines
        ]
        self.db.add(order)
        self.db.flush()
        logger.info(f"order_rows_created | order_id={order.id} items={len(lines)}")
        return order.id

    def get_order(self, order_id: str) -> Optional[Dict]:
        order = self.db.execute(_order_query().where(Order.id == order_id)).scalar_one_or_none()
        if order is None:
            return None
        data = serialize_order(order, include_user=True)
        data["companyId"] = order.session.company_id
        return data

    def list_user_orders(self, user_id: str, session_id: Optional[str] = None, status: Optional[str] = None) -> List[Dict]:
        query = _order_query().where(Order.user_id == user_id)
        if session_id:
            query = query.where(Order.session_id == session_id)
        if status:
            query = query.where(Order.status == status)
        query = query.order_by(Order.created_at.desc())
        return [serialize_order(order) for order in self.db.execute(query).scalars()]

    def list_session_orders(self, session_id: str) -> List[Dict]:
        query = _order_query().where(Order.session_id == session_id).order_by(Order.created_at.asc())
        return [serialize_order(order, include_session=False, include_user=True) for order in self.db.execute(query).scalars()]

    def list_company_orders(self, company_id: str, start: datetime, end: datetime) -> List[Dict]:
        """Orders whose session belongs to the company, created in [start, end)."""
        query = (
            _order_query()
            .join(Order.session)
            .where(
                OrderSession.company_id == company_id,
                Order.created_at >= start,
                Order.created_at < end,
            )
            .order_by(Order.created_at.desc())
        )
        return [serialize_order(order, include_user=True) for order in self.db.execute(query).scalars()]

    def update_order(self, order_id: str, fields: Dict) -> None:
        order = self.db.get(Order, order_id)
        for key, value in fields.items():
            setattr(order, key, value)
        self.db.flush()

    def delete_order(self, order_id: str) -> None:
        order = self.db.get(Order, order_id)
        self.db.delete(order)
        self.db.flush()
