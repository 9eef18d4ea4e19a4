from decimal import Decimal
from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from officefood.core.exceptions import InvalidInput, InvalidState, NotFound
from officefood.core.permissions import is_admin, require_company
from officefood.dto.orders import OrderCreate, OrderUpdate
from officefood.logging.utils import get_app_logger
from officefood.middlewares.request_context import request_context
from officefood.repository.menu import MenuRepository
from officefood.repository.order_sessions import OrderSessionsRepository
from officefood.repository.orders import OrdersRepository

logger = get_app_logger(__name__)

ORDER_NOT_FOUND = "Order not found"


class OrderService:
    """Order placement and order maintenance"""

    def __init__(self, db: Session):
        request_context.module_name = 'order_service'
        self.db = db
        self.orders = OrdersRepository(db)
        self.sessions = OrderSessionsRepository(db)
        self.menu = MenuRepository(db)

    def create_order(self, user: Dict, cmd: OrderCreate) -> Dict:
        """
        Place an order against an active session.

        Every check runs inside the write transaction with the session row
        locked, so the session cannot be deactivated between the check and
        the insert. Any failure rolls back; no partial order is ever stored.

        Raises:
            NotFound: session missing or owned by another company
            InvalidState: session is not active
            InvalidInput: a referenced menu item does not exist
        """
        company_id = require_company(user)
        logger.info(f"order_create_initiated | user_id={user['id']} session_id={cmd.session_id} items={len(cmd.items)}")

        try:
            session = self.sessions.get_session(cmd.session_id, company_id, lock=True)
            if session is None:
                raise NotFound("Order session not found")
            if not session["isActive"]:
                logger.warning(f"order_create_rejected | session_id={cmd.session_id} reason=session_inactive")
                raise InvalidState("Order session is not active")

            requested_ids = {item.menu_item_id for item in cmd.items}
            menu_items = self.menu.get_items_by_ids(requested_ids, company_id)
            if len(menu_items) < len(requested_ids):
                missing = sorted(requested_ids - set(menu_items))
                logger.warning(f"order_create_rejected | session_id={cmd.session_id} reason=menu_items_missing missing={missing}")
                raise InvalidInput("One or more menu items not found")

            lines: List[Dict] = []
            total = Decimal("0")
            for item in cmd.items:
                price = Decimal(menu_items[item.menu_item_id].price)
                total += price * item.quantity
                lines.append({
                    "menu_item_id": item.menu_item_id,
                    "quantity": item.quantity,
                    "price": price,
                    "notes": item.notes,
                })

            order_id = self.orders.create_order(user["id"], cmd.session_id, total, cmd.notes, lines)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        request_context.order_id = order_id
        request_context.session_id = cmd.session_id
        logger.info(f"order_created | order_id={order_id} user_id={user['id']} total_amount={total}")
        return self._public(self.orders.get_order(order_id))

    def list_orders(self, user: Dict, session_id: Optional[str] = None, status: Optional[str] = None) -> List[Dict]:
        return self.orders.list_user_orders(user["id"], session_id=session_id, status=status.upper() if status else None)

    def _visible_order(self, order_id: str, user: Dict) -> Dict:
        """Own orders, or any order in a session of the admin's company."""
        order = self.orders.get_order(order_id)
        if order is None:
            raise NotFound(ORDER_NOT_FOUND)
        if order["userId"] == user["id"]:
            return order
        if is_admin(user) and order["companyId"] == user.get("companyId"):
            return order
        logger.warning(f"order_access_denied | order_id={order_id} user_id={user['id']}")
        raise NotFound(ORDER_NOT_FOUND)

    @staticmethod
    def _public(order: Dict) -> Dict:
        data = dict(order)
        data.pop("companyId", None)
        return data

    def get_order(self, order_id: str, user: Dict) -> Dict:
        return self._public(self._visible_order(order_id, user))

    def update_order(self, order_id: str, user: Dict, cmd: OrderUpdate) -> Dict:
        order = self._visible_order(order_id, user)
        fields = {}
        if cmd.status is not None:
            fields["status"] = cmd.status
        if cmd.notes is not None:
            fields["notes"] = cmd.notes

        self.orders.update_order(order_id, fields)
        self.db.commit()
        request_context.order_id = order_id
        if "status" in fields and fields["status"] != order["status"]:
            logger.info(f"order_status_changed | order_id={order_id} old_status={order['status']} new_status={fields['status']} changed_by={user['id']}")
        logger.info(f"order_updated | order_id={order_id} fields={sorted(fields)}")
        return self._public(self.orders.get_order(order_id))

    def delete_order(self, order_id: str, user: Dict) -> Dict:
        self._visible_order(order_id, user)
        self.orders.delete_order(order_id)
        self.db.commit()
        logger.info(f"order_deleted | order_id={order_id} deleted_by={user['id']}")
        return {"message": "Order deleted successfully"}
