from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from officefood.core.exceptions import InvalidInput, NotFound
from officefood.core.permissions import require_company
from officefood.dto.order_sessions import OrderSessionCreate, OrderSessionUpdate
from officefood.logging.utils import get_app_logger
from officefood.middlewares.request_context import request_context
from officefood.repository.order_sessions import OrderSessionsRepository
from officefood.repository.orders import OrdersRepository
from officefood.utils.datetime_helpers import as_utc, parse_iso

logger = get_app_logger(__name__)

SESSION_NOT_FOUND = "Order session not found"


class OrderSessionService:
    """Company-scoped order session lifecycle"""

    def __init__(self, db: Session):
        request_context.module_name = 'order_session_service'
        self.db = db
        self.sessions = OrderSessionsRepository(db)
        self.orders = OrdersRepository(db)

    def list(self, user: Dict, active: Optional[bool] = None) -> List[Dict]:
        company_id = require_company(user)
        return self.sessions.list_sessions(company_id, active)

    def get(self, session_id: str, user: Dict) -> Dict:
        company_id = require_company(user)
        session = self.sessions.get_session(session_id, company_id)
        if session is None:
            raise NotFound(SESSION_NOT_FOUND)
        return session

    def create(self, user: Dict, cmd: OrderSessionCreate) -> Dict:
        company_id = require_company(user)
        if self._precedes(cmd.end_time, cmd.start_time):
            raise InvalidInput("endTime must not be before startTime")
        session = self.sessions.create(company_id, user["id"], {
            "title": cmd.title,
            "description": cmd.description,
            "start_time": as_utc(cmd.start_time),
            "end_time": as_utc(cmd.end_time),
        })
        self.db.commit()
        request_context.session_id = session["id"]
        logger.info(f"order_session_created | session_id={session['id']} company_id={company_id} created_by={user['id']}")
        return self.get(session["id"], user)

    def update(self, session_id: str, user: Dict, cmd: OrderSessionUpdate) -> Dict:
        company_id = require_company(user)
        current = self.get(session_id, user)

        fields = {}
        if cmd.title is not None:
            fields["title"] = cmd.title
        if cmd.description is not None:
            fields["description"] = cmd.description
        if cmd.start_time is not None:
            fields["start_time"] = as_utc(cmd.start_time)
        if cmd.end_time is not None:
            fields["end_time"] = as_utc(cmd.end_time)
        if cmd.is_active is not None:
            fields["is_active"] = cmd.is_active

        start = fields.get("start_time") or current["startTime"]
        end = fields.get("end_time") or current["endTime"]
        if ("start_time" in fields or "end_time" in fields) and self._precedes(end, start):
            raise InvalidInput("endTime must not be before startTime")

        self.sessions.update(session_id, company_id, fields)
        self.db.commit()
        request_context.session_id = session_id
        logger.info(f"order_session_updated | session_id={session_id} fields={sorted(fields)}")
        return self.get(session_id, user)

    @staticmethod
    def _precedes(end, start) -> bool:
        end = parse_iso(end) if isinstance(end, str) else as_utc(end)
        start = parse_iso(start) if isinstance(start, str) else as_utc(start)
        return end < start

    def delete(self, session_id: str, user: Dict) -> Dict:
        company_id = require_company(user)
        if not self.sessions.delete(session_id, company_id):
            raise NotFound(SESSION_NOT_FOUND)
        self.db.commit()
        logger.info(f"order_session_deleted | session_id={session_id} company_id={company_id}")
        return {"message": "Order session deleted successfully"}

    def session_orders(self, session_id: str, user: Dict) -> Dict:
        session = self.get(session_id, user)
        orders = self.orders.list_session_orders(session_id)
        return {"session": session, "orders": orders}
