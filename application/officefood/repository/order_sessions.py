"""
Order Sessions Repository
"""

from typing import Dict, List, Optional
from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload
from officefood.models.orders import Order, OrderSession
from officefood.repository.users import user_summary
from officefood.utils.datetime_helpers import to_iso
from officefood.logging.utils import get_app_logger

logger = get_app_logger("officefood.order_sessions_repository")


def serialize_session(session: OrderSession) -> Dict:
    return {
        "id": session.id,
        "title": session.title,
        "description": session.description,
        "startTime": to_iso(session.start_time),
        "endTime": to_iso(session.end_time),
        "isActive": session.is_active,
        "companyId": session.company_id,
        "createdById": session.created_by_id,
        "createdAt": to_iso(session.created_at),
        "updatedAt": to_iso(session.updated_at),
    }


class OrderSessionsRepository:
    def __init__(self, db: Session):
        self.db = db

    def _get(self, session_id: str, company_id: str, lock: bool = False) -> Optional[OrderSession]:
        query = select(OrderSession).where(OrderSession.id == session_id, OrderSession.company_id == company_id)
        if lock:
            query = query.with_for_update()
        return self.db.execute(query).scalar_one_or_none()

    def _order_counts(self, session_ids: List[str]) -> Dict[str, int]:
        if not session_ids:
            return {}
        rows = self.db.execute(
            select(Order.session_id, func.count(Order.id))
            .where(Order.session_id.in_(session_ids))
            .group_by(Order.session_id)
        ).all()
        return {session_id: count for session_id, count in rows}

    def list_sessions(self, company_id: str, active: Optional[bool] = None) -> List[Dict]:
        query = (
            select(OrderSession)
            .options(selectinload(OrderSession.created_by))
            .where(OrderSession.company_id == company_id)
        )
        if active is not None:
            query = query.where(OrderSession.is_active.is_(active))
        sessions = list(self.db.execute(query.order_by(OrderSession.created_at.desc())).scalars())
        counts = self._order_counts([s.id for s in sessions])

        result = []
        for session in sessions:
            data = serialize_session(session)
            data["createdBy"] = user_summary(session.created_by)
            data["orderCount"] = counts.get(session.id, 0)
            result.append(data)
        return result

    def get_session(self, session_id: str, company_id: str, lock: bool = False) -> Optional[Dict]:
        """Fetch a session; lock=True takes a row lock (SELECT ... FOR UPDATE) until commit."""
        session = self._get(session_id, company_id, lock=lock)
        if session is None:
            return None
        data = serialize_session(session)
        data["createdBy"] = user_summary(session.created_by)
        data["orderCount"] = self._order_counts([session.id]).get(session.id, 0)
        return data

    def create(self, company_id: str, created_by_id: str, fields: Dict) -> Dict:
        session = OrderSession(company_id=company_id, created_by_id=created_by_id, is_active=True, **fields)
        self.db.add(session)
        self.db.flush()
        return serialize_session(session)

    def update(self, session_id: str, company_id: str, fields: Dict) -> Optional[Dict]:
        session = self._get(session_id, company_id)
        if session is None:
            return None
        for key, value in fields.items():
            setattr(session, key, value)
        self.db.flush()
        return serialize_session(session)

    def delete(self, session_id: str, company_id: str) -> bool:
        session = self._get(session_id, company_id)
        if session is None:
            return False
        self.db.delete(session)
        self.db.flush()
        return True
