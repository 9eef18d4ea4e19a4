"""
Users Repository

Lookups and writes for user accounts and their company.
"""

from typing import Dict, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload
from officefood.core.constants import UserRole
from officefood.models.company import Company
from officefood.models.users import User
from officefood.utils.datetime_helpers import to_iso
from officefood.logging.utils import get_app_logger

logger = get_app_logger("officefood.users_repository")


def serialize_user(user: User) -> Dict:
    return {
        "id": user.id,
        "phone": user.phone,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "companyId": user.company_id,
        "isActive": user.is_active,
        "createdAt": to_iso(user.created_at),
        "updatedAt": to_iso(user.updated_at),
    }


def serialize_company(company: Optional[Company]) -> Optional[Dict]:
    if company is None:
        return None
    return {"id": company.id, "name": company.name, "description": company.description}


def user_summary(user: Optional[User]) -> Optional[Dict]:
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "phone": user.phone}


class UsersRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str, include_company: bool = False) -> Optional[Dict]:
        query = select(User).where(User.id == user_id)
        if include_company:
            query = query.options(joinedload(User.company))
        user = self.db.execute(query).scalar_one_or_none()
        if user is None:
            return None
        data = serialize_user(user)
        if include_company:
            data["company"] = serialize_company(user.company)
        return data

    def get_by_phone(self, phone: str) -> Optional[Dict]:
        user = self.db.execute(select(User).where(User.phone == phone)).scalar_one_or_none()
        return serialize_user(user) if user else None

    def create(self, phone: str, role: str = UserRole.USER, company_id: Optional[str] = None) -> Dict:
        user = User(phone=phone, name=None, email=None, role=role, company_id=company_id, is_active=True)
        self.db.add(user)
        self.db.flush()
        logger.info(f"user_created | user_id={user.id} role={user.role}")
        return serialize_user(user)

    def update(self, user_id: str, fields: Dict) -> Optional[Dict]:
        user = self.db.get(User, user_id)
        if user is None:
            return None
        for key, value in fields.items():
            setattr(user, key, value)
        self.db.flush()
        return serialize_user(user)
