"""
Menu Repository

Company-scoped menu item queries.
"""

from typing import Dict, Iterable, List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session
from officefood.models.menu import MenuItem
from officefood.utils.datetime_helpers import to_iso
from officefood.logging.utils import get_app_logger

logger = get_app_logger("officefood.menu_repository")


def menu_item_summary(item: MenuItem) -> Dict:
    return {
        "id": item.id,
        "name": item.name,
        "description": item.description,
        "category": item.category,
        "imageUrl": item.image_url,
    }


def serialize_menu_item(item: MenuItem) -> Dict:
    data = menu_item_summary(item)
    data.update({
        "price": float(item.price),
        "isAvailable": item.is_available,
        "companyId": item.company_id,
        "createdAt": to_iso(item.created_at),
        "updatedAt": to_iso(item.updated_at),
    })
    return data


class MenuRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_items(self, company_id: str, category: Optional[str] = None, available: Optional[bool] = None) -> List[Dict]:
        query = select(MenuItem).where(MenuItem.company_id == company_id)
        if category:
            query = query.where(MenuItem.category == category)
        if available is not None:
            query = query.where(MenuItem.is_available.is_(available))
        query = query.order_by(MenuItem.category.asc(), MenuItem.name.asc())
        return [serialize_menu_item(item) for item in self.db.execute(query).scalars()]

    def list_categories(self, company_id: str) -> List[str]:
        rows = self.db.execute(
            select(MenuItem.category)
            .where(MenuItem.company_id == company_id)
            .distinct()
            .order_by(MenuItem.category.asc())
        ).scalars()
        return list(rows)

    def _get(self, item_id: str, company_id: str) -> Optional[MenuItem]:
        return self.db.execute(
            select(MenuItem).where(MenuItem.id == item_id, MenuItem.company_id == company_id)
        ).scalar_one_or_none()

    def get_item(self, item_id: str, company_id: str) -> Optional[Dict]:
        item = self._get(item_id, company_id)
        return serialize_menu_item(item) if item else None

    def get_items_by_ids(self, item_ids: Iterable[str], company_id: str) -> Dict[str, MenuItem]:
        """One batch lookup; returns ORM rows keyed by id so prices stay Decimal."""
        ids = list(item_ids)
        if not ids:
            return {}
        rows = self.db.execute(
            select(MenuItem).where(MenuItem.id.in_(ids), MenuItem.company_id == company_id)
        ).scalars()
        return {item.id: item for item in rows}

    def create(self, company_id: str, fields: Dict) -> Dict:
        item = MenuItem(company_id=company_id, **fields)
        self.db.add(item)
        self.db.flush()
        return serialize_menu_item(item)

    def update(self, item_id: str, company_id: str, fields: Dict) -> Optional[Dict]:
        item = self._get(item_id, company_id)
        if item is None:
            return None
        for key, value in fields.items():
            setattr(item, key, value)
        self.db.flush()
        return serialize_menu_item(item)

    def delete(self, item_id: str, company_id: str) -> bool:
        item = self._get(item_id, company_id)
        if item is None:
            return False
        self.db.delete(item)
        self.db.flush()
        return True
