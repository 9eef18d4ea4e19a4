from typing import Dict, List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from officefood.core.exceptions import InvalidState, NotFound
from officefood.core.permissions import require_company
from officefood.dto.menu import MenuItemCreate, MenuItemUpdate
from officefood.logging.utils import get_app_logger
from officefood.middlewares.request_context import request_context
from officefood.repository.menu import MenuRepository

logger = get_app_logger(__name__)

MENU_ITEM_NOT_FOUND = "Menu item not found"

# dto field -> model column
FIELD_MAP = {
    "name": "name",
    "description": "description",
    "price": "price",
    "category": "category",
    "image_url": "image_url",
    "is_available": "is_available",
}


def _columns(cmd, exclude_unset: bool) -> Dict:
    data = cmd.model_dump(exclude_unset=exclude_unset)
    fields = {FIELD_MAP[key]: value for key, value in data.items() if key in FIELD_MAP}
    if fields.get("image_url") is not None:
        fields["image_url"] = str(fields["image_url"])
    return fields


class MenuService:
    def __init__(self, db: Session):
        request_context.module_name = 'menu_service'
        self.db = db
        self.menu = MenuRepository(db)

    def list(self, user: Dict, category: Optional[str] = None, available: Optional[bool] = None) -> List[Dict]:
        return self.menu.list_items(require_company(user), category, available)

    def categories(self, user: Dict) -> List[str]:
        return self.menu.list_categories(require_company(user))

    def get(self, item_id: str, user: Dict) -> Dict:
        item = self.menu.get_item(item_id, require_company(user))
        if item is None:
            raise NotFound(MENU_ITEM_NOT_FOUND)
        return item

    def create(self, user: Dict, cmd: MenuItemCreate) -> Dict:
        company_id = require_company(user)
        item = self.menu.create(company_id, _columns(cmd, exclude_unset=False))
        self.db.commit()
        logger.info(f"menu_item_created | item_id={item['id']} company_id={company_id} price={item['price']}")
        return item

    def update(self, item_id: str, user: Dict, cmd: MenuItemUpdate) -> Dict:
        company_id = require_company(user)
        fields = _columns(cmd, exclude_unset=True)
        item = self.menu.update(item_id, company_id, fields)
        if item is None:
            raise NotFound(MENU_ITEM_NOT_FOUND)
        self.db.commit()
        logger.info(f"menu_item_updated | item_id={item_id} fields={sorted(fields)}")
        return item

    def delete(self, item_id: str, user: Dict) -> Dict:
        company_id = require_company(user)
        try:
            deleted = self.menu.delete(item_id, company_id)
            if not deleted:
                raise NotFound(MENU_ITEM_NOT_FOUND)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"menu_item_delete_rejected | item_id={item_id} reason=referenced_by_orders")
            raise InvalidState("Menu item is referenced by existing orders")
        logger.info(f"menu_item_deleted | item_id={item_id} company_id={company_id}")
        return {"message": "Menu item deleted successfully"}
