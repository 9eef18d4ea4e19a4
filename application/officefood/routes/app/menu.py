from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from officefood.connections.database import get_db
from officefood.dto.menu import MenuItemCreate, MenuItemUpdate
from officefood.middlewares.jwt_auth import get_current_user
from officefood.services.menu_service import MenuService

app_router = APIRouter(prefix="/menu", tags=["menu"])


@app_router.get("")
async def list_menu(
    category: Optional[str] = Query(None, description="Filter by category"),
    available: Optional[bool] = Query(None, description="Filter by availability"),
    user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Company menu ordered by category, then name."""
    return MenuService(db).list(user, category, available)


@app_router.get("/categories/list")
async def list_categories(user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    return MenuService(db).categories(user)


@app_router.get("/{item_id}")
async def get_menu_item(item_id: str, user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    return MenuService(db).get(item_id, user)


@app_router.post("", status_code=status.HTTP_201_CREATED)
async def create_menu_item(body: MenuItemCreate, user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    return MenuService(db).create(user, body)


@app_router.put("/{item_id}")
async def update_menu_item(item_id: str, body: MenuItemUpdate, user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    return MenuService(db).update(item_id, user, body)


@app_router.delete("/{item_id}")
async def delete_menu_item(item_id: str, user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    return MenuService(db).delete(item_id, user)
