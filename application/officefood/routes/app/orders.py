from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from officefood.connections.database import get_db
from officefood.dto.orders import OrderCreate, OrderUpdate
from officefood.middlewares.jwt_auth import get_current_user
from officefood.services.order_service import OrderService

app_router = APIRouter(prefix="/orders", tags=["orders"])


@app_router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(body: OrderCreate, user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    """Place an order against an active session."""
    return OrderService(db).create_order(user, body)


@app_router.get("")
async def list_orders(
    session_id: Optional[str] = Query(None, alias="sessionId", description="Filter by session"),
    order_status: Optional[str] = Query(None, alias="status", description="Filter by status"),
    user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Caller's orders, newest first."""
    return OrderService(db).list_orders(user, session_id, order_status)


@app_router.get("/{order_id}")
async def get_order(order_id: str, user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    return OrderService(db).get_order(order_id, user)


@app_router.put("/{order_id}")
async def update_order(order_id: str, body: OrderUpdate, user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    return OrderService(db).update_order(order_id, user, body)


@app_router.delete("/{order_id}")
async def delete_order(order_id: str, user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    return OrderService(db).delete_order(order_id, user)
