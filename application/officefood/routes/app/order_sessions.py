from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from officefood.connections.database import get_db
from officefood.dto.order_sessions import OrderSessionCreate, OrderSessionUpdate
from officefood.middlewares.jwt_auth import get_current_user
from officefood.services.order_session_service import OrderSessionService

app_router = APIRouter(prefix="/orders/sessions", tags=["order-sessions"])


@app_router.get("")
async def list_sessions(
    active: Optional[bool] = Query(None, description="Filter by active flag"),
    user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return OrderSessionService(db).list(user, active)


@app_router.post("", status_code=status.HTTP_201_CREATED)
async def create_session(body: OrderSessionCreate, user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    """Open a new ordering window for the caller's company."""
    return OrderSessionService(db).create(user, body)


@app_router.get("/{session_id}")
async def get_session(session_id: str, user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    return OrderSessionService(db).get(session_id, user)


@app_router.put("/{session_id}")
async def update_session(session_id: str, body: OrderSessionUpdate, user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    return OrderSessionService(db).update(session_id, user, body)


@app_router.delete("/{session_id}")
async def delete_session(session_id: str, user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    """Delete the session together with its orders."""
    return OrderSessionService(db).delete(session_id, user)


@app_router.get("/{session_id}/orders")
async def get_session_orders(session_id: str, user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    return OrderSessionService(db).session_orders(session_id, user)
