from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from officefood.connections.database import get_db
from officefood.dto.users import UserProfileUpdate
from officefood.middlewares.jwt_auth import get_current_user
from officefood.services.user_service import UserService

app_router = APIRouter(prefix="/users", tags=["users"])


@app_router.get("/profile")
async def get_profile(user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    """Current user with their company."""
    return UserService(db).get_profile(user["id"])


@app_router.put("/profile")
async def update_profile(body: UserProfileUpdate, user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    return UserService(db).update_profile(user["id"], body)


@app_router.get("/{user_id}")
async def get_user(user_id: str, user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    return UserService(db).get_user(user_id, user)
