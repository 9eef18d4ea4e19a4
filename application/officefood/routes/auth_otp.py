from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from officefood.connections.database import get_db
from officefood.dto.auth_otp import RefreshTokenRequest, SendOTPRequest, VerifyOTPRequest
from officefood.middlewares.jwt_auth import get_current_user
from officefood.services.auth_service import AuthService
from officefood.logging.utils import get_app_logger

logger = get_app_logger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/send-otp")
async def send_otp(request: SendOTPRequest, db: Session = Depends(get_db)):
    """Issue a one-time code for the phone; the code is echoed back outside production."""
    logger.info(f"otp_requested | phone={request.phone}")
    return AuthService(db).send_otp(request.phone)


@router.post("/verify-otp")
async def verify_otp(request: VerifyOTPRequest, db: Session = Depends(get_db)):
    """Exchange phone + code for access and refresh tokens."""
    return AuthService(db).verify_otp(request.phone, request.code)


@router.post("/refresh")
async def refresh(request: RefreshTokenRequest, db: Session = Depends(get_db)):
    return AuthService(db).refresh(request.refresh_token)


@router.post("/logout")
async def logout(user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    return AuthService(db).logout(user["id"])
