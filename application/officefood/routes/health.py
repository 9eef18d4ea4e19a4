import time
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from officefood.config.settings import OfficeFoodConfigs
from officefood.utils.datetime_helpers import to_iso, utc_now

configs = OfficeFoodConfigs()
router = APIRouter()

STARTED_AT = time.monotonic()


@router.get("/")
async def root():
    return JSONResponse(content={
        "message": "OfficeFood API is running!",
        "timestamp": to_iso(utc_now()),
        "version": configs.APP_VERSION,
    })


@router.get("/health")
async def health_check():
    details = {
        "status": "healthy",
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "timestamp": to_iso(utc_now()),
        "service": configs.APP_NAME,
    }
    return JSONResponse(content=details)
