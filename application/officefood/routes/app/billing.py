from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session
from officefood.connections.database import get_read_db
from officefood.middlewares.jwt_auth import get_current_user
from officefood.services.billing_service import BillingService
from officefood.services.report_export_service import ExportedReport, ReportExportService

app_router = APIRouter(prefix="/billing", tags=["billing"])


def _attachment(report: ExportedReport) -> Response:
    return Response(
        content=report.content,
        media_type=report.content_type,
        headers={
            "Content-Disposition": f'attachment; filename="{report.filename}"',
            "Content-Length": str(len(report.content)),
        },
    )


@app_router.get("/summary")
async def billing_summary(user: dict = Depends(get_current_user), db: Session = Depends(get_read_db)):
    """Current vs previous month totals with growth."""
    return BillingService(db).month_over_month(user)


@app_router.get("/reports/weekly")
async def weekly_report(
    start_date: str = Query(..., alias="startDate", description="YYYY-MM-DD"),
    end_date: Optional[str] = Query(None, alias="endDate", description="YYYY-MM-DD, inclusive"),
    user: dict = Depends(get_current_user),
    db: Session = Depends(get_read_db),
):
    return BillingService(db).weekly_report(user, start_date, end_date)


@app_router.get("/reports/monthly")
async def monthly_report(
    year: int = Query(...),
    month: int = Query(...),
    user: dict = Depends(get_current_user),
    db: Session = Depends(get_read_db),
):
    return BillingService(db).monthly_report(user, year, month)


@app_router.get("/export/weekly")
async def export_weekly(
    start_date: str = Query(..., alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    fmt: str = Query("pdf", alias="format", description="pdf or excel"),
    user: dict = Depends(get_current_user),
    db: Session = Depends(get_read_db),
):
    return _attachment(ReportExportService(db).export_weekly(user, start_date, end_date, fmt))


@app_router.get("/export/monthly")
async def export_monthly(
    year: int = Query(...),
    month: int = Query(...),
    fmt: str = Query("pdf", alias="format", description="pdf or excel"),
    user: dict = Depends(get_current_user),
    db: Session = Depends(get_read_db),
):
    return _attachment(ReportExportService(db).export_monthly(user, year, month, fmt))
