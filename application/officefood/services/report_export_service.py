"""
Billing report export

Renders the JSON billing reports as PDF (ReportLab) or XLSX (pandas + openpyxl).
"""

from dataclasses import dataclass
from xml.sax.saxutils import escape
from io import BytesIO
from typing import Dict, List, Optional

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from sqlalchemy.orm import Session

from officefood.config.settings import OfficeFoodConfigs
from officefood.core.constants import ExportFormat
from officefood.core.exceptions import InvalidInput
from officefood.logging.utils import get_app_logger
from officefood.middlewares.request_context import request_context
from officefood.services.billing_service import BillingService

logger = get_app_logger(__name__)
configs = OfficeFoodConfigs()

HEADER_COLOR = colors.HexColor("#1f2937")
BORDER_COLOR = colors.HexColor("#e5e7eb")
ORDER_COLUMNS = ["Order ID", "Date", "Employee", "Phone", "Session", "Items", "Status", "Amount"]


@dataclass
class ExportedReport:
    content: bytes
    content_type: str
    filename: str


def _normalize_format(fmt: Optional[str]) -> str:
    value = (fmt or ExportFormat.PDF).lower()
    if value not in ExportFormat.EXTENSIONS:
        raise InvalidInput("Invalid format. Use 'pdf' or 'excel'")
    return value


def _order_rows(orders: List[Dict]) -> List[List]:
    rows = []
    for order in orders:
        user = order.get("user") or {}
        session = order.get("session") or {}
        items = ", ".join(
            f"{line['menuItem']['name'] if line.get('menuItem') else 'Item'} x{line['quantity']}"
            for line in order["orderItems"]
        )
        rows.append([
            order["id"],
            order["createdAt"][:10],
            user.get("name") or "",
            user.get("phone") or "",
            session.get("title") or "",
            items,
            order["status"],
            order["totalAmount"],
        ])
    return rows


def _summary_rows(summary: Dict) -> List[List]:
    symbol = configs.CURRENCY_SYMBOL
    return [
        ["Total Amount", f"{symbol}{summary['totalAmount']:.2f}"],
        ["Total Orders", summary["totalOrders"]],
        ["Unique Users", summary["uniqueUsers"]],
        ["Average Order Value", f"{symbol}{summary['averageOrderValue']:.2f}"],
    ]


def render_excel(report: Dict, period_label: str) -> bytes:
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        summary = pd.DataFrame(
            [["Report", configs.REPORT_TITLE], ["Period", period_label]] + _summary_rows(report["summary"]),
            columns=["Metric", "Value"],
        )
        summary.to_excel(writer, sheet_name="Summary", index=False)
        if "dailyStats" in report:
            daily = pd.DataFrame(report["dailyStats"], columns=["date", "totalAmount", "totalOrders", "uniqueUsers"])
            daily.columns = ["Date", "Total Amount", "Total Orders", "Unique Users"]
            daily.to_excel(writer, sheet_name="Daily", index=False)
        orders = pd.DataFrame(_order_rows(report["orders"]), columns=ORDER_COLUMNS)
        orders.to_excel(writer, sheet_name="Orders", index=False)
    return buffer.getvalue()


def _table(data: List[List], col_widths=None) -> Table:
    table = Table(data, colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_COLOR),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("GRID", (0, 0), (-1, -1), 0.5, BORDER_COLOR),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]))
    return table


def render_pdf(report: Dict, period_label: str) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, leftMargin=15*mm, rightMargin=15*mm, topMargin=15*mm, bottomMargin=15*mm)
    styles = getSampleStyleSheet()

    story = [
        Paragraph(escape(configs.REPORT_TITLE), styles["Title"]),
        Paragraph(f"Period: {period_label}", styles["Normal"]),
        Spacer(1, 6*mm),
        Paragraph("Summary", styles["Heading2"]),
        _table([["Metric", "Value"]] + _summary_rows(report["summary"]), col_widths=[60*mm, 60*mm]),
    ]

    if report.get("dailyStats"):
        daily = [["Date", "Total Amount", "Orders", "Users"]] + [
            [row["date"], f"{row['totalAmount']:.2f}", row["totalOrders"], row["uniqueUsers"]]
            for row in report["dailyStats"]
        ]
        story += [Spacer(1, 6*mm), Paragraph("Daily Breakdown", styles["Heading2"]), _table(daily)]

    orders = [["Date", "Employee", "Session", "Items", "Status", "Amount"]]
    cell = ParagraphStyle("ReportCell", parent=styles["BodyText"], fontSize=7, leading=9)
    for row in _order_rows(report["orders"]):
        _, day, name, phone, session, items, status, amount = row
        orders.append([day, name or phone, Paragraph(escape(session), cell), Paragraph(escape(items), cell), status, f"{amount:.2f}"])
    story += [
        Spacer(1, 6*mm),
        Paragraph("Orders", styles["Heading2"]),
        _table(orders, col_widths=[20*mm, 30*mm, 35*mm, 60*mm, 20*mm, 18*mm]),
    ]

    doc.build(story)
    return buffer.getvalue()


class ReportExportService:
    def __init__(self, db: Session):
        request_context.module_name = 'report_export_service'
        self.billing = BillingService(db)

    def _render(self, report: Dict, fmt: str, period_label: str, basename: str) -> ExportedReport:
        if fmt == ExportFormat.EXCEL:
            content = render_excel(report, period_label)
        else:
            content = render_pdf(report, period_label)
        filename = f"{basename}.{ExportFormat.EXTENSIONS[fmt]}"
        logger.info(f"report_exported | filename={filename} format={fmt} size_in_bytes={len(content)}")
        return ExportedReport(content=content, content_type=ExportFormat.CONTENT_TYPES[fmt], filename=filename)

    def export_weekly(self, user: Dict, start_date: str, end_date: Optional[str] = None, fmt: Optional[str] = None) -> ExportedReport:
        fmt = _normalize_format(fmt)
        report = self.billing.weekly_report(user, start_date, end_date)
        period = report["period"]
        basename = f"weekly-report-{start_date}" + (f"-{end_date}" if end_date else "")
        return self._render(report, fmt, f"{period['startDate']} to {period['endDate']}", basename)

    def export_monthly(self, user: Dict, year: int, month: int, fmt: Optional[str] = None) -> ExportedReport:
        fmt = _normalize_format(fmt)
        report = self.billing.monthly_report(user, year, month)
        period = report["period"]
        basename = f"monthly-report-{year}-{month:02d}"
        return self._render(report, fmt, f"{period['monthName']} {year}", basename)
