from datetime import datetime, timezone
from io import BytesIO

import pandas as pd
import pytest

from conftest import API, auth_headers
from officefood.core.exceptions import InvalidInput
from officefood.repository.users import serialize_user
from officefood.services.report_export_service import ReportExportService, render_excel, render_pdf
from officefood.services.token_service import build_claims

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _claims(user):
    return build_claims(serialize_user(user))


@pytest.fixture
def billed_office(factory, office):
    factory.order(office["employee"], office["session"], [(office["pizza"], 2), (office["salad"], 1)],
                  created_at=datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc))
    factory.order(office["admin"], office["session"], [(office["salad"], 1)],
                  created_at=datetime(2024, 1, 16, 12, 30, tzinfo=timezone.utc))
    return office


class TestRenderers:
    def test_pdf_for_empty_report(self):
        report = {
            "summary": {"totalAmount": 0.0, "totalOrders": 0, "uniqueUsers": 0, "averageOrderValue": 0.0},
            "dailyStats": [],
            "orders": [],
        }
        assert render_pdf(report, "June 2023").startswith(b"%PDF")

    def test_excel_sheets(self, db, billed_office):
        report = ReportExportService(db).billing.monthly_report(_claims(billed_office["admin"]), 2024, 1)
        content = render_excel(report, "January 2024")
        assert content.startswith(b"PK")

        sheets = pd.read_excel(BytesIO(content), sheet_name=None)
        assert set(sheets) == {"Summary", "Daily", "Orders"}
        orders = sheets["Orders"]
        assert len(orders) == 2
        assert sorted(orders["Amount"].tolist()) == [8.5, 40.48]
        assert "Pizza x2" in orders.loc[orders["Amount"] == 40.48, "Items"].iloc[0]
        assert sheets["Daily"]["Date"].tolist() == ["2024-01-15", "2024-01-16"]

    def test_pdf_escapes_markup_in_names(self, db, factory, office):
        office["session"].title = "Fish & <Chips>"
        factory.db.commit()
        factory.order(office["employee"], office["session"], [(office["pizza"], 1)],
                      created_at=datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc))
        exported = ReportExportService(db).export_monthly(_claims(office["admin"]), 2024, 1, "pdf")
        assert exported.content.startswith(b"%PDF")


class TestExportService:
    def test_weekly_filename_with_end_date(self, db, billed_office):
        exported = ReportExportService(db).export_weekly(_claims(billed_office["admin"]), "2024-01-15", "2024-01-21", "excel")
        assert exported.filename == "weekly-report-2024-01-15-2024-01-21.xlsx"
        assert exported.content_type == XLSX

    def test_weekly_filename_without_end_date(self, db, billed_office):
        exported = ReportExportService(db).export_weekly(_claims(billed_office["admin"]), "2024-01-15")
        assert exported.filename == "weekly-report-2024-01-15.pdf"
        assert exported.content_type == "application/pdf"

    def test_monthly_filename_is_zero_padded(self, db, billed_office):
        exported = ReportExportService(db).export_monthly(_claims(billed_office["admin"]), 2024, 1, "EXCEL")
        assert exported.filename == "monthly-report-2024-01.xlsx"

    def test_unknown_format(self, db, office):
        with pytest.raises(InvalidInput):
            ReportExportService(db).export_monthly(_claims(office["admin"]), 2024, 1, "csv")


class TestExportRoutes:
    def test_monthly_pdf_download(self, client, billed_office):
        response = client.get(
            f"{API}/billing/export/monthly",
            params={"year": 2024, "month": 1},
            headers=auth_headers(billed_office["admin"]),
        )
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == 'attachment; filename="monthly-report-2024-01.pdf"'
        assert int(response.headers["content-length"]) == len(response.content)
        assert response.content.startswith(b"%PDF")

    def test_weekly_excel_download(self, client, billed_office):
        response = client.get(
            f"{API}/billing/export/weekly",
            params={"startDate": "2024-01-15", "format": "excel"},
            headers=auth_headers(billed_office["admin"]),
        )
        assert response.status_code == 200
        assert response.headers["content-type"] == XLSX
        assert 'filename="weekly-report-2024-01-15.xlsx"' in response.headers["content-disposition"]
        assert response.content.startswith(b"PK")

    def test_bad_format(self, client, office):
        response = client.get(
            f"{API}/billing/export/monthly",
            params={"year": 2024, "month": 1, "format": "csv"},
            headers=auth_headers(office["admin"]),
        )
        assert response.status_code == 400
        assert response.json() == {"message": "Invalid format. Use 'pdf' or 'excel'"}

    def test_employee_is_forbidden(self, client, office):
        response = client.get(
            f"{API}/billing/export/monthly",
            params={"year": 2024, "month": 1},
            headers=auth_headers(office["employee"]),
        )
        assert response.status_code == 403
