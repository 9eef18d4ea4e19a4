from datetime import datetime, timezone

import pytest

from conftest import API, auth_headers
from officefood.core.exceptions import InvalidInput, Unauthorized
from officefood.repository.users import serialize_user
from officefood.services.billing_service import BillingService, daily_stats, summarize
from officefood.services.token_service import build_claims

UTC = timezone.utc


def _claims(user):
    return build_claims(serialize_user(user))


def _order(user_id, amount, created_at):
    return {"userId": user_id, "totalAmount": amount, "createdAt": created_at}


class TestSummarize:
    def test_empty_set_is_all_zero(self):
        assert summarize([]) == {
            "totalAmount": 0.0,
            "totalOrders": 0,
            "uniqueUsers": 0,
            "averageOrderValue": 0.0,
        }

    def test_totals(self):
        orders = [
            _order("u1", 31.98, "2024-01-15T10:00:00.000Z"),
            _order("u1", 8.5, "2024-01-15T12:00:00.000Z"),
            _order("u2", 10.0, "2024-01-16T10:00:00.000Z"),
        ]
        assert summarize(orders) == {
            "totalAmount": 50.48,
            "totalOrders": 3,
            "uniqueUsers": 2,
            "averageOrderValue": 16.83,
        }

    def test_daily_stats_buckets_by_utc_day(self):
        orders = [
            _order("u2", 10.0, "2024-01-16T00:30:00.000Z"),
            _order("u1", 5.0, "2024-01-15T23:59:00.000Z"),
            _order("u2", 7.0, "2024-01-15T08:00:00.000Z"),
        ]
        assert daily_stats(orders) == [
            {"date": "2024-01-15", "totalAmount": 12.0, "totalOrders": 2, "uniqueUsers": 2},
            {"date": "2024-01-16", "totalAmount": 10.0, "totalOrders": 1, "uniqueUsers": 1},
        ]


@pytest.fixture
def january(factory, office):
    """Orders around January 2024, plus one from another company."""
    employee, admin = office["employee"], office["admin"]
    session, pizza, salad = office["session"], office["pizza"], office["salad"]
    factory.order(employee, session, [(pizza, 2)], created_at=datetime(2023, 12, 31, 23, 59, tzinfo=UTC))
    factory.order(employee, session, [(pizza, 1)], created_at=datetime(2024, 1, 15, 10, 0, tzinfo=UTC))
    factory.order(admin, session, [(salad, 2)], created_at=datetime(2024, 1, 15, 12, 0, tzinfo=UTC))
    factory.order(employee, session, [(salad, 1)], created_at=datetime(2024, 1, 21, 23, 0, tzinfo=UTC))
    factory.order(employee, session, [(pizza, 1)], created_at=datetime(2024, 1, 22, 9, 0, tzinfo=UTC))
    factory.order(admin, session, [(pizza, 1)], created_at=datetime(2024, 2, 1, 0, 0, tzinfo=UTC))

    other = factory.company("Globex")
    other_admin = factory.admin(other)
    burger = factory.menu_item(other, name="Burger", price="100.00")
    factory.order(other_admin, factory.session(other, other_admin), [(burger, 1)],
                  created_at=datetime(2024, 1, 16, 12, 0, tzinfo=UTC))
    return office


class TestWeeklyReport:
    def test_end_date_is_inclusive(self, db, january):
        report = BillingService(db).weekly_report(_claims(january["admin"]), "2024-01-15", "2024-01-21")
        assert report["period"] == {"startDate": "2024-01-15", "endDate": "2024-01-21"}
        assert report["summary"] == {
            "totalAmount": 41.49,
            "totalOrders": 3,
            "uniqueUsers": 2,
            "averageOrderValue": 13.83,
        }
        assert len(report["orders"]) == 3

    def test_default_end_is_seven_days_later(self, db, january):
        report = BillingService(db).weekly_report(_claims(january["admin"]), "2024-01-15")
        assert report["period"]["endDate"] == "2024-01-22"
        assert report["summary"]["totalOrders"] == 4

    def test_orders_include_user_and_session(self, db, january):
        report = BillingService(db).weekly_report(_claims(january["admin"]), "2024-01-15", "2024-01-15")
        names = sorted(order["user"]["name"] for order in report["orders"])
        assert names == ["Jane", "Office Admin"]
        assert report["orders"][0]["session"]["title"] == "Friday Lunch"

    @pytest.mark.parametrize("start,end", [
        ("2024-13-01", None), ("yesterday", None), ("2024-01-15", "2024-01-10"),
        ("9999-12-28", None), ("2024-01-15", "9999-12-31"),
    ])
    def test_invalid_dates(self, db, office, start, end):
        with pytest.raises(InvalidInput):
            BillingService(db).weekly_report(_claims(office["admin"]), start, end)


class TestMonthlyReport:
    def test_month_window_and_daily_breakdown(self, db, january):
        report = BillingService(db).monthly_report(_claims(january["admin"]), 2024, 1)
        assert report["period"] == {"year": 2024, "month": 1, "monthName": "January"}
        assert report["summary"]["totalOrders"] == 4
        assert report["summary"]["totalAmount"] == 57.48
        assert [row["date"] for row in report["dailyStats"]] == ["2024-01-15", "2024-01-21", "2024-01-22"]
        assert report["dailyStats"][0] == {"date": "2024-01-15", "totalAmount": 32.99, "totalOrders": 2, "uniqueUsers": 2}

    def test_empty_month(self, db, office):
        report = BillingService(db).monthly_report(_claims(office["admin"]), 2023, 6)
        assert report["summary"]["averageOrderValue"] == 0.0
        assert report["dailyStats"] == []
        assert report["orders"] == []

    @pytest.mark.parametrize("month", [0, 13])
    def test_invalid_month(self, db, office, month):
        with pytest.raises(InvalidInput):
            BillingService(db).monthly_report(_claims(office["admin"]), 2024, month)

    @pytest.mark.parametrize("year", [0, 9999])
    def test_year_out_of_range(self, db, office, year):
        with pytest.raises(InvalidInput):
            BillingService(db).monthly_report(_claims(office["admin"]), year, 12)

    def test_requires_company(self, db, factory):
        with pytest.raises(Unauthorized):
            BillingService(db).monthly_report(_claims(factory.user()), 2024, 1)


class TestMonthOverMonth:
    def test_growth(self, db, january):
        summary = BillingService(db).month_over_month(_claims(january["admin"]), now=datetime(2024, 2, 10, tzinfo=UTC))
        assert summary["currentMonth"]["totalAmount"] == 15.99
        assert summary["currentMonth"]["totalOrders"] == 1
        assert summary["previousMonth"] == {"totalAmount": 57.48, "totalOrders": 4}
        assert summary["growth"]["amount"] == -41.49
        assert summary["growth"]["percentage"] == -72.18
        assert summary["period"]["current"]["monthName"] == "February"
        assert summary["period"]["previous"] == {"year": 2024, "month": 1, "monthName": "January"}

    def test_no_previous_revenue_means_zero_growth(self, db, january):
        summary = BillingService(db).month_over_month(_claims(january["admin"]), now=datetime(2023, 12, 5, tzinfo=UTC))
        assert summary["previousMonth"]["totalAmount"] == 0.0
        assert summary["growth"]["percentage"] == 0.0
        assert summary["growth"]["amount"] == 31.98

    def test_january_compares_with_previous_december(self, db, january):
        summary = BillingService(db).month_over_month(_claims(january["admin"]), now=datetime(2024, 1, 31, tzinfo=UTC))
        assert summary["period"]["previous"] == {"year": 2023, "month": 12, "monthName": "December"}
        assert summary["previousMonth"]["totalOrders"] == 1


class TestBillingRoutes:
    def test_employee_is_forbidden(self, client, office):
        response = client.get(f"{API}/billing/summary", headers=auth_headers(office["employee"]))
        assert response.status_code == 403

    def test_admin_summary(self, client, office):
        response = client.get(f"{API}/billing/summary", headers=auth_headers(office["admin"]))
        assert response.status_code == 200
        assert set(response.json()) == {"currentMonth", "previousMonth", "growth", "period"}

    def test_weekly_query_params(self, client, january):
        response = client.get(
            f"{API}/billing/reports/weekly",
            params={"startDate": "2024-01-15", "endDate": "2024-01-21"},
            headers=auth_headers(january["admin"]),
        )
        assert response.status_code == 200
        assert response.json()["summary"]["totalOrders"] == 3

    def test_weekly_requires_start_date(self, client, office):
        response = client.get(f"{API}/billing/reports/weekly", headers=auth_headers(office["admin"]))
        assert response.status_code == 400

    def test_monthly_bad_month(self, client, office):
        response = client.get(
            f"{API}/billing/reports/monthly",
            params={"year": 2024, "month": 13},
            headers=auth_headers(office["admin"]),
        )
        assert response.status_code == 400
        assert response.json() == {"message": "Month must be between 1 and 12"}

    def test_monthly_last_representable_december(self, client, office):
        response = client.get(
            f"{API}/billing/reports/monthly",
            params={"year": 9999, "month": 12},
            headers=auth_headers(office["admin"]),
        )
        assert response.status_code == 400
        assert response.json() == {"message": "Invalid year"}

    def test_weekly_past_last_date(self, client, office):
        response = client.get(
            f"{API}/billing/reports/weekly",
            params={"startDate": "9999-12-28"},
            headers=auth_headers(office["admin"]),
        )
        assert response.status_code == 400
        assert response.json() == {"message": "Report period is out of range"}
