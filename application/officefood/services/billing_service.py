from collections import OrderedDict
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional
from sqlalchemy.orm import Session
from officefood.core.exceptions import InvalidInput
from officefood.core.permissions import require_company
from officefood.logging.utils import get_app_logger
from officefood.middlewares.request_context import request_context
from officefood.repository.orders import OrdersRepository
from officefood.utils.datetime_helpers import (
    month_bounds, month_name, parse_iso, previous_month, start_of_day, utc_now,
)

logger = get_app_logger(__name__)

CENT = Decimal("0.01")


def _money(value: Decimal) -> float:
    return float(value.quantize(CENT, rounding=ROUND_HALF_UP))


def summarize(orders: Iterable[Dict]) -> Dict:
    """
    Totals over a set of serialized orders.

    averageOrderValue is 0 for an empty set.
    """
    total = Decimal("0")
    count = 0
    users = set()
    for order in orders:
        total += Decimal(str(order["totalAmount"]))
        count += 1
        users.add(order["userId"])
    average = total / count if count else Decimal("0")
    return {
        "totalAmount": _money(total),
        "totalOrders": count,
        "uniqueUsers": len(users),
        "averageOrderValue": _money(average),
    }


def daily_stats(orders: Iterable[Dict]) -> List[Dict]:
    """One row per UTC calendar day that has at least one order, oldest first."""
    buckets: Dict[str, List[Dict]] = OrderedDict()
    for order in sorted(orders, key=lambda o: o["createdAt"]):
        buckets.setdefault(order["createdAt"][:10], []).append(order)
    rows = []
    for day, day_orders in buckets.items():
        summary = summarize(day_orders)
        rows.append({
            "date": day,
            "totalAmount": summary["totalAmount"],
            "totalOrders": summary["totalOrders"],
            "uniqueUsers": summary["uniqueUsers"],
        })
    return rows


def parse_report_date(value: str, field: str) -> date:
    if not value:
        raise InvalidInput(f"{field} is required")
    try:
        if len(value) == 10:
            return date.fromisoformat(value)
        return parse_iso(value).date()
    except ValueError:
        raise InvalidInput(f"Invalid {field}: {value}")


def validate_period(year: int, month: int) -> None:
    if not 1 <= month <= 12:
        raise InvalidInput("Month must be between 1 and 12")
    # December of the last representable year has no following month
    if not 1 <= year <= 9998:
        raise InvalidInput("Invalid year")


class BillingService:
    """
    Read-only billing aggregates. An order belongs to a company through its
    session; windows are [start, end) in UTC.
    """

    def __init__(self, db: Session):
        request_context.module_name = 'billing_service'
        self.orders = OrdersRepository(db)

    def _orders(self, company_id: str, start: datetime, end: datetime) -> List[Dict]:
        return self.orders.list_company_orders(company_id, start, end)

    def weekly_report(self, user: Dict, start_date: str, end_date: Optional[str] = None) -> Dict:
        company_id = require_company(user)
        start_day = parse_report_date(start_date, "startDate")
        try:
            end_day = parse_report_date(end_date, "endDate") if end_date else start_day + timedelta(days=7)
            # end date covers its whole day
            end = start_of_day(end_day + timedelta(days=1))
        except OverflowError:
            raise InvalidInput("Report period is out of range")
        if end_day < start_day:
            raise InvalidInput("endDate must not be before startDate")

        start = start_of_day(start_day)
        orders = self._orders(company_id, start, end)
        logger.info(f"weekly_report_generated | company_id={company_id} start={start_day} end={end_day} orders={len(orders)}")
        return {
            "period": {"startDate": start_day.isoformat(), "endDate": end_day.isoformat()},
            "summary": summarize(orders),
            "orders": orders,
        }

    def monthly_report(self, user: Dict, year: int, month: int) -> Dict:
        company_id = require_company(user)
        validate_period(year, month)
        start, end = month_bounds(year, month)
        orders = self._orders(company_id, start, end)
        logger.info(f"monthly_report_generated | company_id={company_id} year={year} month={month} orders={len(orders)}")
        return {
            "period": {"year": year, "month": month, "monthName": month_name(month)},
            "summary": summarize(orders),
            "dailyStats": daily_stats(orders),
            "orders": orders,
        }

    def month_over_month(self, user: Dict, now: Optional[datetime] = None) -> Dict:
        company_id = require_company(user)
        now = now or utc_now()
        current_year, current_month = now.year, now.month
        prev_year, prev_month = previous_month(current_year, current_month)

        current = summarize(self._orders(company_id, *month_bounds(current_year, current_month)))
        previous = summarize(self._orders(company_id, *month_bounds(prev_year, prev_month)))

        growth_amount = Decimal(str(current["totalAmount"])) - Decimal(str(previous["totalAmount"]))
        if previous["totalAmount"]:
            percentage = growth_amount / Decimal(str(previous["totalAmount"])) * 100
        else:
            percentage = Decimal("0")

        return {
            "currentMonth": current,
            "previousMonth": {
                "totalAmount": previous["totalAmount"],
                "totalOrders": previous["totalOrders"],
            },
            "growth": {
                "amount": _money(growth_amount),
                "percentage": _money(percentage),
            },
            "period": {
                "current": {"year": current_year, "month": current_month, "monthName": month_name(current_month)},
                "previous": {"year": prev_year, "month": prev_month, "monthName": month_name(prev_month)},
            },
        }
