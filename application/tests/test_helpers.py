import json
import os
from datetime import date, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from conftest import API
from officefood.config.sentry import before_send_filter
from officefood.dto.menu import MenuItemCreate
from officefood.dto.orders import OrderUpdate
from officefood.dto.phone_validations import validate_phone_number
from officefood.logging.config import LoggingConfig
from officefood.utils.datetime_helpers import (
    as_utc, month_bounds, parse_iso, previous_month, start_of_day, to_iso,
)

UTC = timezone.utc


class TestDatetimeHelpers:
    def test_to_iso_has_millis_and_z(self):
        assert to_iso(datetime(2024, 1, 15, 14, 30, 0, 123456, tzinfo=UTC)) == "2024-01-15T14:30:00.123Z"
        assert to_iso(None) is None

    def test_to_iso_converts_offsets(self):
        plus_two = timezone(timedelta(hours=2))
        assert to_iso(datetime(2024, 1, 15, 16, 30, tzinfo=plus_two)) == "2024-01-15T14:30:00.000Z"

    def test_naive_values_are_utc(self):
        assert as_utc(datetime(2024, 1, 1)).tzinfo == UTC

    def test_month_bounds_wrap_year(self):
        assert month_bounds(2023, 12) == (datetime(2023, 12, 1, tzinfo=UTC), datetime(2024, 1, 1, tzinfo=UTC))
        assert month_bounds(2024, 2)[1] == datetime(2024, 3, 1, tzinfo=UTC)

    def test_previous_month(self):
        assert previous_month(2024, 1) == (2023, 12)
        assert previous_month(2024, 7) == (2024, 6)

    def test_start_of_day(self):
        assert start_of_day(date(2024, 1, 15)) == datetime(2024, 1, 15, tzinfo=UTC)

    def test_parse_iso_accepts_z(self):
        assert parse_iso("2024-01-15T14:30:00Z") == datetime(2024, 1, 15, 14, 30, tzinfo=UTC)


class TestValidation:
    @pytest.mark.parametrize("raw,expected", [
        ("+15550001111", "+15550001111"),
        ("+44 20 7946 0958", "+442079460958"),
        ("+1 (555) 000-1111", "+15550001111"),
    ])
    def test_phone_normalization(self, raw, expected):
        assert validate_phone_number(raw) == expected

    @pytest.mark.parametrize("raw", ["15550001111", "+", "+1234567890123456", "+1555abc"])
    def test_phone_rejected(self, raw):
        with pytest.raises(ValidationError):
            validate_phone_number(raw)

    def test_order_status_is_upper_cased(self):
        assert OrderUpdate(status="delivered").status == "DELIVERED"
        with pytest.raises(ValidationError):
            OrderUpdate(status="LOST")

    def test_menu_price_precision(self):
        assert str(MenuItemCreate(name="Tea", price="2.50", category="Drinks").price) == "2.50"
        with pytest.raises(ValidationError):
            MenuItemCreate(name="Tea", price="2.505", category="Drinks")


class TestObservability:
    def test_sentry_filter_masks_credentials(self):
        event = {"request": {
            "headers": {"Authorization": "Bearer secret", "Accept": "application/json"},
            "data": {"phone": "+15550001111", "code": "123456", "refreshToken": "abc"},
        }}
        filtered = before_send_filter(event, None)
        assert filtered["request"]["headers"]["Authorization"] == "[Filtered]"
        assert filtered["request"]["headers"]["Accept"] == "application/json"
        assert filtered["request"]["data"] == {"phone": "+15550001111", "code": "[Filtered]", "refreshToken": "[Filtered]"}

    def test_audit_log_masks_otp(self, client, monkeypatch):
        monkeypatch.setattr(LoggingConfig, "AUDIT_LOGGING_ENABLED", True)
        client.post(f"{API}/auth/send-otp", json={"phone": "+15550001111"})
        client.post(f"{API}/auth/verify-otp", json={"phone": "+15550001111", "code": "123456"})

        with open(os.path.join(LoggingConfig.LOG_DIR, "audit.log")) as fh:
            records = [json.loads(line) for line in fh if line.strip()]
        verify = [r for r in records if r["request_path"] == f"{API}/auth/verify-otp"][-1]
        request = json.loads(verify["request"])
        assert request["BODY"] == {"phone": "+15550001111", "code": "****"}
        assert verify["status_code"] == 200
        assert "123456" not in verify["request"]
