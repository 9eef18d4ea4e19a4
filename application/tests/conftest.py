import os
import tempfile
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

# Settings are read at import time, so the environment is fixed before officefood loads
_TMP_DIR = tempfile.mkdtemp(prefix="officefood-tests-")
_DB_URL = f"sqlite:///{os.path.join(_TMP_DIR, 'officefood.db')}"
os.environ.update({
    "DATABASE_URL": _DB_URL,
    "DATABASE_READ_URL": _DB_URL,
    "ENVIRONMENT": "development",
    "DEBUG": "true",
    "JWT_SECRET": "test-secret",
    "MOCK_OTP_CODE": "123456",
    "OTP_ATTEMPT_LIMIT_ENABLED": "false",
    "LOG_DIR": os.path.join(_TMP_DIR, "logs"),
    "SENTRY_ENABLED": "false",
    "FIREHOSE_ENABLED": "false",
    "AUDIT_LOGGING_ENABLED": "false",
    "SLACK_WEBHOOK_URL": "",
    "ALLOWED_ORIGINS": "",
})

from fastapi.testclient import TestClient  # noqa: E402

from officefood.main import app  # noqa: E402
from officefood.connections.database import Base, SessionLocal, engine  # noqa: E402
from officefood.core.constants import OrderStatus, UserRole  # noqa: E402
from officefood.models.company import Company  # noqa: E402
from officefood.models.menu import MenuItem  # noqa: E402
from officefood.models.orders import Order, OrderItem, OrderSession  # noqa: E402
from officefood.models.otp import OtpCode  # noqa: E402,F401
from officefood.models.users import User  # noqa: E402
from officefood.repository.users import serialize_user  # noqa: E402
from officefood.services.token_service import TokenService  # noqa: E402

API = "/api/v1"
UTC = timezone.utc


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(schema):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(schema):
    return TestClient(app)


class Factory:
    """Inserts rows directly and commits so API calls see them."""

    def __init__(self, db):
        self.db = db
        self._phone_seq = 0

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        return obj

    def company(self, name="Acme"):
        return self._save(Company(name=name, description=f"{name} office"))

    def user(self, company=None, role=UserRole.USER, phone=None, name="Test User", is_active=True):
        if phone is None:
            self._phone_seq += 1
            phone = f"+1555000{self._phone_seq:04d}"
        return self._save(User(
            phone=phone,
            name=name,
            role=role,
            company_id=company.id if company else None,
            is_active=is_active,
        ))

    def admin(self, company, **kwargs):
        return self.user(company=company, role=UserRole.ADMIN, name=kwargs.pop("name", "Office Admin"), **kwargs)

    def menu_item(self, company, name="Pizza", price="15.99", category="Mains", is_available=True):
        return self._save(MenuItem(
            name=name,
            price=Decimal(price),
            category=category,
            is_available=is_available,
            company_id=company.id,
        ))

    def session(self, company, created_by, title="Friday Lunch", is_active=True):
        start = datetime(2024, 1, 15, 9, 0, tzinfo=UTC)
        return self._save(OrderSession(
            title=title,
            start_time=start,
            end_time=start + timedelta(hours=3),
            is_active=is_active,
            company_id=company.id,
            created_by_id=created_by.id,
        ))

    def order(self, user, session, lines, created_at=None, status=OrderStatus.PENDING):
        """lines: [(menu_item, quantity)]; prices are taken from the menu items"""
        total = sum((Decimal(item.price) * qty for item, qty in lines), Decimal("0"))
        order = Order(
            user_id=user.id,
            session_id=session.id,
            status=status,
            total_amount=total,
            items=[OrderItem(menu_item_id=item.id, quantity=qty, price=item.price) for item, qty in lines],
        )
        if created_at is not None:
            order.created_at = created_at
            order.updated_at = created_at
        return self._save(order)


@pytest.fixture
def factory(db):
    return Factory(db)


def token_pair(user):
    return TokenService().issue_pair(serialize_user(user))


def auth_headers(user):
    return {"Authorization": f"Bearer {token_pair(user)['accessToken']}"}


@pytest.fixture
def office(factory):
    """A company with an admin, an employee, a menu and an active session."""
    company = factory.company()
    admin = factory.admin(company)
    employee = factory.user(company=company, name="Jane")
    pizza = factory.menu_item(company, name="Pizza", price="15.99", category="Mains")
    salad = factory.menu_item(company, name="Caesar Salad", price="8.50", category="Salads")
    session = factory.session(company, admin)
    return {
        "company": company,
        "admin": admin,
        "employee": employee,
        "pizza": pizza,
        "salad": salad,
        "session": session,
    }
