"""
Pytest configuration and fixtures
"""
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from leaveflow.main import app
from leaveflow.db.base import Base
from leaveflow.core.deps import get_db, get_leave_service, get_notification_dispatcher
from leaveflow.services.leave_service import LeaveService
from leaveflow.services.notification_service import NotificationDispatcher
from leaveflow.services.policy_rules import build_policy_engine

# Import all models to ensure they're registered with Base.metadata
from leaveflow.models import (
    Balance,
    Department,
    Employee,
    LeaveType,
    Role,
)  # noqa


# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Enable foreign keys for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Monday 2 March 2026; every test judges requests against this date
TODAY = date(2026, 3, 2)


class RecordingDispatcher(NotificationDispatcher):
    """Keeps every event in memory so tests can assert on delivery."""

    def __init__(self):
        self.events = []

    def notify_leave_submitted(self, leave_id, requester_id):
        self.events.append(("submitted", leave_id, requester_id))

    def notify_leave_approved(self, leave_id, approver_name):
        self.events.append(("approved", leave_id, approver_name))

    def notify_leave_rejected(self, leave_id, approver_name, reason):
        self.events.append(("rejected", leave_id, approver_name, reason))

    def notify_leave_forwarded(self, leave_id, new_approver_id, forwarder_name):
        self.events.append(("forwarded", leave_id, new_approver_id, forwarder_name))

    def notify_leave_returned(self, leave_id, approver_name, comment):
        self.events.append(("returned", leave_id, approver_name, comment))

    def notify_leave_cancelled(self, leave_id):
        self.events.append(("cancelled", leave_id))

    def names(self):
        return [event[0] for event in self.events]


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory():
    return TestingSessionLocal


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def policy_engine():
    return build_policy_engine()


@pytest.fixture
def clock():
    return lambda: TODAY


@pytest.fixture
def department(db):
    dept = Department(name="Operations", active=True)
    db.add(dept)
    db.commit()
    db.refresh(dept)
    return dept


def _employee(db, department, emp_code, name, role, join_date=date(2018, 1, 1), retirement_date=None):
    employee = Employee(
        emp_code=emp_code,
        name=name,
        role=role.value,
        department_id=department.id,
        join_date=join_date,
        retirement_date=retirement_date,
        active=True,
    )
    db.add(employee)
    db.commit()
    db.refresh(employee)
    return employee


@pytest.fixture
def make_employee(db, department):
    def factory(emp_code, name, role, **kwargs):
        return _employee(db, department, emp_code, name, role, **kwargs)
    return factory


@pytest.fixture
def org(db, department):
    """One employee per role in a single department"""
    return {
        "employee": _employee(db, department, "EMP001", "Asha Employee", Role.EMPLOYEE),
        "dept_head": _employee(db, department, "DH001", "Dev Head", Role.DEPT_HEAD),
        "hr_admin": _employee(db, department, "HRA001", "Hana Admin", Role.HR_ADMIN),
        "hr_head": _employee(db, department, "HRH001", "Hugo Head", Role.HR_HEAD),
        "ceo": _employee(db, department, "CEO001", "Cora Chief", Role.CEO),
    }


@pytest.fixture
def balances(db, org):
    """EARNED/CASUAL/MEDICAL balances for the employee in the current year"""
    rows = {}
    for leave_type, opening in ((LeaveType.EARNED, 20), (LeaveType.CASUAL, 8), (LeaveType.MEDICAL, 10)):
        balance = Balance(
            user_id=org["employee"].id,
            leave_type=leave_type,
            year=TODAY.year,
            opening=Decimal(opening),
            accrued=Decimal("0"),
            used=Decimal("0"),
            closing=Decimal(opening),
        )
        db.add(balance)
        rows[leave_type] = balance
    db.commit()
    return rows


@pytest.fixture(scope="function")
def client(db, dispatcher, policy_engine, clock):
    """Test client fixture with database, dispatcher and clock overrides"""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    def override_get_leave_service():
        return LeaveService(db, policy_engine, dispatcher, clock=clock)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_leave_service] = override_get_leave_service
    yield TestClient(app)
    app.dependency_overrides.clear()
