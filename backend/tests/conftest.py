import os

os.environ.setdefault("RESTOCK_SCHEDULER_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "standard")
os.environ.setdefault("ENABLE_REQUEST_LOGGING", "false")

from decimal import Decimal
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import healx.models  # noqa: F401
from healx.database import Base, get_db
from healx.main import app
from healx.models.surgical_item import SurgicalItem
from healx.schemas.restock import NotificationResult
from healx.services.auto_restock_service import AutoRestockService
from healx.services.restock_scheduler import RestockScheduler


class RecordingNotifier:
    """In-memory notification sender that records every call."""

    def __init__(self):
        self.calls = []
        self.fail_supplier = False
        self.fail_admin = False
        self.raise_on_supplier = None
        self.on_supplier_order = None
        self._order_numbers = count(1)

    def send_supplier_order(self, item, quantity, metadata):
        self.calls.append(("supplier_order", item.id, quantity, dict(metadata)))
        if self.on_supplier_order is not None:
            self.on_supplier_order(item, quantity, metadata)
        if self.raise_on_supplier is not None:
            raise self.raise_on_supplier
        if self.fail_supplier:
            return NotificationResult(success=False, error="smtp unavailable")
        return NotificationResult(
            success=True,
            order_id=f"PO-TEST-{next(self._order_numbers):04d}",
            recipient=item.supplier_email,
        )

    def send_admin_confirmation(self, item, quantity, result_metadata):
        self.calls.append(("admin_confirmation", item.id, quantity, dict(result_metadata)))
        if self.fail_admin:
            return NotificationResult(success=False, error="admin mailbox full")
        return NotificationResult(success=True, recipient="admin@healx.test")

    def kinds(self):
        return [c[0] for c in self.calls]

    def supplier_calls(self):
        return [c for c in self.calls if c[0] == "supplier_order"]


@pytest.fixture
def engine(tmp_path):
    eng = create_engine(
        f"sqlite:///{tmp_path / 'healx_test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def restock_service(session_factory, notifier):
    return AutoRestockService(session_factory=session_factory, notifier=notifier)


@pytest.fixture
def make_item(db):
    def _make(**overrides) -> SurgicalItem:
        fields = {
            "name": "Scalpel Blade #10",
            "category": "Cutting Instruments",
            "quantity": 5,
            "min_stock_level": 20,
            "unit_price": Decimal("2.50"),
            "supplier_name": "MedSupply Co",
            "supplier_email": "orders@medsupply.test",
            "status": "Low Stock",
            "is_active": True,
            "auto_restock_enabled": True,
            "auto_restock_max_stock_level": 100,
            "auto_restock_reorder_quantity": None,
            "auto_restock_method": "auto_fill",
            "auto_restock_count": 0,
        }
        fields.update(overrides)
        item = SurgicalItem(**fields)
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    return _make


@pytest.fixture
def client(session_factory, restock_service):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    previous_service = app.state.auto_restock_service
    previous_scheduler = app.state.restock_scheduler
    scheduler = RestockScheduler(restock_service, interval_seconds=300)
    app.state.auto_restock_service = restock_service
    app.state.restock_scheduler = scheduler
    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        scheduler.stop()
        app.dependency_overrides.clear()
        app.state.auto_restock_service = previous_service
        app.state.restock_scheduler = previous_scheduler
