import threading
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from healx.core.exceptions import NotificationFailure, StoreUnavailableError
from healx.models.restock_history import RestockHistoryEntry
from healx.models.surgical_item import SurgicalItem
from healx.schemas.restock import RestockRunOptions
from healx.services.auto_restock_service import AutoRestockService


def _reload(db, item_id) -> SurgicalItem:
    db.expire_all()
    return db.get(SurgicalItem, item_id)


def test_restocks_low_stock_item_and_records_history(db, restock_service, notifier, make_item):
    item = make_item()

    report = restock_service.check_and_restock_items()

    assert report.items_processed == 1
    assert report.items_eligible == 1
    assert report.skipped is False
    assert report.total_restock_value == Decimal("237.50")

    result = report.results[0]
    assert result.success is True
    assert result.current_stock == 5
    assert result.restock_quantity == 95
    assert result.final_stock == result.current_stock + result.restock_quantity
    assert result.restock_value == Decimal("237.50")
    assert result.urgency == "high"
    assert result.email_sent is True
    assert result.order_id == "PO-TEST-0001"

    stored = _reload(db, item.id)
    assert stored.quantity == 100
    assert stored.status == "Available"
    assert stored.auto_restock_count == 1
    assert stored.last_auto_restock is not None
    assert stored.last_supplier_order == "PO-TEST-0001"
    assert stored.last_email_sent is True

    history = db.query(RestockHistoryEntry).filter(RestockHistoryEntry.item_id == item.id).all()
    assert len(history) == 1
    entry = history[0]
    assert (entry.previous_stock, entry.amount, entry.new_stock) == (5, 95, 100)
    assert entry.value == Decimal("237.50")
    assert entry.supplier_order_id == "PO-TEST-0001"
    assert entry.email_sent is True

    assert notifier.kinds() == ["supplier_order", "admin_confirmation"]


def test_out_of_stock_item_is_ordered_as_critical(restock_service, notifier, make_item):
    make_item(
        quantity=0,
        min_stock_level=10,
        auto_restock_max_stock_level=10,
        unit_price=Decimal("1.00"),
        auto_restock_method="fixed_quantity",
        auto_restock_reorder_quantity=50,
        status="Out of Stock",
    )

    report = restock_service.check_and_restock_items()

    result = report.results[0]
    assert result.urgency == "critical"
    assert result.restock_quantity == 50
    assert result.final_stock == 50
    assert notifier.supplier_calls()[0][3]["urgency"] == "critical"


def test_items_with_invalid_price_are_excluded_and_reported(restock_service, make_item):
    free = make_item(name="Sample Gauze", quantity=2, min_stock_level=10, unit_price=Decimal("0"))

    report = restock_service.check_and_restock_items()

    assert report.items_processed == 0
    assert report.results == []
    assert report.invalid_price_item_ids == [free.id]


def test_only_qualifying_items_are_processed(restock_service, make_item):
    low = make_item(name="Low")
    make_item(name="Well stocked", quantity=50)
    make_item(name="Disabled", auto_restock_enabled=False)
    make_item(name="Inactive", is_active=False)

    report = restock_service.check_and_restock_items()

    assert [r.item_id for r in report.results] == [low.id]


def test_filter_items_narrows_the_batch(restock_service, make_item):
    first = make_item(name="First")
    make_item(name="Second")

    report = restock_service.check_and_restock_items(RestockRunOptions(filter_items=[first.id]))

    assert report.items_processed == 1
    assert report.results[0].item_id == first.id


def test_second_run_finds_nothing_after_first_restocks_everything(restock_service, make_item):
    make_item(name="A")
    make_item(name="B", quantity=0, min_stock_level=5, auto_restock_max_stock_level=40)

    first = restock_service.check_and_restock_items()
    second = restock_service.check_and_restock_items()

    assert first.items_processed == 2
    assert all(r.success for r in first.results)
    assert second.items_processed == 0
    assert second.message == "All auto-restock items are well-stocked."


def test_supplier_failure_does_not_block_stock_update(db, restock_service, notifier, make_item):
    item = make_item()
    notifier.fail_supplier = True

    report = restock_service.check_and_restock_items()

    result = report.results[0]
    assert result.success is True
    assert result.email_sent is False
    assert result.order_id is None
    stored = _reload(db, item.id)
    assert stored.quantity == 100
    assert stored.restock_history[0].email_sent is False
    assert notifier.calls[-1][3]["email_sent"] is False


def test_supplier_exception_is_treated_as_failed_notification(db, restock_service, notifier, make_item):
    item = make_item()
    notifier.raise_on_supplier = RuntimeError("connection reset")

    report = restock_service.check_and_restock_items()

    assert report.results[0].success is True
    assert report.results[0].email_sent is False
    assert _reload(db, item.id).quantity == 100


def test_notification_failure_raised_by_sender_is_recorded(db, restock_service, notifier, make_item):
    item = make_item()
    notifier.raise_on_supplier = NotificationFailure("supplier mailbox rejected the order")

    report = restock_service.check_and_restock_items()

    assert report.results[0].success is True
    assert report.results[0].email_sent is False
    assert notifier.calls[-1][3]["supplier_error"] == "supplier mailbox rejected the order"
    assert _reload(db, item.id).last_email_sent is False


def test_admin_confirmation_failure_is_not_fatal(restock_service, notifier, make_item):
    make_item()
    notifier.fail_admin = True

    report = restock_service.check_and_restock_items()

    assert report.results[0].success is True


def test_concurrent_stock_change_fails_only_that_item(db, session_factory, restock_service, notifier, make_item):
    contested = make_item(name="Contested")
    other = make_item(name="Other")

    def consume_one(item, quantity, metadata):
        if item.id != contested.id:
            return
        session = session_factory()
        try:
            row = session.get(SurgicalItem, contested.id)
            row.quantity -= 1
            session.commit()
        finally:
            session.close()

    notifier.on_supplier_order = consume_one

    report = restock_service.check_and_restock_items()

    by_id = {r.item_id: r for r in report.results}
    assert by_id[contested.id].success is False
    assert "changed during restock" in by_id[contested.id].error_message
    assert by_id[contested.id].email_sent is True
    assert by_id[contested.id].order_id == "PO-TEST-0001"
    assert "PO-TEST-0001" in by_id[contested.id].error_message
    assert by_id[other.id].success is True
    assert report.total_restock_value == by_id[other.id].restock_value
    assert _reload(db, contested.id).quantity == 4
    assert _reload(db, other.id).quantity == 100


def test_concurrent_change_after_failed_supplier_order_reports_no_order(db, session_factory, restock_service, notifier, make_item):
    item = make_item()
    notifier.fail_supplier = True

    def consume_one(item_, quantity, metadata):
        session = session_factory()
        try:
            session.get(SurgicalItem, item.id).quantity -= 1
            session.commit()
        finally:
            session.close()

    notifier.on_supplier_order = consume_one

    result = restock_service.check_and_restock_items().results[0]

    assert result.success is False
    assert result.email_sent is False
    assert result.order_id is None
    assert _reload(db, item.id).restock_history == []


def test_store_failure_raises_and_releases_guard(tmp_path, notifier):
    broken = create_engine(f"sqlite:///{tmp_path / 'missing' / 'nowhere.db'}")
    service = AutoRestockService(session_factory=sessionmaker(bind=broken), notifier=notifier)

    with pytest.raises(StoreUnavailableError):
        service.check_and_restock_items()

    assert service.is_processing is False
    with pytest.raises(StoreUnavailableError):
        service.check_and_restock_items()


def test_overlapping_call_is_skipped_without_touching_store(db, restock_service, notifier, make_item):
    item = make_item()
    in_flight = threading.Event()
    release = threading.Event()

    def block(item_, quantity, metadata):
        in_flight.set()
        release.wait(timeout=5)

    notifier.on_supplier_order = block
    reports = {}
    worker = threading.Thread(target=lambda: reports.setdefault("first", restock_service.check_and_restock_items()))
    worker.start()
    try:
        assert in_flight.wait(timeout=5)
        second = restock_service.check_and_restock_items()
    finally:
        release.set()
        worker.join(timeout=5)

    assert second.skipped is True
    assert second.items_processed == 0
    assert second.results == []
    assert reports["first"].items_processed == 1
    assert len(notifier.supplier_calls()) == 1
    assert _reload(db, item.id).quantity == 100


def test_separate_instances_do_not_share_guard(session_factory, notifier, make_item):
    make_item()
    first = AutoRestockService(session_factory=session_factory, notifier=notifier)
    second = AutoRestockService(session_factory=session_factory, notifier=notifier)

    release = threading.Event()
    notifier.on_supplier_order = lambda *args: release.wait(timeout=5)
    worker = threading.Thread(target=first.check_and_restock_items)
    worker.start()
    try:
        for _ in range(100):
            if first.is_processing:
                break
            release.wait(0.01)
        assert first.is_processing is True
        assert second.is_processing is False
    finally:
        release.set()
        worker.join(timeout=5)
