"""
Integration Tests — Auto-Restock Endpoints

Tests:
- POST /api/v1/auto-restock/check-and-restock
- POST /api/v1/auto-restock/configure/{item_id}
- GET  /api/v1/auto-restock/status, /history/{item_id}, /notifications
- Scheduler status/start/stop
"""
from fastapi.testclient import TestClient

from healx.core.exceptions import StoreUnavailableError
from healx.models.surgical_item import SurgicalItem
from healx.services.notification_service import OutboxNotificationSender


class TestManualTrigger:

    def test_trigger_restocks_low_items(self, client: TestClient, make_item):
        item = make_item()

        resp = client.post("/api/v1/auto-restock/check-and-restock")

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "Auto-restock check completed. Processed 1 items."
        data = body["data"]
        assert data["items_processed"] == 1
        assert data["skipped"] is False
        assert data["results"][0]["item_id"] == item.id
        assert data["results"][0]["final_stock"] == 100
        assert data["results"][0]["order_id"] == "PO-TEST-0001"

    def test_trigger_with_nothing_to_do(self, client: TestClient, make_item):
        make_item(quantity=90)

        resp = client.post("/api/v1/auto-restock/check-and-restock")

        assert resp.status_code == 200
        assert resp.json()["data"]["items_processed"] == 0
        assert resp.json()["message"] == "All auto-restock items are well-stocked."

    def test_trigger_with_filter(self, client: TestClient, make_item):
        first = make_item(name="First")
        make_item(name="Second")

        resp = client.post("/api/v1/auto-restock/check-and-restock", json={"filter_items": [first.id]})

        assert resp.status_code == 200
        results = resp.json()["data"]["results"]
        assert [r["item_id"] for r in results] == [first.id]

    def test_trigger_while_cycle_running_is_skipped(self, client: TestClient, restock_service, make_item):
        make_item()
        restock_service._cycle_lock.acquire()
        try:
            resp = client.post("/api/v1/auto-restock/check-and-restock")
        finally:
            restock_service._cycle_lock.release()

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["skipped"] is True
        assert data["items_processed"] == 0

    def test_store_failure_returns_503(self, client: TestClient, restock_service, monkeypatch):
        def unavailable(options=None):
            raise StoreUnavailableError("Inventory store unavailable")

        monkeypatch.setattr(restock_service, "check_and_restock_items", unavailable)

        resp = client.post("/api/v1/auto-restock/check-and-restock")

        assert resp.status_code == 503
        body = resp.json()
        assert body["success"] is False
        assert body["error"]["code"] == "STORE_UNAVAILABLE"

    def test_failed_item_is_reported_not_raised(self, client: TestClient, notifier, make_item, session_factory):
        item = make_item()

        def consume(item_, quantity, metadata):
            session = session_factory()
            try:
                session.get(SurgicalItem, item.id).quantity -= 1
                session.commit()
            finally:
                session.close()

        notifier.on_supplier_order = consume

        resp = client.post("/api/v1/auto-restock/check-and-restock")

        assert resp.status_code == 200
        result = resp.json()["data"]["results"][0]
        assert result["success"] is False
        assert result["error_message"]


class TestConfiguration:

    def test_configure_item(self, client: TestClient, make_item):
        item = make_item(auto_restock_enabled=False)

        resp = client.post(f"/api/v1/auto-restock/configure/{item.id}", json={
            "enabled": True,
            "max_stock_level": 150,
            "restock_method": "fixed_quantity",
            "reorder_quantity": 40,
        })

        assert resp.status_code == 200
        policy = resp.json()["auto_restock"]
        assert policy["enabled"] is True
        assert policy["max_stock_level"] == 150
        assert policy["reorder_quantity"] == 40

    def test_configure_rejects_max_below_min(self, client: TestClient, make_item):
        item = make_item(min_stock_level=20)

        resp = client.post(f"/api/v1/auto-restock/configure/{item.id}", json={
            "enabled": True,
            "max_stock_level": 5,
        })

        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "BUSINESS_RULE_VIOLATION"

    def test_configure_rejects_unknown_method(self, client: TestClient, make_item):
        item = make_item()

        resp = client.post(f"/api/v1/auto-restock/configure/{item.id}", json={
            "enabled": True,
            "max_stock_level": 50,
            "restock_method": "just_in_time",
        })

        assert resp.status_code == 422

    def test_configure_unknown_item_returns_404(self, client: TestClient):
        resp = client.post("/api/v1/auto-restock/configure/99999", json={
            "enabled": True,
            "max_stock_level": 50,
        })

        assert resp.status_code == 404


class TestStatusAndHistory:

    def test_status_summary(self, client: TestClient, make_item):
        make_item(name="Low")
        make_item(name="Fine", quantity=60)

        resp = client.get("/api/v1/auto-restock/status")

        assert resp.status_code == 200
        data = resp.json()
        assert data["total_auto_restock_items"] == 2
        assert data["items_needing_restock"] == 1

    def test_history_after_restock(self, client: TestClient, make_item):
        item = make_item()
        client.post("/api/v1/auto-restock/check-and-restock")

        resp = client.get(f"/api/v1/auto-restock/history/{item.id}")

        assert resp.status_code == 200
        history = resp.json()
        assert len(history) == 1
        assert history[0]["previous_stock"] == 5
        assert history[0]["new_stock"] == 100
        assert history[0]["supplier_order_id"] == "PO-TEST-0001"

    def test_history_unknown_item_returns_404(self, client: TestClient):
        assert client.get("/api/v1/auto-restock/history/99999").status_code == 404

    def test_notifications_listing(self, client: TestClient, session_factory, make_item):
        item = make_item()
        sender = OutboxNotificationSender(
            session_factory=session_factory,
            admin_email="admin@healx.test",
            default_supplier_email="",
            from_email="no-reply@healx.test",
            hospital_name="HealX Test Hospital",
        )
        sender.send_supplier_order(item, 95, {"urgency": "high"})
        sender.send_admin_confirmation(item, 95, {"email_sent": True})

        resp = client.get("/api/v1/auto-restock/notifications", params={"kind": "supplier_order"})

        assert resp.status_code == 200
        rows = resp.json()
        assert len(rows) == 1
        assert rows[0]["recipient"] == "orders@medsupply.test"
        assert rows[0]["metadata"]["urgency"] == "high"

    def test_notifications_reject_unknown_kind(self, client: TestClient):
        assert client.get("/api/v1/auto-restock/notifications", params={"kind": "sms"}).status_code == 422


class TestSchedulerControl:

    def test_scheduler_lifecycle(self, client: TestClient):
        status = client.get("/api/v1/auto-restock/scheduler/status").json()
        assert status["is_running"] is False
        assert status["schedule_period"] == "Every 5 minutes"

        started = client.post("/api/v1/auto-restock/scheduler/start").json()
        assert started["is_running"] is True
        assert started["next_run_estimate"] is not None

        stopped = client.post("/api/v1/auto-restock/scheduler/stop").json()
        assert stopped["is_running"] is False

    def test_readiness_reports_scheduler(self, client: TestClient):
        resp = client.get("/ready")

        assert resp.json()["checks"]["restock_scheduler"]["running"] is False
