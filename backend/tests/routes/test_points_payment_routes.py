"""Points wallet and mock payment gateway endpoints."""

from app.core.enums import PaymentStatus, PointsTransactionType
from app.models.payment import Payment


def _credit(client, headers, amount):
    return client.post(
        "/api/v1/points/add",
        json={"amount": amount, "type": PointsTransactionType.BONUS.value, "description": "Welcome gift"},
        headers=headers,
    )


class TestWallet:
    def test_balance_and_ledger(self, client, student_headers):
        assert client.get("/api/v1/points/balance", headers=student_headers).json() == {"points": 0}

        assert _credit(client, student_headers, 150).status_code == 200
        resp = client.post(
            "/api/v1/points/deduct",
            json={"amount": 40, "type": PointsTransactionType.ADMIN.value, "description": "Correction"},
            headers=student_headers,
        )
        assert resp.json()["amount"] == -40

        assert client.get("/api/v1/points/balance", headers=student_headers).json() == {"points": 110}
        ledger = client.get("/api/v1/points/transactions", headers=student_headers).json()
        assert sorted(t["amount"] for t in ledger) == [-40, 150]

    def test_movement_needs_all_fields(self, client, student_headers):
        resp = client.post("/api/v1/points/add", json={"amount": 10}, headers=student_headers)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Amount, type, and description are required"

    def test_overdraft_reports_balance(self, client, student_headers):
        resp = client.post(
            "/api/v1/points/deduct",
            json={"amount": 5, "type": PointsTransactionType.ADMIN.value, "description": "Too much"},
            headers=student_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["code"] == "INSUFFICIENT_POINTS"

    def test_packages_are_public(self, client, points_package):
        resp = client.get("/api/v1/points/packages")
        assert [p["id"] for p in resp.json()] == [points_package.id]


class TestCoursePurchase:
    def test_insufficient_points(self, client, student_headers, published_course):
        resp = client.post(
            "/api/v1/points/purchase-courses",
            json={"course_ids": [published_course.id], "total_points_price": 100, "description": "Buy"},
            headers=student_headers,
        )

        assert resp.status_code == 400
        body = resp.json()
        assert body["detail"] == "Insufficient points"
        assert body["code"] == "INSUFFICIENT_POINTS"
        assert body["errors"] == {"balance": 0, "required": 100}

    def test_purchase_enrolls(self, client, student_headers, published_course):
        _credit(client, student_headers, 120)

        resp = client.post(
            "/api/v1/points/purchase-courses",
            json={"course_ids": [published_course.id], "total_points_price": 100, "description": "Buy"},
            headers=student_headers,
        )

        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["transaction"]["amount"] == -100
        assert [e["course_id"] for e in body["enrollments"]] == [published_course.id]
        assert client.get("/api/v1/points/balance", headers=student_headers).json() == {"points": 20}

    def test_price_mismatch(self, client, student_headers, published_course):
        _credit(client, student_headers, 500)
        resp = client.post(
            "/api/v1/points/purchase-courses",
            json={"course_ids": [published_course.id], "total_points_price": 50, "description": "Buy"},
            headers=student_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Points price mismatch"


class TestPackages:
    def test_direct_purchase(self, client, student_headers, points_package):
        resp = client.post(
            "/api/v1/points/purchase",
            json={"package_id": points_package.id, "payment_method": "card"},
            headers=student_headers,
        )

        assert resp.status_code == 200
        assert resp.json()["message"] == "Successfully purchased 500 points"
        assert client.get("/api/v1/points/balance", headers=student_headers).json() == {"points": 500}
        history = client.get("/api/v1/payments/history", headers=student_headers).json()
        assert [p["status"] for p in history] == [PaymentStatus.COMPLETED.value]

    def test_intent_then_confirm(self, client, student_headers, points_package):
        resp = client.post(
            "/api/v1/points/create-payment-intent",
            json={"package_id": points_package.id},
            headers=student_headers,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["package_details"]["points"] == 500
        intent_id = body["client_secret"].split("_secret_")[0]

        confirm = {"payment_intent_id": intent_id, "payment_method": "pm_card_visa"}
        resp = client.post("/api/v1/payments/confirm", json=confirm, headers=student_headers)
        assert resp.status_code == 200
        assert resp.json()["status"] == "succeeded"
        assert resp.json()["amount_received"] == 4499

        client.post("/api/v1/payments/confirm", json=confirm, headers=student_headers)
        assert client.get("/api/v1/points/balance", headers=student_headers).json() == {"points": 500}

    def test_unknown_package(self, client, student_headers):
        resp = client.post(
            "/api/v1/points/create-payment-intent",
            json={"package_id": "01HZZZZZZZZZZZZZZZZZZZZZZZ"},
            headers=student_headers,
        )
        assert resp.status_code == 404


class TestPayments:
    def test_create_intent_requires_amount(self, client, student_headers):
        resp = client.post("/api/v1/payments", json={"amount": 0}, headers=student_headers)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Valid amount is required"

    def test_webhook_needs_no_auth(self, client, db, student_headers):
        intent = client.post("/api/v1/payments", json={"amount": 1500}, headers=student_headers).json()

        resp = client.post(
            "/api/v1/payments/webhook",
            json={"type": "payment_intent.payment_failed", "data": {"object": {"id": intent["id"]}}},
        )

        assert resp.json() == {"received": True}
        payment = db.query(Payment).filter_by(reference_id=intent["id"]).one()
        assert payment.status == PaymentStatus.FAILED.value

    def test_event_without_type(self, client):
        resp = client.post("/api/v1/payments/webhook", json={"data": {}})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Webhook error"

    def test_unknown_event_is_acknowledged(self, client):
        resp = client.post("/api/v1/payments/webhook", json={"type": "charge.refunded", "data": {}})
        assert resp.json() == {"received": True}

    def test_saved_methods(self, client, student_headers):
        methods = client.get("/api/v1/payments/methods", headers=student_headers).json()
        assert [m["card"]["last4"] for m in methods] == ["4242", "5555"]
