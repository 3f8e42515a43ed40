from datetime import datetime, timezone

import pytest

from app.domain.enums import PaymentStatus
from app.domain.errors import UserNotFound

P = PaymentStatus

RIDER = "00000000-0000-0000-0000-0000000000a1"
OTHER = "00000000-0000-0000-0000-0000000000a2"
P1 = "00000000-0000-0000-0000-000000000001"
P2 = "00000000-0000-0000-0000-000000000002"
P3 = "00000000-0000-0000-0000-000000000003"
MISSING = "00000000-0000-0000-0000-000000000404"


def test_create_payment_is_pending(client, auth_headers):
    r = client.post(
        "/v1/payments",
        json={"amount": "25.50", "method": "card", "ride_id": "r1", "user_id": RIDER},
        headers=auth_headers,
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["status"] == "pending"
    assert body["method"] == "card"
    assert body["user_id"] == RIDER
    assert float(body["amount"]) == 25.5


def test_create_payment_ignores_status_field(client, auth_headers):
    r = client.post(
        "/v1/payments",
        json={
            "amount": 10,
            "ride_id": "r1",
            "user_id": RIDER,
            "status": "completed",
        },
        headers=auth_headers,
    )
    assert r.status_code == 201
    assert r.json()["status"] == "pending"


def test_create_payment_with_malformed_user_id_is_422(client, auth_headers):
    r = client.post(
        "/v1/payments",
        json={"amount": 10, "ride_id": "r1", "user_id": "u1"},
        headers=auth_headers,
    )
    assert r.status_code == 422


def test_create_payment_for_unknown_user_is_400(
    client, app_and_deps, auth_headers, monkeypatch
):
    async def fk_violation(payment):
        raise UserNotFound()

    monkeypatch.setattr(app_and_deps[1].payments, "create", fk_violation)

    r = client.post(
        "/v1/payments",
        json={"amount": 10, "ride_id": "r1", "user_id": OTHER},
        headers=auth_headers,
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "user not found"


def test_patch_legal_transition(client, app_and_deps, auth_headers):
    uow = app_and_deps[1]
    uow.payments.seed(P.PENDING, id=P1)

    r = client.patch(
        f"/v1/payments/{P1}", json={"status": "completed"}, headers=auth_headers
    )
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "completed"


def test_patch_illegal_transition_is_conflict(client, app_and_deps, auth_headers):
    uow = app_and_deps[1]
    uow.payments.seed(P.PROCESSING, id=P1)

    r = client.patch(
        f"/v1/payments/{P1}", json={"status": "pending"}, headers=auth_headers
    )
    assert r.status_code == 409
    body = r.json()
    assert body["current"] == "processing"
    assert body["proposed"] == "pending"
    assert "processing" in body["detail"]
    assert uow.payments.rows[P1].status is P.PROCESSING


def test_patch_same_status_is_accepted(client, app_and_deps, auth_headers):
    uow = app_and_deps[1]
    uow.payments.seed(P.REFUNDED, id=P1)

    r = client.patch(
        f"/v1/payments/{P1}", json={"status": "refunded"}, headers=auth_headers
    )
    assert r.status_code == 200
    assert r.json()["status"] == "refunded"


def test_patch_unknown_status_is_422(client, app_and_deps, auth_headers):
    app_and_deps[1].payments.seed(P.PENDING, id=P1)
    r = client.patch(
        f"/v1/payments/{P1}", json={"status": "settled"}, headers=auth_headers
    )
    assert r.status_code == 422


def test_get_and_missing_payment(client, app_and_deps, auth_headers):
    app_and_deps[1].payments.seed(P.FAILED, id=P1)
    r = client.get(f"/v1/payments/{P1}", headers=auth_headers)
    assert r.json()["status"] == "failed"

    r = client.get(f"/v1/payments/{MISSING}", headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["detail"] == f"payment {MISSING} not found"


@pytest.mark.parametrize("method", ["get", "delete"])
def test_malformed_payment_id_is_422(client, app_and_deps, auth_headers, method):
    r = client.request(method, "/v1/payments/not-a-uuid", headers=auth_headers)
    assert r.status_code == 422
    assert app_and_deps[1].payments.deleted == []


def test_malformed_user_filter_is_422(client, auth_headers):
    r = client.get("/v1/payments", params={"user_id": "u1"}, headers=auth_headers)
    assert r.status_code == 422


def test_delete_pending_payment(client, app_and_deps, auth_headers):
    uow = app_and_deps[1]
    uow.payments.seed(P.PENDING, id=P1)

    r = client.delete(f"/v1/payments/{P1}", headers=auth_headers)
    assert r.status_code == 204
    assert uow.payments.deleted == [P1]


def test_delete_completed_payment_is_refused(client, app_and_deps, auth_headers):
    uow = app_and_deps[1]
    uow.payments.seed(P.COMPLETED, id=P1)

    r = client.delete(f"/v1/payments/{P1}", headers=auth_headers)
    assert r.status_code == 409
    assert r.json()["detail"] == "cannot delete a completed or refunded payment"
    assert uow.payments.deleted == []


@pytest.mark.parametrize(
    "method, path, json",
    [
        ("get", "/v1/payments", None),
        ("post", "/v1/payments", {"amount": 1, "ride_id": "r1", "user_id": RIDER}),
        ("patch", f"/v1/payments/{P1}", {"status": "completed"}),
        ("delete", f"/v1/payments/{P1}", None),
        ("get", "/v1/payments/analytics", None),
        ("get", "/v1/payments/payouts/pending", None),
    ],
)
def test_payment_routes_require_a_session(client, app_and_deps, method, path, json):
    uow = app_and_deps[1]
    uow.payments.seed(P.PENDING, id=P1)

    r = client.request(method, path, json=json)
    assert r.status_code == 401

    r = client.request(
        method, path, json=json, headers={"Authorization": "Bearer revoked"}
    )
    assert r.status_code == 401
    assert r.json()["detail"] == "invalid or expired token"
    assert uow.payments.rows[P1].status is P.PENDING
    assert uow.payments.deleted == []


def test_list_with_filters_and_analytics(client, app_and_deps, auth_headers):
    payments = app_and_deps[1].payments
    payments.seed(P.COMPLETED, id=P1, user_id=RIDER, amount="10.00")
    payments.seed(P.COMPLETED, id=P2, user_id=OTHER, amount="30.00")
    payments.seed(P.PENDING, id=P3, user_id=RIDER, amount="5.00")

    r = client.get("/v1/payments", params={"user_id": RIDER}, headers=auth_headers)
    assert {p["id"] for p in r.json()} == {P1, P3}

    r = client.get(
        "/v1/payments", params={"status": "completed"}, headers=auth_headers
    )
    assert {p["id"] for p in r.json()} == {P1, P2}

    r = client.get("/v1/payments/analytics", headers=auth_headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["total_payments"] == 3
    assert float(body["total_revenue"]) == 40.0
    assert float(body["average_payment"]) == 20.0
    assert body["payments_by_status"]["pending"] == 1
    assert body["payments_by_status"]["refunded"] == 0


def test_analytics_accepts_bounds_without_timezone(client, app_and_deps, auth_headers):
    payments = app_and_deps[1].payments
    payments.seed(
        P.COMPLETED,
        id=P1,
        amount="10.00",
        created_at=datetime(2023, 12, 31, tzinfo=timezone.utc),
    )
    payments.seed(
        P.COMPLETED,
        id=P2,
        amount="30.00",
        created_at=datetime(2024, 1, 2, tzinfo=timezone.utc),
    )

    r = client.get(
        "/v1/payments/analytics",
        params={"start": "2024-01-01T00:00:00"},
        headers=auth_headers,
    )
    assert r.status_code == 200, r.text
    assert r.json()["total_payments"] == 1
    assert float(r.json()["total_revenue"]) == 30.0


def test_revenue_by_period_defaults_to_day(client, auth_headers):
    r = client.get("/v1/payments/revenue/period", headers=auth_headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["period"] == "day"
    assert body["transaction_count"] == 0
    assert float(body["average_transaction"]) == 0.0
    assert body["start_date"] <= body["end_date"]


def test_revenue_by_unknown_period_is_422(client, auth_headers):
    r = client.get(
        "/v1/payments/revenue/period",
        params={"period": "decade"},
        headers=auth_headers,
    )
    assert r.status_code == 422


def test_pending_payouts_lists_completed_newest_first(
    client, app_and_deps, auth_headers
):
    payments = app_and_deps[1].payments
    payments.seed(
        P.COMPLETED, id=P1, created_at=datetime(2025, 1, 1, tzinfo=timezone.utc)
    )
    payments.seed(
        P.COMPLETED, id=P2, created_at=datetime(2025, 2, 1, tzinfo=timezone.utc)
    )
    payments.seed(P.PENDING, id=P3)

    r = client.get("/v1/payments/payouts/pending", headers=auth_headers)
    assert r.status_code == 200
    assert [p["id"] for p in r.json()] == [P2, P1]


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}
