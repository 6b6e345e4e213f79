"""Pruebas de gestión personal: registros, ajustes, pagos realizados y saldo"""
from decimal import Decimal

import pytest

@pytest.fixture
def collaborator(api):
    return api.collaborator("Ana")

def create_record(api, collaborator_id, daily_pay="50.00", **fields):
    return api.post("/api/v1/personnel/records", {
        "collaborator_id": collaborator_id,
        "description": fields.pop("description", "Jornada"),
        "daily_pay": daily_pay,
        **fields
    })

def pay(api, collaborator_id, amount, **fields):
    return api.post("/api/v1/personnel/payments", {
        "collaborator_id": collaborator_id,
        "amount": amount,
        **fields
    })

def test_days_worked_increments_per_record(api, collaborator):
    first = create_record(api, collaborator["id"]).json()
    second = create_record(api, collaborator["id"], shortage="5.00").json()

    assert first["record"]["days_worked"] == 1
    assert second["record"]["days_worked"] == 2
    assert Decimal(second["record"]["net_earned"]) == Decimal("45.00")
    assert Decimal(second["pending_balance"]) == Decimal("95.00")

def test_adjustments_apply_to_latest_record(api, collaborator):
    create_record(api, collaborator["id"], daily_pay="100.00")
    url = f"/api/v1/personnel/collaborators/{collaborator['id']}/adjustments"

    api.post(url, {"kind": "advance", "amount": "30.00"})
    api.post(url, {"kind": "shortage", "amount": "10.00"})
    response = api.post(url, {"kind": "expense", "amount": "7.50", "description": "Taxi"})

    assert response.status_code == 200
    record = response.json()["record"]
    assert Decimal(record["advance"]) == Decimal("30.00")
    assert Decimal(record["shortage"]) == Decimal("10.00")
    assert Decimal(record["amount"]) == Decimal("7.50")
    assert record["description"] == "Jornada, Taxi"
    assert Decimal(response.json()["pending_balance"]) == Decimal("60.00")

def test_adjustment_cannot_make_balance_negative(api, collaborator):
    url = f"/api/v1/personnel/collaborators/{collaborator['id']}/adjustments"

    response = api.post(url, {"kind": "shortage", "amount": "10.00"})

    assert response.status_code == 400
    assert api.get("/api/v1/personnel/records", params={"collaborator_id": collaborator["id"]}).json()["total"] == 0

def test_payroll_payment_status_and_balance(api, collaborator):
    create_record(api, collaborator["id"], daily_pay="100.00")

    partial = pay(api, collaborator["id"], "40.00", method="transferencia")
    assert partial.status_code == 201
    assert partial.json()["payment"]["status"] == "partial"
    assert Decimal(partial.json()["pending_balance"]) == Decimal("60.00")

    exceeded = pay(api, collaborator["id"], "60.01")
    assert exceeded.status_code == 409
    assert exceeded.json()["error_code"] == "PAYMENT_EXCEEDS_DEBT"

    total = pay(api, collaborator["id"], "60.00")
    assert total.json()["payment"]["status"] == "paid"
    assert Decimal(total.json()["pending_balance"]) == Decimal("0.00")

def test_payroll_period_defaults_to_calendar_month(api, collaborator):
    create_record(api, collaborator["id"])

    response = pay(api, collaborator["id"], "10.00", payment_date="2024-02-15T10:00:00")

    payment = response.json()["payment"]
    assert payment["period_start"] == "2024-02-01"
    assert payment["period_end"] == "2024-02-29"

def test_payroll_rejects_records_of_other_collaborator(api, collaborator):
    other = api.collaborator("Beto")
    own = create_record(api, collaborator["id"]).json()["record"]
    foreign = create_record(api, other["id"]).json()["record"]

    response = pay(api, collaborator["id"], "10.00", included_record_ids=[own["id"], foreign["id"]])

    assert response.status_code == 400
    assert response.json()["details"]["record_ids"] == [foreign["id"]]

def test_invalid_period_is_rejected(api, collaborator):
    create_record(api, collaborator["id"])

    response = pay(api, collaborator["id"], "10.00", period_start="2024-03-10", period_end="2024-03-01")

    assert response.status_code == 422

def test_deleting_paid_record_is_refused(api, collaborator):
    record = create_record(api, collaborator["id"], daily_pay="50.00").json()["record"]
    pay(api, collaborator["id"], "50.00")

    response = api.delete(f"/api/v1/personnel/records/{record['id']}")

    assert response.status_code == 400
    assert api.get(f"/api/v1/personnel/records/{record['id']}").status_code == 200

def test_update_and_delete_payroll_payment(api, collaborator):
    create_record(api, collaborator["id"], daily_pay="50.00")
    payment = pay(api, collaborator["id"], "20.00").json()["payment"]

    response = api.put(f"/api/v1/personnel/payments/{payment['id']}", {"method": "cheque", "notes": "Quincena"})
    assert response.status_code == 200
    assert response.json()["payment"]["method"] == "cheque"
    assert Decimal(response.json()["payment"]["amount"]) == Decimal("20.00")

    assert api.delete(f"/api/v1/personnel/payments/{payment['id']}").status_code == 200
    assert api.get(f"/api/v1/personnel/payments/{payment['id']}").status_code == 404

def test_summary(api, collaborator):
    create_record(api, collaborator["id"], daily_pay="50.00")
    create_record(api, collaborator["id"], daily_pay="50.00", advance="20.00")
    pay(api, collaborator["id"], "30.00")

    summary = api.get(f"/api/v1/personnel/collaborators/{collaborator['id']}/summary").json()

    assert summary["records_count"] == 2
    assert summary["payments_count"] == 1
    assert summary["days_worked"] == 2
    assert Decimal(summary["total_generated"]) == Decimal("80.00")
    assert Decimal(summary["total_paid"]) == Decimal("30.00")
    assert Decimal(summary["pending_balance"]) == Decimal("50.00")
    assert Decimal(summary["last_payment"]["amount"]) == Decimal("30.00")

def test_personnel_is_scoped_by_owner(api, other_api, collaborator):
    record = create_record(api, collaborator["id"]).json()["record"]

    assert other_api.get(f"/api/v1/personnel/records/{record['id']}").status_code == 404
    assert create_record(other_api, collaborator["id"]).status_code == 404
