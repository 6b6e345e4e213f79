"""Pruebas de cobros: validación de deuda, reversión y deuda por colaborador"""
from decimal import Decimal

import pytest

from app.core.exceptions import ValidationError
from app.modules.payments.service import PaymentService
from app.shared.database.models import Sale

@pytest.fixture
def sale(api):
    collaborator = api.collaborator("Ana")
    product = api.product(total_quantity=10, unit_price="25.00")
    return api.sale(collaborator["id"], [{"product_id": product["id"], "quantity": 4}])

def test_payment_response_includes_sale_and_collaborator(api, sale):
    response = api.payment(sale["id"], "40.00", cash="30.00", digital_wallet="10.00")

    assert response.status_code == 201
    payment = response.json()["payment"]
    assert payment["payment_status"] == "partial"
    assert Decimal(payment["cash"]) == Decimal("30.00")
    assert payment["collaborator"]["name"] == "Ana"
    assert Decimal(payment["sale"]["pending_debt"]) == Decimal("60.00")
    assert payment["sale"]["payment_status"] == "partial"

def test_payment_on_fully_paid_sale(api, sale):
    assert api.payment(sale["id"], "100.00").status_code == 201

    response = api.payment(sale["id"], "1.00")

    assert response.status_code == 409
    assert response.json()["error_code"] == "SALE_FULLY_PAID"

def test_non_positive_amount_is_invalid(api, sale):
    assert api.payment(sale["id"], "0").status_code == 422
    assert api.payment(sale["id"], "-5").status_code == 422

def test_create_then_delete_restores_sale(api, sale):
    before = api.get_sale(sale["id"])
    payment = api.payment(sale["id"], "100.00").json()["payment"]
    assert api.get_sale(sale["id"])["payment_status"] == "paid"

    response = api.delete(f"/api/v1/payments/{payment['id']}")

    assert response.status_code == 200
    assert response.json()["sale"]["payment_status"] == "pending"
    after = api.get_sale(sale["id"])
    assert (after["amount_paid"], after["payment_status"], after["total_amount"]) == (
        before["amount_paid"], before["payment_status"], before["total_amount"]
    )

def test_update_changes_only_informative_fields(api, sale):
    payment = api.payment(sale["id"], "50.00").json()["payment"]

    response = api.put(f"/api/v1/payments/{payment['id']}", {
        "contingency": "5.00",
        "notes": "Descuento por flete"
    })

    assert response.status_code == 200
    updated = response.json()["payment"]
    assert Decimal(updated["contingency"]) == Decimal("5.00")
    assert Decimal(updated["amount_paid"]) == Decimal("50.00")
    assert updated["notes"] == "Descuento por flete"

def test_delete_payment_refused_when_return_refunded(api, sale):
    payment = api.payment(sale["id"], "100.00").json()["payment"]
    response = api.sale_return(sale["id"], sale["items"][0]["product_id"], 1)
    assert Decimal(response.json()["returns"][0]["refunded_amount"]) == Decimal("25.00")

    response = api.delete(f"/api/v1/payments/{payment['id']}")

    assert response.status_code == 409
    assert response.json()["error_code"] == "SALE_HAS_RETURNS"

def test_collaborator_debt(api, sale):
    second = api.sale(sale["collaborator"]["id"], [{"product_id": sale["items"][0]["product_id"], "quantity": 2}])
    api.payment(sale["id"], "100.00")
    api.payment(second["id"], "20.00")

    response = api.get(f"/api/v1/payments/collaborators/{sale['collaborator']['id']}/debt")

    assert response.status_code == 200
    debt = response.json()
    assert debt["sales_count"] == 2
    assert Decimal(debt["total_sold"]) == Decimal("150.00")
    assert Decimal(debt["total_paid"]) == Decimal("120.00")
    assert Decimal(debt["pending_debt"]) == Decimal("30.00")
    assert [s["id"] for s in debt["pending_sales"]] == [second["id"]]

def test_list_and_get(api, sale):
    first = api.payment(sale["id"], "10.00").json()["payment"]
    api.payment(sale["id"], "15.00")

    listing = api.get("/api/v1/payments/", params={"collaborator_id": sale["collaborator"]["id"]}).json()
    assert listing["total"] == 2

    response = api.get(f"/api/v1/payments/{first['id']}")
    assert response.status_code == 200
    assert response.json()["sale"]["id"] == sale["id"]
    assert api.get("/api/v1/payments/999").status_code == 404

def test_sub_cent_amount_is_invalid(api, sale):
    response = api.payment(sale["id"], "0.001")

    assert response.status_code == 422
    assert response.json()["error_code"] == "VALIDATION_ERROR"
    assert api.get_sale(sale["id"])["payment_status"] == "pending"

def test_amount_rounding_to_zero_is_rejected_by_service():
    sale = Sale(id=1, total_amount=Decimal("100.00"), amount_paid=Decimal("0.00"))

    with pytest.raises(ValidationError):
        PaymentService.record_payment(None, sale, Decimal("0.004"))

    assert sale.amount_paid == Decimal("0.00")
