"""Pruebas de devoluciones: topes, montos, lotes y reversión exacta"""
from decimal import Decimal

import pytest

@pytest.fixture
def setup(api):
    collaborator = api.collaborator("Ana")
    shirt = api.product("Camisa", total_quantity=10, unit_price="25.00")
    cap = api.product("Gorra", total_quantity=10, unit_price="10.00")
    sale = api.sale(collaborator["id"], [
        {"product_id": shirt["id"], "quantity": 4},
        {"product_id": cap["id"], "quantity": 2},
    ])
    return sale, shirt, cap

def test_return_defaults_amount_to_unit_price(api, setup):
    sale, shirt, _ = setup

    response = api.sale_return(sale["id"], shirt["id"], 2)

    assert response.status_code == 201
    created = response.json()["returns"][0]
    assert Decimal(created["return_amount"]) == Decimal("50.00")
    assert Decimal(response.json()["sale"]["total_amount"]) == Decimal("70.00")
    assert response.json()["sale"]["quantity_returned"] == 2

    detail = api.get_sale(sale["id"])
    shirt_line = next(i for i in detail["items"] if i["product_id"] == shirt["id"])
    assert shirt_line["returned_quantity"] == 2

def test_cumulative_returns_cannot_exceed_sold(api, setup):
    sale, shirt, _ = setup
    assert api.sale_return(sale["id"], shirt["id"], 3).status_code == 201

    response = api.sale_return(sale["id"], shirt["id"], 2)

    assert response.status_code == 409
    body = response.json()
    assert body["error_code"] == "RETURN_EXCEEDS_SOLD"
    assert body["details"]["already_returned"] == 3
    assert api.get_product(shirt["id"])["sold_quantity"] == 1

def test_product_not_in_sale(api, setup):
    sale, _, _ = setup
    other = api.product("Otro")

    response = api.sale_return(sale["id"], other["id"], 1)

    assert response.status_code == 404

def test_explicit_amount_above_line_value_is_rejected(api, setup):
    sale, _, cap = setup

    response = api.sale_return(sale["id"], cap["id"], 1, return_amount="10.01")

    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"

def test_create_then_delete_restores_everything(api, setup):
    sale, shirt, _ = setup
    api.payment(sale["id"], "90.00")
    before_product = api.get_product(shirt["id"])
    before_sale = api.get_sale(sale["id"])

    created = api.sale_return(sale["id"], shirt["id"], 2).json()
    assert Decimal(created["returns"][0]["refunded_amount"]) == Decimal("20.00")
    assert created["sale"]["payment_status"] == "paid"

    response = api.delete(f"/api/v1/returns/{created['returns'][0]['id']}")

    assert response.status_code == 200
    after_product = api.get_product(shirt["id"])
    after_sale = api.get_sale(sale["id"])
    for field in ("total_quantity", "sold_quantity", "remaining_quantity"):
        assert after_product[field] == before_product[field]
    for field in ("total_amount", "amount_paid", "amount_returned", "quantity_returned", "payment_status"):
        assert after_sale[field] == before_sale[field]

def test_batch_is_all_or_nothing(api, setup):
    sale, shirt, cap = setup

    response = api.post("/api/v1/returns/batch", {
        "sale_id": sale["id"],
        "items": [
            {"product_id": shirt["id"], "quantity": 1, "reason": "Talla"},
            {"product_id": cap["id"], "quantity": 3, "reason": "Color"},
        ]
    })

    assert response.status_code == 409
    assert api.get("/api/v1/returns/").json()["total"] == 0
    assert api.get_product(shirt["id"])["sold_quantity"] == 4

    response = api.post("/api/v1/returns/batch", {
        "sale_id": sale["id"],
        "items": [
            {"product_id": shirt["id"], "quantity": 1, "reason": "Talla"},
            {"product_id": cap["id"], "quantity": 2, "reason": "Color"},
        ]
    })

    assert response.status_code == 201
    assert len(response.json()["returns"]) == 2
    assert Decimal(response.json()["sale"]["total_amount"]) == Decimal("75.00")

def test_blank_reason_is_invalid(api, setup):
    sale, shirt, _ = setup

    assert api.sale_return(sale["id"], shirt["id"], 1, reason="   ").status_code == 422

def test_get_and_list_returns(api, setup):
    sale, shirt, cap = setup
    first = api.sale_return(sale["id"], shirt["id"], 1).json()["returns"][0]
    api.sale_return(sale["id"], cap["id"], 1)

    detail = api.get(f"/api/v1/returns/{first['id']}").json()
    assert detail["product_name"] == "Camisa"
    assert detail["sale"]["id"] == sale["id"]

    by_product = api.get("/api/v1/returns/", params={"product_id": cap["id"]}).json()
    assert by_product["total"] == 1

def test_same_product_on_lines_with_different_prices(api):
    collaborator = api.collaborator("Ana")
    pin = api.product("Broche", total_quantity=5, unit_price="0.02")
    sale = api.sale(collaborator["id"], [
        {"product_id": pin["id"], "quantity": 1, "unit_price": "0.01"},
        {"product_id": pin["id"], "quantity": 1, "unit_price": "0.02"},
    ])
    assert Decimal(sale["total_amount"]) == Decimal("0.03")

    first = api.sale_return(sale["id"], pin["id"], 1).json()
    assert Decimal(first["returns"][0]["return_amount"]) == Decimal("0.02")
    assert Decimal(first["sale"]["total_amount"]) == Decimal("0.01")

    too_much = api.sale_return(sale["id"], pin["id"], 1, return_amount="0.02")
    assert too_much.status_code == 400
    assert too_much.json()["error_code"] == "VALIDATION_ERROR"

    last = api.sale_return(sale["id"], pin["id"], 1).json()
    assert Decimal(last["returns"][0]["return_amount"]) == Decimal("0.01")
    assert Decimal(last["sale"]["total_amount"]) == Decimal("0.00")
    assert Decimal(last["sale"]["amount_returned"]) == Decimal("0.03")

    assert api.delete(f"/api/v1/returns/{last['returns'][0]['id']}").status_code == 200
    assert Decimal(api.get_sale(sale["id"])["total_amount"]) == Decimal("0.01")

    assert api.delete(f"/api/v1/returns/{first['returns'][0]['id']}").status_code == 200
    restored = api.get_sale(sale["id"])
    assert Decimal(restored["total_amount"]) == Decimal("0.03")
    assert Decimal(restored["amount_returned"]) == Decimal("0.00")
    assert api.get_product(pin["id"])["sold_quantity"] == 2
