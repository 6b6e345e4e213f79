"""Pruebas de la API de productos"""
from decimal import Decimal

def test_create_product_starts_with_remaining_equal_total(api):
    product = api.product("Camisa", total_quantity=10, unit_price="25.00", purchase_price="12.50")

    assert product["total_quantity"] == 10
    assert product["sold_quantity"] == 0
    assert product["remaining_quantity"] == 10
    assert Decimal(product["unit_price"]) == Decimal("25.00")

def test_purchase_price_above_unit_price_is_invalid(api):
    response = api.post("/api/v1/products/", {
        "name": "Camisa",
        "unit_price": "10.00",
        "purchase_price": "12.00"
    })

    assert response.status_code == 422
    assert response.json()["error_code"] == "VALIDATION_ERROR"

def test_list_search_and_pagination(api):
    for name in ("Camisa azul", "Camisa roja", "Gorra"):
        api.product(name)
    api.product("Agotado", total_quantity=0)

    page = api.get("/api/v1/products/", params={"page": 1, "limit": 2}).json()
    assert page["total"] == 4
    assert page["pages"] == 2
    assert len(page["items"]) == 2

    found = api.get("/api/v1/products/", params={"search": "camisa"}).json()
    assert {p["name"] for p in found["items"]} == {"Camisa azul", "Camisa roja"}

    in_stock = api.get("/api/v1/products/", params={"in_stock_only": True}).json()
    assert "Agotado" not in {p["name"] for p in in_stock["items"]}

def test_limit_above_maximum_is_rejected(api):
    assert api.get("/api/v1/products/", params={"limit": 1000}).status_code == 422

def test_restock_and_update_total(api):
    product = api.product(total_quantity=5)
    collaborator = api.collaborator()
    api.sale(collaborator["id"], [{"product_id": product["id"], "quantity": 3}])

    response = api.post(f"/api/v1/products/{product['id']}/restock", {"quantity": 4})
    assert response.status_code == 200
    restocked = response.json()["product"]
    assert (restocked["total_quantity"], restocked["sold_quantity"], restocked["remaining_quantity"]) == (9, 3, 6)

    response = api.put(f"/api/v1/products/{product['id']}", {"total_quantity": 2})
    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"

    response = api.put(f"/api/v1/products/{product['id']}", {"total_quantity": 3, "name": "Camisa XL"})
    updated = response.json()["product"]
    assert updated["name"] == "Camisa XL"
    assert (updated["total_quantity"], updated["remaining_quantity"]) == (3, 0)

def test_update_price_keeps_purchase_below_unit(api):
    product = api.product(unit_price="25.00", purchase_price="20.00")

    response = api.put(f"/api/v1/products/{product['id']}", {"unit_price": "15.00"})

    assert response.status_code == 400
    assert Decimal(api.get_product(product["id"])["unit_price"]) == Decimal("25.00")

def test_delete_product_guard(api):
    sold = api.product("Vendido")
    unused = api.product("Sin ventas")
    collaborator = api.collaborator()
    api.sale(collaborator["id"], [{"product_id": sold["id"], "quantity": 1}])

    response = api.delete(f"/api/v1/products/{sold['id']}")
    assert response.status_code == 409
    assert response.json()["error_code"] == "PRODUCT_HAS_SALES"

    response = api.delete(f"/api/v1/products/{unused['id']}")
    assert response.status_code == 200
    assert response.json()["id"] == unused["id"]
    assert api.get(f"/api/v1/products/{unused['id']}").status_code == 404
