"""Pruebas del libro de stock sobre la base en memoria"""
import pytest

from app.core.exceptions import InsufficientStockError, NotFoundError, ValidationError
from app.shared.database.models import Product, InventoryMovement
from app.shared.services.inventory_service import InventoryService

@pytest.fixture
def products(db, owner):
    camisa = Product(owner_id=owner.id, name="Camisa", unit_price=25, total_quantity=10, sold_quantity=0, remaining_quantity=10)
    gorra = Product(owner_id=owner.id, name="Gorra", unit_price=10, total_quantity=2, sold_quantity=0, remaining_quantity=2)
    db.add_all([camisa, gorra])
    db.commit()
    return camisa, gorra

def assert_balanced(product):
    assert product.sold_quantity + product.remaining_quantity == product.total_quantity

def test_reserve_aggregates_lines_of_same_product(db, owner, products):
    camisa, gorra = products

    with pytest.raises(InsufficientStockError) as exc_info:
        InventoryService.validate_and_reserve_stock(db, [
            {"product_id": gorra.id, "quantity": 1},
            {"product_id": gorra.id, "quantity": 2},
        ], owner.id)

    assert exc_info.value.details["items"] == [{
        "product_id": gorra.id,
        "product_name": "Gorra",
        "available": 2,
        "requested": 3
    }]

def test_reserve_reports_every_failing_line(db, owner, products):
    camisa, gorra = products

    with pytest.raises(InsufficientStockError) as exc_info:
        InventoryService.validate_and_reserve_stock(db, [
            {"product_id": camisa.id, "quantity": 11},
            {"product_id": gorra.id, "quantity": 5},
        ], owner.id)

    assert [x["product_id"] for x in exc_info.value.details["items"]] == [camisa.id, gorra.id]
    assert "Stock insuficiente" in exc_info.value.message

def test_reserve_returns_locked_products(db, owner, products):
    camisa, gorra = products

    locked = InventoryService.validate_and_reserve_stock(db, [
        {"product_id": camisa.id, "quantity": 10},
        {"product_id": gorra.id, "quantity": 1},
    ], owner.id)

    assert set(locked) == {camisa.id, gorra.id}

def test_reserve_ignores_products_of_other_owner(db, owner, products):
    camisa, _ = products

    with pytest.raises(NotFoundError):
        InventoryService.validate_and_reserve_stock(db, [{"product_id": camisa.id, "quantity": 1}], owner.id + 1)

def test_increase_and_decrease_keep_counters_balanced(db, products):
    camisa, _ = products

    InventoryService.increase_sold(db, camisa, 4, reference_id=1)
    assert (camisa.sold_quantity, camisa.remaining_quantity) == (4, 6)
    assert_balanced(camisa)

    InventoryService.decrease_sold(db, camisa, 1, reference_id=1)
    assert (camisa.sold_quantity, camisa.remaining_quantity) == (3, 7)
    assert_balanced(camisa)

    db.commit()
    movements = db.query(InventoryMovement).filter(InventoryMovement.product_id == camisa.id).order_by(InventoryMovement.id).all()
    assert [(m.change_type, m.remaining_before, m.remaining_after) for m in movements] == [
        ("sale", 10, 6),
        ("return", 6, 7),
    ]

def test_increase_beyond_remaining_is_rejected(db, products):
    _, gorra = products

    with pytest.raises(InsufficientStockError):
        InventoryService.increase_sold(db, gorra, 3)

    assert (gorra.sold_quantity, gorra.remaining_quantity) == (0, 2)

def test_decrease_below_zero_is_clamped(db, products, caplog):
    camisa, _ = products
    InventoryService.increase_sold(db, camisa, 2)

    InventoryService.decrease_sold(db, camisa, 5)

    assert camisa.sold_quantity == 0
    assert camisa.remaining_quantity == camisa.total_quantity
    assert "Vendido negativo evitado" in caplog.text

def test_restock_and_adjust_total(db, products):
    camisa, _ = products
    InventoryService.increase_sold(db, camisa, 4)

    InventoryService.restock(db, camisa, 5)
    assert (camisa.total_quantity, camisa.remaining_quantity) == (15, 11)

    InventoryService.adjust_total(db, camisa, 4)
    assert (camisa.total_quantity, camisa.remaining_quantity) == (4, 0)
    assert_balanced(camisa)

    with pytest.raises(ValidationError):
        InventoryService.adjust_total(db, camisa, 3)
    with pytest.raises(ValidationError):
        InventoryService.restock(db, camisa, 0)
