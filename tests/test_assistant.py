"""
Pruebas del asistente conversacional: clasificación de intenciones, transiciones
puras con un catálogo falso y el endpoint completo contra la base.
"""
from decimal import Decimal

import pytest

from app.modules.assistant.flows import (
    advance, CatalogCollaborator, CatalogProduct, CatalogSale, CatalogPayment,
    CommandType, FlowType, HELP_REPLY, parse_positive_amount, parse_positive_int
)
from app.modules.assistant.intents import Intent, RegexIntentMatcher

class FakeCatalog:
    def __init__(self, collaborators=(), products=(), sales=None, payments=()):
        self._collaborators = {c.name.lower(): c for c in collaborators}
        self._products = list(products)
        self._sales = sales or {}
        self._payments = list(payments)

    def find_collaborator(self, name):
        return self._collaborators.get(name.strip().lower())

    def find_product(self, name):
        return next((p for p in self._products if p.name.lower() == name.strip().lower()), None)

    def products(self):
        return self._products

    def pending_sales(self, collaborator_id):
        return self._sales.get(collaborator_id, [])

    def recent_payments(self, limit=10):
        return self._payments[:limit]

ANA = CatalogCollaborator(1, "Ana")
CAMISA = CatalogProduct(1, "Camisa", 5, Decimal("25.00"))
GORRA = CatalogProduct(2, "Gorra", 0, Decimal("10.00"))

def run(messages, catalog):
    state = None
    transitions = []
    for message in messages:
        transition = advance(state, message, catalog)
        transitions.append(transition)
        state = transition.state
    return transitions

# --- Intenciones ---

@pytest.mark.parametrize("message, intent", [
    ("Quiero agregar un colaborador", Intent.ADD_COLLABORATOR),
    ("borrar colaborador", Intent.DELETE_COLLABORATOR),
    ("añadir producto nuevo", Intent.ADD_PRODUCT),
    ("eliminar el producto", Intent.DELETE_PRODUCT),
    ("¿qué tenemos en el inventario?", Intent.LIST_INVENTORY),
    ("registrar una venta", Intent.RECORD_SALE),
    ("registrar cobro", Intent.RECORD_PAYMENT),
    ("ver cobros", Intent.LIST_PAYMENTS),
    ("CANCELAR", Intent.CANCEL),
    ("hola", Intent.UNKNOWN),
])
def test_regex_matcher(message, intent):
    assert RegexIntentMatcher().match(message) == intent

def test_parsers():
    assert parse_positive_int("3") == 3
    assert parse_positive_int("0") is None
    assert parse_positive_int("-2") is None
    assert parse_positive_amount("12,5") == Decimal("12.50")
    assert parse_positive_amount("abc") is None
    assert parse_positive_amount("0") is None

# --- Flujos puros ---

def test_unknown_message_shows_help():
    transition = advance(None, "hola", FakeCatalog())

    assert transition.state is None
    assert transition.reply == HELP_REPLY

def test_cancel_with_and_without_flow():
    assert advance(None, "cancelar", FakeCatalog()).reply == "No hay ninguna operación en curso para cancelar."

    started, cancelled = run(["agregar colaborador", "cancelar"], FakeCatalog())
    assert started.state.flow == FlowType.ADD_COLLABORATOR
    assert cancelled.state is None
    assert cancelled.command is None
    assert "agregar colaborador" in cancelled.reply

def test_add_collaborator_flow():
    transitions = run(["agregar colaborador", "Beto", "-", "correo-invalido", "beto@negocio.com"], FakeCatalog())

    assert transitions[1].state.step == "phone"
    assert transitions[3].state.step == "email"
    final = transitions[-1]
    assert final.state is None
    assert final.command.type == CommandType.CREATE_COLLABORATOR
    assert final.command.payload == {"name": "Beto", "phone": None, "email": "beto@negocio.com"}

def test_delete_collaborator_retries_unknown_name():
    transitions = run(["eliminar colaborador", "Nadie", "ana"], FakeCatalog(collaborators=[ANA]))

    assert transitions[1].state.flow == FlowType.DELETE_COLLABORATOR
    assert transitions[2].command.payload == {"collaborator_id": 1, "name": "Ana"}

def test_add_product_validates_quantity_and_price():
    transitions = run(["agregar producto", "Pantalón", "cero", "4", "gratis", "30,50"], FakeCatalog())

    assert transitions[2].state.step == "quantity"
    assert transitions[4].state.step == "price"
    assert transitions[-1].command.payload == {"name": "Pantalón", "total_quantity": 4, "unit_price": "30.50"}

def test_record_sale_lists_only_products_in_stock():
    catalog = FakeCatalog(collaborators=[ANA], products=[CAMISA, GORRA])

    transitions = run(["registrar venta", "Ana", "2", "1", "9", "3"], catalog)

    assert "Camisa" in transitions[1].reply
    assert "Gorra" not in transitions[1].reply
    assert transitions[2].state.step == "product"
    assert transitions[4].reply.startswith("No hay suficiente stock")
    assert transitions[-1].command.type == CommandType.CREATE_SALE
    assert transitions[-1].command.payload == {"collaborator_id": 1, "product_id": 1, "quantity": 3}

def test_record_sale_with_empty_inventory_ends_flow():
    transitions = run(["registrar venta", "Ana"], FakeCatalog(collaborators=[ANA], products=[GORRA]))

    assert transitions[-1].state is None
    assert "inventario está vacío" in transitions[-1].reply

def test_record_payment_with_several_sales():
    catalog = FakeCatalog(collaborators=[ANA], sales={1: [
        CatalogSale(10, Decimal("100.00"), Decimal("40.00")),
        CatalogSale(11, Decimal("50.00"), Decimal("50.00")),
    ]})

    transitions = run(["registrar cobro", "Ana", "2", "60", "50"], catalog)

    assert transitions[1].state.step == "sale"
    assert transitions[2].state.step == "amount"
    assert "excede la deuda pendiente" in transitions[3].reply
    assert transitions[-1].command.payload == {"sale_id": 11, "amount": "50.00"}

def test_record_payment_without_debt():
    transitions = run(["registrar cobro", "Ana"], FakeCatalog(collaborators=[ANA]))

    assert transitions[-1].state is None
    assert transitions[-1].reply == "Ana no tiene deudas pendientes."

def test_list_intents_answer_from_catalog():
    catalog = FakeCatalog(products=[CAMISA], payments=[CatalogPayment("Ana", Decimal("20.00"), "partial", 10)])

    assert "Camisa: 5 unidades" in advance(None, "ver inventario", catalog).reply
    assert "Ana: 20.00 (partial)" in advance(None, "ver cobros", catalog).reply
    assert advance(None, "ver inventario", FakeCatalog()).reply == "El inventario está vacío."

# --- Endpoint ---

def say(api, message):
    response = api.post("/api/v1/assistant/interact", {"message": message})
    assert response.status_code == 200, response.text
    return response.json()

def test_assistant_endpoint_runs_full_flows(api, flow_store):
    for message in ("agregar colaborador", "Ana", "-", "-"):
        reply = say(api, message)
    assert reply["reply"] == "Colaborador Ana agregado exitosamente."
    assert reply["flow"] is None

    for message in ("agregar producto", "Camisa", "10", "25"):
        reply = say(api, message)
    assert reply["reply"].startswith("Producto Camisa agregado exitosamente")

    for message in ("registrar venta", "ana", "1", "4"):
        reply = say(api, message)
    assert reply["reply"] == "Venta registrada exitosamente. Monto total: 100.00."
    assert api.get("/api/v1/products/").json()["items"][0]["remaining_quantity"] == 6

    for message in ("registrar cobro", "Ana", "60"):
        reply = say(api, message)
    assert "Deuda pendiente de la venta: 40.00" in reply["reply"]

    assert "Ana: 60.00 (partial)" in say(api, "ver cobros")["reply"]

def test_assistant_reports_ledger_errors(api, flow_store):
    collaborator = api.collaborator("Ana")
    product = api.product("Camisa")
    api.sale(collaborator["id"], [{"product_id": product["id"], "quantity": 1}])

    for message in ("eliminar producto", "camisa"):
        reply = say(api, message)

    assert reply["reply"].startswith("No se pudo completar la operación:")
    assert api.get(f"/api/v1/products/{product['id']}").status_code == 200

def test_assistant_state_is_kept_per_owner(api, other_api, flow_store):
    assert say(api, "agregar producto")["step"] == "name"

    reply = say(other_api, "Camisa")
    assert reply["flow"] is None
    assert reply["reply"] == HELP_REPLY

    assert say(api, "Camisa")["step"] == "quantity"
