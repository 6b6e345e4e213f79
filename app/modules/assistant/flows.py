# app/modules/assistant/flows.py
"""
Flujos conversacionales como máquina de estados pura.

advance(estado, mensaje, catálogo) -> Transition(nuevo_estado, respuesta, comando)

No accede a la base de datos ni modifica nada: las lecturas pasan por el
catálogo y las escrituras se devuelven como Command para que el servicio
las ejecute.
"""
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol
import re

from .intents import Intent, IntentMatcher, RegexIntentMatcher

EMAIL_REGEX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
SKIP_WORDS = {"-", "no", "ninguno", "omitir"}

class FlowType(str, Enum):
    ADD_COLLABORATOR = "add_collaborator"
    DELETE_COLLABORATOR = "delete_collaborator"
    ADD_PRODUCT = "add_product"
    DELETE_PRODUCT = "delete_product"
    RECORD_SALE = "record_sale"
    RECORD_PAYMENT = "record_payment"

FLOW_LABELS = {
    FlowType.ADD_COLLABORATOR: "agregar colaborador",
    FlowType.DELETE_COLLABORATOR: "eliminar colaborador",
    FlowType.ADD_PRODUCT: "agregar producto",
    FlowType.DELETE_PRODUCT: "eliminar producto",
    FlowType.RECORD_SALE: "registrar venta",
    FlowType.RECORD_PAYMENT: "registrar cobro",
}

class CommandType(str, Enum):
    CREATE_COLLABORATOR = "create_collaborator"
    DELETE_COLLABORATOR = "delete_collaborator"
    CREATE_PRODUCT = "create_product"
    DELETE_PRODUCT = "delete_product"
    CREATE_SALE = "create_sale"
    CREATE_PAYMENT = "create_payment"

@dataclass(frozen=True)
class FlowState:
    flow: FlowType
    step: str
    data: Dict[str, Any] = field(default_factory=dict)

@dataclass(frozen=True)
class Command:
    type: CommandType
    payload: Dict[str, Any]

@dataclass(frozen=True)
class Transition:
    state: Optional[FlowState]
    reply: str
    command: Optional[Command] = None

# ===== CATÁLOGO (SOLO LECTURA) =====

@dataclass(frozen=True)
class CatalogCollaborator:
    id: int
    name: str

@dataclass(frozen=True)
class CatalogProduct:
    id: int
    name: str
    remaining_quantity: int
    unit_price: Decimal

@dataclass(frozen=True)
class CatalogSale:
    id: int
    total_amount: Decimal
    pending_debt: Decimal
    sale_date: Any = None

@dataclass(frozen=True)
class CatalogPayment:
    collaborator_name: str
    amount: Decimal
    status: str
    sale_id: Optional[int] = None

class Catalog(Protocol):
    def find_collaborator(self, name: str) -> Optional[CatalogCollaborator]: ...
    def find_product(self, name: str) -> Optional[CatalogProduct]: ...
    def products(self) -> List[CatalogProduct]: ...
    def pending_sales(self, collaborator_id: int) -> List[CatalogSale]: ...
    def recent_payments(self, limit: int = 10) -> List[CatalogPayment]: ...

# ===== PARSEO =====

def parse_positive_int(text: str) -> Optional[int]:
    text = text.strip()
    if not text.isdigit():
        return None
    value = int(text)
    return value if value > 0 else None

def parse_positive_amount(text: str) -> Optional[Decimal]:
    try:
        value = Decimal(text.strip().replace(",", "."))
    except InvalidOperation:
        return None
    if not value.is_finite() or value <= 0:
        return None
    return value.quantize(Decimal("0.01"))

def _with(state: FlowState, step: str, **data) -> FlowState:
    return replace(state, step=step, data={**state.data, **data})

# ===== INICIO DE FLUJOS Y CONSULTAS =====

HELP_REPLY = (
    "No entendí tu mensaje. Puedo ayudarte a: agregar o eliminar colaboradores, "
    "agregar o eliminar productos, ver el inventario, registrar ventas, "
    "registrar cobros y ver cobros. Escribe 'cancelar' para salir de una operación."
)

def _start(intent: Intent, catalog: Catalog) -> Transition:
    if intent == Intent.ADD_COLLABORATOR:
        return Transition(
            FlowState(FlowType.ADD_COLLABORATOR, "name"),
            "¿Cuál es el nombre del colaborador que deseas agregar?"
        )
    if intent == Intent.DELETE_COLLABORATOR:
        return Transition(
            FlowState(FlowType.DELETE_COLLABORATOR, "name"),
            "¿Cuál es el nombre del colaborador que deseas eliminar?"
        )
    if intent == Intent.ADD_PRODUCT:
        return Transition(FlowState(FlowType.ADD_PRODUCT, "name"), "¿Qué producto deseas agregar?")
    if intent == Intent.DELETE_PRODUCT:
        return Transition(
            FlowState(FlowType.DELETE_PRODUCT, "name"),
            "Por favor, indica el nombre del producto que deseas eliminar."
        )
    if intent == Intent.RECORD_SALE:
        return Transition(
            FlowState(FlowType.RECORD_SALE, "collaborator"),
            "Por favor, indica el nombre del colaborador para la venta."
        )
    if intent == Intent.RECORD_PAYMENT:
        return Transition(
            FlowState(FlowType.RECORD_PAYMENT, "collaborator"),
            "¿Cuál es el nombre del colaborador para el cobro?"
        )
    if intent == Intent.LIST_INVENTORY:
        products = catalog.products()
        if not products:
            return Transition(None, "El inventario está vacío.")
        listing = "\n".join(
            f"{p.name}: {p.remaining_quantity} unidades a {p.unit_price}" for p in products
        )
        return Transition(None, f"Inventario disponible:\n{listing}")
    if intent == Intent.LIST_PAYMENTS:
        payments = catalog.recent_payments()
        if not payments:
            return Transition(None, "No hay cobros registrados.")
        listing = "\n".join(
            f"{p.collaborator_name}: {p.amount} ({p.status})" for p in payments
        )
        return Transition(None, f"Cobros registrados:\n{listing}")
    return Transition(None, HELP_REPLY)

# ===== PASOS POR FLUJO =====

def _add_collaborator(state: FlowState, text: str, catalog: Catalog) -> Transition:
    if state.step == "name":
        if not text:
            return Transition(state, "Por favor, ingresa un nombre válido.")
        return Transition(
            _with(state, "phone", name=text),
            f"Perfecto, ahora dime el teléfono del colaborador {text} (o '-' para omitir)."
        )
    if state.step == "phone":
        phone = None if text.lower() in SKIP_WORDS else text
        return Transition(
            _with(state, "email", phone=phone),
            f"Gracias, ahora ingresa el correo electrónico de {state.data['name']} (o '-' para omitir)."
        )
    email = None if text.lower() in SKIP_WORDS else text
    if email is not None and not EMAIL_REGEX.match(email):
        return Transition(state, "Por favor, ingresa un correo electrónico válido (o '-' para omitir).")
    return Transition(
        None,
        f"Agregando colaborador {state.data['name']}...",
        Command(CommandType.CREATE_COLLABORATOR, {
            "name": state.data["name"],
            "phone": state.data.get("phone"),
            "email": email
        })
    )

def _delete_collaborator(state: FlowState, text: str, catalog: Catalog) -> Transition:
    collaborator = catalog.find_collaborator(text)
    if collaborator is None:
        return Transition(state, f"No se encontró un colaborador con el nombre {text}. Intenta nuevamente.")
    return Transition(
        None,
        f"Eliminando colaborador {collaborator.name}...",
        Command(CommandType.DELETE_COLLABORATOR, {"collaborator_id": collaborator.id, "name": collaborator.name})
    )

def _add_product(state: FlowState, text: str, catalog: Catalog) -> Transition:
    if state.step == "name":
        if not text:
            return Transition(state, "Por favor, ingresa un nombre de producto válido.")
        return Transition(
            _with(state, "quantity", name=text),
            f"Perfecto, ahora dime la cantidad de {text} que deseas agregar."
        )
    if state.step == "quantity":
        quantity = parse_positive_int(text)
        if quantity is None:
            return Transition(state, "Por favor, ingresa una cantidad válida (un número mayor a cero).")
        return Transition(
            _with(state, "price", quantity=quantity),
            f"Ahora, dime el precio de {state.data['name']}."
        )
    price = parse_positive_amount(text)
    if price is None:
        return Transition(state, "Por favor, ingresa un precio válido para el producto.")
    return Transition(
        None,
        f"Agregando producto {state.data['name']}...",
        Command(CommandType.CREATE_PRODUCT, {
            "name": state.data["name"],
            "total_quantity": state.data["quantity"],
            "unit_price": str(price)
        })
    )

def _delete_product(state: FlowState, text: str, catalog: Catalog) -> Transition:
    product = catalog.find_product(text)
    if product is None:
        return Transition(state, f"No se encontró ningún producto con el nombre \"{text}\". Verifica el nombre.")
    return Transition(
        None,
        f"Eliminando producto {product.name}...",
        Command(CommandType.DELETE_PRODUCT, {"product_id": product.id, "name": product.name})
    )

def _record_sale(state: FlowState, text: str, catalog: Catalog) -> Transition:
    if state.step == "collaborator":
        collaborator = catalog.find_collaborator(text)
        if collaborator is None:
            return Transition(state, f"No se encontró colaborador con el nombre {text}.")
        products = [p for p in catalog.products() if p.remaining_quantity > 0]
        if not products:
            return Transition(None, "El inventario está vacío. No se puede proceder con la venta.")
        options = [
            {"id": p.id, "name": p.name, "remaining": p.remaining_quantity} for p in products
        ]
        listing = "\n".join(
            f"{i}. {p.name} (disponibles: {p.remaining_quantity}, precio: {p.unit_price})"
            for i, p in enumerate(products, start=1)
        )
        return Transition(
            _with(state, "product", collaborator_id=collaborator.id,
                  collaborator_name=collaborator.name, options=options),
            f"Selecciona el número del producto a vender:\n{listing}"
        )
    if state.step == "product":
        index = parse_positive_int(text)
        options = state.data["options"]
        if index is None or index > len(options):
            return Transition(
                state,
                "Selección inválida. Por favor, ingresa un número correspondiente a uno de los productos."
            )
        selected = options[index - 1]
        return Transition(
            _with(state, "quantity", product=selected),
            f"Has seleccionado {selected['name']}. ¿Cuántas unidades deseas vender? "
            f"(Disponibles: {selected['remaining']})"
        )
    quantity = parse_positive_int(text)
    if quantity is None:
        return Transition(state, "Por favor, ingresa una cantidad válida (un número mayor a cero).")
    product = state.data["product"]
    if quantity > product["remaining"]:
        return Transition(
            state,
            f"No hay suficiente stock. Solo quedan {product['remaining']} unidades disponibles."
        )
    return Transition(
        None,
        "Registrando venta...",
        Command(CommandType.CREATE_SALE, {
            "collaborator_id": state.data["collaborator_id"],
            "product_id": product["id"],
            "quantity": quantity
        })
    )

def _record_payment(state: FlowState, text: str, catalog: Catalog) -> Transition:
    if state.step == "collaborator":
        collaborator = catalog.find_collaborator(text)
        if collaborator is None:
            return Transition(state, f"No se encontró colaborador con el nombre {text}.")
        sales = catalog.pending_sales(collaborator.id)
        if not sales:
            return Transition(None, f"{collaborator.name} no tiene deudas pendientes.")
        options = [{"id": s.id, "pending": str(s.pending_debt)} for s in sales]
        if len(sales) == 1:
            return Transition(
                _with(state, "amount", collaborator_name=collaborator.name, sale=options[0]),
                f"Colaborador {collaborator.name} encontrado. ¿Cuál es el monto pagado? "
                f"(Deuda pendiente: {sales[0].pending_debt})"
            )
        listing = "\n".join(
            f"{i}. Venta #{s.id}: total {s.total_amount}, pendiente {s.pending_debt}"
            for i, s in enumerate(sales, start=1)
        )
        return Transition(
            _with(state, "sale", collaborator_name=collaborator.name, options=options),
            f"{collaborator.name} tiene varias ventas con deuda. Selecciona el número de la venta:\n{listing}"
        )
    if state.step == "sale":
        index = parse_positive_int(text)
        options = state.data["options"]
        if index is None or index > len(options):
            return Transition(state, "Número inválido. Por favor, ingresa un número válido de la lista mostrada.")
        selected = options[index - 1]
        return Transition(
            _with(state, "amount", sale=selected),
            f"¿Cuál es el monto pagado? (Deuda pendiente: {selected['pending']})"
        )
    amount = parse_positive_amount(text)
    if amount is None:
        return Transition(state, "Por favor, ingresa un monto válido (un número mayor a cero).")
    sale = state.data["sale"]
    if amount > Decimal(sale["pending"]):
        return Transition(
            state,
            f"El monto pagado ({amount}) excede la deuda pendiente ({sale['pending']}). "
            f"Ingresa un monto menor o escribe 'cancelar'."
        )
    return Transition(
        None,
        "Registrando cobro...",
        Command(CommandType.CREATE_PAYMENT, {"sale_id": sale["id"], "amount": str(amount)})
    )

STEP_HANDLERS = {
    FlowType.ADD_COLLABORATOR: _add_collaborator,
    FlowType.DELETE_COLLABORATOR: _delete_collaborator,
    FlowType.ADD_PRODUCT: _add_product,
    FlowType.DELETE_PRODUCT: _delete_product,
    FlowType.RECORD_SALE: _record_sale,
    FlowType.RECORD_PAYMENT: _record_payment,
}

DEFAULT_MATCHER = RegexIntentMatcher()

def advance(
    state: Optional[FlowState],
    message: str,
    catalog: Catalog,
    matcher: IntentMatcher = DEFAULT_MATCHER
) -> Transition:
    """Calcular la siguiente transición de la conversación"""
    text = (message or "").strip()
    intent = matcher.match(text)

    if intent == Intent.CANCEL:
        if state is None:
            return Transition(None, "No hay ninguna operación en curso para cancelar.")
        return Transition(
            None,
            f"Se ha cancelado la operación de {FLOW_LABELS[state.flow]}. ¿En qué más puedo ayudarte?"
        )

    if state is not None:
        return STEP_HANDLERS[state.flow](state, text, catalog)

    return _start(intent, catalog)
