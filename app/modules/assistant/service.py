from typing import List, Optional
from decimal import Decimal
from sqlalchemy.orm import Session
import logging

from .flows import (
    advance, Command, CommandType, CatalogCollaborator, CatalogProduct,
    CatalogSale, CatalogPayment, DEFAULT_MATCHER
)
from .intents import IntentMatcher
from .schemas import AssistantReply
from .store import FlowStore
from app.core.exceptions import LedgerError
from app.modules.collaborators.repository import CollaboratorRepository
from app.modules.collaborators.schemas import CollaboratorCreate
from app.modules.collaborators.service import CollaboratorService
from app.modules.payments.schemas import PaymentCreate
from app.modules.payments.service import PaymentService
from app.modules.products.repository import ProductRepository
from app.modules.products.schemas import ProductCreate
from app.modules.products.service import ProductService
from app.modules.sales.schemas import SaleCreate, SaleItemCreate
from app.modules.sales.service import SalesService
from app.shared.database.models import Product, Sale, Payment, Collaborator
from app.shared.database.scoped_repository import OwnerScopedRepository
from app.shared.services.debt_ledger import DebtLedger, SALE_PAID

logger = logging.getLogger(__name__)

class DatabaseCatalog(OwnerScopedRepository):
    """Lecturas que necesitan los flujos, filtradas por dueño"""

    def __init__(self, db: Session, owner_id: int):
        super().__init__(db, owner_id)
        self.collaborators = CollaboratorRepository(db, owner_id)
        self.product_repository = ProductRepository(db, owner_id)

    def find_collaborator(self, name: str) -> Optional[CatalogCollaborator]:
        collaborator = self.collaborators.find_by_name(name)
        return CatalogCollaborator(collaborator.id, collaborator.name) if collaborator else None

    def find_product(self, name: str) -> Optional[CatalogProduct]:
        product = self.product_repository.find_by_name(name)
        return self._product(product) if product else None

    def products(self) -> List[CatalogProduct]:
        return [
            self._product(p)
            for p in self.query(Product).order_by(Product.name, Product.id).all()
        ]

    def pending_sales(self, collaborator_id: int) -> List[CatalogSale]:
        sales = self.query(Sale).filter(
            Sale.collaborator_id == collaborator_id,
            Sale.payment_status != SALE_PAID
        ).order_by(Sale.sale_date, Sale.id).all()
        return [
            CatalogSale(s.id, s.total_amount, DebtLedger.pending_debt(s), s.sale_date)
            for s in sales
        ]

    def recent_payments(self, limit: int = 10) -> List[CatalogPayment]:
        rows = self.query(Payment).join(
            Collaborator, Payment.collaborator_id == Collaborator.id
        ).with_entities(
            Collaborator.name, Payment.amount_paid, Payment.payment_status, Payment.sale_id
        ).order_by(Payment.payment_date.desc(), Payment.id.desc()).limit(limit).all()
        return [CatalogPayment(name, amount, status, sale_id) for name, amount, status, sale_id in rows]

    @staticmethod
    def _product(product: Product) -> CatalogProduct:
        return CatalogProduct(product.id, product.name, product.remaining_quantity, product.unit_price)

class AssistantService:
    def __init__(
        self,
        db: Session,
        owner_id: int,
        store: FlowStore,
        matcher: IntentMatcher = DEFAULT_MATCHER
    ):
        self.db = db
        self.owner_id = owner_id
        self.store = store
        self.matcher = matcher
        self.catalog = DatabaseCatalog(db, owner_id)

    async def interact(self, message: str) -> AssistantReply:
        """Avanzar la conversación del dueño y ejecutar el comando resultante, si lo hay"""
        state = self.store.get(self.owner_id)
        transition = advance(state, message, self.catalog, self.matcher)

        if transition.state is None:
            self.store.clear(self.owner_id)
        else:
            self.store.save(self.owner_id, transition.state)

        reply = transition.reply
        if transition.command is not None:
            try:
                reply = await self._dispatch(transition.command)
            except LedgerError as e:
                logger.info(f"Asistente: comando {transition.command.type.value} rechazado ({e.error_code})")
                reply = f"No se pudo completar la operación: {e.message}"

        return AssistantReply(
            reply=reply,
            flow=transition.state.flow.value if transition.state else None,
            step=transition.state.step if transition.state else None
        )

    async def _dispatch(self, command: Command) -> str:
        payload = command.payload

        if command.type == CommandType.CREATE_COLLABORATOR:
            result = await CollaboratorService(self.db, self.owner_id).create_collaborator(
                CollaboratorCreate(name=payload["name"], phone=payload.get("phone"), email=payload.get("email"))
            )
            return f"Colaborador {result.collaborator.name} agregado exitosamente."

        if command.type == CommandType.DELETE_COLLABORATOR:
            await CollaboratorService(self.db, self.owner_id).delete_collaborator(payload["collaborator_id"])
            return f"El colaborador {payload['name']} ha sido eliminado exitosamente."

        if command.type == CommandType.CREATE_PRODUCT:
            result = await ProductService(self.db, self.owner_id).create_product(
                ProductCreate(
                    name=payload["name"],
                    unit_price=Decimal(payload["unit_price"]),
                    total_quantity=payload["total_quantity"]
                )
            )
            product = result.product
            return (
                f"Producto {product.name} agregado exitosamente con "
                f"{product.total_quantity} unidades a {product.unit_price} cada una."
            )

        if command.type == CommandType.DELETE_PRODUCT:
            await ProductService(self.db, self.owner_id).delete_product(payload["product_id"])
            return f"Producto {payload['name']} eliminado exitosamente."

        if command.type == CommandType.CREATE_SALE:
            result = await SalesService(self.db, self.owner_id).create_sale(
                SaleCreate(
                    collaborator_id=payload["collaborator_id"],
                    items=[SaleItemCreate(product_id=payload["product_id"], quantity=payload["quantity"])]
                )
            )
            return f"Venta registrada exitosamente. Monto total: {result.sale.total_amount}."

        if command.type == CommandType.CREATE_PAYMENT:
            result = await PaymentService(self.db, self.owner_id).create_payment(
                PaymentCreate(sale_id=payload["sale_id"], amount=Decimal(payload["amount"]))
            )
            payment = result.payment
            return (
                f"Cobro de {payment.amount_paid} para {payment.collaborator.name} registrado exitosamente. "
                f"Deuda pendiente de la venta: {payment.sale.pending_debt}."
            )

        raise ValueError(f"Comando no soportado: {command.type}")
