from decimal import Decimal, ROUND_HALF_UP
from typing import Any
import logging

from app.shared.database.models import Sale
from app.core.exceptions import PaymentExceedsDebtError, ValidationError

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

SALE_PENDING = 'pending'
SALE_PARTIAL = 'partial'
SALE_PAID = 'paid'


def to_money(value: Any) -> Decimal:
    """Normalizar un monto a Decimal con 2 decimales"""
    if value is None:
        return ZERO
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class DebtLedger:
    """
    Libro de deuda de una venta.

    Mantiene amount_paid <= total_amount y payment_status derivado de ambos.
    Es el único punto que modifica esos campos.
    """

    @staticmethod
    def recompute_status(total_amount: Any, amount_paid: Any) -> str:
        total = to_money(total_amount)
        paid = to_money(amount_paid)
        if paid >= total:
            return SALE_PAID
        if paid > ZERO:
            return SALE_PARTIAL
        return SALE_PENDING

    @staticmethod
    def pending_debt(sale: Sale) -> Decimal:
        pending = to_money(sale.total_amount) - to_money(sale.amount_paid)
        return pending if pending > ZERO else ZERO

    @staticmethod
    def refresh_status(sale: Sale) -> None:
        sale.payment_status = DebtLedger.recompute_status(sale.total_amount, sale.amount_paid)

    @staticmethod
    def apply_payment(sale: Sale, amount: Any) -> None:
        amount = to_money(amount)
        pending = DebtLedger.pending_debt(sale)
        if amount > pending:
            raise PaymentExceedsDebtError(
                f"El monto ({amount}) excede la deuda pendiente ({pending})",
                details={"sale_id": sale.id, "pending": str(pending), "amount": str(amount)}
            )

        sale.amount_paid = to_money(sale.amount_paid) + amount
        DebtLedger.refresh_status(sale)

    @staticmethod
    def reverse_payment(sale: Sale, amount: Any) -> None:
        new_paid = to_money(sale.amount_paid) - to_money(amount)
        if new_paid < ZERO:
            logger.warning(
                f"Monto pagado negativo evitado en venta {sale.id}: "
                f"pagado={sale.amount_paid}, a revertir={amount}. Se fija en 0"
            )
            new_paid = ZERO

        sale.amount_paid = new_paid
        DebtLedger.refresh_status(sale)

    @staticmethod
    def apply_return(sale: Sale, amount: Any, quantity: int) -> Decimal:
        """
        Reducir el total de la venta por una devolución.

        Si el nuevo total queda por debajo de lo ya pagado, el excedente se
        reembolsa (se descuenta de amount_paid). Retorna el monto reembolsado.
        """
        amount = to_money(amount)
        new_total = to_money(sale.total_amount) - amount
        if new_total < ZERO:
            raise ValidationError(
                f"La devolución ({amount}) supera el total de la venta ({sale.total_amount})",
                details={"sale_id": sale.id, "total_amount": str(sale.total_amount), "return_amount": str(amount)}
            )

        paid = to_money(sale.amount_paid)
        refunded = paid - new_total if paid > new_total else ZERO

        sale.total_amount = new_total
        sale.amount_paid = paid - refunded
        sale.amount_returned = to_money(sale.amount_returned) + amount
        sale.quantity_returned = (sale.quantity_returned or 0) + quantity
        DebtLedger.refresh_status(sale)

        return refunded

    @staticmethod
    def reverse_return(sale: Sale, amount: Any, quantity: int, refunded: Any = ZERO) -> None:
        """Inverso exacto de apply_return"""
        amount = to_money(amount)

        sale.total_amount = to_money(sale.total_amount) + amount
        sale.amount_paid = to_money(sale.amount_paid) + to_money(refunded)

        returned = to_money(sale.amount_returned) - amount
        sale.amount_returned = returned if returned > ZERO else ZERO
        sale.quantity_returned = max((sale.quantity_returned or 0) - quantity, 0)
        DebtLedger.refresh_status(sale)
