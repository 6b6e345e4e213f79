from typing import Optional
from decimal import Decimal
from sqlalchemy.orm import Session
from dateutil.relativedelta import relativedelta
import logging

from .repository import PersonnelRepository
from .schemas import (
    AdjustmentKind, PersonnelRecordCreate, AdjustmentCreate, PersonnelRecordInfo,
    PersonnelRecordResponse, PayrollPaymentCreate, PayrollPaymentUpdate,
    PayrollPaymentInfo, PayrollPaymentResponse, PersonnelSummary
)
from app.core.exceptions import ValidationError, PaymentExceedsDebtError
from app.shared.database.models import Collaborator, PersonnelRecord, PayrollPayment, utcnow
from app.shared.database.transaction import run_atomic
from app.shared.schemas.common import PaginatedResponse, DeleteResponse
from app.shared.schemas.ledger import CollaboratorRef
from app.shared.services.debt_ledger import to_money, ZERO

logger = logging.getLogger(__name__)

PAYROLL_PAID = 'paid'
PAYROLL_PARTIAL = 'partial'

class PersonnelService:
    """
    Libro de compensación de colaboradores, paralelo al de ventas.

    saldo pendiente = Σ(jornal - faltante - adelanto) - Σ(pagos realizados), nunca negativo.
    Las operaciones de un colaborador se serializan bloqueando su fila.
    """

    def __init__(self, db: Session, owner_id: int):
        self.db = db
        self.owner_id = owner_id
        self.repository = PersonnelRepository(db, owner_id)

    def pending_balance(self, collaborator_id: int) -> Decimal:
        self.db.flush()
        return (
            self.repository.total_generated(collaborator_id)
            - self.repository.total_paid(collaborator_id)
        )

    def _ensure_not_negative(self, collaborator: Collaborator) -> Decimal:
        pending = self.pending_balance(collaborator.id)
        if pending < ZERO:
            raise ValidationError(
                f"La operación dejaría un saldo negativo ({pending}) para {collaborator.name}: "
                f"ya se pagó más de lo generado",
                details={"collaborator_id": collaborator.id, "pending_balance": str(pending)}
            )
        return pending

    # ===== REGISTROS =====

    async def create_record(self, record_data: PersonnelRecordCreate) -> PersonnelRecordResponse:
        """Crear registro; días laborados = último registro + 1 (o 1 si es el primero)"""
        def operation():
            collaborator = self.repository.get_collaborator(record_data.collaborator_id, lock=True)
            latest = self.repository.latest_record(collaborator.id)

            record = self.repository.add(PersonnelRecord(
                collaborator_id=collaborator.id,
                record_date=record_data.record_date or utcnow(),
                description=record_data.description,
                amount=to_money(record_data.amount),
                shortage=to_money(record_data.shortage),
                advance=to_money(record_data.advance),
                daily_pay=to_money(record_data.daily_pay),
                days_worked=latest.days_worked + 1 if latest else 1
            ))
            pending = self._ensure_not_negative(collaborator)
            return record, pending

        record, pending = run_atomic(self.db, operation, "registro de gestión personal")
        logger.info(
            f"Registro de gestión creado: #{record.id} colaborador={record.collaborator_id} "
            f"día={record.days_worked} neto={record.net_earned}"
        )

        return PersonnelRecordResponse(
            success=True,
            message="Registro creado exitosamente",
            record=PersonnelRecordInfo.model_validate(record),
            pending_balance=pending
        )

    async def add_adjustment(self, collaborator_id: int, adjustment: AdjustmentCreate) -> PersonnelRecordResponse:
        """
        Aplicar gasto ocasional, faltante o adelanto al último registro del
        colaborador (se crea uno si no existe)
        """
        def operation():
            collaborator = self.repository.get_collaborator(collaborator_id, lock=True)
            record = self.repository.latest_record(collaborator.id)
            description = (adjustment.description or "").strip()

            if record is None:
                record = self.repository.add(PersonnelRecord(
                    collaborator_id=collaborator.id,
                    record_date=utcnow(),
                    description=description or "Ajuste",
                    amount=ZERO,
                    shortage=ZERO,
                    advance=ZERO,
                    daily_pay=ZERO,
                    days_worked=1
                ))
                description = ""

            amount = to_money(adjustment.amount)
            if adjustment.kind == AdjustmentKind.EXPENSE:
                record.amount = to_money(record.amount) + amount
                if description:
                    record.description = f"{record.description}, {description}" if record.description else description
            elif adjustment.kind == AdjustmentKind.SHORTAGE:
                record.shortage = to_money(record.shortage) + amount
            else:
                record.advance = to_money(record.advance) + amount

            pending = self._ensure_not_negative(collaborator)
            return record, pending

        record, pending = run_atomic(self.db, operation, "ajuste de gestión personal")
        logger.info(
            f"Ajuste {adjustment.kind.value} de {adjustment.amount} aplicado al registro #{record.id}"
        )

        return PersonnelRecordResponse(
            success=True,
            message="Ajuste aplicado exitosamente",
            record=PersonnelRecordInfo.model_validate(record),
            pending_balance=pending
        )

    async def get_record(self, record_id: int) -> PersonnelRecordInfo:
        return PersonnelRecordInfo.model_validate(self.repository.get_record(record_id))

    async def list_records(self, page: int, limit: int, collaborator_id: Optional[int] = None) -> PaginatedResponse:
        records, total = self.repository.list_records(page, limit, collaborator_id)
        return PaginatedResponse.build(
            [PersonnelRecordInfo.model_validate(r) for r in records], total, page, limit
        )

    async def delete_record(self, record_id: int) -> DeleteResponse:
        """Eliminar registro si el saldo no queda negativo"""
        def operation():
            record = self.repository.get_record(record_id)
            collaborator = self.repository.get_collaborator(record.collaborator_id, lock=True)
            self.db.delete(record)
            self._ensure_not_negative(collaborator)

        run_atomic(self.db, operation, "eliminación de registro de gestión personal")
        logger.info(f"Registro de gestión eliminado: #{record_id}")

        return DeleteResponse(
            success=True,
            message="Registro eliminado exitosamente",
            id=record_id
        )

    # ===== PAGOS REALIZADOS =====

    async def create_payroll_payment(self, payment_data: PayrollPaymentCreate) -> PayrollPaymentResponse:
        """
        Registrar un pago realizado.

        - Periodo por defecto: mes calendario de la fecha de pago
        - Los registros incluidos deben pertenecer al colaborador
        - El monto no puede superar el saldo pendiente
        """
        def operation():
            collaborator = self.repository.get_collaborator(payment_data.collaborator_id, lock=True)

            record_ids = list(dict.fromkeys(payment_data.included_record_ids))
            if record_ids:
                found = {r.id for r in self.repository.records_of(collaborator.id, record_ids)}
                foreign = [rid for rid in record_ids if rid not in found]
                if foreign:
                    raise ValidationError(
                        f"Los registros {foreign} no pertenecen al colaborador {collaborator.name}",
                        details={"record_ids": foreign}
                    )

            payment_date = payment_data.payment_date or utcnow()
            period_start = payment_data.period_start or payment_date.date().replace(day=1)
            period_end = payment_data.period_end or (
                period_start + relativedelta(months=1, days=-1)
            )

            amount = to_money(payment_data.amount)
            pending = self.pending_balance(collaborator.id)
            if amount > pending:
                raise PaymentExceedsDebtError(
                    f"El monto ({amount}) excede el saldo pendiente ({max(pending, ZERO)}) de {collaborator.name}",
                    details={"collaborator_id": collaborator.id, "pending_balance": str(pending), "amount": str(amount)}
                )

            payment = self.repository.add(PayrollPayment(
                collaborator_id=collaborator.id,
                collaborator=collaborator,
                payment_date=payment_date,
                amount=amount,
                method=payment_data.method.value,
                period_start=period_start,
                period_end=period_end,
                included_record_ids=record_ids,
                notes=payment_data.notes,
                status=PAYROLL_PAID if amount >= pending else PAYROLL_PARTIAL
            ))
            return payment, pending - amount

        payment, pending = run_atomic(self.db, operation, "registro de pago realizado")
        logger.info(
            f"Pago realizado: #{payment.id} colaborador={payment.collaborator_id} "
            f"monto={payment.amount} ({payment.status})"
        )

        return PayrollPaymentResponse(
            success=True,
            message="Pago registrado exitosamente",
            payment=PayrollPaymentInfo.model_validate(payment),
            pending_balance=pending
        )

    async def get_payroll_payment(self, payment_id: int) -> PayrollPaymentInfo:
        return PayrollPaymentInfo.model_validate(self.repository.get_payment(payment_id))

    async def list_payroll_payments(self, page: int, limit: int, collaborator_id: Optional[int] = None) -> PaginatedResponse:
        payments, total = self.repository.list_payments(page, limit, collaborator_id)
        return PaginatedResponse.build(
            [PayrollPaymentInfo.model_validate(p) for p in payments], total, page, limit
        )

    async def update_payroll_payment(self, payment_id: int, update_data: PayrollPaymentUpdate) -> PayrollPaymentResponse:
        """Actualizar método, fecha, periodo u observaciones"""
        changes = update_data.dict(exclude_unset=True)

        def operation():
            payment = self.repository.get_payment(payment_id, lock=True)
            for field, value in changes.items():
                if value is None and field in ('method', 'payment_date'):
                    continue
                if field == 'method':
                    value = update_data.method.value
                setattr(payment, field, value)

            if payment.period_start and payment.period_end and payment.period_end < payment.period_start:
                raise ValidationError("El fin del periodo no puede ser anterior al inicio")
            return payment, self.pending_balance(payment.collaborator_id)

        payment, pending = run_atomic(self.db, operation, "actualización de pago realizado")
        logger.info(f"Pago realizado actualizado: #{payment.id}")

        return PayrollPaymentResponse(
            success=True,
            message="Pago actualizado exitosamente",
            payment=PayrollPaymentInfo.model_validate(payment),
            pending_balance=pending
        )

    async def delete_payroll_payment(self, payment_id: int) -> DeleteResponse:
        def operation():
            payment = self.repository.get_payment(payment_id)
            self.repository.get_collaborator(payment.collaborator_id, lock=True)
            self.db.delete(payment)

        run_atomic(self.db, operation, "eliminación de pago realizado")
        logger.info(f"Pago realizado eliminado: #{payment_id}")

        return DeleteResponse(
            success=True,
            message="Pago eliminado exitosamente",
            id=payment_id
        )

    # ===== RESUMEN =====

    async def get_summary(self, collaborator_id: int) -> PersonnelSummary:
        collaborator = self.repository.get_collaborator(collaborator_id)
        generated = self.repository.total_generated(collaborator.id)
        paid = self.repository.total_paid(collaborator.id)
        latest = self.repository.latest_record(collaborator.id)
        last_payment = self.repository.last_payment(collaborator.id)
        pending = generated - paid

        return PersonnelSummary(
            collaborator=CollaboratorRef.model_validate(collaborator),
            records_count=self.repository.count_records(collaborator.id),
            payments_count=self.repository.count_payments(collaborator.id),
            days_worked=latest.days_worked if latest else 0,
            total_generated=generated,
            total_paid=paid,
            pending_balance=pending if pending > ZERO else ZERO,
            last_payment=PayrollPaymentInfo.model_validate(last_payment) if last_payment else None
        )
