from sqlalchemy import func
from typing import List, Optional, Tuple
from decimal import Decimal

from app.shared.database.models import Collaborator, PersonnelRecord, PayrollPayment
from app.shared.database.scoped_repository import OwnerScopedRepository
from app.shared.services.debt_ledger import to_money

class PersonnelRepository(OwnerScopedRepository):

    def get_collaborator(self, collaborator_id: int, lock: bool = False) -> Collaborator:
        return self.get_owned(Collaborator, collaborator_id, lock=lock)

    # ===== REGISTROS =====

    def get_record(self, record_id: int, lock: bool = False) -> PersonnelRecord:
        return self.get_owned(PersonnelRecord, record_id, lock=lock)

    def latest_record(self, collaborator_id: int) -> Optional[PersonnelRecord]:
        return self.query(PersonnelRecord).filter(
            PersonnelRecord.collaborator_id == collaborator_id
        ).order_by(PersonnelRecord.record_date.desc(), PersonnelRecord.id.desc()).first()

    def list_records(
        self,
        page: int,
        limit: int,
        collaborator_id: Optional[int] = None
    ) -> Tuple[List[PersonnelRecord], int]:
        query = self.query(PersonnelRecord)
        if collaborator_id:
            query = query.filter(PersonnelRecord.collaborator_id == collaborator_id)
        return self.paginate(
            query.order_by(PersonnelRecord.record_date.desc(), PersonnelRecord.id.desc()), page, limit
        )

    def records_of(self, collaborator_id: int, record_ids: List[int]) -> List[PersonnelRecord]:
        return self.query(PersonnelRecord).filter(
            PersonnelRecord.collaborator_id == collaborator_id,
            PersonnelRecord.id.in_(record_ids)
        ).all()

    def count_records(self, collaborator_id: int) -> int:
        return self.query(PersonnelRecord).filter(PersonnelRecord.collaborator_id == collaborator_id).count()

    # ===== PAGOS REALIZADOS =====

    def get_payment(self, payment_id: int, lock: bool = False) -> PayrollPayment:
        return self.get_owned(PayrollPayment, payment_id, lock=lock)

    def list_payments(
        self,
        page: int,
        limit: int,
        collaborator_id: Optional[int] = None
    ) -> Tuple[List[PayrollPayment], int]:
        query = self.query(PayrollPayment)
        if collaborator_id:
            query = query.filter(PayrollPayment.collaborator_id == collaborator_id)
        return self.paginate(
            query.order_by(PayrollPayment.payment_date.desc(), PayrollPayment.id.desc()), page, limit
        )

    def last_payment(self, collaborator_id: int) -> Optional[PayrollPayment]:
        return self.query(PayrollPayment).filter(
            PayrollPayment.collaborator_id == collaborator_id
        ).order_by(PayrollPayment.payment_date.desc(), PayrollPayment.id.desc()).first()

    def count_payments(self, collaborator_id: int) -> int:
        return self.query(PayrollPayment).filter(PayrollPayment.collaborator_id == collaborator_id).count()

    # ===== SALDOS =====

    def total_generated(self, collaborator_id: int) -> Decimal:
        total = self.db.query(
            func.coalesce(func.sum(
                PersonnelRecord.daily_pay - PersonnelRecord.shortage - PersonnelRecord.advance
            ), 0)
        ).filter(
            PersonnelRecord.owner_id == self.owner_id,
            PersonnelRecord.collaborator_id == collaborator_id
        ).scalar()
        return to_money(total)

    def total_paid(self, collaborator_id: int) -> Decimal:
        total = self.db.query(
            func.coalesce(func.sum(PayrollPayment.amount), 0)
        ).filter(
            PayrollPayment.owner_id == self.owner_id,
            PayrollPayment.collaborator_id == collaborator_id
        ).scalar()
        return to_money(total)
