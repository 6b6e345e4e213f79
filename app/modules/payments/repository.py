from sqlalchemy import exists
from typing import List, Optional, Tuple
from datetime import datetime

from app.shared.database.models import Payment, Sale, SaleReturn
from app.shared.database.scoped_repository import OwnerScopedRepository

class PaymentRepository(OwnerScopedRepository):

    def get(self, payment_id: int, lock: bool = False) -> Payment:
        return self.get_owned(Payment, payment_id, lock=lock)

    def get_sale(self, sale_id: int, lock: bool = False) -> Sale:
        return self.get_owned(Sale, sale_id, lock=lock)

    def list(
        self,
        page: int,
        limit: int,
        collaborator_id: Optional[int] = None,
        sale_id: Optional[int] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None
    ) -> Tuple[List[Payment], int]:
        query = self.query(Payment)
        if collaborator_id:
            query = query.filter(Payment.collaborator_id == collaborator_id)
        if sale_id:
            query = query.filter(Payment.sale_id == sale_id)
        if date_from:
            query = query.filter(Payment.payment_date >= date_from)
        if date_to:
            query = query.filter(Payment.payment_date <= date_to)
        return self.paginate(query.order_by(Payment.payment_date.desc(), Payment.id.desc()), page, limit)

    def sales_of_collaborator(self, collaborator_id: int) -> List[Sale]:
        return self.query(Sale).filter(
            Sale.collaborator_id == collaborator_id
        ).order_by(Sale.sale_date).all()

    def sale_has_refunded_returns(self, sale_id: int) -> bool:
        return self.db.query(
            exists().where(
                SaleReturn.sale_id == sale_id,
                SaleReturn.owner_id == self.owner_id,
                SaleReturn.refunded_amount > 0
            )
        ).scalar()

    def delete(self, payment: Payment) -> None:
        self.db.delete(payment)
