from sqlalchemy import exists
from typing import List, Optional, Tuple
from datetime import datetime

from app.shared.database.models import Sale, SaleReturn, Collaborator, Product
from app.shared.database.scoped_repository import OwnerScopedRepository

class SalesRepository(OwnerScopedRepository):

    def get(self, sale_id: int, lock: bool = False) -> Sale:
        return self.get_owned(Sale, sale_id, lock=lock)

    def get_collaborator(self, collaborator_id: int) -> Collaborator:
        return self.get_owned(Collaborator, collaborator_id)

    def get_product(self, product_id: int, lock: bool = False) -> Product:
        return self.get_owned(Product, product_id, lock=lock)

    def list(
        self,
        page: int,
        limit: int,
        collaborator_id: Optional[int] = None,
        payment_status: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None
    ) -> Tuple[List[Sale], int]:
        query = self.query(Sale)
        if collaborator_id:
            query = query.filter(Sale.collaborator_id == collaborator_id)
        if payment_status:
            query = query.filter(Sale.payment_status == payment_status)
        if date_from:
            query = query.filter(Sale.sale_date >= date_from)
        if date_to:
            query = query.filter(Sale.sale_date <= date_to)
        return self.paginate(query.order_by(Sale.sale_date.desc(), Sale.id.desc()), page, limit)

    def has_returns(self, sale_id: int) -> bool:
        return self.db.query(
            exists().where(SaleReturn.sale_id == sale_id, SaleReturn.owner_id == self.owner_id)
        ).scalar()

    def delete(self, sale: Sale) -> None:
        for payment in list(sale.payments):
            self.db.delete(payment)
        self.db.delete(sale)
