from typing import List, Optional, Tuple

from app.shared.database.models import SaleReturn, Sale, Product
from app.shared.database.scoped_repository import OwnerScopedRepository

class ReturnsRepository(OwnerScopedRepository):

    def get(self, return_id: int, lock: bool = False) -> SaleReturn:
        return self.get_owned(SaleReturn, return_id, lock=lock)

    def get_sale(self, sale_id: int, lock: bool = False) -> Sale:
        return self.get_owned(Sale, sale_id, lock=lock)

    def get_product(self, product_id: int, lock: bool = False) -> Product:
        return self.get_owned(Product, product_id, lock=lock)

    def list(
        self,
        page: int,
        limit: int,
        sale_id: Optional[int] = None,
        product_id: Optional[int] = None
    ) -> Tuple[List[SaleReturn], int]:
        query = self.query(SaleReturn)
        if sale_id:
            query = query.filter(SaleReturn.sale_id == sale_id)
        if product_id:
            query = query.filter(SaleReturn.product_id == product_id)
        return self.paginate(query.order_by(SaleReturn.return_date.desc(), SaleReturn.id.desc()), page, limit)

    def delete(self, sale_return: SaleReturn) -> None:
        self.db.delete(sale_return)
