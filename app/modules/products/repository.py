from sqlalchemy import exists, func
from typing import List, Optional, Tuple

from app.shared.database.models import Product, SaleItem
from app.shared.database.scoped_repository import OwnerScopedRepository

class ProductRepository(OwnerScopedRepository):

    def create(self, product_data: dict) -> Product:
        total = product_data.get('total_quantity', 0)
        product = Product(
            sold_quantity=0,
            remaining_quantity=total,
            **product_data
        )
        return self.add(product)

    def get(self, product_id: int, lock: bool = False) -> Product:
        return self.get_owned(Product, product_id, lock=lock)

    def list(
        self,
        page: int,
        limit: int,
        search: Optional[str] = None,
        in_stock_only: bool = False
    ) -> Tuple[List[Product], int]:
        query = self.query(Product)
        if search:
            query = query.filter(Product.name.ilike(f"%{search}%"))
        if in_stock_only:
            query = query.filter(Product.remaining_quantity > 0)
        return self.paginate(query.order_by(Product.name, Product.id), page, limit)

    def find_by_name(self, name: str) -> Optional[Product]:
        """Búsqueda exacta sin distinguir mayúsculas"""
        return self.query(Product).filter(func.lower(Product.name) == name.strip().lower()).first()

    def has_sales(self, product_id: int) -> bool:
        return self.db.query(
            exists().where(SaleItem.product_id == product_id, SaleItem.owner_id == self.owner_id)
        ).scalar()

    def delete(self, product: Product) -> None:
        self.db.delete(product)
