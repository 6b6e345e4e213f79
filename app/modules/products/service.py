from typing import Optional
from sqlalchemy.orm import Session
import logging

from .repository import ProductRepository
from .schemas import ProductCreate, ProductUpdate, RestockRequest, ProductInfo, ProductResponse
from app.core.exceptions import ValidationError, ProductHasSalesError
from app.shared.database.transaction import run_atomic
from app.shared.schemas.common import PaginatedResponse, DeleteResponse
from app.shared.services.inventory_service import InventoryService

logger = logging.getLogger(__name__)

class ProductService:
    def __init__(self, db: Session, owner_id: int):
        self.db = db
        self.owner_id = owner_id
        self.repository = ProductRepository(db, owner_id)

    async def create_product(self, product_data: ProductCreate) -> ProductResponse:
        """Crear un producto; restante = total inicial"""
        product = run_atomic(
            self.db,
            lambda: self.repository.create(product_data.dict()),
            "creación de producto"
        )
        logger.info(f"Producto creado: {product.name} (id={product.id}, stock={product.total_quantity})")

        return ProductResponse(
            success=True,
            message="Producto creado exitosamente",
            product=ProductInfo.model_validate(product)
        )

    async def get_product(self, product_id: int) -> ProductInfo:
        return ProductInfo.model_validate(self.repository.get(product_id))

    async def list_products(
        self,
        page: int,
        limit: int,
        search: Optional[str] = None,
        in_stock_only: bool = False
    ) -> PaginatedResponse:
        products, total = self.repository.list(page, limit, search, in_stock_only)
        return PaginatedResponse.build(
            [ProductInfo.model_validate(p) for p in products], total, page, limit
        )

    async def update_product(self, product_id: int, update_data: ProductUpdate) -> ProductResponse:
        """
        Actualizar nombre, precios o cantidad total.

        La cantidad total nunca puede quedar por debajo de lo vendido;
        el restante se recalcula.
        """
        changes = update_data.dict(exclude_unset=True)

        def operation():
            product = self.repository.get(product_id, lock=True)

            unit_price = changes.get('unit_price') or product.unit_price
            purchase_price = changes.get('purchase_price', product.purchase_price)
            if purchase_price is not None and purchase_price > unit_price:
                raise ValidationError(
                    "El precio de compra no puede ser mayor al precio de venta",
                    details={"unit_price": str(unit_price), "purchase_price": str(purchase_price)}
                )

            if changes.get('total_quantity') is not None:
                InventoryService.adjust_total(self.db, product, changes['total_quantity'])

            for field, value in changes.items():
                if field == 'total_quantity' or (value is None and field != 'purchase_price'):
                    continue
                setattr(product, field, value)
            return product

        product = run_atomic(self.db, operation, "actualización de producto")
        logger.info(f"Producto actualizado: {product.id}")

        return ProductResponse(
            success=True,
            message="Producto actualizado exitosamente",
            product=ProductInfo.model_validate(product)
        )

    async def restock_product(self, product_id: int, restock: RestockRequest) -> ProductResponse:
        """Ingreso manual de unidades"""
        def operation():
            product = self.repository.get(product_id, lock=True)
            InventoryService.restock(self.db, product, restock.quantity, restock.notes)
            return product

        product = run_atomic(self.db, operation, "ingreso de stock")
        logger.info(f"Stock ingresado: producto {product.id} +{restock.quantity}")

        return ProductResponse(
            success=True,
            message=f"Se ingresaron {restock.quantity} unidades",
            product=ProductInfo.model_validate(product)
        )

    async def delete_product(self, product_id: int) -> DeleteResponse:
        """Eliminar producto sin ventas registradas"""
        def operation():
            product = self.repository.get(product_id, lock=True)
            if self.repository.has_sales(product.id):
                raise ProductHasSalesError(
                    f"El producto '{product.name}' tiene ventas registradas y no puede eliminarse",
                    details={"product_id": product.id}
                )
            name = product.name
            self.repository.delete(product)
            return name

        name = run_atomic(self.db, operation, "eliminación de producto")
        logger.info(f"Producto eliminado: {name} (id={product_id})")

        return DeleteResponse(
            success=True,
            message=f"Producto '{name}' eliminado exitosamente",
            id=product_id
        )
