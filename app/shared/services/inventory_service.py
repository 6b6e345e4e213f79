from typing import List, Dict, Any, Optional
from sqlalchemy.orm import Session
import logging

from app.shared.database.models import Product, InventoryMovement, utcnow
from app.core.exceptions import NotFoundError, InsufficientStockError, ValidationError

logger = logging.getLogger(__name__)


class InventoryService:
    """Libro de stock por producto: total = vendido + restante"""

    @staticmethod
    def validate_and_reserve_stock(
        db: Session,
        items: List[Dict[str, Any]],
        owner_id: int
    ) -> Dict[int, Product]:
        """
        Validar y reservar stock atómicamente con bloqueo pesimista.

        - SELECT FOR UPDATE sobre todos los productos involucrados (orden por id)
        - Cantidades agregadas por producto (varias líneas del mismo producto)
        - Validación completa antes de modificar datos: si una línea falla,
          se rechaza la venta entera y se reportan TODAS las líneas fallidas
        - MULTI-TENANT: filtra por owner_id

        Args:
            db: Sesión de base de datos
            items: Items a validar [{product_id, quantity}]
            owner_id: Dueño del negocio

        Returns:
            Dict[product_id, Product]: Productos bloqueados

        Raises:
            NotFoundError: Si algún producto no existe para este dueño
            InsufficientStockError: Si alguna línea excede el stock restante
        """
        requested: Dict[int, int] = {}
        for item in items:
            requested[item['product_id']] = requested.get(item['product_id'], 0) + item['quantity']

        products = db.query(Product).filter(
            Product.owner_id == owner_id,
            Product.id.in_(list(requested.keys()))
        ).order_by(Product.id).with_for_update().all()
        locked = {product.id: product for product in products}

        missing = [product_id for product_id in requested if product_id not in locked]
        if missing:
            raise NotFoundError(
                f"Producto(s) no encontrado(s): {', '.join(str(m) for m in missing)}",
                details={"entity": "Product", "ids": missing}
            )

        unavailable = []
        for product_id, quantity in requested.items():
            product = locked[product_id]
            if product.remaining_quantity < quantity:
                unavailable.append({
                    "product_id": product.id,
                    "product_name": product.name,
                    "available": product.remaining_quantity,
                    "requested": quantity
                })

        if unavailable:
            raise InsufficientStockError(
                "Stock insuficiente:\n" + "\n".join(
                    f"• {x['product_name']} (stock: {x['available']}, necesario: {x['requested']})"
                    for x in unavailable
                ),
                details={"items": unavailable}
            )

        return locked

    @staticmethod
    def increase_sold(
        db: Session,
        product: Product,
        quantity: int,
        change_type: str = 'sale',
        reference_id: Optional[int] = None,
        notes: Optional[str] = None
    ) -> None:
        """Mover unidades de restante a vendido"""
        if quantity > product.remaining_quantity:
            raise InsufficientStockError(
                f"Stock insuficiente para {product.name} "
                f"(stock: {product.remaining_quantity}, necesario: {quantity})",
                details={"items": [{
                    "product_id": product.id,
                    "product_name": product.name,
                    "available": product.remaining_quantity,
                    "requested": quantity
                }]}
            )

        before = product.remaining_quantity
        product.sold_quantity += quantity
        product.remaining_quantity = product.total_quantity - product.sold_quantity

        InventoryService._record_movement(db, product, change_type, quantity, before, reference_id, notes)

    @staticmethod
    def decrease_sold(
        db: Session,
        product: Product,
        quantity: int,
        change_type: str = 'return',
        reference_id: Optional[int] = None,
        notes: Optional[str] = None
    ) -> None:
        """
        Mover unidades de vendido a restante.

        Nunca lanza: si el vendido quedaría negativo (datos ya inconsistentes)
        se fija en 0 y se registra un WARNING.
        """
        before = product.remaining_quantity
        new_sold = product.sold_quantity - quantity
        if new_sold < 0:
            logger.warning(
                f"Vendido negativo evitado en producto {product.id}: "
                f"vendido={product.sold_quantity}, a restar={quantity}. Se fija en 0"
            )
            new_sold = 0

        product.sold_quantity = new_sold
        product.remaining_quantity = product.total_quantity - product.sold_quantity

        InventoryService._record_movement(db, product, change_type, quantity, before, reference_id, notes)

    @staticmethod
    def restock(db: Session, product: Product, quantity: int, notes: Optional[str] = None) -> None:
        """Ingreso manual de stock"""
        if quantity <= 0:
            raise ValidationError("La cantidad a ingresar debe ser mayor a 0")

        before = product.remaining_quantity
        product.total_quantity += quantity
        product.remaining_quantity = product.total_quantity - product.sold_quantity
        product.stocked_at = utcnow()

        InventoryService._record_movement(db, product, 'restock', quantity, before, None, notes)

    @staticmethod
    def adjust_total(db: Session, product: Product, new_total: int) -> None:
        """Corregir la cantidad total; nunca por debajo de lo ya vendido"""
        if new_total < product.sold_quantity:
            raise ValidationError(
                f"La cantidad total ({new_total}) no puede ser menor a la cantidad vendida ({product.sold_quantity})",
                details={"total_quantity": new_total, "sold_quantity": product.sold_quantity}
            )
        if new_total == product.total_quantity:
            return

        before = product.remaining_quantity
        delta = new_total - product.total_quantity
        product.total_quantity = new_total
        product.remaining_quantity = product.total_quantity - product.sold_quantity

        InventoryService._record_movement(
            db, product, 'adjustment', abs(delta), before, None,
            f"Ajuste de cantidad total ({'+' if delta > 0 else '-'}{abs(delta)})"
        )

    @staticmethod
    def _record_movement(
        db: Session,
        product: Product,
        change_type: str,
        quantity: int,
        remaining_before: int,
        reference_id: Optional[int],
        notes: Optional[str]
    ) -> None:
        db.add(InventoryMovement(
            owner_id=product.owner_id,
            product=product,
            change_type=change_type,
            quantity=quantity,
            remaining_before=remaining_before,
            remaining_after=product.remaining_quantity,
            reference_id=reference_id,
            notes=notes,
            created_at=utcnow()
        ))
