# app/modules/products/router.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from app.config.database import get_db
from app.config.settings import settings
from app.core.auth.dependencies import get_current_owner_id
from app.shared.schemas.common import PaginatedResponse, DeleteResponse
from .service import ProductService
from .schemas import ProductCreate, ProductUpdate, RestockRequest, ProductInfo, ProductResponse

router = APIRouter()

@router.post("/", response_model=ProductResponse, status_code=201)
async def create_product(
    product_data: ProductCreate,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """
    Crear un nuevo producto

    **Validaciones:**
    - El precio de venta debe ser > 0
    - El precio de compra (opcional) no puede superar al de venta
    - La cantidad inicial debe ser >= 0 (restante = total)
    """
    service = ProductService(db, owner_id)
    return await service.create_product(product_data)

@router.get("/", response_model=PaginatedResponse)
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    search: Optional[str] = Query(None, description="Buscar por nombre"),
    in_stock_only: bool = Query(False, description="Solo productos con stock restante"),
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Listar productos del negocio (paginado)"""
    service = ProductService(db, owner_id)
    return await service.list_products(page, limit, search, in_stock_only)

@router.get("/{product_id}", response_model=ProductInfo)
async def get_product(
    product_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Obtener un producto por ID"""
    service = ProductService(db, owner_id)
    return await service.get_product(product_id)

@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    update_data: ProductUpdate,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """
    Actualizar un producto

    Los contadores de vendido/restante no se editan directamente;
    la cantidad total no puede quedar por debajo de lo vendido.
    """
    service = ProductService(db, owner_id)
    return await service.update_product(product_id, update_data)

@router.post("/{product_id}/restock", response_model=ProductResponse)
async def restock_product(
    product_id: int,
    restock: RestockRequest,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Ingreso manual de stock"""
    service = ProductService(db, owner_id)
    return await service.restock_product(product_id, restock)

@router.delete("/{product_id}", response_model=DeleteResponse)
async def delete_product(
    product_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Eliminar un producto (rechazado si tiene ventas)"""
    service = ProductService(db, owner_id)
    return await service.delete_product(product_id)
