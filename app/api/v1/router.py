# app/api/v1/router.py
from fastapi import APIRouter
from app.api.v1.auth import router as auth_router
from app.modules.products import products_router
from app.modules.collaborators import collaborators_router
from app.modules.sales import sales_router
from app.modules.payments import payments_router
from app.modules.returns import returns_router
from app.modules.personnel import personnel_router
from app.modules.assistant import assistant_router

# Crear router principal de la API v1
api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["authentication"])

api_router.include_router(
    products_router,
    prefix="/products",
    tags=["Products"]
)

api_router.include_router(
    collaborators_router,
    prefix="/collaborators",
    tags=["Collaborators"]
)

api_router.include_router(
    sales_router,
    prefix="/sales",
    tags=["Sales"]
)

api_router.include_router(
    payments_router,
    prefix="/payments",
    tags=["Payments - Cobros"]
)

api_router.include_router(
    returns_router,
    prefix="/returns",
    tags=["Returns - Devoluciones"]
)

api_router.include_router(
    personnel_router,
    prefix="/personnel",
    tags=["Personnel - Gestión Personal"]
)

api_router.include_router(
    assistant_router,
    prefix="/assistant",
    tags=["Assistant"]
)

@api_router.get("/")
async def api_root():
    """Root endpoint de la API"""
    return {
        "message": "Ledger Back-Office API v1",
        "status": "active",
        "docs": "/docs",
        "available_endpoints": {
            "authentication": "/api/v1/auth",
            "products": "/api/v1/products",
            "collaborators": "/api/v1/collaborators",
            "sales": "/api/v1/sales",
            "payments": "/api/v1/payments",
            "returns": "/api/v1/returns",
            "personnel": "/api/v1/personnel",
            "assistant": "/api/v1/assistant"
        }
    }
