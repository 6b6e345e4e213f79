from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
import time
import logging

from app.core.exceptions import LedgerError
from app.shared.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

def error_response(status_code: int, message: str, error_code: str, details=None) -> JSONResponse:
    body = ErrorResponse(message=message, error_code=error_code, details=details)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))

def setup_middleware(app: FastAPI):
    """Configure all middleware for the application"""
    
    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure properly for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    @app.middleware("http")
    async def log_requests(request, call_next):
        start_time = time.time()
        
        response = await call_next(request)
        
        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.4f}s"
        )
        
        return response

    setup_exception_handlers(app)

def setup_exception_handlers(app: FastAPI):
    """Traducir errores de negocio y errores internos al formato ErrorResponse"""

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError):
        logger.info(f"{request.method} {request.url.path} - {exc.error_code}: {exc.message}")
        return error_response(exc.status_code, exc.message, exc.error_code, exc.details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(
            422,
            "Datos de entrada inválidos",
            "VALIDATION_ERROR",
            {"errors": jsonable_encoder([
                {k: v for k, v in error.items() if k != "ctx"} for error in exc.errors()
            ])}
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.exception(f"Error interno en {request.method} {request.url.path}: {exc}")
        return error_response(500, "Error interno del servidor", "INTERNAL_ERROR")
