from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backoffice.config import get_settings
from backoffice.db.session import init_db
from backoffice.exceptions import (
    BackofficeError,
    DuplicateKeyError,
    NotFoundError,
    ReferentialIntegrityViolation,
    ValidationFailure,
)
from backoffice.log_config import configure_logging
from backoffice.routers.addresses_router import router as addresses_router
from backoffice.routers.customers_router import router as customers_router
from backoffice.routers.import_router import router as import_router
from backoffice.routers.line_items_router import router as line_items_router
from backoffice.routers.products_router import router as products_router
from backoffice.routers.sales_router import router as sales_router
from backoffice.routers.suppliers_router import router as suppliers_router
from backoffice.schemas import ErrorResponse

logger = structlog.get_logger(__name__)

STATUS_BY_ERROR = {
    NotFoundError: 404,
    DuplicateKeyError: 409,
    ReferentialIntegrityViolation: 409,
    ValidationFailure: 422,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, json=settings.LOG_JSON)
    init_db()
    logger.info("backoffice_started", delete_policy=settings.OWNER_DELETE_POLICY.value)
    yield


app = FastAPI(title="Back-office API v0", lifespan=lifespan)


@app.exception_handler(BackofficeError)
async def backoffice_error_handler(request: Request, exc: BackofficeError):
    status_code = next(
        (code for error_type, code in STATUS_BY_ERROR.items() if isinstance(exc, error_type)),
        400,
    )
    logger.info(
        "request_rejected",
        path=request.url.path,
        error=type(exc).__name__,
        status=status_code,
    )
    body = ErrorResponse(error=type(exc).__name__, message=exc.message, details=exc.details)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.get("/")
def root():
    return {"ok": True, "service": "backoffice"}


app.include_router(customers_router, prefix="/api/customers", tags=["customers"])
app.include_router(suppliers_router, prefix="/api/suppliers", tags=["suppliers"])
app.include_router(addresses_router, prefix="/api/addresses", tags=["addresses"])
app.include_router(products_router, prefix="/api/products", tags=["products"])
app.include_router(sales_router, prefix="/api/sales", tags=["sales"])
app.include_router(line_items_router, prefix="/api/line-items", tags=["line-items"])
app.include_router(import_router, prefix="/import", tags=["import"])
