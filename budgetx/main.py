"""
Main application entry point.

This module initializes the FastAPI application, registers the error
envelope handlers and includes all routers.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from budgetx.core.config import settings
from budgetx.core.exceptions import BudgetXError
from budgetx.core.logging import logger
from budgetx.core.middleware import AuditMiddleware, SecurityHeadersMiddleware
from budgetx.routers.approvals import router as approvals_router
from budgetx.routers.budgets import router as budgets_router
from budgetx.routers.expenses import router as expenses_router
from budgetx.routers.health import router as health_router
from budgetx.routers.notifications import router as notifications_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Actions to run on application startup and shutdown."""
    logger.info(f"Starting {settings.api.title}")
    logger.info(f"Environment: {settings.environment.value}")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Database URL: {settings.database.url[:20]}...")
    logger.info(f"Notifications enabled: {settings.notifications.enabled}")
    yield
    logger.info(f"Shutting down {settings.api.title}")


app = FastAPI(
    title=settings.api.title,
    description=settings.api.description,
    version=settings.api.version,
    debug=settings.debug,
    lifespan=lifespan,
)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(AuditMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.frontend_urls,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
    allow_headers=["*"],
)


@app.exception_handler(BudgetXError)
async def budgetx_error_handler(request: Request, exc: BudgetXError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message} {exc.details}")
    else:
        logger.warning(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    content = {"success": False, "message": exc.message, "code": exc.code}
    if exc.details:
        content["errors"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    logger.warning(f"Validation failed on {request.method} {request.url.path}: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": "Validation failed",
            "code": "VALIDATION_ERROR",
            "errors": errors,
        },
    )


# Include routers with /api prefix
prefix = settings.api.prefix
app.include_router(health_router, prefix=f"{prefix}/health", tags=["health"])
app.include_router(budgets_router, prefix=f"{prefix}/budgets", tags=["budgets"])
app.include_router(expenses_router, prefix=f"{prefix}/expenses", tags=["expenses"])
app.include_router(approvals_router, prefix=f"{prefix}/approvals", tags=["approvals"])
app.include_router(notifications_router, prefix=f"{prefix}/notifications", tags=["notifications"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": settings.api.title,
        "version": settings.api.version,
        "docs": "/docs",
    }
