"""
Utility Billing API - Main Application
FastAPI application with CORS, error handling, middleware, and logging
"""
from contextlib import asynccontextmanager
from datetime import datetime
import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from utility_billing.api.routes import billing_router, payments_router, readings_router, reports_router
from utility_billing.core.config import settings
from utility_billing.core.exceptions import BillingAPIError, InvalidRequest, MethodNotAllowed, NotFound
from utility_billing.database import close_db_connection, init_db, test_connection


# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# ==================== STARTUP & SHUTDOWN ====================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run on application startup and shutdown"""
    logger.info("=" * 70)
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")
    logger.info(f"Data backend: {settings.DATA_BACKEND}")
    logger.info("=" * 70)

    if not settings.uses_supabase:
        # Non-blocking: the API still starts in degraded mode
        if not test_connection():
            logger.warning("[WARN] Database connection failed - continuing in degraded mode")
        elif not init_db():
            logger.warning("[WARN] Database init returned False - tables may not exist")

    logger.info("[OK] Application startup complete!")
    yield

    logger.info("Shutting down application...")
    if not settings.uses_supabase:
        close_db_connection()
    logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.PROJECT_DESCRIPTION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)


# ==================== MIDDLEWARE ====================


# CORS: dashboards call from any origin with the Supabase client headers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=False,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests"""
    # Skip logging for health checks
    if request.url.path == "/health":
        return await call_next(request)

    start_time = datetime.utcnow()
    client_host = request.client.host if request.client else "-"
    logger.info(f">> {request.method} {request.url.path} - {client_host}")

    try:
        response = await call_next(request)
        duration = (datetime.utcnow() - start_time).total_seconds()
        logger.info(f"<< {request.method} {request.url.path} - {response.status_code} ({duration:.2f}s)")
        return response
    except Exception as e:
        duration = (datetime.utcnow() - start_time).total_seconds()
        logger.error(f"[ERROR] {request.method} {request.url.path} - Error: {str(e)} ({duration:.2f}s)")
        raise


@app.middleware("http")
async def cors_preflight(request: Request, call_next):
    """Answer every OPTIONS request, with or without preflight headers"""
    if request.method == "OPTIONS":
        return PlainTextResponse("ok", headers=settings.cors_headers)
    return await call_next(request)


# ==================== ROUTERS ====================


app.include_router(billing_router, prefix=settings.API_PREFIX, tags=["Billing"])
app.include_router(payments_router, prefix=settings.API_PREFIX, tags=["Payments"])
app.include_router(reports_router, prefix=settings.API_PREFIX, tags=["Reports"])
app.include_router(readings_router, prefix=settings.API_PREFIX, tags=["Readings"])


# ==================== ERROR HANDLERS ====================


@app.exception_handler(BillingAPIError)
async def billing_exception_handler(request: Request, exc: BillingAPIError):
    """Render the API error taxonomy"""
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{exc.code} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed bodies as 400 InvalidRequest naming each field"""
    missing = []
    problems = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        field = ".".join(loc) or "body"
        if err.get("type") == "missing":
            missing.append(field)
        problems.append({"field": field, "message": err.get("msg")})

    if missing and len(missing) == len(problems):
        message = f"Missing required fields: {', '.join(missing)}"
    else:
        message = "Invalid request: " + "; ".join(f"{p['field']}: {p['message']}" for p in problems)

    logger.warning(f"Validation error on {request.url.path}: {message}")
    error = InvalidRequest(message, problems)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Framework-level errors (unknown path, wrong method) in the same envelope"""
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        error = MethodNotAllowed("Method not allowed")
    elif exc.status_code == status.HTTP_404_NOT_FOUND:
        error = NotFound("Not found")
    else:
        error = BillingAPIError(str(exc.detail))
        error.status_code = exc.status_code
        error.code = "HTTPError"
    return JSONResponse(status_code=error.status_code, content=error.to_dict(), headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions"""
    logger.error(f"Unhandled exception: {exc}\n{traceback.format_exc()}")

    # Don't expose internal errors in production
    error_message = str(exc) if settings.DEBUG else "Internal server error"

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": error_message,
            "code": "InternalError",
        }
    )


# ==================== HEALTH & STATUS ENDPOINTS ====================


@app.get("/", tags=["System"])
async def root():
    """Root endpoint - API information"""
    return {
        "success": True,
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "version": settings.VERSION,
        "docs": "/api/docs",
        "status": "operational",
    }


@app.get("/health", tags=["System"])
def health_check():
    """Health check endpoint for monitoring"""
    if settings.uses_supabase:
        return {
            "success": True,
            "status": "healthy",
            "database": "supabase",
            "timestamp": datetime.utcnow().isoformat(),
        }

    connection_ok = test_connection()
    return {
        "success": True,
        "status": "healthy" if connection_ok else "degraded",
        "database": "connected" if connection_ok else "disconnected",
        "timestamp": datetime.utcnow().isoformat(),
    }


@app.get("/api/version", tags=["System"])
async def get_version():
    """Get API version information"""
    return {
        "success": True,
        "api_version": settings.VERSION,
        "app_name": settings.PROJECT_NAME,
        "data_backend": settings.DATA_BACKEND,
    }
