# app/main.py
"""
FastAPI application entry point.
Includes middleware, global error handlers, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError
from app.routers import admin, auth, cars, documents, health, notifications, rentals, reviews
from app.database import create_tables
from app.config import settings
from app.errors import DomainError
from app.services import email_service
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="KarHub Car Rental API",
    description="Car rental marketplace: agencies list cars, renters book them, superadmins verify agencies.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (web + mobile clients) ──────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Exception Handlers ───────────────────────────────────────────────────────
@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} → {exc.status_code} {exc.error_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    # Unique constraints racing past the service-level checks
    logger.warning(f"Integrity error on {request.url.path}: {exc.orig}")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Conflicting data", "error_code": "INTEGRITY_ERROR"},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(auth.router,          prefix="/api/v1", tags=["🔑 Auth"])
app.include_router(cars.router,          prefix="/api/v1", tags=["🚗 Cars"])
app.include_router(rentals.router,       prefix="/api/v1", tags=["📅 Rentals"])
app.include_router(documents.router,     prefix="/api/v1", tags=["📄 Agent Documents"])
app.include_router(reviews.router,       prefix="/api/v1", tags=["⭐ Reviews"])
app.include_router(notifications.router, prefix="/api/v1", tags=["🔔 Notifications"])
app.include_router(admin.router,         prefix="/api/v1", tags=["🛡️  Admin"])
app.include_router(health.router,        prefix="/api/v1", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 KarHub Backend starting up...")
    create_tables()
    logger.info("✅ Database tables ready")
    logger.info(f"📧 Mail relay: {settings.MAIL_RELAY_URL or 'disabled (log only)'}")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 KarHub Backend shutting down...")
    await email_service.drain(timeout=settings.MAIL_TIMEOUT_SECONDS)
