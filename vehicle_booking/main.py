# vehicle_booking/main.py
"""
FastAPI application entry point.
Includes CORS, request timing, the error-taxonomy handlers, and all routers.
"""

from datetime import timedelta
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from vehicle_booking.routers import approvals, audit_logs, auth, bookings, drivers, health, users, vehicles
from vehicle_booking.database import create_tables
from vehicle_booking.config import settings
from vehicle_booking.errors import BookingAPIError, InternalError, ValidationError
from vehicle_booking.services.session_store import SessionStore
from vehicle_booking.utils.logger import get_logger
import time

logger = get_logger(__name__)

_HTTP_KINDS = {
    400: "validation_error",
    401: "auth_error",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
}


def create_app(session_store: SessionStore = None) -> FastAPI:
    app = FastAPI(
        title="Vehicle Booking API",
        description="Fleet vehicle booking with two-level approval.",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.session_store = session_store or SessionStore(ttl=timedelta(minutes=settings.SESSION_TTL_MINUTES))

    # ── CORS ──────────────────────────────────────────────────────────────────
    origins = settings.cors_origin_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Request Timing Middleware ─────────────────────────────────────────────
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        duration = round((time.time() - start) * 1000, 2)
        logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
        return response

    # ── Exception Handlers ────────────────────────────────────────────────────
    @app.exception_handler(BookingAPIError)
    async def booking_api_error_handler(request: Request, exc: BookingAPIError):
        if exc.status_code >= 500:
            logger.error(f"{exc.kind} on {request.url.path}: {exc.message}")
        elif exc.status_code in (401, 403, 409):
            logger.warning(f"{exc.kind} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = []
        for err in exc.errors():
            loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
            details.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg"))
        error = ValidationError("; ".join(details) or None)
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        kind = _HTTP_KINDS.get(exc.status_code, "http_error")
        return JSONResponse(status_code=exc.status_code, content={"error": kind, "message": str(exc.detail)},
                            headers=getattr(exc, "headers", None))

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"Database error on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=InternalError().to_dict())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=InternalError().to_dict())

    # ── Routers ───────────────────────────────────────────────────────────────
    app.include_router(auth.router,       prefix="/api", tags=["Auth"])
    app.include_router(bookings.router,   prefix="/api", tags=["Bookings"])
    app.include_router(approvals.router,  prefix="/api", tags=["Approvals"])
    app.include_router(vehicles.router,   prefix="/api", tags=["Vehicles"])
    app.include_router(drivers.router,    prefix="/api", tags=["Drivers"])
    app.include_router(users.router,      prefix="/api", tags=["Users"])
    app.include_router(audit_logs.router, prefix="/api", tags=["Audit Logs"])
    app.include_router(health.router,     prefix="/api", tags=["Health"])

    # ── Startup ───────────────────────────────────────────────────────────────
    @app.on_event("startup")
    async def startup():
        logger.info("🚀 Vehicle Booking backend starting up...")
        create_tables()
        logger.info("✅ Database tables ready")
        logger.info(f"🌐 Listening on http://{settings.BACKEND_HOST}:{settings.BACKEND_PORT}")
        logger.info(f"🔐 Session TTL: {settings.SESSION_TTL_MINUTES} min")
        logger.info("📖 API docs at /docs")

    @app.on_event("shutdown")
    async def shutdown():
        purged = app.state.session_store.purge_expired()
        logger.info(f"🛑 Vehicle Booking backend shutting down ({purged} expired sessions purged)")

    return app


app = create_app()
