# stay_booking/main.py

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stay_booking.config import ALLOWED_ORIGINS, AUTO_CONFIRM_ENABLED
from stay_booking.errors import BookingError, ValidationError
from stay_booking.logging_config import setup_logging
from stay_booking.middleware import RequestIDMiddleware
from stay_booking.routes.admin import router as admin_router
from stay_booking.routes.coupons import router as coupons_router
from stay_booking.routes.health import router as health_router
from stay_booking.routes.metrics import router as metrics_router
from stay_booking.routes.owner import router as owner_router
from stay_booking.routes.properties import router as properties_router
from stay_booking.routes.reservations import router as reservations_router
from stay_booking.scheduler import AutoConfirmScheduler

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Stay Booking API",
    description="Reservations, room inventory and promotional codes for lodging properties",
    version="1.0.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)

# Register routers
app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(reservations_router, tags=["Reservations"])
app.include_router(owner_router, prefix="/owner", tags=["Owner"])
app.include_router(coupons_router, prefix="/owner", tags=["Coupons"])
app.include_router(properties_router, tags=["Inventory"])
app.include_router(admin_router, prefix="/admin", tags=["Admin"])


@app.exception_handler(BookingError)
def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    """Render domain errors as {"detail": message} with their HTTP status."""
    content: dict = {"detail": exc.message}
    if isinstance(exc, ValidationError):
        content["errors"] = exc.errors

    logger.info(
        "request_rejected",
        path=request.url.path,
        status_code=exc.status_code,
        error=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=content)


@app.on_event("startup")
def startup_event() -> None:
    """Initialize application on startup."""
    from stay_booking.db.engine import engine

    logger.info("FastAPI application starting up...")

    if AUTO_CONFIRM_ENABLED:
        scheduler = AutoConfirmScheduler(engine)
        scheduler.start()
        app.state.auto_confirm_scheduler = scheduler
    else:
        logger.info("auto_confirm_scheduler_disabled")

    logger.info("FastAPI application initialized")


@app.on_event("shutdown")
def shutdown_event() -> None:
    scheduler = getattr(app.state, "auto_confirm_scheduler", None)
    if scheduler is not None:
        scheduler.stop(wait=False)
        app.state.auto_confirm_scheduler = None
    logger.info("FastAPI application stopped")
