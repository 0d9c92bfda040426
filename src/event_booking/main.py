"""
FastAPI application entry point
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from slowapi.errors import RateLimitExceeded
import logging

from event_booking.api import auth, bookings, events
from event_booking.core.config import settings
from event_booking.core.database import Database
from event_booking.core.logging_config import setup_logging
from event_booking.core.redis import RedisClient
from event_booking.middleware.rate_limiter import limiter
from event_booking.middleware.tracing import TracingMiddleware
from event_booking.services import (
    BookingService,
    BookingServiceError,
    CacheService,
    EventService,
    GoogleOAuthClient,
    UserService,
)
from event_booking.services.oauth_client import build_google_client

logger = logging.getLogger(__name__)


def attach_services(
    app: FastAPI,
    database: Database,
    cache: Optional[CacheService] = None,
    oauth_client: Optional[GoogleOAuthClient] = None,
):
    """Wire the store handle and services onto the application state"""
    app.state.database = database
    app.state.cache = cache
    app.state.booking_service = BookingService(database, cache)
    app.state.event_service = EventService(database, cache)
    app.state.user_service = UserService(database)
    app.state.oauth_client = oauth_client


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for startup and shutdown"""
    setup_logging()
    logger.info("🚀 Starting up Event Booking API...")

    database = Database(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        isolation_level=settings.DB_ISOLATION_LEVEL,
        lock_timeout_seconds=settings.BOOKING_TRANSACTION_TIMEOUT_SECONDS,
    )
    try:
        await database.ping()
        logger.info(f"✅ Database connection successful ({database.dialect})")
    except Exception as e:
        logger.error(f"❌ Database connection failed: {e}")
        await database.dispose()
        raise

    redis_client = RedisClient(settings.REDIS_URL, default_ttl=settings.REDIS_CACHE_TTL)
    await redis_client.connect()
    app.state.redis = redis_client

    oauth_client = build_google_client()
    attach_services(
        app,
        database,
        cache=CacheService(redis_client, ttl=settings.REDIS_CACHE_TTL),
        oauth_client=oauth_client,
    )

    yield

    logger.info("🛑 Shutting down...")
    await oauth_client.close()
    await redis_client.close()
    await database.dispose()
    logger.info("✅ Cleanup complete")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Event ticket booking API with transactional seat inventory",
    lifespan=lifespan,
)

# Add rate limiter state
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded errors"""
    logger.warning(f"⚠️ Rate limit exceeded for {request.url.path}")

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": "RATE_LIMIT_EXCEEDED",
            "message": "Too many requests. Please slow down.",
            "detail": str(exc.detail),
        },
        headers={"Retry-After": "60"},
    )


@app.exception_handler(BookingServiceError)
async def booking_error_handler(request: Request, exc: BookingServiceError):
    """Map typed booking/event failures to status codes"""
    headers = {"Retry-After": "1"} if exc.retryable else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.code, "message": exc.message},
        headers=headers,
    )


app.add_middleware(TracingMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """Health check endpoint"""
    redis_client = getattr(request.app.state, "redis", None)
    redis_status = "healthy" if redis_client and redis_client.available else "unavailable"

    try:
        await request.app.state.database.ping()
        database_status = "healthy"
    except Exception as e:
        logger.error(f"Health check database ping failed: {e}")
        database_status = "unavailable"

    return JSONResponse(
        status_code=200 if database_status == "healthy" else 503,
        content={
            "status": "healthy" if database_status == "healthy" else "degraded",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "database": database_status,
            "redis": redis_status,
        },
    )


@app.get("/metrics", tags=["Health"])
async def metrics():
    """Prometheus scrape endpoint"""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint"""
    return {
        "message": "Event Booking API is running",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health",
    }


# Include routers
app.include_router(auth.router, prefix="/api/v1", tags=["Auth"])
app.include_router(events.router, prefix="/api/v1", tags=["Events"])
app.include_router(bookings.router, prefix="/api/v1", tags=["Bookings"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "event_booking.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="info",
    )
