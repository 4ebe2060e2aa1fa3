"""
Wanderlux API - Main Application Entry Point
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse, Response
import time
import logging

# Prometheus metrics
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST, REGISTRY

from app.config import settings

# Define Prometheus metrics
REQUEST_COUNT = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

REQUEST_LATENCY = Histogram(
    'http_request_duration_seconds',
    'HTTP request latency in seconds',
    ['method', 'endpoint']
)
from app.routers import admin, auth, bookings, currencies, destinations, health, users
from app.storage import ConflictError, NotFoundError
from app.utils.database import init_db, close_db
from app.utils.redis import init_redis, close_redis

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager - handles startup and shutdown events
    """
    # Startup
    logger.info("Starting Wanderlux API...")

    if settings.STORAGE_BACKEND == "memory":
        logger.warning("Using in-memory storage - data is lost on restart")
    else:
        await init_db()
    await init_redis()

    logger.info("Wanderlux API ready to serve requests!")

    yield

    # Shutdown
    logger.info("Shutting down Wanderlux API...")

    if settings.STORAGE_BACKEND != "memory":
        await close_db()
    await close_redis()

    logger.info("Cleanup completed")


# Create FastAPI application
app = FastAPI(
    title="Wanderlux API",
    description="""
    ## Travel Booking Storefront API

    Curated destinations with promotional pricing, bookings, reviews and
    admin analytics.

    ### Features
    - 🔍 Search, filter and sort the destination catalog
    - 🏷️ Flash sales, seasonal offers, coupons and group discounts
    - 🧳 Bookings with duplicate protection
    - ⭐ Destination reviews and ratings
    - 💱 Prices in ten display currencies

    ### Authentication
    Requests act on behalf of the user named in the `X-User-Id` header.
    """,
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
    default_response_class=ORJSONResponse,
    lifespan=lifespan,
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request timing middleware with Prometheus metrics
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time

    # Record metrics (skip /metrics endpoint to avoid recursion)
    if request.url.path != "/metrics":
        endpoint = request.url.path
        method = request.method
        status = response.status_code

        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status=status).inc()
        REQUEST_LATENCY.labels(method=method, endpoint=endpoint).observe(process_time)

    response.headers["X-Process-Time"] = str(process_time)
    return response


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return ORJSONResponse(status_code=409, content={"detail": exc.message, "conflict": exc.entity})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return ORJSONResponse(status_code=404, content={"detail": str(exc)})


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(auth.router, prefix=f"{settings.API_PREFIX}/auth", tags=["Authentication"])
app.include_router(users.router, prefix=f"{settings.API_PREFIX}/users", tags=["Users"])
app.include_router(destinations.router, prefix=f"{settings.API_PREFIX}/destinations", tags=["Destinations"])
app.include_router(bookings.router, prefix=f"{settings.API_PREFIX}/bookings", tags=["Bookings"])
app.include_router(currencies.router, prefix=settings.API_PREFIX, tags=["Currencies"])
app.include_router(admin.router, prefix=f"{settings.API_PREFIX}/admin", tags=["Admin"])


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint - API information"""
    return {
        "name": "Wanderlux API",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs" if settings.DEBUG else "disabled",
    }


@app.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus metrics endpoint"""
    return Response(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST
    )
