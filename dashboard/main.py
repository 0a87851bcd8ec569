import logging
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from google.api_core import exceptions as google_exceptions

from .auth import get_current_admin
from .config import FRONTEND_URL
from .domain.analytics.router import router as analytics_router
from .domain.customers.router import router as customers_router
from .domain.partners.router import router as partners_router
from .domain.pnl.router import router as pnl_router
from .domain.reports.router import router as reports_router
from .domain.sheets.router import router as sheets_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Dashboard API starting up...")
    try:
        from .cache import get_redis_client

        get_redis_client()  # Connection test
        logger.info("Redis connection established")
    except Exception as e:
        logger.warning(f"Redis connection failed - sheet cache will operate in fail-open mode: {e}")

    yield
    logger.info("Dashboard API shutting down...")


app = FastAPI(title="Ops Dashboard API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(google_exceptions.GoogleAPICallError)
async def firestore_exception_handler(request: Request, exc: google_exceptions.GoogleAPICallError):
    """Firestore failures that escape a service become a generic 500"""
    logger.error(f"❌ Firestore error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Failed to load data. Please try again."})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


# CORS Configuration
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", f"{FRONTEND_URL},http://localhost:3000").split(",")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

# Routes (admin only)
admin_only = [Depends(get_current_admin)]
app.include_router(analytics_router, dependencies=admin_only)
app.include_router(sheets_router, dependencies=admin_only)
app.include_router(pnl_router, dependencies=admin_only)
app.include_router(partners_router, dependencies=admin_only)
app.include_router(customers_router, dependencies=admin_only)
app.include_router(reports_router, dependencies=admin_only)


@app.get("/")
def root():
    return {"message": "Ops Dashboard API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
