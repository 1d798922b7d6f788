# backend/guidebook/main.py
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from .core.config import settings
from .errors import register_error_handlers
from .routes import health, prometheus
from .routes.v1 import (
    bookings as bookings_v1,
    employee_swaps as employee_swaps_v1,
    work_hour_requests as work_hour_requests_v1,
    work_hours as work_hours_v1,
)

API_TITLE = "Guidebook API"
API_DESCRIPTION = "Booking and guide scheduling for outdoor activities"
API_VERSION = "1.0.0"

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown without deprecated events."""
    logger.info(f"{API_TITLE} starting up...")
    logger.info(f"Environment: {settings.environment}, timezone: {settings.timezone}")
    yield
    logger.info(f"{API_TITLE} shutting down...")


def _unique_operation_id(route: APIRoute) -> str:
    methods = "_".join(sorted(m.lower() for m in route.methods or []))
    path = route.path_format.replace("/", "_").replace("{", "").replace("}", "").strip("_")
    name = (route.name or "operation").lower().replace(" ", "_")
    return f"{methods}__{path}__{name}".strip("_")


def _compute_allowed_origins() -> list[str]:
    return [o.strip() for o in settings.cors_allow_origins.split(",") if o.strip()]


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
    generate_unique_id_function=_unique_operation_id,
)
# Register unified error envelope handlers
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_compute_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(bookings_v1.router, prefix="/bookings")
api_v1.include_router(employee_swaps_v1.router, prefix="/employee-swaps")
api_v1.include_router(work_hours_v1.router, prefix="/work-hours")
api_v1.include_router(work_hour_requests_v1.router, prefix="/work-hour-requests")

app.include_router(api_v1)

# Infrastructure routes stay unversioned
app.include_router(health.router)
app.include_router(prometheus.router)


@app.get("/")
def read_root() -> dict[str, str]:
    return {"message": API_TITLE, "version": API_VERSION, "docs": "/docs"}
