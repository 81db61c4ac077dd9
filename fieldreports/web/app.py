from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import contextlib
import logging

from fieldreports import __version__
from fieldreports.core.database import engine, Base
from fieldreports.web.routers import register_routers

# Register models in Base.metadata
from fieldreports.reporting import database as reporting_db  # noqa: F401
from fieldreports.scheduling import database as scheduling_db  # noqa: F401

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize Database Tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")

    yield

    await engine.dispose()


app = FastAPI(
    title="Field Reports",
    description="Report scheduling and multi-format export for the field management dashboard",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Reporting", "description": "Report generation and export"},
        {"name": "Report Schedules", "description": "Recurring report schedules"},
    ]
)

register_routers(app)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"], # Dashboard dev server
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", include_in_schema=False)
async def health():
    return {"status": "ok"}
