import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hr_reporting.api.reports import router as reports_router
from hr_reporting.core.config import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("HR report engine starting, upstream=%s", settings.UPSTREAM_BASE_URL)

    yield

    logger.info("Shutting down HR report engine.")


app = FastAPI(
    title="HR Report Engine API",
    description="Cross-domain attendance, leave, payroll and work-schedule reports.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(reports_router, prefix="/api/reports", tags=["Reports"])


@app.get("/health", tags=["System"])
async def health_check() -> dict:
    return {"status": "ok"}
