import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from improver.config import configure_logging, get_settings
from improver.middleware import setup_middleware
from improver.improve.router import router as improve_router

settings = get_settings()
configure_logging(settings)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set. AI mode will fall back to Standard.")
    logger.info(f"AI daily limit: {settings.ai_daily_limit} per client")
    yield


app = FastAPI(
    title="Prompt Improver API",
    version="1.0.0",
    docs_url="/docs" if settings.debug else None,
    lifespan=lifespan,
)

setup_middleware(app, settings.frontend_url, settings.allowed_hosts)

app.include_router(improve_router, prefix="/api")


@app.get("/")
async def root():
    return {"status": "alive", "service": "prompt-improver-api"}


@app.get("/health")
async def health():
    return {"status": "healthy", "service": "prompt-improver-api"}


@app.get("/health/detailed")
async def health_detailed():
    checks = {"api": "healthy"}
    if settings.openai_api_key:
        checks["openai"] = "configured"
    else:
        checks["openai"] = "missing"
    overall = "healthy" if all(v != "missing" for v in checks.values()) else "degraded"
    return {"status": overall, "checks": checks}
