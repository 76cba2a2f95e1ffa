from pydantic_settings import BaseSettings
from functools import lru_cache
import logging

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4.1-mini"
    openai_timeout: float = 60.0

    # AI quota
    ai_daily_limit: int = 10

    # App
    frontend_url: str = "http://localhost:3000"
    allowed_hosts: list[str] = []
    debug: bool = False
    log_level: str = "INFO"

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Settings) -> None:
    """Set up root logging once; gunicorn/uvicorn keep their own handlers."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # httpx logs every OpenAI request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logger.debug(f"Logging configured at {settings.log_level}")
