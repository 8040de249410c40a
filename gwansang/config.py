import logging
import os
from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

# .env 파일이 있으면 환경변수로 읽어들인다
load_dotenv()

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseModel):
    """Runtime settings, read from GWANSANG_* environment variables."""

    model_config = ConfigDict(protected_namespaces=())

    model_path: str = Field(
        default_factory=lambda: os.getenv("GWANSANG_MODEL_PATH", "./face_landmarker.task")
    )
    use_mock: bool = Field(default_factory=lambda: _env_bool("GWANSANG_USE_MOCK", False))
    upload_dir: str = Field(
        default_factory=lambda: os.getenv("GWANSANG_UPLOAD_DIR", "uploads")
    )
    max_upload_mb: int = Field(
        default_factory=lambda: int(os.getenv("GWANSANG_MAX_UPLOAD_MB", "10"))
    )
    cors_origins: List[str] = Field(
        default_factory=lambda: _env_list("GWANSANG_CORS_ORIGINS", "*")
    )
    log_level: str = Field(default_factory=lambda: os.getenv("GWANSANG_LOG_LEVEL", "INFO"))

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
