import logging
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# Get the directory where this config file is located.
_BACKEND_DIR = Path(__file__).parent.resolve()


def _detect_project_root(backend_dir: Path) -> Path:
    """Resolve project root from the backend directory in the repo layout."""
    return backend_dir.parent.resolve()


_PROJECT_ROOT = _detect_project_root(_BACKEND_DIR)
_DEFAULT_DATA_DIR = (_BACKEND_DIR / "data" / "world_intelligence").resolve()
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_LOGGER = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Catalog location (tier-1 countries, hotspot registries)
    WORLD_INTEL_DATA_DIR: Path = _DEFAULT_DATA_DIR
    WORLD_INTEL_CATALOG_CHECK_SECONDS: float = 5.0  # Minimum gap between catalog file stat checks

    # Country Instability Index
    CII_LEARNING_DURATION_MINUTES: float = 15.0  # Warm-up before scores are trusted
    CII_DEFAULT_BASELINE_RISK: float = 20.0  # Structural risk for uncatalogued countries
    CII_DEFAULT_EVENT_MULTIPLIER: float = 1.0
    CII_TOP_N_DEFAULT: int = 10

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    LOG_FILE: str = ""

    @field_validator("WORLD_INTEL_DATA_DIR", mode="before")
    @classmethod
    def _normalize_data_dir(cls, value: object) -> object:
        """Resolve relative catalog paths against the project root."""
        if value is None:
            return _DEFAULT_DATA_DIR
        text = str(value).strip().strip('"').strip("'")
        if not text:
            return _DEFAULT_DATA_DIR
        path = Path(text)
        if not path.is_absolute():
            path = _PROJECT_ROOT / path
        return path.resolve()

    @field_validator("CII_LEARNING_DURATION_MINUTES", mode="after")
    @classmethod
    def _clamp_learning_duration(cls, value: float) -> float:
        if value < 0:
            _LOGGER.warning("Negative CII learning duration %.1f clamped to 0", value)
            return 0.0
        return value

    @field_validator("CII_TOP_N_DEFAULT", mode="after")
    @classmethod
    def _clamp_top_n(cls, value: int) -> int:
        return max(1, value)

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        text = str(value or "").strip().upper()
        if text not in _LOG_LEVELS:
            return "INFO"
        return text

    class Config:
        # Load project-root .env first (common workflow), then backend/.env
        # as an override if present.
        env_file = (
            str(_PROJECT_ROOT / ".env"),
            str(_BACKEND_DIR / ".env"),
        )
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
