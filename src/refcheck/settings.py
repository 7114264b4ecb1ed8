"""Configuration helpers for refcheck."""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from refcheck.errors import RefcheckError

DEFAULT_PROVIDERS = ("openalex", "crossref")


class Settings(BaseModel):
    """Runtime configuration loaded from env vars with sensible defaults."""

    openalex_base_url: str = "https://api.openalex.org/works"
    crossref_base_url: str = "https://api.crossref.org/works"
    delay: float = Field(default=0.2, ge=0)
    request_timeout: float = Field(default=20.0, gt=0)
    providers: list[str] = Field(default_factory=lambda: list(DEFAULT_PROVIDERS))
    mailto: str | None = None
    log_level: str = "WARNING"

    @classmethod
    def load(cls) -> "Settings":
        load_dotenv()
        providers = os.environ.get("REFCHECK_PROVIDERS")
        try:
            return cls(
                openalex_base_url=os.environ.get(
                    "REFCHECK_OPENALEX_URL", "https://api.openalex.org/works"
                ),
                crossref_base_url=os.environ.get(
                    "REFCHECK_CROSSREF_URL", "https://api.crossref.org/works"
                ),
                delay=_env_float("REFCHECK_DELAY", "0.2"),
                request_timeout=_env_float("REFCHECK_TIMEOUT", "20"),
                providers=_parse_providers(providers) if providers else list(DEFAULT_PROVIDERS),
                mailto=os.environ.get("REFCHECK_MAILTO") or None,
                log_level=os.environ.get("REFCHECK_LOG_LEVEL", "WARNING"),
            )
        except ValidationError as exc:
            fields = ", ".join(str(error["loc"][0]) for error in exc.errors())
            raise RefcheckError(f"Invalid configuration for: {fields}.") from exc


def _env_float(key: str, default: str) -> float:
    raw = os.environ.get(key, default)
    try:
        return float(raw)
    except ValueError as exc:
        raise RefcheckError(f"{key} must be a number, got {raw!r}.") from exc


def _parse_providers(value: str) -> list[str]:
    items = [entry.strip().lower() for entry in value.split(",") if entry.strip()]
    return items or list(DEFAULT_PROVIDERS)


def get_settings() -> Settings:
    """Convenience accessor for lazy modules."""
    return Settings.load()
