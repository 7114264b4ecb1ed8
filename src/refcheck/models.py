"""Core data models used throughout the refcheck application."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class VerificationStatus(str, Enum):
    """Tri-state classification assigned to a citation."""

    VERIFIED = "verified"
    SUSPICIOUS = "suspicious"
    NOT_FOUND = "not_found"


class ProviderResult(BaseModel):
    """Outcome of a single provider lookup for one citation."""

    model_config = ConfigDict(frozen=True)

    provider: str
    found: bool = False
    matched: bool = False
    title: str | None = None
    year: int | None = None
    url: str | None = None
    errored: bool = False

    @classmethod
    def not_found(cls, provider: str) -> "ProviderResult":
        return cls(provider=provider)

    @classmethod
    def error(cls, provider: str) -> "ProviderResult":
        return cls(provider=provider, errored=True)


class VerificationRecord(BaseModel):
    """Aggregated verdict for one input line."""

    model_config = ConfigDict(frozen=True)

    original: str
    query: str
    status: VerificationStatus
    results: dict[str, ProviderResult] = Field(default_factory=dict)

    @property
    def verified(self) -> bool:
        return self.status is VerificationStatus.VERIFIED
