"""FastAPI service exposing the citation verifier over HTTP."""

from __future__ import annotations

from typing import Callable, Optional

import httpx
import structlog
from fastapi import FastAPI, HTTPException, status
from pydantic import BaseModel, Field

from refcheck.errors import RefcheckError
from refcheck.exporters import record_to_dict
from refcheck.services import MetadataProvider, ReferenceVerifier, build_providers
from refcheck.settings import Settings, get_settings
from refcheck.utils import split_citations

logger = structlog.get_logger(__name__)

ProviderFactory = Callable[[httpx.AsyncClient, Settings], list[MetadataProvider]]


class VerifyRequest(BaseModel):
    text: str | None = None
    lines: list[str] = Field(default_factory=list)
    providers: list[str] | None = None


def _default_factory(names: list[str]) -> ProviderFactory:
    def factory(client: httpx.AsyncClient, settings: Settings) -> list[MetadataProvider]:
        return build_providers(names, client, settings)

    return factory


def create_app(
    settings: Optional[Settings] = None,
    provider_factory: Optional[ProviderFactory] = None,
) -> FastAPI:
    """Factory used by uvicorn."""
    settings = settings or get_settings()
    app = FastAPI(title="refcheck")

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok", "providers": settings.providers}

    @app.post("/api/verify")
    async def verify_citations(payload: VerifyRequest) -> dict:
        lines = list(payload.lines)
        if payload.text:
            lines.extend(split_citations(payload.text))
        lines = [line for line in lines if line.strip()]
        if not lines:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Provide citation text or lines.",
            )
        factory = provider_factory or _default_factory(payload.providers or settings.providers)
        async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
            try:
                providers = factory(client, settings)
            except RefcheckError as exc:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
            verifier = ReferenceVerifier(providers, delay=settings.delay)
            records = await verifier.verify(lines)
        logger.info("web.verify", lines=len(lines))
        return {
            "total": len(records),
            "records": [record_to_dict(record) for record in records],
        }

    return app
