"""Metadata providers that look a citation up in external scholarly indexes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Protocol

import httpx
import structlog

from refcheck.errors import RefcheckError
from refcheck.models import ProviderResult
from refcheck.settings import Settings
from .similarity import is_match

logger = structlog.get_logger(__name__)


class MetadataProvider(Protocol):
    """Protocol for providers; ``lookup`` must never raise."""

    name: str

    async def lookup(self, query: str) -> ProviderResult:
        ...


class _HttpProvider(ABC):
    """Shared request/response handling for JSON search endpoints."""

    name: str

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings

    async def lookup(self, query: str) -> ProviderResult:
        logger.debug("provider.lookup", provider=self.name, query=query)
        try:
            response = await self._client.get(
                self._base_url(),
                params=self._params(query),
                timeout=self._settings.request_timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            logger.warning("provider.error", provider=self.name, error=str(exc))
            return ProviderResult.error(self.name)
        except ValueError as exc:
            logger.warning("provider.bad_payload", provider=self.name, error=str(exc))
            return ProviderResult.error(self.name)

        item = self._first_item(payload)
        if item is None:
            logger.info("provider.empty", provider=self.name, query=query)
            return ProviderResult.not_found(self.name)
        title = self._title(item)
        return ProviderResult(
            provider=self.name,
            found=True,
            matched=is_match(query, title),
            title=title,
            year=self._year(item),
            url=self._url(item),
        )

    @abstractmethod
    def _base_url(self) -> str:
        ...

    @abstractmethod
    def _params(self, query: str) -> dict[str, Any]:
        ...

    @abstractmethod
    def _first_item(self, payload: Any) -> dict | None:
        ...

    @abstractmethod
    def _title(self, item: dict) -> str | None:
        ...

    @abstractmethod
    def _year(self, item: dict) -> int | None:
        ...

    @abstractmethod
    def _url(self, item: dict) -> str | None:
        ...

    def _with_mailto(self, params: dict[str, Any]) -> dict[str, Any]:
        if self._settings.mailto:
            params["mailto"] = self._settings.mailto
        return params


class OpenAlexProvider(_HttpProvider):
    """Free-text work search against the OpenAlex ``/works`` endpoint."""

    name = "openalex"

    def _base_url(self) -> str:
        return self._settings.openalex_base_url

    def _params(self, query: str) -> dict[str, Any]:
        return self._with_mailto({"search": query, "per-page": 1})

    def _first_item(self, payload: Any) -> dict | None:
        if not isinstance(payload, dict):
            return None
        return _first_dict(payload.get("results"))

    def _title(self, item: dict) -> str | None:
        return _as_text(item.get("display_name") or item.get("title"))

    def _year(self, item: dict) -> int | None:
        return _as_year(item.get("publication_year"))

    def _url(self, item: dict) -> str | None:
        return _as_text(item.get("doi") or item.get("id"))


class CrossrefProvider(_HttpProvider):
    """Bibliographic matching against the Crossref ``/works`` endpoint."""

    name = "crossref"

    def _base_url(self) -> str:
        return self._settings.crossref_base_url

    def _params(self, query: str) -> dict[str, Any]:
        return self._with_mailto({"query.bibliographic": query, "rows": 1})

    def _first_item(self, payload: Any) -> dict | None:
        if not isinstance(payload, dict):
            return None
        message = payload.get("message")
        if not isinstance(message, dict):
            return None
        return _first_dict(message.get("items"))

    def _title(self, item: dict) -> str | None:
        title = item.get("title")
        if isinstance(title, list):
            title = title[0] if title else None
        return _as_text(title)

    def _year(self, item: dict) -> int | None:
        created = item.get("created") or {}
        try:
            return _as_year(created["date-parts"][0][0])
        except (KeyError, IndexError, TypeError):
            return None

    def _url(self, item: dict) -> str | None:
        return _as_text(item.get("URL"))


PROVIDERS: dict[str, type[_HttpProvider]] = {
    OpenAlexProvider.name: OpenAlexProvider,
    CrossrefProvider.name: CrossrefProvider,
}


def build_providers(
    names: list[str], client: httpx.AsyncClient, settings: Settings
) -> list[MetadataProvider]:
    """Instantiate providers by name, preserving the requested order."""
    providers: list[MetadataProvider] = []
    for name in dict.fromkeys(entry.lower() for entry in names):
        provider_cls = PROVIDERS.get(name)
        if provider_cls is None:
            raise RefcheckError(
                f"Unknown provider '{name}'. Choose from: {', '.join(sorted(PROVIDERS))}."
            )
        providers.append(provider_cls(client, settings))
    return providers


def _first_dict(items: Any) -> dict | None:
    if not isinstance(items, list) or not items:
        return None
    return items[0] if isinstance(items[0], dict) else {}


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_year(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
