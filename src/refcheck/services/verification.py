"""Batch verification of citation lines against metadata providers."""

from __future__ import annotations

import asyncio
import math
from typing import Awaitable, Callable, Iterable, Sequence

import structlog

from refcheck.models import ProviderResult, VerificationRecord, VerificationStatus
from refcheck.utils import normalize_citation
from .providers import MetadataProvider

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[int], None]
Sleep = Callable[[float], Awaitable[None]]

DEFAULT_DELAY = 0.2


def aggregate_status(results: Iterable[ProviderResult]) -> VerificationStatus:
    """Fold provider outcomes into a single status.

    A provider error is indistinguishable from "not found" here: only a match
    or a non-matching hit changes the verdict.
    """
    results = list(results)
    if any(result.matched for result in results):
        return VerificationStatus.VERIFIED
    if any(result.found for result in results):
        return VerificationStatus.SUSPICIOUS
    return VerificationStatus.NOT_FOUND


class ReferenceVerifier:
    """Checks citation lines one at a time, querying all providers per line."""

    def __init__(
        self,
        providers: Sequence[MetadataProvider],
        *,
        delay: float = DEFAULT_DELAY,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._providers = list(providers)
        self._delay = delay
        self._sleep = sleep

    async def verify(
        self,
        lines: Iterable[str],
        *,
        on_progress: ProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> list[VerificationRecord]:
        pending = [line for line in lines if line.strip()]
        total = len(pending)
        records: list[VerificationRecord] = []
        for index, line in enumerate(pending, start=1):
            if cancel_event is not None and cancel_event.is_set():
                logger.info("verify.cancelled", processed=len(records), total=total)
                break
            record = await self.verify_line(line)
            records.append(record)
            logger.debug("verify.line", index=index, total=total, status=record.status.value)
            if on_progress is not None:
                on_progress(_percent(index, total))
            if index < total and self._delay > 0:
                await self._sleep(self._delay)
        logger.info("verify.done", total=total, processed=len(records))
        return records

    async def verify_line(self, line: str) -> VerificationRecord:
        query = normalize_citation(line)
        results = await asyncio.gather(*(self._lookup(provider, query) for provider in self._providers))
        return VerificationRecord(
            original=line,
            query=query,
            status=aggregate_status(results),
            results={result.provider: result for result in results},
        )

    async def _lookup(self, provider: MetadataProvider, query: str) -> ProviderResult:
        try:
            return await provider.lookup(query)
        except Exception as exc:  # a misbehaving provider counts as errored
            logger.warning("verify.provider_failed", provider=provider.name, error=str(exc))
            return ProviderResult.error(provider.name)


def _percent(done: int, total: int) -> int:
    # half-up, so 1 of 8 reports 13 rather than 12
    return math.floor(done / total * 100 + 0.5)


async def verify(
    lines: Iterable[str],
    providers: Sequence[MetadataProvider],
    delay: float = DEFAULT_DELAY,
    on_progress: ProgressCallback | None = None,
) -> list[VerificationRecord]:
    """Functional entry point mirroring :meth:`ReferenceVerifier.verify`."""
    verifier = ReferenceVerifier(providers, delay=delay)
    return await verifier.verify(lines, on_progress=on_progress)
