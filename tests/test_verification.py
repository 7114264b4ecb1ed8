import asyncio

import pytest

from refcheck.models import ProviderResult, VerificationStatus
from refcheck.services.verification import ReferenceVerifier, aggregate_status, verify


class _StubProvider:
    def __init__(self, name: str, outcomes: dict[str, ProviderResult] | None = None) -> None:
        self.name = name
        self._outcomes = outcomes or {}
        self.queries: list[str] = []

    async def lookup(self, query: str) -> ProviderResult:  # noqa: D401 - test helper
        self.queries.append(query)
        return self._outcomes.get(query, ProviderResult.not_found(self.name))


class _ExplodingProvider:
    name = "boom"

    async def lookup(self, query: str) -> ProviderResult:
        raise RuntimeError("unexpected")


class _RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


def _hit(name: str, matched: bool) -> ProviderResult:
    return ProviderResult(provider=name, found=True, matched=matched, title="T")


def test_aggregate_any_match_is_verified() -> None:
    results = [_hit("a", True), ProviderResult.error("b")]
    assert aggregate_status(results) is VerificationStatus.VERIFIED
    assert aggregate_status([_hit("a", False), _hit("b", True)]) is VerificationStatus.VERIFIED


def test_aggregate_found_without_match_is_suspicious() -> None:
    results = [_hit("a", False), ProviderResult.error("b")]
    assert aggregate_status(results) is VerificationStatus.SUSPICIOUS


def test_aggregate_errors_and_misses_fold_to_not_found() -> None:
    assert aggregate_status([ProviderResult.error("a"), ProviderResult.error("b")]) is VerificationStatus.NOT_FOUND
    assert aggregate_status([ProviderResult.error("a"), ProviderResult.not_found("b")]) is VerificationStatus.NOT_FOUND
    assert aggregate_status([]) is VerificationStatus.NOT_FOUND


@pytest.mark.asyncio
async def test_verifier_preserves_order_and_skips_blank_lines() -> None:
    openalex = _StubProvider("openalex", {"First": _hit("openalex", True)})
    crossref = _StubProvider("crossref", {"Second": _hit("crossref", False)})
    lines = ["[1] First", "", "   ", "2. Second", "(3) Third"]

    records = await ReferenceVerifier([openalex, crossref], delay=0).verify(lines)

    assert [record.original for record in records] == ["[1] First", "2. Second", "(3) Third"]
    assert [record.query for record in records] == ["First", "Second", "Third"]
    assert [record.status for record in records] == [
        VerificationStatus.VERIFIED,
        VerificationStatus.SUSPICIOUS,
        VerificationStatus.NOT_FOUND,
    ]
    assert set(records[0].results) == {"openalex", "crossref"}
    assert openalex.queries == ["First", "Second", "Third"]
    assert crossref.queries == ["First", "Second", "Third"]


@pytest.mark.asyncio
async def test_progress_is_monotonic_and_ends_at_100() -> None:
    seen: list[int] = []
    lines = [f"[{i}] Citation {i}" for i in range(1, 9)]

    await ReferenceVerifier([_StubProvider("a")], delay=0).verify(lines, on_progress=seen.append)

    assert len(seen) == 8
    assert seen == sorted(seen)
    assert seen[0] == 13
    assert seen[-1] == 100


@pytest.mark.asyncio
async def test_empty_input_reports_no_progress() -> None:
    seen: list[int] = []
    sleep = _RecordingSleep()

    records = await ReferenceVerifier([_StubProvider("a")], sleep=sleep).verify(["", "  "], on_progress=seen.append)

    assert records == []
    assert seen == []
    assert sleep.calls == []


@pytest.mark.asyncio
async def test_delay_between_lines_but_not_after_last() -> None:
    sleep = _RecordingSleep()
    verifier = ReferenceVerifier([_StubProvider("a")], delay=0.5, sleep=sleep)

    await verifier.verify(["one", "two", "three"])

    assert sleep.calls == [0.5, 0.5]


@pytest.mark.asyncio
async def test_single_line_never_sleeps() -> None:
    sleep = _RecordingSleep()
    await ReferenceVerifier([_StubProvider("a")], delay=1.0, sleep=sleep).verify(["only"])
    assert sleep.calls == []


@pytest.mark.asyncio
async def test_providers_run_concurrently_per_line() -> None:
    started = asyncio.Event()
    release = asyncio.Event()

    class _Waiting:
        name = "waiting"

        async def lookup(self, query: str) -> ProviderResult:
            started.set()
            await release.wait()
            return ProviderResult.not_found(self.name)

    class _Releasing:
        name = "releasing"

        async def lookup(self, query: str) -> ProviderResult:
            await started.wait()
            release.set()
            return _hit(self.name, True)

    records = await asyncio.wait_for(
        ReferenceVerifier([_Waiting(), _Releasing()], delay=0).verify(["line"]), timeout=2
    )

    assert records[0].status is VerificationStatus.VERIFIED


@pytest.mark.asyncio
async def test_raising_provider_becomes_errored_result() -> None:
    records = await ReferenceVerifier([_ExplodingProvider(), _StubProvider("ok")], delay=0).verify(["x"])

    assert len(records) == 1
    assert records[0].results["boom"].errored
    assert records[0].status is VerificationStatus.NOT_FOUND


@pytest.mark.asyncio
async def test_cancel_event_stops_before_next_line() -> None:
    cancel = asyncio.Event()
    seen: list[int] = []

    def on_progress(percent: int) -> None:
        seen.append(percent)
        cancel.set()

    records = await ReferenceVerifier([_StubProvider("a")], delay=0).verify(
        ["one", "two", "three"], on_progress=on_progress, cancel_event=cancel
    )

    assert [record.original for record in records] == ["one"]
    assert seen == [33]


@pytest.mark.asyncio
async def test_module_level_verify_entry_point() -> None:
    provider = _StubProvider("a", {"Title": _hit("a", True)})
    seen: list[int] = []

    records = await verify(["[1] Title", "[2] Other"], [provider], delay=0, on_progress=seen.append)

    assert [record.status for record in records] == [VerificationStatus.VERIFIED, VerificationStatus.NOT_FOUND]
    assert seen == [50, 100]
