import pytest

from refcheck.errors import RefcheckError
from refcheck.settings import Settings


def test_load_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("REFCHECK_DELAY", "0")
    monkeypatch.setenv("REFCHECK_PROVIDERS", " Crossref , ")
    settings = Settings.load()
    assert settings.delay == 0
    assert settings.providers == ["crossref"]


def test_load_rejects_non_numeric_timeout(monkeypatch) -> None:
    monkeypatch.setenv("REFCHECK_TIMEOUT", "fast")
    with pytest.raises(RefcheckError, match="REFCHECK_TIMEOUT"):
        Settings.load()


def test_load_rejects_negative_delay(monkeypatch) -> None:
    monkeypatch.setenv("REFCHECK_DELAY", "-1")
    with pytest.raises(RefcheckError, match="delay"):
        Settings.load()
