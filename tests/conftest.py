"""Shared fixtures for repofetch tests."""

from collections.abc import Iterator

import pytest

from repofetch.getter.metrics import GetterMetrics
from tests.helpers.pki import PkiFiles, generate_pki


@pytest.fixture(scope="session")
def pki(tmp_path_factory: pytest.TempPathFactory) -> PkiFiles:
    """Generate CA, server and client material once per session."""
    return generate_pki(tmp_path_factory.mktemp("pki"))


@pytest.fixture(autouse=True)
def reset_metrics() -> Iterator[None]:
    """Give every test a fresh metrics singleton."""
    GetterMetrics.reset()
    yield
    GetterMetrics.reset()


@pytest.fixture(autouse=True)
def no_proxy_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep requests to local test servers away from any configured proxy."""
    for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY"):
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(name.lower(), raising=False)
