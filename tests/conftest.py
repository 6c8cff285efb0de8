import pytest

from dogclient.backoff import BackoffPolicy


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep DATADOG_* variables from the developer's shell out of the tests."""
    for name in ("DATADOG_HOST", "DATADOG_API_KEY", "DATADOG_APP_KEY", "DATADOG_RETRY_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def no_wait():
    """Return a factory for zero-delay policies allowing *n* retries."""

    def make(retries: int) -> BackoffPolicy:
        return BackoffPolicy.constant(0.0, max_retries=retries, max_elapsed_time=None)

    return make
