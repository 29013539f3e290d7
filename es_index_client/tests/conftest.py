from __future__ import annotations

import os
import sys
from pathlib import Path

import httpx
import pytest

# Make package importable when running tests from the repository root.
ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: tests that require a running Elasticsearch-compatible cluster",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if os.getenv("ELASTICSEARCH_RUN_INTEGRATION") == "1":
        return

    skip_integration = pytest.mark.skip(
        reason="Set ELASTICSEARCH_RUN_INTEGRATION=1 to run integration tests"
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


class DummyTransport:
    """In-memory transport that records requests and replays canned responses."""

    def __init__(self, status_code: int = 200, content: bytes = b'{"acknowledged":true}'):
        self.status_code = status_code
        self.content = content
        self.calls: list[httpx.Request] = []
        self.closed = False

    def do(self, ctx, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        return httpx.Response(self.status_code, content=self.content, request=request)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def transport() -> DummyTransport:
    return DummyTransport()


@pytest.fixture(autouse=True)
def _clear_elasticsearch_env(
    request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch
) -> None:
    if request.node.get_closest_marker("integration"):
        return
    for name in list(os.environ):
        if name.startswith("ELASTICSEARCH_") and name != "ELASTICSEARCH_RUN_INTEGRATION":
            monkeypatch.delenv(name, raising=False)
