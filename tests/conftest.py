"""Shared test fixtures for recommender SDK tests."""
import time
from contextlib import ExitStack
from unittest.mock import patch

import httpx
import pytest

from recommender_sdk.app.config import Settings
from recommender_sdk.model.rankable import Post
from recommender_sdk.store.cache import CacheNotFoundError
from recommender_sdk.store.db import init_db

BASE_URL = "https://recommender.test"

# Every module that calls get_settings() at runtime
_SETTINGS_CONSUMERS = [
    "recommender_sdk.app.config.get_settings",
    "recommender_sdk.app.logging.get_settings",
    "recommender_sdk.store.db.get_settings",
    "recommender_sdk.store.recommend_store.get_settings",
    "recommender_sdk.cli.main.get_settings",
]


class FakeCache:
    """Dict-backed stand-in for the host application's cache client."""

    def __init__(self, data=None, error=None):
        self.data = dict(data or {})
        self.error = error
        self.keys_read: list[str] = []

    def get(self, key: str) -> dict:
        self.keys_read.append(key)
        if self.error is not None:
            raise self.error
        if key not in self.data:
            raise CacheNotFoundError(key)
        return self.data[key]


class FakeQueue:
    """Records published messages; raises ``error`` on send when set."""

    def __init__(self, error=None):
        self.error = error
        self.sent: list[tuple[str, dict]] = []

    def send(self, topic: str, payload: dict) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append((topic, payload))


def make_post(pid: str, age_seconds: int = 3600, now: float = None, **kwargs) -> Post:
    """Create a Post created ``age_seconds`` before ``now``."""
    now = time.time() if now is None else now
    return Post(id=pid, created_at=int(now - age_seconds), **kwargs)


def mock_client(handler) -> httpx.Client:
    """httpx client whose requests are answered by ``handler``."""
    return httpx.Client(transport=httpx.MockTransport(handler))


def json_handler(body, status_code: int = 200):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=body)
    return handler


@pytest.fixture()
def tmp_settings(tmp_path):
    """Create a Settings instance backed by a temporary directory.

    Patches get_settings globally so all modules use the temp paths.
    """
    settings = Settings(
        base_url=BASE_URL,
        db_path=tmp_path / "test.db",
        log_path=tmp_path / "logs" / "recommender.log",
        weight_timeout_s=2.0,
        http_timeout_s=1.0,
    )

    with ExitStack() as stack:
        for target in _SETTINGS_CONSUMERS:
            stack.enter_context(patch(target, return_value=settings))
        init_db()
        yield settings


@pytest.fixture()
def fake_cache():
    return FakeCache()


@pytest.fixture()
def fake_queue():
    return FakeQueue()
