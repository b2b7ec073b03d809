"""
Shared fixtures for NodeScout tests.
"""

import json
import os
from types import SimpleNamespace
from typing import Dict, List, Optional
from unittest.mock import MagicMock

import pytest
import requests

from nodescout.core.config import NodeScoutConfig
from nodescout.core.scan_log import ScanLog
from nodescout.core.store import MemoryStore
from nodescout.extraction.ai_adapter import GeminiExtractor
from nodescout.network.http_client import HTTPClientManager, SourceFetcher


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate every test from the developer's environment and secrets file."""
    for key in list(os.environ):
        if key.startswith("NODESCOUT_") or key in ("API_KEY", "GEMINI_API_KEY"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("NODESCOUT_SECRETS_FILE", str(tmp_path / "missing.env"))
    monkeypatch.setenv("NODESCOUT_STORE_FILE", str(tmp_path / "store.json"))


@pytest.fixture
def config():
    return NodeScoutConfig()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def scan_log():
    return ScanLog()


class FakeModel:
    """Stands in for ``genai.GenerativeModel``."""

    def __init__(self, owner: "FakeModelFactory", **kwargs):
        self.owner = owner
        self.kwargs = kwargs

    def generate_content(self, prompt):
        self.owner.prompts.append(prompt)
        if self.owner.error is not None:
            raise self.owner.error
        return SimpleNamespace(text=self.owner.response_text)


class FakeModelFactory:
    def __init__(self, response_text: Optional[str] = "[]", error: Optional[Exception] = None):
        self.response_text = response_text
        self.error = error
        self.prompts: List[str] = []
        self.calls: List[Dict] = []

    def __call__(self, **kwargs):
        self.calls.append(kwargs)
        return FakeModel(self, **kwargs)


@pytest.fixture
def make_extractor():
    """Build a GeminiExtractor whose model returns canned output."""
    def _make(response=None, error=None, api_key="test-key", max_chars=10000):
        text = response if isinstance(response, str) or response is None else json.dumps(response)
        factory = FakeModelFactory(response_text=text, error=error)
        extractor = GeminiExtractor(api_key, max_chars=max_chars, model_factory=factory)
        return extractor, factory
    return _make


def make_response(status_code: int = 200, text: str = ""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    return resp


@pytest.fixture
def make_fetcher(scan_log):
    """SourceFetcher whose session answers from a url -> response/exception map.

    A route may also be a callable returning one of those, run on the
    fetching thread.
    """
    def _make(routes: Dict[str, object], timeout: float = 5):
        def fake_get(url, headers=None, timeout=None):
            outcome = routes.get(url)
            if callable(outcome):
                outcome = outcome()
            if outcome is None:
                raise requests.ConnectionError(f"no route to {url}")
            if isinstance(outcome, Exception):
                raise outcome
            if isinstance(outcome, tuple):
                return make_response(*outcome)
            return make_response(200, outcome)

        session = MagicMock()
        session.get.side_effect = fake_get
        manager = HTTPClientManager()
        manager._session = session
        return SourceFetcher(manager, timeout=timeout, max_workers=4, scan_log=scan_log), session
    return _make
