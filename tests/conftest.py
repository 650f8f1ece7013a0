"""
Shared fixtures for JobSwipe tests.

Provides in-memory repositories, fake chat models and an httpx transport
builder so no test touches MongoDB, hh.ru or OpenRouter.
"""

import os
import sys
from pathlib import Path

# Set test environment BEFORE any imports so Config/ServiceSettings load test values
os.environ["ENVIRONMENT"] = "development"
os.environ["OPENROUTER_API_KEY"] = ""
os.environ["HH_CLIENT_ID"] = "test-client-id"
os.environ["HH_CLIENT_SECRET"] = "test-client-secret"
os.environ["HH_REDIRECT_URI"] = "http://localhost:8000/auth/hh/callback"

sys.path.insert(0, str(Path(__file__).parent))

import httpx
import pytest

from helpers.fake_llm import make_fake_llm
from helpers.memory_repositories import build_memory_repositories


@pytest.fixture
def repositories():
    """Fresh in-memory repository set."""
    return build_memory_repositories()


@pytest.fixture
def fake_llm_factory():
    return make_fake_llm


@pytest.fixture
def mock_http_factory():
    """
    Build an httpx.AsyncClient whose requests are answered by handler.

    Usage:
        http = mock_http_factory(lambda request: httpx.Response(200, json={}))
    """
    def factory(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory
