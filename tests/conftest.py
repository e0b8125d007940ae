"""Shared test configuration and fixtures."""

import base64

import pytest
from fastapi.testclient import TestClient
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from app.main import app, get_model_factory, get_store
from extractor.core.memory import ResultStore

# Smallest valid PNG (1x1 transparent pixel)
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


class ExplodingChatModel(FakeListChatModel):
    """Chat model whose every call fails like a rejected API request."""

    def _call(self, *args, **kwargs):
        raise RuntimeError("API key not valid. Please pass a valid API key.")


@pytest.fixture
def exploding_model():
    return ExplodingChatModel(responses=[])


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def png_data_url() -> str:
    return "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")


@pytest.fixture
def store() -> ResultStore:
    return ResultStore()


@pytest.fixture
def replies():
    """Replies the fake model hands out, in order; tests may reassign."""
    return ["Name,Age\nAlice,30\nBob,25"]


@pytest.fixture
def seen_keys():
    return []


@pytest.fixture
def client(store, replies, seen_keys):
    def factory(api_key=None):
        seen_keys.append(api_key)
        return FakeListChatModel(responses=list(replies))

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_model_factory] = lambda: factory
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
