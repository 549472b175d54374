"""Shared fixtures: temporary migrated database, stub provider, app client."""

from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from chatline.config import get_settings
from chatline.db import dispose_engine, get_session_factory, init_database, reset_session_factory
from chatline.db.repositories import create_session
from chatline.main import create_app
from chatline.providers import BaseProvider, ChatRequest, ChatResponse, ProviderClient, ProviderConfig
from chatline.services import ChatService, resolve_user


class StubProvider(BaseProvider):
    """Provider stub that records requests and replays canned replies."""

    def __init__(
        self,
        replies: list[str] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
        healthy: bool = True,
    ):
        self.replies = replies or ["Hi there!"]
        self.error = error
        self.delay = delay
        self.healthy = healthy
        self.requests: list[ChatRequest] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def healthcheck(self) -> bool:
        return self.healthy

    async def chat_once(self, request: ChatRequest) -> ChatResponse:
        self.requests.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            index = min(len(self.requests), len(self.replies)) - 1
            return ChatResponse(content=self.replies[index], model=request.model, finish_reason="stop")
        finally:
            self.in_flight -= 1


@pytest.fixture
def database_url(tmp_path, monkeypatch):
    """Point settings, engine, and session factory at a fresh SQLite file."""
    url = f"sqlite:///{tmp_path / 'test.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    get_settings.cache_clear()
    dispose_engine()
    reset_session_factory()
    yield url
    dispose_engine()
    reset_session_factory()
    get_settings.cache_clear()


@pytest.fixture
def migrated_db(database_url):
    init_database()
    return database_url


@pytest.fixture
def session_factory(migrated_db):
    return get_session_factory()


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def provider_config() -> ProviderConfig:
    return ProviderConfig(
        base_url="http://provider.test/v1",
        api_key="test-key",
        model="test-model",
        max_tokens=500,
        temperature=0.7,
        timeout_seconds=5,
        max_retries=0,
        system_prompt="You are a test assistant.",
    )


@pytest.fixture
def stub_provider() -> StubProvider:
    return StubProvider()


@pytest.fixture
def chat_service(stub_provider, provider_config) -> ChatService:
    return ChatService(ProviderClient(stub_provider, provider_config))


@pytest.fixture
def user(db_session):
    return resolve_user(db_session, "alice")


@pytest.fixture
def chat_session(db_session, user):
    return create_session(db_session, user.id)


@pytest.fixture
def app(migrated_db, chat_service):
    application = create_app()
    application.state.chat_service = chat_service
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
