import json

import httpx
import pytest
import pytest_asyncio
from dependency_injector import providers

from api.features.conversation.completion import SUMMARY_INSTRUCTION, CompletionClient
from api.main import create_fastapi_app
from api.shared.entities.registry import BaseEntity
from core.settings import (
    AppSettings,
    CompletionSettings,
    IdentitySettings,
    PgDbSettings,
    Settings,
)
from infra.resources import DatabaseResource, HttpClientResource

COMPLETION_URL = "https://llm.test/api/v1/chat/completions"
API_KEY = "test-key"


class FakeCompletionAPI:
    """MockTransport handler standing in for the chat-completion endpoint."""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.reply = "Hello! How can I help you today?"
        self.summary = '"Friendly Greeting And Help"'

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.requests.append({"headers": request.headers, "json": payload})
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": "upstream down"})

        last = payload["messages"][-1]["content"]
        content = self.summary if last == SUMMARY_INSTRUCTION else self.reply
        return httpx.Response(
            200,
            json={
                "created": 1700000000,
                "choices": [{"message": {"role": "assistant", "content": content}}],
            },
        )

    @property
    def chat_requests(self):
        return [
            r for r in self.requests
            if r["json"]["messages"][-1]["content"] != SUMMARY_INSTRUCTION
        ]


@pytest.fixture
def fake_api():
    return FakeCompletionAPI()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        APP=AppSettings(JSON_LOGS=False, LOG_LEVEL="WARNING", ALLOWED_ORIGINS="http://testserver"),
        DATABASE=PgDbSettings(DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'chat.db'}"),
        COMPLETION=CompletionSettings(
            COMPLETION_API_URL=COMPLETION_URL,
            COMPLETION_API_KEY=API_KEY,
        ),
        IDENTITY=IdentitySettings(USER_COOKIE_SECURE=False),
    )


@pytest_asyncio.fixture
async def database(settings):
    resource = DatabaseResource(str(settings.DATABASE.DATABASE_URL))
    await resource.init()
    async with resource.engine.begin() as conn:
        await conn.run_sync(BaseEntity.metadata.create_all)
    try:
        yield resource
    finally:
        await resource.shutdown()


@pytest_asyncio.fixture
async def session(database):
    db_session = database.get_session()
    try:
        yield db_session
    finally:
        await db_session.close()


@pytest_asyncio.fixture
async def http_client(fake_api):
    resource = HttpClientResource(timeout_seconds=5, transport=httpx.MockTransport(fake_api))
    await resource.init()
    try:
        yield resource
    finally:
        await resource.shutdown()


@pytest.fixture
def completion_client(http_client):
    return CompletionClient(http_client, api_url=COMPLETION_URL, api_key=API_KEY)


@pytest_asyncio.fixture
async def app(settings, database, http_client):
    application = create_fastapi_app(settings)
    application.container.infrastructure.database.override(providers.Object(database))
    application.container.infrastructure.http_client.override(providers.Object(http_client))
    try:
        yield application
    finally:
        application.container.unwire()


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client
