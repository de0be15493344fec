"""Shared test fixtures for backend tests."""

import json
from unittest.mock import patch

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from pydantic import BaseModel

from legal_assistant.api.dependencies import get_services
from legal_assistant.core.errors import PersistenceError
from legal_assistant.core.kv import MemoryKVStore
from legal_assistant.models.user import User
from legal_assistant.services.container import build_services
from legal_assistant.services.llm.base import BaseLLMProvider, LLMResponse

USER_EMAIL = "a@b.com"

KNOWLEDGE_JSON = json.dumps(
    {
        "summary": "s",
        "key_concepts": ["a"],
        "relevant_clauses": [{"title": "t", "text": "x"}],
    }
)


class StubProvider(BaseLLMProvider):
    """Records every call and answers with a fixed text, or raises when configured to."""

    def __init__(self, text: str = "42", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[dict] = []
        self.api_keys: list[str] = []

    async def complete(
        self,
        content: str,
        system_instruction: str | None = None,
        output_schema: type[BaseModel] | None = None,
    ) -> LLMResponse:
        self.calls.append(
            {
                "content": content,
                "system_instruction": system_instruction,
                "output_schema": output_schema,
            }
        )
        if self.error is not None:
            raise self.error
        return LLMResponse(text=self.text)

    def factory(self, api_key: str) -> "StubProvider":
        self.api_keys.append(api_key)
        return self


class FailingKVStore(MemoryKVStore):
    """Memory store whose reads and/or writes can be switched to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_reads = False
        self.fail_writes = False

    async def get(self, key):
        if self.fail_reads:
            raise PersistenceError(f"read of '{key}' failed")
        return await super().get(key)

    async def set(self, key, value):
        if self.fail_writes:
            raise PersistenceError(f"write of '{key}' failed")
        await super().set(key, value)


@pytest.fixture
def kv():
    return FailingKVStore()


@pytest.fixture
def provider():
    return StubProvider()


@pytest.fixture
def services(kv, provider):
    return build_services(kv=kv, provider_factory=provider.factory)


@pytest_asyncio.fixture
async def user(services):
    """Registered user with a Gemini key configured."""
    await services.credentials.register(USER_EMAIL)
    return await services.credentials.upsert(User(email=USER_EMAIL, api_keys={"gemini": "test-key"}))


@pytest.fixture
def client(services):
    """FastAPI TestClient with all external deps patched."""
    with (
        patch("legal_assistant.main.init_db", lambda: None),
        patch("legal_assistant.main.build_services", return_value=services),
    ):
        from legal_assistant.main import app

        app.dependency_overrides[get_services] = lambda: services

        with TestClient(app, headers={"X-User-Email": USER_EMAIL}) as c:
            yield c

        app.dependency_overrides.clear()


@pytest.fixture
def configured_client(client):
    """Client whose user is registered with a Gemini key."""
    client.post("/api/users/register", json={"email": USER_EMAIL})
    client.patch("/api/users/me", json={"api_keys": {"gemini": "test-key"}})
    return client
