import json
import os

# Config é lida no import: precisa vir antes de importar o app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["GEMINI_API_KEY"] = "test-key"
os.environ.pop("SCHEMA_PROMPT_PATH", None)
os.environ.pop("CORS_ORIGINS", None)

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import create_engine, text

from querybridge.db import get_engine
from querybridge.main import app, get_http_client


class FakeGemini:
    """Responde como a API generateContent e guarda as chamadas recebidas."""

    def __init__(self):
        self.reply = "SELECT 1"
        self.status_code = 200
        self.calls = []

    def question_of(self, request: httpx.Request) -> str:
        prompt = json.loads(request.content)["contents"][0]["parts"][0]["text"]
        return prompt.rsplit("\nUser: ", 1)[1]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": {"message": "boom"}})

        reply = self.reply(self.question_of(request)) if callable(self.reply) else self.reply
        if reply is None:
            return httpx.Response(200, json={"candidates": []})
        return httpx.Response(
            200,
            json={"candidates": [{"content": {"parts": [{"text": reply}], "role": "model"}}]},
        )


@pytest.fixture
def gemini():
    return FakeGemini()


@pytest.fixture
def llm_client(gemini):
    with httpx.Client(transport=httpx.MockTransport(gemini.handle)) as c:
        yield c


# Banco sqlite em arquivo, compartilhado entre threads do threadpool
@pytest.fixture
def db_engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE brand (id INTEGER PRIMARY KEY, name VARCHAR(50))"))
        conn.execute(
            text("INSERT INTO brand (id, name) VALUES (1, 'Toyota'), (2, 'Ford'), (3, 'BMW')")
        )
    yield engine
    engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(llm_client, db_engine):
    def override_get_http_client():
        yield llm_client

    app.dependency_overrides[get_http_client] = override_get_http_client
    app.dependency_overrides[get_engine] = lambda: db_engine

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
