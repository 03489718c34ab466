"""Pytest configuration for function set tests."""

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from funcset import FunctionSetMiddleware, Registry, function


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Tests start from default settings."""
    for name in (
        "FUNCSET_PATH_SEPARATOR",
        "FUNCSET_DUPLICATE_POLICY",
        "FUNCSET_ERROR_STATUS",
        "FUNCSET_EXPORT_NAME",
        "FUNCSET_SOURCE_EXTENSIONS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def calls():
    """Records every call made to the greet fixture."""
    return []


@pytest.fixture
def greet(calls):
    @function(
        path="/greet",
        title="Greet",
        description="Say hello",
        param_types=[{"type": "string"}],
        http_mapper=["body:name"],
    )
    def greet(name):
        calls.append(name)
        return f"Hello {name}"

    return greet


@pytest.fixture
def registry(greet):
    return Registry().register(greet)


@pytest.fixture
def app(registry):
    app = FastAPI()
    app.add_middleware(FunctionSetMiddleware, registry=registry)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post("/downstream")
    async def downstream():
        return {"handled_by": "app"}

    return app


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
