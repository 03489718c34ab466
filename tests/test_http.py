"""Tests for HTTP dispatch through the registry middleware."""

import asyncio

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from funcset import (
    FunctionSetMiddleware,
    Registry,
    extract_arguments,
    function,
    resolve_specifier,
)


def test_resolve_specifier_walks_nested_fields():
    view = {"body": {"user": {"id": 7, "tags": ["a", "b"]}}}

    assert resolve_specifier(view, "body:user:id") == 7
    assert resolve_specifier(view, "body:user:tags:1") == "b"
    assert resolve_specifier(view, "body") == view["body"]


def test_resolve_specifier_missing_segments_are_none():
    view = {"body": {"user": {"id": 7}}}

    assert resolve_specifier(view, "body:user:name") is None
    assert resolve_specifier(view, "body:missing:deeper") is None
    assert resolve_specifier(view, "body:user:id:more") is None
    assert resolve_specifier({"body": ["a"]}, "body:5") is None


def test_extract_arguments_defaults_to_body():
    view = {"body": {"name": "Amy"}}

    assert extract_arguments(view, None) == [{"name": "Amy"}]
    assert extract_arguments(view, ["body:name"]) == ["Amy"]
    assert extract_arguments(view, []) == []


@pytest.mark.asyncio
async def test_post_dispatches_to_function(client, calls):
    """A matching POST invokes the function with mapped arguments."""
    r = await client.post("/greet", json={"name": "Amy"})

    assert r.status_code == 200
    assert r.json() == "Hello Amy"
    assert calls == ["Amy"]


@pytest.mark.asyncio
async def test_invalid_argument_returns_502(client, calls):
    r = await client.post("/greet", json={"name": 5})

    assert r.status_code == 502
    assert "param 0" in r.json()
    assert "is not of type 'string'" in r.json()
    assert calls == []


@pytest.mark.asyncio
async def test_get_is_never_dispatched(client, calls):
    r = await client.get("/greet")

    assert r.status_code in (404, 405)
    assert calls == []


@pytest.mark.asyncio
async def test_unmatched_post_passes_through(client):
    r = await client.post("/downstream", json={"name": "Amy"})

    assert r.status_code == 200
    assert r.json() == {"handled_by": "app"}


@pytest.mark.asyncio
async def test_app_routes_still_served(client):
    r = await client.get("/health")
    assert r.json() == {"status": "ok"}


async def _serve(registry, method, path, **kwargs):
    app = FastAPI()
    app.add_middleware(FunctionSetMiddleware, registry=registry)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.request(method, path, **kwargs)


@pytest.mark.asyncio
async def test_whole_body_without_mapper():
    registry = Registry()

    @function(path="/sum", param_types=[{"type": "array", "items": {"type": "number"}}], registry=registry)
    def total(numbers):
        return sum(numbers)

    r = await _serve(registry, "POST", "/sum", json=[1, 2, 3.5])

    assert r.status_code == 200
    assert r.json() == 6.5


@pytest.mark.asyncio
async def test_header_and_body_mapping():
    registry = Registry()

    @function(path="/whoami", http_mapper=["headers:X-User", "body:greeting"], registry=registry)
    def whoami(user, greeting):
        return {"user": user, "greeting": greeting}

    r = await _serve(registry, "POST", "/whoami", json={"greeting": "hi"}, headers={"X-User": "amy"})

    assert r.json() == {"user": "amy", "greeting": "hi"}


@pytest.mark.asyncio
async def test_async_function_failure_returns_502():
    registry = Registry()

    @function(path="/slow", registry=registry)
    async def slow(body):
        await asyncio.sleep(0)
        raise RuntimeError("downstream unavailable")

    r = await _serve(registry, "POST", "/slow", json={})

    assert r.status_code == 502
    assert r.json() == "RuntimeError: downstream unavailable"


@pytest.mark.asyncio
async def test_request_view_passed_as_context():
    registry = Registry()

    @function(path="/inspect", http_mapper=[], registry=registry)
    def inspect_request(*, context):
        return {"method": context["method"], "query": context["query"]}

    r = await _serve(registry, "POST", "/inspect?page=2")

    assert r.json() == {"method": "POST", "query": {"page": "2"}}


@pytest.mark.asyncio
async def test_non_json_body_is_text():
    registry = Registry()

    @function(path="/echo", registry=registry)
    def echo(body):
        return body

    r = await _serve(registry, "POST", "/echo", content=b"plain words")

    assert r.json() == "plain words"


@pytest.mark.asyncio
async def test_unserializable_result_returns_502():
    registry = Registry()

    @function(path="/opaque", registry=registry)
    def opaque(body):
        return object()

    r = await _serve(registry, "POST", "/opaque", json={})

    assert r.status_code == 502


@pytest.mark.asyncio
async def test_error_status_from_environment(monkeypatch):
    monkeypatch.setenv("FUNCSET_ERROR_STATUS", "500")
    registry = Registry()

    @function(path="/fail", registry=registry)
    def fail(body):
        raise ValueError("nope")

    r = await _serve(registry, "POST", "/fail", json={})

    assert r.status_code == 500


@pytest.mark.asyncio
async def test_get_http_handler_passes_through(registry):
    """The bound handler calls ``call_next`` for unknown paths."""
    from starlette.requests import Request
    from starlette.responses import PlainTextResponse

    scope = {
        "type": "http",
        "method": "POST",
        "path": "/unknown",
        "headers": [],
        "query_string": b"",
    }
    seen = []

    async def call_next(request):
        seen.append(request.url.path)
        return PlainTextResponse("next")

    handler = registry.get_http_handler()
    response = await handler(Request(scope), call_next)

    assert seen == ["/unknown"]
    assert response.body == b"next"
