"""Middleware tests: request ID, CORS, error handling."""

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from collabex.config import get_settings
from collabex.errors import Conflict, NotFound
from collabex.middleware import setup_middleware


@pytest.mark.asyncio
async def test_request_id_generated(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert len(response.headers["x-request-id"]) == 36  # UUID format


@pytest.mark.asyncio
async def test_cors_preflight(client: AsyncClient) -> None:
    response = await client.options(
        "/health",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, content-type, x-client-info, apikey",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


@pytest.mark.asyncio
async def test_404_returns_json(client: AsyncClient) -> None:
    response = await client.get("/nonexistent-path")
    assert response.status_code == 404
    assert response.json() == {"detail": "Not Found"}


@pytest_asyncio.fixture
async def error_client():
    """A bare app with the production middleware and routes that fail on purpose."""
    app = FastAPI()
    setup_middleware(app, get_settings())

    @app.get("/missing")
    async def missing() -> None:
        raise NotFound("Collaboration not found")

    @app.get("/clash")
    async def clash() -> None:
        raise Conflict("Already reviewed")

    @app.get("/boom")
    async def boom() -> None:
        raise RuntimeError("secret internals")

    @app.get("/typed")
    async def typed(limit: int) -> dict:
        return {"limit": limit}

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
async def test_domain_errors_map_to_status(error_client: AsyncClient) -> None:
    response = await error_client.get("/missing")
    assert response.status_code == 404
    assert response.json() == {"detail": "Collaboration not found"}

    response = await error_client.get("/clash")
    assert response.status_code == 409
    assert response.json() == {"detail": "Already reviewed"}


@pytest.mark.asyncio
async def test_unhandled_error_hides_detail(error_client: AsyncClient) -> None:
    response = await error_client.get("/boom")
    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    assert "secret" not in response.text


@pytest.mark.asyncio
async def test_validation_error_shape(error_client: AsyncClient) -> None:
    response = await error_client.get("/typed", params={"limit": "many"})
    assert response.status_code == 422
    body = response.json()
    assert body["detail"] == "Validation error"
    assert body["errors"][0]["loc"] == ["query", "limit"]
