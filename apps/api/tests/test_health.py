from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient

import main
from config import settings
from main import app


@pytest.mark.asyncio
async def test_readiness_requires_storage_base_url():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        with patch.object(settings, "STORAGE_PUBLIC_BASE_URL", ""):
            missing = await client.get("/health/ready")
        with patch.object(settings, "STORAGE_PUBLIC_BASE_URL", "https://cdn.example/storage/v1/object/public"):
            ready = await client.get("/health/ready")
        live = await client.get("/health/live")

    assert missing.status_code == 503
    assert missing.json()["missing"] == ["STORAGE_PUBLIC_BASE_URL"]
    assert ready.json() == {"ready": True}
    assert live.json() == {"alive": True}


@pytest.mark.asyncio
async def test_health_reports_degraded_dependencies():
    async def down() -> str:
        return "down: unreachable"

    async def up() -> str:
        return "up"

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        with patch("routers.health._database_status", new=up), patch("routers.health._redis_status", new=down):
            response = await client.get("/health")

    payload = response.json()
    assert payload["status"] == "degraded"
    assert payload["database"] == "up"
    assert payload["redis"] == "down: unreachable"


def test_run_serves_on_configured_host_and_port():
    with (
        patch.object(settings, "API_HOST", "127.0.0.1"),
        patch.object(settings, "API_PORT", 9123),
        patch("main.uvicorn.run") as serve,
    ):
        main.run()

    serve.assert_called_once()
    assert serve.call_args.args == (app,)
    assert serve.call_args.kwargs["host"] == "127.0.0.1"
    assert serve.call_args.kwargs["port"] == 9123
