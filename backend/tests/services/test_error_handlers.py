"""Error Handlers - verifies every failure leaves as a JSON:API error document."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel

from worktrack.api.error_handlers import register_error_handlers
from worktrack.core.errors import InternalError, VersionConflictError


class _Body(BaseModel):
    count: int


@pytest.fixture
async def error_client():
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/conflict")
    async def conflict():
        raise VersionConflictError("version conflict")

    @app.get("/internal")
    async def internal():
        raise InternalError(detail="connection reset by peer")

    @app.get("/boom")
    async def boom():
        raise RuntimeError("secret stack detail")

    @app.post("/body")
    async def body(payload: _Body):
        return payload

    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as c:
        yield c


async def test_domain_error_uses_its_status_and_code(error_client):
    res = await error_client.get("/conflict")
    assert res.status_code == 400
    assert res.json() == {"errors": [{
        "status": "400",
        "code": "version_conflict",
        "title": "Version conflict error",
        "detail": "version conflict",
    }]}


async def test_internal_error_detail_not_rendered(error_client):
    res = await error_client.get("/internal")
    assert res.status_code == 500
    assert "connection reset" not in res.text


async def test_unhandled_exception_is_generic_500(error_client):
    res = await error_client.get("/boom")
    assert res.status_code == 500
    assert res.json()["errors"][0]["code"] == "internal_error"
    assert "secret" not in res.text


async def test_validation_error_points_at_field(error_client):
    res = await error_client.post("/body", json={"count": "many"})
    assert res.status_code == 400
    error = res.json()["errors"][0]
    assert error["code"] == "bad_parameter"
    assert error["source"]["pointer"] == "body.count"
