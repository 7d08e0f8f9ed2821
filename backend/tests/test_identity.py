import json

import httpx
import pytest
from fastapi.testclient import TestClient
from jose import jwt

from staylink.config import settings
from staylink.dependencies import get_request_context
from staylink.main import app
from staylink.services import identity_client as identity_module
from staylink.services.identity_client import IdentityClient, IdentityError

SECRET = "test-signing-secret"


@pytest.fixture
def hs256_tokens(monkeypatch):
    monkeypatch.setattr(settings, "clerk_jwt_public_key", SECRET)
    monkeypatch.setattr(settings, "clerk_jwt_algorithm", "HS256")

    def make(**claims) -> str:
        return jwt.encode(claims, SECRET, algorithm="HS256")

    return make


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _org_handler(metadata: dict, calls: list):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if request.method == "PATCH":
            return httpx.Response(200, json={"id": "org_1", "public_metadata": json.loads(request.content)["public_metadata"]})
        return httpx.Response(200, json={"id": "org_1", "public_metadata": metadata})
    return handler


class TestIdentityClient:
    async def test_organization_type_from_type(self, memory_cache):
        calls = []
        client = IdentityClient(cache=memory_cache, transport=httpx.MockTransport(_org_handler({"type": "hotel"}, calls)))
        assert await client.get_organization_type("org_1") == "hotel"
        assert calls[0].url.path.endswith("/organizations/org_1")

    async def test_organization_type_falls_back_to_role(self, memory_cache):
        client = IdentityClient(cache=memory_cache, transport=httpx.MockTransport(_org_handler({"role": "agency"}, [])))
        assert await client.get_organization_type("org_1") == "agency"

    async def test_organization_lookup_is_cached(self, memory_cache):
        calls = []
        client = IdentityClient(cache=memory_cache, transport=httpx.MockTransport(_org_handler({"type": "hotel"}, calls)))
        await client.get_organization("org_1")
        await client.get_organization("org_1")
        assert len(calls) == 1

    async def test_metadata_update_invalidates_cache(self, memory_cache):
        calls = []
        client = IdentityClient(cache=memory_cache, transport=httpx.MockTransport(_org_handler({"type": "hotel"}, calls)))
        await client.get_organization("org_1")
        await client.update_organization_metadata("org_1", {"role": "hotel"})

        assert calls[1].method == "PATCH"
        assert json.loads(calls[1].content) == {"public_metadata": {"role": "hotel"}}
        assert await memory_cache.get_organization("org_1") is None

    async def test_http_error_raises_identity_error(self, memory_cache):
        client = IdentityClient(
            cache=memory_cache,
            transport=httpx.MockTransport(lambda request: httpx.Response(404, json={"errors": []})),
        )
        with pytest.raises(IdentityError) as exc_info:
            await client.get_organization("missing")
        assert exc_info.value.status_code == 404


class TestRequestContext:
    def test_missing_token(self, client, hs256_tokens):
        resp = client.get("/api/rooms")
        assert resp.status_code == 401

    def test_invalid_token(self, client, hs256_tokens):
        resp = client.get("/api/rooms", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401

    def test_missing_organization(self, client, hs256_tokens):
        token = hs256_tokens(sub="user_1")
        resp = client.get("/api/rooms", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Organization ID required"

    def test_agency_is_forbidden(self, client, hs256_tokens, monkeypatch):
        async def org_type(org_id):
            return "agency"

        monkeypatch.setattr(identity_module.identity_client, "get_organization_type", org_type)
        token = hs256_tokens(sub="user_1", org_id="org_1")
        resp = client.get("/api/rooms", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 403

    def test_identity_failure_is_bad_gateway(self, client, hs256_tokens, monkeypatch):
        async def org_type(org_id):
            raise IdentityError("down")

        monkeypatch.setattr(identity_module.identity_client, "get_organization_type", org_type)
        token = hs256_tokens(sub="user_1", org_id="org_1")
        resp = client.get("/api/rooms", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 502

    async def test_claims_become_context(self, hs256_tokens):
        from fastapi.security import HTTPAuthorizationCredentials

        token = hs256_tokens(sub="user_9", org_id="org_9", org_role="org:admin")
        ctx = await get_request_context(HTTPAuthorizationCredentials(scheme="Bearer", credentials=token))
        assert (ctx.user_id, ctx.org_id, ctx.org_type, ctx.org_role) == ("user_9", "org_9", None, "org:admin")


class TestSetRole:
    @pytest.fixture
    def authed(self, client):
        from staylink.dependencies import RequestContext

        app.dependency_overrides[get_request_context] = lambda: RequestContext(
            user_id="user_1", org_id="org_1", org_role="org:admin"
        )
        return client

    def test_sets_role(self, authed, monkeypatch):
        updates = []

        async def update(org_id, metadata):
            updates.append((org_id, metadata))
            return {}

        monkeypatch.setattr(identity_module.identity_client, "update_organization_metadata", update)
        resp = authed.post("/api/organizations/set-role", json={"organizationId": "org_1", "role": "hotel"})
        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        assert updates == [("org_1", {"role": "hotel"})]

    def test_other_organization_forbidden(self, authed, monkeypatch):
        updates = []

        async def update(org_id, metadata):
            updates.append((org_id, metadata))
            return {}

        monkeypatch.setattr(identity_module.identity_client, "update_organization_metadata", update)
        resp = authed.post("/api/organizations/set-role", json={"organizationId": "org_2", "role": "hotel"})
        assert resp.status_code == 403
        assert updates == []

    def test_non_admin_forbidden(self, client, monkeypatch):
        from staylink.dependencies import RequestContext

        updates = []

        async def update(org_id, metadata):
            updates.append((org_id, metadata))
            return {}

        monkeypatch.setattr(identity_module.identity_client, "update_organization_metadata", update)
        app.dependency_overrides[get_request_context] = lambda: RequestContext(
            user_id="user_2", org_id="org_1", org_role="org:member"
        )
        resp = client.post("/api/organizations/set-role", json={"organizationId": "org_1", "role": "hotel"})
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Only organization admins can set the role"
        assert updates == []

    def test_missing_fields(self, authed):
        resp = authed.post("/api/organizations/set-role", json={"role": "hotel"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Missing organizationId or role"

    def test_invalid_role(self, authed):
        resp = authed.post("/api/organizations/set-role", json={"organizationId": "org_1", "role": "airline"})
        assert resp.status_code == 400
        assert "Must be 'agency' or 'hotel'" in resp.json()["detail"]

    def test_provider_failure(self, authed, monkeypatch):
        async def update(org_id, metadata):
            raise IdentityError("boom", status_code=500)

        monkeypatch.setattr(identity_module.identity_client, "update_organization_metadata", update)
        resp = authed.post("/api/organizations/set-role", json={"organizationId": "org_1", "role": "agency"})
        assert resp.status_code == 500
