"""Identity provider client — Clerk backend API for organization metadata."""

import asyncio
import logging

import httpx

from staylink.config import settings
from staylink.services.cache_service import CacheService, cache_service

logger = logging.getLogger(__name__)


class IdentityError(Exception):
    """Identity provider request failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class IdentityClient:
    """Adapter for the organizations endpoints of the Clerk backend API."""

    def __init__(
        self,
        cache: CacheService | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._cache = cache or cache_service
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=settings.clerk_api_url,
                timeout=15.0,
                transport=self._transport,
                headers={"Authorization": f"Bearer {settings.clerk_secret_key}"},
            )
        return self._client

    async def _request(self, method: str, path: str, **kwargs) -> dict:
        client = await self._get_client()
        for attempt in range(3):
            try:
                resp = await client.request(method, path, **kwargs)
                if resp.status_code == 429 and attempt < 2:
                    await asyncio.sleep(2 ** attempt)
                    continue
                resp.raise_for_status()
                return resp.json()
            except httpx.HTTPStatusError as e:
                logger.error(f"Identity API {method} {path} error: {e.response.status_code}")
                raise IdentityError(
                    f"Identity provider returned {e.response.status_code}",
                    status_code=e.response.status_code,
                ) from e
            except httpx.RequestError as e:
                if attempt < 2:
                    await asyncio.sleep(2 ** attempt)
                    continue
                logger.error(f"Identity API request error: {e}")
                raise IdentityError(f"Identity provider unreachable: {e}") from e
        raise IdentityError("Identity provider rate limit exceeded", status_code=429)

    async def get_organization(self, org_id: str) -> dict:
        """Fetch an organization, served from cache when fresh."""
        cached = await self._cache.get_organization(org_id)
        if cached is not None:
            return cached

        org = await self._request("GET", f"/organizations/{org_id}")
        await self._cache.set_organization(org_id, org)
        return org

    async def get_organization_type(self, org_id: str) -> str | None:
        """Organization kind (``hotel`` / ``agency``) from public metadata.

        Reads ``type`` and falls back to ``role``, which is what the set-role
        endpoint writes.
        """
        org = await self.get_organization(org_id)
        metadata = org.get("public_metadata") or {}
        return metadata.get("type") or metadata.get("role")

    async def update_organization_metadata(self, org_id: str, public_metadata: dict) -> dict:
        org = await self._request(
            "PATCH",
            f"/organizations/{org_id}/metadata",
            json={"public_metadata": public_metadata},
        )
        await self._cache.invalidate_organization(org_id)
        logger.info(f"Organization {org_id} metadata updated")
        return org

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None


identity_client = IdentityClient()
