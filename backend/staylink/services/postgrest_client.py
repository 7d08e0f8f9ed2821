"""PostgREST client — thin async adapter over the Supabase REST data API."""

import logging
from typing import Any

import httpx

from staylink.config import settings

logger = logging.getLogger(__name__)

# PostgREST / PostgreSQL error codes the room store reacts to
SCHEMA_CACHE_CODES = {"PGRST204", "PGRST202"}
ARRAY_PARSE_CODE = "22P02"
RLS_VIOLATION_CODE = "42501"


class PostgrestError(Exception):
    """Error body returned by PostgREST for a failed request."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: str | None = None,
        hint: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details
        self.hint = hint
        self.status_code = status_code

    @classmethod
    def from_response(cls, resp: httpx.Response) -> "PostgrestError":
        try:
            body = resp.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            return cls(
                message=resp.text or f"HTTP {resp.status_code}",
                code=str(resp.status_code),
                status_code=resp.status_code,
            )
        return cls(
            message=body.get("message") or f"HTTP {resp.status_code}",
            code=body.get("code") or str(resp.status_code),
            details=body.get("details"),
            hint=body.get("hint"),
            status_code=resp.status_code,
        )


class PostgrestClient:
    """Adapter for a single PostgREST endpoint and API key."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.api_key = api_key
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self._timeout,
                transport=self._transport,
                headers={
                    "apikey": self.api_key,
                    "Authorization": f"Bearer {self.api_key}",
                    "Accept": "application/json",
                },
            )
        return self._client

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        client = await self._get_client()
        try:
            resp = await client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.error(f"PostgREST request error on {method} {path}: {e}")
            raise PostgrestError(message=f"Data API unreachable: {e}") from e

        if resp.is_error:
            err = PostgrestError.from_response(resp)
            logger.warning(f"PostgREST {method} {path} failed: {err.code} {err.message}")
            raise err

        if not resp.content:
            return None
        return resp.json()

    async def select(
        self,
        table: str,
        columns: str = "*",
        order: str | None = None,
    ) -> list[dict]:
        """Select rows. ``order`` uses PostgREST syntax, e.g. ``created_at.desc``."""
        params = {"select": columns}
        if order:
            params["order"] = order
        data = await self._request("GET", f"/{table}", params=params)
        return data or []

    async def insert(
        self,
        table: str,
        rows: dict | list[dict],
        columns: str = "*",
    ) -> list[dict]:
        """Insert one or many rows and return the stored representation."""
        data = await self._request(
            "POST",
            f"/{table}",
            params={"select": columns},
            json=rows,
            headers={
                "Content-Type": "application/json",
                "Prefer": "return=representation",
            },
        )
        if data is None:
            return []
        return data if isinstance(data, list) else [data]

    async def rpc(self, function: str, params: dict) -> Any:
        """Call a database function through ``/rpc/<function>``."""
        return await self._request(
            "POST",
            f"/rpc/{function}",
            json=params,
            headers={"Content-Type": "application/json"},
        )


def create_server_client() -> PostgrestClient:
    """Client for server-side work: service-role key when set, else anon key."""
    if not settings.supabase_service_role_key:
        logger.warning(
            "SUPABASE_SERVICE_ROLE_KEY not set. Using anon key which may cause RLS errors."
        )
    key = settings.supabase_service_role_key or settings.supabase_anon_key
    return PostgrestClient(settings.postgrest_url, key, timeout=settings.postgrest_timeout)


def create_anon_client() -> PostgrestClient:
    return PostgrestClient(settings.postgrest_url, settings.supabase_anon_key, timeout=settings.postgrest_timeout)
