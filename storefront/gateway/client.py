"""
Gateway Client

HTTP client for the hosted backend: a PostgREST-style REST API over the
relational store, a blob store, and an auth endpoint.

Every call returns a result value instead of raising; see GatewayResult.
"""

import logging
from typing import Any, Optional

import httpx

from .models import FETCH_ERROR, GatewayError, GatewayResult, UploadResult
from .query import Filter, Query, filters_to_params

logger = logging.getLogger(__name__)

SINGLE_OBJECT_ACCEPT = "application/vnd.pgrst.object+json"


class GatewayClient:
    """
    Client for the hosted REST + storage backend.

    Usage:
        gateway = GatewayClient(base_url, anon_key)
        result = await gateway.query("products", Query().eq("is_active", True))
        if result.ok:
            products = result.data
    """

    def __init__(
        self,
        base_url: str,
        anon_key: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize gateway client.

        Args:
            base_url: Backend project URL
            anon_key: Public API key, also used as bearer for anonymous reads
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self._http_client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    def _headers(self, token: Optional[str] = None, **extra: str) -> dict[str, str]:
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {token or self.anon_key}",
            "Content-Type": "application/json",
        }
        headers.update(extra)
        return headers

    @staticmethod
    async def _error_from_response(response: httpx.Response, fallback: str) -> GatewayError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = body.get("message") or body.get("error_description") or body.get("error") or body.get("msg")
        code = body.get("error_code") or body.get("code") or str(response.status_code)
        return GatewayError(
            message=str(message) if message else fallback,
            code=str(code),
            status_code=response.status_code,
        )

    async def _send(
        self,
        method: str,
        url: str,
        fallback: str,
        *,
        headers: dict[str, str],
        params: Optional[list[tuple[str, str]]] = None,
        json: Any = None,
        content: Optional[bytes] = None,
    ) -> tuple[Optional[httpx.Response], Optional[GatewayError]]:
        try:
            response = await self._http_client.request(
                method,
                url,
                headers=headers,
                params=params,
                json=json,
                content=content,
            )
        except httpx.HTTPError as e:
            logger.error(f"Gateway transport failure: {method} {url} - {e}")
            return None, GatewayError(message=str(e) or "Network error", code=FETCH_ERROR)

        if response.status_code >= 400:
            error = await self._error_from_response(response, fallback)
            logger.error(f"Gateway request failed: {method} {url} {response.status_code} - {error.message}")
            return response, error

        return response, None

    @staticmethod
    def _first_row(payload: Any) -> Any:
        if isinstance(payload, list):
            return payload[0] if payload else None
        return payload

    # ==================== Table APIs ====================

    async def query(self, table: str, query: Optional[Query] = None, token: Optional[str] = None) -> GatewayResult:
        """Read rows from a table"""
        query = query or Query()
        headers = self._headers(token)
        if query.single:
            headers["Accept"] = SINGLE_OBJECT_ACCEPT

        response, error = await self._send(
            "GET",
            f"{self.base_url}/rest/v1/{table}",
            "Request failed",
            headers=headers,
            params=query.to_params(),
        )
        if error:
            return GatewayResult(error=error)
        return GatewayResult(data=response.json())

    async def insert(self, table: str, values: dict[str, Any], token: Optional[str] = None) -> GatewayResult:
        """Insert a row and return its representation"""
        response, error = await self._send(
            "POST",
            f"{self.base_url}/rest/v1/{table}",
            "Insert failed",
            headers=self._headers(token, Prefer="return=representation"),
            json=values,
        )
        if error:
            return GatewayResult(error=error)
        return GatewayResult(data=self._first_row(response.json()))

    async def update(
        self,
        table: str,
        values: dict[str, Any],
        filters: dict[str, Any] | tuple[Filter, ...],
        token: Optional[str] = None,
    ) -> GatewayResult:
        """Update rows matching filters and return the first updated row"""
        if not filters:
            raise ValueError("update requires at least one filter")

        response, error = await self._send(
            "PATCH",
            f"{self.base_url}/rest/v1/{table}",
            "Update failed",
            headers=self._headers(token, Prefer="return=representation"),
            params=filters_to_params(filters),
            json=values,
        )
        if error:
            return GatewayResult(error=error)
        return GatewayResult(data=self._first_row(response.json()))

    async def delete(
        self,
        table: str,
        filters: dict[str, Any] | tuple[Filter, ...],
        token: Optional[str] = None,
    ) -> GatewayResult:
        """Delete rows matching filters"""
        if not filters:
            raise ValueError("delete requires at least one filter")

        response, error = await self._send(
            "DELETE",
            f"{self.base_url}/rest/v1/{table}",
            "Delete failed",
            headers=self._headers(token),
            params=filters_to_params(filters),
        )
        if error:
            return GatewayResult(error=error)
        return GatewayResult(data=None)

    # ==================== Storage APIs ====================

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{path}"

    def object_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/{bucket}/{path}"

    async def upload_file(
        self,
        bucket: str,
        path: str,
        content: bytes,
        content_type: str = "application/octet-stream",
        token: Optional[str] = None,
        public: bool = True,
    ) -> UploadResult:
        """
        Upload a blob.

        Returns the public URL, or for private buckets the object URL that
        must be fetched with a bearer token.
        """
        _, error = await self._send(
            "POST",
            self.object_url(bucket, path),
            "Upload failed",
            headers=self._headers(token, **{"Content-Type": content_type, "x-upsert": "true"}),
            content=content,
        )
        if error:
            return UploadResult(error=error)

        url = self.public_url(bucket, path) if public else self.object_url(bucket, path)
        logger.info(f"Uploaded {len(content)} bytes to {bucket}/{path}")
        return UploadResult(url=url)

    # ==================== Auth APIs ====================

    async def auth_request(
        self,
        method: str,
        path: str,
        body: Optional[dict[str, Any]] = None,
        token: Optional[str] = None,
        params: Optional[dict[str, str]] = None,
    ) -> GatewayResult:
        """Call an /auth/v1 endpoint"""
        response, error = await self._send(
            method,
            f"{self.base_url}/auth/v1/{path.lstrip('/')}",
            "Authentication failed",
            headers=self._headers(token),
            params=list(params.items()) if params else None,
            json=body,
        )
        if error:
            return GatewayResult(error=error)
        if not response.content:
            return GatewayResult(data=None)
        return GatewayResult(data=response.json())
