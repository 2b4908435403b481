"""AsanaClient - authenticated async gateway to the Asana REST API.

Wraps an ``httpx.AsyncClient`` and exposes the four verbs the action engine needs plus a
cursor-following ``paginate`` helper. Every non-2xx status and every transport failure is
raised as ``RemoteApiError``; there is no retry layer.
"""

from typing import Any, AsyncIterator, Dict, Optional

import httpx

from taskpilot.core.config import settings
from taskpilot.core.exceptions import RemoteApiError
from taskpilot.core.logging import ContextualLogger
from taskpilot.core.logging import logger as default_logger
from taskpilot.schemas.credentials import Credentials

Envelope = Dict[str, Any]


class AsanaClient:
    """Thin bearer-token client for the Asana API.

    The only state it owns is the token and the underlying connection pool. Use it as an
    async context manager so the pool is closed when the batch completes.
    """

    def __init__(
        self,
        token: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[ContextualLogger] = None,
    ):
        """Initialize the client.

        Args:
            token: Bearer token for the Authorization header
            base_url: API root (defaults to settings.ASANA_API_URL)
            timeout: Uniform request timeout in seconds (defaults to settings.ASANA_HTTP_TIMEOUT)
            transport: Optional httpx transport (used to fake the API in tests)
            logger: Optional contextual logger
        """
        if not token:
            raise ValueError("No access token available")

        headers = {"Authorization": f"Bearer {token}", "Accept": "application/json"}
        if settings.ASANA_USER_AGENT:
            headers["User-Agent"] = settings.ASANA_USER_AGENT

        self._client = httpx.AsyncClient(
            base_url=base_url or settings.ASANA_API_URL,
            headers=headers,
            timeout=timeout if timeout is not None else settings.ASANA_HTTP_TIMEOUT,
            transport=transport,
        )
        self.logger = logger or default_logger.with_context(component="asana_client")

    @classmethod
    def from_credentials(cls, credentials: Credentials, **kwargs: Any) -> "AsanaClient":
        """Create a client authenticated with the request's credentials."""
        return cls(credentials.token, **kwargs)

    async def __aenter__(self) -> "AsanaClient":
        """Enter the async context."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close the underlying connection pool."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    # -------------------------------------------------------------------------
    # Verbs
    # -------------------------------------------------------------------------

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Envelope:
        """GET a resource or listing page."""
        return await self._request("GET", path, params=params)

    async def post(self, path: str, body: Optional[Dict[str, Any]] = None) -> Envelope:
        """POST ``{"data": body}`` to a path."""
        return await self._request("POST", path, json={"data": body or {}})

    async def put(self, path: str, body: Optional[Dict[str, Any]] = None) -> Envelope:
        """PUT ``{"data": body}`` to a path."""
        return await self._request("PUT", path, json={"data": body or {}})

    async def delete(self, path: str, params: Optional[Dict[str, Any]] = None) -> Envelope:
        """DELETE a resource."""
        return await self._request("DELETE", path, params=params)

    async def paginate(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        page_size: Optional[int] = None,
    ) -> AsyncIterator[Dict[str, Any]]:
        """Iterate every item of a cursor-paginated listing.

        Follows ``next_page.offset`` until the service stops returning one.

        Args:
            path: Listing path (e.g. ``/workspaces/{gid}/tags``)
            params: Extra query parameters (e.g. ``opt_fields``)
            page_size: Items per page (defaults to settings.ASANA_PAGE_SIZE)

        Yields:
            Items of the ``data`` array across all pages

        Raises:
            RemoteApiError: If any page request fails or a page has no ``data`` array
        """
        query: Dict[str, Any] = dict(params or {})
        query["limit"] = page_size or settings.ASANA_PAGE_SIZE

        page = 0
        while True:
            envelope = await self.get(path, params=query)
            page += 1
            data = envelope.get("data") if isinstance(envelope, dict) else None
            if not isinstance(data, list):
                raise RemoteApiError(
                    f"Listing page {page} has no data array",
                    method="GET",
                    path=path,
                )
            for item in data:
                yield item

            next_page = envelope.get("next_page")
            offset = next_page.get("offset") if isinstance(next_page, dict) else None
            if not offset:
                self.logger.debug(f"Listing {path} exhausted after {page} page(s)")
                return
            query["offset"] = offset

    # -------------------------------------------------------------------------
    # Internal Methods
    # -------------------------------------------------------------------------

    async def _request(self, method: str, path: str, **kwargs: Any) -> Envelope:
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            message = _error_message(e.response)
            self.logger.warning(
                f"HTTP error from Asana API: {e.response.status_code} for {method} {path}: "
                f"{message}"
            )
            raise RemoteApiError(
                message, status_code=e.response.status_code, method=method, path=path
            ) from e
        except httpx.HTTPError as e:
            self.logger.warning(f"Transport error calling Asana API: {method} {path}: {e}")
            raise RemoteApiError(str(e) or e.__class__.__name__, method=method, path=path) from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise RemoteApiError(
                "Response body is not valid JSON",
                status_code=response.status_code,
                method=method,
                path=path,
            ) from e


def _error_message(response: httpx.Response) -> str:
    """Extract the remote error message from an Asana error envelope."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase

    errors = body.get("errors") if isinstance(body, dict) else None
    if errors:
        messages = [err.get("message", "") for err in errors if isinstance(err, dict)]
        joined = "; ".join(m for m in messages if m)
        if joined:
            return joined
    return response.reason_phrase or f"HTTP {response.status_code}"
