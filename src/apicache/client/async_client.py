"""Asynchronous HTTP client that routes requests through apicache plugins.

This module provides :class:`AsyncClient`, the host adapter between
:mod:`httpx` and the plugin chain. Each request becomes a call with an
*input* (query parameters and JSON body) and a
:class:`~apicache.models.CallContext` (verb, path, base URL). The call runs
through :meth:`PluginManager.wrap_handler
<apicache.plugins.manager.PluginManager.wrap_handler>`; the innermost
handler, the origin, performs the actual HTTP exchange.

The origin returns the decoded response body, not the
:class:`httpx.Response`. Error statuses are raised as typed exceptions
before anything reaches the plugins, so failed responses are never cached.

The client performs no retries and injects no credentials; set static
headers (e.g. ``Authorization``) on construction if the API needs them.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

import httpx

from apicache.client.response import extract_response_data
from apicache.exceptions import AuthError, ConnectionError_, NotFoundError, ServerError
from apicache.models import CallContext
from apicache.plugins.base import Plugin
from apicache.plugins.manager import PluginManager


def build_input(params: Optional[dict[str, Any]], json_body: Any) -> Optional[dict[str, Any]]:
    """Combine the request parts that identify a call into one input value.

    Returns ``None`` when the request has neither query parameters nor a
    body, so such calls get an empty input segment in their cache key.
    """
    input: dict[str, Any] = {}
    if params:
        input["params"] = params
    if json_body is not None:
        input["json"] = json_body
    return input or None


class AsyncClient:
    """Asynchronous HTTP client whose requests pass through plugins.

    Must be used as an async context manager.

    Args:
        base_url: Base URL every request path is appended to.
        plugins: Plugins to register, outermost first.
        timeout: Request timeout in seconds.
        verify_ssl: Verify TLS certificates.
        headers: Headers sent with every request.
        transport: Optional :mod:`httpx` transport, e.g.
            :class:`httpx.MockTransport` in tests.

    Example::

        cache = CachePlugin(ttl=300)
        async with AsyncClient("https://api.example.com", plugins=[cache]) as client:
            result = await client.get("/users", params={"page": 1})
            result.data
            await result.refresh()
            client.plugins.cache.clear()
    """

    def __init__(
        self,
        base_url: str = "",
        plugins: Iterable[Plugin] = (),
        timeout: float = 30.0,
        verify_ssl: bool = True,
        headers: Optional[dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._verify_ssl = verify_ssl
        self._headers = dict(headers or {})
        self._transport = transport
        self._plugins = PluginManager(plugins)
        self._dispatch = self._plugins.wrap_handler(self._send)
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def plugins(self) -> PluginManager:
        """The registered plugins, reachable by name (``client.plugins.cache``)."""
        return self._plugins

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> AsyncClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            verify=self._verify_ssl,
            headers=self._headers,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[Any] = None,
    ) -> Any:
        """Dispatch a request through the plugin chain.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE).
            path: URL path appended to ``base_url``.
            params: Query parameters.
            json_body: JSON-serialisable body.

        Returns:
            Whatever the plugin chain returns: a
            :class:`~apicache.wrapper.CachedResult` for cached verbs, the
            decoded body otherwise.

        Raises:
            AuthError: On 401 / 403.
            NotFoundError: On 404.
            ServerError: On any other status >= 400.
            ConnectionError_: On network / timeout errors.
        """
        context = CallContext(verb=method.upper(), path=path, base_url=self._base_url)
        return await self._dispatch(build_input(params, json_body), context)

    async def get(self, path: str, **kwargs: Any) -> Any:
        """Send a GET request. See :meth:`request`."""
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        """Send a POST request. See :meth:`request`."""
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Any:
        """Send a PUT request. See :meth:`request`."""
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> Any:
        """Send a PATCH request. See :meth:`request`."""
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        """Send a DELETE request. See :meth:`request`."""
        return await self.request("DELETE", path, **kwargs)

    # ------------------------------------------------------------------ #
    # Origin
    # ------------------------------------------------------------------ #

    async def _send(self, input: Optional[dict[str, Any]], context: CallContext) -> Any:
        """Perform the HTTP exchange for one call and decode the body."""
        assert self._client is not None, "Client not initialised -- use as async context manager"

        kwargs: dict[str, Any] = {"method": context.verb, "url": context.path}
        if input:
            if "params" in input:
                kwargs["params"] = input["params"]
            if "json" in input:
                kwargs["json"] = input["json"]

        try:
            response = await self._client.request(**kwargs)
        except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as exc:
            raise ConnectionError_(f"Connection failed: {exc}") from exc

        self._map_response_error(response)
        return extract_response_data(response)

    def _map_response_error(self, response: httpx.Response) -> None:
        """Raise a typed exception for error HTTP status codes."""
        status = response.status_code
        if status < 400:
            return

        detail = extract_response_data(response)
        if isinstance(detail, dict):
            msg = detail.get("message") or detail.get("error") or detail.get("detail") or ""
        elif detail is None:
            msg = ""
        else:
            msg = str(detail)[:200]

        prefix = f"HTTP {status}"
        full_msg = f"{prefix}: {msg}" if msg else prefix

        if status in (401, 403):
            raise AuthError(full_msg)
        if status == 404:
            raise NotFoundError(full_msg)
        raise ServerError(full_msg)
