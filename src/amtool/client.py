"""HTTP client for the Alertmanager API v2.

The CLI is a thin client: every command maps to one or two API calls made
through this module. Failures are reported as ``AlertmanagerClientError``
with the request method and URL in the message so the user can see what
was attempted.
"""

import socket
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

import httpx

from .errors import AmtoolError
from .shared.logging import get_logger

logger = get_logger(__name__)

API_PREFIX = "/api/v2"


@dataclass
class AlertmanagerClientError(AmtoolError):
    """Error from the Alertmanager API client."""

    status_code: int | None = None


def dial_address(url: str) -> str:
    """Resolve the ``ip:port`` a request to ``url`` dials.

    Prefers the first IPv4 address; falls back to the first address of any
    family, then to the literal host when the name does not resolve.
    """
    parts = urlsplit(url)
    host = parts.hostname or ""
    port = parts.port or (443 if parts.scheme == "https" else 80)
    try:
        infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError):
        return f"{host}:{port}"

    for family, _, _, _, sockaddr in infos:
        if family == socket.AF_INET:
            return f"{sockaddr[0]}:{port}"
    if infos:
        address = infos[0][4][0]
        return f"[{address}]:{port}" if ":" in address else f"{address}:{port}"
    return f"{host}:{port}"


def _connect_reason(exc: httpx.TransportError) -> str:
    cause: BaseException | None = exc
    while cause is not None:
        if isinstance(cause, ConnectionRefusedError):
            return "connect: connection refused"
        if isinstance(cause, OSError) and cause.strerror:
            return f"connect: {cause.strerror.lower()}"
        grouped = getattr(cause, "exceptions", None)
        if grouped:
            cause = grouped[0]
            continue
        cause = cause.__cause__ or cause.__context__
    return str(exc) or exc.__class__.__name__


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text.strip()
    if isinstance(data, dict):
        return str(data.get("message") or data.get("detail") or data)
    return str(data)


class AlertmanagerClient:
    """HTTP client for the Alertmanager API v2.

    Use as an async context manager; the underlying connection pool lives for
    the duration of the ``async with`` block.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize client.

        Args:
            base_url: Alertmanager URL (e.g., http://localhost:9093)
            timeout: Request timeout in seconds
            transport: Optional transport, used by tests
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "AlertmanagerClient":
        """Enter async context."""
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Accept": "application/json"},
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if not self._client:
            raise AlertmanagerClientError("client not initialized, use 'async with'")
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Make HTTP request to Alertmanager.

        Args:
            method: HTTP method
            path: Path below the API prefix (e.g., /alerts)
            json: JSON body for POST
            params: Query parameters

        Returns:
            Decoded JSON response, or None for empty bodies

        Raises:
            AlertmanagerClientError: On connection, timeout or HTTP errors
        """
        client = self._ensure_client()
        url = f"{self.base_url}{API_PREFIX}{path}"
        op = method.capitalize()
        logger.debug("sending request", method=method, url=url, params=params)
        try:
            response = await client.request(method, f"{API_PREFIX}{path}", json=json, params=params)
        except httpx.TimeoutException:
            raise AlertmanagerClientError(f'{op} "{url}": timeout after {self.timeout}s')
        except (httpx.ConnectError, httpx.NetworkError) as e:
            logger.debug("request failed", method=method, url=url, error=repr(e))
            raise AlertmanagerClientError(
                f'{op} "{url}": dial tcp {dial_address(url)}: {_connect_reason(e)}'
            )

        logger.debug("received response", status=response.status_code, url=url)
        if response.is_error:
            raise AlertmanagerClientError(
                f"{response.status_code} {response.reason_phrase}: {_error_message(response)}",
                status_code=response.status_code,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            raise AlertmanagerClientError(
                f'{op} "{url}": invalid JSON in response: {response.text[:200]!r}',
                status_code=response.status_code,
            )

    # -------------------------------------------------------------------------
    # Alerts
    # -------------------------------------------------------------------------

    async def post_alerts(self, alerts: list[dict[str, Any]]) -> None:
        """Push alerts.

        Args:
            alerts: Alerts in API v2 form (labels, annotations, startsAt, ...)
        """
        await self._request("POST", "/alerts", json=alerts)

    async def get_alerts(
        self,
        filters: list[str] | None = None,
        active: bool = True,
        silenced: bool = False,
        inhibited: bool = False,
    ) -> list[dict[str, Any]]:
        """List alerts.

        Args:
            filters: Matchers in string form, evaluated by the server
            active: Include active alerts
            silenced: Include silenced alerts
            inhibited: Include inhibited alerts

        Returns:
            List of alert dicts
        """
        params: dict[str, Any] = {
            "active": str(active).lower(),
            "silenced": str(silenced).lower(),
            "inhibited": str(inhibited).lower(),
        }
        if filters:
            params["filter"] = filters
        return await self._request("GET", "/alerts", params=params) or []

    # -------------------------------------------------------------------------
    # Silences
    # -------------------------------------------------------------------------

    async def post_silence(self, silence: dict[str, Any]) -> str:
        """Create a silence.

        Returns:
            ID of the new silence
        """
        response = await self._request("POST", "/silences", json=silence)
        return (response or {}).get("silenceID", "")

    async def get_silences(self, filters: list[str] | None = None) -> list[dict[str, Any]]:
        """List silences, optionally filtered server-side by matchers."""
        params = {"filter": filters} if filters else None
        return await self._request("GET", "/silences", params=params) or []

    async def delete_silence(self, silence_id: str) -> None:
        """Expire a silence."""
        await self._request("DELETE", f"/silence/{silence_id}")
