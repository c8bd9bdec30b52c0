"""ERP HTTP transport.

Thin aiohttp wrapper shared by the concrete adapters. It performs exactly one
HTTP exchange per call and maps every failure into the connector error
taxonomy; retries, caching and authentication live in the connector layer.
"""

import asyncio
import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

import aiohttp

from connectors.errors import ERPNetworkError, ERPTimeoutError, error_for_status
from core.observability.logging import get_logger

logger = get_logger(__name__)


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dumps(payload: Any) -> str:
    """Serialize a request body, encoding Decimal/date values the ERPs accept."""
    return json.dumps(payload, default=_json_default)


class ERPHttpClient:
    """HTTP client for ERP REST/OData APIs.

    Usage:
        client = ERPHttpClient("https://sap.example.com:50000", timeout_seconds=30)
        data = await client.request("GET", "/b1s/v1/Items", params={"$top": "10"})
        await client.close()
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._session = session
        self._owns_session = session is None

    def _build_url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    async def _get_session(self) -> aiohttp.ClientSession:
        # Sessions must be created inside a running event loop
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        data: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Perform one HTTP call.

        Args:
            method: HTTP method
            path: Path relative to base_url (or an absolute URL)
            params: Query parameters
            json: JSON request body
            data: Form-encoded request body (used by OAuth token endpoints)
            headers: Extra request headers
            timeout: Override of the client timeout in seconds

        Returns:
            Decoded JSON body, or {} for empty responses

        Raises:
            ERPTimeoutError: The call exceeded the timeout
            ERPNetworkError: No response was received
            ERPError: Subclass matching the HTTP error status
        """
        url = self._build_url(path)
        session = await self._get_session()
        request_headers = {"Accept": "application/json"}
        body = None
        if json is not None:
            request_headers["Content-Type"] = "application/json"
            body = dumps(json)
        if headers:
            request_headers.update(headers)

        client_timeout = aiohttp.ClientTimeout(total=timeout or self.timeout_seconds)

        try:
            async with session.request(
                method,
                url,
                params={k: str(v) for k, v in (params or {}).items()},
                data=body if body is not None else data,
                headers=request_headers,
                timeout=client_timeout,
            ) as response:
                response_text = await response.text()

                if response.status >= 400:
                    raise error_for_status(response.status, response_text, url, response.headers)

                if response.status == 204 or not response_text:
                    return {}
                try:
                    return _loads(response_text)
                except ValueError:
                    logger.warning(f"Non-JSON response from {method} {url}")
                    return {"raw": response_text}

        except asyncio.TimeoutError as e:
            raise ERPTimeoutError(f"Request timed out after {timeout or self.timeout_seconds}s: {method} {url}") from e
        except aiohttp.ClientError as e:
            raise ERPNetworkError(f"Network error calling {method} {url}: {e}") from e

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None


def _loads(text: str) -> Any:
    return json.loads(text)
