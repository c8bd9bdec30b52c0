"""ERP connector error taxonomy.

Every failure crossing the connector boundary is an ``ERPError``. The retry
policy, the re-authentication path and the orchestrator's partial-failure
isolation all branch on these classes rather than on raw status codes.
"""

from typing import Mapping, Optional

from core.models.domain import UnsupportedEntityTypeError


class ERPError(Exception):
    """Base exception for ERP connector errors."""
    def __init__(self, message: str, status_code: int = 0, response_body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class ERPNetworkError(ERPError):
    """No response received (connection refused, reset, DNS failure)."""
    pass


class ERPTimeoutError(ERPNetworkError):
    """The call exceeded its configured timeout."""
    pass


class ERPServerError(ERPError):
    """ERP returned a 5xx response."""
    pass


class ERPRateLimitError(ERPError):
    """Rate limit exceeded (429)."""
    def __init__(self, message: str, retry_after: Optional[float] = None, response_body: str = ""):
        super().__init__(message, 429, response_body)
        self.retry_after = retry_after


class ERPClientError(ERPError):
    """ERP rejected the request (4xx other than 401/403/429)."""
    pass


class ERPNotFoundError(ERPClientError):
    """Resource not found (404)."""
    pass


class ERPAuthenticationError(ERPError):
    """Authentication failed (401/403) or credentials were rejected."""
    pass


class TranslationError(ERPError):
    """A record could not be mapped between domain and external shape."""
    def __init__(self, message: str, entity_type: Optional[str] = None):
        super().__init__(message)
        self.entity_type = entity_type


class CapabilityNotImplementedError(ERPError, NotImplementedError):
    """The adapter does not implement the requested operation."""
    pass


# =============================================================================
# Classification
# =============================================================================

RETRYABLE_ERRORS = (ERPNetworkError, ERPServerError, ERPRateLimitError)


def is_retryable(error: BaseException) -> bool:
    """Network/timeout errors, 5xx and 429 are retryable; nothing else is."""
    return isinstance(error, RETRYABLE_ERRORS)


def _retry_after_seconds(headers: Optional[Mapping[str, str]]) -> Optional[float]:
    if not headers:
        return None
    value = headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        # HTTP-date form; the configured delay applies
        return None


def error_for_status(
    status: int,
    body: str = "",
    url: str = "",
    headers: Optional[Mapping[str, str]] = None,
) -> ERPError:
    """Map an HTTP error status to the matching ``ERPError`` subclass."""
    if status in (401, 403):
        return ERPAuthenticationError(f"Authentication failed ({status}): {url}", status, body)
    if status == 404:
        return ERPNotFoundError(f"Resource not found: {url}", status, body)
    if status == 429:
        return ERPRateLimitError(
            f"Rate limited: {url}",
            retry_after=_retry_after_seconds(headers),
            response_body=body,
        )
    if status >= 500:
        return ERPServerError(f"Server error ({status}): {url}", status, body)
    return ERPClientError(f"Request rejected ({status}): {url}", status, body)


__all__ = [
    "ERPError",
    "ERPNetworkError",
    "ERPTimeoutError",
    "ERPServerError",
    "ERPRateLimitError",
    "ERPClientError",
    "ERPNotFoundError",
    "ERPAuthenticationError",
    "TranslationError",
    "CapabilityNotImplementedError",
    "UnsupportedEntityTypeError",
    "RETRYABLE_ERRORS",
    "is_retryable",
    "error_for_status",
]
