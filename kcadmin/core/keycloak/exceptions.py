"""Keycloak-specific exceptions for error handling."""
from __future__ import annotations
from typing import Optional

_MAX_BODY_IN_MESSAGE = 500


def _truncate(text: str) -> str:
    if len(text) <= _MAX_BODY_IN_MESSAGE:
        return text
    return text[:_MAX_BODY_IN_MESSAGE] + "..."


class KeycloakError(Exception):
    """Base exception for all Keycloak operations."""
    pass


class KeycloakAPIError(KeycloakError):
    """HTTP error from Keycloak Admin API.

    Attributes:
        status_code: HTTP status code (None when no response was received)
        message: Error message from response
        endpoint: API endpoint that failed
    """

    def __init__(self, status_code: Optional[int], message: str, endpoint: str):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"[{status_code}] {endpoint}: {_truncate(message)}")


class AuthenticationFailed(KeycloakAPIError):
    """Login against the token endpoint failed or returned no usable token."""
    pass


class UnexpectedStatus(KeycloakAPIError):
    """Server answered outside the operation's success set.

    The full response body is kept on ``body`` for diagnostics; the
    exception message only carries a truncated copy.
    """

    def __init__(self, status_code: int, body: str, endpoint: str, method: str = ""):
        super().__init__(status_code, body, endpoint)
        self.method = method
        self.body = body
        if method:
            self.args = (f"[{status_code}] {method} {endpoint}: {_truncate(body)}",)


class RequestFailed(KeycloakError):
    """Transport-level failure (connection refused, timeout, invalid URL)."""

    def __init__(self, method: str, endpoint: str, reason: str):
        self.method = method
        self.endpoint = endpoint
        self.reason = reason
        super().__init__(f"{method} {endpoint} failed: {reason}")


class DecodeFailed(KeycloakError):
    """Success status, but the body did not match the expected shape."""

    def __init__(self, endpoint: str, reason: str, body: str = ""):
        self.endpoint = endpoint
        self.reason = reason
        self.body = body
        super().__init__(f"{endpoint}: unable to decode response ({reason})")
