"""
Exceptions raised by the admin client.
"""
import httpx


class AdminClientError(Exception):
    """Base class for admin client errors."""


class AuthenticationRequired(AdminClientError):
    """Session could not be refreshed; stored credentials are gone and the user must log in again."""


class RefreshQueueFull(AdminClientError):
    """Too many requests are already waiting on the in-flight token refresh."""


class LoginFailed(AdminClientError):
    """Login endpoint rejected the credentials or returned no tokens."""


class ApiError(AdminClientError):
    """Non-2xx response from a resource endpoint."""

    def __init__(self, status_code: int, message: str, response: httpx.Response | None = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.response = response

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        """Build from a response, preferring the envelope's message field."""
        message = ""
        if response.headers.get("content-type", "").startswith("application/json"):
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                message = str(body.get("message") or body.get("error") or "")
        return cls(response.status_code, message or response.reason_phrase or "Request failed", response)
