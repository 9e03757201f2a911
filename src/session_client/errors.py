from typing import Optional

import httpx


# Messages mirror what the admin frontend shows for each backend status
_STATUS_MESSAGES = {
    400: "Invalid request. Please check your input.",
    401: "Invalid credentials. Please try again.",
    403: "Access denied. Your account may be disabled.",
    409: "Conflict with the current state of the resource.",
    422: "Validation failed. Please check your input.",
    429: "Too many requests. Please try again later.",
    500: "Server error. Please try again later.",
}


def describe_http_error(status_code: int, body: Optional[object] = None) -> str:
    """
    Build a human-readable message for an HTTP error status.

    A ``message`` field in a JSON error body wins over the generic text,
    except for 429 and 500 where the backend message is not useful to users.

    Args:
        status_code: The HTTP status code
        body: Parsed JSON body of the error response, if any

    Returns:
        Message suitable for surfacing to the host application
    """
    backend_message = None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            backend_message = message

    if status_code in (429, 500):
        return _STATUS_MESSAGES[status_code]
    if backend_message:
        return backend_message
    return _STATUS_MESSAGES.get(status_code, "An unexpected error occurred.")


def mask_credential(credential: Optional[str]) -> str:
    """
    Mask a credential for safe display in logs and error messages.

    Shows the last 6 characters of a token (e.g., "...xyz123").
    """
    if not credential:
        return "<none>"
    if len(credential) > 6:
        return f"...{credential[-6:]}"
    else:
        return "***"


class CredentialExpiredError(httpx.HTTPStatusError):
    """
    Raised when a response reports that the access credential has expired.

    Normally absorbed by the refresh coordinator. It reaches the caller only
    when the request had already been replayed once (double expiry).
    """

    def __init__(self, request: httpx.Request, response: httpx.Response):
        super().__init__(
            f"Access credential expired (HTTP {response.status_code}) "
            f"for {request.method} {request.url}",
            request=request,
            response=response,
        )


class RefreshFailedError(Exception):
    """
    Raised when the refresh endpoint cannot issue a new credential pair.

    This is terminal for the session: the credential store has been cleared
    and the session listener notified. Every caller waiting on the failed
    refresh cycle receives the same instance.

    Attributes:
        message: Human-readable message about the error
        status_code: HTTP status of the refresh response, None for network
            errors, timeouts or a missing refresh token
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)
