"""
Error taxonomy for the console

Raised by the API client and by client-side validation. Pollers log these and
retry on their next tick; one-shot actions let them reach the caller.
"""

from typing import Optional


class ConsoleError(Exception):
    """Base error for everything raised by the console"""


class ValidationFailure(ConsoleError):
    """Client-side validation failed, the request was never sent"""


class TransientNetworkFailure(ConsoleError):
    """Connection error, timeout or other failure without a usable response"""


class UnexpectedResponse(ConsoleError):
    """A success status whose body does not have the expected shape"""


class ApiError(ConsoleError):
    """The server answered with an error status"""
    
    def __init__(self, status_code: int, detail: Optional[str] = None):
        self.status_code = status_code
        self.detail = detail
        message = f"{status_code}: {detail}" if detail else f"HTTP {status_code}"
        super().__init__(message)


class ServerRejection(ApiError):
    """4xx with a server-supplied message, shown verbatim"""


class ServiceUnavailable(ApiError):
    """500/503 from the backend"""


class Unauthorized(ServerRejection):
    """401 - the session collaborator has already been notified"""


def error_for_status(status_code: int, detail: Optional[str] = None) -> ApiError:
    """
    Build the matching ApiError subclass for an HTTP error status
    
    Args:
        status_code: HTTP status code (>= 400)
        detail: Optional server-supplied message
        
    Returns:
        ApiError: Classified error
    """
    if status_code == 401:
        return Unauthorized(status_code, detail)
    if status_code in (500, 503):
        return ServiceUnavailable(status_code, detail)
    if 400 <= status_code < 500 and detail:
        return ServerRejection(status_code, detail)
    return ApiError(status_code, detail)
