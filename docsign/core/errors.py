"""Error taxonomy for the signing client."""


class DocSignError(Exception):
    """Base class for errors surfaced to the user as an inline message."""

    status_code: int = 500
    default_message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None):
        self.inline_message = message or self.default_message
        super().__init__(self.inline_message)


class ValidationError(DocSignError):
    """Raised when input is rejected locally, before any network call."""

    status_code = 400
    default_message = "Invalid input."


class PlacementError(DocSignError):
    """Raised when a placement request cannot be built."""

    status_code = 409
    default_message = "Could not determine PDF page dimensions for signature placement."


class PageRenderError(DocSignError):
    """Raised when the PDF cannot be loaded or rasterized."""

    status_code = 422
    default_message = "Failed to render the PDF document."


class AuthError(DocSignError):
    """Raised on a missing, expired or invalid token (HTTP 401)."""

    status_code = 401
    default_message = "Session expired. Please log in again."


class AuthorizationError(DocSignError):
    """Raised when the user does not own the document (HTTP 403)."""

    status_code = 403
    default_message = "You are not authorized to access this document."


class NotFoundError(DocSignError):
    """Raised when the document does not exist (HTTP 404)."""

    status_code = 404
    default_message = "Document not found or access denied."


class RequestError(DocSignError):
    """Raised on any other client-side HTTP error (4xx)."""

    status_code = 400
    default_message = "The request was rejected by the server."


class ServerError(DocSignError):
    """Raised when the backend fails (HTTP 5xx)."""

    status_code = 502
    default_message = "The server failed to process the request."


class NetworkError(DocSignError):
    """Raised when the backend cannot be reached."""

    status_code = 503
    default_message = "Could not reach the server. Check your connection and try again."


class RequestTimeoutError(NetworkError):
    """Raised when the backend does not answer in time."""

    status_code = 504
    default_message = "The server did not respond in time. Please try again."


def error_for_status(status_code: int, message: str | None = None) -> DocSignError:
    """Build the error matching an HTTP status code."""
    if status_code == 401:
        return AuthError(message)
    if status_code == 403:
        return AuthorizationError(message)
    if status_code == 404:
        return NotFoundError(message)
    if status_code >= 500:
        return ServerError(message)
    return RequestError(message)
