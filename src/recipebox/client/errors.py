class ClientError(Exception):
    """Raised when a request to the RecipeBox API fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BadRequestError(ClientError):
    """400: a required field was missing or invalid."""


class UnauthenticatedError(ClientError):
    """401: invalid credentials, or the token is missing, invalid or expired."""


class NotFoundError(ClientError):
    """404: the requested record does not exist."""


class ServerError(ClientError):
    """5xx: the server failed unexpectedly."""


class TransportError(ClientError):
    """The server could not be reached."""


def error_for_status(status_code: int, message: str) -> ClientError:
    if status_code == 400:
        return BadRequestError(message, status_code)
    if status_code == 401:
        return UnauthenticatedError(message, status_code)
    if status_code == 404:
        return NotFoundError(message, status_code)
    if status_code >= 500:
        return ServerError(message, status_code)
    return ClientError(message, status_code)
