"""
Domain exceptions. main.py maps each one onto an HTTP status and the {error} envelope.
"""


class KempoverseError(Exception):
    """Base exception for all Kempoverse application exceptions."""
    status_code = 500
    headers: dict[str, str] | None = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(KempoverseError):
    """Raised when input is missing or malformed."""
    status_code = 400


class AuthenticationError(KempoverseError):
    """Raised when a bearer token is missing, invalid or expired."""
    status_code = 401
    headers = {"WWW-Authenticate": "Bearer"}


class NotFoundError(KempoverseError):
    """Raised when a requested resource is not found."""
    status_code = 404
