"""Error taxonomy shared by the Airtable client, the facade and the HTTP layer.

Every error carries an HTTP status and a stable machine-readable code so the
API boundary can render a ``{"error", "code"}`` envelope without guessing.
"""

from fastapi import status


class PortalError(Exception):
    """Base class for all portal errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        super().__init__(message)

    def to_payload(self) -> dict[str, str]:
        return {"error": self.message, "code": self.code}


class ConfigError(PortalError):
    """Raised when Airtable credentials are missing."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "CONFIG_ERROR"

    def __init__(self, message: str = "Airtable not configured"):
        super().__init__(message)


class InvalidCredentialsError(PortalError):
    """Raised for any failed login, whether or not the email exists."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "INVALID_CREDENTIALS"

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class RateLimitError(PortalError):
    """Raised by the login attempt gate and when upstream 429s exhaust retries."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    code = "RATE_LIMIT"

    def __init__(self, message: str = "Too many attempts. Please try again later."):
        super().__init__(message)


class NotFoundError(PortalError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"

    def __init__(self, message: str = "Not Found"):
        super().__init__(message)


class AirtableError(PortalError):
    """Upstream failure with the provider's status and error type preserved."""

    code = "AIRTABLE_ERROR"

    def __init__(self, message: str, status_code: int, code: str | None = None):
        super().__init__(message, status_code=status_code, code=code or "AIRTABLE_ERROR")
