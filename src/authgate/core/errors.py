"""Error taxonomy for AuthGate.

Every failure a request can end with belongs to exactly one ``ErrorKind``.
Each kind carries a fixed HTTP status and a generic message; the API layer
has a single handler that turns an ``AuthError`` into ``{"error": <message>}``.
"""

from enum import Enum


class ErrorKind(Enum):
    """Closed set of failure kinds with their HTTP status and message."""

    BAD_REQUEST = (400, "Bad Request")
    UNAUTHENTICATED = (401, "Unauthenticated")
    FORBIDDEN = (403, "Forbidden")
    NOT_FOUND = (404, "Not Found")
    CONFLICT = (409, "Conflict")
    PASSCODE_NOT_MATCH = (499, "Passcode Not Match")
    SERVER_ERROR = (500, "Server Error")

    def __init__(self, status_code: int, default_message: str) -> None:
        self.status_code = status_code
        self.default_message = default_message


class AuthError(Exception):
    """Failure that maps onto one ``ErrorKind``.

    Args:
        kind: The failure kind.
        message: Optional message replacing the kind's default one
            (e.g. ``"Unauthenticated - Deleted User"``).
    """

    def __init__(self, kind: ErrorKind, message: str | None = None) -> None:
        self.kind = kind
        self.message = message or kind.default_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    def __repr__(self) -> str:
        return f"AuthError(kind={self.kind.name}, message={self.message!r})"


class NotFoundError(AuthError):
    """Raised by stores when the referenced document does not exist."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(ErrorKind.NOT_FOUND, message)


class DuplicatedKeyError(AuthError):
    """Raised when an admin key with the same id or nickname already exists."""

    def __init__(self) -> None:
        super().__init__(ErrorKind.CONFLICT, "Duplicated Key")


class ExternalServiceError(AuthError):
    """Raised when an external API (User, TNC, mail) fails unexpectedly."""

    def __init__(self, service: str, detail: str) -> None:
        self.service = service
        self.detail = detail
        super().__init__(ErrorKind.SERVER_ERROR)

    def __str__(self) -> str:
        return f"[{self.service}] {self.detail}"
