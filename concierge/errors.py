"""
Error taxonomy shared by the request boundary, collaborators, and executor.

Each error carries a stable ``code`` and an HTTP-equivalent ``status`` so
an API layer can translate it without inspecting messages. Unauthorized
order access deliberately maps to 404 so responses never confirm that an
order exists.
"""


class ConciergeError(Exception):
    """Base class for all errors the engine surfaces to its caller."""

    code = "CONCIERGE_ERROR"
    status = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code

    def to_dict(self) -> dict[str, object]:
        return {"code": self.code, "status": self.status, "message": self.message}


class InvalidRequestError(ConciergeError):
    """A submitted payload is missing required fields or is malformed."""

    code = "INVALID_REQUEST"
    status = 400


class UnauthorizedError(ConciergeError):
    """The requester may not see this record. Reported as not found."""

    code = "UNAUTHORIZED"
    status = 404


class CollaboratorError(ConciergeError):
    """A backend collaborator failed (network error, 5xx)."""

    code = "UPSTREAM_FAILURE"
    status = 502
