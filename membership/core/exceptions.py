# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain exceptions: each carries the HTTP status and machine code the
API layer renders. Services raise these; controllers never build error
responses by hand.
"""


class MembershipError(Exception):
    """Base exception for all membership service errors."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(MembershipError):
    """Raised when input is missing or malformed."""

    status_code = 400
    code = "validation_error"


class Unauthenticated(MembershipError):
    """Raised when a credential is missing, invalid or expired."""

    status_code = 401
    code = "unauthenticated"


class Forbidden(MembershipError):
    """Raised when a valid credential lacks the required role."""

    status_code = 403
    code = "forbidden"


class NotFound(MembershipError):
    """Raised when a referenced entity does not exist."""

    status_code = 404
    code = "not_found"


class Conflict(MembershipError):
    """Raised on a duplicate registration.

    Answers 400 rather than 409: existing clients treat every rejected
    registration as a bad request.
    """

    status_code = 400
    code = "conflict"


class SourceMissing(MembershipError):
    """Raised when the member roster cannot be read. Fatal at startup."""

    code = "source_missing"


# ── Token verification ──

class VerificationError(Exception):
    """Base for credential verification failures."""

    pass


class InvalidToken(VerificationError):
    """Signature mismatch or malformed payload."""

    pass


class ExpiredToken(VerificationError):
    """Token is past its expiry."""

    pass
