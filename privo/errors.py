"""Domain errors raised by the service layer.

Every error carries a machine-readable code and the HTTP status the API
answers with. Routers let these propagate to the global handlers in
privo.api.error_handlers.
"""


class PrivoError(Exception):
    """Base exception for all Privo domain errors."""

    code = "ERROR"
    http_status = 500
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> dict:
        return {"error": {"code": self.code, "message": self.message}}


class Unauthorized(PrivoError):
    """Caller lacks the role the operation requires."""
    code = "UNAUTHORIZED"
    http_status = 403
    default_message = "You are not allowed to perform this action"


class NotFound(PrivoError):
    code = "NOT_FOUND"
    http_status = 404
    default_message = "Not found"


class InvalidCode(PrivoError):
    code = "INVALID_CODE"
    http_status = 404
    default_message = "Invalid invite code"


class LinkDisabled(PrivoError):
    code = "LINK_DISABLED"
    http_status = 400
    default_message = "Invite link is disabled"


class LinkExhausted(PrivoError):
    code = "LINK_EXHAUSTED"
    http_status = 410
    default_message = "This invite link has reached its usage limit"


class LinkRevoked(PrivoError):
    code = "LINK_REVOKED"
    http_status = 410
    default_message = "This invite link has been revoked"


class AlreadyMember(PrivoError):
    code = "ALREADY_MEMBER"
    http_status = 409
    default_message = "You are already a member of this circle"


class CannotRemoveOwner(PrivoError):
    code = "CANNOT_REMOVE_OWNER"
    http_status = 400
    default_message = "The circle owner cannot be removed"


class InvalidArgument(PrivoError):
    code = "INVALID_ARGUMENT"
    http_status = 400
    default_message = "Invalid argument"


class CodeGenerationExhausted(PrivoError):
    code = "CODE_GENERATION_EXHAUSTED"
    http_status = 500
    default_message = "Could not generate a unique invite code"


class VaultLocked(PrivoError):
    """Event media requested before the memory vault unlocks."""
    code = "VAULT_LOCKED"
    http_status = 423
    default_message = "The memory vault is still locked"
