"""
Error taxonomy for the messaging core.

Every failure the core reports to a caller is a MessagingError subclass
carrying the HTTP status and a machine-readable code. Views turn them
into JSON error responses; anything else (database outages) is logged
at the view boundary and reported as Internal.
"""


class MessagingError(Exception):
    status_code = 500
    code = 'error'
    default_message = "Messaging error"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_dict(self):
        return {"error": self.message, "code": self.code}


# --- 400 ---

class ValidationError(MessagingError):
    status_code = 400
    code = 'validation_error'
    default_message = "Invalid request"


class InvalidReply(ValidationError):
    code = 'invalid_reply'
    default_message = "Reply target not found in this conversation"


# --- 403 ---

class Unauthorized(MessagingError):
    """Actor is not a participant (or not the sender) for the requested mutation."""
    status_code = 403
    code = 'unauthorized'
    default_message = "Not allowed"


class Forbidden(MessagingError):
    """A block relation prevents the action. Never says which side blocked."""
    status_code = 403
    code = 'forbidden'
    default_message = "Cannot interact with this user due to block settings."


class ProtectedAccount(Forbidden):
    code = 'protected_account'
    default_message = "This account cannot be blocked"


# --- 404 ---

class NotFound(MessagingError):
    status_code = 404
    code = 'not_found'
    default_message = "Not found"


# --- 409 ---

class Conflict(MessagingError):
    status_code = 409
    code = 'conflict'
    default_message = "Conflict"


class SelfConversation(Conflict):
    code = 'self_conversation'
    default_message = "Cannot start a conversation with yourself"


class SelfBlock(Conflict):
    code = 'self_block'
    default_message = "Cannot block yourself"


class AlreadyBlocked(Conflict):
    code = 'already_blocked'
    default_message = "User already blocked"


# --- 500 ---

class Internal(MessagingError):
    status_code = 500
    code = 'internal_error'
    default_message = "Internal error"
