class ConversationError(Exception):
    """Base class for conversation bookkeeping errors."""
    pass


class InvalidOperationError(ConversationError):
    """Raised when an operation is not permitted for the message it was given."""
    pass
