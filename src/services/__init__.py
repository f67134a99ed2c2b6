"""Services package."""
from src.services.conversation_service import ConversationService

__all__ = [
    "ConversationService",
]
