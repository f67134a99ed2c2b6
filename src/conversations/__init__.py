"""
Conversation Bookkeeping

Provides the in-memory conversation core:
- Generic envelope store (MessageList)
- Role visibility rules and robot context selection
- Append-only conversations with shared-robot-message duplication
- Summarization watermark tracking
- Registry with get-or-create semantics
"""

from src.conversations.errors import ConversationError, InvalidOperationError
from src.conversations.message_list import Envelope, MessageList
from src.conversations.message_factory import MessageFactory
from src.conversations.conversation import Conversation
from src.conversations.registry import ConversationFactory, ConversationRegistry

__all__ = [
    "ConversationError",
    "InvalidOperationError",
    "Envelope",
    "MessageList",
    "MessageFactory",
    "Conversation",
    "ConversationFactory",
    "ConversationRegistry",
]
