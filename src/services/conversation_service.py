"""
Conversation Service

Conversation-ID keyed facade over a ConversationRegistry for the transport
layer (HTTP controllers, Slack handlers, robot workers). Reads against an
unknown conversation ID return empty results and never create anything.
"""

from typing import List, Optional

from src.conversations.conversation import Conversation
from src.conversations.registry import ConversationRegistry
from src.models.message import ConversationMessage, MessageFilter
from src.utils.observability import logger


class ConversationService:
    """
    Coordinates message bookkeeping across conversations.

    Usage:
        service = ConversationService(ConversationRegistry())

        service.add_message_to_conversation("conv-1", message)
        service.get_messages_visible_to_role("conv-1", "customer")
        service.share_robot_message("conv-1", "robot-msg-1", "shared-msg-1")
    """

    def __init__(self, registry: ConversationRegistry):
        """
        Initialize conversation service.

        Args:
            registry: Registry owned by the hosting application
        """
        self._registry = registry

    @property
    def registry(self) -> ConversationRegistry:
        return self._registry

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        return self._registry.get_by_id(conversation_id)

    def add_message_to_conversation(
        self,
        conversation_id: str,
        message: ConversationMessage,
    ) -> str:
        """
        Append a message, creating the conversation on first use.

        Returns:
            The message ID
        """
        conversation = self._registry.get_or_create(conversation_id)
        conversation.add_message(message)
        return message.id

    def get_messages_visible_to_role(
        self,
        conversation_id: str,
        role: str,
    ) -> List[ConversationMessage]:
        conversation = self.get_conversation(conversation_id)
        if conversation is None:
            return []
        return conversation.get_conversation_for_role(role)

    def get_messages_for_robot_processing(self, conversation_id: str) -> List[ConversationMessage]:
        conversation = self.get_conversation(conversation_id)
        if conversation is None:
            return []
        return conversation.get_messages_for_robot_processing()

    def get_filtered_messages(
        self,
        conversation_id: str,
        criteria: MessageFilter,
    ) -> List[ConversationMessage]:
        conversation = self.get_conversation(conversation_id)
        if conversation is None:
            return []
        return conversation.get_filtered_messages(criteria)

    def get_messages_by_author(
        self,
        conversation_id: str,
        author_id: str,
    ) -> List[ConversationMessage]:
        conversation = self.get_conversation(conversation_id)
        if conversation is None:
            return []
        return conversation.get_messages_by_author(author_id)

    def get_recent_messages_within_token_limit(
        self,
        conversation_id: str,
        max_tokens: Optional[int] = None,
    ) -> List[ConversationMessage]:
        conversation = self.get_conversation(conversation_id)
        if conversation is None:
            return []
        return conversation.get_recent_messages_within_token_limit(max_tokens)

    def get_latest_message(self, conversation_id: str) -> Optional[ConversationMessage]:
        conversation = self.get_conversation(conversation_id)
        if conversation is None:
            return None
        return conversation.get_most_recent_message()

    def get_message_count(self, conversation_id: str) -> int:
        conversation = self.get_conversation(conversation_id)
        if conversation is None:
            return 0
        return conversation.get_message_count()

    def share_robot_message(
        self,
        conversation_id: str,
        message_id: str,
        new_message_id: str,
    ) -> Optional[ConversationMessage]:
        """
        Share a stored robot message with the customer.

        Returns:
            The shared copy, or None when the conversation or message is unknown

        Raises:
            InvalidOperationError: If the stored message is not robot-authored
        """
        conversation = self.get_conversation(conversation_id)
        if conversation is None:
            logger.bind(conversation_id=conversation_id, message_id=message_id).warning(
                "Cannot share message {}: unknown conversation {}", message_id, conversation_id
            )
            return None

        original = conversation.get_message_by_id(message_id)
        if original is None:
            logger.bind(conversation_id=conversation_id, message_id=message_id).warning(
                "Cannot share message {}: not found in {}", message_id, conversation_id
            )
            return None

        return conversation.share_robot_message_with_customer(original, new_message_id)
