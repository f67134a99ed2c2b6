"""
Conversation Registry

In-memory keyed collection of conversations with get-or-create semantics.
The hosting application owns one instance and passes it to collaborators;
data is lost on restart.
"""

import threading
from typing import Callable, Generic, List, Optional, TypeVar

from src.config import get_settings
from src.conversations.conversation import Conversation
from src.utils.metrics import metrics
from src.utils.observability import logger, log_conversation_event

C = TypeVar("C", bound=Conversation)

ConversationFactoryFn = Callable[[str, str, str], C]


class ConversationFactory:
    """Named constructors for conversations."""

    @staticmethod
    def create_conversation(id: str, name: str, description: str) -> Conversation:
        return Conversation(id, name, description)

    @staticmethod
    def create_customer_support_conversation(conversation_id: str, customer_id: str) -> Conversation:
        return Conversation(
            conversation_id,
            f"Customer Support - {customer_id}",
            f"Customer support conversation for customer {customer_id}",
        )


class ConversationRegistry(Generic[C]):
    """
    Keyed store of conversations.

    At most one conversation exists per ID: get_or_create never replaces an
    existing entry, and the create path is serialized by a lock.

    Usage:
        registry = ConversationRegistry(ConversationFactory.create_conversation)
        conversation = registry.get_or_create("conv-1", "Support", "Billing")
        assert registry.get_or_create("conv-1") is conversation
    """

    def __init__(self, conversation_factory: Optional[ConversationFactoryFn] = None):
        """
        Args:
            conversation_factory: Builds a conversation from (id, name, description)
        """
        self._factory = conversation_factory or ConversationFactory.create_conversation
        self._conversations: dict[str, C] = {}
        self._lock = threading.Lock()
        self._metrics_enabled = get_settings().enable_metrics

    def get_or_create(
        self,
        conversation_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        accept_key: Optional[str] = None,
    ) -> C:
        """
        Return the conversation for `conversation_id`, creating it on first use.

        Name and description only apply on creation; later calls keep the
        original metadata. `accept_key` is accepted and ignored.

        Args:
            conversation_id: Conversation identifier
            name: Name for a new conversation (default: "Conversation {id}")
            description: Description for a new conversation
            accept_key: Reserved; not validated

        Returns:
            Existing or newly created conversation
        """
        existing = self._conversations.get(conversation_id)
        if existing is not None:
            return existing

        if accept_key is not None:
            logger.bind(conversation_id=conversation_id).debug(
                "accept_key supplied for {} but not validated", conversation_id
            )

        with self._lock:
            # Another thread may have created it while we waited
            existing = self._conversations.get(conversation_id)
            if existing is not None:
                return existing

            conversation = self._factory(
                conversation_id,
                name if name is not None else f"Conversation {conversation_id}",
                description if description is not None else f"Auto-created conversation for {conversation_id}",
            )
            self._conversations[conversation_id] = conversation
            count = len(self._conversations)

        if self._metrics_enabled:
            metrics.conversations_created.inc()
            metrics.active_conversations.set(count)
        log_conversation_event("conversation_created", conversation_id, name=conversation.name)

        return conversation

    def get_customer_support_conversation_or_create(
        self,
        conversation_id: str,
        customer_id: str,
        accept_key: Optional[str] = None,
    ) -> C:
        return self.get_or_create(
            conversation_id,
            f"Customer Support - {customer_id}",
            f"Customer support conversation for customer {customer_id}",
            accept_key,
        )

    def get_team_conversation_or_create(
        self,
        conversation_id: str,
        team_name: str,
        accept_key: Optional[str] = None,
    ) -> C:
        return self.get_or_create(
            conversation_id,
            f"Team Chat - {team_name}",
            f"Team conversation for {team_name}",
            accept_key,
        )

    def get_by_id(self, conversation_id: str) -> Optional[C]:
        return self._conversations.get(conversation_id)

    def has(self, conversation_id: str) -> bool:
        return conversation_id in self._conversations

    def remove(self, conversation_id: str) -> bool:
        """Returns True if the conversation existed and was removed."""
        with self._lock:
            removed = self._conversations.pop(conversation_id, None) is not None
            count = len(self._conversations)

        if removed:
            if self._metrics_enabled:
                metrics.conversations_removed.inc()
                metrics.active_conversations.set(count)
            log_conversation_event("conversation_removed", conversation_id)
        return removed

    def all(self) -> List[C]:
        with self._lock:
            return list(self._conversations.values())

    def all_ids(self) -> List[str]:
        with self._lock:
            return list(self._conversations.keys())

    def count(self) -> int:
        return len(self._conversations)

    def clear(self) -> None:
        """Drop every conversation. All message history is lost."""
        with self._lock:
            dropped = len(self._conversations)
            self._conversations.clear()

        if self._metrics_enabled:
            metrics.conversations_removed.inc(dropped)
            metrics.active_conversations.set(0)
        logger.bind(dropped=dropped).info("Cleared {} conversations", dropped)

    def __len__(self) -> int:
        return len(self._conversations)

    def __contains__(self, conversation_id: object) -> bool:
        return conversation_id in self._conversations
