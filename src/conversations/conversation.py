"""
Conversation

One subject/session worth of messages exchanged among customers, agents,
supervisors and robots. Messages are append-only: index 0 is permanently
the first message and nothing is ever removed or reordered. The only state
that moves after an append is the summarization watermark.
"""

import datetime as dt
import threading
from typing import Callable, Dict, List, Optional

from src.config import get_settings
from src.conversations import visibility
from src.conversations.errors import InvalidOperationError
from src.conversations.message_factory import ContentInput, MessageFactory
from src.conversations.message_list import MessageList
from src.models.content import TextContent
from src.models.message import ConversationMessage, MessageFilter
from src.models.roles import ConversationRole
from src.utils.metrics import metrics
from src.utils.observability import logger, log_conversation_event

CONTENT_TYPES = ("text/plain", "image/*", "application/octet-stream", "application/json")


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class Conversation:
    """
    Append-only, role-aware message sequence.

    Usage:
        conversation = Conversation("conv-1", "Support", "Billing question")
        conversation.add_customer_message("m1", "customer-1", "Hello")
        robot_msg = conversation.add_robot_message("m2", "robot-1", "Internal analysis")
        conversation.share_robot_message_with_customer(robot_msg, "m3")
        conversation.get_customer_visible_messages()  # m1, m3
    """

    def __init__(
        self,
        id: str,
        name: str,
        description: str,
        created_at: Optional[dt.datetime] = None,
        updated_at: Optional[dt.datetime] = None,
        message_factory: Optional[MessageFactory] = None,
        clock: Optional[Callable[[], dt.datetime]] = None,
    ):
        """
        Args:
            id: Conversation identifier
            name: Human-readable name
            description: Free-text description
            created_at: Creation time (default: now)
            updated_at: Last metadata update (default: created_at)
            message_factory: Builds messages for the role-specific add_* helpers
            clock: Source of timestamps for the summarization watermark
        """
        self._clock = clock or _utc_now
        self.id = id
        self.name = name
        self.description = description
        self.created_at = created_at or self._clock()
        self.updated_at = updated_at or self.created_at

        self._factory = message_factory or MessageFactory(clock=self._clock)
        self._messages: MessageList[ConversationMessage] = MessageList()
        self._envelope_ids: Dict[str, str] = {}  # message id -> envelope id
        self._last_summarized_index = -1
        self._last_summarized_at: Optional[dt.datetime] = None
        self._lock = threading.Lock()
        self._metrics_enabled = get_settings().enable_metrics

    # ------------------------------------------------------------------
    # Appending
    # ------------------------------------------------------------------

    def add_message(self, message: ConversationMessage) -> ConversationMessage:
        """
        Append a pre-built message and return it unchanged.

        No content or role checks happen here; robot gating is advisory.
        """
        with self._lock:
            envelope_id = self._messages.add(message)
            self._envelope_ids[message.id] = envelope_id

        if self._metrics_enabled:
            metrics.track_message_appended(message.author_role.value, message.estimated_token_count)

        logger.bind(conversation_id=self.id, message_id=message.id).debug(
            "Appended {} message to conversation {}", message.author_role, self.id
        )
        return message

    def add_customer_message(
        self,
        message_id: str,
        customer_id: str,
        content: str | TextContent,
        estimated_token_count: Optional[int] = None,
    ) -> ConversationMessage:
        return self.add_message(
            self._factory.create_customer_message(message_id, customer_id, content, estimated_token_count)
        )

    def add_agent_message(
        self,
        message_id: str,
        agent_id: str,
        content: str | TextContent,
        estimated_token_count: Optional[int] = None,
    ) -> ConversationMessage:
        return self.add_message(
            self._factory.create_agent_message(message_id, agent_id, content, estimated_token_count)
        )

    def add_supervisor_message(
        self,
        message_id: str,
        supervisor_id: str,
        content: str | TextContent,
        estimated_token_count: Optional[int] = None,
    ) -> ConversationMessage:
        return self.add_message(
            self._factory.create_supervisor_message(message_id, supervisor_id, content, estimated_token_count)
        )

    def add_robot_message(
        self,
        message_id: str,
        robot_id: str,
        content: ContentInput,
        estimated_token_count: Optional[int] = None,
    ) -> ConversationMessage:
        """Add a robot message (not visible to the customer)."""
        return self.add_message(
            self._factory.create_robot_message(message_id, robot_id, content, estimated_token_count)
        )

    def add_shared_robot_message(
        self,
        message_id: str,
        robot_id: str,
        content: ContentInput,
        estimated_token_count: Optional[int] = None,
    ) -> ConversationMessage:
        """Add a robot message that is already cleared for the customer."""
        return self.add_message(
            self._factory.create_shared_robot_message(message_id, robot_id, content, estimated_token_count)
        )

    def share_robot_message_with_customer(
        self,
        original_robot_message: ConversationMessage,
        new_message_id: str,
        content: Optional[ContentInput] = None,
    ) -> ConversationMessage:
        """
        Expose a robot response to the customer by appending a cx-robot copy.

        The original keeps its role and visibility, so what the robot said and
        what the customer was shown stay separately auditable. Pass `content`
        to share a curated version instead of the original payload.

        Args:
            original_robot_message: Robot-authored message to duplicate
            new_message_id: ID for the shared copy
            content: Optional replacement content for the copy

        Returns:
            The appended shared message

        Raises:
            InvalidOperationError: If the source message is not robot-authored.
                The conversation is left untouched.
        """
        try:
            shared = self._factory.create_shared_version_of_robot_message(
                original_robot_message, new_message_id, content
            )
        except InvalidOperationError:
            if self._metrics_enabled:
                metrics.share_rejections.inc(role=original_robot_message.author_role.value)
            logger.bind(
                conversation_id=self.id,
                message_id=original_robot_message.id,
                author_role=original_robot_message.author_role.value,
            ).warning("Rejected share of non-robot message {}", original_robot_message.id)
            raise

        self.add_message(shared)

        if self._metrics_enabled:
            metrics.robot_messages_shared.inc()
        log_conversation_event(
            "robot_message_shared",
            self.id,
            original_message_id=original_robot_message.id,
            shared_message_id=shared.id,
            curated=content is not None,
        )
        return shared

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def _snapshot(self) -> List[ConversationMessage]:
        with self._lock:
            return self._messages.items()

    def get_all_messages(self) -> List[ConversationMessage]:
        """Copy of the full sequence in append order."""
        return self._snapshot()

    def get_message_count(self) -> int:
        return len(self._messages)

    def has_messages(self) -> bool:
        return len(self._messages) > 0

    def get_message_by_id(self, message_id: str) -> Optional[ConversationMessage]:
        with self._lock:
            envelope_id = self._envelope_ids.get(message_id)
            return self._messages.get_by_id(envelope_id) if envelope_id else None

    def get_most_recent_message(self) -> Optional[ConversationMessage]:
        """Last appended message (append order, not timestamps), or None."""
        messages = self._snapshot()
        return messages[-1] if messages else None

    # ------------------------------------------------------------------
    # Role-filtered views
    # ------------------------------------------------------------------

    def filter_by_role_visibilities(self, roles: List[str]) -> List[ConversationMessage]:
        return visibility.filter_by_role_visibilities(self._snapshot(), roles)

    def get_customer_visible_messages(self) -> List[ConversationMessage]:
        return self.filter_by_role_visibilities([ConversationRole.CUSTOMER])

    def get_agent_visible_messages(self) -> List[ConversationMessage]:
        return self.filter_by_role_visibilities([ConversationRole.AGENT])

    def get_supervisor_visible_messages(self) -> List[ConversationMessage]:
        return self.filter_by_role_visibilities([ConversationRole.SUPERVISOR])

    def get_admin_visible_messages(self) -> List[ConversationMessage]:
        return self.filter_by_role_visibilities([ConversationRole.CONVERSATION_ADMIN])

    def get_conversation_for_role(self, role: str) -> List[ConversationMessage]:
        """
        The conversation as `role` sees it.

        Unknown roles, or roles no message names (e.g. robot), get an empty list.
        """
        views = {
            ConversationRole.CUSTOMER: self.get_customer_visible_messages,
            ConversationRole.AGENT: self.get_agent_visible_messages,
            ConversationRole.SUPERVISOR: self.get_supervisor_visible_messages,
            ConversationRole.CONVERSATION_ADMIN: self.get_admin_visible_messages,
        }
        view = views.get(role)
        if view is not None:
            return view()
        return self.filter_by_role_visibilities([role])

    # ------------------------------------------------------------------
    # Robot context
    # ------------------------------------------------------------------

    def get_robot_messages(self) -> List[ConversationMessage]:
        """Direct robot output only (shared cx-robot copies excluded)."""
        return [m for m in self._snapshot() if m.author_role == ConversationRole.ROBOT]

    def get_messages_for_robot_processing(self) -> List[ConversationMessage]:
        return visibility.messages_for_automated_processing(self._snapshot())

    def calculate_total_token_count_for_robot(self) -> int:
        return visibility.total_estimated_tokens(self.get_messages_for_robot_processing())

    def get_recent_messages_within_token_limit(
        self,
        max_tokens: Optional[int] = None,
        messages: Optional[List[ConversationMessage]] = None,
    ) -> List[ConversationMessage]:
        """
        Newest messages that fit in `max_tokens`, returned oldest first.

        Walks backwards from the most recent message and stops at the first
        one that would overflow the budget.

        Args:
            max_tokens: Token budget (default: settings.robot_context_token_limit)
            messages: Candidate messages (default: the robot processing set)
        """
        if max_tokens is None:
            max_tokens = get_settings().robot_context_token_limit
        if messages is None:
            messages = self.get_messages_for_robot_processing()

        kept: List[ConversationMessage] = []
        total = 0
        for message in reversed(messages):
            if total + message.estimated_token_count > max_tokens:
                break
            kept.append(message)
            total += message.estimated_token_count

        kept.reverse()
        return kept

    # ------------------------------------------------------------------
    # Ad-hoc queries
    # ------------------------------------------------------------------

    def get_filtered_messages(self, criteria: MessageFilter) -> List[ConversationMessage]:
        return [m for m in self._snapshot() if criteria.matches(m)]

    def get_messages_by_author(self, author_id: str) -> List[ConversationMessage]:
        return self.get_filtered_messages(MessageFilter(author_id=author_id))

    def get_messages_in_date_range(
        self,
        start: dt.datetime,
        end: dt.datetime,
    ) -> List[ConversationMessage]:
        """Messages created within [start, end]."""
        return self.get_filtered_messages(MessageFilter(created_after=start, created_before=end))

    def get_message_counts_by_content_type(self) -> Dict[str, int]:
        counts = {content_type: 0 for content_type in CONTENT_TYPES}
        for message in self._snapshot():
            counts[message.content.type] = counts.get(message.content.type, 0) + 1
        return counts

    # ------------------------------------------------------------------
    # Summarization watermark
    # ------------------------------------------------------------------

    @property
    def last_summarized_index(self) -> int:
        return self._last_summarized_index

    @property
    def last_summarized_at(self) -> Optional[dt.datetime]:
        return self._last_summarized_at

    def get_messages_to_summarize(self) -> List[ConversationMessage]:
        """Messages after the watermark, in append order."""
        with self._lock:
            start = self._last_summarized_index + 1
            return self._messages.items()[start:]

    def mark_summarized_up_to(self, index: int) -> None:
        """
        Move the watermark to `index`.

        Out-of-range indices are ignored (logged, not raised).
        """
        with self._lock:
            count = len(self._messages)
            if 0 <= index < count:
                self._last_summarized_index = index
                self._last_summarized_at = self._clock()
                accepted = True
            else:
                accepted = False

        if self._metrics_enabled:
            metrics.watermark_updates.inc(outcome="accepted" if accepted else "ignored")

        if not accepted:
            logger.bind(conversation_id=self.id, index=index, message_count=count).warning(
                "Ignoring summarization watermark {} for conversation {}", index, self.id
            )
            return

        log_conversation_event("summarized", self.id, last_summarized_index=index)

    def mark_all_as_summarized(self) -> None:
        with self._lock:
            self._last_summarized_index = len(self._messages) - 1
            self._last_summarized_at = self._clock()
            index = self._last_summarized_index

        if self._metrics_enabled:
            metrics.watermark_updates.inc(outcome="accepted")
        log_conversation_event("summarized", self.id, last_summarized_index=index)

    def __repr__(self) -> str:
        return f"Conversation(id={self.id!r}, name={self.name!r}, messages={len(self._messages)})"
