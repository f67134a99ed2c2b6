"""
Conversation Message Factory

Builds immutable messages with the visibility set implied by the author role.
"""
import datetime as dt
from typing import Callable, Iterable, Optional, Union

from src.conversations.errors import InvalidOperationError
from src.models.content import (
    FileContent,
    ImageContent,
    JsonContent,
    TextContent,
    as_content,
)
from src.models.message import ConversationMessage
from src.models.roles import ConversationRole, default_visibilities, shared_robot_visibilities
from src.utils.token_estimator import TokenEstimator, estimate_tokens

ContentInput = Union[str, TextContent, ImageContent, FileContent, JsonContent]


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class MessageFactory:
    """
    Creates conversation messages.

    Usage:
        factory = MessageFactory()
        msg = factory.create_customer_message("m1", "customer-1", "Hello")
        assert msg.role_visibilities == default_visibilities(ConversationRole.CUSTOMER)
    """

    def __init__(
        self,
        token_estimator: Optional[TokenEstimator] = None,
        clock: Optional[Callable[[], dt.datetime]] = None,
    ):
        """
        Args:
            token_estimator: Applied when callers do not pass an explicit count
            clock: Source of created_at / updated_at timestamps
        """
        self._estimate = token_estimator or estimate_tokens
        self._clock = clock or _utc_now

    def create_message(
        self,
        message_id: str,
        author_id: str,
        author_role: ConversationRole,
        content: ContentInput,
        estimated_token_count: Optional[int] = None,
        custom_visibilities: Optional[Iterable[ConversationRole]] = None,
    ) -> ConversationMessage:
        """
        Create a message; visibility defaults from the author role unless
        `custom_visibilities` is given.
        """
        body = as_content(content)
        if estimated_token_count is None:
            estimated_token_count = self._estimate(body)

        if custom_visibilities is not None:
            visibilities = frozenset(ConversationRole(r) for r in custom_visibilities)
        else:
            visibilities = default_visibilities(author_role)

        now = self._clock()
        return ConversationMessage(
            id=message_id,
            author_id=author_id,
            author_role=author_role,
            content=body,
            estimated_token_count=estimated_token_count,
            role_visibilities=visibilities,
            created_at=now,
            updated_at=now,
        )

    def create_customer_message(
        self,
        message_id: str,
        customer_id: str,
        content: str | TextContent,
        estimated_token_count: Optional[int] = None,
    ) -> ConversationMessage:
        return self.create_message(
            message_id, customer_id, ConversationRole.CUSTOMER, content, estimated_token_count
        )

    def create_agent_message(
        self,
        message_id: str,
        agent_id: str,
        content: str | TextContent,
        estimated_token_count: Optional[int] = None,
    ) -> ConversationMessage:
        return self.create_message(
            message_id, agent_id, ConversationRole.AGENT, content, estimated_token_count
        )

    def create_supervisor_message(
        self,
        message_id: str,
        supervisor_id: str,
        content: str | TextContent,
        estimated_token_count: Optional[int] = None,
    ) -> ConversationMessage:
        """Private supervisor note: never visible to customers or agents."""
        return self.create_message(
            message_id, supervisor_id, ConversationRole.SUPERVISOR, content, estimated_token_count
        )

    def create_robot_message(
        self,
        message_id: str,
        robot_id: str,
        content: ContentInput,
        estimated_token_count: Optional[int] = None,
    ) -> ConversationMessage:
        """Robot output for internal use: not visible to the customer."""
        return self.create_message(
            message_id, robot_id, ConversationRole.ROBOT, content, estimated_token_count
        )

    def create_shared_robot_message(
        self,
        message_id: str,
        robot_id: str,
        content: ContentInput,
        estimated_token_count: Optional[int] = None,
    ) -> ConversationMessage:
        """Robot output that an agent chose to show to the customer."""
        return self.create_message(
            message_id,
            robot_id,
            ConversationRole.CX_ROBOT,
            content,
            estimated_token_count,
            custom_visibilities=shared_robot_visibilities(),
        )

    def create_shared_version_of_robot_message(
        self,
        original: ConversationMessage,
        shared_message_id: str,
        content: Optional[ContentInput] = None,
    ) -> ConversationMessage:
        """
        Duplicate a robot message for customer visibility.

        The original is never modified. When `content` is given the copy
        carries that (curated) content instead of the original payload.

        Raises:
            InvalidOperationError: If `original` is not robot-authored
        """
        if original.author_role != ConversationRole.ROBOT:
            raise InvalidOperationError("can only share robot messages")

        if content is None:
            return self.create_shared_robot_message(
                shared_message_id,
                original.author_id,
                original.content,
                original.estimated_token_count,
            )
        return self.create_shared_robot_message(shared_message_id, original.author_id, content)
