import datetime as dt
from typing import FrozenSet, Optional
from pydantic import BaseModel, Field, field_validator
from src.models.base import ImmutableBaseModel, as_utc
from src.models.content import MessageContent
from src.models.roles import ConversationRole


class ConversationMessage(ImmutableBaseModel):
    """
    The Atomic Conversation Item.
    Content and visibility are fixed at creation; sharing with another audience
    produces a new message instead of editing this one.
    """
    id: str
    author_id: str
    author_role: ConversationRole
    content: MessageContent
    # Rough chars/4 estimate used for robot context budgeting; not validated
    estimated_token_count: int = 0
    role_visibilities: FrozenSet[ConversationRole] = Field(
        default_factory=frozenset,
        description="Roles permitted to view this message."
    )

    def is_visible_to(self, role: str) -> bool:
        return role in self.role_visibilities

    @property
    def content_type(self) -> str:
        return self.content.type


class MessageFilter(BaseModel):
    """
    Explicit filter criteria. Only fields that are set take part in matching.
    """
    author_id: Optional[str] = None
    author_role: Optional[ConversationRole] = None
    content_type: Optional[str] = None
    created_after: Optional[dt.datetime] = None
    created_before: Optional[dt.datetime] = None

    @field_validator("created_after", "created_before")
    @classmethod
    def assume_utc(cls, value: Optional[dt.datetime]) -> Optional[dt.datetime]:
        # Naive bounds are read as UTC
        return as_utc(value) if value is not None else None

    def matches(self, message: ConversationMessage) -> bool:
        if self.author_id is not None and message.author_id != self.author_id:
            return False
        if self.author_role is not None and message.author_role != self.author_role:
            return False
        if self.content_type is not None and message.content.type != self.content_type:
            return False
        if self.created_after is not None and message.created_at < self.created_after:
            return False
        if self.created_before is not None and message.created_at > self.created_before:
            return False
        return True
