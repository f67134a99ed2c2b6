"""
Role Visibility Rules

Pure functions deciding which messages each participant role may see and
which messages are handed to a robot as context. No state lives here.
"""
from typing import Callable, Iterable, List

from src.models.message import ConversationMessage
from src.models.roles import ConversationRole, ROBOT_INTERACTIVE_ROLES


def visible_to(role: str) -> Callable[[ConversationMessage], bool]:
    """Predicate: is the message visible to `role`?"""
    def _predicate(message: ConversationMessage) -> bool:
        return role in message.role_visibilities
    return _predicate


def can_interact_with_robots(role: str) -> bool:
    """
    Whether `role` may address messages to a robot.

    Advisory only: nothing in the write path rejects messages from other roles.
    """
    return role in ROBOT_INTERACTIVE_ROLES


def filter_by_role_visibilities(
    messages: Iterable[ConversationMessage],
    roles: Iterable[str],
) -> List[ConversationMessage]:
    """Messages visible to at least one of `roles`, order preserved."""
    wanted = set(roles)
    return [m for m in messages if not wanted.isdisjoint(m.role_visibilities)]


def is_for_automated_processing(message: ConversationMessage) -> bool:
    # Previous robot output, for continuity
    if message.author_role == ConversationRole.ROBOT:
        return True
    if ConversationRole.ROBOT in message.role_visibilities:
        return True
    return can_interact_with_robots(message.author_role)


def messages_for_automated_processing(
    messages: Iterable[ConversationMessage],
) -> List[ConversationMessage]:
    """
    Messages a robot should receive as context.

    Includes robot-authored messages, messages explicitly visible to robots,
    and messages written by roles that can interact with robots. Customer
    messages are excluded unless explicitly visible to robots.
    """
    return [m for m in messages if is_for_automated_processing(m)]


def total_estimated_tokens(messages: Iterable[ConversationMessage]) -> int:
    return sum(m.estimated_token_count for m in messages)
