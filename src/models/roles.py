from enum import StrEnum
from typing import FrozenSet


class ConversationRole(StrEnum):
    CUSTOMER = "customer"
    AGENT = "agent"
    SUPERVISOR = "supervisor"
    ROBOT = "robot"                            # Internal assistant, never customer-visible
    CX_ROBOT = "cx-robot"                      # Robot message shared with the customer
    CONVERSATION_ADMIN = "conversation-admin"  # Sees everything
    TOOL = "tool"
    ADMIN = "admin"


# Roles allowed to originate messages addressed to a robot.
ROBOT_INTERACTIVE_ROLES: FrozenSet[ConversationRole] = frozenset({
    ConversationRole.AGENT,
    ConversationRole.SUPERVISOR,
    ConversationRole.CONVERSATION_ADMIN,
})

_CUSTOMER_FACING: FrozenSet[ConversationRole] = frozenset({
    ConversationRole.CUSTOMER,
    ConversationRole.AGENT,
    ConversationRole.SUPERVISOR,
    ConversationRole.CONVERSATION_ADMIN,
})

_INTERNAL: FrozenSet[ConversationRole] = frozenset({
    ConversationRole.AGENT,
    ConversationRole.SUPERVISOR,
    ConversationRole.CONVERSATION_ADMIN,
})

_PRIVATE: FrozenSet[ConversationRole] = frozenset({
    ConversationRole.SUPERVISOR,
    ConversationRole.CONVERSATION_ADMIN,
})

DEFAULT_VISIBILITIES: dict[ConversationRole, FrozenSet[ConversationRole]] = {
    ConversationRole.CUSTOMER: _CUSTOMER_FACING,
    ConversationRole.AGENT: _CUSTOMER_FACING,
    ConversationRole.SUPERVISOR: _PRIVATE,
    ConversationRole.ROBOT: _INTERNAL,
    ConversationRole.CX_ROBOT: _CUSTOMER_FACING,
    ConversationRole.TOOL: _INTERNAL,
    ConversationRole.CONVERSATION_ADMIN: _PRIVATE,
    ConversationRole.ADMIN: _PRIVATE,
}


def default_visibilities(author_role: ConversationRole) -> FrozenSet[ConversationRole]:
    """Roles that may see a message written by `author_role`."""
    return DEFAULT_VISIBILITIES[ConversationRole(author_role)]


def shared_robot_visibilities() -> FrozenSet[ConversationRole]:
    """Visibility of a robot message once it has been shared with the customer."""
    return _CUSTOMER_FACING
