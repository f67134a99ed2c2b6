"""
In-Memory Message List

Generic envelope store: every added item is wrapped with a generated ID,
the insertion time and an insertion sequence number.
Data lives only in process memory - it is lost on restart.
"""

import itertools
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Generic, Iterator, Optional, TypeVar

T = TypeVar("T")


def _uuid_factory() -> str:
    return str(uuid.uuid4())


def _millis_clock() -> int:
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class Envelope(Generic[T]):
    """Stored wrapper around a single item."""
    id: str
    inserted_at_ms: int
    sequence: int
    item: T


class MessageList(Generic[T]):
    """
    Append-oriented envelope store keyed by generated ID.

    Ordering:
    - Insertion order is kept (dicts preserve it) and exposed by `items()`.
    - `newest_first()` / `oldest()` sort by insertion timestamp and fall back
      to the insertion sequence when timestamps collide.

    Usage:
        messages = MessageList[ConversationMessage]()
        envelope_id = messages.add(message)
        messages.get_by_id(envelope_id)
    """

    def __init__(
        self,
        id_factory: Optional[Callable[[], str]] = None,
        clock_ms: Optional[Callable[[], int]] = None,
    ):
        """
        Args:
            id_factory: Produces globally unique envelope IDs (default: uuid4)
            clock_ms: Millisecond clock, must be non-decreasing (default: wall clock)
        """
        self._envelopes: dict[str, Envelope[T]] = {}
        self._id_factory = id_factory or _uuid_factory
        self._clock_ms = clock_ms or _millis_clock
        self._sequence = itertools.count()

    def add(self, item: T) -> str:
        """
        Store an item and return its generated envelope ID.

        The item's shape is not validated.
        """
        envelope_id = self._id_factory()
        self._envelopes[envelope_id] = Envelope(
            id=envelope_id,
            inserted_at_ms=self._clock_ms(),
            sequence=next(self._sequence),
            item=item,
        )
        return envelope_id

    def get_by_id(self, envelope_id: str) -> Optional[T]:
        envelope = self._envelopes.get(envelope_id)
        return envelope.item if envelope else None

    def get_envelope(self, envelope_id: str) -> Optional[Envelope[T]]:
        return self._envelopes.get(envelope_id)

    def newest_envelopes_first(self) -> list[Envelope[T]]:
        return sorted(
            self._envelopes.values(),
            key=lambda e: (e.inserted_at_ms, e.sequence),
            reverse=True,
        )

    def newest_first(self) -> list[T]:
        """All items, most recently inserted first."""
        return [e.item for e in self.newest_envelopes_first()]

    def oldest(self) -> Optional[T]:
        """The item with the earliest insertion time, or None when empty."""
        if not self._envelopes:
            return None
        first = min(
            self._envelopes.values(),
            key=lambda e: (e.inserted_at_ms, e.sequence),
        )
        return first.item

    def items(self) -> list[T]:
        """All items in insertion order."""
        return [e.item for e in self._envelopes.values()]

    def all_ids(self) -> list[str]:
        return list(self._envelopes.keys())

    def has(self, envelope_id: str) -> bool:
        return envelope_id in self._envelopes

    def remove(self, envelope_id: str) -> bool:
        """Returns True if the envelope existed and was removed."""
        return self._envelopes.pop(envelope_id, None) is not None

    def count(self) -> int:
        return len(self._envelopes)

    def clear(self) -> None:
        self._envelopes.clear()

    def __len__(self) -> int:
        return len(self._envelopes)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items())

    def __contains__(self, envelope_id: object) -> bool:
        return envelope_id in self._envelopes
