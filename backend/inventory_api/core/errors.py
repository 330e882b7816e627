"""Domain errors raised by the sequence allocator."""

from __future__ import annotations


class SequenceError(Exception):
    """Base class for code allocation failures."""


class UnknownEntityKind(SequenceError, LookupError):
    """The entity kind has no configured prefix/padding. Never retried."""

    def __init__(self, entity_kind: str):
        super().__init__(f"No sequence configured for entity kind {entity_kind!r}")
        self.entity_kind = entity_kind


class StoreUnavailable(SequenceError):
    """The counter store could not be reached or stayed contended past the retry budget.

    The counter is guaranteed not to have advanced on behalf of the failed call.
    """

    def __init__(self, entity_kind: str, reason: str = "store unavailable"):
        super().__init__(f"Sequence allocation for {entity_kind!r} failed: {reason}")
        self.entity_kind = entity_kind
        self.reason = reason


class ConcurrentInitRace(SequenceError):
    """Another caller created the counter row first. Absorbed by the allocator."""

    def __init__(self, entity_kind: str):
        super().__init__(f"Counter for {entity_kind!r} was created concurrently")
        self.entity_kind = entity_kind
