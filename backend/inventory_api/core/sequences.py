"""Per-entity-kind code formats (prefix + zero-padded counter)."""

from __future__ import annotations

import re
from dataclasses import dataclass

from inventory_api.core.errors import UnknownEntityKind


@dataclass(frozen=True)
class SequenceConfig:
    entity_kind: str
    prefix: str
    padding_width: int

    def format(self, value: int) -> str:
        """Render ``value`` as a code.

        Values wider than ``padding_width`` keep all their digits
        (``BRD1000`` for width 3); codes are never truncated.
        """

        return f"{self.prefix}{value:0{self.padding_width}d}"

    def parse(self, code: str | None) -> int | None:
        """Return the numeric part of ``code`` or None if it is not one of ours."""

        match = re.fullmatch(rf"{re.escape(self.prefix)}(\d+)", (code or "").strip())
        if not match:
            return None
        return int(match.group(1))


SEQUENCE_KINDS: dict[str, SequenceConfig] = {
    config.entity_kind: config
    for config in (
        SequenceConfig("Brand", "BRD", 3),
        SequenceConfig("Product", "PROD", 4),
        SequenceConfig("PurchaseRequest", "PR", 6),
        SequenceConfig("Party", "PTY", 3),
        SequenceConfig("Site", "SITE", 3),
        SequenceConfig("ChannelPartner", "CP", 3),
        SequenceConfig("Order", "ORD", 6),
        SequenceConfig("Dispatch", "DN", 6),
        SequenceConfig("PaymentReceipt", "RCP", 6),
    )
}


def get_sequence_config(entity_kind: str) -> SequenceConfig:
    config = SEQUENCE_KINDS.get(entity_kind) if entity_kind else None
    if config is None:
        raise UnknownEntityKind(entity_kind)
    return config
