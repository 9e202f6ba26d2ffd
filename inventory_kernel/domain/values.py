"""
Value objects for the inventory kernel.

Responsibility:
    Immutable domain values with no persistence or I/O.

Architecture position:
    Kernel > Domain -- pure functional core.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Iterable


@dataclass(frozen=True)
class AllowedCategories:
    """
    The set of category labels a warehouse accepts.

    Contract:
        ``labels is None`` is the explicit "no restriction" sentinel, exposed
        as ``AllowedCategories.UNRESTRICTED``.  An empty collection passed to
        ``of()`` or ``parse()`` also yields the sentinel.

    Guarantees:
        - Membership is case-sensitive exact match on the whole label.
          "Tool" is not allowed by {"Tools"}.
        - Labels are stripped of surrounding whitespace.
    """

    labels: frozenset[str] | None = None

    UNRESTRICTED: ClassVar[AllowedCategories]

    @classmethod
    def of(cls, labels: Iterable[str] | None) -> AllowedCategories:
        if labels is None:
            return cls.UNRESTRICTED
        cleaned = frozenset(label.strip() for label in labels if label and label.strip())
        if not cleaned:
            return cls.UNRESTRICTED
        return cls(cleaned)

    @classmethod
    def parse(cls, text: str | None) -> AllowedCategories:
        """Parse a comma-separated list such as ``"Plants, Clothing, Meat"``."""
        if text is None:
            return cls.UNRESTRICTED
        return cls.of(text.split(","))

    @property
    def is_unrestricted(self) -> bool:
        return self.labels is None

    def allows(self, category: str) -> bool:
        if self.labels is None:
            return True
        return category in self.labels

    def sorted_labels(self) -> tuple[str, ...]:
        if self.labels is None:
            return ()
        return tuple(sorted(self.labels))

    def to_storage(self) -> list[str] | None:
        """JSON column value: sorted list, or None for unrestricted."""
        if self.labels is None:
            return None
        return list(self.sorted_labels())

    def __str__(self) -> str:
        if self.labels is None:
            return "<unrestricted>"
        return ", ".join(self.sorted_labels())


AllowedCategories.UNRESTRICTED = AllowedCategories(None)
