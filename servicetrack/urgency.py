"""Urgency enum for maintenance prediction levels."""

from enum import Enum


class Urgency(Enum):
    """Maintenance urgency levels. Higher rank = more urgent."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    OVERDUE = "overdue"

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {
    Urgency.LOW: 1,
    Urgency.MEDIUM: 2,
    Urgency.HIGH: 3,
    Urgency.OVERDUE: 4,
}
