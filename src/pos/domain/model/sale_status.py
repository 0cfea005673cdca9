"""Sale lifecycle: the only allowed status transitions.

    PENDING   -> COMPLETED | CANCELLED
    COMPLETED -> CANCELLED
    CANCELLED is terminal

Every path that changes a sale's status goes through ``ensure_transition``.
No database writes, no stock mutation here.
"""

from __future__ import annotations

from enum import Enum

from pos.domain.exceptions import InvalidStatusTransitionError, ValidationError


class SaleStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @staticmethod
    def parse(raw: str | SaleStatus) -> SaleStatus:
        if isinstance(raw, SaleStatus):
            return raw
        try:
            return SaleStatus(raw.strip().lower())
        except (ValueError, AttributeError) as exc:
            allowed = ", ".join(s.value for s in SaleStatus)
            raise ValidationError(
                f"Invalid sale status {raw!r} (expected one of: {allowed})"
            ) from exc


TERMINAL_STATES = frozenset({SaleStatus.CANCELLED})

ALLOWED_TRANSITIONS: dict[SaleStatus, frozenset[SaleStatus]] = {
    SaleStatus.PENDING: frozenset({SaleStatus.COMPLETED, SaleStatus.CANCELLED}),
    SaleStatus.COMPLETED: frozenset({SaleStatus.CANCELLED}),
    SaleStatus.CANCELLED: frozenset(),
}


def can_transition(from_status: SaleStatus, to_status: SaleStatus) -> bool:
    if from_status in TERMINAL_STATES:
        return False
    return to_status in ALLOWED_TRANSITIONS[from_status]


def ensure_transition(from_status: SaleStatus, to_status: SaleStatus) -> None:
    """Raise InvalidStatusTransitionError unless the move is legal."""
    if not can_transition(from_status, to_status):
        raise InvalidStatusTransitionError(from_status.value, to_status.value)
