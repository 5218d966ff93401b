"""Pickup request transition table.

Each action names the states it may start from, the state it leads to and the
history change type recorded with it. Terminal states appear in no ``sources``
set, so every action out of them is refused.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet

from ..core.enums import HistoryChangeType, PickupAction, PickupStatus
from ..core.exceptions import ConflictError
from .model import HistoryRecord


@dataclass(frozen=True)
class Transition:
    action: PickupAction
    sources: FrozenSet[PickupStatus]
    target: PickupStatus
    change_type: HistoryChangeType


TRANSITIONS: Dict[PickupAction, Transition] = {
    PickupAction.APPROVE: Transition(
        PickupAction.APPROVE,
        frozenset({PickupStatus.PENDING}),
        PickupStatus.APPROVED,
        HistoryChangeType.ASSIGNED,
    ),
    PickupAction.REJECT: Transition(
        PickupAction.REJECT,
        frozenset({PickupStatus.PENDING}),
        PickupStatus.REJECTED,
        HistoryChangeType.REJECTED,
    ),
    PickupAction.CANCEL: Transition(
        PickupAction.CANCEL,
        frozenset({PickupStatus.PENDING, PickupStatus.APPROVED}),
        PickupStatus.CANCELLED,
        HistoryChangeType.CANCELLED,
    ),
    PickupAction.START: Transition(
        PickupAction.START,
        frozenset({PickupStatus.APPROVED}),
        PickupStatus.IN_PROGRESS,
        HistoryChangeType.STARTED,
    ),
    PickupAction.COMPLETE: Transition(
        PickupAction.COMPLETE,
        frozenset({PickupStatus.IN_PROGRESS}),
        PickupStatus.COMPLETED,
        HistoryChangeType.COMPLETED,
    ),
}


def resolve(action: PickupAction, current: PickupStatus) -> Transition:
    """Return the transition for ``action`` from ``current`` or raise ConflictError."""

    transition = TRANSITIONS[action]
    if current.is_terminal:
        raise ConflictError(f"Request is already {current.value}")
    if current not in transition.sources:
        raise ConflictError(f"Cannot {action.value} a request that is {current.value}")
    return transition


def allowed_actions(current: PickupStatus) -> list[PickupAction]:
    return [a for a, t in TRANSITIONS.items() if current in t.sources]


def creation_record(*, changed_by: int) -> HistoryRecord:
    return HistoryRecord(
        changed_by=changed_by,
        change_type=HistoryChangeType.CREATED,
        old_status=None,
        new_status=PickupStatus.PENDING,
    )
