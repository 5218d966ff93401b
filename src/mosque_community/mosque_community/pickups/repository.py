from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import PickupStatus
from .model import HistoryRecord, NewPickupRequest, PickupHistoryEntry, PickupRequest


class PickupRequestRepository(Protocol):
    """Repository interface for pickup requests and their history.

    Implementations must make ``transition`` a conditional update: the row only
    changes when its stored status still equals ``expected_status``, and the
    history row is written in the same transaction as the update.
    """

    def create(self, data: NewPickupRequest, *, history: HistoryRecord) -> int:
        """Insert the request and its creation history row.

        Raises ConflictError when the member already has an open request; the
        check runs inside the insert transaction.
        """
        raise NotImplementedError

    def get(self, request_id: int) -> Optional[PickupRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        user_id: Optional[int] = None,
        area_id: Optional[int] = None,
        status: Optional[PickupStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Sequence[PickupRequest]:
        raise NotImplementedError

    def count_requests(
        self,
        *,
        user_id: Optional[int] = None,
        area_id: Optional[int] = None,
        status: Optional[PickupStatus] = None,
    ) -> int:
        raise NotImplementedError

    def count_open(self, *, area_id: Optional[int] = None) -> int:
        raise NotImplementedError

    def has_open_request(self, user_id: int) -> bool:
        raise NotImplementedError

    def transition(
        self,
        request_id: int,
        *,
        expected_status: PickupStatus,
        new_status: PickupStatus,
        fields: Mapping[str, Any],
        history: HistoryRecord,
    ) -> bool:
        """Apply the update and history row; False when the status had already moved."""

        raise NotImplementedError

    def list_history(self, request_id: int) -> Sequence[PickupHistoryEntry]:
        raise NotImplementedError
