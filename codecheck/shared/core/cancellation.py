"""Cancellation tokens scoped to one connected wallet session."""

from __future__ import annotations

import itertools
import logging

from .errors import OperationCancelled

logger = logging.getLogger(__name__)

_token_ids = itertools.count(1)


class CancellationToken:
    """Flag shared by every operation started during one session.

    Coordinators capture the token when they start and check it before
    applying any state patch, so a response that arrives after a disconnect
    is dropped instead of written into the next session's state.
    """

    def __init__(self) -> None:
        self.id = next(_token_ids)
        self._cancelled = False
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: str = "session ended") -> None:
        if not self._cancelled:
            logger.debug(f"Cancelling token {self.id}: {reason}")
            self._cancelled = True
            self.reason = reason

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise OperationCancelled(self.reason or "operation cancelled")

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "active"
        return f"<CancellationToken {self.id} {state}>"
