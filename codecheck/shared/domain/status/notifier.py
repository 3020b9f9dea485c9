"""Auto-dismissing user-facing status channel."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

from codecheck.shared.core import events
from codecheck.shared.core.configuration import StatusConfig
from codecheck.shared.core.event_bus import EventBus
from codecheck.shared.domain.records.models import StatusKind, TransactionStatus

logger = logging.getLogger(__name__)


class StatusNotifier:
    """Holds at most one visible status.

    ``show`` replaces whatever is on display and restarts the dismiss
    timer; an earlier timer never hides a later message.
    """

    def __init__(self, event_bus: Optional[EventBus] = None, config: Optional[StatusConfig] = None):
        self.event_bus = event_bus
        config = config or StatusConfig()
        self.delays: Dict[str, float] = {
            "pending": config.pending_dismiss_seconds,
            "success": config.success_dismiss_seconds,
            "error": config.error_dismiss_seconds,
        }
        self._status = TransactionStatus.hidden()
        self._timer: Optional[asyncio.Task] = None

    @property
    def current(self) -> TransactionStatus:
        return self._status

    async def show(self, kind: StatusKind, message: str) -> TransactionStatus:
        self._cancel_timer()
        self._status = TransactionStatus(visible=True, kind=kind, message=message)
        log = logger.warning if kind == "error" else logger.info
        log(f"Status [{kind}] {message}")

        self._timer = asyncio.create_task(self._dismiss_after(self.delays[kind], self._status))
        await self._publish()
        return self._status

    async def pending(self, message: str) -> TransactionStatus:
        return await self.show("pending", message)

    async def success(self, message: str) -> TransactionStatus:
        return await self.show("success", message)

    async def error(self, message: str) -> TransactionStatus:
        return await self.show("error", message)

    async def dismiss(self) -> None:
        self._cancel_timer()
        if self._status.visible:
            self._status = TransactionStatus.hidden()
            await self._publish()

    async def _dismiss_after(self, delay: float, shown: TransactionStatus) -> None:
        await asyncio.sleep(delay)
        # A later show() replaces the status object, so identity marks preemption
        if self._status is shown:
            self._timer = None
            self._status = TransactionStatus.hidden()
            await self._publish()

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _publish(self) -> None:
        if self.event_bus is None:
            return
        await self.event_bus.publish(
            events.TOPIC_STATUS_CHANGED,
            events.create_status_changed_event(self._status.visible, self._status.kind, self._status.message),
        )
