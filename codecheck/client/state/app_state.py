"""Application State Controller.

Owns the single ``ApplicationState`` value and applies named transitions
to it. Observers follow along through ``state.changed`` events on the
EventBus.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Deque, Dict, Optional

from codecheck.shared.core import events
from codecheck.shared.core.event_bus import EventBus, EventPayload
from codecheck.client.state.reducer import Action, ApplicationState, reduce

logger = logging.getLogger(__name__)


class AppState:
    """State controller for one client instance.

    ``dispatch`` reduces synchronously before its first suspension point,
    so a guard check and the flag it sets happen atomically with respect to
    other coroutines on the loop.
    """

    MAX_LOGS = 200

    def __init__(self, event_bus: EventBus) -> None:
        """Initialize application state.

        Args:
            event_bus: The shared event bus for cross-cutting concerns
        """
        self.bus = event_bus
        self._state = ApplicationState()

        # Mirror of the status channel for observers without a bus subscription
        self.status_text: str = ""
        # Circular activity log (each entry: {message, level, ts})
        self.logs: Deque[Dict[str, Any]] = deque(maxlen=self.MAX_LOGS)

        self._started = False

    @property
    def value(self) -> ApplicationState:
        return self._state

    async def initialize(self) -> None:
        """Bind to EventBus events. Safe to call more than once."""
        if self._started:
            return

        await self.bus.subscribe(events.TOPIC_STATUS_CHANGED, self._handle_status_changed)
        await self.bus.subscribe(events.TOPIC_RECORD_VERIFIED, self._handle_record_verified)
        self._started = True

    # --- Public Actions ---

    async def dispatch(self, action: Action) -> ApplicationState:
        """Apply ``action`` and notify observers.

        Raises whatever the reducer raises; the state is left untouched in
        that case.
        """
        self._state = reduce(self._state, action)
        logger.debug(f"Dispatched {action.name}")
        await self.bus.publish(
            events.TOPIC_STATE_CHANGED,
            events.create_state_changed_event(action.name, self._state.model_dump(mode="json")),
        )
        return self._state

    async def push_log(self, message: str, level: str = "info") -> None:
        """Append to the activity log and broadcast it."""
        entry = events.create_log_event(message, level)
        self.logs.append(entry)
        await self.bus.publish(events.TOPIC_LOGS_EVENT, entry)

    # --- Event Handlers ---

    async def _handle_status_changed(self, payload: EventPayload) -> None:
        self.status_text = str(payload.get("message", "")) if payload.get("visible") else ""

    async def _handle_record_verified(self, payload: EventPayload) -> None:
        record_id: Optional[str] = payload.get("record_id")
        if record_id:
            await self.push_log(f"Record {record_id} verified", "success")
