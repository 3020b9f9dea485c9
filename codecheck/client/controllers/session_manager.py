"""Session Manager: wallet connection and crypto-service readiness."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from codecheck.shared.core import events
from codecheck.shared.core.cancellation import CancellationToken
from codecheck.shared.core.errors import InitializationError, OperationInProgress, SessionNotReady
from codecheck.shared.domain.records.models import SessionPhase, SessionState
from codecheck.shared.domain.status.notifier import StatusNotifier
from codecheck.shared.infrastructure.crypto.base import CryptoService
from codecheck.client.state.reducer import (
    Connected,
    Disconnected,
    InitializationFailed,
    InitializationStarted,
    InitializationSucceeded,
)

if TYPE_CHECKING:
    from codecheck.client.state.app_state import AppState

logger = logging.getLogger(__name__)


class SessionManager:
    """Drives ``DISCONNECTED → CONNECTED → INITIALIZING → READY``.

    A failed bootstrap falls back to ``CONNECTED``; nothing retries it
    until the next connection-change event. Each connected session carries
    a ``CancellationToken`` that is cancelled on disconnect.
    """

    INIT_FAILED_MESSAGE = "FHE initialization failed"

    def __init__(self, app_state: AppState, crypto: CryptoService, notifier: StatusNotifier):
        self.app_state = app_state
        self.crypto = crypto
        self.notifier = notifier
        self._token = CancellationToken()
        # Bumped on every disconnect; a bootstrap result from an older epoch is stale
        self._epoch = 0
        self.last_error: Optional[InitializationError] = None

    @property
    def state(self) -> SessionState:
        return self.app_state.value.session

    @property
    def phase(self) -> SessionPhase:
        return self.state.phase

    @property
    def account(self) -> Optional[str]:
        return self.state.account

    @property
    def cancel_token(self) -> CancellationToken:
        return self._token

    def require_ready(self) -> None:
        """Fail fast unless the session is ``READY``."""
        phase = self.phase
        if phase is SessionPhase.READY:
            return
        if phase is SessionPhase.DISCONNECTED:
            raise SessionNotReady("Please connect wallet first")
        raise SessionNotReady(f"Crypto service not ready ({phase.value})")

    async def on_connection_change(self, connected: bool, account: Optional[str] = None) -> SessionState:
        """React to the wallet provider's connection state."""
        if not connected:
            await self._disconnect()
            return self.state

        current = self.state
        if not current.connected or current.account != account:
            if current.connected:
                # Account switch: results of the old account's calls are stale
                self._renew_token("account changed")
            elif self._token.cancelled:
                self._token = CancellationToken()
            await self.app_state.dispatch(Connected(account=account))
            await self._publish()

        if self.state.crypto_ready or self.state.initializing:
            return self.state

        await self._initialize()
        return self.state

    async def _initialize(self) -> None:
        try:
            await self.app_state.dispatch(InitializationStarted())
        except OperationInProgress:
            return
        await self._publish()

        epoch = self._epoch
        logger.info("Initializing crypto service...")
        try:
            await self.crypto.initialize()
        except Exception as e:
            if epoch != self._epoch:
                logger.info(f"Ignoring crypto bootstrap failure from an ended session: {e}")
                return
            self.last_error = InitializationError(str(e))
            logger.error(f"Crypto service initialization failed: {e}")
            await self.app_state.dispatch(InitializationFailed(error=str(e)))
            await self._publish()
            await self.notifier.error(self.INIT_FAILED_MESSAGE)
            return

        if epoch != self._epoch:
            logger.info("Crypto bootstrap finished after the session ended; discarding")
            return

        self.last_error = None
        await self.app_state.dispatch(InitializationSucceeded())
        await self._publish()
        logger.info("Crypto service ready")

    async def _disconnect(self) -> None:
        if not self.state.connected and not self.state.initializing:
            return
        self._token.cancel("wallet disconnected")
        self._epoch += 1
        await self.app_state.dispatch(Disconnected())
        await self._publish()
        logger.info("Wallet disconnected")

    def _renew_token(self, reason: str) -> None:
        self._token.cancel(reason)
        self._token = CancellationToken()

    async def _publish(self) -> None:
        await self.app_state.bus.publish(
            events.TOPIC_SESSION_CHANGED,
            events.create_session_changed_event(self.phase.value, self.account),
        )
