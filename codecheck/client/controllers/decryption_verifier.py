"""Decryption verifier: obtain, prove and verify the clear value of a record."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from codecheck.shared.core import events
from codecheck.shared.core.errors import DecryptionError, OperationInProgress, SessionNotReady
from codecheck.shared.domain.records.models import DecryptionPhase, Record
from codecheck.shared.domain.records.store import RecordStore
from codecheck.shared.domain.status.notifier import StatusNotifier
from codecheck.shared.infrastructure.crypto.base import CryptoService
from codecheck.shared.infrastructure.ledger.base import LedgerContract
from codecheck.client.state.reducer import DecryptionFinished, DecryptionPhaseChanged, DecryptionStarted

if TYPE_CHECKING:
    from codecheck.client.controllers.session_manager import SessionManager
    from codecheck.client.state.app_state import AppState

logger = logging.getLogger(__name__)


class DecryptionVerifier:
    """Runs ``NONE → REQUESTED → AWAITING_PROOF → VERIFYING → DONE`` per record.

    The oracle exchange happens in two explicit phases: the crypto service
    returns the clear values with a decryption proof, then the proof is
    submitted to the ledger and the transaction awaited. Only a confirmed
    verification promotes the record.

    At most one decryption runs per record id; different records may be
    decrypted concurrently.
    """

    MSG_VERIFYING = "Verifying decryption..."
    MSG_SUCCESS = "Decryption verified!"

    def __init__(
        self,
        app_state: AppState,
        session: SessionManager,
        crypto: CryptoService,
        ledger: LedgerContract,
        records: RecordStore,
        notifier: StatusNotifier,
    ):
        self.app_state = app_state
        self.session = session
        self.crypto = crypto
        self.ledger = ledger
        self.records = records
        self.notifier = notifier
        self.last_error: Optional[DecryptionError] = None

    def phase_of(self, record_id: str) -> DecryptionPhase:
        decryption = self.app_state.value.decryptions.get(record_id)
        return decryption.phase if decryption else DecryptionPhase.NONE

    async def decrypt_data(self, record_id: str) -> Optional[int]:
        """Return the verified clear value of ``record_id``.

        Returns:
            The clear value, or None if the decryption failed, was cancelled
            or is already running for this record

        Raises:
            SessionNotReady: If a remote call is needed and the session is not ready
        """
        cached = self.records.get(record_id)
        if cached is not None and cached.verified:
            return cached.clear_value

        try:
            self.session.require_ready()
        except SessionNotReady as e:
            await self.notifier.error(str(e))
            raise

        try:
            await self.app_state.dispatch(DecryptionStarted(record_id=record_id))
        except OperationInProgress:
            logger.warning(f"Decryption of {record_id} ignored: already in flight")
            return None

        token = self.session.cancel_token
        try:
            data = await self.ledger.get_business_data(record_id)
            if data.is_verified:
                # Verified on the ledger by an earlier session; no oracle round trip
                token.raise_if_cancelled()
                return await self._complete(record_id, data.decrypted_value, Record.from_ledger(record_id, data))

            await self._advance(record_id, DecryptionPhase.REQUESTED)
            handle = await self.ledger.get_encrypted_value(record_id)

            await self._advance(record_id, DecryptionPhase.AWAITING_PROOF)
            proof = await self.crypto.request_decryption([handle], self.ledger.address)
            if handle not in proof.clear_values:
                raise DecryptionError(f"Oracle returned no clear value for handle {handle}")
            token.raise_if_cancelled()

            await self.notifier.pending(self.MSG_VERIFYING)
            await self._advance(record_id, DecryptionPhase.VERIFYING)
            tx = await self.ledger.verify_decryption(
                record_id,
                proof.abi_encoded_clear_values,
                proof.decryption_proof,
            )
            await tx.wait()
            token.raise_if_cancelled()
        except Exception as e:
            if token.cancelled:
                logger.info(f"Decryption of {record_id} abandoned: {token.reason}")
                return None
            await self._fail(record_id, e)
            return None

        return await self._complete(record_id, int(proof.clear_values[handle]), Record.from_ledger(record_id, data))

    async def _complete(self, record_id: str, clear_value: int, fallback: Record) -> int:
        if self.records.patch_verified(record_id, clear_value) is None:
            self.records.upsert(fallback.mark_verified(clear_value))

        await self._advance(record_id, DecryptionPhase.DONE)
        await self.app_state.dispatch(DecryptionFinished(record_id=record_id))
        await self.app_state.bus.publish(
            events.TOPIC_RECORD_VERIFIED,
            events.create_record_verified_event(record_id, clear_value),
        )
        await self.notifier.success(self.MSG_SUCCESS)
        logger.info(f"Record {record_id} verified with clear value {clear_value}")
        return clear_value

    async def _fail(self, record_id: str, error: Exception) -> None:
        message = f"Decryption failed: {str(error) or type(error).__name__}"
        self.last_error = error if isinstance(error, DecryptionError) else DecryptionError(message)
        logger.error(f"Decryption of {record_id} failed: {error!r}")

        await self._advance(record_id, DecryptionPhase.FAILED)
        await self.app_state.dispatch(DecryptionFinished(record_id=record_id, error=message))
        await self.notifier.error(message)

    async def _advance(self, record_id: str, phase: DecryptionPhase) -> None:
        await self.app_state.dispatch(DecryptionPhaseChanged(record_id=record_id, phase=phase))
        await self.app_state.bus.publish(
            events.TOPIC_DECRYPTION_PHASE,
            events.create_decryption_phase_event(record_id, phase.value),
        )
