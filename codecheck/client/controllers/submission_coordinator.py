"""Submission coordinator: encrypt a new code check and record it on the ledger."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Optional

from codecheck.shared.core import events
from codecheck.shared.core.errors import (
    EncryptionError,
    LoadError,
    OperationCancelled,
    OperationInProgress,
    SessionNotReady,
    TransactionDeclined,
    ValidationError,
    classify_transaction_error,
)
from codecheck.shared.domain.analysis.engine import AnalysisEngine
from codecheck.shared.domain.encryption.gateway import EncryptionGateway
from codecheck.shared.domain.records.models import UploadDraft
from codecheck.shared.domain.records.store import RecordStore
from codecheck.shared.domain.status.notifier import StatusNotifier
from codecheck.shared.infrastructure.ledger.base import LedgerContract
from codecheck.client.state.reducer import DraftChanged, UploadFailed, UploadStarted, UploadSucceeded

if TYPE_CHECKING:
    from codecheck.client.controllers.session_manager import SessionManager
    from codecheck.client.state.app_state import AppState

logger = logging.getLogger(__name__)


class SubmissionCoordinator:
    """Single-flight upload of one draft at a time."""

    MSG_ENCRYPTING = "Encrypting code with FHE..."
    MSG_UPLOADING = "Uploading encrypted code..."
    MSG_SUCCESS = "Code uploaded successfully!"
    MSG_DECLINED = "Transaction rejected"

    def __init__(
        self,
        app_state: AppState,
        session: SessionManager,
        gateway: EncryptionGateway,
        ledger: LedgerContract,
        records: RecordStore,
        analysis: AnalysisEngine,
        notifier: StatusNotifier,
    ):
        self.app_state = app_state
        self.session = session
        self.gateway = gateway
        self.ledger = ledger
        self.records = records
        self.analysis = analysis
        self.notifier = notifier
        self._last_id_ms = 0

    @property
    def in_flight(self) -> bool:
        return self.app_state.value.uploading

    def _new_record_id(self) -> str:
        now_ms = max(int(time.time() * 1000), self._last_id_ms + 1)
        self._last_id_ms = now_ms
        return f"check-{now_ms}"

    async def upload(self, draft: Optional[UploadDraft] = None) -> Optional[str]:
        """Encrypt and submit ``draft`` (or the draft held in state).

        Returns:
            The new record id once confirmed, or None when the upload failed
            or was ignored because another upload is in flight

        Raises:
            ValidationError: If the draft is missing a name or source text
            SessionNotReady: If the session is not ready
        """
        draft = draft or self.app_state.value.draft
        if draft is None:
            raise ValidationError("Nothing to upload")
        draft.validate_for_submission()

        try:
            self.session.require_ready()
        except SessionNotReady as e:
            await self.notifier.error(str(e))
            raise

        try:
            await self.app_state.dispatch(UploadStarted())
        except OperationInProgress:
            logger.warning("Upload ignored: another upload is in flight")
            return None

        token = self.session.cancel_token
        account = self.session.account or ""
        if self.app_state.value.draft != draft:
            await self.app_state.dispatch(DraftChanged(draft=draft))

        record_id = self._new_record_id()
        try:
            await self.notifier.pending(self.MSG_ENCRYPTING)
            estimate = await self.analysis.estimate(draft.source_text)
            encrypted = await self.gateway.encrypt(self.ledger.address, account, estimate)
            token.raise_if_cancelled()

            tx = await self.ledger.create_business_data(
                record_id,
                draft.name,
                encrypted.ciphertext,
                encrypted.proof,
                draft.public_length,
                0,
                draft.description,
            )
            await self.notifier.pending(self.MSG_UPLOADING)
            await tx.wait()
            token.raise_if_cancelled()
        except Exception as e:
            if token.cancelled:
                # Disconnect or account switch already reset the guard; nothing of this session may be written
                logger.info(f"Upload {record_id} abandoned: {token.reason}")
                return None
            await self._fail(e)
            return None

        logger.info(f"Record {record_id} confirmed ({draft.public_length} chars)")
        await self.notifier.success(self.MSG_SUCCESS)
        await self.app_state.bus.publish(
            events.TOPIC_RECORD_SUBMITTED,
            events.create_record_submitted_event(record_id, getattr(tx, "hash", None)),
        )

        try:
            await self.records.load(token)
        except LoadError as e:
            logger.warning(f"Record {record_id} confirmed but refresh failed: {e}")
        except OperationCancelled:
            logger.info(f"Refresh after upload {record_id} dropped: {token.reason}")
            return record_id

        await self.app_state.dispatch(UploadSucceeded(record_id=record_id))
        return record_id

    async def _fail(self, error: Exception) -> None:
        declined = not isinstance(error, EncryptionError) and isinstance(
            classify_transaction_error(error), TransactionDeclined
        )
        message = self.MSG_DECLINED if declined else f"Upload failed: {str(error) or type(error).__name__}"

        logger.error(f"Upload failed: {error!r}")
        await self.app_state.dispatch(UploadFailed(error=message))
        await self.notifier.error(message)
