"""CodeCheck client facade.

Wires the session, records, submission and decryption components around
one ``AppState`` and exposes the operations a front end calls.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from codecheck.shared.core.configuration import SystemConfig
from codecheck.shared.core.errors import LoadError, OperationCancelled
from codecheck.shared.core.event_bus import EventBus
from codecheck.shared.domain.analysis.engine import AnalysisEngine, PlaceholderSimilarityEngine
from codecheck.shared.domain.encryption.gateway import EncryptionGateway
from codecheck.shared.domain.records.models import Page, Record, RecordStats, UploadDraft
from codecheck.shared.domain.records.store import RecordStore
from codecheck.shared.domain.status.notifier import StatusNotifier
from codecheck.shared.infrastructure.crypto.base import CryptoService
from codecheck.shared.infrastructure.ledger.base import LedgerContract
from codecheck.client.controllers.decryption_verifier import DecryptionVerifier
from codecheck.client.controllers.session_manager import SessionManager
from codecheck.client.controllers.submission_coordinator import SubmissionCoordinator
from codecheck.client.state.app_state import AppState
from codecheck.client.state.reducer import DraftChanged, PageChanged, SearchChanged

logger = logging.getLogger(__name__)


class CodeCheckClient:
    """Entry point for one client instance."""

    MSG_LOAD_FAILED = "Failed to load data"
    MSG_AVAILABLE = "FHE service is available!"
    MSG_UNAVAILABLE = "Service unavailable"

    def __init__(
        self,
        app_state: AppState,
        ledger: LedgerContract,
        crypto: CryptoService,
        notifier: StatusNotifier,
        session: SessionManager,
        records: RecordStore,
        submissions: SubmissionCoordinator,
        decryptions: DecryptionVerifier,
        config: SystemConfig,
    ):
        self.app_state = app_state
        self.ledger = ledger
        self.crypto = crypto
        self.notifier = notifier
        self.session = session
        self.records = records
        self.submissions = submissions
        self.decryptions = decryptions
        self.config = config

    @classmethod
    def create(
        cls,
        ledger: LedgerContract,
        crypto: CryptoService,
        config: Optional[SystemConfig] = None,
        event_bus: Optional[EventBus] = None,
        analysis: Optional[AnalysisEngine] = None,
        app_state: Optional[AppState] = None,
    ) -> "CodeCheckClient":
        config = config or SystemConfig()
        app_state = app_state or AppState(event_bus or EventBus())
        bus = app_state.bus
        analysis = analysis or PlaceholderSimilarityEngine(seed=config.records.estimate_seed)

        notifier = StatusNotifier(bus, config.status)
        session = SessionManager(app_state, crypto, notifier)
        records = RecordStore(ledger, bus, analysis)
        gateway = EncryptionGateway(crypto, session)
        submissions = SubmissionCoordinator(app_state, session, gateway, ledger, records, analysis, notifier)
        decryptions = DecryptionVerifier(app_state, session, crypto, ledger, records, notifier)

        return cls(
            app_state=app_state,
            ledger=ledger,
            crypto=crypto,
            notifier=notifier,
            session=session,
            records=records,
            submissions=submissions,
            decryptions=decryptions,
            config=config,
        )

    # --- Session ---

    async def connect(self, account: str) -> None:
        """Handle a wallet connection, then load the record list."""
        await self.app_state.initialize()
        await self.session.on_connection_change(True, account)
        await self.refresh()

    async def disconnect(self) -> None:
        await self.session.on_connection_change(False)

    # --- Records ---

    async def refresh(self) -> List[Record]:
        """Reload records from the ledger; failures surface on the status channel."""
        if not self.session.state.connected:
            return self.records.records
        try:
            return await self.records.load(self.session.cancel_token)
        except LoadError:
            await self.notifier.error(self.MSG_LOAD_FAILED)
        except OperationCancelled:
            logger.info("Record refresh dropped: session ended")
        return self.records.records

    async def search(self, term: str) -> Page:
        await self.app_state.dispatch(SearchChanged(term=term))
        return self.current_page()

    async def go_to_page(self, page: int) -> Page:
        filtered = self.records.filter(self.app_state.value.search_term)
        total_pages = RecordStore.paginate(filtered, self.config.records.page_size, 1).total_pages
        await self.app_state.dispatch(PageChanged(page=page, total_pages=total_pages))
        return self.current_page()

    def current_page(self) -> Page:
        state = self.app_state.value
        filtered = self.records.filter(state.search_term)
        return RecordStore.paginate(filtered, self.config.records.page_size, state.page)

    def stats(self) -> RecordStats:
        return self.records.stats(self.config.records.high_value_threshold)

    # --- Upload / decrypt ---

    async def set_draft(self, draft: Optional[UploadDraft]) -> None:
        await self.app_state.dispatch(DraftChanged(draft=draft))

    async def upload(self, draft: Optional[UploadDraft] = None) -> Optional[str]:
        return await self.submissions.upload(draft)

    async def decrypt(self, record_id: str) -> Optional[int]:
        return await self.decryptions.decrypt_data(record_id)

    async def check_availability(self) -> bool:
        try:
            available = await self.ledger.is_available()
        except Exception as e:
            logger.error(f"Availability check failed: {e}")
            await self.notifier.error(self.MSG_UNAVAILABLE)
            return False
        if available:
            await self.notifier.success(self.MSG_AVAILABLE)
        return bool(available)

    async def aclose(self) -> None:
        """Close adapters that own network resources."""
        await self.notifier.dismiss()
        for resource in (self.ledger, self.crypto):
            close = getattr(resource, "aclose", None)
            if close is not None:
                await close()
