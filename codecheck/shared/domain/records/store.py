"""Cached view of the ledger's code check records."""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Sequence

from codecheck.shared.core import events
from codecheck.shared.core.cancellation import CancellationToken
from codecheck.shared.core.errors import LoadError
from codecheck.shared.core.event_bus import EventBus
from codecheck.shared.domain.analysis.engine import AnalysisEngine
from codecheck.shared.domain.records.models import Page, Record, RecordStats
from codecheck.shared.infrastructure.ledger.base import LedgerContract

logger = logging.getLogger(__name__)


class RecordStore:
    """Holds the records last read from the ledger.

    The only writers are ``load`` (full replace) and ``patch_verified``
    (single record). Both run under the coordinators' single-flight guards.
    """

    def __init__(
        self,
        ledger: LedgerContract,
        event_bus: Optional[EventBus] = None,
        analysis: Optional[AnalysisEngine] = None,
    ):
        self.ledger = ledger
        self.event_bus = event_bus
        self.analysis = analysis
        self._records: List[Record] = []
        self.last_errors: List[LoadError] = []

    @property
    def records(self) -> List[Record]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def get(self, record_id: str) -> Optional[Record]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    async def load(self, cancel_token: Optional[CancellationToken] = None) -> List[Record]:
        """Replace the cache with the ledger's current records.

        Records that fail to read are logged and left out.

        Raises:
            LoadError: If the id listing itself fails
            OperationCancelled: If the session ended during the load
        """
        try:
            record_ids = await self.ledger.get_all_business_ids()
        except Exception as e:
            logger.error(f"Failed to list records: {e}")
            raise LoadError(f"Failed to load data: {e}") from e

        loaded: List[Record] = []
        errors: List[LoadError] = []
        for record_id in record_ids:
            try:
                data = await self.ledger.get_business_data(record_id)
                record = Record.from_ledger(record_id, data)
            except Exception as e:
                logger.error(f"Error loading record {record_id}: {e}")
                errors.append(LoadError(str(e), record_id=record_id))
                continue
            if self.analysis is not None and not record.verified:
                record = record.with_estimate(await self.analysis.estimate(f"{record.name}\n{record.description}"))
            loaded.append(record)

        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        self._records = loaded
        self.last_errors = errors
        logger.info(f"Loaded {len(loaded)} records ({len(errors)} skipped)")

        if self.event_bus is not None:
            await self.event_bus.publish(
                events.TOPIC_RECORDS_LOADED,
                events.create_records_loaded_event(len(loaded), len(errors)),
            )
        return self.records

    def patch_verified(self, record_id: str, clear_value: int) -> Optional[Record]:
        """Promote one cached record to verified. Returns the patched record."""
        for index, record in enumerate(self._records):
            if record.id == record_id:
                patched = record.mark_verified(clear_value)
                self._records[index] = patched
                return patched
        logger.warning(f"Cannot patch record {record_id}: not in cache")
        return None

    def upsert(self, record: Record) -> None:
        for index, existing in enumerate(self._records):
            if existing.id == record.id:
                self._records[index] = record
                return
        self._records.append(record)

    def filter(self, term: str) -> List[Record]:
        """Records whose name or description contains ``term`` (case-insensitive)."""
        needle = (term or "").lower()
        if not needle:
            return self.records
        return [
            record for record in self._records
            if needle in record.name.lower() or needle in record.description.lower()
        ]

    @staticmethod
    def paginate(sequence: Sequence[Record], page_size: int, page: int) -> Page:
        """Slice ``sequence`` into a page, clamping ``page`` into range."""
        if page_size < 1:
            raise ValueError("page_size must be at least 1")

        total_items = len(sequence)
        total_pages = max(1, math.ceil(total_items / page_size))
        current = min(max(1, page), total_pages)
        start = (current - 1) * page_size

        return Page(
            items=list(sequence[start:start + page_size]),
            page=current,
            page_size=page_size,
            total_pages=total_pages,
            total_items=total_items,
        )

    def stats(self, high_threshold: int = 70) -> RecordStats:
        total = len(self._records)
        if total == 0:
            return RecordStats()

        figures: Dict[str, int] = {
            record.id: (record.display_value or 0) for record in self._records
        }
        return RecordStats(
            total=total,
            verified=sum(1 for record in self._records if record.verified),
            average_value=sum(figures.values()) / total,
            high_value_count=sum(1 for value in figures.values() if value > high_threshold),
        )
