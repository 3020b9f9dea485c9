"""
Shared Domain Module
====================

Records, status channel, encryption gateway and the analysis seam.
"""

# Records
from codecheck.shared.domain.records.models import (
    Record,
    UploadDraft,
    TransactionStatus,
    SessionState,
    SessionPhase,
    DecryptionPhase,
    DecryptionSession,
    RecordStats,
    Page,
)
from codecheck.shared.domain.records.store import RecordStore

# Status
from codecheck.shared.domain.status.notifier import StatusNotifier

# Encryption
from codecheck.shared.domain.encryption.gateway import EncryptionGateway

# Analysis
from codecheck.shared.domain.analysis.engine import (
    AnalysisEngine,
    PlaceholderSimilarityEngine,
    FixedSimilarityEngine,
)

__all__ = [
    # Records
    "Record",
    "UploadDraft",
    "TransactionStatus",
    "SessionState",
    "SessionPhase",
    "DecryptionPhase",
    "DecryptionSession",
    "RecordStats",
    "Page",
    "RecordStore",
    # Status
    "StatusNotifier",
    # Encryption
    "EncryptionGateway",
    # Analysis
    "AnalysisEngine",
    "PlaceholderSimilarityEngine",
    "FixedSimilarityEngine",
]
