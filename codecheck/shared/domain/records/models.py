"""Record schemas shared by the client-core coordinators."""

from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from codecheck.shared.core.errors import ValidationError
from codecheck.shared.infrastructure.ledger.base import BusinessData


class Record(BaseModel):
    """A confidentially-computed code check as known to the client.

    ``clear_value`` is authoritative only when ``verified`` is true; until
    then ``estimated_value`` is the figure on display and must be presented
    as an estimate.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    creator: str = ""
    timestamp: int = 0
    public_length: int = 0
    clear_value: int = 0
    verified: bool = False
    estimated_value: Optional[int] = None

    @classmethod
    def from_ledger(cls, record_id: str, data: BusinessData) -> "Record":
        return cls(
            id=record_id,
            name=data.name,
            description=data.description,
            creator=data.creator,
            timestamp=data.timestamp,
            public_length=data.public_value1,
            clear_value=data.decrypted_value if data.is_verified else 0,
            verified=data.is_verified,
        )

    @property
    def display_value(self) -> Optional[int]:
        """The figure to show: the verified value, else the estimate."""
        if self.verified:
            return self.clear_value
        return self.estimated_value

    @property
    def is_estimate(self) -> bool:
        return not self.verified

    def with_estimate(self, estimate: int) -> "Record":
        """Attach a placeholder estimate; verified records keep their value."""
        if self.verified:
            return self
        return self.model_copy(update={"estimated_value": estimate})

    def mark_verified(self, clear_value: int) -> "Record":
        return self.model_copy(
            update={"verified": True, "clear_value": clear_value, "estimated_value": None}
        )


class UploadDraft(BaseModel):
    """Caller-owned input for a new code check."""
    model_config = ConfigDict(frozen=True)

    name: str = ""
    source_text: str = ""
    description: str = ""

    @classmethod
    def validated(cls, name: str, source_text: str, description: str = "") -> "UploadDraft":
        draft = cls(name=name, source_text=source_text, description=description)
        draft.validate_for_submission()
        return draft

    def validate_for_submission(self) -> None:
        """Raise ``ValidationError`` unless the draft can be submitted."""
        if not self.name.strip():
            raise ValidationError("Project name is required", field="name")
        if not self.source_text.strip():
            raise ValidationError("Source code is required", field="source_text")

    @property
    def public_length(self) -> int:
        return len(self.source_text)


StatusKind = Literal["pending", "success", "error"]


class TransactionStatus(BaseModel):
    """The single status currently on display."""
    model_config = ConfigDict(frozen=True)

    visible: bool = False
    kind: StatusKind = "pending"
    message: str = ""

    @classmethod
    def hidden(cls) -> "TransactionStatus":
        return cls()


class SessionPhase(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    INITIALIZING = "initializing"
    READY = "ready"


class SessionState(BaseModel):
    """Wallet connection and crypto readiness of one client instance."""
    model_config = ConfigDict(frozen=True)

    connected: bool = False
    crypto_ready: bool = False
    initializing: bool = False
    account: Optional[str] = None

    @property
    def phase(self) -> SessionPhase:
        if not self.connected:
            return SessionPhase.DISCONNECTED
        if self.initializing:
            return SessionPhase.INITIALIZING
        if self.crypto_ready:
            return SessionPhase.READY
        return SessionPhase.CONNECTED

    @property
    def ready(self) -> bool:
        return self.phase is SessionPhase.READY


class DecryptionPhase(str, Enum):
    NONE = "none"
    REQUESTED = "requested"
    AWAITING_PROOF = "awaiting_proof"
    VERIFYING = "verifying"
    DONE = "done"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (DecryptionPhase.DONE, DecryptionPhase.FAILED)


class DecryptionSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    record_id: str
    phase: DecryptionPhase = DecryptionPhase.NONE


class RecordStats(BaseModel):
    """Dashboard figures derived from the cached records."""
    model_config = ConfigDict(frozen=True)

    total: int = 0
    verified: int = 0
    average_value: float = 0.0
    high_value_count: int = 0


class Page(BaseModel):
    """One page of a derived record sequence."""
    model_config = ConfigDict(frozen=True)

    items: List[Record] = Field(default_factory=list)
    page: int = 1
    page_size: int = 1
    total_pages: int = 1
    total_items: int = 0

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages
