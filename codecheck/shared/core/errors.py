"""Error taxonomy for the CodeCheck client core."""

from __future__ import annotations

from typing import Optional


class CodeCheckError(Exception):
    """Base class for all client-core errors."""


class ConfigurationError(CodeCheckError):
    """Configuration could not be loaded or validated."""


class SessionNotReady(CodeCheckError):
    """An operation needed the crypto service before the session was ready."""


class InitializationError(CodeCheckError):
    """The crypto service bootstrap failed."""


class ValidationError(CodeCheckError):
    """Caller input was rejected locally, before any remote call."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class EncryptionError(CodeCheckError):
    """The crypto service could not encrypt a value."""


class TransactionError(CodeCheckError):
    """A ledger transaction did not confirm."""

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        super().__init__(message)
        self.tx_hash = tx_hash


class TransactionDeclined(TransactionError):
    """The signer refused to sign the transaction."""


class TransactionFailed(TransactionError):
    """The transaction failed for any reason other than a signer decline."""


class LoadError(CodeCheckError):
    """A ledger read failed while loading records."""

    def __init__(self, message: str, record_id: Optional[str] = None):
        super().__init__(message)
        self.record_id = record_id


class DecryptionError(CodeCheckError):
    """Decryption or its on-chain verification failed."""


class OperationInProgress(CodeCheckError):
    """A single-flight operation is already running."""


class OperationCancelled(CodeCheckError):
    """The session that started an operation ended before it completed."""


_DECLINE_MARKERS = (
    "user rejected",
    "user denied",
    "rejected by user",
    "action_rejected",
)


def classify_transaction_error(exc: BaseException) -> TransactionError:
    """Map an arbitrary signer or ledger failure onto the transaction taxonomy."""
    if isinstance(exc, TransactionError):
        return exc

    message = str(exc) or exc.__class__.__name__
    lowered = message.lower()
    if any(marker in lowered for marker in _DECLINE_MARKERS):
        return TransactionDeclined(message)
    return TransactionFailed(message)
