"""
Shared Infrastructure Module
=============================

Technical adapters for external systems (ledger contract, crypto service).
"""

# Ledger
from codecheck.shared.infrastructure.ledger.base import (
    BusinessData,
    LedgerContract,
    TransactionHandle,
)
from codecheck.shared.infrastructure.ledger.jsonrpc_ledger import (
    JsonRpcLedgerContract,
    JsonRpcTransaction,
    LedgerRpcError,
)

# Crypto
from codecheck.shared.infrastructure.crypto.base import (
    CryptoService,
    DecryptionProof,
    EncryptedInput,
    verify_decryption,
)
from codecheck.shared.infrastructure.crypto.http_crypto_service import HttpCryptoService

__all__ = [
    # Ledger
    "BusinessData",
    "LedgerContract",
    "TransactionHandle",
    "JsonRpcLedgerContract",
    "JsonRpcTransaction",
    "LedgerRpcError",
    # Crypto
    "CryptoService",
    "DecryptionProof",
    "EncryptedInput",
    "verify_decryption",
    "HttpCryptoService",
]
