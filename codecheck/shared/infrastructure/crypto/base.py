"""Crypto service surface consumed by the client core.

Decryption is split into two explicit phases: the oracle produces clear
values plus a proof, and the caller submits that proof to the ledger.
``verify_decryption`` composes both phases for callers that want a single
call.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Dict, List, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class EncryptedInput(BaseModel):
    """Ciphertext plus the input proof the contract checks on submission."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    ciphertext: str = Field(alias="encryptedData")
    proof: str


class DecryptionProof(BaseModel):
    """Oracle output for one decryption request."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    clear_values: Dict[str, int] = Field(alias="clearValues")
    abi_encoded_clear_values: str = Field(alias="abiEncodedClearValues")
    decryption_proof: str = Field(alias="decryptionProof")


@runtime_checkable
class CryptoService(Protocol):
    """Homomorphic encryption service."""

    async def initialize(self) -> None:
        ...

    async def encrypt(self, contract_address: str, caller_address: str, value: int) -> EncryptedInput:
        ...

    async def request_decryption(self, handles: List[str], contract_address: str) -> DecryptionProof:
        ...


SubmitProof = Callable[[str, str], Awaitable[object]]


async def verify_decryption(
    crypto: CryptoService,
    handles: List[str],
    contract_address: str,
    submit_proof: SubmitProof,
) -> Dict[str, int]:
    """Request a decryption proof and hand it to ``submit_proof``.

    Args:
        crypto: Service producing the clear values and proof
        handles: Ciphertext handles to decrypt
        contract_address: Contract the handles belong to
        submit_proof: Coroutine taking ``(abi_encoded_clear_values, proof)``

    Returns:
        Mapping of handle to clear value, once the proof was accepted
    """
    proof = await crypto.request_decryption(handles, contract_address)
    logger.debug(f"Decryption proof received for {len(handles)} handle(s)")
    await submit_proof(proof.abi_encoded_clear_values, proof.decryption_proof)
    return dict(proof.clear_values)
