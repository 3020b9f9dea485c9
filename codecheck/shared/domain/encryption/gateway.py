"""Thin contract around the crypto service's encrypt call."""

from __future__ import annotations

import logging
from typing import Protocol

from codecheck.shared.core.errors import EncryptionError
from codecheck.shared.infrastructure.crypto.base import CryptoService, EncryptedInput

logger = logging.getLogger(__name__)


class ReadinessGuard(Protocol):
    def require_ready(self) -> None:
        """Raise ``SessionNotReady`` unless the crypto service is usable."""
        ...


class EncryptionGateway:
    """Encrypts plaintext inputs for a target contract.

    Pure remote call: nothing local changes whether it succeeds or not.
    """

    def __init__(self, crypto: CryptoService, guard: ReadinessGuard):
        self.crypto = crypto
        self.guard = guard

    async def encrypt(self, target_address: str, caller_address: str, plain_value: int) -> EncryptedInput:
        """Encrypt ``plain_value`` for ``target_address`` on behalf of ``caller_address``.

        Raises:
            SessionNotReady: Before any remote call, if the session is not ready
            EncryptionError: On any service or transport fault
        """
        self.guard.require_ready()

        try:
            encrypted = await self.crypto.encrypt(target_address, caller_address, plain_value)
        except EncryptionError:
            raise
        except Exception as e:
            logger.error(f"Crypto service encrypt call failed: {e}")
            raise EncryptionError(f"Encryption failed: {e}") from e

        logger.debug(f"Encrypted value for {target_address} ({len(encrypted.ciphertext)} chars)")
        return encrypted
