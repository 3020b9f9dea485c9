"""HTTP adapter for the homomorphic encryption service."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from codecheck.shared.core.configuration import CryptoConfig
from codecheck.shared.infrastructure.crypto.base import DecryptionProof, EncryptedInput

logger = logging.getLogger(__name__)


class HttpCryptoService:
    """``CryptoService`` implementation speaking JSON over HTTP.

    Endpoints:
        POST /initialize -> {"ready": bool}
        POST /encrypt    -> {"encryptedData": str, "proof": str}
        POST /decrypt    -> {"clearValues": {...}, "abiEncodedClearValues": str, "decryptionProof": str}
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    @classmethod
    def from_config(cls, config: CryptoConfig, client: Optional[httpx.AsyncClient] = None) -> "HttpCryptoService":
        return cls(base_url=config.service_url, timeout=config.request_timeout, client=client)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._client.post(path, json=payload)
        response.raise_for_status()
        return response.json()

    async def initialize(self) -> None:
        body = await self._post("/initialize", {})
        if not body.get("ready", False):
            raise RuntimeError(body.get("error") or "crypto service reported not ready")
        logger.info("Crypto service initialized")

    async def encrypt(self, contract_address: str, caller_address: str, value: int) -> EncryptedInput:
        body = await self._post(
            "/encrypt",
            {"contractAddress": contract_address, "userAddress": caller_address, "value": value},
        )
        return EncryptedInput.model_validate(body)

    async def request_decryption(self, handles: List[str], contract_address: str) -> DecryptionProof:
        body = await self._post("/decrypt", {"handles": list(handles), "contractAddress": contract_address})
        return DecryptionProof.model_validate(body)
