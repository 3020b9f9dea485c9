"""JSON-RPC adapter for the code check contract.

Talks to a contract gateway that exposes ``call`` (read-only), ``send``
(signed transaction) and ``getTransactionReceipt`` over JSON-RPC 2.0. The
gateway owns the wallet; signer refusals come back as EIP-1193 error 4001.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Any, Dict, List, Optional

import httpx

from codecheck.shared.core.configuration import LedgerConfig
from codecheck.shared.core.errors import (
    CodeCheckError,
    TransactionDeclined,
    TransactionFailed,
)
from codecheck.shared.infrastructure.ledger.base import BusinessData

logger = logging.getLogger(__name__)

# EIP-1193 "User Rejected Request"
USER_REJECTED_CODE = 4001


class LedgerRpcError(CodeCheckError):
    """JSON-RPC level error returned by the contract gateway."""

    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(f"[{code}] {message}")
        self.code = code
        self.rpc_message = message
        self.data = data


class JsonRpcTransaction:
    """Transaction submitted through the gateway, confirmed by receipt polling."""

    def __init__(self, ledger: "JsonRpcLedgerContract", tx_hash: str):
        self.ledger = ledger
        self.hash = tx_hash

    async def wait(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.ledger.confirmation_timeout
        while True:
            receipt = await self.ledger._rpc("getTransactionReceipt", {"hash": self.hash})
            if receipt:
                status = int(receipt.get("status", 0))
                if status != 1:
                    raise TransactionFailed("Transaction reverted", tx_hash=self.hash)
                logger.info(f"Transaction {self.hash} confirmed in block {receipt.get('blockNumber')}")
                return
            if loop.time() >= deadline:
                raise TransactionFailed(
                    f"Transaction not confirmed after {self.ledger.confirmation_timeout}s",
                    tx_hash=self.hash,
                )
            await asyncio.sleep(self.ledger.poll_interval)

    def __repr__(self) -> str:
        return f"<JsonRpcTransaction {self.hash}>"


class JsonRpcLedgerContract:
    """``LedgerContract`` implementation backed by httpx."""

    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        timeout: float = 30.0,
        confirmation_timeout: float = 120.0,
        poll_interval: float = 1.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.rpc_url = rpc_url
        self._address = contract_address
        self.confirmation_timeout = confirmation_timeout
        self.poll_interval = poll_interval
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._ids = itertools.count(1)

    @classmethod
    def from_config(cls, config: LedgerConfig, client: Optional[httpx.AsyncClient] = None) -> "JsonRpcLedgerContract":
        return cls(
            rpc_url=config.rpc_url,
            contract_address=config.contract_address,
            timeout=config.request_timeout,
            confirmation_timeout=config.confirmation_timeout,
            poll_interval=config.confirmation_poll_interval,
            client=client,
        )

    @property
    def address(self) -> str:
        return self._address

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _rpc(self, method: str, params: Dict[str, Any]) -> Any:
        request_id = next(self._ids)
        payload = {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params}
        logger.debug(f"Ledger RPC #{request_id} {method} {params.get('function', '')}")

        response = await self._client.post(self.rpc_url, json=payload)
        response.raise_for_status()
        body = response.json()

        error = body.get("error")
        if error:
            raise LedgerRpcError(int(error.get("code", -32000)), str(error.get("message", "")), error.get("data"))
        return body.get("result")

    async def _call(self, function: str, *args: Any) -> Any:
        return await self._rpc("call", {"to": self._address, "function": function, "args": list(args)})

    async def _send(self, function: str, *args: Any) -> JsonRpcTransaction:
        try:
            result = await self._rpc("send", {"to": self._address, "function": function, "args": list(args)})
        except LedgerRpcError as e:
            if e.code == USER_REJECTED_CODE:
                raise TransactionDeclined(f"user rejected transaction: {e.rpc_message}") from e
            raise TransactionFailed(str(e)) from e

        tx_hash = result["hash"] if isinstance(result, dict) else str(result)
        logger.info(f"Submitted {function} as {tx_hash}")
        return JsonRpcTransaction(self, tx_hash)

    async def get_all_business_ids(self) -> List[str]:
        return [str(business_id) for business_id in (await self._call("getAllBusinessIds") or [])]

    async def get_business_data(self, business_id: str) -> BusinessData:
        return BusinessData.model_validate(await self._call("getBusinessData", business_id))

    async def create_business_data(
        self,
        business_id: str,
        name: str,
        ciphertext: str,
        proof: str,
        public_value1: int,
        public_value2: int,
        description: str,
    ) -> JsonRpcTransaction:
        return await self._send(
            "createBusinessData",
            business_id,
            name,
            ciphertext,
            proof,
            public_value1,
            public_value2,
            description,
        )

    async def get_encrypted_value(self, business_id: str) -> str:
        return str(await self._call("getEncryptedValue", business_id))

    async def verify_decryption(
        self,
        business_id: str,
        abi_encoded_clear_values: str,
        decryption_proof: str,
    ) -> JsonRpcTransaction:
        return await self._send("verifyDecryption", business_id, abi_encoded_clear_values, decryption_proof)

    async def is_available(self) -> bool:
        return bool(await self._call("isAvailable"))
