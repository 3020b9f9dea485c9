"""Ledger contract surface consumed by the client core."""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BusinessData(BaseModel):
    """One record as returned by ``getBusinessData``."""
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    name: str = ""
    public_value1: int = Field(default=0, alias="publicValue1")
    public_value2: int = Field(default=0, alias="publicValue2")
    description: str = ""
    creator: str = ""
    timestamp: int = 0
    decrypted_value: int = Field(default=0, alias="decryptedValue")
    is_verified: bool = Field(default=False, alias="isVerified")

    @field_validator("public_value1", "public_value2", "timestamp", "decrypted_value", mode="before")
    @classmethod
    def _null_number_is_zero(cls, value):
        return 0 if value is None else value

    @field_validator("name", "description", "creator", mode="before")
    @classmethod
    def _null_text_is_empty(cls, value):
        return "" if value is None else value

    @field_validator("is_verified", mode="before")
    @classmethod
    def _null_flag_is_false(cls, value):
        return False if value is None else value


@runtime_checkable
class TransactionHandle(Protocol):
    """A submitted transaction that can be awaited until confirmed."""

    hash: str

    async def wait(self) -> None:
        """Block until confirmation; raise ``TransactionError`` on revert."""
        ...


@runtime_checkable
class LedgerContract(Protocol):
    """Code check contract as seen by the client."""

    @property
    def address(self) -> str:
        ...

    async def get_all_business_ids(self) -> List[str]:
        ...

    async def get_business_data(self, business_id: str) -> BusinessData:
        ...

    async def create_business_data(
        self,
        business_id: str,
        name: str,
        ciphertext: str,
        proof: str,
        public_value1: int,
        public_value2: int,
        description: str,
    ) -> TransactionHandle:
        ...

    async def get_encrypted_value(self, business_id: str) -> str:
        ...

    async def verify_decryption(
        self,
        business_id: str,
        abi_encoded_clear_values: str,
        decryption_proof: str,
    ) -> TransactionHandle:
        ...

    async def is_available(self) -> bool:
        ...
