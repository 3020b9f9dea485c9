import pytest

from codecheck.shared.core.errors import EncryptionError, SessionNotReady
from codecheck.shared.domain.encryption.gateway import EncryptionGateway


class Guard:
    def __init__(self, ready=True):
        self.ready = ready

    def require_ready(self):
        if not self.ready:
            raise SessionNotReady("Please connect wallet first")


@pytest.mark.asyncio
async def test_encrypt_returns_ciphertext_and_proof(crypto):
    gateway = EncryptionGateway(crypto, Guard())

    encrypted = await gateway.encrypt("0xC0DEC4ECC", "0xA11CE", 64)

    assert encrypted.ciphertext == "ct:64"
    assert encrypted.proof == "input-proof"
    assert crypto.encrypt_calls == [("0xC0DEC4ECC", "0xA11CE", 64)]


@pytest.mark.asyncio
async def test_encrypt_fails_fast_when_not_ready(crypto):
    gateway = EncryptionGateway(crypto, Guard(ready=False))

    with pytest.raises(SessionNotReady):
        await gateway.encrypt("0xC0DEC4ECC", "0xA11CE", 64)

    assert crypto.encrypt_calls == []


@pytest.mark.asyncio
async def test_service_faults_become_encryption_errors(crypto):
    crypto.encrypt_error = ConnectionError("relayer unreachable")
    gateway = EncryptionGateway(crypto, Guard())

    with pytest.raises(EncryptionError, match="relayer unreachable") as info:
        await gateway.encrypt("0xC0DEC4ECC", "0xA11CE", 64)

    assert isinstance(info.value.__cause__, ConnectionError)


@pytest.mark.asyncio
async def test_encryption_errors_pass_through_unchanged(crypto):
    original = EncryptionError("value out of range")
    crypto.encrypt_error = original
    gateway = EncryptionGateway(crypto, Guard())

    with pytest.raises(EncryptionError) as info:
        await gateway.encrypt("0xC0DEC4ECC", "0xA11CE", 1000)

    assert info.value is original
