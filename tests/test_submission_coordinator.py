import asyncio

import pytest

from codecheck.client.controllers.submission_coordinator import SubmissionCoordinator
from codecheck.shared.core import events
from codecheck.shared.core.errors import (
    SessionNotReady,
    TransactionDeclined,
    TransactionFailed,
    ValidationError,
)
from codecheck.shared.domain.records.models import UploadDraft

from tests.conftest import ACCOUNT
from tests.fakes import wait_for


def draft(name="P1", source_text="print(1)", description="d"):
    return UploadDraft(name=name, source_text=source_text, description=description)


@pytest.mark.asyncio
async def test_upload_adds_one_unverified_record(ready_client, ledger):
    record_id = await ready_client.upload(draft())

    assert record_id is not None
    records = ready_client.records.records
    assert len(records) == 1
    record = records[0]
    assert record.id == record_id
    assert record.name == "P1"
    assert record.description == "d"
    assert record.public_length == len("print(1)")
    assert not record.verified
    assert ready_client.notifier.current.message == SubmissionCoordinator.MSG_SUCCESS
    assert not ready_client.app_state.value.uploading


@pytest.mark.asyncio
async def test_upload_encrypts_the_analysis_estimate(ready_client, ledger, crypto):
    await ready_client.upload(draft())

    assert crypto.encrypt_calls == [(ledger.address, ACCOUNT, 55)]
    (args,) = ledger.calls_to("create_business_data")
    record_id, name, ciphertext, proof, length, second, description = args
    assert (name, ciphertext, proof, length, second, description) == ("P1", "ct:55", "input-proof", 8, 0, "d")
    assert record_id.startswith("check-")


@pytest.mark.asyncio
async def test_upload_uses_draft_from_state_and_clears_it(ready_client):
    await ready_client.set_draft(draft(name="From state"))

    record_id = await ready_client.upload()

    assert record_id is not None
    assert ready_client.records.get(record_id).name == "From state"
    assert ready_client.app_state.value.draft is None


@pytest.mark.asyncio
async def test_record_ids_are_unique(ready_client):
    first = await ready_client.upload(draft(name="One"))
    second = await ready_client.upload(draft(name="Two"))

    assert first != second
    assert len(ready_client.records) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("bad", [draft(name="  "), draft(source_text="")])
async def test_invalid_draft_is_rejected_locally(ready_client, ledger, crypto, bad):
    with pytest.raises(ValidationError):
        await ready_client.upload(bad)

    assert crypto.encrypt_calls == []
    assert ledger.calls_to("create_business_data") == []
    assert not ready_client.app_state.value.uploading


@pytest.mark.asyncio
async def test_nothing_to_upload(ready_client):
    with pytest.raises(ValidationError, match="Nothing to upload"):
        await ready_client.upload()


@pytest.mark.asyncio
async def test_upload_requires_ready_session(client, crypto):
    with pytest.raises(SessionNotReady):
        await client.upload(draft())

    assert client.notifier.current.kind == "error"
    assert client.notifier.current.message == "Please connect wallet first"
    assert crypto.encrypt_calls == []
    await client.notifier.dismiss()


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    TransactionDeclined("user rejected transaction"),
    RuntimeError("MetaMask Tx Signature: User denied transaction signature."),
])
async def test_declined_signature_reports_rejection_and_releases_guard(ready_client, ledger, error):
    ledger.send_error = error

    result = await ready_client.upload(draft())

    assert result is None
    assert ready_client.notifier.current.kind == "error"
    assert ready_client.notifier.current.message == SubmissionCoordinator.MSG_DECLINED
    assert len(ready_client.records) == 0
    state = ready_client.app_state.value
    assert not state.uploading
    assert state.draft == draft()

    ledger.send_error = None
    assert await ready_client.upload() is not None
    assert len(ready_client.records) == 1


@pytest.mark.asyncio
async def test_reverted_transaction_reports_failure(ready_client, ledger):
    ledger.wait_error = TransactionFailed("Transaction reverted")

    assert await ready_client.upload(draft()) is None

    assert ready_client.notifier.current.message == "Upload failed: Transaction reverted"
    assert ready_client.app_state.value.last_error == "Upload failed: Transaction reverted"
    assert len(ready_client.records) == 0


@pytest.mark.asyncio
async def test_encryption_failure_never_reaches_ledger(ready_client, ledger, crypto):
    crypto.encrypt_error = RuntimeError("boom")

    assert await ready_client.upload(draft()) is None

    assert ready_client.notifier.current.message == "Upload failed: Encryption failed: boom"
    assert ledger.calls_to("create_business_data") == []
    assert not ready_client.app_state.value.uploading


@pytest.mark.asyncio
async def test_concurrent_upload_is_ignored(ready_client, ledger):
    ledger.tx_gate = asyncio.Event()

    first = asyncio.create_task(ready_client.upload(draft(name="First")))
    await wait_for(lambda: len(ledger.calls_to("create_business_data")) == 1)

    assert await ready_client.upload(draft(name="Second")) is None

    ledger.tx_gate.set()
    record_id = await first

    assert record_id is not None
    assert len(ledger.calls_to("create_business_data")) == 1
    assert [r.name for r in ready_client.records.records] == ["First"]


@pytest.mark.asyncio
async def test_disconnect_mid_upload_drops_the_result(ready_client, ledger):
    ledger.tx_gate = asyncio.Event()
    task = asyncio.create_task(ready_client.upload(draft()))
    await wait_for(lambda: len(ledger.calls_to("create_business_data")) == 1)

    await ready_client.disconnect()
    ledger.tx_gate.set()

    assert await task is None
    assert len(ready_client.records) == 0
    assert not ready_client.app_state.value.uploading
    assert ready_client.notifier.current.message != SubmissionCoordinator.MSG_SUCCESS


@pytest.mark.asyncio
async def test_confirmed_upload_is_published(ready_client, event_bus):
    received = []

    async def on_submitted(payload):
        received.append(payload)

    await event_bus.subscribe(events.TOPIC_RECORD_SUBMITTED, on_submitted)

    record_id = await ready_client.upload(draft())
    await event_bus.wait_until_idle()

    assert received == [{"record_id": record_id, "tx_hash": "0xtx0001"}]


@pytest.mark.asyncio
async def test_account_switch_mid_upload_releases_the_guard(ready_client, ledger):
    ledger.tx_gate = asyncio.Event()
    task = asyncio.create_task(ready_client.upload(draft(name="Old account")))
    await wait_for(lambda: len(ledger.calls_to("create_business_data")) == 1)

    await ready_client.session.on_connection_change(True, "0xB0B")
    ledger.tx_gate.set()

    assert await task is None
    assert not ready_client.app_state.value.uploading

    ledger.tx_gate = None
    record_id = await ready_client.upload(draft(name="New account"))

    assert record_id is not None
    assert ready_client.records.get(record_id).name == "New account"


@pytest.mark.asyncio
async def test_failed_refresh_after_confirmation_still_succeeds(ready_client, ledger):
    ledger.list_error = RuntimeError("rpc down")

    record_id = await ready_client.upload(draft())

    assert record_id is not None
    assert record_id in ledger.data
    state = ready_client.app_state.value
    assert not state.uploading
    assert state.draft is None
    assert ready_client.notifier.current.message == SubmissionCoordinator.MSG_SUCCESS
    assert len(ready_client.records) == 0


@pytest.mark.asyncio
async def test_disconnect_during_refresh_keeps_confirmed_id(ready_client, ledger):
    ledger.list_gate = asyncio.Event()
    listings = len(ledger.calls_to("get_all_business_ids"))
    task = asyncio.create_task(ready_client.upload(draft()))
    await wait_for(lambda: len(ledger.calls_to("get_all_business_ids")) == listings + 1)

    await ready_client.disconnect()
    ledger.list_gate.set()
    record_id = await task

    assert record_id is not None
    assert record_id in ledger.data
    assert len(ready_client.records) == 0
    assert not ready_client.app_state.value.uploading
