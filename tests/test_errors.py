import pytest

from codecheck.shared.core.cancellation import CancellationToken
from codecheck.shared.core.errors import (
    CodeCheckError,
    OperationCancelled,
    TransactionDeclined,
    TransactionFailed,
    ValidationError,
    classify_transaction_error,
)
from codecheck.shared.domain.records.models import UploadDraft


@pytest.mark.parametrize("message", [
    "MetaMask Tx Signature: User denied transaction signature.",
    "user rejected transaction",
    "ACTION_REJECTED",
    "Request rejected by user",
])
def test_signer_refusals_are_declines(message):
    assert isinstance(classify_transaction_error(RuntimeError(message)), TransactionDeclined)


def test_other_failures_are_failed():
    error = classify_transaction_error(RuntimeError("insufficient funds for gas"))

    assert isinstance(error, TransactionFailed)
    assert str(error) == "insufficient funds for gas"
    assert isinstance(classify_transaction_error(TimeoutError()), TransactionFailed)


def test_transaction_errors_pass_through():
    original = TransactionFailed("Transaction reverted", tx_hash="0xabc")

    assert classify_transaction_error(original) is original


def test_taxonomy_shares_a_root():
    assert issubclass(TransactionDeclined, CodeCheckError)
    assert issubclass(OperationCancelled, CodeCheckError)


def test_cancellation_token():
    token = CancellationToken()
    token.raise_if_cancelled()

    token.cancel("wallet disconnected")
    token.cancel("second reason is ignored")

    assert token.cancelled
    assert token.reason == "wallet disconnected"
    with pytest.raises(OperationCancelled, match="wallet disconnected"):
        token.raise_if_cancelled()
    assert CancellationToken().id != token.id


def test_draft_validation_names_the_field():
    with pytest.raises(ValidationError) as info:
        UploadDraft.validated("P1", "   ")
    assert info.value.field == "source_text"

    draft = UploadDraft.validated("P1", "print(1)")
    assert draft.public_length == 8
