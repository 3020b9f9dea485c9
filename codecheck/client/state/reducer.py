"""Application state value and its named transitions.

Every client-side flag lives in one immutable ``ApplicationState``. It only
changes through ``reduce(state, action)``, which is also where the
single-flight rules are enforced.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Optional, Type

from pydantic import BaseModel, ConfigDict, Field

from codecheck.shared.core.errors import OperationInProgress, SessionNotReady
from codecheck.shared.domain.records.models import (
    DecryptionPhase,
    DecryptionSession,
    SessionState,
    UploadDraft,
)


class ApplicationState(BaseModel):
    model_config = ConfigDict(frozen=True)

    session: SessionState = Field(default_factory=SessionState)
    uploading: bool = False
    decrypting: FrozenSet[str] = frozenset()
    decryptions: Dict[str, DecryptionSession] = Field(default_factory=dict)
    draft: Optional[UploadDraft] = None
    search_term: str = ""
    page: int = 1
    last_error: Optional[str] = None


# --- Actions ---

@dataclass(frozen=True)
class Action:
    @property
    def name(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class Connected(Action):
    account: Optional[str] = None


@dataclass(frozen=True)
class Disconnected(Action):
    pass


@dataclass(frozen=True)
class InitializationStarted(Action):
    pass


@dataclass(frozen=True)
class InitializationSucceeded(Action):
    pass


@dataclass(frozen=True)
class InitializationFailed(Action):
    error: str = ""


@dataclass(frozen=True)
class DraftChanged(Action):
    draft: Optional[UploadDraft] = None


@dataclass(frozen=True)
class UploadStarted(Action):
    pass


@dataclass(frozen=True)
class UploadSucceeded(Action):
    record_id: str = ""


@dataclass(frozen=True)
class UploadFailed(Action):
    error: str = ""


@dataclass(frozen=True)
class DecryptionStarted(Action):
    record_id: str = ""


@dataclass(frozen=True)
class DecryptionPhaseChanged(Action):
    record_id: str = ""
    phase: DecryptionPhase = DecryptionPhase.NONE


@dataclass(frozen=True)
class DecryptionFinished(Action):
    record_id: str = ""
    error: Optional[str] = None


@dataclass(frozen=True)
class SearchChanged(Action):
    term: str = ""


@dataclass(frozen=True)
class PageChanged(Action):
    page: int = 1
    total_pages: int = 1


# --- Reducers ---

Reducer = Callable[[ApplicationState, Any], ApplicationState]
_REDUCERS: Dict[Type[Action], Reducer] = {}


def _reduces(action_type: Type[Action]) -> Callable[[Reducer], Reducer]:
    def register(fn: Reducer) -> Reducer:
        _REDUCERS[action_type] = fn
        return fn
    return register


def reduce(state: ApplicationState, action: Action) -> ApplicationState:
    """Apply ``action`` to ``state`` and return the new state.

    Raises:
        OperationInProgress: When a single-flight rule rejects the action
        SessionNotReady: When the session cannot take the transition
    """
    try:
        reducer = _REDUCERS[type(action)]
    except KeyError:
        raise TypeError(f"Unknown action: {action!r}") from None
    return reducer(state, action)


@_reduces(Connected)
def _connected(state: ApplicationState, action: Connected) -> ApplicationState:
    previous = state.session
    session = previous.model_copy(update={"connected": True, "account": action.account})
    update: Dict[str, Any] = {"session": session}
    if previous.connected and previous.account != action.account:
        # Operations of the previous account are cancelled, not awaited
        update.update(uploading=False, decrypting=frozenset(), decryptions={})
    return state.model_copy(update=update)


@_reduces(Disconnected)
def _disconnected(state: ApplicationState, action: Disconnected) -> ApplicationState:
    # In-flight operations of the old session are cancelled, not awaited
    return state.model_copy(update={
        "session": SessionState(),
        "uploading": False,
        "decrypting": frozenset(),
        "decryptions": {},
    })


@_reduces(InitializationStarted)
def _initialization_started(state: ApplicationState, action: InitializationStarted) -> ApplicationState:
    session = state.session
    if not session.connected:
        raise SessionNotReady("Cannot initialize crypto while disconnected")
    if session.initializing or session.crypto_ready:
        raise OperationInProgress("Crypto service already initializing or ready")
    return state.model_copy(update={"session": session.model_copy(update={"initializing": True})})


@_reduces(InitializationSucceeded)
def _initialization_succeeded(state: ApplicationState, action: InitializationSucceeded) -> ApplicationState:
    session = state.session.model_copy(update={"initializing": False, "crypto_ready": True})
    return state.model_copy(update={"session": session, "last_error": None})


@_reduces(InitializationFailed)
def _initialization_failed(state: ApplicationState, action: InitializationFailed) -> ApplicationState:
    session = state.session.model_copy(update={"initializing": False, "crypto_ready": False})
    return state.model_copy(update={"session": session, "last_error": action.error})


@_reduces(DraftChanged)
def _draft_changed(state: ApplicationState, action: DraftChanged) -> ApplicationState:
    return state.model_copy(update={"draft": action.draft})


@_reduces(UploadStarted)
def _upload_started(state: ApplicationState, action: UploadStarted) -> ApplicationState:
    if state.uploading:
        raise OperationInProgress("An upload is already in flight")
    return state.model_copy(update={"uploading": True})


@_reduces(UploadSucceeded)
def _upload_succeeded(state: ApplicationState, action: UploadSucceeded) -> ApplicationState:
    return state.model_copy(update={"uploading": False, "draft": None, "last_error": None})


@_reduces(UploadFailed)
def _upload_failed(state: ApplicationState, action: UploadFailed) -> ApplicationState:
    # Draft is kept so the caller can retry
    return state.model_copy(update={"uploading": False, "last_error": action.error})


@_reduces(DecryptionStarted)
def _decryption_started(state: ApplicationState, action: DecryptionStarted) -> ApplicationState:
    if action.record_id in state.decrypting:
        raise OperationInProgress(f"Decryption of {action.record_id} already in flight")
    decryptions = dict(state.decryptions)
    decryptions[action.record_id] = DecryptionSession(record_id=action.record_id)
    return state.model_copy(update={
        "decrypting": state.decrypting | {action.record_id},
        "decryptions": decryptions,
    })


@_reduces(DecryptionPhaseChanged)
def _decryption_phase_changed(state: ApplicationState, action: DecryptionPhaseChanged) -> ApplicationState:
    if action.record_id not in state.decrypting:
        return state
    decryptions = dict(state.decryptions)
    decryptions[action.record_id] = DecryptionSession(record_id=action.record_id, phase=action.phase)
    return state.model_copy(update={"decryptions": decryptions})


@_reduces(DecryptionFinished)
def _decryption_finished(state: ApplicationState, action: DecryptionFinished) -> ApplicationState:
    # Finished sessions are discarded; a new decrypt call starts fresh
    decryptions = dict(state.decryptions)
    decryptions.pop(action.record_id, None)
    update: Dict[str, Any] = {
        "decrypting": state.decrypting - {action.record_id},
        "decryptions": decryptions,
    }
    if action.error is not None:
        update["last_error"] = action.error
    return state.model_copy(update=update)


@_reduces(SearchChanged)
def _search_changed(state: ApplicationState, action: SearchChanged) -> ApplicationState:
    return state.model_copy(update={"search_term": action.term, "page": 1})


@_reduces(PageChanged)
def _page_changed(state: ApplicationState, action: PageChanged) -> ApplicationState:
    page = min(max(1, action.page), max(1, action.total_pages))
    return state.model_copy(update={"page": page})
