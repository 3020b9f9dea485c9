import pytest
import pytest_asyncio

from codecheck.client.client import CodeCheckClient
from codecheck.client.state.app_state import AppState
from codecheck.shared.core.configuration import StatusConfig, SystemConfig
from codecheck.shared.core.event_bus import EventBus
from codecheck.shared.domain.analysis.engine import FixedSimilarityEngine
from codecheck.shared.domain.status.notifier import StatusNotifier

from tests.fakes import FakeCryptoService, FakeLedger

ACCOUNT = "0xA11CE"


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def crypto():
    return FakeCryptoService()


@pytest.fixture
def fast_status():
    return StatusConfig(
        success_dismiss_seconds=0.05,
        error_dismiss_seconds=0.05,
        pending_dismiss_seconds=0.05,
    )


@pytest.fixture
def config(fast_status):
    return SystemConfig(status=fast_status)


@pytest.fixture
def app_state(event_bus):
    return AppState(event_bus)


@pytest.fixture
def notifier(event_bus, fast_status):
    return StatusNotifier(event_bus, fast_status)


@pytest.fixture
def client(ledger, crypto, config, event_bus):
    return CodeCheckClient.create(
        ledger,
        crypto,
        config=config,
        event_bus=event_bus,
        analysis=FixedSimilarityEngine(55),
    )


@pytest_asyncio.fixture
async def ready_client(client):
    await client.connect(ACCOUNT)
    assert client.session.state.ready
    yield client
    await client.notifier.dismiss()
    await client.app_state.bus.wait_until_idle()
