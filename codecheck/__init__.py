"""CodeCheck client package."""

from .shared.core.event_bus import EventBus
from .client.client import CodeCheckClient
from .client.state import AppState, Store

__all__ = ["CodeCheckClient", "AppState", "Store", "EventBus"]
