"""Global State Store - Service Locator Pattern.

Provides centralized access to the application state from any component.
"""

from __future__ import annotations

from typing import Optional

from codecheck.client.state.app_state import AppState
from codecheck.shared.core.event_bus import EventBus


class Store:
    """Global state store for the client process.

    Usage:
        # During bootstrap
        Store.initialize(event_bus)

        # Anywhere else
        store = Store.get()
        store.app.value.session.ready
    """

    _instance: Optional['Store'] = None

    def __init__(self, event_bus: EventBus) -> None:
        """Note: Do not call directly. Use Store.initialize() instead."""
        self.bus = event_bus
        self.app = AppState(event_bus)

    @classmethod
    def initialize(cls, event_bus: EventBus) -> 'Store':
        """Initialize the global store instance.

        Raises:
            RuntimeError: If store is already initialized
        """
        if cls._instance is not None:
            raise RuntimeError("Store already initialized!")

        cls._instance = cls(event_bus)
        return cls._instance

    @classmethod
    def get(cls) -> 'Store':
        """Get the global store instance.

        Raises:
            RuntimeError: If store has not been initialized
        """
        if cls._instance is None:
            raise RuntimeError("Store not initialized! Call Store.initialize() first.")
        return cls._instance

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._instance is not None

    @classmethod
    def reset(cls) -> None:
        """Reset the store instance. Primarily used for testing."""
        cls._instance = None
