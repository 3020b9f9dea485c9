"""Application state management for the CodeCheck client.

Architecture:
- ApplicationState: one immutable value holding every client-side flag
- reduce: named transitions over that value (single-flight rules included)
- AppState: controller that owns the value and broadcasts changes
- Store: service locator for accessing state from any component
"""

from .reducer import ApplicationState, reduce
from .app_state import AppState
from .store import Store

__all__ = ["ApplicationState", "reduce", "AppState", "Store"]
