"""Service registry for cross-module access to the running client."""

from __future__ import annotations

import asyncio
import atexit
import logging
from typing import Optional, TYPE_CHECKING, List, Callable, Awaitable, Union

if TYPE_CHECKING:
    from codecheck.client.client import CodeCheckClient

logger = logging.getLogger(__name__)

CleanupHandler = Callable[[], Union[None, Awaitable[None]]]

# Global reference to the active client
_client: Optional["CodeCheckClient"] = None

# Global cleanup management
_cleanup_registered = False
_cleanup_handlers: List[CleanupHandler] = []


def set_client(client: Optional["CodeCheckClient"]) -> None:
    """Set the global client instance."""
    global _client
    _client = client


def get_client() -> Optional["CodeCheckClient"]:
    """Get the global client instance."""
    return _client


def register_cleanup_handler(handler: CleanupHandler) -> None:
    """Register a cleanup handler to be called on application exit.

    Handlers may be plain callables or coroutine functions; coroutine
    handlers are driven on a fresh event loop at exit.
    """
    global _cleanup_registered
    if handler in _cleanup_handlers:
        return
    _cleanup_handlers.append(handler)
    if not _cleanup_registered:
        atexit.register(_cleanup_all)
        _cleanup_registered = True
        logger.debug("Registered atexit cleanup handler")


def unregister_cleanup_handler(handler: CleanupHandler) -> None:
    """Drop a handler that has already run."""
    if handler in _cleanup_handlers:
        _cleanup_handlers.remove(handler)


def _cleanup_all() -> None:
    """Run all registered handlers."""
    logger.info("Running application cleanup...")
    for handler in list(_cleanup_handlers):
        try:
            result = handler()
            if asyncio.iscoroutine(result):
                asyncio.run(result)
        except Exception as e:
            logger.warning(f"Error in cleanup handler: {e}")
    _cleanup_handlers.clear()
    logger.info("Application cleanup completed")
