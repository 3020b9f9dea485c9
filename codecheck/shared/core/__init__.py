"""
Shared Core Module
==================

Event system, errors, cancellation, configuration and service registry.
"""

# Event System
from .event_bus import EventBus, EventPayload
from . import events

# Errors & cancellation
from .errors import (
    CodeCheckError,
    ConfigurationError,
    SessionNotReady,
    InitializationError,
    ValidationError,
    EncryptionError,
    TransactionError,
    TransactionDeclined,
    TransactionFailed,
    LoadError,
    DecryptionError,
    OperationInProgress,
    OperationCancelled,
    classify_transaction_error,
)
from .cancellation import CancellationToken

# Service Registry
from .service_registry import (
    get_client,
    set_client,
    register_cleanup_handler,
    unregister_cleanup_handler,
)

# Configuration
from .configuration import (
    ConfigManager,
    SystemConfig,
    get_config_manager,
    get_config,
    ValidationLevel,
)

__all__ = [
    # Event System
    "EventBus",
    "EventPayload",
    "events",
    # Errors
    "CodeCheckError",
    "ConfigurationError",
    "SessionNotReady",
    "InitializationError",
    "ValidationError",
    "EncryptionError",
    "TransactionError",
    "TransactionDeclined",
    "TransactionFailed",
    "LoadError",
    "DecryptionError",
    "OperationInProgress",
    "OperationCancelled",
    "classify_transaction_error",
    "CancellationToken",
    # Service Registry
    "get_client",
    "set_client",
    "register_cleanup_handler",
    "unregister_cleanup_handler",
    # Configuration
    "ConfigManager",
    "SystemConfig",
    "get_config_manager",
    "get_config",
    "ValidationLevel",
]
