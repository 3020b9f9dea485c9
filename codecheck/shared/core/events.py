"""Canonical event definitions for the CodeCheck client."""

from __future__ import annotations

import time
from typing import Any, Dict, Literal

from .event_bus import EventPayload

# Status channel
TOPIC_STATUS_CHANGED = "status.changed"

# Session lifecycle
TOPIC_SESSION_CHANGED = "session.changed"

# Application state (reducer output)
TOPIC_STATE_CHANGED = "state.changed"

# Record lifecycle
TOPIC_RECORDS_LOADED = "records.loaded"
TOPIC_RECORD_SUBMITTED = "record.submitted"
TOPIC_RECORD_VERIFIED = "record.verified"

# Decryption phases
TOPIC_DECRYPTION_PHASE = "decryption.phase"

# Activity log
TOPIC_LOGS_EVENT = "logs.event"


def create_status_changed_event(
    visible: bool,
    kind: Literal["pending", "success", "error"],
    message: str,
) -> EventPayload:
    """Create a status changed event."""
    return {
        "visible": visible,
        "kind": kind,
        "message": message,
        "ts": time.time(),
    }


def create_session_changed_event(phase: str, account: str | None) -> EventPayload:
    """Create a session changed event."""
    return {
        "phase": phase,
        "account": account,
    }


def create_state_changed_event(action: str, state: Dict[str, Any]) -> EventPayload:
    """Create a state changed event.

    Args:
        action: Name of the transition that produced the new state
        state: Serialized snapshot of the application state
    """
    return {
        "action": action,
        "state": state,
    }


def create_records_loaded_event(count: int, skipped: int = 0) -> EventPayload:
    """Create a records loaded event."""
    return {
        "count": count,
        "skipped": skipped,
    }


def create_record_submitted_event(record_id: str, tx_hash: str | None) -> EventPayload:
    """Create a record submitted event."""
    return {
        "record_id": record_id,
        "tx_hash": tx_hash,
    }


def create_record_verified_event(record_id: str, clear_value: int) -> EventPayload:
    """Create a record verified event."""
    return {
        "record_id": record_id,
        "clear_value": clear_value,
    }


def create_decryption_phase_event(record_id: str, phase: str) -> EventPayload:
    """Create a decryption phase event."""
    return {
        "record_id": record_id,
        "phase": phase,
    }


def create_log_event(message: str, level: str = "info") -> EventPayload:
    """Create an activity log event."""
    return {
        "message": message,
        "level": level,
        "ts": time.time(),
    }
