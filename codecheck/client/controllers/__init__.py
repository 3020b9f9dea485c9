"""Coordinators that drive the application state."""

from .session_manager import SessionManager
from .submission_coordinator import SubmissionCoordinator
from .decryption_verifier import DecryptionVerifier

__all__ = ["SessionManager", "SubmissionCoordinator", "DecryptionVerifier"]
