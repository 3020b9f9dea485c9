"""
CodeCheck Shared Kernel
=======================

Architecture:
- core: EventBus, errors, cancellation, configuration
- infrastructure: Technical adapters (ledger contract, crypto service)
- domain: Records, status channel, encryption gateway, analysis seam
"""

__version__ = "0.1.0"

__all__ = []
