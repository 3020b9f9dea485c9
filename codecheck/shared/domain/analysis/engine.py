"""Similarity analysis seam.

The figure that gets encrypted and submitted comes from an analysis engine.
The only engine shipped here is a placeholder that draws a pseudo-random
percentage; a real homomorphic similarity computation plugs in behind the
same ``estimate`` call.
"""

from __future__ import annotations

import logging
import random
from typing import Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class AnalysisEngine(Protocol):
    async def estimate(self, source_text: str) -> int:
        """Return a similarity percentage in ``[0, 100)``."""
        ...


class PlaceholderSimilarityEngine:
    """Random stand-in for the similarity computation."""

    def __init__(self, seed: Optional[int] = None, upper: int = 100):
        self._rng = random.Random(seed)
        self.upper = upper

    async def estimate(self, source_text: str) -> int:
        value = self._rng.randrange(self.upper)
        logger.debug(f"Placeholder estimate {value} for {len(source_text)} chars")
        return value


class FixedSimilarityEngine:
    """Engine that always returns the same figure."""

    def __init__(self, value: int):
        self.value = value

    async def estimate(self, source_text: str) -> int:
        return self.value
