"""Shared value types for the filtering pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FilterDecision(Enum):
    """Outcome of the deduplication filter for one line."""

    KEEP = "keep"
    DISCARD = "discard"


@dataclass(frozen=True)
class ScoreComponents:
    """Weighted parts that make up a line's importance score."""

    entropy: float
    uniqueness: float
    technical: float
    change: float

    def total(self) -> float:
        """Sum of all components."""
        return self.entropy + self.uniqueness + self.technical + self.change


@dataclass(frozen=True)
class ScoredLine:
    """A line together with its score and the parts of that score."""

    line: str
    score: float
    components: ScoreComponents


@dataclass
class Cluster:
    """A group of similar lines and the line chosen to stand for them."""

    pattern: str
    representative: str
    members: list[str]
    size: int
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class FilterStats:
    """Line counts after each tier and the time the run took."""

    input_lines: int = 0
    tier1_output: int = 0
    tier2_output: int = 0
    tier3_clusters: int = 0
    processing_time_ms: int = 0