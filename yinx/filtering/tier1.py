"""Tier 1: deduplication of lines by normalised pattern."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable

from yinx.filtering.types import FilterDecision
from yinx.patterns import PatternRegistry


@dataclass(frozen=True)
class Tier1Stats:
    """Current state of a tier 1 filter."""

    unique_patterns: int
    total_occurrences: int


class Tier1Filter:
    """Drops lines whose normalised form has been seen too often.

    State is kept across calls, so one filter serves a whole session.
    """

    def __init__(self, patterns: PatternRegistry, max_occurrences: int) -> None:
        self.patterns = patterns
        self.max_occurrences = max_occurrences
        self._pattern_counts: Counter[str] = Counter()

    def process_line(self, line: str) -> FilterDecision:
        """Count the line's pattern and decide whether to keep the line."""
        normalized = self.patterns.normalize_tier1(line)
        self._pattern_counts[normalized] += 1
        if self._pattern_counts[normalized] <= self.max_occurrences:
            return FilterDecision.KEEP
        return FilterDecision.DISCARD

    def filter_lines(self, lines: Iterable[str]) -> list[str]:
        """Return the lines that pass, in their original order."""
        return [line for line in lines if self.process_line(line) is FilterDecision.KEEP]

    def reset(self) -> None:
        """Forget every pattern seen so far."""
        self._pattern_counts.clear()

    def stats(self) -> Tier1Stats:
        """Number of distinct patterns and of lines counted."""
        return Tier1Stats(
            unique_patterns=len(self._pattern_counts),
            total_occurrences=sum(self._pattern_counts.values()),
        )