"""Tier 2: statistical importance scoring of lines."""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from yinx.filtering.types import ScoreComponents, ScoredLine
from yinx.filtering.utils import change_score, percentile, shannon_entropy
from yinx.patterns import PatternRegistry


class Tier2Filter:
    """Scores lines and keeps those at or above a percentile threshold."""

    def __init__(self, patterns: PatternRegistry) -> None:
        self.patterns = patterns

    def filter_lines(self, lines: Iterable[str]) -> list[ScoredLine]:
        """Score every line and return those that reach the threshold, in order."""
        lines = list(lines)
        if not lines:
            return []

        config = self.patterns.tier2_config
        frequencies = Counter(lines)
        total = len(lines)

        scored: list[ScoredLine] = []
        prev: str | None = None
        for line in lines:
            if prev is None:
                change = config.change_weight
            else:
                change = change_score(line, prev) * config.change_weight
            components = ScoreComponents(
                entropy=shannon_entropy(line) * config.entropy_weight,
                uniqueness=(1.0 - frequencies[line] / total) * config.uniqueness_weight,
                technical=self.patterns.calculate_technical_score(
                    line, config.max_technical_score) * config.technical_weight,
                change=change,
            )
            scored.append(ScoredLine(line=line, score=components.total(),
                                     components=components))
            prev = line

        threshold = percentile([s.score for s in scored], config.score_threshold_percentile)
        return [s for s in scored if s.score >= threshold]