"""The three-tier filtering pipeline with per-session deduplication."""

from __future__ import annotations

import threading
import time

from yinx.filtering.tier1 import Tier1Filter
from yinx.filtering.tier2 import Tier2Filter
from yinx.filtering.tier3 import Tier3Filter
from yinx.filtering.types import Cluster, FilterStats
from yinx.patterns import PatternRegistry


def _split_lines(text: str) -> list[str]:
    """Split on newlines, dropping a trailing empty line and any carriage returns."""
    if not text:
        return []
    parts = text.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [p[:-1] if p.endswith("\r") else p for p in parts]


class FilterPipeline:
    """Runs capture output through deduplication, scoring and clustering.

    Deduplication state is kept per session; scoring and clustering are
    stateless.
    """

    def __init__(self, patterns: PatternRegistry) -> None:
        self.patterns = patterns
        self._lock = threading.Lock()
        self._tier1_filters: dict[str, tuple[threading.Lock, Tier1Filter]] = {}

    def _tier1_for(self, session_id: str) -> tuple[threading.Lock, Tier1Filter]:
        with self._lock:
            entry = self._tier1_filters.get(session_id)
            if entry is None:
                entry = (
                    threading.Lock(),
                    Tier1Filter(self.patterns, self.patterns.tier1_config.max_occurrences),
                )
                self._tier1_filters[session_id] = entry
            return entry

    def process_capture(self, session_id: str,
                        output: str) -> tuple[list[Cluster], FilterStats]:
        """Filter one capture's output and return the clusters and statistics."""
        start = time.perf_counter()
        lines = _split_lines(output)

        lock, tier1 = self._tier1_for(session_id)
        with lock:
            tier1_output = tier1.filter_lines(lines)

        tier2_output = Tier2Filter(self.patterns).filter_lines(tier1_output)
        clusters = Tier3Filter(self.patterns).cluster_lines(s.line for s in tier2_output)

        stats = FilterStats(
            input_lines=len(lines),
            tier1_output=len(tier1_output),
            tier2_output=len(tier2_output),
            tier3_clusters=len(clusters),
            processing_time_ms=int((time.perf_counter() - start) * 1000),
        )
        return clusters, stats

    def clear_session(self, session_id: str) -> None:
        """Drop the deduplication state of a session."""
        with self._lock:
            self._tier1_filters.pop(session_id, None)

    def active_sessions(self) -> int:
        """Number of sessions with deduplication state."""
        with self._lock:
            return len(self._tier1_filters)