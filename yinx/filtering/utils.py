"""Scoring helpers used by the filtering tiers."""

from __future__ import annotations

import math
from collections import Counter
from typing import Sequence


def shannon_entropy(s: str) -> float:
    """Shannon entropy of a string, in bits.

    Character frequencies are taken over the string's UTF-8 byte length,
    so for plain ASCII this is the usual per-character entropy.
    """
    if not s:
        return 0.0
    length = len(s.encode("utf-8"))
    return -sum((count / length) * math.log2(count / length)
                for count in Counter(s).values())


def change_score(line: str, prev: str) -> float:
    """How different two lines are: 0.0 identical, 1.0 no shared characters."""
    if line == prev:
        return 0.0
    chars1 = set(line)
    chars2 = set(prev)
    union = len(chars1 | chars2)
    if union == 0:
        return 1.0
    return 1.0 - len(chars1 & chars2) / union


def percentile(scores: Sequence[float], p: float) -> float:
    """Value at fraction p (0.0 = minimum, 1.0 = maximum) of the sorted scores."""
    if not scores:
        return 0.0
    ordered = sorted(scores)
    index = min(max(int(len(ordered) * p), 0), len(ordered) - 1)
    return ordered[index]