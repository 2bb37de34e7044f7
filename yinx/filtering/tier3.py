"""Tier 3: clustering of similar lines and choice of representatives."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Sequence

from yinx.errors import ConfigError
from yinx.filtering.types import Cluster
from yinx.filtering.utils import shannon_entropy
from yinx.patterns import PatternRegistry


class RepresentativeStrategy(Enum):
    """How the line that stands for a cluster is chosen."""

    FIRST = "first"
    LONGEST = "longest"
    HIGHEST_ENTROPY = "highest_entropy"

    @classmethod
    def parse(cls, s: str) -> RepresentativeStrategy:
        """Read a strategy name; unknown names fall back to highest entropy."""
        try:
            return cls(s.lower())
        except ValueError:
            return cls.HIGHEST_ENTROPY


def _last_max(members: Sequence[str], key) -> str:
    # Among equal maxima the last one wins.
    return max(reversed(members), key=key)


class Tier3Filter:
    """Groups lines by their normalised pattern and picks a representative."""

    def __init__(self, patterns: PatternRegistry) -> None:
        self.patterns = patterns

    def cluster_lines(self, lines: Iterable[str]) -> list[Cluster]:
        """Cluster the lines.

        Groups smaller than the configured minimum are returned as singletons,
        groups larger than the maximum are split into chunks.
        """
        config = self.patterns.tier3_config
        strategy = RepresentativeStrategy.parse(config.representative_strategy)
        min_size = config.cluster_min_size
        max_size = config.max_cluster_size

        groups: dict[str, list[str]] = {}
        for line in lines:
            groups.setdefault(self.patterns.normalize_tier3(line), []).append(line)

        result: list[Cluster] = []
        for pattern, members in groups.items():
            size = len(members)

            if size < min_size:
                result.extend(
                    Cluster(
                        pattern=pattern,
                        representative=member,
                        members=[member],
                        size=1,
                        metadata={"singleton": True},
                    )
                    for member in members
                )
                continue

            if size > max_size:
                if max_size <= 0:
                    raise ConfigError("max_cluster_size must be greater than zero")
                for start in range(0, size, max_size):
                    chunk = members[start:start + max_size]
                    result.append(Cluster(
                        pattern=pattern,
                        representative=self.select_representative(chunk, strategy),
                        members=chunk,
                        size=len(chunk),
                        metadata={"split": True},
                    ))
                continue

            result.append(Cluster(
                pattern=pattern,
                representative=self.select_representative(members, strategy),
                members=members,
                size=size,
                metadata={"count": size},
            ))

        return result

    def select_representative(self, members: Sequence[str],
                              strategy: RepresentativeStrategy) -> str:
        """Pick the member that stands for the whole cluster."""
        if not members:
            raise ValueError("cannot select a representative from no members")
        if strategy is RepresentativeStrategy.FIRST:
            return members[0]
        if strategy is RepresentativeStrategy.LONGEST:
            return _last_max(members, key=lambda s: len(s.encode("utf-8")))
        return _last_max(members, key=shannon_entropy)