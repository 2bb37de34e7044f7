"""Three-tier filtering of captured output: deduplication, scoring and clustering."""

__all__ = ["pipeline", "tier1", "tier2", "tier3", "types", "utils"]