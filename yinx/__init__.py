"""Pattern-driven filtering, entity extraction and correlation of captured terminal output."""

__version__ = "0.1.0"
__all__ = ["entities", "errors", "filtering", "patterns"]