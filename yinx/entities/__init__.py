"""Host/service correlation graph and metadata for extracted entities."""

__all__ = ["graph", "metadata"]