"""Corporate travel request approval service."""

__version__ = "1.0.0"
