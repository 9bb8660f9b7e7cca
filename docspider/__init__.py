"""Documentation site spider that builds chunked, AI-consumable knowledge bases."""

__version__ = "0.1.0"
