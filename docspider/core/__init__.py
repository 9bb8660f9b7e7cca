"""Core configuration, logging and sizing helpers."""
