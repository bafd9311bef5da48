"""Logging setup."""

from rbxprofile.logging.setup import bind_lookup, configure_logging, get_logger

__all__ = ["bind_lookup", "configure_logging", "get_logger"]
