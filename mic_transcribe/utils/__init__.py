"""Shared utilities for mic-transcribe."""

from .logging import set_log_level, setup_logging

__all__ = ["set_log_level", "setup_logging"]
