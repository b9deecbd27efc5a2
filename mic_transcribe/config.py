"""
Recognition Configuration

Single source of truth for the streaming recognition settings.
Values come from environment variables and can be overridden from the CLI.
"""

import logging
import os
from typing import Any

from .audio.utils import CHUNK_DURATION_MS, TARGET_SAMPLE_RATE

logger = logging.getLogger(__name__)


def parse_bool(value: str | None, default: bool) -> bool:
    """Interpret an environment flag such as "1", "true", "no"."""
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def parse_int(value: str | None, default: int, name: str = "value") -> int:
    """Interpret a positive integer setting; bad values log a warning and use the default."""
    if value is None or not value.strip():
        return default
    try:
        number = int(value)
    except ValueError:
        logger.warning(f"Invalid {name}={value!r}, using {default}")
        return default
    if number < 1:
        logger.warning(f"{name} must be positive, got {number}; using {default}")
        return default
    return number


# ============== Environment ==============
STT_LANGUAGE = os.getenv("STT_LANGUAGE", "en-US")
STT_MODEL = os.getenv("STT_MODEL") or None  # e.g. "latest_long"; service default if unset
STT_INTERIM_RESULTS = parse_bool(os.getenv("STT_INTERIM_RESULTS"), True)
STT_PUNCTUATION = parse_bool(os.getenv("STT_PUNCTUATION"), True)
STT_MAX_QUEUE = parse_int(os.getenv("STT_MAX_QUEUE"), 100, "STT_MAX_QUEUE")

RECOGNITION_DEFAULTS: dict[str, Any] = {
    "language": STT_LANGUAGE,
    "model": STT_MODEL,
    "sample_rate": TARGET_SAMPLE_RATE,
    "chunk_ms": CHUNK_DURATION_MS,
    "interim_results": STT_INTERIM_RESULTS,
    "enable_punctuation": STT_PUNCTUATION,
    "max_queue": STT_MAX_QUEUE,
}

LANGUAGE_NAMES = {
    "en-US": "English (US)",
    "en-GB": "English (UK)",
    "de-DE": "German",
    "fr-FR": "French",
    "es-ES": "Spanish",
    "ja-JP": "Japanese",
    "yue-Hant-HK": "Cantonese (粵語)",
}


def get_recognition_config(**overrides: Any) -> dict[str, Any]:
    """
    Get recognition settings with overrides applied.

    Args:
        **overrides: Setting values to replace. None values keep the default.

    Returns:
        Settings dictionary.

    Raises:
        KeyError: If an override names an unknown setting.
    """
    cfg = dict(RECOGNITION_DEFAULTS)
    for key, value in overrides.items():
        if key not in cfg:
            raise KeyError(f"Unknown setting: {key}. Available: {list(cfg.keys())}")
        if value is not None:
            cfg[key] = value
    return cfg


def get_display_info(cfg: dict[str, Any]) -> str:
    """
    Get human-readable display string for recognition settings.

    Returns:
        Formatted string like "English (US) | default model | 100ms chunks"
    """
    language = LANGUAGE_NAMES.get(cfg["language"], cfg["language"])
    model = cfg["model"] or "default model"
    return f"{language} | {model} | {cfg['chunk_ms']}ms chunks"
