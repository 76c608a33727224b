"""Configuration loading and management for dictation-cleanup.

Settings live in ``config.json`` inside the data directory, which defaults
to ``~/.dictation-cleanup`` and can be moved with ``DICTATION_CLEANUP_HOME``.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from dictation_cleanup.errors import ConfigurationError
from dictation_cleanup.storage import SETTINGS_FILENAME, atomic_write_json

HOME_ENV_VAR = "DICTATION_CLEANUP_HOME"
CONFIG_FILENAME = "config.json"


class CleanupSettings(BaseModel):
    """Settings for the transcript cleanup pipeline."""

    # Words on each side of a rule match inspected for context
    context_window: int = Field(default=8, ge=0)
    builtin_rules_enabled: bool = True
    dictionary_enabled: bool = True
    # Skip user entries for very common words ("gonna", "done")
    guard_common_words: bool = True
    sentence_case: bool = True
    convert_numbers: bool = True
    # Key under which training samples are kept in settings.json
    dictionary_key: str = Field(default="training_samples", min_length=1)
    # Leading name that routes an utterance to the assistant chat
    wake_name: str = Field(default="midori", min_length=1)


def get_data_dir() -> Path:
    """Get the directory holding config and trained data.

    Returns ``$DICTATION_CLEANUP_HOME`` if set, else ``~/.dictation-cleanup``.
    """
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".dictation-cleanup"


def get_config_path(data_dir: Path | None = None) -> Path:
    """Get the path to config.json."""
    return (data_dir or get_data_dir()) / CONFIG_FILENAME


def get_settings_store_path(data_dir: Path | None = None) -> Path:
    """Get the path to the key-value settings store."""
    return (data_dir or get_data_dir()) / SETTINGS_FILENAME


def load_settings(path: Path | None = None) -> CleanupSettings:
    """Load settings from a JSON file.

    Args:
        path: Config file path (defaults to the data dir's config.json)

    Returns:
        CleanupSettings; defaults when the file does not exist

    Raises:
        ConfigurationError: If the file is invalid JSON or has bad values
    """
    config_path = path or get_config_path()
    if not config_path.exists():
        return CleanupSettings()

    try:
        with open(config_path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            f"Cannot read config file: {e}", context={"path": str(config_path)}
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            "Config file must contain a JSON object", context={"path": str(config_path)}
        )

    try:
        return CleanupSettings(**data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid settings: {e.error_count()} error(s)",
            context={"path": str(config_path), "errors": e.errors(include_url=False)},
        ) from e


def save_settings(settings: CleanupSettings, path: Path | None = None) -> Path:
    """Save settings to JSON file with atomic write.

    Args:
        settings: Settings to save
        path: Config file path (defaults to the data dir's config.json)

    Returns:
        Path to the saved config file
    """
    config_path = path or get_config_path()
    atomic_write_json(config_path, settings.model_dump())
    return config_path
