"""Configuration file management for budgetlens."""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomli_w

DEFAULT_MODEL = "openai/gpt-4o-mini"
DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"


@dataclass(frozen=True)
class AdvisorSettings:
    """Settings for the optional AI advisor."""

    api_key: str | None
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    chat_max_requests: int = 5
    chat_window_seconds: float = 60.0


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "budgetlens" / "config.toml"


def default_config() -> dict[str, Any]:
    return {
        "advisor": {
            "model": DEFAULT_MODEL,
            "base_url": DEFAULT_BASE_URL,
            "timeout": 30.0,
        },
        "chat": {
            "max_requests": 5,
            "window_seconds": 60.0,
        },
    }


def create_default_config(config_path: Path | None = None) -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "wb") as f:
        tomli_w.dump(default_config(), f)

    os.chmod(config_path, 0o600)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "rb") as f:
        return tomllib.load(f)


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to TOML file.

    Args:
        config: Configuration dictionary.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)


def get_api_key() -> str | None:
    """Get the advisor API key from the environment.

    Returns:
        Key string, or None if unset or blank.
    """
    key = os.environ.get("OPENROUTER_API_KEY", "").strip()
    return key or None


def load_advisor_settings(config_path: Path | None = None) -> AdvisorSettings:
    """Resolve advisor settings from config file and environment.

    A missing config file falls back to defaults. ``BUDGETLENS_AI_MODEL``
    overrides the configured model.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        AdvisorSettings.
    """
    try:
        config = load_config(config_path)
    except FileNotFoundError:
        config = default_config()

    advisor = config.get("advisor", {})
    chat = config.get("chat", {})

    model = os.environ.get("BUDGETLENS_AI_MODEL") or advisor.get("model", DEFAULT_MODEL)

    return AdvisorSettings(
        api_key=get_api_key(),
        model=model,
        base_url=advisor.get("base_url", DEFAULT_BASE_URL),
        timeout=float(advisor.get("timeout", 30.0)),
        chat_max_requests=int(chat.get("max_requests", 5)),
        chat_window_seconds=float(chat.get("window_seconds", 60.0)),
    )
