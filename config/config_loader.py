"""
config_loader.py
-----------------
Singleton config loader. Reads config.yaml once and caches it.
Pipeline defaults, display settings and the input schema are read through
this module. Detector thresholds are deliberately not part of it.
"""

import os
import yaml
from typing import Any, Dict


_CONFIG_CACHE: Dict[str, Any] = {}


def load_config(config_path: str | None = None) -> Dict[str, Any]:
    """
    Load and cache the YAML configuration file.

    Args:
        config_path: Path to config.yaml. Defaults to config/ relative to this file.

    Returns:
        Full config dictionary.
    """
    global _CONFIG_CACHE

    if _CONFIG_CACHE:
        return _CONFIG_CACHE

    if config_path is None:
        config_path = os.path.join(os.path.dirname(__file__), "config.yaml")

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        _CONFIG_CACHE = yaml.safe_load(f)

    return _CONFIG_CACHE


def get_analysis_config() -> Dict[str, Any]:
    """Returns the analysis block (default timeframe, sort key, filter)."""
    return load_config()["analysis"]


def get_display_config() -> Dict[str, Any]:
    return load_config()["display"]


def get_currency_symbol() -> str:
    """Shortcut for the currency symbol used in generated text."""
    return get_display_config()["currency_symbol"]


def get_transaction_source_config() -> Dict[str, Any]:
    """Returns the transaction_source block (required columns, tag separator)."""
    return load_config()["transaction_source"]


def get_output_config() -> Dict[str, Any]:
    return load_config()["output"]


def reset_config() -> None:
    """Clears cached config. Useful for testing."""
    global _CONFIG_CACHE
    _CONFIG_CACHE = {}
