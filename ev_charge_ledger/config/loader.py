"""
Configuration management and loading.

Handles application settings read from a YAML file.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Tuple

import yaml

from ev_charge_ledger.core.overview import FEATURED_FEED_LIMIT
from ev_charge_ledger.core.share import DEFAULT_SITE_URL, DEFAULT_SLOGANS
from ev_charge_ledger.storage.db import DEFAULT_DB_PATH

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DisplayConfig:
    """How money is shown to the owner."""
    currency: str = "$"

    def __post_init__(self):
        if not self.currency:
            raise ValueError("currency cannot be empty")


@dataclass(frozen=True)
class ShareConfig:
    """Share text settings."""
    site_url: str = DEFAULT_SITE_URL
    slogans: Tuple[str, ...] = DEFAULT_SLOGANS

    def __post_init__(self):
        """Validate a link and at least one slogan are present."""
        if not self.site_url:
            raise ValueError("site_url cannot be empty")
        if not self.slogans:
            raise ValueError("slogans cannot be empty")


@dataclass(frozen=True)
class AppConfig:
    """Complete application configuration."""
    database_path: str = DEFAULT_DB_PATH
    display: DisplayConfig = field(default_factory=DisplayConfig)
    share: ShareConfig = field(default_factory=ShareConfig)
    feed_limit: int = FEATURED_FEED_LIMIT

    def __post_init__(self):
        if self.feed_limit <= 0:
            raise ValueError("feed limit must be > 0")


def load_app_config(path: str) -> AppConfig:
    """Load and validate application configuration from a YAML file.

    Every section is optional; missing sections keep their defaults.
    Unknown keys are rejected so typos never go unnoticed.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated AppConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")

    allowed_top_keys = {'database', 'display', 'share', 'feed'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    database_data = _section(raw_config, 'database', {'path'})
    database_path = database_data.get('path', DEFAULT_DB_PATH)
    if not isinstance(database_path, str) or not database_path:
        raise ValueError("'database.path' must be a non-empty string")

    display_data = _section(raw_config, 'display', {'currency'})
    currency = display_data.get('currency', "$")
    if not isinstance(currency, str):
        raise ValueError("'display.currency' must be a string")

    share = _parse_share_config(_section(raw_config, 'share', {'site_url', 'slogans'}))

    feed_data = _section(raw_config, 'feed', {'limit'})
    feed_limit = feed_data.get('limit', FEATURED_FEED_LIMIT)
    if not isinstance(feed_limit, int) or isinstance(feed_limit, bool) or feed_limit <= 0:
        raise ValueError("'feed.limit' must be a positive integer")

    _logger.debug("Loaded configuration from %s", config_path)
    return AppConfig(
        database_path=database_path,
        display=DisplayConfig(currency=currency),
        share=share,
        feed_limit=feed_limit
    )


def _section(raw_config: Dict, name: str, allowed_keys: set) -> Dict:
    """Extract an optional section and reject unknown keys in it."""
    data = raw_config.get(name) or {}
    if not isinstance(data, dict):
        raise ValueError(f"'{name}' must be a dictionary")
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown {name} keys: {unknown_keys}")
    return data


def _parse_share_config(data: Dict) -> ShareConfig:
    """Parse and validate the share section.

    Args:
        data: Share section data

    Returns:
        Validated ShareConfig

    Raises:
        ValueError: If configuration is invalid
    """
    site_url = data.get('site_url', DEFAULT_SITE_URL)
    if not isinstance(site_url, str) or not site_url:
        raise ValueError("'share.site_url' must be a non-empty string")

    if 'slogans' not in data:
        return ShareConfig(site_url=site_url)

    slogans = data['slogans']
    if not isinstance(slogans, list) or not slogans:
        raise ValueError("'share.slogans' must be a non-empty list")
    for slogan in slogans:
        if not isinstance(slogan, str) or not slogan.strip():
            raise ValueError("'share.slogans' entries must be non-empty strings")

    return ShareConfig(site_url=site_url, slogans=tuple(slogans))
