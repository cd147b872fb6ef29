"""League configuration management."""

import os
from functools import lru_cache
from pathlib import Path

from .schemas import LeagueConfig, ScoringRules
from .utils import load_json

CONFIG_ENV_VAR = 'FANTASY_POINTS_CONFIG'
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / 'data' / 'league_config.json'


def get_config_path() -> Path:
    """Config file location: $FANTASY_POINTS_CONFIG, else data/league_config.json."""
    override = os.environ.get(CONFIG_ENV_VAR)
    return Path(override) if override else DEFAULT_CONFIG_PATH


@lru_cache(maxsize=1)
def get_config() -> LeagueConfig:
    """
    Load league configuration.

    Configuration is cached after first load; the scoring rules it carries are
    frozen and shared by every scoring run in the process.

    Returns:
        LeagueConfig object with validated settings

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the config file has invalid structure

    Example:
        from fantasy_points.config import get_config
        config = get_config()
        print(f"Season: {config.season}")
    """
    return load_json(get_config_path(), schema=LeagueConfig)


def get_season() -> int:
    """Get the current season from config."""
    return get_config().season


def get_scoring_rules() -> ScoringRules:
    """Get the canonical scoring table from config."""
    return get_config().rules


def get_bonus_tie_break() -> str:
    """Get the bonus tie-break policy from config."""
    return get_config().bonus_tie_break


def get_squad_size() -> int:
    """Get the number of players in a fantasy squad."""
    return get_config().squad_size


def get_max_substitutes() -> int:
    """Get the maximum number of substitutes per squad."""
    return get_config().max_substitutes


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file (or $FANTASY_POINTS_CONFIG) changes at
    runtime and needs reloading.
    """
    get_config.cache_clear()
