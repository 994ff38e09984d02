"""Configuration management for Mutation Guard.

Loads environment variables and provides centralized config access.
"""
import os
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv

__version__ = "1.0.0"

OUTPUT_FORMATS = ('table', 'json')
_FALSY = {'0', 'false', 'no', 'off'}


class Config:
    """Configuration loader with environment variable support."""

    def __init__(self, env_path: Optional[Path] = None):
        """Initialize config by loading a .env file.

        Args:
            env_path: .env file to load; defaults to ./.env
        """
        load_dotenv(env_path or Path.cwd() / ".env")

    @property
    def exclude_dirs(self) -> List[str]:
        """Extra directory names to skip, from MUTATION_GUARD_EXCLUDE.

        Returns:
            List of directory names (comma separated in the variable)
        """
        raw = os.getenv("MUTATION_GUARD_EXCLUDE", "")
        return [name.strip() for name in raw.split(",") if name.strip()]

    @property
    def cache_enabled(self) -> bool:
        """Whether the lint cache is used (MUTATION_GUARD_CACHE, default on)."""
        return os.getenv("MUTATION_GUARD_CACHE", "1").strip().lower() not in _FALSY

    @property
    def cache_dir(self) -> str:
        """Get cache directory name.

        Returns:
            Name of the cache directory created in the project root
        """
        return os.getenv("MUTATION_GUARD_CACHE_DIR", ".mutation_guard_cache")

    @property
    def output_format(self) -> str:
        """Get default output format.

        Returns:
            'table' or 'json'

        Raises:
            ValueError: If MUTATION_GUARD_FORMAT holds anything else
        """
        value = os.getenv("MUTATION_GUARD_FORMAT", "table").strip().lower()
        if value not in OUTPUT_FORMATS:
            raise ValueError(
                f"Invalid MUTATION_GUARD_FORMAT '{value}'. "
                f"Use one of: {', '.join(OUTPUT_FORMATS)}."
            )
        return value


# Singleton instance
_config = None


def get_config() -> Config:
    """Get or create singleton Config instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Forget the singleton so the next get_config() reloads."""
    global _config
    _config = None
