"""
Configuration management for the file-type verifier.
Loads settings from environment variables with sensible defaults.
"""
import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv


DUPLICATE_POLICIES = ('last-write-wins', 'reject')
TYPE_MATCH_POLICIES = ('substring', 'exact', 'token')

# Catalog shipped with the package, used when SIGNATURE_FILE is unset
DEFAULT_SIGNATURE_FILE = Path(__file__).parent / 'data' / 'magic_numbers_reference.json'


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


def _env_choice(name: str, default: str, choices) -> str:
    value = os.getenv(name, default).strip().lower()
    if value not in choices:
        raise ValueError(f"{name} must be one of {', '.join(choices)} (got '{value}')")
    return value


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self, env_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            env_file: Optional path to .env file
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        # Catalog
        signature_file = os.getenv('SIGNATURE_FILE')
        self.signature_file = Path(signature_file) if signature_file else None
        self.duplicate_policy = _env_choice('DUPLICATE_POLICY', 'last-write-wins', DUPLICATE_POLICIES)

        # Verification
        self.type_match_policy = _env_choice('TYPE_MATCH_POLICY', 'substring', TYPE_MATCH_POLICIES)
        self.recursive = _env_bool('RECURSIVE', 'false')

        # Processing
        self.max_workers = int(os.getenv('MAX_WORKERS', '4'))
        if self.max_workers < 1:
            raise ValueError(f"MAX_WORKERS must be at least 1 (got {self.max_workers})")
        self.show_progress = _env_bool('SHOW_PROGRESS', 'true')

        # Logging
        self.log_level = os.getenv('LOG_LEVEL', 'WARNING').upper()

    @property
    def catalog_path(self) -> Path:
        """Catalog to load: the configured file, else the embedded reference."""
        return self.signature_file or DEFAULT_SIGNATURE_FILE

    def __repr__(self) -> str:
        """String representation of config."""
        return (
            f"Config(signature_file={self.signature_file}, "
            f"max_workers={self.max_workers}, "
            f"recursive={self.recursive}, "
            f"duplicate_policy={self.duplicate_policy}, "
            f"type_match_policy={self.type_match_policy})"
        )


# Global config instance
_config: Optional[Config] = None


def get_config(env_file: Optional[str] = None) -> Config:
    """
    Get or create global config instance (singleton).

    Args:
        env_file: Optional path to .env file

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config(env_file)
    return _config


def reset_config():
    """Reset global config instance (useful for testing)."""
    global _config
    _config = None
