"""Configuration management for AutoGenre."""

import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv


def eprint(*args, **kwargs):
    """Print to stderr."""
    print(*args, file=sys.stderr, **kwargs)


def load_config(env_file: Optional[str] = None) -> dict:
    """
    Load provider credentials from .env file.

    Args:
        env_file: Path to .env file. Defaults to .env in current directory.

    Returns:
        Dictionary of configuration values.
    """
    if env_file is None:
        env_file = ".env"

    env_path = Path(env_file)
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)
        eprint(f"Loaded environment from {env_path.resolve()}")
    else:
        eprint(
            f"Warning: .env file not found at {env_path.resolve()} "
            "- falling back to process env."
        )

    return {
        # Spotify credentials (client-credentials flow)
        "spotify_client_id": os.getenv("SPOTIFY_CLIENT_ID"),
        "spotify_client_secret": os.getenv("SPOTIFY_CLIENT_SECRET"),
        # Beatport account
        "beatport_username": os.getenv("BEATPORT_USERNAME"),
        "beatport_password": os.getenv("BEATPORT_PASSWORD"),
    }


def validate_config(config: dict, skip_spotify: bool = False,
                    skip_beatport: bool = False) -> List[str]:
    """
    Return the credential names that are missing for enabled providers.

    Missing credentials are not fatal: the provider is simply not queried.

    Args:
        config: Configuration dictionary from load_config(), merged with settings
        skip_spotify: If True, don't report Spotify credentials
        skip_beatport: If True, don't report Beatport credentials

    Returns:
        List of missing credential names (empty if all present).
    """
    missing = []

    if not skip_spotify:
        for key, env_name in [
            ("spotify_client_id", "SPOTIFY_CLIENT_ID"),
            ("spotify_client_secret", "SPOTIFY_CLIENT_SECRET"),
        ]:
            if not config.get(key):
                missing.append(env_name)

    if not skip_beatport:
        for key, env_name in [
            ("beatport_username", "BEATPORT_USERNAME"),
            ("beatport_password", "BEATPORT_PASSWORD"),
        ]:
            if not config.get(key):
                missing.append(env_name)

    return missing


def get_spotify_instructions() -> str:
    """Return instructions for obtaining Spotify API credentials."""
    return """
To get Spotify API credentials:
1. Go to https://developer.spotify.com/dashboard
2. Create an app and open its settings
3. Copy the client ID and secret to your .env file:
   SPOTIFY_CLIENT_ID=your_client_id
   SPOTIFY_CLIENT_SECRET=your_client_secret
"""


def get_beatport_instructions() -> str:
    """Return instructions for enabling Beatport lookups."""
    return """
To enable Beatport lookups, add your Beatport account to your .env file:
   BEATPORT_USERNAME=your_username
   BEATPORT_PASSWORD=your_password
"""


def setup_logging(verbose: bool = False,
                  log_file: Optional[str] = None) -> logging.Logger:
    """Configure the package logger with console and optional file handlers."""
    logger = logging.getLogger("autogenre")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.handlers.clear()

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(console_handler)

    return logger
