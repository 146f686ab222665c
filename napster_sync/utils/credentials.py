"""Credentials loading from credentials.md, the environment and CLI overrides."""

import os
import re
from typing import Dict, Iterable, Optional
from dotenv import load_dotenv


DEFAULT_REDIRECT_URI = "http://localhost:8888/authResponse"

REQUIRED_KEYS = [
    'SPOTIFY_CLIENT_ID',
    'SPOTIFY_CLIENT_SECRET',
    'NAPSTER_API_KEY',
    'NAPSTER_SECRET_KEY',
    'NAPSTER_USERNAME',
    'NAPSTER_PASSWORD'
]

OPTIONAL_DEFAULTS = {
    'SPOTIFY_REDIRECT_URI': DEFAULT_REDIRECT_URI,
}


class CredentialsError(Exception):
    """Exception raised when credentials cannot be parsed."""
    pass


def parse_credentials(credentials_path: str = "credentials.md", required_keys: Iterable[str] = REQUIRED_KEYS) -> Dict[str, str]:
    """
    Parse credentials from credentials.md file.

    Args:
        credentials_path: Path to the credentials file (default: credentials.md)
        required_keys: Keys that must be present in the file

    Returns:
        Dictionary of every KEY=value pair found in the file

    Raises:
        CredentialsError: If file not found or required credentials are missing
    """
    if not os.path.exists(credentials_path):
        raise CredentialsError(f"Credentials file not found: {credentials_path}")

    with open(credentials_path, 'r', encoding='utf-8') as f:
        content = f.read()

    credentials = {}

    # Parse key=value pairs
    pattern = r'([A-Z_]+)=(.+)'
    for key, value in re.findall(pattern, content):
        credentials[key] = value.strip()

    missing_keys = [key for key in required_keys if key not in credentials]
    if missing_keys:
        raise CredentialsError(
            f"Missing required credentials: {', '.join(missing_keys)}"
        )

    return credentials


def load_credentials(
    credentials_path: str = "credentials.md",
    overrides: Optional[Dict[str, Optional[str]]] = None,
    env_file: Optional[str] = None
) -> Dict[str, str]:
    """
    Collect credentials from every supported source.

    Precedence is: explicit overrides (CLI flags) > environment variables
    (including a .env file) > credentials file. The credentials file is
    optional here; only the merged result has to be complete.

    Args:
        credentials_path: Path to the credentials file
        overrides: Values given on the command line; None values are ignored
        env_file: Optional .env path (default: search from the working directory)

    Returns:
        Dictionary with every required key plus SPOTIFY_REDIRECT_URI

    Raises:
        CredentialsError: If a required key has no value in any source
    """
    load_dotenv(dotenv_path=env_file)

    credentials = dict(OPTIONAL_DEFAULTS)

    if os.path.exists(credentials_path):
        credentials.update(parse_credentials(credentials_path, required_keys=()))

    for key in list(REQUIRED_KEYS) + list(OPTIONAL_DEFAULTS):
        value = os.environ.get(key)
        if value:
            credentials[key] = value.strip()

    for key, value in (overrides or {}).items():
        if value:
            credentials[key] = value

    missing_keys = [key for key in REQUIRED_KEYS if not credentials.get(key)]
    if missing_keys:
        raise CredentialsError(
            f"Missing required credentials: {', '.join(missing_keys)}"
        )

    return credentials
