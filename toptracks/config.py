"""Credential loading from the environment and optional .env file."""

import os
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from toptracks.constants import CLIENT_ID_VAR, CLIENT_SECRET_VAR, get_logger
from toptracks.errors import ConfigError
from toptracks.models import Credentials

logger = get_logger("config")


def load_environment(env_file: str) -> bool:
    """Load variables from env_file if it exists. Returns True if loaded."""
    env_path = Path(env_file)
    if not env_path.exists():
        logger.debug(f"No env file at {env_path}")
        return False

    load_dotenv(env_path, override=False)
    logger.debug(f"Environment loaded from {env_path}")
    return True


def _read_var(environ: Mapping[str, str], name: str) -> Optional[str]:
    value = environ.get(name)
    return value or None


def load_credentials(environ: Optional[Mapping[str, str]] = None) -> Credentials:
    """Read the client id and secret; both must be present and non-empty."""
    environ = os.environ if environ is None else environ

    client_id = _read_var(environ, CLIENT_ID_VAR)
    client_secret = _read_var(environ, CLIENT_SECRET_VAR)
    if client_id is None or client_secret is None:
        raise ConfigError(f"Set {CLIENT_ID_VAR} and {CLIENT_SECRET_VAR} as env variables.")

    return Credentials(client_id=client_id, client_secret=client_secret)
