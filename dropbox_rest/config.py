"""Configuration from environment variables or a ``keys.json`` file.

  DROPBOX_CONSUMER_KEY, DROPBOX_CONSUMER_SECRET   API credentials
  DROPBOX_SSL                                     "1"/"true" to use https
  DROPBOX_MODE                                    sandbox | dropbox | metadata_only
  DROPBOX_SESSION_FILE                            where the CLI keeps its session
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .modes import RootMode

logger = logging.getLogger(__name__)

DEFAULT_SESSION_FILE = "~/.config/dropbox-rest/session.json"


def _optional(name: str, default: str) -> str:
    return os.environ.get(name, default)


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    consumer_key: str
    consumer_secret: str
    ssl: bool = False
    mode: RootMode = RootMode.SANDBOX
    session_file: Path = Path(os.path.expanduser(DEFAULT_SESSION_FILE))


def load_settings(keys_file: Optional[str] = None) -> Settings:
    """Read credentials from ``keys_file`` (``key``/``secret``) or the environment."""
    key = os.environ.get("DROPBOX_CONSUMER_KEY", "")
    secret = os.environ.get("DROPBOX_CONSUMER_SECRET", "")

    if keys_file:
        with open(keys_file) as f:
            keys = json.load(f)
        key = keys.get("key", key)
        secret = keys.get("secret", secret)

    if not key or not secret:
        raise ValueError("DROPBOX_CONSUMER_KEY and DROPBOX_CONSUMER_SECRET environment variables required")

    return Settings(
        consumer_key=key,
        consumer_secret=secret,
        ssl=_flag(_optional("DROPBOX_SSL", "false")),
        mode=RootMode.coerce(_optional("DROPBOX_MODE", RootMode.SANDBOX.value)),
        session_file=Path(os.path.expanduser(_optional("DROPBOX_SESSION_FILE", DEFAULT_SESSION_FILE))),
    )


def load_session_blob(path: Path) -> Optional[str]:
    """The serialized session stored at ``path``, if any."""
    if not path.exists():
        return None
    return path.read_text()


def save_session_blob(path: Path, blob: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(blob)
    os.chmod(path, 0o600)
    logger.debug(f"Session saved to {path}")
