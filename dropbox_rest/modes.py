"""API modes and the root each one resolves to."""

from enum import Enum
from typing import Optional, Union


class RootMode(str, Enum):
    """Which part of the user's Dropbox paths resolve against.

    ``METADATA_ONLY`` resolves like ``FULL_ACCESS``; refusing writes is up
    to the server.
    """

    SANDBOX = "sandbox"
    FULL_ACCESS = "dropbox"
    METADATA_ONLY = "metadata_only"

    @classmethod
    def coerce(cls, value: Union["RootMode", str]) -> "RootMode":
        try:
            return cls(value)
        except ValueError:
            pass
        # Also accept member names, e.g. "full_access".
        if isinstance(value, str) and value.upper() in cls.__members__:
            return cls[value.upper()]
        raise ValueError(f"Unknown API mode {value!r}")


def resolve_root(default: RootMode, override: Optional[Union[RootMode, str]] = None) -> str:
    """Return the physical root ("sandbox" or "dropbox") for a call."""
    mode = RootMode.coerce(override) if override is not None else default
    return "sandbox" if mode is RootMode.SANDBOX else "dropbox"
