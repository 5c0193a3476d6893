"""Data models for Dropbox API results."""

import posixpath
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, Optional, Tuple

TIMESTAMP_FIELDS = ("modified", "mtime")

# Returned by the server for deleted entries.
MISSING = -1


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Convert a wire timestamp (RFC 2822 string or epoch seconds) to a datetime."""
    if value is None or value == MISSING:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Unrecognised timestamp: {value!r}") from e


def normalize_metadata(value: Any) -> Any:
    """Recursively normalise a decoded JSON value.

    Mapping keys become strings, timestamp fields become datetimes and every
    mapping carrying ``is_dir`` gains a derived ``directory`` flag.
    """
    if isinstance(value, list):
        return [normalize_metadata(item) for item in value]
    if not isinstance(value, dict):
        return value

    result = {str(key): normalize_metadata(item) for key, item in value.items()}
    for key in TIMESTAMP_FIELDS:
        if key in result:
            result[key] = parse_timestamp(result[key])
    if "is_dir" in result:
        result["directory"] = bool(result["is_dir"])
    return result


@dataclass(frozen=True)
class Metadata:
    """A file or folder as described by the ``metadata`` family of calls."""

    path: str = ""
    is_dir: bool = False
    directory: bool = False
    size: Optional[str] = None
    bytes: int = 0
    modified: Optional[datetime] = None
    revision: Optional[int] = None
    rev: Optional[str] = None
    hash: Optional[str] = None
    icon: Optional[str] = None
    root: Optional[str] = None
    mime_type: Optional[str] = None
    thumb_exists: bool = False
    is_deleted: bool = False
    contents: Optional[Tuple["Metadata", ...]] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: dict) -> "Metadata":
        """Create Metadata from an API response dict."""
        data = normalize_metadata(data)
        known = {f.name for f in fields(cls)} - {"contents", "extra", "directory"}

        values = {key: data[key] for key in known if key in data}
        values["directory"] = data.get("directory", bool(data.get("is_dir", False)))
        if isinstance(data.get("contents"), list):
            values["contents"] = tuple(cls.from_dict(child) for child in data["contents"])
        values["extra"] = {key: item for key, item in data.items() if key not in known and key not in ("contents", "directory")}
        return cls(**values)

    @property
    def name(self) -> str:
        return posixpath.basename(self.path.rstrip("/"))

    def get(self, name: str, default: Any = None) -> Any:
        try:
            return self[name]
        except KeyError:
            return default

    def __getitem__(self, name: str) -> Any:
        if name != "extra" and name in self.__dataclass_fields__:
            return getattr(self, name)
        return self.extra[name]


@dataclass(frozen=True)
class AccountInfo:
    """The ``account/info`` result."""

    uid: Optional[int] = None
    display_name: str = ""
    email: Optional[str] = None
    country: Optional[str] = None
    referral_link: Optional[str] = None
    quota_info: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: dict) -> "AccountInfo":
        data = normalize_metadata(data)
        known = {f.name for f in fields(cls)} - {"extra"}
        values = {key: data[key] for key in known if key in data}
        values["extra"] = {key: item for key, item in data.items() if key not in known}
        return cls(**values)
