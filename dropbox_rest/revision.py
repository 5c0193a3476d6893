"""A file or folder at a point in time, as referenced by a pingback ``Event``.

Revisions start out as shells holding only their identity. Metadata is
loaded for a whole event with ``Event.load_metadata``; content (plus
metadata) for one revision with ``Revision.load``. Once loaded, metadata
is read through the typed properties or ``attribute``::

    revision.size      # 2962
    revision.modified  # datetime, or None if the file was deleted

If metadata could not be read, the HTTP error code is kept in ``error``.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from .errors import NotLoadedError
from .models import MISSING, parse_timestamp

logger = logging.getLogger(__name__)


class Revision:
    def __init__(self, user_id: int, namespace_id: int, journal_id: int):
        self.user_id = user_id
        self.namespace_id = namespace_id
        self.journal_id = journal_id
        self.error: Optional[int] = None
        self._content: Optional[bytes] = None
        self._metadata: Optional[Dict[str, Any]] = None

    def __repr__(self) -> str:
        return f"<Revision {self.identifier}>"

    @property
    def identifier(self) -> str:
        """The identifier used by the event API methods."""
        return f"{self.user_id}:{self.namespace_id}:{self.journal_id}"

    @property
    def key(self) -> tuple:
        return (self.user_id, self.namespace_id, self.journal_id)

    # ── Loading ───────────────────────────────────────────────

    def load(self, session, **options: Any) -> None:
        """Load content and metadata for this revision through ``session``."""
        content, metadata = session.event_content(self.identifier, **options)
        self._content = content
        self._assign(metadata)

    def process_metadata(self, metadata: Dict[str, Any]) -> None:
        """Record one entry of an ``event_metadata`` response.

        An error only sticks if no metadata was loaded before; metadata
        always replaces what was there and clears the error.
        """
        if metadata.get("error"):
            if self._metadata is None:
                self.error = metadata["error"]
            else:
                logger.debug(f"Keeping metadata of {self.identifier} despite error {metadata['error']}")
            return
        self._assign(metadata)

    def _assign(self, metadata: Dict[str, Any]) -> None:
        values = {str(key): value for key, value in metadata.items()}
        if values.get("size") == MISSING:
            values["size"] = None
        if "mtime" in values:
            values["mtime"] = parse_timestamp(values["mtime"])
        self._metadata = values
        self.error = None

    @property
    def content_loaded(self) -> bool:
        return self._content is not None

    @property
    def metadata_loaded(self) -> bool:
        return self._metadata is not None

    @property
    def has_error(self) -> bool:
        return self.error is not None

    @property
    def content(self) -> bytes:
        if not self.content_loaded:
            raise NotLoadedError("content")
        return self._content

    # ── Metadata access ───────────────────────────────────────

    def attribute(self, name: str) -> Any:
        """A metadata attribute by name; ``KeyError`` if the server did not send it."""
        if not self.metadata_loaded:
            raise NotLoadedError("metadata")
        if name not in self._metadata:
            raise KeyError(f"Revision {self.identifier} has no attribute {name!r}")
        return self._metadata[name]

    def _known(self, name: str) -> Any:
        if not self.metadata_loaded:
            raise NotLoadedError("metadata")
        return self._metadata.get(name)

    @property
    def size(self) -> Optional[int]:
        return self._known("size")

    @property
    def path(self) -> Optional[str]:
        return self._known("path")

    @property
    def is_dir(self) -> bool:
        return bool(self._known("is_dir"))

    directory = is_dir

    @property
    def mtime(self) -> Optional[datetime]:
        return self._known("mtime")

    modified = mtime

    @property
    def latest(self) -> bool:
        return bool(self._known("latest"))

    @property
    def deleted(self) -> bool:
        return self.mtime is None and self.size is None

    def metadata_for_latest_revision(self, session, **options: Any):
        """Current metadata for this revision's path, via ``session.metadata``."""
        return session.metadata(self.path, **options)
