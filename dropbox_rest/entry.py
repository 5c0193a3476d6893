"""Object-oriented access to a single remote path.

``Session.entry`` (or its aliases ``file`` and ``directory``) creates an
``Entry`` without any network call; later calls are delegated to the
session with the entry's current path::

    file = session.file("first_name.txt")
    file.rename("second_name.txt")
    file.rename("third_name.txt")  # the path was updated by the first rename
"""

import logging
import tempfile
from enum import Enum
from typing import IO, Any, List, Optional, Union

from .models import Metadata

logger = logging.getLogger(__name__)


class Signal(Enum):
    """Expected outcomes that are not worth an exception. Always falsy."""

    NOT_A_DIRECTORY = "not_a_directory"
    NOT_A_FILE = "not_a_file"

    def __bool__(self) -> bool:
        return False


def _strip_root(path: str) -> str:
    return path[1:] if path.startswith("/") else path


class Entry:
    """A remote file or folder, with its metadata cached after the first fetch."""

    def __init__(self, session, path: str, metadata: Optional[Metadata] = None):
        self.session = session
        self.path = path
        self._metadata = metadata
        self._file: Optional[IO[bytes]] = None

    @classmethod
    def create_from_metadata(cls, session, metadata: Metadata) -> "Entry":
        """An entry for ``metadata.path`` pre-seeded with ``metadata``."""
        return cls(session, metadata.path, metadata)

    def __repr__(self) -> str:
        return f"<Entry {self.path}>"

    def __enter__(self) -> "Entry":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ── Metadata ──────────────────────────────────────────────

    @property
    def cached_metadata(self) -> Optional[Metadata]:
        return self._metadata

    @cached_metadata.setter
    def cached_metadata(self, metadata: Optional[Metadata]) -> None:
        self._metadata = metadata

    def metadata(self, force: bool = False, ignore_cache: bool = False, **options: Any) -> Metadata:
        """The entry's metadata, from the cache when possible.

        ``ignore_cache`` refetches, letting the server answer "not modified"
        against the cached result; ``force`` refetches from scratch.
        """
        if self._metadata is not None and not (force or ignore_cache):
            return self._metadata
        return self.update_metadata(force=force, **options)

    info = metadata

    def update_metadata(self, force: bool = False, **options: Any) -> Metadata:
        """Always fetch metadata, sending the cached result as a hint unless ``force``."""
        if self._metadata is not None and not force:
            options["prior_response"] = self._metadata
        self._metadata = self.session.metadata(self.path, **options)
        return self._metadata

    def is_dir(self) -> bool:
        return self.metadata().directory

    def list(self, force: bool = False, ignore_cache: bool = False, **options: Any) -> Union[List["Entry"], Signal]:
        """Entries for the contents of this directory.

        Always asks the server; a cached result is only sent as the
        ``prior_response`` hint. Returns ``Signal.NOT_A_DIRECTORY`` when the
        entry is a file.
        """
        options["suppress_list"] = False
        metadata = self.update_metadata(force=force, **options)

        if not metadata.directory:
            return Signal.NOT_A_DIRECTORY
        return [Entry.create_from_metadata(self.session, child) for child in metadata.contents or ()]

    ls = list

    # ── Content ───────────────────────────────────────────────

    def file(self, force: bool = False, **options: Any) -> Union[IO[bytes], Signal]:
        """The downloaded content in a temporary file, reused across calls.

        The file is deleted when closed, when ``force`` replaces it, or when
        the entry is closed. Returns ``Signal.NOT_A_FILE`` for directories.
        """
        if self.is_dir():
            return Signal.NOT_A_FILE
        if self._file is not None and not force:
            return self._file

        self.close()
        handle = tempfile.NamedTemporaryFile(prefix="dropbox_")
        handle.write(self.download(**options))
        handle.flush()
        handle.seek(0)
        self._file = handle
        return handle

    def close(self) -> None:
        """Release the temporary file created by ``file``."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def download(self, **options: Any) -> bytes:
        return self.session.download(self.path, **options)

    body = download

    def thumbnail(self, size: Optional[str] = None, **options: Any) -> Optional[bytes]:
        if size is None:
            return self.session.thumbnail(self.path, **options)
        return self.session.thumbnail(self.path, size, **options)

    def link(self, **options: Any) -> str:
        return self.session.link(self.path, **options)

    # ── Operations ────────────────────────────────────────────

    def move(self, destination: str, **options: Any) -> Metadata:
        """Move the entry; its path follows the server's answer."""
        result = self.session.move(self.path, destination, **options)
        self._track(result)
        return result

    mv = move

    def rename(self, name: str, **options: Any) -> Metadata:
        result = self.session.rename(self.path, name, **options)
        self._track(result)
        return result

    def copy(self, destination: str, **options: Any) -> Metadata:
        return self.session.copy(self.path, destination, **options)

    cp = copy

    def delete(self, **options: Any) -> bool:
        result = self.session.delete(self.path, **options)
        self._metadata = None
        self.close()
        return result

    rm = delete

    def _track(self, result: Metadata) -> None:
        # The server may pick a different name than the one requested.
        new_path = _strip_root(result.path)
        if new_path != self.path:
            logger.debug(f"Entry {self.path} is now {new_path}")
        self.path = new_path
        self._metadata = result
