"""Dropbox API methods, mixed into ``Session``.

A session must be authorized before any of these are called. Path-based
methods accept ``mode=`` to use a different root for one call without
touching the session's own mode.
"""

import json
import logging
import os
import posixpath
from pathlib import Path
from typing import Any, BinaryIO, List, Optional, Tuple, Union

import httpx

from . import urls
from .errors import (
    FileExistsError,
    FileNotFoundError,
    ParseError,
    TooManyEntriesError,
    UnauthorizedError,
    UnsuccessfulResponseError,
)
from .memoization import memoize
from .models import AccountInfo, Metadata
from .modes import resolve_root

logger = logging.getLogger(__name__)

UPLOAD_CONTENT_TYPE = "application/octet-stream"


class API:
    """Core Dropbox API functionality."""

    # ── Requests ──────────────────────────────────────────────

    def _api_internal(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        if self._access_token is None:
            raise UnauthorizedError("Must authorize before you can use API method")
        response = self.transport.request(method, url, self._access_token, **kwargs)
        if not response.is_success:
            raise UnsuccessfulResponseError(url, response)
        return response

    @staticmethod
    def _parse_json(url: str, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ParseError(url, response) from e

    def _get_json(self, url: str) -> Any:
        return self._parse_json(url, self._api_internal("GET", url))

    def _post_json(self, url: str) -> Any:
        return self._parse_json(url, self._api_internal("POST", url))

    def root(self, mode=None) -> str:
        """The root a call resolves to, given an optional per-call mode."""
        return resolve_root(self.mode, mode)

    # ── Account ───────────────────────────────────────────────

    @memoize
    def account(self) -> AccountInfo:
        """Information about the user's account."""
        url = urls.api_url("account", "info", ssl=self.ssl)
        return AccountInfo.from_dict(self._get_json(url))

    # ── Files ─────────────────────────────────────────────────

    @memoize
    def download(self, path: str, mode=None) -> bytes:
        """Download the file at ``path`` and return its contents."""
        path = urls.normalize_path(path)
        url = urls.api_url("files", self.root(mode), *urls.path_segments(path), ssl=self.ssl)
        return self._api_internal("GET", url).content

    @memoize
    def thumbnail(self, path: str, size: Optional[str] = None, mode=None) -> Optional[bytes]:
        """Download a thumbnail for an image, or None if none exists.

        ``size`` is one of the sizes the server understands ("small",
        "medium", "large").
        """
        path = urls.normalize_path(path)
        url = urls.api_url("thumbnails", self.root(mode), *urls.path_segments(path), ssl=self.ssl, size=size)
        try:
            return self._api_internal("GET", url).content
        except UnsuccessfulResponseError as e:
            if e.status_code == 404:
                return None
            raise

    def upload(self, local_file: Union[str, os.PathLike, BinaryIO], remote_path: str, mode=None) -> Metadata:
        """Upload a local file into the remote directory ``remote_path``.

        ``local_file`` is a path or a binary file object with a ``name``.
        The request goes to the content host but is signed for the API host.
        """
        remote_path = urls.normalize_path(remote_path, trailing=True)
        segments = urls.path_segments(remote_path)
        root = self.root(mode)
        url = urls.api_url("files", root, *segments, ssl=self.ssl)
        sign_url = urls.api_url("files", root, *segments, ssl=self.ssl, canonical=True)

        if isinstance(local_file, (str, os.PathLike)):
            local_path = Path(local_file)
            with open(local_path, "rb") as stream:
                response = self._upload_stream(url, sign_url, local_path.name, stream)
        elif hasattr(local_file, "read"):
            name = os.path.basename(getattr(local_file, "name", "") or "")
            if not name:
                raise ValueError("File objects passed to upload need a name")
            response = self._upload_stream(url, sign_url, name, local_file)
        else:
            raise TypeError("local_file must be a file object or a file path")

        return Metadata.from_dict(self._parse_json(url, response))

    def _upload_stream(self, url: str, sign_url: str, name: str, stream: BinaryIO) -> httpx.Response:
        logger.info(f"Uploading {name} to {url}")
        return self._api_internal(
            "POST",
            url,
            sign_url=sign_url,
            data={"file": name},
            files={"file": (name, stream, UPLOAD_CONTENT_TYPE)},
        )

    # ── File operations ───────────────────────────────────────

    def _file_operation(self, operation: str, source: str, target: str, mode=None) -> Metadata:
        source = urls.normalize_path(source)
        target = urls.normalize_path(target)
        if target.endswith("/"):
            target += posixpath.basename(source)

        url = urls.api_url(
            "fileops",
            operation,
            ssl=self.ssl,
            from_path=urls.check_path(source),
            to_path=urls.check_path(target),
            root=self.root(mode),
        )
        try:
            return Metadata.from_dict(self._post_json(url))
        except UnsuccessfulResponseError as e:
            if e.status_code == 404:
                logger.warning(f"{operation} failed, {source} not found")
                raise FileNotFoundError(source) from e
            if e.status_code == 403:
                logger.warning(f"{operation} failed, {target} already exists")
                raise FileExistsError(target) from e
            raise

    def copy(self, source: str, target: str, mode=None) -> Metadata:
        """Copy ``source`` to ``target``.

        A target ending in a slash is a directory; the source's name is
        appended to it.
        """
        return self._file_operation("copy", source, target, mode)

    def move(self, source: str, target: str, mode=None) -> Metadata:
        """Move ``source`` to ``target``. See ``copy`` for target semantics."""
        return self._file_operation("move", source, target, mode)

    def rename(self, path: str, new_name: str, mode=None) -> Metadata:
        """Rename the file or folder at ``path`` to ``new_name`` in place."""
        if "/" in new_name:
            raise ValueError("Names cannot have slashes in them")
        if path.endswith("/"):
            path = path[:-1]
        destination = path.split("/")
        destination[-1] = new_name
        return self.move(path, "/".join(destination), mode=mode)

    def create_folder(self, path: str, mode=None) -> Metadata:
        """Create a folder at ``path`` and return its metadata."""
        path = urls.normalize_path(path, trailing=True)
        url = urls.api_url("fileops", "create_folder", ssl=self.ssl, path=urls.check_path(path), root=self.root(mode))
        try:
            return Metadata.from_dict(self._post_json(url))
        except UnsuccessfulResponseError as e:
            if e.status_code == 403:
                logger.warning(f"Folder {path} already exists")
                raise FileExistsError(path) from e
            raise

    def delete(self, path: str, mode=None) -> bool:
        """Delete the file or folder at ``path``."""
        path = urls.normalize_path(path, trailing=True)
        url = urls.api_url("fileops", "delete", ssl=self.ssl, path=urls.check_path(path), root=self.root(mode))
        try:
            self._api_internal("POST", url)
        except UnsuccessfulResponseError as e:
            if e.status_code == 404:
                logger.warning(f"Cannot delete {path}, not found")
                raise FileNotFoundError(path) from e
            raise
        return True

    @memoize
    def link(self, path: str, mode=None) -> str:
        """Return a URL that shares the file at ``path``."""
        path = urls.normalize_path(path)
        url = urls.api_url("links", self.root(mode), *urls.path_segments(path), ssl=self.ssl)
        try:
            response = self._api_internal("GET", url)
        except UnsuccessfulResponseError as e:
            # The link is handed out as a redirect.
            if e.status_code == 302:
                return e.response.headers["Location"]
            raise
        return response.headers.get("Location") or response.text

    # ── Metadata ──────────────────────────────────────────────

    @memoize
    def metadata(
        self,
        path: str,
        limit: Optional[int] = None,
        suppress_list: bool = False,
        prior_response: Optional[Metadata] = None,
        mode=None,
    ) -> Metadata:
        """Metadata for the file or folder at ``path``.

        ``limit`` caps the number of directory entries (more raises
        ``TooManyEntriesError``). ``suppress_list`` omits the contents of a
        directory. A ``prior_response`` is returned unchanged if the server
        reports that nothing changed since it was fetched.
        """
        path = urls.normalize_path(path)
        params = {"list": not suppress_list}
        if limit:
            params["file_limit"] = limit
        if prior_response is not None and prior_response.hash:
            params["hash"] = prior_response.hash

        url = urls.api_url("metadata", self.root(mode), *urls.path_segments(path), ssl=self.ssl, **params)
        try:
            return Metadata.from_dict(self._get_json(url))
        except UnsuccessfulResponseError as e:
            if e.status_code == 406:
                logger.warning(f"Too many entries in {path}")
                raise TooManyEntriesError(path) from e
            if e.status_code == 404:
                logger.warning(f"No metadata for {path}, not found")
                raise FileNotFoundError(path) from e
            if e.status_code == 304 and prior_response is not None:
                logger.debug(f"Metadata for {path} not modified")
                return prior_response
            raise

    def list(self, path: str, **options: Any) -> Optional[List[Metadata]]:
        """The contents of the directory at ``path``, or None for a file."""
        options["suppress_list"] = False
        contents = self.metadata(path, **options).contents
        return list(contents) if contents is not None else None

    ls = list

    # ── Events ────────────────────────────────────────────────

    def event_metadata(self, target_events: str, mode=None) -> dict:
        """Metadata for the entries of a pingback, as user → namespace → journal → attributes."""
        url = urls.api_url("event_metadata", ssl=self.ssl, target_events=target_events, root=self.root(mode))
        return self._get_json(url)

    def event_content(self, identifier: str, mode=None) -> Tuple[bytes, dict]:
        """The content and metadata of a file at the revision ``identifier``."""
        url = urls.api_url("event_content", ssl=self.ssl, target_event=identifier, root=self.root(mode))
        response = self._api_internal("GET", url)
        try:
            return response.content, json.loads(response.headers["X-Dropbox-Metadata"])
        except (KeyError, ValueError) as e:
            raise ParseError(url, response) from e
