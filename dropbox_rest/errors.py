"""Exceptions raised by the Dropbox REST client."""

from typing import Optional

import httpx


class DropboxError(Exception):
    """Base class for every error raised by this package."""


class UnauthorizedError(DropboxError):
    """An API method was called before the OAuth process completed."""


class AlreadyAuthorizedError(DropboxError):
    """An authorization URL was requested on an authorized session."""


class APIError(DropboxError):
    """The server answered with something the client cannot use."""

    def __init__(self, request: Optional[str] = None, response: Optional[httpx.Response] = None, message: Optional[str] = None):
        self.request = request
        self.response = response
        super().__init__(message or self.describe())

    @property
    def status_code(self) -> Optional[int]:
        return self.response.status_code if self.response is not None else None

    def describe(self) -> str:
        return f"API error: {self.request}"


class ParseError(APIError):
    """A JSON body could not be parsed."""

    def describe(self) -> str:
        return f"Invalid response received: {self.request}"


class UnsuccessfulResponseError(APIError):
    """A non-2xx status with no more specific translation."""

    def describe(self) -> str:
        return f"HTTP status {self.status_code} received: {self.request}"


class PathError(DropboxError):
    """Base for errors tied to a remote path."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(self.describe())

    def describe(self) -> str:
        return self.path


class FileNotFoundError(PathError):
    def describe(self) -> str:
        return f"File not found: {self.path}"


class FileExistsError(PathError):
    def describe(self) -> str:
        return f"File already exists: {self.path}"


class TooManyEntriesError(PathError):
    def describe(self) -> str:
        return f"Too many entries in directory: {self.path}"


class NotLoadedError(DropboxError):
    """A revision accessor was used before its data was loaded.

    ``kind`` is either ``"content"`` or ``"metadata"``.
    """

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"{kind.capitalize()} not yet loaded -- call load on the Revision beforehand")
