"""Hosts, URL construction and path checks for the Dropbox REST API."""

from typing import Any, List
from urllib.parse import quote_plus

# The API version this client works with.
API_VERSION = "0"

HOST = "http://api.dropbox.com"
SSL_HOST = "https://api.dropbox.com"

# OAuth endpoints live on their own host.
AUTH_HOST = "http://api.getdropbox.com"
AUTH_SSL_HOST = "https://api.getdropbox.com"

CONTENT_HOST = "http://api-content.dropbox.com"
CONTENT_SSL_HOST = "https://api-content.dropbox.com"

ALTERNATE_HOSTS = {
    "event_content": CONTENT_HOST,
    "files": CONTENT_HOST,
    "thumbnails": CONTENT_HOST,
}
ALTERNATE_SSL_HOSTS = {
    "event_content": CONTENT_SSL_HOST,
    "files": CONTENT_SSL_HOST,
    "thumbnails": CONTENT_SSL_HOST,
}

MAX_PATH_LENGTH = 256


def _escape(value: Any) -> str:
    if isinstance(value, bool):
        value = "true" if value else "false"
    # dropbox doesn't really like plusses
    return quote_plus(str(value)).replace("+", "%20")


def base_host(endpoint: str = "", ssl: bool = False, canonical: bool = False) -> str:
    """Return the host serving ``endpoint``.

    ``canonical`` ignores alternate hosts; uploads are signed against the
    canonical host while being sent to the content host.
    """
    if not canonical:
        alternates = ALTERNATE_SSL_HOSTS if ssl else ALTERNATE_HOSTS
        if endpoint in alternates:
            return alternates[endpoint]
    return SSL_HOST if ssl else HOST


def api_url(*segments: Any, ssl: bool = False, canonical: bool = False, **params: Any) -> str:
    """Build an API URL from path segments and query parameters.

    >>> api_url("metadata", "sandbox", "my file", list=True)
    'http://api.dropbox.com/0/metadata/sandbox/my%20file?list=true'
    """
    endpoint = str(segments[0]) if segments else ""
    url = f"{base_host(endpoint, ssl, canonical)}/{API_VERSION}/"
    url += "/".join(_escape(segment) for segment in segments)

    query = [f"{_escape(key)}={_escape(value)}" for key, value in params.items() if value is not None]
    if query:
        url += "?" + "&".join(query)
    return url


def check_path(path: str) -> str:
    """Return ``path`` unchanged, or raise ``ValueError`` if the API would reject it."""
    if "\\" in path:
        raise ValueError(f"Dropbox paths cannot contain a backslash: {path!r}")
    if len(path) > MAX_PATH_LENGTH:
        raise ValueError(f"Dropbox paths cannot be longer than {MAX_PATH_LENGTH} characters")
    return path


def normalize_path(path: str, trailing: bool = False) -> str:
    """Strip one leading slash, and one trailing slash when ``trailing`` is set."""
    if path.startswith("/"):
        path = path[1:]
    if trailing and path.endswith("/"):
        path = path[:-1]
    return path


def path_segments(path: str) -> List[str]:
    """Validate ``path`` and split it into URL segments."""
    check_path(path)
    return path.split("/") if path else []
