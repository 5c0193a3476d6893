"""WSGI application completing the OAuth flow on the redirect back from Dropbox.

The unauthorized session travels as a serialized string, the way a
stateless web application would keep it between requests.
"""

import html
import logging
import threading
from email.utils import formatdate
from typing import Callable, Optional
from urllib.parse import parse_qsl

from .errors import DropboxError
from .session import Session
from .transport import OAuthTransport

logger = logging.getLogger(__name__)

CALLBACK_PATH = "/callback"


class CallbackApp:
    """Handles ``GET /callback?oauth_token=...`` and authorizes the session."""

    def __init__(
        self,
        session_blob: str,
        on_authorized: Callable[[Session], None],
        transport: Optional[OAuthTransport] = None,
    ):
        self.session_blob = session_blob
        self.on_authorized = on_authorized
        self.transport = transport
        self.done = threading.Event()
        self.session: Optional[Session] = None

    def __call__(self, environ, start_response):
        path = environ.get("PATH_INFO", "/")
        method = environ.get("REQUEST_METHOD", "GET")

        logger.info(f"Callback request: {method} {path}")

        if method != "GET" or path != CALLBACK_PATH:
            return self.send_error(start_response, "404 Not Found", "Nothing to see here.")

        params = dict(parse_qsl(environ.get("QUERY_STRING", "")))
        if "oauth_token" not in params:
            return self.send_error(start_response, "400 Bad Request", "Missing oauth_token.")

        try:
            session = Session.deserialize(self.session_blob, transport=self.transport)
            if not session.authorize(**params):
                return self.send_error(start_response, "403 Forbidden", "Dropbox did not grant access.")
        except DropboxError as e:
            logger.exception("Authorization failed")
            return self.send_error(start_response, "502 Bad Gateway", str(e))

        self.session = session
        self.on_authorized(session)
        self.done.set()
        return self.send_response(start_response, "200 OK", b"<p>Authorized. You can close this window.</p>")

    def send_response(self, start_response, status, content, content_type="text/html; charset=utf-8"):
        headers = [
            ("Content-Type", content_type),
            ("Content-Length", str(len(content))),
            ("Date", formatdate(usegmt=True)),
            ("Server", "dropbox-rest"),
        ]
        start_response(status, headers)
        return [content]

    def send_error(self, start_response, status, message):
        content = f"<p>{html.escape(message)}</p>".encode("utf-8")
        return self.send_response(start_response, status, content)
