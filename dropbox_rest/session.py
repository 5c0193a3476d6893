"""The Dropbox session: OAuth authorization state plus the API methods.

Authenticating a user::

    session = Session(my_key, my_secret)
    print(f"Visit {session.authorize_url()} and hit enter when done.")
    input()
    session.authorize()

``authorize`` must run on the session that produced the URL. When that is
not possible (a stateless web app handling the OAuth callback), serialize
the session between requests::

    blob = session.serialize()
    ...
    session = Session.deserialize(blob)
    session.authorize(oauth_verifier=verifier)
"""

import json
import logging
from typing import Any, Optional, Union

from .api import API
from .entry import Entry
from .errors import AlreadyAuthorizedError
from .memoization import CacheStrategy, Memoizer
from .modes import RootMode
from .transport import OAuthTransport, Token

logger = logging.getLogger(__name__)


class Session(API):
    """A Dropbox account, unauthorized until ``authorize`` succeeds."""

    def __init__(
        self,
        consumer_key: str,
        consumer_secret: str,
        ssl: bool = False,
        mode: Union[RootMode, str] = RootMode.SANDBOX,
        proxy: Optional[str] = None,
        transport: Optional[OAuthTransport] = None,
        request_token: Optional[Token] = None,
        access_token: Optional[Token] = None,
    ):
        if request_token is not None and access_token is not None:
            raise ValueError("A session holds either a request token or an access token, not both")

        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.ssl = bool(ssl)
        self.mode = mode
        self.transport = transport or OAuthTransport(consumer_key, consumer_secret, ssl=self.ssl, proxy=proxy)
        self.memoizer = Memoizer()

        self._access_token = access_token
        self._request_token = request_token
        if access_token is None and request_token is None:
            self._request_token = self.transport.fetch_request_token()

    def __repr__(self) -> str:
        state = "authorized" if self.authorized else "unauthorized"
        return f"<Session {self.consumer_key} ({state})>"

    # ── Mode ──────────────────────────────────────────────────

    @property
    def mode(self) -> RootMode:
        return self._mode

    @mode.setter
    def mode(self, value: Union[RootMode, str]) -> None:
        self._mode = RootMode.coerce(value)

    @property
    def sandbox(self) -> bool:
        return self._mode is RootMode.SANDBOX

    @sandbox.setter
    def sandbox(self, value: bool) -> None:
        self._mode = RootMode.SANDBOX if value else RootMode.FULL_ACCESS

    # ── Authorization ─────────────────────────────────────────

    @property
    def authorized(self) -> bool:
        return self._access_token is not None

    def authorize_url(self, **params: Any) -> str:
        """The URL the user visits to grant access, e.g. with ``oauth_callback=...``."""
        if self.authorized:
            raise AlreadyAuthorizedError("You have already been authorized; no need to get an authorization URL.")
        return self.transport.authorize_url(self._request_token, **params)

    def authorize(self, **params: Any) -> bool:
        """Exchange the request token for an access token.

        ``params`` are the OAuth values returned by Dropbox, typically
        ``oauth_verifier``. Returns whether an access token was obtained.
        """
        access_token = self.transport.fetch_access_token(self._request_token, **params)
        if access_token is not None:
            self._access_token = access_token
            self._request_token = None
            logger.info(f"Session for {self.consumer_key} authorized")
        return self.authorized

    # ── Persistence ───────────────────────────────────────────

    def serialize(self) -> str:
        """An opaque string that ``deserialize`` turns back into this session."""
        token = self._access_token if self.authorized else self._request_token
        return json.dumps([
            self.consumer_key,
            self.consumer_secret,
            self.authorized,
            token.key,
            token.secret,
            self.ssl,
            self.mode.value,
        ])

    @classmethod
    def deserialize(cls, data: str, transport: Optional[OAuthTransport] = None) -> "Session":
        """Recreate a session from ``serialize`` output without touching the network."""
        try:
            values = json.loads(data)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Must provide a properly serialized {cls.__name__} instance") from e

        if not isinstance(values, list) or len(values) not in (5, 6, 7):
            raise ValueError(f"Must provide a properly serialized {cls.__name__} instance")
        consumer_key, consumer_secret, authorized, token, token_secret, *rest = values
        if not all(isinstance(v, str) for v in (consumer_key, consumer_secret, token, token_secret)):
            raise ValueError(f"Must provide a properly serialized {cls.__name__} instance")
        # Only the keys must be non-empty.
        if not consumer_key or not token:
            raise ValueError(f"Must provide a properly serialized {cls.__name__} instance")
        if not isinstance(authorized, bool):
            raise ValueError(f"Must provide a properly serialized {cls.__name__} instance")

        ssl = bool(rest[0]) if len(rest) > 0 and rest[0] is not None else False
        mode = rest[1] if len(rest) > 1 and rest[1] is not None else RootMode.SANDBOX

        token = Token(token, token_secret)
        return cls(
            consumer_key,
            consumer_secret,
            ssl=ssl,
            mode=mode,
            transport=transport,
            access_token=token if authorized else None,
            request_token=None if authorized else token,
        )

    # ── Memoization ───────────────────────────────────────────

    def enable_memoization(self, cache: Optional[CacheStrategy] = None) -> None:
        """Start caching API results, optionally in a custom cache."""
        self.memoizer.enable(cache)

    def disable_memoization(self) -> None:
        """Stop caching API results and clear what was cached."""
        self.memoizer.disable()

    # ── Façades ───────────────────────────────────────────────

    def entry(self, path: str) -> Entry:
        """An ``Entry`` for ``path``. No network call is made."""
        return Entry(self, path)

    file = entry
    directory = entry
