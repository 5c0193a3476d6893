"""OAuth 1.0a signed HTTP transport for the Dropbox REST API."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl, urlencode

import httpx
from oauthlib import oauth1

from . import urls
from .errors import UnsuccessfulResponseError

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass(frozen=True)
class Token:
    """An OAuth token/secret pair (request or access token)."""

    key: str
    secret: str

    @classmethod
    def from_response(cls, response: httpx.Response) -> Optional["Token"]:
        values = dict(parse_qsl(response.text))
        if "oauth_token" not in values:
            return None
        return cls(values["oauth_token"], values.get("oauth_token_secret", ""))


class OAuthTransport:
    """Signs requests with a consumer key/secret and sends them with httpx."""

    def __init__(
        self,
        consumer_key: str,
        consumer_secret: str,
        ssl: bool = False,
        proxy: Optional[str] = None,
        timeout: float = 60.0,
        client: Optional[httpx.Client] = None,
    ):
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.ssl = ssl
        self.timeout = timeout
        self.auth_host = urls.AUTH_SSL_HOST if ssl else urls.AUTH_HOST
        self._client = client or httpx.Client(timeout=timeout, proxy=proxy, follow_redirects=False)

    def close(self) -> None:
        self._client.close()

    def _oauth_url(self, step: str) -> str:
        return f"{self.auth_host}/{urls.API_VERSION}/oauth/{step}"

    def sign(
        self,
        method: str,
        url: str,
        token: Optional[Token] = None,
        body: Optional[str] = None,
        verifier: Optional[str] = None,
    ) -> Dict[str, str]:
        """Return the headers carrying the OAuth signature for ``url``."""
        signer = oauth1.Client(
            self.consumer_key,
            client_secret=self.consumer_secret,
            resource_owner_key=token.key if token else None,
            resource_owner_secret=token.secret if token else None,
            verifier=verifier,
        )
        headers = {"Content-Type": FORM_CONTENT_TYPE} if body is not None else None
        _, signed_headers, _ = signer.sign(url, http_method=method, body=body, headers=headers)
        return dict(signed_headers)

    def request(
        self,
        method: str,
        url: str,
        token: Token,
        sign_url: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send a signed request and return the raw response.

        ``sign_url`` signs for a different URL than the one the request is
        sent to. ``data`` is signed as a form body; when ``files`` is also
        given, the request body is multipart and ``data`` only feeds the
        signature.
        """
        body = urlencode(data) if data is not None else None
        headers = self.sign(method, sign_url or url, token, body=body)
        logger.debug(f"{method} {url}")

        if files is not None:
            headers.pop("Content-Type", None)
            return self._client.request(method, url, headers=headers, files=files)
        return self._client.request(method, url, headers=headers, content=body)

    def fetch_request_token(self) -> Token:
        url = self._oauth_url("request_token")
        headers = self.sign("POST", url)
        response = self._client.post(url, headers=headers)
        if not response.is_success:
            raise UnsuccessfulResponseError(url, response)

        token = Token.from_response(response)
        if token is None:
            raise UnsuccessfulResponseError(url, response, "No request token in response")
        logger.debug("Obtained request token")
        return token

    def authorize_url(self, request_token: Token, **params: Any) -> str:
        query = {"oauth_token": request_token.key}
        query.update({key: value for key, value in params.items() if value is not None})
        return f"{self._oauth_url('authorize')}?{urlencode(query)}"

    def fetch_access_token(self, request_token: Token, **params: Any) -> Optional[Token]:
        url = self._oauth_url("access_token")
        headers = self.sign("POST", url, request_token, verifier=params.get("oauth_verifier"))
        response = self._client.post(url, headers=headers)
        if not response.is_success:
            raise UnsuccessfulResponseError(url, response)
        return Token.from_response(response)
