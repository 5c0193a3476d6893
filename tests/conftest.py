"""
Pytest configuration and fixtures for dropbox_rest tests.
"""

import json
import sys
from pathlib import Path
from typing import List, Optional

import httpx
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from dropbox_rest.session import Session
from dropbox_rest.transport import OAuthTransport, Token


class Recorder:
    """MockTransport handler that records requests and replays queued responses."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.responses: List[httpx.Response] = []

    def queue(self, status: int = 200, json_body=None, content: bytes = b"", headers: Optional[dict] = None):
        if json_body is not None:
            content = json.dumps(json_body).encode("utf-8")
        self.responses.append(httpx.Response(status, content=content, headers=headers))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            return self.responses.pop(0)
        return httpx.Response(200, content=b"{}")

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def transport(recorder):
    client = httpx.Client(transport=httpx.MockTransport(recorder))
    return OAuthTransport("consumer key", "consumer secret", client=client)


@pytest.fixture
def session(transport):
    """An authorized session talking to the recorder."""
    return Session(
        "consumer key",
        "consumer secret",
        transport=transport,
        access_token=Token("access token", "access secret"),
    )
