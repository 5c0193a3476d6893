"""Opt-in memoization of API results.

Memoization is off for new sessions. Once enabled, repeated calls to a
memoized method with the same arguments are answered from a cache instead
of the network::

    session.metadata("file1")  # network
    session.enable_memoization()
    session.metadata("file1")  # network
    session.metadata("file1")  # cache
    session.disable_memoization()
    session.metadata("file1")  # network

A custom cache (memcached, redis, ...) plugs in through ``CacheStrategy``.
Enabling memoization makes a session unsafe to share between threads.
"""

import functools
import hashlib
import inspect
import json
import logging
from typing import Any, Callable, Dict, Optional, Protocol, Set

from . import urls

logger = logging.getLogger(__name__)


class CacheStrategy(Protocol):
    def get_or_compute(self, key: str, compute: Callable[[], Any]) -> Any:
        """Return the value stored at ``key``, computing and storing it on a miss."""

    def invalidate(self, key: str) -> None:
        """Forget ``key``."""


class InMemoryCache:
    """Default strategy: a plain dict living on the session."""

    def __init__(self):
        self._values: Dict[str, Any] = {}

    def get_or_compute(self, key: str, compute: Callable[[], Any]) -> Any:
        if key not in self._values:
            self._values[key] = compute()
        return self._values[key]

    def invalidate(self, key: str) -> None:
        self._values.pop(key, None)


class Memoizer:
    """Tracks which results were cached so they can be cleared together."""

    def __init__(self):
        self.enabled = False
        self.cache: CacheStrategy = InMemoryCache()
        self.keys: Set[str] = set()

    @staticmethod
    def cache_key(name: str, args: tuple, kwargs: dict) -> str:
        """64 lowercase hex characters identifying a call."""
        arguments = json.dumps([list(args), kwargs], sort_keys=True, default=repr)
        return hashlib.sha256(f"{name}:{arguments}".encode("utf-8")).hexdigest()

    def enable(self, cache: Optional[CacheStrategy] = None) -> None:
        if cache is not None:
            self.cache = cache
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False
        self.clear()

    def clear(self) -> None:
        for key in self.keys:
            self.cache.invalidate(key)
        logger.debug(f"Cleared {len(self.keys)} memoized results")
        self.keys.clear()

    def call(self, name: str, compute: Callable[[], Any], args: tuple, kwargs: dict) -> Any:
        if not self.enabled:
            return compute()
        key = self.cache_key(name, args, kwargs)
        self.keys.add(key)
        return self.cache.get_or_compute(key, compute)


def normalized_arguments(signature: inspect.Signature, args: tuple, kwargs: dict) -> Dict[str, Any]:
    """Bind a call to its parameter names, with defaults filled in and ``path`` normalised.

    ``metadata("/a")``, ``metadata("a")`` and ``metadata(path="a", limit=None)``
    all produce the same arguments.
    """
    bound = signature.bind(*args, **kwargs)
    bound.apply_defaults()
    arguments = dict(bound.arguments)
    arguments.pop("self", None)
    if isinstance(arguments.get("path"), str):
        arguments["path"] = urls.normalize_path(arguments["path"])
    return arguments


def memoize(method: Callable) -> Callable:
    """Route calls of an API method through the instance's ``Memoizer``."""
    signature = inspect.signature(method)

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        memoizer = getattr(self, "memoizer", None)
        if memoizer is None or not memoizer.enabled:
            return method(self, *args, **kwargs)
        arguments = normalized_arguments(signature, (self,) + args, kwargs)
        return memoizer.call(method.__name__, lambda: method(self, *args, **kwargs), (), arguments)

    return wrapper
