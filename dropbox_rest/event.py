"""Pingback events.

An ``Event`` is built from the JSON Dropbox posts during a pingback::

    event = Event(params["target_events"])
    event.user_ids                # [1, 2, 3]
    event.entries(1)[0]           # <Revision 1:10:100>

Each revision can then be loaded on its own, or the metadata of every
revision belonging to one user loaded in a single call::

    event.entries(1)[0].load(session)
    event.load_metadata(first_users_session)
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from .errors import ParseError
from .revision import Revision

logger = logging.getLogger(__name__)


class Event:
    def __init__(self, payload: str):
        self.payload = payload
        try:
            parsed = json.loads(payload)
        except (TypeError, ValueError) as e:
            raise ParseError(message="Invalid pingback event data") from e
        if not isinstance(parsed, dict):
            raise ParseError(message="Invalid pingback event data")

        self._entries: List[Revision] = []
        self._entries_by_user: Dict[int, List[Revision]] = {}
        self._entries_by_key: Dict[Tuple[int, int, int], Revision] = {}

        try:
            for key in self._iter_keys(parsed):
                revision = Revision(*key)
                self._entries.append(revision)
                self._entries_by_user.setdefault(revision.user_id, []).append(revision)
                self._entries_by_key[revision.key] = revision
        except (TypeError, ValueError) as e:
            raise ParseError(message="Invalid pingback event data") from e

    @staticmethod
    def _iter_keys(parsed: Dict[str, Any]):
        """Yield (user, namespace, journal) ids; TypeError/ValueError on a bad shape."""
        for user_id, namespaces in parsed.items():
            if not isinstance(namespaces, dict):
                raise TypeError(f"Namespaces of user {user_id} are not a mapping")
            for namespace_id, journals in namespaces.items():
                if not isinstance(journals, list):
                    raise TypeError(f"Journals of namespace {namespace_id} are not a list")
                for journal_id in journals:
                    yield int(user_id), int(namespace_id), int(journal_id)

    def __repr__(self) -> str:
        return f"<Event ({len(self._entries)} entries)>"

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def user_ids(self) -> List[int]:
        return list(self._entries_by_user)

    def entries(self, user_id: Optional[Any] = None) -> List[Revision]:
        """All revisions, or those of one user. The list is a copy; the revisions are not."""
        if user_id is None:
            return list(self._entries)
        try:
            user_id = int(user_id)
        except (TypeError, ValueError):
            return []
        return list(self._entries_by_user.get(user_id, ()))

    def load_metadata(self, session, **options: Any) -> None:
        """Load metadata for the revisions visible to ``session``.

        Every call goes to the network; revisions keep what they loaded.
        """
        response = session.event_metadata(self.payload, **options)
        self._process_metadata(response)

    def _process_metadata(self, metadata: Dict[str, Any]) -> None:
        for user_id, namespaces in metadata.items():
            for namespace_id, journals in namespaces.items():
                for journal_id, attributes in journals.items():
                    key = (int(user_id), int(namespace_id), int(journal_id))
                    revision = self._entries_by_key.get(key)
                    if revision is None:
                        logger.warning(f"Ignoring metadata for unknown revision {':'.join(map(str, key))}")
                        continue
                    revision.process_metadata({str(k): v for k, v in attributes.items()})
