"""
Tests for Revision shells and their metadata.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from dropbox_rest.errors import NotLoadedError
from dropbox_rest.revision import Revision


def loaded(revision, content=b"Example Content", **metadata):
    values = {"size": 10, "path": "/path/to/file", "is_dir": False, "mtime": 1300000000, "latest": True}
    values.update(metadata)
    session = MagicMock()
    session.event_content.return_value = (content, values)
    revision.load(session)
    return session


@pytest.fixture
def revision():
    return Revision(1, 10, 100)


class TestShell:
    """Test a fresh revision."""

    def test_identity(self, revision):
        assert (revision.user_id, revision.namespace_id, revision.journal_id) == (1, 10, 100)
        assert revision.identifier == "1:10:100"
        assert repr(revision) == "<Revision 1:10:100>"

    def test_nothing_loaded(self, revision):
        assert revision.error is None
        assert revision.has_error is False
        assert revision.content_loaded is False
        assert revision.metadata_loaded is False

    @pytest.mark.parametrize("accessor", ["latest", "directory", "modified", "size", "path", "deleted"])
    def test_accessors_need_metadata(self, revision, accessor):
        with pytest.raises(NotLoadedError) as exc_info:
            getattr(revision, accessor)
        assert exc_info.value.kind == "metadata"

    def test_attribute_needs_metadata(self, revision):
        with pytest.raises(NotLoadedError):
            revision.attribute("size")

    def test_content_needs_loading(self, revision):
        with pytest.raises(NotLoadedError) as exc_info:
            revision.content
        assert exc_info.value.kind == "content"


class TestLoad:
    """Test load."""

    def test_calls_event_content(self, revision):
        session = loaded(revision)
        session.event_content.assert_called_once_with("1:10:100")

    def test_passes_options(self, revision):
        session = MagicMock()
        session.event_content.return_value = (b"", {})
        revision.load(session, mode="dropbox")
        session.event_content.assert_called_once_with("1:10:100", mode="dropbox")

    def test_sets_content_and_metadata(self, revision):
        loaded(revision, content=b"abc", size=3)

        assert revision.content == b"abc"
        assert revision.content_loaded
        assert revision.metadata_loaded
        assert revision.size == 3

    def test_converts_mtime(self, revision):
        loaded(revision, mtime=1300000000)
        assert revision.modified == datetime.fromtimestamp(1300000000, tz=timezone.utc)

    def test_missing_size_and_mtime(self, revision):
        loaded(revision, size=-1, mtime=-1)

        assert revision.size is None
        assert revision.mtime is None
        assert revision.deleted is True

    def test_not_deleted(self, revision):
        loaded(revision)
        assert revision.deleted is False

    def test_clears_error(self, revision):
        revision.process_metadata({"error": 404})
        loaded(revision)
        assert revision.has_error is False


class TestAccessors:
    """Test metadata accessors."""

    @pytest.mark.parametrize("value", [True, False])
    def test_latest(self, revision, value):
        loaded(revision, latest=value)
        assert revision.latest is value

    @pytest.mark.parametrize("value", [True, False])
    def test_directory(self, revision, value):
        loaded(revision, is_dir=value)
        assert revision.directory is value

    def test_attribute(self, revision):
        loaded(revision, icon="page_white")

        assert revision.attribute("icon") == "page_white"
        with pytest.raises(KeyError):
            revision.attribute("unknown")

    def test_metadata_for_latest_revision(self, revision):
        loaded(revision, path="/the/path")
        session = MagicMock()

        revision.metadata_for_latest_revision(session, mode="dropbox")

        session.metadata.assert_called_once_with("/the/path", mode="dropbox")

    def test_metadata_for_latest_revision_needs_metadata(self, revision):
        with pytest.raises(NotLoadedError):
            revision.metadata_for_latest_revision(MagicMock())


class TestProcessMetadata:
    """Test process_metadata."""

    def test_error_is_recorded(self, revision):
        revision.process_metadata({"error": 403})

        assert revision.error == 403
        assert revision.has_error
        assert not revision.metadata_loaded

    def test_error_ignored_once_metadata_loaded(self, revision):
        revision.process_metadata({"size": 1, "path": "/a"})
        revision.process_metadata({"error": 403})

        assert revision.has_error is False
        assert revision.path == "/a"

    def test_metadata_after_error(self, revision):
        revision.process_metadata({"error": 403})
        revision.process_metadata({"size": 5, "path": "/b", "mtime": 1300000000, "latest": True})

        assert revision.has_error is False
        assert revision.size == 5
        assert revision.path == "/b"
        assert revision.latest is True

    def test_overwrites_old_metadata(self, revision):
        revision.process_metadata({"size": 1, "icon": "x"})
        revision.process_metadata({"size": 2})

        assert revision.size == 2
        with pytest.raises(KeyError):
            revision.attribute("icon")

    def test_missing_values(self, revision):
        revision.process_metadata({"size": -1, "mtime": -1})

        assert revision.size is None
        assert revision.mtime is None
