"""Tests for document history."""

import pytest

from edit.edit_history import EditHistory
from edit.edit_settings import EditSettings


class TestEditHistory:
    """Test snapshot recording and revert."""

    def test_empty_history(self):
        """Test a new history."""
        history = EditHistory()

        assert len(history) == 0
        assert history.current() is None
        assert history.previous() is None
        assert history.revert() is None

    def test_push_and_previous(self):
        """Test current and previous snapshots."""
        history = EditHistory()
        history.push("v1")
        history.push("v2")

        assert history.current() == "v2"
        assert history.previous() == "v1"

    def test_duplicate_push_ignored(self):
        """Test that re-pushing the current document is a no-op."""
        history = EditHistory()
        history.push("v1")
        history.push("v1")

        assert len(history) == 1

    def test_capacity_drops_oldest(self):
        """Test the oldest snapshot is discarded beyond capacity."""
        history = EditHistory(max_snapshots=3)
        for version in ("v1", "v2", "v3", "v4"):
            history.push(version)

        assert history.snapshots() == ["v2", "v3", "v4"]

    def test_revert(self):
        """Test reverting walks back and stops at the oldest snapshot."""
        history = EditHistory()
        history.push("v1")
        history.push("v2")

        assert history.revert() == "v1"
        assert history.revert() == "v1"
        assert len(history) == 1

    def test_snapshots_returns_copy(self):
        """Test that callers cannot mutate the history through snapshots()."""
        history = EditHistory()
        history.push("v1")

        history.snapshots().append("v2")

        assert history.snapshots() == ["v1"]

    def test_clear(self):
        """Test clearing the history."""
        history = EditHistory()
        history.push("v1")
        history.clear()

        assert len(history) == 0

    def test_sized_from_settings(self):
        """Test that the history_size setting bounds the history."""
        history = EditHistory.from_settings(EditSettings(history_size=2))
        for version in ("v1", "v2", "v3"):
            history.push(version)

        assert history.snapshots() == ["v2", "v3"]

    def test_invalid_capacity(self):
        """Test that a capacity below one is rejected."""
        with pytest.raises(ValueError):
            EditHistory(max_snapshots=0)
