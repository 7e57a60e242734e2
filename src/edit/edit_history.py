"""Bounded history of document snapshots."""

from typing import List

from edit.edit_settings import EditSettings


class EditHistory:
    """Keeps the most recent document snapshots so an edit can be reverted."""

    def __init__(self, max_snapshots: int = 10):
        """
        Initialize the history.

        Args:
            max_snapshots: Number of snapshots kept; older ones are discarded
        """
        if max_snapshots < 1:
            raise ValueError("max_snapshots must be at least 1")

        self._max_snapshots = max_snapshots
        self._snapshots: List[str] = []

    @classmethod
    def from_settings(cls, settings: EditSettings) -> "EditHistory":
        """Create a history sized by the `history_size` setting."""
        return cls(settings.history_size)

    def __len__(self) -> int:
        return len(self._snapshots)

    def push(self, document: str) -> None:
        """Record a new snapshot unless it matches the current one."""
        if self._snapshots and self._snapshots[-1] == document:
            return

        self._snapshots.append(document)
        if len(self._snapshots) > self._max_snapshots:
            del self._snapshots[0]

    def current(self) -> str | None:
        """Get the most recent snapshot."""
        return self._snapshots[-1] if self._snapshots else None

    def previous(self) -> str | None:
        """Get the snapshot before the most recent one."""
        return self._snapshots[-2] if len(self._snapshots) > 1 else None

    def revert(self) -> str | None:
        """
        Drop the most recent snapshot.

        The oldest snapshot is never dropped, so there is always a document to
        fall back to once anything has been recorded.

        Returns:
            The snapshot that is now current, or None if the history is empty
        """
        if len(self._snapshots) > 1:
            self._snapshots.pop()

        return self.current()

    def snapshots(self) -> List[str]:
        """Get all snapshots, oldest first."""
        return list(self._snapshots)

    def clear(self) -> None:
        """Remove all snapshots."""
        self._snapshots.clear()
