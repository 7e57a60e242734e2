"""Settings for the edit engine."""

from dataclasses import dataclass
import json
import os
from typing import Any, Dict

from edit.edit_exceptions import EditSettingsError
from edit.edit_types import EditEncoding


@dataclass
class EditSettings:
    """
    Edit engine settings.
    """
    encoding: EditEncoding = EditEncoding.SEARCH_REPLACE
    max_retries: int = 2  # Correction rounds after the first attempt
    tab_width: int = 4
    context_lines: int = 2  # Context lines around an extracted section
    allow_full_rewrite: bool = False
    history_size: int = 10  # Document snapshots kept for revert

    def __post_init__(self) -> None:
        for name in ("max_retries", "tab_width", "context_lines", "history_size"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise EditSettingsError(
                    f"Setting '{name}' must be a non-negative integer, got {value!r}",
                    {'setting': name, 'value': value}
                )

        if not isinstance(self.allow_full_rewrite, bool):
            raise EditSettingsError(
                f"Setting 'allow_full_rewrite' must be a boolean, got {self.allow_full_rewrite!r}",
                {'setting': 'allow_full_rewrite', 'value': self.allow_full_rewrite}
            )

        if self.tab_width == 0 or self.history_size == 0:
            raise EditSettingsError(
                "Settings 'tab_width' and 'history_size' must be at least 1",
                {'tab_width': self.tab_width, 'history_size': self.history_size}
            )

    @classmethod
    def create_default(cls) -> "EditSettings":
        """Create a new EditSettings object with default values."""
        return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EditSettings":
        """
        Create settings from a dictionary using the JSON key names.

        Missing keys keep their default values.

        Args:
            data: Settings dictionary

        Returns:
            EditSettings object

        Raises:
            EditSettingsError: If a value is invalid
        """
        defaults = cls.create_default()

        encoding_name = data.get("encoding", defaults.encoding.name)
        try:
            encoding = EditEncoding[encoding_name]

        except (KeyError, TypeError) as e:
            raise EditSettingsError(
                f"Unknown edit encoding: {encoding_name!r}",
                {'setting': 'encoding', 'value': encoding_name}
            ) from e

        return cls(
            encoding=encoding,
            max_retries=data.get("maxRetries", defaults.max_retries),
            tab_width=data.get("tabWidth", defaults.tab_width),
            context_lines=data.get("contextLines", defaults.context_lines),
            allow_full_rewrite=data.get("allowFullRewrite", defaults.allow_full_rewrite),
            history_size=data.get("historySize", defaults.history_size)
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to a JSON-serializable dictionary."""
        return {
            "encoding": self.encoding.name,
            "maxRetries": self.max_retries,
            "tabWidth": self.tab_width,
            "contextLines": self.context_lines,
            "allowFullRewrite": self.allow_full_rewrite,
            "historySize": self.history_size,
        }

    @classmethod
    def load(cls, path: str) -> "EditSettings":
        """
        Load settings from file.

        Args:
            path: Path to the settings file

        Returns:
            EditSettings object with loaded values

        Raises:
            json.JSONDecodeError: If file contains invalid JSON
            EditSettingsError: If a value is invalid
        """
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise EditSettingsError(f"Settings file must contain a JSON object: {path}")

        return cls.from_dict(data)

    def save(self, path: str) -> None:
        """
        Save settings to file.

        Args:
            path: Path to save the settings file

        Raises:
            OSError: If there's an issue creating the directory or writing the file
        """
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=4)
