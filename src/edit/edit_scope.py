"""Classification of how much of a document an edit instruction touches."""

import re
from enum import Enum


class EditScope(Enum):
    """How much of the document an instruction is expected to change."""
    TARGETED = "targeted"
    SECTION = "section"
    GLOBAL = "global"


class EditScopeClassifier:
    """Keyword-based classifier for edit instructions."""

    GLOBAL_KEYWORDS = (
        "all ",
        "every ",
        "entire ",
        "whole ",
        "throughout",
        "color scheme",
        "theme",
        "dark mode",
        "light mode",
    )

    SECTION_KEYWORDS = (
        "header",
        "footer",
        "navbar",
        "nav ",
        "hero",
        "about",
        "contact",
        "pricing",
        "features",
        "testimonials",
        "section",
        "sidebar",
        "menu",
        "banner",
    )

    NEW_DESIGN_PATTERN = re.compile(
        r'(?:start\s*over|start\s*fresh|from\s*scratch|completely\s*new|brand\s*new|discard\s*this|'
        r'forget\s*this|new\s*website|new\s*page|replace\s*everything|redo\s*everything)',
        re.IGNORECASE
    )

    def classify(self, instruction: str) -> EditScope:
        """
        Classify an edit instruction.

        Global keywords win over section keywords, so "change the whole
        theme's header color" is global: a section excerpt would be too narrow.

        Args:
            instruction: Natural-language edit instruction

        Returns:
            The instruction's scope
        """
        lower = instruction.lower()

        if any(keyword in lower for keyword in self.GLOBAL_KEYWORDS):
            return EditScope.GLOBAL

        if any(keyword in lower for keyword in self.SECTION_KEYWORDS):
            return EditScope.SECTION

        return EditScope.TARGETED

    def is_new_design_request(self, instruction: str) -> bool:
        """Check whether the user is asking for a fresh design rather than an edit."""
        return self.NEW_DESIGN_PATTERN.search(instruction) is not None

    def is_edit_request(self, message: str, has_existing_html: bool) -> bool:
        """
        Decide whether a chat message edits the existing page.

        Args:
            message: User message
            has_existing_html: Whether a document already exists

        Returns:
            True unless there is no document or the user wants to start over
        """
        if not has_existing_html:
            return False

        return not self.is_new_design_request(message)
