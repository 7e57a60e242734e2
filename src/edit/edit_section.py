"""Extraction of the document section an edit instruction refers to."""

from dataclasses import dataclass
import logging
import re
from typing import List, Tuple

from edit.edit_numbering import join_lines, split_lines


@dataclass
class SectionExcerpt:
    """A tag-balanced excerpt of a document with surrounding context."""

    section: str
    start_line: int  # 1-indexed, inclusive
    end_line: int  # 1-indexed, inclusive


def _class_contains(name: str) -> re.Pattern[str]:
    return re.compile(rf'class="[^"]*{name}[^"]*"', re.IGNORECASE)


class SectionExtractor:
    """Find a balanced block of HTML matching the section an instruction names."""

    # (instruction keywords, patterns recognizing the first line of the section)
    SECTION_FAMILIES: List[Tuple[Tuple[str, ...], Tuple[re.Pattern[str], ...]]] = [
        (
            ("header", "navbar", "nav ", "navigation", "menu"),
            (re.compile(r'<header[\s>]', re.IGNORECASE), re.compile(r'<nav[\s>]', re.IGNORECASE), _class_contains("nav"))
        ),
        (
            ("footer",),
            (re.compile(r'<footer[\s>]', re.IGNORECASE), _class_contains("footer"))
        ),
        (
            ("hero", "banner", "jumbotron"),
            (_class_contains("hero"), _class_contains("banner"))
        ),
        (
            ("about",),
            (re.compile(r'id="about"', re.IGNORECASE), _class_contains("about"))
        ),
        (
            ("contact",),
            (re.compile(r'id="contact"', re.IGNORECASE), _class_contains("contact"), re.compile(r'<form', re.IGNORECASE))
        ),
        (
            ("pricing",),
            (re.compile(r'id="pricing"', re.IGNORECASE), _class_contains("pricing"))
        ),
        (
            ("features",),
            (re.compile(r'id="features"', re.IGNORECASE), _class_contains("features"))
        ),
        (
            ("testimonial",),
            (re.compile(r'id="testimonial', re.IGNORECASE), _class_contains("testimonial"))
        ),
    ]

    VOID_ELEMENTS = frozenset((
        "area", "base", "br", "col", "embed", "hr", "img", "input",
        "link", "meta", "param", "source", "track", "wbr",
    ))

    OPEN_TAG = re.compile(r'<([a-z][a-z0-9-]*)\b[^>]*?(/?)>', re.IGNORECASE)
    OPEN_TAG_START = re.compile(r'<([a-z][a-z0-9-]*)', re.IGNORECASE)
    CLOSE_TAG = re.compile(r'</[a-z]', re.IGNORECASE)

    def __init__(self, context_lines: int = 2):
        """
        Initialize the extractor.

        Args:
            context_lines: Lines of surrounding context added on each side
        """
        self._context_lines = context_lines
        self._logger = logging.getLogger("SectionExtractor")

    def extract(self, document: str, instruction: str) -> SectionExcerpt | None:
        """
        Extract the section an instruction refers to.

        Args:
            document: Full document text
            instruction: Natural-language edit instruction

        Returns:
            The excerpt, or None if no section could be identified (callers
            should then send the whole document)
        """
        lower = instruction.lower()
        lines = split_lines(document)

        for keywords, patterns in self.SECTION_FAMILIES:
            if not any(keyword in lower for keyword in keywords):
                continue

            found = self._find_balanced_region(lines, patterns)
            if found is None:
                continue

            start_idx, end_idx = found
            context_start = max(0, start_idx - self._context_lines)
            context_end = min(len(lines) - 1, end_idx + self._context_lines)

            self._logger.debug(
                "Extracted %s section at lines %d-%d", keywords[0].strip(), context_start + 1, context_end + 1
            )
            return SectionExcerpt(
                section=join_lines(lines[context_start:context_end + 1]),
                start_line=context_start + 1,
                end_line=context_end + 1
            )

        return None

    def _find_balanced_region(
        self,
        lines: List[str],
        patterns: Tuple[re.Pattern[str], ...]
    ) -> Tuple[int, int] | None:
        """
        Find the first recognized line and the line where its tags balance.

        Args:
            lines: Document lines
            patterns: Patterns recognizing the section's first line

        Returns:
            (start index, end index), 0-indexed inclusive, or None
        """
        start_idx = -1
        depth = 0

        for i, line in enumerate(lines):
            if start_idx == -1:
                if not any(pattern.search(line) for pattern in patterns):
                    continue

                start_idx = i

            depth += self._tag_depth_change(line)
            if depth <= 0:
                return start_idx, i

        return None

    def _tag_depth_change(self, line: str) -> int:
        """Count opening tags minus closing tags, ignoring void and self-closing tags."""
        opens = 0
        for match in self.OPEN_TAG.finditer(line):
            if match.group(1).lower() in self.VOID_ELEMENTS or match.group(2):
                continue

            opens += 1

        # Tags whose '>' falls on a later line still open a level
        last_gt = line.rfind('>')
        for match in self.OPEN_TAG_START.finditer(line, last_gt + 1):
            if match.group(1).lower() not in self.VOID_ELEMENTS:
                opens += 1

        return opens - len(self.CLOSE_TAG.findall(line))
