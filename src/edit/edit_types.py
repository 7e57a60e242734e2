"""Shared dataclasses for edit operations."""

from dataclasses import dataclass, field
from enum import Enum
import re
from typing import Any, Dict, List


class EditEncoding(Enum):
    """Encodings an LLM can use to describe edits."""
    SEARCH_REPLACE = "search_replace"  # Content-addressed SEARCH/REPLACE blocks
    LINE_RANGE = "line_range"          # Numbered [start-end] line replacements


class MatchStrategy(Enum):
    """Strategy that located a search snippet."""
    EXACT = "exact"
    NORMALIZED_WHITESPACE = "normalized_whitespace"
    TRIMMED_LINES = "trimmed_lines"
    REGEX = "regex"


class EditFailureKind(Enum):
    """Classification of why an edit could not be applied."""
    PARSE_FAILURE = "parse_failure"
    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"
    EMPTY_SEARCH = "empty_search"
    REGEX_NO_MATCH = "regex_no_match"
    REGEX_MULTIPLE_MATCHES = "regex_multiple_matches"
    REGEX_INVALID_PATTERN = "regex_invalid_pattern"
    RANGE_INVALID = "range_invalid"
    RANGE_OVERLAP = "range_overlap"


@dataclass
class SearchReplaceBlock:
    """Replace the unique span of the document matching `search`."""

    search: str
    replace: str


@dataclass
class RegexReplaceBlock:
    """Replace the single location matched by a regular expression."""

    pattern: str
    replace: str


@dataclass
class LineEditBlock:
    """Replace an inclusive range of lines (1-indexed, as numbered in the prompt)."""

    start_line: int
    end_line: int
    new_content: str


EditBlock = SearchReplaceBlock | RegexReplaceBlock | LineEditBlock


@dataclass
class MatchResult:
    """Result of attempting to locate a search snippet in a document."""

    found: bool
    start: int = -1
    end: int = -1
    matched_text: str = ""  # Verbatim slice of the document that would be replaced
    strategy: MatchStrategy | None = None
    match_count: int = 0  # 0, 1, or 2 meaning "more than one"
    regex_match: re.Match[str] | None = field(default=None, repr=False, compare=False)  # First match, regex strategy only

    @property
    def ambiguous(self) -> bool:
        """True when the snippet matched more than one location."""
        return self.match_count > 1


@dataclass
class FailedBlock:
    """A block that could not be applied."""

    index: int  # 0-indexed position of the block in the input list
    reason: str
    kind: EditFailureKind
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ApplyResult:
    """Outcome of one application pass."""

    success: bool  # Every block applied
    html: str
    applied_count: int = 0
    failed_blocks: List[FailedBlock] = field(default_factory=list)
    any_applied: bool = False  # At least one block applied

    @property
    def partial_success(self) -> bool:
        """True when some, but not all, blocks applied."""
        return self.any_applied and not self.success


@dataclass
class ParseResult:
    """Edits extracted from one LLM response."""

    blocks: List[EditBlock]
    encoding: EditEncoding
    no_changes: bool = False
    full_document: str | None = None
    full_document_rejected: bool = False
    raw_response: str = ""

    @property
    def has_blocks(self) -> bool:
        """True if at least one usable block was parsed."""
        return len(self.blocks) > 0
