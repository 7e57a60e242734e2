"""Locating search snippets in a document with progressively fuzzier strategies."""

import logging
import re
from typing import Callable, List, Tuple

from edit.edit_exceptions import EditRegexError
from edit.edit_types import EditFailureKind, MatchResult, MatchStrategy


_LINE_BREAK = re.compile(r'\r\n|\r|\n')


class ContentLocator:
    """
    Find the unique span of a document that a search snippet refers to.

    Strategies are tried in strict order and the first that finds the
    snippet decides the result:

    1. exact substring match
    2. match after normalizing line endings, tabs and trailing whitespace
    3. match of trimmed, non-blank lines against a contiguous run of lines

    A snippet found at more than one location is never resolved to the
    first occurrence; the result reports the ambiguity instead.
    """

    def __init__(self, tab_width: int = 4):
        """
        Initialize the locator.

        Args:
            tab_width: Column width tabs expand to during whitespace normalization
        """
        self._tab_width = tab_width
        self._logger = logging.getLogger("ContentLocator")

    def locate(self, document: str, search: str) -> MatchResult:
        """
        Locate a search snippet.

        Args:
            document: Current document text
            search: Snippet proposed by the LLM

        Returns:
            MatchResult; found is False when the snippet is missing or ambiguous
        """
        if not search.strip():
            return MatchResult(found=False)

        strategies: List[Tuple[MatchStrategy, Callable[[str, str], List[Tuple[int, int]]]]] = [
            (MatchStrategy.EXACT, self._exact_spans),
            (MatchStrategy.NORMALIZED_WHITESPACE, self._normalized_spans),
            (MatchStrategy.TRIMMED_LINES, self._trimmed_line_spans),
        ]

        for strategy, find_spans in strategies:
            spans = find_spans(document, search)
            if not spans:
                continue

            start, end = spans[0]
            matched_text = document[start:end]
            match_count = len(spans)

            # The text actually being replaced must be unique as well
            if match_count == 1 and matched_text and document.find(matched_text, start + 1) != -1:
                match_count = 2

            self._logger.debug(
                "Snippet located by %s strategy at %d-%d (matches: %d)",
                strategy.value, start, end, match_count
            )
            return MatchResult(
                found=match_count == 1,
                start=start,
                end=end,
                matched_text=matched_text,
                strategy=strategy,
                match_count=match_count
            )

        return MatchResult(found=False)

    def locate_regex(self, document: str, pattern: str) -> MatchResult:
        """
        Locate the single match of a regular expression.

        The pattern is compiled with MULTILINE and DOTALL semantics and must
        match exactly one location.

        Args:
            document: Current document text
            pattern: Regular expression proposed by the LLM

        Returns:
            MatchResult; found is False for zero or several matches

        Raises:
            EditRegexError: If the pattern does not compile
        """
        try:
            compiled = re.compile(pattern, re.MULTILINE | re.DOTALL)

        except re.error as e:
            raise EditRegexError(
                f"Invalid regex pattern: {e}",
                EditFailureKind.REGEX_INVALID_PATTERN,
                {'pattern': pattern, 'error': str(e)}
            ) from e

        matches = []
        for match in compiled.finditer(document):
            matches.append(match)
            if len(matches) > 1:
                break

        if not matches:
            return MatchResult(found=False, strategy=MatchStrategy.REGEX)

        first = matches[0]
        return MatchResult(
            found=len(matches) == 1,
            start=first.start(),
            end=first.end(),
            matched_text=first.group(0),
            strategy=MatchStrategy.REGEX,
            match_count=len(matches),
            regex_match=first
        )

    def _exact_spans(self, document: str, search: str) -> List[Tuple[int, int]]:
        """Byte-identical substring match; returns at most two spans."""
        idx = document.find(search)
        if idx == -1:
            return []

        spans = [(idx, idx + len(search))]
        second = document.find(search, idx + 1)
        if second != -1:
            spans.append((second, second + len(search)))

        return spans

    def _normalize_line(self, line: str) -> str:
        """Expand tabs and drop trailing whitespace."""
        return line.expandtabs(self._tab_width).rstrip()

    def _normalized_spans(self, document: str, search: str) -> List[Tuple[int, int]]:
        """
        Match after normalizing both sides, mapping hits back onto the original.

        Normalization keeps one line per original line, so a hit in normalized
        text is translated to (line, column) and then to an original offset.

        Args:
            document: Current document text
            search: Snippet proposed by the LLM

        Returns:
            At most two (start, end) spans in the original document
        """
        line_spans = _line_spans(document)
        normalized_lines = [self._normalize_line(document[s:e]) for s, e in line_spans]
        normalized_doc = "\n".join(normalized_lines)
        normalized_search = "\n".join(
            self._normalize_line(search[s:e]) for s, e in _line_spans(search)
        )

        if not normalized_search.strip():
            return []

        normalized_starts = [0]
        for line in normalized_lines[:-1]:
            normalized_starts.append(normalized_starts[-1] + len(line) + 1)

        spans: List[Tuple[int, int]] = []
        idx = normalized_doc.find(normalized_search)
        while idx != -1 and len(spans) < 2:
            end = idx + len(normalized_search)
            spans.append((
                self._to_original(document, line_spans, normalized_lines, normalized_starts, idx, is_start=True),
                self._to_original(document, line_spans, normalized_lines, normalized_starts, end)
            ))
            idx = normalized_doc.find(normalized_search, idx + 1)

        return spans

    def _to_original(
        self,
        document: str,
        line_spans: List[Tuple[int, int]],
        normalized_lines: List[str],
        normalized_starts: List[int],
        offset: int,
        is_start: bool = False
    ) -> int:
        """
        Translate an offset in the normalized document to the original document.

        Args:
            document: Original document
            line_spans: (content start, content end) of each original line
            normalized_lines: Normalized text of each line
            normalized_starts: Offset of each normalized line in the normalized document
            offset: Offset to translate
            is_start: Whether offset starts a match; a start inside the line's
                indentation is moved to the beginning of the line

        Returns:
            Offset in the original document
        """
        line = _line_index(normalized_starts, offset)
        column = offset - normalized_starts[line]
        start, end = line_spans[line]
        original_line = document[start:end]

        normalized_line = normalized_lines[line]
        if is_start and column < len(normalized_line) - len(normalized_line.lstrip()):
            return start

        # Anything at or past the normalized end maps to the end of real content
        if column >= len(normalized_lines[line]):
            return start + len(original_line.rstrip())

        expanded = 0
        for i, ch in enumerate(original_line):
            if expanded >= column:
                return start + i

            if ch == '\t':
                expanded += self._tab_width - (expanded % self._tab_width)

            else:
                expanded += 1

        return start + len(original_line)

    def _trimmed_line_spans(self, document: str, search: str) -> List[Tuple[int, int]]:
        """
        Match stripped, non-blank snippet lines against a contiguous run of lines.

        Args:
            document: Current document text
            search: Snippet proposed by the LLM

        Returns:
            At most two (start, end) spans covering whole lines, excluding the final line break
        """
        wanted = [line.strip() for line in _LINE_BREAK.split(search) if line.strip()]
        if not wanted:
            return []

        line_spans = _line_spans(document)
        trimmed = [document[s:e].strip() for s, e in line_spans]

        spans: List[Tuple[int, int]] = []
        for i in range(len(trimmed) - len(wanted) + 1):
            if trimmed[i:i + len(wanted)] == wanted:
                spans.append((line_spans[i][0], line_spans[i + len(wanted) - 1][1]))
                if len(spans) > 1:
                    break

        return spans


def _line_spans(text: str) -> List[Tuple[int, int]]:
    """Get (content start, content end) for each line, excluding line breaks."""
    spans: List[Tuple[int, int]] = []
    pos = 0
    for match in _LINE_BREAK.finditer(text):
        spans.append((pos, match.start()))
        pos = match.end()

    spans.append((pos, len(text)))
    return spans


def _line_index(line_starts: List[int], offset: int) -> int:
    """Find the line containing offset, given ascending line start offsets."""
    low, high = 0, len(line_starts) - 1
    while low < high:
        mid = (low + high + 1) // 2
        if line_starts[mid] <= offset:
            low = mid

        else:
            high = mid - 1

    return low
