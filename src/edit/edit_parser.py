"""Parsing of LLM responses into edit blocks."""

import logging
import re
from typing import Callable, List, Tuple

from edit.edit_exceptions import EditParseError
from edit.edit_types import (
    EditBlock,
    EditEncoding,
    LineEditBlock,
    ParseResult,
    RegexReplaceBlock,
    SearchReplaceBlock,
)


class EditParser:
    """Parser for SEARCH/REPLACE and line-range edit responses."""

    NO_CHANGES_PHRASES = (
        "no changes required",
        "no changes needed",
        "no changes necessary",
        "no change needed",
        "no changes are needed",
        "no changes are required",
    )

    # Marker lines tolerate 6-7 marker characters and trailing colons/whitespace
    SEARCH_MARKER = re.compile(r'^\s*<{6,7}\s*SEARCH(?:\s+(REGEX))?\s*:*\s*$', re.IGNORECASE)
    DIVIDER_MARKER = re.compile(r'^\s*={6,7}\s*:*\s*$')
    REPLACE_MARKER = re.compile(r'^\s*>{6,7}\s*REPLACE\s*:*\s*$', re.IGNORECASE)

    # Paired code fences: group 1 is the info string label, group 2 the body
    FENCE_PATTERN = re.compile(
        r'^[ \t]*```[ \t]*([\w-]*)[^\n]*\n(.*?)^[ \t]*```[ \t]*$',
        re.MULTILINE | re.DOTALL
    )

    RANGE_HEADER = re.compile(r'^\s*\[(\d+)\s*[-–]\s*(\d+)\]\s*:?\s*$')
    # Free text such as "Replace lines 3-4:" on the line before a fence
    LINES_HEADER = re.compile(r'\blines?\s*(\d+)\s*[-–]\s*(\d+)\s*:?\s*$', re.IGNORECASE)

    FULL_DOCUMENT_START = re.compile(r'^\s*(?:<!doctype\b|<html\b)', re.IGNORECASE)
    FULL_DOCUMENT_SPAN = re.compile(r'<!doctype\b.*</html>', re.IGNORECASE | re.DOTALL)
    OUTER_FENCE = re.compile(r'^```[\w-]*[ \t]*\n(.*?)\n?```\s*$', re.DOTALL)

    def __init__(
        self,
        encoding: EditEncoding = EditEncoding.SEARCH_REPLACE,
        allow_full_rewrite: bool = False
    ):
        """
        Initialize the parser.

        Args:
            encoding: Edit encoding the LLM was asked to use
            allow_full_rewrite: Accept a complete HTML document instead of edits
        """
        self._encoding = encoding
        self._allow_full_rewrite = allow_full_rewrite
        self._logger = logging.getLogger("EditParser")

    def encoding(self) -> EditEncoding:
        """Get the encoding this parser reads."""
        return self._encoding

    def parse(self, raw_text: str) -> ParseResult:
        """
        Parse an LLM response into edit blocks.

        An empty block list is not an error: it means no usable edits were
        produced and the caller decides whether to retry.

        Args:
            raw_text: Complete LLM response

        Returns:
            ParseResult describing the blocks or the response's other meaning

        Raises:
            EditParseError: If raw_text is not a string
        """
        if not isinstance(raw_text, str):
            raise EditParseError(
                f"LLM response must be a string, got {type(raw_text).__name__}",
                {'phase': 'parsing', 'received_type': type(raw_text).__name__}
            )

        result = ParseResult(blocks=[], encoding=self._encoding, raw_response=raw_text)

        if self._is_no_changes(raw_text):
            result.no_changes = True
            return result

        full_document = self._extract_full_document(raw_text)
        if full_document is not None:
            if self._allow_full_rewrite:
                result.full_document = full_document
                return result

            self._logger.warning("Rejected full-document output (%d chars)", len(full_document))
            result.full_document_rejected = True
            return result

        if self._encoding == EditEncoding.LINE_RANGE:
            result.blocks = self._parse_line_blocks(raw_text)

        else:
            result.blocks = self._parse_search_replace_blocks(raw_text)

        self._logger.debug("Parsed %d %s block(s)", len(result.blocks), self._encoding.value)
        return result

    def _is_no_changes(self, raw_text: str) -> bool:
        """Check for a "no changes" reply."""
        lower = raw_text.strip().lower()
        return any(phrase in lower for phrase in self.NO_CHANGES_PHRASES)

    def _extract_full_document(self, raw_text: str) -> str | None:
        """
        Detect a response that is a whole HTML document.

        Args:
            raw_text: Complete LLM response

        Returns:
            The document text, or None if the response is not a full document
        """
        text = raw_text.strip()
        fenced = self.OUTER_FENCE.match(text)
        if fenced:
            text = fenced.group(1).strip()

        if not self.FULL_DOCUMENT_START.match(text):
            return None

        span = self.FULL_DOCUMENT_SPAN.search(text)
        if span:
            return span.group(0)

        return text

    def _parse_search_replace_blocks(self, raw_text: str) -> List[EditBlock]:
        """Parse marker blocks, falling back to labelled code fences."""
        blocks = self._parse_marker_blocks(raw_text)
        if not blocks:
            blocks = self._parse_fenced_search_replace(raw_text)

        return blocks

    def _parse_marker_blocks(self, raw_text: str) -> List[EditBlock]:
        """
        Parse <<<<<<< SEARCH / ======= / >>>>>>> REPLACE blocks.

        Args:
            raw_text: Complete LLM response

        Returns:
            Parsed blocks in response order
        """
        lines = raw_text.splitlines()
        blocks: List[EditBlock] = []

        i = 0
        while i < len(lines):
            head = self.SEARCH_MARKER.match(lines[i])
            if not head:
                i += 1
                continue

            is_regex = head.group(1) is not None
            i += 1

            search_lines: List[str] = []
            while i < len(lines) and not self.DIVIDER_MARKER.match(lines[i]):
                search_lines.append(lines[i])
                i += 1

            if i >= len(lines):
                self._logger.warning("Unterminated SEARCH block (no divider)")
                break

            i += 1

            replace_lines: List[str] = []
            while i < len(lines) and not self.REPLACE_MARKER.match(lines[i]):
                replace_lines.append(lines[i])
                i += 1

            if i >= len(lines):
                self._logger.warning("Unterminated SEARCH block (no REPLACE marker)")
                break

            i += 1

            block = self._make_content_block("\n".join(search_lines), "\n".join(replace_lines), is_regex)
            if block is not None:
                blocks.append(block)

        return blocks

    def _parse_fenced_search_replace(self, raw_text: str) -> List[EditBlock]:
        """Parse ```search fences each followed by a ```replace fence."""
        fences = self._find_fences(raw_text)
        blocks: List[EditBlock] = []

        i = 0
        while i < len(fences) - 1:
            label, body, _ = fences[i]
            next_label, next_body, _ = fences[i + 1]
            if label in ("search", "search-regex") and next_label == "replace":
                block = self._make_content_block(body, next_body, label == "search-regex")
                if block is not None:
                    blocks.append(block)

                i += 2
                continue

            i += 1

        return blocks

    def _make_content_block(self, search: str, replace: str, is_regex: bool) -> EditBlock | None:
        """Build a content-addressed block, dropping ones with nothing to search for."""
        if not search.strip():
            self._logger.warning("Dropped block with empty %s", "pattern" if is_regex else "SEARCH")
            return None

        if is_regex:
            return RegexReplaceBlock(pattern=search.strip(), replace=replace)

        return SearchReplaceBlock(search=search, replace=replace)

    def _parse_line_blocks(self, raw_text: str) -> List[EditBlock]:
        """
        Parse line-range blocks, trying each header phrasing in priority order.

        Args:
            raw_text: Complete LLM response

        Returns:
            Blocks from the first phrasing that yields any
        """
        fences = self._find_fences(raw_text)
        finders: List[Callable[[str, List[Tuple[str, str, int]]], List[EditBlock]]] = [
            self._ranges_inside_fences,
            lambda text, found: self._ranges_before_fences(text, found, self.RANGE_HEADER),
            lambda text, found: self._ranges_before_fences(text, found, self.LINES_HEADER),
        ]

        for finder in finders:
            blocks = finder(raw_text, fences)
            if blocks:
                return blocks

        return []

    def _ranges_inside_fences(self, _raw_text: str, fences: List[Tuple[str, str, int]]) -> List[EditBlock]:
        """Fences whose first line is a [start-end] header."""
        blocks: List[EditBlock] = []
        for _, body, _ in fences:
            first, _, rest = body.partition("\n")
            header = self.RANGE_HEADER.match(first)
            if not header:
                continue

            block = self._make_line_block(header.group(1), header.group(2), rest)
            if block is not None:
                blocks.append(block)

        return blocks

    def _ranges_before_fences(
        self,
        raw_text: str,
        fences: List[Tuple[str, str, int]],
        header_pattern: re.Pattern[str]
    ) -> List[EditBlock]:
        """Fences preceded by a header line matching header_pattern."""
        blocks: List[EditBlock] = []
        for _, body, fence_start in fences:
            preceding = raw_text[:fence_start].rstrip().rsplit("\n", 1)[-1]
            header = header_pattern.search(preceding)
            if not header:
                continue

            block = self._make_line_block(header.group(1), header.group(2), body)
            if block is not None:
                blocks.append(block)

        return blocks

    def _make_line_block(self, start: str, end: str, content: str) -> LineEditBlock | None:
        """Build a line block, dropping nonsensical ranges."""
        start_line = int(start)
        end_line = int(end)
        if start_line < 1 or end_line < start_line:
            self._logger.warning("Dropped invalid line range [%d-%d]", start_line, end_line)
            return None

        return LineEditBlock(start_line=start_line, end_line=end_line, new_content=content.rstrip())

    def _find_fences(self, raw_text: str) -> List[Tuple[str, str, int]]:
        """
        Find paired code fences.

        Args:
            raw_text: Complete LLM response

        Returns:
            List of (lower-cased label, body without its final newline, fence start offset)
        """
        fences: List[Tuple[str, str, int]] = []
        for match in self.FENCE_PATTERN.finditer(raw_text):
            body = match.group(2)
            if body.endswith("\n"):
                body = body[:-1]

            fences.append((match.group(1).lower(), body, match.start()))

        return fences
