"""Application of edit blocks to a document."""

import logging
import re
from typing import List, Tuple

from edit.edit_exceptions import EditBlockError, EditLocateError, EditRangeError, EditRegexError
from edit.edit_locator import ContentLocator
from edit.edit_numbering import join_lines, split_lines
from edit.edit_types import (
    ApplyResult,
    EditBlock,
    EditFailureKind,
    FailedBlock,
    LineEditBlock,
    RegexReplaceBlock,
    SearchReplaceBlock,
)


class EditApplier:
    """
    Apply a batch of edit blocks to a document.

    Blocks are applied independently: a block that cannot be applied is
    recorded as a failure and the remaining blocks are still attempted.
    The input document is never modified; a new string is returned.
    """

    def __init__(self, locator: ContentLocator | None = None):
        """
        Initialize the applier.

        Args:
            locator: Locator used for content-addressed blocks
        """
        self._locator = locator if locator is not None else ContentLocator()
        self._logger = logging.getLogger("EditApplier")

    def apply(self, document: str, blocks: List[EditBlock]) -> ApplyResult:
        """
        Apply edit blocks to a document.

        Line-addressed blocks all refer to the numbering of the incoming
        document, so they are applied first, from the bottom of the document
        up. A line block whose range overlaps one already applied fails with
        RANGE_OVERLAP instead of being spliced. Content-addressed blocks are
        then applied in input order, each against the document as left by the
        blocks before it.

        Args:
            document: Current document text
            blocks: Blocks to apply

        Returns:
            ApplyResult with the new document and per-block failures
        """
        line_blocks: List[Tuple[int, LineEditBlock]] = []
        content_blocks: List[Tuple[int, SearchReplaceBlock | RegexReplaceBlock]] = []

        for idx, block in enumerate(blocks):
            if isinstance(block, LineEditBlock):
                line_blocks.append((idx, block))

            elif isinstance(block, (SearchReplaceBlock, RegexReplaceBlock)):
                content_blocks.append((idx, block))

            else:
                raise TypeError(f"Unsupported edit block type: {type(block).__name__}")

        html = document
        applied_count = 0
        failed_blocks: List[FailedBlock] = []

        if line_blocks:
            lines = split_lines(html)
            total_lines = len(lines)

            # Sorting is stable, so blocks sharing a start line keep their input order
            sorted_blocks = sorted(line_blocks, key=lambda item: item[1].start_line, reverse=True)

            # Lowest range accepted so far as (block index, start line); blocks run bottom to top
            accepted: Tuple[int, int] | None = None
            for idx, line_block in sorted_blocks:
                try:
                    start_line, end_line = self._clamp_line_range(line_block, total_lines)
                    if accepted is not None and end_line >= accepted[1]:
                        raise EditRangeError(
                            f"Line range [{line_block.start_line}-{line_block.end_line}] "
                            f"overlaps block {accepted[0] + 1}",
                            EditFailureKind.RANGE_OVERLAP,
                            {
                                'phase': 'validation',
                                'start_line': line_block.start_line,
                                'end_line': line_block.end_line,
                                'overlapping_block': accepted[0],
                                'suggestion': 'Line ranges in one response must not overlap. Combine them into one block.'
                            }
                        )

                    lines = self._splice_lines(lines, start_line, end_line, line_block.new_content)
                    accepted = (idx, start_line)
                    applied_count += 1

                except EditRangeError as e:
                    failed_blocks.append(self._failure(idx, e))

            html = join_lines(lines)

        for idx, content_block in content_blocks:
            try:
                if isinstance(content_block, RegexReplaceBlock):
                    html = self._apply_regex_block(content_block, html)

                else:
                    html = self._apply_search_replace_block(content_block, html)

                applied_count += 1

            except (EditLocateError, EditRegexError) as e:
                failed_blocks.append(self._failure(idx, e))

        failed_blocks.sort(key=lambda failure: failure.index)

        if failed_blocks:
            self._logger.info(
                "Applied %d of %d block(s); %d failed",
                applied_count, len(blocks), len(failed_blocks)
            )

        return ApplyResult(
            success=not failed_blocks,
            html=html,
            applied_count=applied_count,
            failed_blocks=failed_blocks,
            any_applied=applied_count > 0
        )

    def _failure(self, idx: int, error: EditBlockError) -> FailedBlock:
        """Convert a block error into a failure record."""
        self._logger.warning("Block %d failed: %s", idx + 1, error)
        return FailedBlock(
            index=idx,
            reason=str(error),
            kind=error.kind,
            details=error.error_details or {}
        )

    def _apply_search_replace_block(self, block: SearchReplaceBlock, document: str) -> str:
        """
        Splice a search/replace block into the document.

        Args:
            block: Block to apply
            document: Current document text

        Returns:
            New document text

        Raises:
            EditLocateError: If the snippet is empty, missing or ambiguous
        """
        if not block.search.strip():
            raise EditLocateError(
                "SEARCH block is empty",
                EditFailureKind.EMPTY_SEARCH,
                {'phase': 'matching'}
            )

        match = self._locator.locate(document, block.search)
        if match.ambiguous:
            raise EditLocateError(
                "SEARCH matched multiple locations (multiple matches found) - add more context",
                EditFailureKind.AMBIGUOUS,
                {
                    'phase': 'matching',
                    'search': block.search,
                    'strategy': match.strategy.value if match.strategy else None,
                    'first_match': match.matched_text,
                    'suggestion': 'Include more surrounding lines so the SEARCH text is unique.'
                }
            )

        if not match.found:
            raise EditLocateError(
                "SEARCH not found in document",
                EditFailureKind.NOT_FOUND,
                {
                    'phase': 'matching',
                    'search': block.search,
                    'suggestion': 'Copy the SEARCH text exactly from the current document.'
                }
            )

        return document[:match.start] + block.replace + document[match.end:]

    def _apply_regex_block(self, block: RegexReplaceBlock, document: str) -> str:
        """
        Replace the single match of a regex block.

        Args:
            block: Block to apply
            document: Current document text

        Returns:
            New document text

        Raises:
            EditRegexError: If the pattern is invalid or does not match exactly once
        """
        match = self._locator.locate_regex(document, block.pattern)
        if match.ambiguous:
            raise EditRegexError(
                "Regex matched multiple locations - make the pattern more specific",
                EditFailureKind.REGEX_MULTIPLE_MATCHES,
                {'phase': 'matching', 'pattern': block.pattern}
            )

        if not match.found or match.regex_match is None:
            raise EditRegexError(
                "Regex pattern did not match the document",
                EditFailureKind.REGEX_NO_MATCH,
                {'phase': 'matching', 'pattern': block.pattern}
            )

        try:
            replacement = match.regex_match.expand(block.replace)

        except (re.error, IndexError) as e:
            raise EditRegexError(
                f"Invalid regex replacement: {e}",
                EditFailureKind.REGEX_INVALID_PATTERN,
                {'phase': 'replacement', 'pattern': block.pattern, 'replace': block.replace}
            ) from e

        return document[:match.start] + replacement + document[match.end:]

    def _clamp_line_range(self, block: LineEditBlock, total_lines: int) -> Tuple[int, int]:
        """
        Validate a line range and clamp it to the document.

        LLMs often report ranges that drift by a line or run past the end, so
        such ranges are clamped rather than rejected.

        Args:
            block: Block to check
            total_lines: Number of lines in the incoming document

        Returns:
            Clamped (start line, end line), 1-indexed inclusive

        Raises:
            EditRangeError: If the range is nonsensical
        """
        if block.start_line < 1 or block.end_line < block.start_line:
            raise EditRangeError(
                f"Invalid line range [{block.start_line}-{block.end_line}]",
                EditFailureKind.RANGE_INVALID,
                {'phase': 'validation', 'start_line': block.start_line, 'end_line': block.end_line}
            )

        start_line = max(1, min(block.start_line, total_lines))
        end_line = max(start_line, min(block.end_line, total_lines))

        if (start_line, end_line) != (block.start_line, block.end_line):
            self._logger.debug(
                "Clamped line range [%d-%d] to [%d-%d] (%d lines)",
                block.start_line, block.end_line, start_line, end_line, total_lines
            )

        return start_line, end_line

    def _splice_lines(self, lines: List[str], start_line: int, end_line: int, new_content: str) -> List[str]:
        """Replace an inclusive line range; empty content deletes it."""
        new_lines = split_lines(new_content) if new_content else []
        return lines[:start_line - 1] + new_lines + lines[end_line:]
