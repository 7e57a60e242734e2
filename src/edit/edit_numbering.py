"""Line numbering for documents embedded in prompts."""

from typing import List


def split_lines(document: str) -> List[str]:
    """
    Split a document into lines the way line-range edits address them.

    Only '\\n' separates lines, so a trailing newline yields a final empty line
    and any '\\r' stays part of its line.

    Args:
        document: Document text

    Returns:
        List of lines
    """
    return document.split("\n")


def join_lines(lines: List[str]) -> str:
    """Inverse of split_lines."""
    return "\n".join(lines)


def add_line_numbers(document: str, start_line: int = 1) -> str:
    """
    Render a document with right-aligned 1-based line numbers.

    Args:
        document: Document text (or an excerpt of one)
        start_line: Number given to the first line, so excerpts keep their
            position in the full document

    Returns:
        Text where each line reads "  12| <original line>"
    """
    return "\n".join(
        f"{start_line + i:4d}| {line}" for i, line in enumerate(split_lines(document))
    )
