"""Tests for line numbering helpers."""

from edit.edit_numbering import add_line_numbers, join_lines, split_lines


class TestSplitJoin:
    """Test line splitting."""

    def test_trailing_newline_gives_empty_line(self):
        """Test that a trailing newline yields a final empty line."""
        assert split_lines("a\nb\n") == ["a", "b", ""]

    def test_carriage_return_kept(self):
        """Test that only LF separates lines."""
        assert split_lines("a\r\nb") == ["a\r", "b"]

    def test_join_inverts_split(self):
        """Test that joining split lines restores the document."""
        document = "<p>\n\tx\r\n</p>\n"

        assert join_lines(split_lines(document)) == document


class TestAddLineNumbers:
    """Test numbered rendering."""

    def test_numbers_from_one(self):
        """Test default numbering."""
        assert add_line_numbers("<p>a</p>\n<p>b</p>") == "   1| <p>a</p>\n   2| <p>b</p>"

    def test_excerpt_keeps_document_numbers(self):
        """Test numbering an excerpt from its real start line."""
        assert add_line_numbers("x\ny", start_line=18) == "  18| x\n  19| y"

    def test_every_line_numbered(self, helpers):
        """Test that numbering adds exactly one prefix per line."""
        rendered = add_line_numbers(helpers.numbered_document(12))

        lines = rendered.split("\n")
        assert len(lines) == 12
        assert lines[11] == "  12| line 12"
