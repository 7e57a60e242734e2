"""Tests for the content locator."""

import pytest

from edit.edit_exceptions import EditRegexError
from edit.edit_locator import ContentLocator
from edit.edit_types import EditFailureKind, MatchStrategy


class TestExactMatch:
    """Test the exact substring strategy."""

    def test_exact_match(self, locator):
        """Test a byte-identical match."""
        document = "<div><p>Hi</p></div>"

        result = locator.locate(document, "<p>Hi</p>")

        assert result.found is True
        assert result.strategy == MatchStrategy.EXACT
        assert (result.start, result.end) == (5, 14)
        assert result.matched_text == "<p>Hi</p>"
        assert result.match_count == 1

    def test_not_found(self, locator):
        """Test a snippet that is not in the document under any strategy."""
        result = locator.locate("<div></div>", "<span>missing</span>")

        assert result.found is False
        assert result.strategy is None
        assert result.match_count == 0

    def test_empty_search_never_matches(self, locator):
        """Test that blank snippets are rejected."""
        assert locator.locate("abc", "").found is False
        assert locator.locate("abc", "  \n\t").found is False

    def test_duplicate_is_ambiguous(self, locator):
        """Test that two identical copies are reported, not resolved."""
        document = "<li>Item</li>\n<li>Item</li>"

        result = locator.locate(document, "<li>Item</li>")

        assert result.found is False
        assert result.ambiguous is True
        assert result.strategy == MatchStrategy.EXACT

    def test_overlapping_duplicate_is_ambiguous(self, locator):
        """Test overlapping occurrences count as ambiguous."""
        result = locator.locate("aaa", "aa")

        assert result.ambiguous is True


class TestNormalizedWhitespaceMatch:
    """Test the whitespace-normalizing strategy."""

    def test_trailing_spaces_in_document(self, locator):
        """Test a document line with trailing spaces the snippet lacks."""
        document = "<div>\n    <p>Hi</p>   \n</div>\n"

        result = locator.locate(document, "    <p>Hi</p>\n</div>")

        assert result.found is True
        assert result.strategy == MatchStrategy.NORMALIZED_WHITESPACE
        assert result.matched_text == "    <p>Hi</p>   \n</div>"

    def test_tab_versus_spaces(self, locator):
        """Test a snippet using spaces where the document uses a tab."""
        document = "<ul>\n\t<li>One</li>\n\t<li>Two</li>\n</ul>"

        result = locator.locate(document, "    <li>One</li>\n    <li>Two</li>")

        assert result.found is True
        assert result.strategy == MatchStrategy.NORMALIZED_WHITESPACE
        assert result.matched_text == "\t<li>One</li>\n\t<li>Two</li>"

    def test_crlf_document(self, locator):
        """Test an LF snippet against a CRLF document."""
        document = "<p>a</p>\r\n<p>b</p>\r\n<p>c</p>"

        result = locator.locate(document, "<p>a</p>\n<p>b</p>")

        assert result.found is True
        assert result.strategy == MatchStrategy.NORMALIZED_WHITESPACE
        assert result.matched_text == "<p>a</p>\r\n<p>b</p>"

    def test_match_starting_mid_line(self, locator):
        """Test a hit that starts after a tab on its line."""
        document = "\t<b>x</b>  \n<i>y</i>"

        result = locator.locate(document, "<b>x</b>\n<i>y</i>")

        assert result.found is True
        assert document[result.start:result.end] == "<b>x</b>  \n<i>y</i>"
        assert result.start == 1

    def test_start_inside_tab_indent_moves_to_line_start(self, locator):
        """Test a hit beginning part-way through a tab starts at the beginning of the line."""
        document = "<div>\n\t<p>Hi</p>\n</div>"

        result = locator.locate(document, "  <p>Hi</p>")

        assert result.found is True
        assert result.strategy == MatchStrategy.NORMALIZED_WHITESPACE
        assert result.start == 6
        assert result.matched_text == "\t<p>Hi</p>"

    def test_trailing_whitespace_outside_span_preserved(self, locator):
        """Test that trailing whitespace after the last matched line stays outside the span."""
        document = "<h1>A</h1>\t\n<h2>B</h2>   \nrest"

        result = locator.locate(document, "<h1>A</h1>\n<h2>B</h2>")

        assert result.matched_text == "<h1>A</h1>\t\n<h2>B</h2>"
        assert document[result.end:] == "   \nrest"

    def test_normalized_duplicate_is_ambiguous(self, locator):
        """Test ambiguity detection in normalized space."""
        document = "<p>x</p>  \n<hr>\n<p>x</p>\t\n<hr>"

        result = locator.locate(document, "<p>x</p>\n<hr>")

        assert result.ambiguous is True
        assert result.found is False


class TestTrimmedLineMatch:
    """Test the trimmed line-by-line strategy."""

    def test_indentation_differences(self, locator):
        """Test a snippet whose indentation differs from the document."""
        document = "<body>\n        <main>\n            <h1>Hi</h1>\n        </main>\n</body>"

        result = locator.locate(document, "<main>\n  <h1>Hi</h1>\n</main>")

        assert result.found is True
        assert result.strategy == MatchStrategy.TRIMMED_LINES
        assert result.matched_text == "        <main>\n            <h1>Hi</h1>\n        </main>"

    def test_blank_snippet_lines_ignored(self, locator):
        """Test that blank lines in the snippet are discarded."""
        document = "<a>\n  <b>\n</a>"

        result = locator.locate(document, "\n<a>\n\n<b>\n\n")

        assert result.found is True
        assert result.strategy == MatchStrategy.TRIMMED_LINES
        assert result.matched_text == "<a>\n  <b>"

    def test_requires_contiguous_lines(self, locator):
        """Test that a run broken by another line does not match."""
        document = "<a>\n<x>\n<b>"

        result = locator.locate(document, "  <a>\n  <b>")

        assert result.found is False

    def test_trimmed_duplicate_is_ambiguous(self, locator):
        """Test ambiguity detection in the trimmed strategy."""
        document = "  <td>1</td>\n  <td>2</td>\n<tr>\n    <td>1</td>\n    <td>2</td>"

        result = locator.locate(document, "<td>1</td>\n<td>2</td>")

        assert result.ambiguous is True


class TestStrategyOrder:
    """Test strategy priority."""

    def test_exact_preferred_over_fuzzy(self, locator):
        """Test that an exact hit wins even when fuzzier strategies would also hit."""
        document = "  <p>x</p>\n<p>x</p>"

        result = locator.locate(document, "  <p>x</p>")

        assert result.strategy == MatchStrategy.EXACT
        assert result.start == 0

    def test_custom_tab_width(self):
        """Test that the tab width controls normalization."""
        locator = ContentLocator(tab_width=2)
        document = "\t<p>x</p>\n"

        result = locator.locate(document, "  <p>x</p>\n")

        assert result.strategy == MatchStrategy.NORMALIZED_WHITESPACE
        assert result.matched_text == "\t<p>x</p>\n"


class TestRegexLocate:
    """Test regex matching."""

    def test_single_match(self, locator):
        """Test a pattern matching exactly once."""
        document = '<h1 class="small">Title</h1>'

        result = locator.locate_regex(document, r'<h1 class="[^"]*">')

        assert result.found is True
        assert result.strategy == MatchStrategy.REGEX
        assert result.matched_text == '<h1 class="small">'
        assert result.regex_match.group(0) == '<h1 class="small">'

    def test_dotall_and_multiline(self, locator):
        """Test that '.' crosses lines and '^' anchors at line starts."""
        document = "<div>\n<p>a</p>\n</div>"

        result = locator.locate_regex(document, r"^<p>.*?</div>")

        assert result.found is True
        assert result.matched_text == "<p>a</p>\n</div>"

    def test_no_match(self, locator):
        """Test a pattern that matches nowhere."""
        result = locator.locate_regex("<p>a</p>", r"<span>")

        assert result.found is False
        assert result.match_count == 0

    def test_multiple_matches(self, locator):
        """Test a pattern that matches more than once."""
        result = locator.locate_regex("<p>a</p><p>b</p>", r"<p>\w</p>")

        assert result.found is False
        assert result.match_count == 2

    def test_invalid_pattern_raises(self, locator):
        """Test that an invalid pattern raises with its failure kind."""
        with pytest.raises(EditRegexError) as exc_info:
            locator.locate_regex("abc", r"(unclosed")

        assert exc_info.value.kind == EditFailureKind.REGEX_INVALID_PATTERN
        assert exc_info.value.error_details['pattern'] == "(unclosed"
