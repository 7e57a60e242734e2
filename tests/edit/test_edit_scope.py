"""Tests for edit scope classification."""

import pytest

from edit.edit_scope import EditScope, EditScopeClassifier


@pytest.fixture
def classifier():
    """Create a scope classifier."""
    return EditScopeClassifier()


class TestClassify:
    """Test instruction classification."""

    @pytest.mark.parametrize("instruction", [
        "Switch to dark mode",
        "Make all buttons rounded",
        "Use a serif font throughout",
        "Change every link to green",
        "Update the color scheme to pastel",
    ])
    def test_global_instructions(self, classifier, instruction):
        """Test instructions that touch the whole page."""
        assert classifier.classify(instruction) == EditScope.GLOBAL

    @pytest.mark.parametrize("instruction", [
        "Make the footer darker",
        "Add a link to the navbar",
        "Make the hero taller",
        "Add a phone number to the contact section",
        "Add a third tier to pricing",
    ])
    def test_section_instructions(self, classifier, instruction):
        """Test instructions naming a page section."""
        assert classifier.classify(instruction) == EditScope.SECTION

    @pytest.mark.parametrize("instruction", [
        "Change the button text to Buy now",
        "Make the title bigger",
        "Fix the typo in the second paragraph",
    ])
    def test_targeted_instructions(self, classifier, instruction):
        """Test small, local instructions."""
        assert classifier.classify(instruction) == EditScope.TARGETED

    def test_global_beats_section(self, classifier):
        """Test that a global keyword wins over a section keyword."""
        assert classifier.classify("change the entire header color") == EditScope.GLOBAL

    def test_case_insensitive(self, classifier):
        """Test that classification ignores case."""
        assert classifier.classify("MAKE THE FOOTER DARKER") == EditScope.SECTION


class TestEditRequestDetection:
    """Test edit versus new-design detection."""

    @pytest.mark.parametrize("message", [
        "Let's start over",
        "Build it from scratch",
        "I want a completely new design",
        "Make a new website for my gym",
        "Redo everything please",
    ])
    def test_new_design_requests(self, classifier, message):
        """Test phrases asking for a fresh design."""
        assert classifier.is_new_design_request(message) is True
        assert classifier.is_edit_request(message, has_existing_html=True) is False

    def test_edit_with_existing_document(self, classifier):
        """Test a normal edit request against an existing document."""
        assert classifier.is_edit_request("Make the title blue", has_existing_html=True) is True

    def test_no_document_is_never_an_edit(self, classifier):
        """Test that nothing can be edited before a document exists."""
        assert classifier.is_edit_request("Make the title blue", has_existing_html=False) is False
