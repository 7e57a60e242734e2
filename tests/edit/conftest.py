"""Shared fixtures and utilities for edit tests."""

import pytest
from typing import List, Tuple

from edit.edit_applier import EditApplier
from edit.edit_locator import ContentLocator
from edit.edit_parser import EditParser
from edit.edit_types import EditEncoding


class ScriptedLLM:
    """Fake LLM returning canned responses in order and recording its prompts."""

    def __init__(self, responses: List[str]):
        self.responses = list(responses)
        self.calls: List[Tuple[str, str]] = []

    def __call__(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        if not self.responses:
            raise AssertionError("ScriptedLLM called more times than scripted")

        return self.responses.pop(0)


@pytest.fixture
def parser():
    """Create a search/replace parser."""
    return EditParser()


@pytest.fixture
def line_parser():
    """Create a line-range parser."""
    return EditParser(EditEncoding.LINE_RANGE)


@pytest.fixture
def locator():
    """Create a content locator."""
    return ContentLocator()


@pytest.fixture
def applier():
    """Create an edit applier."""
    return EditApplier()


@pytest.fixture
def scripted_llm():
    """Factory for scripted fake LLMs."""
    def _create(*responses: str) -> ScriptedLLM:
        return ScriptedLLM(list(responses))
    return _create


class EditTestHelpers:
    """Helper utilities for edit testing."""

    @staticmethod
    def numbered_document(count: int) -> str:
        """Create a document of `count` lines reading "line 1", "line 2", ..."""
        return "\n".join(f"line {i}" for i in range(1, count + 1))

    @staticmethod
    def search_replace(search: str, replace: str, regex: bool = False) -> str:
        """Render a SEARCH/REPLACE block as an LLM would."""
        head = "<<<<<<< SEARCH REGEX" if regex else "<<<<<<< SEARCH"
        return f"{head}\n{search}\n=======\n{replace}\n>>>>>>> REPLACE"


@pytest.fixture
def helpers():
    """Provide test helper utilities."""
    return EditTestHelpers


SAMPLE_PAGE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Bakery</title>
</head>
<body class="bg-white">
    <header class="site-header">
        <nav class="navbar">
            <a href="/">Home</a>
            <a href="/menu">Menu</a>
        </nav>
    </header>
    <section class="hero">
        <h1 class="text-4xl">Fresh bread daily</h1>
        <img src="loaf.jpg" alt="Loaf">
    </section>
    <section id="about">
        <p>Family owned since 1982.</p>
    </section>
    <footer class="footer">
        <p>&copy; Bakery</p>
    </footer>
</body>
</html>"""


@pytest.fixture
def sample_page():
    """A small landing page document."""
    return SAMPLE_PAGE
