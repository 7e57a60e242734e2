"""
LLM edit parsing, locating, and application for HTML documents.

This package turns an LLM's proposed edits (SEARCH/REPLACE blocks or
numbered line ranges) into a new document, reporting per-block failures so
a bounded correction loop can ask the LLM to fix them.
"""

from edit.edit_applier import EditApplier
from edit.edit_exceptions import (
    EditBlockError,
    EditError,
    EditLocateError,
    EditParseError,
    EditRangeError,
    EditRegexError,
    EditSettingsError,
)
from edit.edit_history import EditHistory
from edit.edit_locator import ContentLocator
from edit.edit_numbering import add_line_numbers, join_lines, split_lines
from edit.edit_parser import EditParser
from edit.edit_prompt import EditPromptBuilder, PromptMaterials
from edit.edit_retry import EditEvent, EditOutcome, EditRetryOrchestrator, EditState
from edit.edit_scope import EditScope, EditScopeClassifier
from edit.edit_section import SectionExcerpt, SectionExtractor
from edit.edit_settings import EditSettings
from edit.edit_types import (
    ApplyResult,
    EditBlock,
    EditEncoding,
    EditFailureKind,
    FailedBlock,
    LineEditBlock,
    MatchResult,
    MatchStrategy,
    ParseResult,
    RegexReplaceBlock,
    SearchReplaceBlock,
)

__all__ = [
    # Exceptions
    'EditError',
    'EditParseError',
    'EditBlockError',
    'EditLocateError',
    'EditRegexError',
    'EditRangeError',
    'EditSettingsError',
    # Types
    'EditEncoding',
    'MatchStrategy',
    'EditFailureKind',
    'SearchReplaceBlock',
    'RegexReplaceBlock',
    'LineEditBlock',
    'EditBlock',
    'MatchResult',
    'FailedBlock',
    'ApplyResult',
    'ParseResult',
    'SectionExcerpt',
    'PromptMaterials',
    'EditOutcome',
    'EditState',
    'EditEvent',
    'EditScope',
    # Core classes
    'EditParser',
    'ContentLocator',
    'EditApplier',
    'EditScopeClassifier',
    'SectionExtractor',
    'EditPromptBuilder',
    'EditRetryOrchestrator',
    'EditHistory',
    'EditSettings',
    # Functions
    'add_line_numbers',
    'split_lines',
    'join_lines',
]
