"""Prompt construction for edit requests and correction rounds."""

from dataclasses import dataclass
import logging
from typing import List

from edit.edit_numbering import add_line_numbers, split_lines
from edit.edit_scope import EditScope, EditScopeClassifier
from edit.edit_section import SectionExcerpt, SectionExtractor
from edit.edit_settings import EditSettings
from edit.edit_types import (
    EditBlock,
    EditEncoding,
    FailedBlock,
    LineEditBlock,
    RegexReplaceBlock,
    SearchReplaceBlock,
)


_IMAGE_RULES = """IMAGE RULES (when adding images):
- Use: <img data-image-query="description" alt="..." class="...">
- For backgrounds: add data-bg-query="description" to the element
- NEVER use URLs like source.unsplash.com"""


SEARCH_REPLACE_SYSTEM_PROMPT = f"""You are a precise HTML editor. Your job is to make SMALL, TARGETED changes.

CRITICAL: You must ONLY output edit blocks. NEVER output the full HTML document.

FORMAT (use exactly this, once per change):
<<<<<<< SEARCH
exact lines copied from the current HTML
=======
replacement lines
>>>>>>> REPLACE

RULES:
1. The SEARCH text must be copied exactly from the current HTML, including indentation
2. The SEARCH text must appear exactly once - include surrounding lines if needed to make it unique
3. Make the SMALLEST change possible
4. Multiple changes = multiple edit blocks, in document order
5. Preserve all existing content not being changed
6. If nothing needs to change, reply exactly: NO CHANGES NEEDED

{_IMAGE_RULES}

DO NOT:
- Output full HTML documents
- Add explanations or comments
- Make changes the user didn't ask for"""


LINE_RANGE_SYSTEM_PROMPT = f"""You are a precise HTML editor. Your job is to make SMALL, TARGETED changes.

CRITICAL: You must ONLY output edit blocks. NEVER output full HTML.

FORMAT (use exactly this):
```edit
[START_LINE-END_LINE]
replacement content
```

RULES:
1. ONLY output edit blocks - nothing else
2. Use the exact line numbers shown in the HTML
3. Make the SMALLEST change possible
4. For "change background to blue" - only edit the specific element's class
5. Multiple changes = multiple edit blocks
6. Preserve all existing content not being changed
7. If nothing needs to change, reply exactly: NO CHANGES NEEDED

EXAMPLE - User says "make background blue":
```edit
[15-15]
    <body class="bg-blue-500">
```

EXAMPLE - User says "add a button after the heading":
```edit
[23-23]
        <h1 class="text-4xl font-bold">Welcome</h1>
        <button class="mt-4 px-6 py-2 bg-indigo-600 text-white rounded">Click Me</button>
```

{_IMAGE_RULES}

DO NOT:
- Output full HTML documents
- Add explanations or comments
- Make changes the user didn't ask for"""


@dataclass
class PromptMaterials:
    """Everything needed to ask an LLM for an edit."""

    system_prompt: str
    user_prompt: str
    scope: EditScope
    section: SectionExcerpt | None
    encoding: EditEncoding


class EditPromptBuilder:
    """Build prompts for the configured edit encoding."""

    def __init__(self, settings: EditSettings | None = None):
        """
        Initialize the prompt builder.

        Args:
            settings: Edit settings; defaults are used when omitted
        """
        self._settings = settings if settings is not None else EditSettings.create_default()
        self._classifier = EditScopeClassifier()
        self._extractor = SectionExtractor(self._settings.context_lines)
        self._logger = logging.getLogger("EditPromptBuilder")

    def system_prompt(self) -> str:
        """Get the system prompt for the configured encoding."""
        if self._settings.encoding == EditEncoding.LINE_RANGE:
            return LINE_RANGE_SYSTEM_PROMPT

        return SEARCH_REPLACE_SYSTEM_PROMPT

    def build(self, document: str, instruction: str) -> PromptMaterials:
        """
        Build the first-round prompt for an edit instruction.

        Section-scoped instructions send only the matching section when one
        can be found; everything else sends the whole document.

        Args:
            document: Current document text
            instruction: Natural-language edit instruction

        Returns:
            Prompt materials for the LLM call
        """
        scope = self._classifier.classify(instruction)
        section = None
        if scope == EditScope.SECTION:
            section = self._extractor.extract(document, instruction)

        self._logger.debug(
            "Building %s prompt (scope: %s, section extracted: %s)",
            self._settings.encoding.value, scope.value, section is not None
        )

        if section is not None:
            excerpt = self._render_document(section.section, section.start_line)
            total_lines = len(split_lines(document))
            user_prompt = (
                f"HTML excerpt (lines {section.start_line}-{section.end_line} of {total_lines}):\n"
                f"{excerpt}\n\n"
                f"USER REQUEST: {instruction}\n\n"
                f"{self._closing_reminder()}"
            )
            if self._settings.encoding == EditEncoding.LINE_RANGE:
                user_prompt += "\nThe line numbers shown are the full document's line numbers."

        else:
            user_prompt = (
                f"HTML ({len(split_lines(document))} lines):\n"
                f"{self._render_document(document, 1)}\n\n"
                f"USER REQUEST: {instruction}\n\n"
                f"{self._closing_reminder()}"
            )

        return PromptMaterials(
            system_prompt=self.system_prompt(),
            user_prompt=user_prompt,
            scope=scope,
            section=section,
            encoding=self._settings.encoding
        )

    def build_correction(
        self,
        document: str,
        instruction: str,
        failed_blocks: List[FailedBlock],
        blocks: List[EditBlock] | None = None
    ) -> str:
        """
        Build the user prompt for a correction round.

        The prompt always carries the current, partially patched document so
        blocks that already applied are not requested again.

        Args:
            document: Current document text, after the blocks that applied
            instruction: Original edit instruction
            failed_blocks: Failures from the previous round
            blocks: Blocks from the previous round, used to quote what failed

        Returns:
            User prompt for the next LLM call
        """
        parts = [
            f"Some of your edit blocks could not be applied ({len(failed_blocks)} failed).",
            "",
            "FAILED BLOCKS:",
        ]

        for failure in failed_blocks:
            parts.append(f"- Block {failure.index + 1}: {failure.reason}")
            if blocks is not None and 0 <= failure.index < len(blocks):
                parts.append(self._quote_block(blocks[failure.index]))

        parts.extend([
            "",
            "Blocks not listed above were applied successfully and are already in the HTML below. "
            "Do not repeat them.",
            "",
            f"CURRENT HTML ({len(split_lines(document))} lines):",
            self._render_document(document, 1),
            "",
            f"ORIGINAL REQUEST: {instruction}",
            "",
            f"Output new edit blocks for the failed changes only. {self._closing_reminder()}",
        ])

        return "\n".join(parts)

    def _render_document(self, document: str, start_line: int) -> str:
        """Render a document or excerpt for the configured encoding."""
        if self._settings.encoding == EditEncoding.LINE_RANGE:
            return add_line_numbers(document, start_line)

        return f"```html\n{document}\n```"

    def _closing_reminder(self) -> str:
        if self._settings.encoding == EditEncoding.LINE_RANGE:
            return "Respond with ONLY edit blocks. Use [LINE-LINE] format."

        return "Respond with ONLY SEARCH/REPLACE blocks."

    def _quote_block(self, block: EditBlock) -> str:
        """Quote the part of a failed block that identified its target."""
        if isinstance(block, SearchReplaceBlock):
            return f"  SEARCH was:\n{self._indent(block.search)}"

        if isinstance(block, RegexReplaceBlock):
            return f"  Regex was: {block.pattern}"

        if isinstance(block, LineEditBlock):
            return f"  Range was: [{block.start_line}-{block.end_line}]"

        raise TypeError(f"Unsupported edit block type: {type(block).__name__}")

    def _indent(self, text: str) -> str:
        return "\n".join(f"    {line}" for line in text.split("\n"))
