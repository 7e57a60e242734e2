"""Bounded apply-and-correct loop around an LLM edit call."""

from dataclasses import dataclass, field
from enum import Enum, auto
import logging
from typing import Any, Callable, Dict, List

from edit.edit_applier import EditApplier
from edit.edit_history import EditHistory
from edit.edit_locator import ContentLocator
from edit.edit_parser import EditParser
from edit.edit_prompt import EditPromptBuilder
from edit.edit_scope import EditScope
from edit.edit_settings import EditSettings
from edit.edit_types import FailedBlock


class EditState(Enum):
    """State of an edit request."""
    ANALYZING = auto()          # Waiting for the LLM to propose edits
    APPLYING = auto()           # Applying parsed blocks
    SUCCEEDED = auto()          # Every block of the final round applied
    PARTIALLY_FAILED = auto()   # Retries exhausted with some blocks applied
    RETRY_EXHAUSTED = auto()    # Retries exhausted with nothing applied
    NO_CHANGES = auto()         # The LLM reported that nothing needs changing
    PARSE_FAILED = auto()       # The first response contained no usable edits


class EditEvent(Enum):
    """Events emitted while an edit request runs."""
    STATE_CHANGED = auto()      # callback(state)
    ROUND_COMPLETED = auto()    # callback(round_number, apply_result)


@dataclass
class EditOutcome:
    """Final result of an edit request."""

    state: EditState
    html: str | None  # None means the caller must keep showing the prior document
    applied_count: int = 0
    failed_blocks: List[FailedBlock] = field(default_factory=list)
    rounds: int = 0
    message: str = ""
    scope: EditScope | None = None

    @property
    def succeeded(self) -> bool:
        """True if the request finished without unresolved failures."""
        return self.state in (EditState.SUCCEEDED, EditState.NO_CHANGES)


class EditRetryOrchestrator:
    """
    Drive an edit request through apply and correction rounds.

    Each round calls the LLM, parses its response and applies the blocks to
    the latest document. Failed blocks are fed back to the LLM together with
    the partially patched document, up to `max_retries` extra rounds.

    The orchestrator assumes it owns the document for the whole request;
    callers must serialize concurrent edits to the same document.
    """

    def __init__(
        self,
        llm: Callable[[str, str], str],
        settings: EditSettings | None = None,
        history: EditHistory | None = None
    ):
        """
        Initialize the orchestrator.

        Args:
            llm: Callable taking (system_prompt, user_prompt) and returning the
                response text; it is expected to enforce its own timeout
            settings: Edit settings; defaults are used when omitted
            history: Optional history that receives each round's document
        """
        self._llm = llm
        self._settings = settings if settings is not None else EditSettings.create_default()
        self._history = history
        self._prompt_builder = EditPromptBuilder(self._settings)
        self._parser = EditParser(self._settings.encoding, self._settings.allow_full_rewrite)
        self._applier = EditApplier(ContentLocator(self._settings.tab_width))
        self._state: EditState | None = None
        self._logger = logging.getLogger("EditRetryOrchestrator")

        self._callbacks: Dict[EditEvent, List[Callable]] = {
            event: [] for event in EditEvent
        }

    def state(self) -> EditState | None:
        """Get the current state, or None before the first run."""
        return self._state

    def register_callback(self, event: EditEvent, callback: Callable) -> None:
        """
        Register a callback for a specific event.

        Args:
            event: The event to register for
            callback: The callback function to call when the event occurs
        """
        if callback not in self._callbacks[event]:
            self._callbacks[event].append(callback)

    def unregister_callback(self, event: EditEvent, callback: Callable) -> None:
        """
        Unregister a callback for a specific event.

        Args:
            event: The event to unregister from
            callback: The callback function to remove
        """
        if callback in self._callbacks[event]:
            self._callbacks[event].remove(callback)

    def _trigger_event(self, event: EditEvent, *args: Any) -> None:
        """Call every callback registered for an event, in registration order."""
        for callback in self._callbacks[event]:
            try:
                callback(*args)

            except Exception:
                self._logger.exception("Error in callback for %s", event)

    def _set_state(self, state: EditState) -> None:
        self._state = state
        self._trigger_event(EditEvent.STATE_CHANGED, state)

    def run(self, document: str, instruction: str) -> EditOutcome:
        """
        Run an edit request to completion.

        Args:
            document: Current document text
            instruction: Natural-language edit instruction

        Returns:
            The request's outcome

        Raises:
            Exception: Anything raised by the LLM callable is propagated
        """
        self._set_state(EditState.ANALYZING)
        materials = self._prompt_builder.build(document, instruction)
        system_prompt = materials.system_prompt
        user_prompt = materials.user_prompt

        if self._history is not None:
            self._history.push(document)

        current = document
        total_applied = 0
        failed_blocks: List[FailedBlock] = []
        max_rounds = 1 + self._settings.max_retries
        rounds = 0

        for round_number in range(1, max_rounds + 1):
            rounds = round_number
            if round_number > 1:
                self._set_state(EditState.ANALYZING)

            response = self._llm(system_prompt, user_prompt)
            parsed = self._parser.parse(response)

            if parsed.no_changes:
                if round_number == 1:
                    return self._finish(EditOutcome(
                        state=EditState.NO_CHANGES,
                        html=current,
                        rounds=rounds,
                        message="No changes were needed",
                        scope=materials.scope
                    ))

                self._logger.info("Round %d: model reported no further changes", round_number)
                break

            if parsed.full_document is not None:
                current = parsed.full_document
                if self._history is not None:
                    self._history.push(current)

                return self._finish(EditOutcome(
                    state=EditState.SUCCEEDED,
                    html=current,
                    applied_count=total_applied,
                    rounds=rounds,
                    message="Document was rewritten in full",
                    scope=materials.scope
                ))

            if not parsed.has_blocks:
                reason = (
                    "Full-document output is not allowed; only edit blocks are accepted"
                    if parsed.full_document_rejected else "No usable edits were produced"
                )
                if round_number == 1:
                    self._logger.warning("Round 1 produced no usable edits: %s", reason)
                    return self._finish(EditOutcome(
                        state=EditState.PARSE_FAILED,
                        html=None,
                        rounds=rounds,
                        message=f"The edit could not be applied: {reason}",
                        scope=materials.scope
                    ))

                self._logger.info("Round %d: %s", round_number, reason)
                break

            self._set_state(EditState.APPLYING)
            result = self._applier.apply(current, parsed.blocks)
            current = result.html
            total_applied += result.applied_count
            failed_blocks = result.failed_blocks

            if result.any_applied and self._history is not None:
                self._history.push(current)

            self._logger.info(
                "Round %d: applied %d of %d block(s)",
                round_number, result.applied_count, len(parsed.blocks)
            )
            self._trigger_event(EditEvent.ROUND_COMPLETED, round_number, result)

            if result.success:
                return self._finish(EditOutcome(
                    state=EditState.SUCCEEDED,
                    html=current,
                    applied_count=total_applied,
                    rounds=rounds,
                    message=f"Applied {total_applied} edit(s)",
                    scope=materials.scope
                ))

            if round_number < max_rounds:
                user_prompt = self._prompt_builder.build_correction(
                    current, instruction, failed_blocks, parsed.blocks
                )

        if total_applied > 0:
            return self._finish(EditOutcome(
                state=EditState.PARTIALLY_FAILED,
                html=current,
                applied_count=total_applied,
                failed_blocks=failed_blocks,
                rounds=rounds,
                message=f"Applied {total_applied} edit(s); {len(failed_blocks)} could not be applied",
                scope=materials.scope
            ))

        return self._finish(EditOutcome(
            state=EditState.RETRY_EXHAUSTED,
            html=None,
            failed_blocks=failed_blocks,
            rounds=rounds,
            message="The edit could not be applied. Please try rephrasing your request.",
            scope=materials.scope
        ))

    def _finish(self, outcome: EditOutcome) -> EditOutcome:
        """Record the terminal state and return the outcome."""
        self._logger.info("Edit finished: %s after %d round(s)", outcome.state.name, outcome.rounds)
        self._set_state(outcome.state)
        return outcome
