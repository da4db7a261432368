"""
Mutual exclusion between the two submission inputs (file or pasted text).

The transition table is the portable part; whatever drives the form (a
browser, a CLI, a test) feeds events in and reads the enabled flags out.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Optional, Tuple

from content_reviewer.domain.errors import ValidationError
from content_reviewer.domain.models import (
    BOTH_INPUTS_MESSAGE,
    NEITHER_INPUT_MESSAGE,
    Submission,
    SubmissionFile,
)

logger = logging.getLogger(__name__)


class FormState(str, Enum):
    EMPTY = "empty"                 # both inputs enabled
    FILE_CHOSEN = "file_chosen"     # text cleared + disabled
    TEXT_ENTERED = "text_entered"   # file cleared + disabled


class FormEvent(str, Enum):
    FILE_SELECTED = "file_selected"
    FILE_CLEARED = "file_cleared"
    TEXT_ENTERED = "text_entered"
    TEXT_CLEARED = "text_cleared"


# Events for a disabled input are absent: they leave the state unchanged.
TRANSITIONS: Dict[Tuple[FormState, FormEvent], FormState] = {
    (FormState.EMPTY, FormEvent.FILE_SELECTED): FormState.FILE_CHOSEN,
    (FormState.EMPTY, FormEvent.TEXT_ENTERED): FormState.TEXT_ENTERED,
    (FormState.EMPTY, FormEvent.FILE_CLEARED): FormState.EMPTY,
    (FormState.EMPTY, FormEvent.TEXT_CLEARED): FormState.EMPTY,
    (FormState.FILE_CHOSEN, FormEvent.FILE_SELECTED): FormState.FILE_CHOSEN,
    (FormState.FILE_CHOSEN, FormEvent.FILE_CLEARED): FormState.EMPTY,
    (FormState.TEXT_ENTERED, FormEvent.TEXT_ENTERED): FormState.TEXT_ENTERED,
    (FormState.TEXT_ENTERED, FormEvent.TEXT_CLEARED): FormState.EMPTY,
}


def transition(state: FormState, event: FormEvent) -> FormState:
    return TRANSITIONS.get((state, event), state)


def check_exclusive(has_file: bool, has_text: bool) -> None:
    """Submit-time invariant: exactly one input. Raises ValidationError otherwise."""
    if has_file and has_text:
        raise ValidationError(BOTH_INPUTS_MESSAGE)
    if not has_file and not has_text:
        raise ValidationError(NEITHER_INPUT_MESSAGE)


class MutualExclusionController:
    def __init__(self) -> None:
        self.state = FormState.EMPTY
        self.file: Optional[SubmissionFile] = None
        self.text = ""
        self.submitting = False

    def _apply(self, event: FormEvent) -> bool:
        if self.submitting:
            logger.debug("Ignoring %s while a submission is in flight", event.value)
            return False
        if (self.state, event) not in TRANSITIONS:
            logger.debug("Ignoring %s in state %s (input disabled)", event.value, self.state.value)
            return False
        self.state = transition(self.state, event)
        return True

    def select_file(self, file: SubmissionFile) -> FormState:
        if self._apply(FormEvent.FILE_SELECTED):
            self.file = file
            self.text = ""
        return self.state

    def clear_file(self) -> FormState:
        if self._apply(FormEvent.FILE_CLEARED):
            self.file = None
        return self.state

    def enter_text(self, text: str) -> FormState:
        if not (text or "").strip():
            if self._apply(FormEvent.TEXT_CLEARED):
                self.text = ""
            return self.state
        if self._apply(FormEvent.TEXT_ENTERED):
            self.text = text
            self.file = None
        return self.state

    @property
    def file_enabled(self) -> bool:
        return not self.submitting and self.state is not FormState.TEXT_ENTERED

    @property
    def text_enabled(self) -> bool:
        return not self.submitting and self.state is not FormState.FILE_CHOSEN

    @property
    def submit_enabled(self) -> bool:
        return not self.submitting

    def build_submission(self) -> Submission:
        has_file = self.file is not None
        has_text = bool(self.text.strip())
        check_exclusive(has_file, has_text)
        return Submission(file=self.file) if has_file else Submission(text=self.text.strip())

    def begin_submit(self) -> None:
        self.submitting = True

    def submit_failed(self) -> None:
        # inputs keep their values; everything is enabled again for a retry
        self.submitting = False

    def reset(self) -> None:
        self.state = FormState.EMPTY
        self.file = None
        self.text = ""
        self.submitting = False
