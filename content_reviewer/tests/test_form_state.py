from __future__ import annotations

import pytest

from content_reviewer.client.form_state import (
    FormEvent,
    FormState,
    MutualExclusionController,
    check_exclusive,
    transition,
)
from content_reviewer.domain.errors import ValidationError
from content_reviewer.domain.models import BOTH_INPUTS_MESSAGE, NEITHER_INPUT_MESSAGE, SubmissionFile


def _pdf() -> SubmissionFile:
    return SubmissionFile("guidance.pdf", b"%PDF-1.4 data", "application/pdf")


@pytest.mark.parametrize(
    "state, event, expected",
    [
        (FormState.EMPTY, FormEvent.FILE_SELECTED, FormState.FILE_CHOSEN),
        (FormState.EMPTY, FormEvent.TEXT_ENTERED, FormState.TEXT_ENTERED),
        (FormState.FILE_CHOSEN, FormEvent.FILE_CLEARED, FormState.EMPTY),
        (FormState.TEXT_ENTERED, FormEvent.TEXT_CLEARED, FormState.EMPTY),
        # disabled input: no change
        (FormState.FILE_CHOSEN, FormEvent.TEXT_ENTERED, FormState.FILE_CHOSEN),
        (FormState.TEXT_ENTERED, FormEvent.FILE_SELECTED, FormState.TEXT_ENTERED),
    ],
)
def test_transition_table(state, event, expected):
    assert transition(state, event) is expected


def test_choosing_a_file_disables_text():
    form = MutualExclusionController()
    assert form.file_enabled and form.text_enabled

    form.select_file(_pdf())

    assert form.state is FormState.FILE_CHOSEN
    assert form.file_enabled
    assert not form.text_enabled


def test_typing_text_disables_file_and_clearing_restores_both():
    form = MutualExclusionController()
    form.enter_text("Some draft guidance")
    assert not form.file_enabled

    form.enter_text("   ")

    assert form.state is FormState.EMPTY
    assert form.file_enabled and form.text_enabled
    assert form.text == ""


def test_events_for_disabled_input_are_ignored():
    form = MutualExclusionController()
    form.select_file(_pdf())

    form.enter_text("should not stick")

    assert form.state is FormState.FILE_CHOSEN
    assert form.text == ""
    assert form.file is not None


def test_controls_locked_while_submitting():
    form = MutualExclusionController()
    form.enter_text("Some draft guidance")
    form.begin_submit()

    assert not form.submit_enabled
    assert not form.text_enabled
    form.enter_text("")  # ignored mid-flight
    assert form.text == "Some draft guidance"


def test_submit_failed_reenables_and_keeps_values():
    form = MutualExclusionController()
    form.enter_text("Some draft guidance")
    form.begin_submit()

    form.submit_failed()

    assert form.submit_enabled
    assert form.text_enabled
    assert form.text == "Some draft guidance"


def test_reset_returns_to_empty():
    form = MutualExclusionController()
    form.select_file(_pdf())
    form.begin_submit()

    form.reset()

    assert form.state is FormState.EMPTY
    assert form.file is None and form.text == ""
    assert form.submit_enabled


def test_build_submission_for_text_strips_whitespace():
    form = MutualExclusionController()
    form.enter_text("  Some draft guidance  ")
    assert form.build_submission().text == "Some draft guidance"


def test_build_submission_with_nothing_entered():
    with pytest.raises(ValidationError) as exc:
        MutualExclusionController().build_submission()
    assert exc.value.message == NEITHER_INPUT_MESSAGE


def test_check_exclusive():
    check_exclusive(True, False)
    check_exclusive(False, True)
    with pytest.raises(ValidationError) as both:
        check_exclusive(True, True)
    assert both.value.message == BOTH_INPUTS_MESSAGE
    with pytest.raises(ValidationError):
        check_exclusive(False, False)
