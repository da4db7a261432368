from __future__ import annotations

from typing import List

import pytest

from content_reviewer.client.poller import TIMED_OUT_MESSAGE, PollState, StatusPoller, advance
from content_reviewer.domain.errors import BackendUnavailable, ReviewNotFound
from content_reviewer.domain.models import ReviewJob, ReviewStatus


def _job(status: ReviewStatus, **kwargs) -> ReviewJob:
    return ReviewJob(review_id="rev-1", status=status, **kwargs)


# -----------------------------
# Test doubles
# -----------------------------
class ScriptedFetch:
    """Returns (or raises) the scripted observations in order."""

    def __init__(self, observations):
        self.observations = list(observations)
        self.calls = 0

    def __call__(self, review_id: str) -> ReviewJob:
        self.calls += 1
        item = self.observations.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeSleep:
    def __init__(self):
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


# -----------------------------
# advance()
# -----------------------------
def test_completed_is_terminal():
    step = advance(4, _job(ReviewStatus.COMPLETED), max_attempts=60)
    assert step.state is PollState.COMPLETED
    assert step.done


def test_failed_carries_reason():
    step = advance(0, _job(ReviewStatus.FAILED, error_message="AI service timeout"), max_attempts=60)
    assert step.state is PollState.FAILED
    assert step.message == "Review failed: AI service timeout"


def test_failed_without_reason():
    step = advance(0, _job(ReviewStatus.FAILED), max_attempts=60)
    assert step.message == "Review failed: Unknown error"


@pytest.mark.parametrize(
    "observation",
    [
        _job(ReviewStatus.PROCESSING),
        _job(ReviewStatus.UNKNOWN),
        BackendUnavailable("Failed to get review status"),
    ],
)
def test_non_terminal_observations_count_an_attempt(observation):
    step = advance(2, observation, max_attempts=60)
    assert step.state is PollState.PROCESSING
    assert step.attempts == 3


def test_reaching_the_bound_times_out():
    step = advance(59, _job(ReviewStatus.PROCESSING), max_attempts=60)
    assert step.state is PollState.TIMED_OUT
    assert step.message == TIMED_OUT_MESSAGE


# -----------------------------
# StatusPoller.run()
# -----------------------------
def test_run_polls_until_completed_and_sleeps_between_polls():
    fetch = ScriptedFetch([
        _job(ReviewStatus.PROCESSING, progress=10),
        _job(ReviewStatus.PROCESSING, progress=50),
        _job(ReviewStatus.COMPLETED, progress=100),
    ])
    sleep = FakeSleep()
    seen = []

    step = StatusPoller(fetch, interval_seconds=2.0, max_attempts=60, sleep=sleep).run("rev-1", on_step=seen.append)

    assert step.state is PollState.COMPLETED
    assert fetch.calls == 3
    assert sleep.calls == [2.0, 2.0]
    assert [s.state for s in seen] == [PollState.PROCESSING, PollState.PROCESSING, PollState.COMPLETED]


def test_run_times_out_after_max_attempts():
    fetch = ScriptedFetch([_job(ReviewStatus.PROCESSING)] * 5)
    sleep = FakeSleep()

    step = StatusPoller(fetch, interval_seconds=2.0, max_attempts=5, sleep=sleep).run("rev-1")

    assert step.state is PollState.TIMED_OUT
    assert fetch.calls == 5
    assert len(sleep.calls) == 4


def test_backend_errors_are_retried_within_the_bound():
    fetch = ScriptedFetch([
        BackendUnavailable("Failed to get review status"),
        _job(ReviewStatus.FAILED, error_message="bad document"),
    ])

    step = StatusPoller(fetch, max_attempts=10, sleep=FakeSleep()).run("rev-1")

    assert step.state is PollState.FAILED
    assert step.message == "Review failed: bad document"


def test_not_found_propagates():
    fetch = ScriptedFetch([ReviewNotFound("Review rev-1 was not found.")])
    with pytest.raises(ReviewNotFound):
        StatusPoller(fetch, sleep=FakeSleep()).run("rev-1")


def test_max_attempts_must_be_positive():
    with pytest.raises(ValueError):
        StatusPoller(lambda _id: _job(ReviewStatus.PROCESSING), max_attempts=0)
