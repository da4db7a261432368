"""
Bounded, fixed-interval polling of a review job.

`advance` is the whole state machine; `StatusPoller.run` is a plain loop
around it with an injected fetch function and sleep.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from content_reviewer.domain.errors import BackendUnavailable
from content_reviewer.domain.models import ReviewJob, ReviewStatus

logger = logging.getLogger(__name__)

TIMED_OUT_MESSAGE = (
    "Review processing is taking longer than expected. "
    "The job may still be running in the background."
)


class PollState(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class PollStep:
    state: PollState
    attempts: int
    job: Optional[ReviewJob] = None
    message: Optional[str] = None

    @property
    def done(self) -> bool:
        return self.state is not PollState.PROCESSING


Observation = Union[ReviewJob, BackendUnavailable]


def advance(attempts: int, observation: Observation, max_attempts: int) -> PollStep:
    """
    One poll's worth of transition. `attempts` counts non-terminal polls so far.
    Still processing, an unrecognised status and a backend error all count as
    one more attempt; reaching the bound is a timeout, not a failure.
    """
    if isinstance(observation, ReviewJob):
        if observation.status is ReviewStatus.COMPLETED:
            return PollStep(PollState.COMPLETED, attempts, job=observation)
        if observation.status is ReviewStatus.FAILED:
            reason = observation.error_message or "Unknown error"
            return PollStep(PollState.FAILED, attempts, job=observation, message=f"Review failed: {reason}")
        job: Optional[ReviewJob] = observation
    else:
        job = None

    attempts += 1
    if attempts >= max_attempts:
        return PollStep(PollState.TIMED_OUT, attempts, job=job, message=TIMED_OUT_MESSAGE)
    return PollStep(PollState.PROCESSING, attempts, job=job)


class StatusPoller:
    def __init__(
        self,
        fetch_status: Callable[[str], ReviewJob],
        interval_seconds: float = 2.0,
        max_attempts: int = 60,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.fetch_status = fetch_status
        self.interval_seconds = interval_seconds
        self.max_attempts = max_attempts
        self.sleep = sleep

    def run(self, review_id: str, on_step: Optional[Callable[[PollStep], None]] = None) -> PollStep:
        attempts = 0
        while True:
            try:
                observation: Observation = self.fetch_status(review_id)
            except BackendUnavailable as e:
                logger.warning("Status poll for %s failed (attempt %d): %s", review_id, attempts + 1, e.detail or e)
                observation = e

            step = advance(attempts, observation, self.max_attempts)
            if on_step is not None:
                on_step(step)
            if step.done:
                return step

            attempts = step.attempts
            # next poll only after this one resolved
            self.sleep(self.interval_seconds)
