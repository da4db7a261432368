from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from content_reviewer.client.form_state import MutualExclusionController
from content_reviewer.domain.errors import (
    BackendUnavailable,
    ReviewerError,
    ReviewNotFound,
    ValidationError,
)
from content_reviewer.domain.mapping import accepted_from_backend, job_from_status_payload
from content_reviewer.domain.models import ReviewAccepted, ReviewJob, Submission, SubmissionFile
from content_reviewer.services.validation import InputValidator
from content_reviewer.utils.text import title_from_text

logger = logging.getLogger(__name__)

NETWORK_FAILURE_MESSAGE = "Submission failed. Please check your connection and try again."


def status_poller_path(review_id: str) -> str:
    return f"/review/status-poller/{review_id}"


class RelayClient:
    """HTTP client for this application's own JSON API."""

    def __init__(self, base_url: str, timeout_seconds: float = 60.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    def _call(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = self._session.request(method, url, timeout=self.timeout_seconds, **kwargs)
        except requests.RequestException as e:
            raise BackendUnavailable(NETWORK_FAILURE_MESSAGE, detail=str(e)) from e

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if resp.status_code >= 400 or body.get("success") is False:
            message = str(body.get("message") or f"Server error: {resp.status_code}")
            if resp.status_code == 400:
                raise ValidationError(message)
            if resp.status_code == 404:
                raise ReviewNotFound(message)
            raise BackendUnavailable(message, status=resp.status_code)
        return body

    def upload_file(self, file: SubmissionFile) -> ReviewAccepted:
        files = {"file": (file.filename, file.content, file.mime_type or "application/octet-stream")}
        return accepted_from_backend(self._call("POST", "/api/upload", files=files))

    def review_text(self, content: str, title: str) -> ReviewAccepted:
        return accepted_from_backend(self._call("POST", "/api/review-text", json={"content": content, "title": title}))

    def get_status(self, review_id: str) -> ReviewJob:
        return job_from_status_payload(review_id, self._call("GET", f"/review/status/{review_id}"))


@dataclass(frozen=True)
class SubmissionOutcome:
    success: bool
    message: str
    review_id: Optional[str] = None
    redirect_url: Optional[str] = None


class SubmissionClient:
    """
    Packages the form's single active input and sends it to the relay.
    No automatic retry: a failed submission leaves the form ready to resubmit.
    """

    def __init__(self, relay: RelayClient, form: MutualExclusionController, validator: InputValidator):
        self.relay = relay
        self.form = form
        self.validator = validator

    def _send(self, submission: Submission) -> ReviewAccepted:
        if submission.file is not None:
            return self.relay.upload_file(submission.file)
        text = (submission.text or "").strip()
        return self.relay.review_text(text, title_from_text(text))

    def submit(self) -> SubmissionOutcome:
        try:
            submission = self.form.build_submission()
        except ValidationError as e:
            return SubmissionOutcome(success=False, message=e.message)

        problem = self.validator.check(submission)
        if problem:
            return SubmissionOutcome(success=False, message=problem)

        self.form.begin_submit()
        try:
            accepted = self._send(submission)
        except ReviewerError as e:
            logger.warning("Submission rejected: %s", e.detail or e.message)
            self.form.submit_failed()
            return SubmissionOutcome(success=False, message=e.message)

        self.form.reset()
        return SubmissionOutcome(
            success=True,
            message="Submitted for review",
            review_id=accepted.review_id,
            redirect_url=status_poller_path(accepted.review_id),
        )
