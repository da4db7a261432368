from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from content_reviewer.app_factory import create_app
from content_reviewer.config.ini_config import AppSettings
from content_reviewer.domain.errors import BackendUnavailable, ReviewNotFound
from content_reviewer.domain.models import (
    Pagination,
    ReviewAccepted,
    ReviewJob,
    ReviewPage,
    ReviewStatus,
    ReviewSummary,
    UploadSession,
    UploadStatus,
)
from content_reviewer.web.session_store import MemorySessionStore


# -----------------------------
# Test doubles
# -----------------------------
class FakeBackend:
    """Stands in for BackendClient; records every call."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.jobs: Dict[str, ReviewJob] = {}
        self.reviews: List[ReviewSummary] = []
        self.fail_with: Optional[Exception] = None
        self.next_id = "rev-1"

    def _maybe_fail(self):
        if self.fail_with is not None:
            raise self.fail_with

    def submit_file(self, filename, content, mime_type):
        self.calls.append(("submit_file", filename, len(content), mime_type))
        self._maybe_fail()
        return ReviewAccepted(review_id=self.next_id, filename=filename)

    def submit_text(self, text, title, user_id="anonymous", session_id=None):
        self.calls.append(("submit_text", text, title, user_id, session_id))
        self._maybe_fail()
        return ReviewAccepted(review_id=self.next_id)

    def get_review(self, review_id):
        self.calls.append(("get_review", review_id))
        self._maybe_fail()
        if review_id not in self.jobs:
            raise ReviewNotFound(f"Review {review_id} was not found.")
        return self.jobs[review_id]

    def list_reviews(self, limit, skip=0):
        self.calls.append(("list_reviews", limit, skip))
        self._maybe_fail()
        return ReviewPage(
            reviews=self.reviews[skip:skip + limit],
            pagination=Pagination(total=len(self.reviews), limit=limit, skip=skip),
        )

    def delete_review(self, review_id):
        self.calls.append(("delete_review", review_id))
        self._maybe_fail()
        if review_id not in self.jobs:
            raise ReviewNotFound(f"Review {review_id} was not found.")
        del self.jobs[review_id]
        return "Review deleted successfully"


class FakeUploader:
    def __init__(self, enabled: bool = True):
        self.url = "http://uploader.test" if enabled else ""
        self.statuses: List[UploadSession] = []
        self.calls: List[tuple] = []

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    def initiate(self, redirect, callback=None, metadata=None):
        self.calls.append(("initiate", redirect, callback))
        return UploadSession(upload_id="up-1", upload_status=UploadStatus.PENDING, upload_url="/upload-and-scan/up-1")

    def get_status(self, upload_id):
        self.calls.append(("get_status", upload_id))
        if not self.statuses:
            return UploadSession(upload_id=upload_id, upload_status=UploadStatus.PENDING)
        return self.statuses.pop(0)

    def poll_until_terminal(self, upload_id, max_attempts=30, interval_seconds=2.0, sleep=None):
        self.calls.append(("poll_until_terminal", upload_id, max_attempts))
        for _ in range(max_attempts):
            status = self.get_status(upload_id)
            if status.is_terminal:
                return status
        raise BackendUnavailable("Upload status polling timed out")


# -----------------------------
# Helpers / fixtures
# -----------------------------
def make_job(review_id: str = "rev-1", status: ReviewStatus = ReviewStatus.PROCESSING, **kwargs) -> ReviewJob:
    return ReviewJob(review_id=review_id, status=status, **kwargs)


COMPLETED_RESULT = {
    "overallStatus": "pass_with_recommendations",
    "reviewText": "Full review text",
    "sections": {
        "overallAssessment": "Good overall.",
        "plainEnglishReview": "Contact [EMAIL_REDACTED] for details.",
    },
    "metrics": {"totalIssues": 3, "wordsToAvoidCount": 1, "passiveSentencesCount": 2, "wordCount": 250},
    "aiMetadata": {"model": "review-model-1", "inputTokens": 100, "outputTokens": 40},
}


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        session_secret_key="test-secret",
        poll_max_attempts=3,
        poll_interval_seconds=1.0,
    )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def uploader() -> FakeUploader:
    return FakeUploader()


@pytest.fixture
def app(settings, backend, uploader):
    app = create_app(settings=settings, backend=backend, uploader=uploader, session_store=MemorySessionStore())
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def completed_job() -> ReviewJob:
    return make_job(
        status=ReviewStatus.COMPLETED,
        filename="guidance.docx",
        created_at="2024-03-01T10:00:00Z",
        completed_at="2024-03-01T10:01:30Z",
        progress=100,
        result=COMPLETED_RESULT,
    )
