from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from content_reviewer.adapters.backend_client import BackendClient
from content_reviewer.domain.errors import ValidationError
from content_reviewer.domain.mapping import REVIEW_ID_RE
from content_reviewer.domain.models import (
    ReviewAccepted,
    ReviewJob,
    ReviewPage,
    ReviewReport,
    ReviewStatus,
    Submission,
    SubmissionFile,
)
from content_reviewer.services.result_formatter import build_report
from content_reviewer.services.validation import InputValidator
from content_reviewer.utils.text import title_from_text

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def require_review_id(review_id: str) -> str:
    review_id = (review_id or "").strip()
    if not REVIEW_ID_RE.match(review_id):
        raise ValidationError("Invalid review id.")
    return review_id


@dataclass
class ReviewService:
    """
    Service layer: re-validates submissions and relays them to the backend.
    Keeps controllers/routes thin. Holds no review state of its own.
    """
    backend: BackendClient
    validator: InputValidator

    def submit(
        self,
        submission: Submission,
        *,
        title: str = "",
        user_id: str = "anonymous",
        session_id: Optional[str] = None,
    ) -> ReviewAccepted:
        # Authoritative check; nothing invalid reaches the backend
        self.validator.require_valid(submission)

        if submission.file is not None:
            f = submission.file
            return self.backend.submit_file(f.filename, f.content, f.mime_type)

        text = (submission.text or "").strip()
        return self.backend.submit_text(
            text,
            title=(title or "").strip() or title_from_text(text),
            user_id=user_id,
            session_id=session_id,
        )

    def submit_file(self, filename: str, content: bytes, mime_type: Optional[str]) -> ReviewAccepted:
        return self.submit(Submission(file=SubmissionFile(filename=filename, content=content, mime_type=mime_type)))

    def submit_text(
        self,
        text: str,
        title: str = "",
        user_id: str = "anonymous",
        session_id: Optional[str] = None,
    ) -> ReviewAccepted:
        return self.submit(Submission(text=text), title=title, user_id=user_id, session_id=session_id)

    def get_job(self, review_id: str) -> ReviewJob:
        return self.backend.get_review(require_review_id(review_id))

    def get_report(self, review_id: str) -> Tuple[ReviewJob, Optional[ReviewReport]]:
        job = self.get_job(review_id)
        if job.status is not ReviewStatus.COMPLETED:
            return job, None
        return job, build_report(job)

    def list_reviews(self, limit: Optional[int] = None, skip: Optional[int] = None) -> ReviewPage:
        limit = DEFAULT_PAGE_SIZE if limit is None else max(1, min(MAX_PAGE_SIZE, limit))
        skip = 0 if skip is None else max(0, skip)
        return self.backend.list_reviews(limit=limit, skip=skip)

    def delete_review(self, review_id: str) -> str:
        return self.backend.delete_review(require_review_id(review_id))
