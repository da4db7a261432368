"""
Boundary mapping: backend JSON -> canonical domain types.

Each backend response shape has exactly one mapping function here. Fields
outside the documented contract are logged as contract violations and ignored.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from content_reviewer.domain.errors import BackendContractError
from content_reviewer.domain.models import (
    Pagination,
    ReviewAccepted,
    ReviewJob,
    ReviewPage,
    ReviewStatus,
    ReviewSummary,
)

logger = logging.getLogger(__name__)

# ids that are safe to put in a URL path segment
REVIEW_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.:-]{0,127}$")

UNDOCUMENTED_ID_KEYS = ("id", "jobId", "_id", "job_id", "review_id")


def _warn_undocumented_ids(payload: Dict[str, Any], where: str) -> None:
    seen = [k for k in UNDOCUMENTED_ID_KEYS if k in payload]
    if seen:
        logger.warning("Backend contract violation in %s: undocumented id field(s) %s", where, seen)


def _require_dict(payload: Any, where: str) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise BackendContractError(
            "Unexpected response from the review service",
            detail=f"{where}: expected JSON object, got {type(payload).__name__}",
        )
    return payload


def _as_int(raw: Any, default: int = 0) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def accepted_from_backend(payload: Any) -> ReviewAccepted:
    body = _require_dict(payload, "submission response")
    _warn_undocumented_ids(body, "submission response")

    review_id = body.get("reviewId")
    if not isinstance(review_id, str) or not review_id.strip():
        raise BackendContractError(
            "Unexpected response from the review service",
            detail=f"submission response has no reviewId (keys={sorted(body)})",
        )
    if not REVIEW_ID_RE.match(review_id.strip()):
        raise BackendContractError(
            "Unexpected response from the review service",
            detail=f"submission response has an unusable reviewId {review_id!r}",
        )

    filename = body.get("filename")
    return ReviewAccepted(review_id=review_id.strip(), filename=filename if isinstance(filename, str) else None)


def _failure_reason(data: Dict[str, Any]) -> Optional[str]:
    error = data.get("error")
    if isinstance(error, str) and error.strip():
        return error.strip()

    result = data.get("result")
    if isinstance(result, dict):
        nested = result.get("error")
        if isinstance(nested, dict) and nested.get("message"):
            return str(nested["message"])
        if isinstance(nested, str) and nested.strip():
            return nested.strip()
    return None


def job_from_backend(review_id: str, payload: Any) -> ReviewJob:
    body = _require_dict(payload, "review status response")
    data = body.get("data")
    if body.get("success") is False or not isinstance(data, dict):
        raise BackendContractError(
            "Unexpected response from the review service",
            detail=f"review {review_id}: missing success/data envelope (keys={sorted(body)})",
        )
    _warn_undocumented_ids(data, "review status response")

    status = ReviewStatus.parse(data.get("status"))
    if status is ReviewStatus.UNKNOWN:
        logger.warning("Review %s reported unrecognised status %r", review_id, data.get("status"))

    progress = max(0, min(100, _as_int(data.get("progress"), 0)))
    result = data.get("result") if isinstance(data.get("result"), dict) else None
    metadata = data.get("metadata") if isinstance(data.get("metadata"), dict) else {}

    return ReviewJob(
        review_id=review_id,
        status=status,
        filename=data.get("filename") or None,
        created_at=data.get("createdAt") or None,
        completed_at=data.get("completedAt") or data.get("updatedAt") or None,
        progress=100 if status is ReviewStatus.COMPLETED else progress,
        result=result,
        metadata=metadata,
        error_message=_failure_reason(data) if status is ReviewStatus.FAILED else None,
    )


def _summary_from_backend(item: Any) -> Optional[ReviewSummary]:
    if not isinstance(item, dict):
        return None
    review_id = item.get("reviewId")
    if not isinstance(review_id, str) or not review_id:
        _warn_undocumented_ids(item, "review history item")
        return None
    return ReviewSummary(
        review_id=review_id,
        filename=str(item.get("filename") or "Text content"),
        status=str(item.get("status") or ReviewStatus.UNKNOWN.value),
        created_at=item.get("createdAt") or None,
        source_type=item.get("sourceType") or None,
    )


def page_from_backend(payload: Any, limit: int, skip: int) -> ReviewPage:
    body = _require_dict(payload, "review history response")
    raw_reviews = body.get("reviews")
    if not isinstance(raw_reviews, list):
        raise BackendContractError(
            "Unexpected response from the review service",
            detail=f"review history has no reviews list (keys={sorted(body)})",
        )

    reviews: List[ReviewSummary] = []
    for item in raw_reviews:
        summary = _summary_from_backend(item)
        if summary is not None:
            reviews.append(summary)

    raw_page = body.get("pagination") if isinstance(body.get("pagination"), dict) else {}
    pagination = Pagination(
        total=_as_int(raw_page.get("total"), skip + len(reviews)),
        limit=_as_int(raw_page.get("limit"), limit),
        skip=_as_int(raw_page.get("skip"), skip),
    )
    return ReviewPage(reviews=reviews, pagination=pagination)


def status_payload(job: ReviewJob) -> Dict[str, Any]:
    """Shape returned by the relay's own status endpoint."""
    out: Dict[str, Any] = {
        "reviewId": job.review_id,
        "status": job.status.value,
        "progress": job.progress,
    }
    if job.status is ReviewStatus.COMPLETED:
        out["result"] = job.result or {}
    if job.status is ReviewStatus.FAILED:
        out["error"] = job.error_message or "Unknown error"
    return out


def job_from_status_payload(review_id: str, payload: Any) -> ReviewJob:
    """Inverse of status_payload, used by the Python relay client."""
    body = _require_dict(payload, "relay status response")
    status = ReviewStatus.parse(body.get("status"))
    error = body.get("error")
    return ReviewJob(
        review_id=review_id,
        status=status,
        progress=_as_int(body.get("progress"), 0),
        result=body.get("result") if isinstance(body.get("result"), dict) else None,
        error_message=str(error) if status is ReviewStatus.FAILED and error else None,
    )
