from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from content_reviewer.domain.errors import BackendUnavailable, ReviewNotFound
from content_reviewer.domain.mapping import accepted_from_backend, job_from_backend, page_from_backend
from content_reviewer.domain.models import ReviewAccepted, ReviewJob, ReviewPage
from content_reviewer.utils.text import truncate

logger = logging.getLogger(__name__)


class BackendClient:
    """
    Adapter for the external review service.
    One requests.Session per client, shared across requests (connection pool).
    """

    def __init__(self, base_url: str, timeout_seconds: float = 30.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _send(self, method: str, path: str, failure_message: str, **kwargs: Any) -> requests.Response:
        url = self._url(path)
        try:
            resp = self._session.request(method, url, timeout=self.timeout_seconds, **kwargs)
        except requests.RequestException as e:
            logger.error("Backend %s %s failed: %s", method, url, e)
            raise BackendUnavailable(failure_message, detail=str(e)) from e

        if resp.status_code >= 400:
            body = truncate(resp.text or "", 300)
            logger.error("Backend %s %s returned %s: %s", method, url, resp.status_code, body)
            raise BackendUnavailable(failure_message, detail=body, status=resp.status_code)
        return resp

    @staticmethod
    def _json(resp: requests.Response, failure_message: str) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise BackendUnavailable(failure_message, detail=f"non-JSON body: {truncate(resp.text or '', 200)}") from e

    def submit_file(self, filename: str, content: bytes, mime_type: Optional[str]) -> ReviewAccepted:
        message = "Failed to upload file to backend"
        files = {"file": (filename, content, mime_type or "application/octet-stream")}
        logger.info("Uploading file to backend: %s (%d bytes)", filename, len(content))
        resp = self._send("POST", "/api/upload", message, files=files)
        accepted = accepted_from_backend(self._json(resp, message))
        if accepted.filename is None:
            accepted = ReviewAccepted(review_id=accepted.review_id, filename=filename)
        return accepted

    def submit_text(
        self,
        text: str,
        title: str,
        user_id: str = "anonymous",
        session_id: Optional[str] = None,
    ) -> ReviewAccepted:
        message = "Failed to submit text content to backend"
        payload = {
            "textContent": text,
            "title": title,
            "userId": user_id,
            "sessionId": session_id,
        }
        logger.info("Submitting text content to backend: %d characters", len(text))
        resp = self._send("POST", "/api/review-text", message, json=payload)
        return accepted_from_backend(self._json(resp, message))

    def get_review(self, review_id: str) -> ReviewJob:
        message = "Failed to get review status"
        try:
            resp = self._send("GET", f"/api/review/{review_id}", message)
        except BackendUnavailable as e:
            if e.status == 404:
                raise ReviewNotFound(f"Review {review_id} was not found.", detail=e.detail) from e
            raise
        return job_from_backend(review_id, self._json(resp, message))

    def list_reviews(self, limit: int, skip: int = 0) -> ReviewPage:
        message = "Failed to fetch review history"
        resp = self._send(
            "GET",
            "/api/reviews",
            message,
            params={"limit": limit, "skip": skip},
            headers={"Accept": "application/json"},
        )
        return page_from_backend(self._json(resp, message), limit=limit, skip=skip)

    def delete_review(self, review_id: str) -> str:
        message = "Failed to delete review"
        try:
            resp = self._send("DELETE", f"/api/reviews/{review_id}", message, headers={"Accept": "application/json"})
        except BackendUnavailable as e:
            if e.status == 404:
                raise ReviewNotFound(f"Review {review_id} was not found.", detail=e.detail) from e
            raise

        body: Dict[str, Any] = {}
        if resp.content:
            parsed = self._json(resp, message)
            body = parsed if isinstance(parsed, dict) else {}
        return str(body.get("message") or "Review deleted successfully")
