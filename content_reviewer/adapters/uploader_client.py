from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Iterable, Optional

import requests

from content_reviewer.domain.errors import BackendContractError, BackendUnavailable
from content_reviewer.domain.models import UploadSession, UploadStatus

logger = logging.getLogger(__name__)

USER_AGENT = "content-reviewer-frontend"


def _upload_session_from(payload: Any, upload_id: Optional[str] = None) -> UploadSession:
    if not isinstance(payload, dict):
        raise BackendContractError("Unexpected response from the upload service", detail=repr(payload)[:200])

    uid = payload.get("uploadId") or upload_id
    if not uid:
        raise BackendContractError("Unexpected response from the upload service", detail=f"keys={sorted(payload)}")

    raw_status = str(payload.get("uploadStatus") or "pending").lower()
    try:
        status = UploadStatus(raw_status)
    except ValueError:
        logger.warning("Upload %s reported unrecognised status %r", uid, raw_status)
        status = UploadStatus.PENDING

    form = payload.get("form") if isinstance(payload.get("form"), dict) else {}
    file_details = form.get("file") if isinstance(form.get("file"), dict) else {}

    rejected = payload.get("numberOfRejectedFiles") or 0
    try:
        rejected = int(rejected)
    except (TypeError, ValueError):
        rejected = 0

    return UploadSession(
        upload_id=str(uid),
        upload_status=status,
        upload_url=payload.get("uploadUrl"),
        file_metadata=dict(file_details),
        rejected_files=rejected,
        error_message=file_details.get("errorMessage"),
    )


class UploaderClient:
    """
    Client for the direct-to-storage uploader service (optional flow).
    initiate -> user uploads straight to storage -> status polled to ready/rejected.
    """

    def __init__(
        self,
        url: str,
        s3_bucket: str,
        s3_path: str,
        max_bytes: int,
        mime_types: Iterable[str],
        timeout_seconds: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.url = (url or "").rstrip("/")
        self.s3_bucket = s3_bucket
        self.s3_path = s3_path
        self.max_bytes = max_bytes
        self.mime_types = list(mime_types)
        self.timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    def _request(self, method: str, path: str, failure_message: str, **kwargs: Any) -> Any:
        if not self.enabled:
            raise BackendUnavailable("The upload service is not configured.")

        url = f"{self.url}{path}"
        headers = {"User-Agent": USER_AGENT}
        try:
            resp = self._session.request(method, url, headers=headers, timeout=self.timeout_seconds, **kwargs)
        except requests.RequestException as e:
            logger.error("Uploader %s %s failed: %s", method, url, e)
            raise BackendUnavailable(failure_message, detail=str(e)) from e

        if resp.status_code >= 400:
            logger.error("Uploader %s %s returned %s: %s", method, url, resp.status_code, (resp.text or "")[:300])
            raise BackendUnavailable(failure_message, detail=resp.text, status=resp.status_code)

        try:
            return resp.json()
        except ValueError as e:
            raise BackendContractError(failure_message, detail="non-JSON body") from e

    def initiate(self, redirect: str, callback: Optional[str] = None, metadata: Optional[Dict[str, Any]] = None) -> UploadSession:
        payload: Dict[str, Any] = {
            "redirect": redirect,
            "s3Bucket": self.s3_bucket,
            "s3Path": self.s3_path,
            "metadata": metadata or {},
            "mimeTypes": self.mime_types,
            "maxFileSize": self.max_bytes,
        }
        if callback:
            payload["callback"] = callback

        logger.info("Initiating upload: bucket=%s path=%s", self.s3_bucket, self.s3_path)
        session = _upload_session_from(self._request("POST", "/initiate", "Failed to initiate upload", json=payload))
        if not session.upload_url:
            raise BackendContractError("Failed to initiate upload", detail="initiate response has no uploadUrl")
        return session

    def get_status(self, upload_id: str) -> UploadSession:
        data = self._request("GET", f"/status/{upload_id}", "Failed to get upload status")
        return _upload_session_from(data, upload_id=upload_id)

    def poll_until_terminal(
        self,
        upload_id: str,
        max_attempts: int = 30,
        interval_seconds: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> UploadSession:
        for attempt in range(1, max_attempts + 1):
            status = self.get_status(upload_id)
            if status.is_terminal:
                return status
            if attempt < max_attempts:
                sleep(interval_seconds)

        raise BackendUnavailable(
            "Upload status polling timed out",
            detail=f"upload {upload_id} not terminal after {max_attempts} attempts",
        )
