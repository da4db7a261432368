from __future__ import annotations

from typing import Optional

from flask import (
    Blueprint,
    current_app,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from content_reviewer.adapters.uploader_client import UploaderClient
from content_reviewer.domain.errors import BackendUnavailable, ReviewerError
from content_reviewer.domain.models import UploadSession, UploadStatus

UPLOAD_POLL_ATTEMPTS = 30
UPLOAD_POLL_INTERVAL_SECONDS = 2
# /complete waits briefly; the status poller page covers anything slower
COMPLETE_WAIT_ATTEMPTS = 3

UNAVAILABLE_MESSAGE = "Direct upload is not available: no upload service is configured."


def _safe_int(raw: Optional[str]) -> Optional[int]:
    raw = (raw or "").strip()
    return int(raw) if raw.isdigit() else None


def _status_json(status: UploadSession) -> dict:
    return {
        "uploadId": status.upload_id,
        "uploadStatus": status.upload_status.value,
        "rejectedFiles": status.rejected_files,
        "fileMetadata": status.file_metadata,
        "errorMessage": status.error_message,
    }


def create_upload_blueprint(uploader: UploaderClient) -> Blueprint:
    bp = Blueprint("uploads", __name__, url_prefix="/upload")

    def _finish(status: UploadSession):
        session.pop("upload_id", None)
        if status.upload_status is UploadStatus.READY:
            name = status.file_metadata.get("filename") or "File"
            flash(f"{name} uploaded successfully", "success")
        else:
            flash(status.error_message or "The uploaded file was rejected.", "error")
        return redirect(url_for("web.index"))

    @bp.get("")
    def form():
        return render_template(
            "upload.html",
            enabled=uploader.enabled,
            unavailable_message=UNAVAILABLE_MESSAGE,
            upload_id=session.get("upload_id"),
        )

    @bp.post("/initiate")
    def initiate():
        if not uploader.enabled:
            flash(UNAVAILABLE_MESSAGE, "error")
            return redirect(url_for("uploads.form"))

        try:
            upload = uploader.initiate(
                redirect=url_for("uploads.complete", _external=True),
                callback=url_for("uploads.callback", _external=True),
                metadata={"source": "content-reviewer"},
            )
        except ReviewerError as e:
            current_app.logger.error("Upload initiation failed: %s", e.detail or e.message)
            flash(e.message, "error")
            return redirect(url_for("uploads.form"))

        session["upload_id"] = upload.upload_id
        target = upload.upload_url
        if target.startswith("/"):
            target = f"{uploader.url}{target}"
        current_app.logger.info("Upload %s initiated, redirecting to uploader", upload.upload_id)
        return redirect(target)

    @bp.get("/status-poller")
    def status_poller():
        upload_id = session.get("upload_id")
        if not upload_id:
            flash("No upload in progress.", "error")
            return redirect(url_for("uploads.form"))

        attempts = _safe_int(request.args.get("attempt")) or 0
        try:
            status = uploader.get_status(upload_id)
        except BackendUnavailable as e:
            current_app.logger.warning("Upload status check for %s failed: %s", upload_id, e.detail or e.message)
            status = None

        if status is not None and status.is_terminal:
            return _finish(status)

        attempts += 1
        timed_out = attempts >= UPLOAD_POLL_ATTEMPTS
        return render_template(
            "upload_status.html",
            upload_id=upload_id,
            timed_out=timed_out,
            refresh_url=None if timed_out else url_for("uploads.status_poller", attempt=attempts),
            refresh_seconds=UPLOAD_POLL_INTERVAL_SECONDS,
        )

    @bp.get("/status/<upload_id>")
    def status(upload_id: str):
        try:
            upload = uploader.get_status(upload_id)
        except ReviewerError as e:
            current_app.logger.error("Upload status for %s failed: %s", upload_id, e.detail or e.message)
            return jsonify({"success": False, "message": e.message}), e.status_code
        return jsonify(_status_json(upload))

    @bp.get("/complete")
    def complete():
        upload_id = session.get("upload_id")
        if not upload_id:
            flash("No upload in progress.", "error")
            return redirect(url_for("web.index"))

        try:
            upload = uploader.poll_until_terminal(
                upload_id,
                max_attempts=COMPLETE_WAIT_ATTEMPTS,
                interval_seconds=UPLOAD_POLL_INTERVAL_SECONDS,
            )
        except BackendUnavailable as e:
            current_app.logger.info("Upload %s not finished yet: %s", upload_id, e.detail or e.message)
            return redirect(url_for("uploads.status_poller"))

        return _finish(upload)

    @bp.post("/callback")
    def callback():
        payload = request.get_json(silent=True)
        keys = sorted(payload) if isinstance(payload, dict) else []
        current_app.logger.info("Uploader callback received (keys=%s)", keys)
        return jsonify({"received": True})

    return bp
