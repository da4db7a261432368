## routes.py
from __future__ import annotations

import io
from typing import Optional

from flask import (
    Blueprint,
    current_app,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    send_file,
    url_for,
)

from content_reviewer.client.form_state import check_exclusive
from content_reviewer.client.poller import PollState, advance
from content_reviewer.config.ini_config import AppSettings
from content_reviewer.domain.errors import (
    BackendUnavailable,
    ReviewerError,
    ReviewNotFound,
    ValidationError,
)
from content_reviewer.domain.mapping import status_payload
from content_reviewer.domain.models import ReviewStatus, Submission, SubmissionFile
from content_reviewer.renderers import render_docx, render_pdf
from content_reviewer.services.pii import warn_if_pii
from content_reviewer.services.result_formatter import document_information, summary_rows
from content_reviewer.services.review_service import ReviewService
from content_reviewer.services.validation import format_megabytes

RECENT_REVIEWS = 20
HISTORY_LIMIT = 100

EXPORT_FORMATS = {
    "pdf": ("application/pdf", "pdf", render_pdf),
    "word": ("application/vnd.openxmlformats-officedocument.wordprocessingml.document", "docx", render_docx),
}


def _safe_int(raw: Optional[str]) -> Optional[int]:
    raw = (raw or "").strip()
    return int(raw) if raw.isdigit() else None


def _error_page(title: str, message: str, code: int):
    return render_template("error.html", title=title, message=message), code


def create_blueprint(review_service: ReviewService, settings: AppSettings) -> Blueprint:
    bp = Blueprint("web", __name__)

    def _lookup_error(review_id: str, e: ReviewerError):
        """Shared error page for the read-only review views."""
        if isinstance(e, ReviewNotFound):
            return _error_page("Review not found", f"No review exists with id {review_id}.", 404)
        if isinstance(e, ValidationError):
            return _error_page("Invalid request", e.message, 400)
        current_app.logger.error("Backend unavailable for review %s: %s", review_id, e.detail or e.message)
        return _error_page("Service unavailable", "The review service is not available right now. Please try again shortly.", 502)

    def _render_index(text_content: str = "", title: str = "", status: int = 200):
        try:
            reviews = review_service.list_reviews(limit=RECENT_REVIEWS).reviews
        except ReviewerError as e:
            current_app.logger.warning("Could not load recent reviews: %s", e.detail or e.message)
            reviews = []

        current_app.logger.info("Recent reviews loaded: %d", len(reviews))
        return render_template(
            "index.html",
            reviews=reviews,
            max_size=format_megabytes(settings.max_upload_bytes),
            accept=",".join(f".{ext}" for ext in settings.allowed_extensions),
            min_text_length=settings.text_min_length,
            max_text_length=settings.text_max_length,
            text_content=text_content,
            title=title,
        ), status

    @bp.get("/")
    def index():
        return _render_index()

    @bp.post("/")
    def submit():
        file = request.files.get("file")
        text = request.form.get("textContent") or ""
        title = (request.form.get("title") or "").strip()
        has_file = bool(file and file.filename)

        try:
            check_exclusive(has_file, bool(text.strip()))
            if has_file:
                submission = Submission(file=SubmissionFile(file.filename, file.read(), file.mimetype or None))
            else:
                submission = Submission(text=text)
            accepted = review_service.submit(submission, title=title)
        except ValidationError as e:
            flash(e.message, "error")
            return _render_index(text, title, 400)
        except BackendUnavailable as e:
            current_app.logger.error("Submission relay failed: %s", e.detail or e.message)
            flash(e.message, "error")
            return _render_index(text, title, e.status_code)

        current_app.logger.info("Submitted review %s", accepted.review_id)
        flash("Submitted for review", "success")
        return redirect(url_for("web.status_poller", review_id=accepted.review_id))

    @bp.get("/review/status-poller/<review_id>")
    def status_poller(review_id: str):
        attempts = _safe_int(request.args.get("attempt")) or 0

        # one poll per render
        try:
            observation = review_service.get_job(review_id)
        except BackendUnavailable as e:
            current_app.logger.warning("Status poll %d for %s failed: %s", attempts + 1, review_id, e.detail or e.message)
            observation = e
        except ReviewerError as e:
            return _lookup_error(review_id, e)

        step = advance(attempts, observation, settings.poll_max_attempts)
        if step.state is PollState.COMPLETED:
            return redirect(url_for("web.results", review_id=review_id))

        refresh_url = None
        if step.state is PollState.PROCESSING:
            refresh_url = url_for("web.status_poller", review_id=review_id, attempt=step.attempts)

        return render_template(
            "status_poller.html",
            review_id=review_id,
            step=step,
            progress=step.job.progress if step.job else 0,
            refresh_url=refresh_url,
            refresh_seconds=max(1, int(round(settings.poll_interval_seconds))),
            max_attempts=settings.poll_max_attempts,
        )

    @bp.get("/review/status/<review_id>")
    def status(review_id: str):
        try:
            job = review_service.get_job(review_id)
        except ReviewerError as e:
            if e.status_code >= 500:
                current_app.logger.error("Status lookup for %s failed: %s", review_id, e.detail or e.message)
            return jsonify({"success": False, "message": e.message}), e.status_code
        return jsonify(status_payload(job))

    @bp.get("/review/results/<review_id>")
    def results(review_id: str):
        try:
            job, report = review_service.get_report(review_id)
        except ReviewerError as e:
            return _lookup_error(review_id, e)

        if job.status is ReviewStatus.FAILED:
            return _error_page("Review failed", f"Review failed: {job.error_message or 'Unknown error'}", 200)
        if report is None:
            return render_template("pending.html", job=job)

        for section in report.sections:
            warn_if_pii(section.body, f"review {review_id} section {section.key}")

        return render_template(
            "results.html",
            report=report,
            info_rows=document_information(report),
            summary=summary_rows(report),
        )

    def _export(review_id: str, fmt: str):
        mimetype, extension, render = EXPORT_FORMATS[fmt]
        try:
            job, report = review_service.get_report(review_id)
        except ReviewerError as e:
            return _lookup_error(review_id, e)

        if report is None:
            return render_template("pending.html", job=job), 409

        data = render(report)
        current_app.logger.info("Exported review %s as %s (%d bytes)", review_id, fmt, len(data))
        return send_file(
            io.BytesIO(data),
            mimetype=mimetype,
            as_attachment=True,
            download_name=f"review-results-{review_id}.{extension}",
        )

    @bp.get("/review/export/<review_id>/pdf")
    def export_pdf(review_id: str):
        return _export(review_id, "pdf")

    @bp.get("/review/export/<review_id>/word")
    def export_word(review_id: str):
        return _export(review_id, "word")

    @bp.get("/review/history")
    def history():
        error = None
        reviews = []
        try:
            reviews = review_service.list_reviews(limit=HISTORY_LIMIT).reviews
        except ReviewerError as e:
            current_app.logger.error("Could not load review history: %s", e.detail or e.message)
            error = "Could not load review history. Please try again later."

        if request.args.get("error") == "delete_failed":
            error = "Failed to delete the review. Please try again."

        return render_template("history.html", reviews=reviews, error=error)

    @bp.post("/review/history/<review_id>/delete")
    def delete_review(review_id: str):
        try:
            review_service.delete_review(review_id)
        except ReviewerError as e:
            current_app.logger.error("Delete of review %s failed: %s", review_id, e.detail or e.message)
            return redirect(url_for("web.history", error="delete_failed"))

        current_app.logger.info("Deleted review %s", review_id)
        flash("Review deleted", "success")
        return redirect(url_for("web.history"))

    @bp.get("/health")
    def health():
        return jsonify({"message": "success"})

    return bp
