## api.py
from __future__ import annotations

from typing import Optional

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from content_reviewer.client.form_state import check_exclusive
from content_reviewer.domain.errors import InternalError, ReviewerError, ValidationError
from content_reviewer.services.review_service import ReviewService

TEXT_FIELDS = ("textContent", "content")


def _safe_int(raw: Optional[str]) -> Optional[int]:
    raw = (raw or "").strip()
    if raw.lstrip("-").isdigit():
        return int(raw)
    return None


def error_response(e: ReviewerError):
    return jsonify({"success": False, "message": e.message}), e.status_code


def create_api_blueprint(review_service: ReviewService) -> Blueprint:
    bp = Blueprint("api", __name__, url_prefix="/api")

    @bp.errorhandler(ReviewerError)
    def handle_reviewer_error(e: ReviewerError):
        if e.status_code >= 500:
            current_app.logger.error("%s on %s %s: %s", type(e).__name__, request.method, request.path, e.detail or e.message)
        else:
            current_app.logger.info("Rejected %s %s: %s", request.method, request.path, e.message)
        return error_response(e)

    @bp.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return jsonify({"success": False, "message": e.description}), e.code
        current_app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return error_response(InternalError(detail=str(e)))

    @bp.post("/upload")
    def upload():
        file = request.files.get("file")
        has_file = bool(file and file.filename)
        has_text = any((request.form.get(k) or "").strip() for k in TEXT_FIELDS)
        check_exclusive(has_file, has_text)
        if not has_file:
            raise ValidationError("No file uploaded. Please choose a PDF or Word document.")

        content = file.read()
        current_app.logger.info("File upload: %s (%d bytes, %s)", file.filename, len(content), file.mimetype)
        accepted = review_service.submit_file(file.filename, content, file.mimetype or None)

        return jsonify({
            "success": True,
            "message": "File uploaded successfully",
            "reviewId": accepted.review_id,
            "filename": accepted.filename,
        })

    @bp.post("/review-text")
    @bp.post("/review/text")
    def review_text():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object.")

        content = data.get("content")
        if content is None:
            content = data.get("textContent")
        if content is not None and not isinstance(content, str):
            raise ValidationError("Text content must be a string.")

        title = data.get("title")
        title = title if isinstance(title, str) else ""
        user_id = (request.headers.get("X-User-Id") or "").strip() or "anonymous"
        session_id = (request.headers.get("X-Session-Id") or "").strip() or None

        current_app.logger.info("Text submission: %d characters from user=%s", len((content or "").strip()), user_id)
        accepted = review_service.submit_text(content, title=title, user_id=user_id, session_id=session_id)

        return jsonify({
            "success": True,
            "message": "Text content submitted successfully",
            "reviewId": accepted.review_id,
        })

    @bp.get("/reviews")
    def list_reviews():
        page = review_service.list_reviews(
            limit=_safe_int(request.args.get("limit")),
            skip=_safe_int(request.args.get("skip")),
        )
        return jsonify({
            "success": True,
            "reviews": [r.to_dict() for r in page.reviews],
            "pagination": page.pagination.to_dict(),
        })

    @bp.delete("/reviews/<review_id>")
    def delete_review(review_id: str):
        message = review_service.delete_review(review_id)
        current_app.logger.info("Deleted review %s", review_id)
        return jsonify({"success": True, "message": message, "reviewId": review_id})

    return bp
