from __future__ import annotations

from typing import Optional

from flask import Flask, flash, jsonify, redirect, request, url_for
from werkzeug.exceptions import RequestEntityTooLarge

from content_reviewer.adapters.backend_client import BackendClient
from content_reviewer.adapters.uploader_client import UploaderClient
from content_reviewer.config.ini_config import AppSettings, IniConfig
from content_reviewer.logging_setup import setup_logging
from content_reviewer.services.pii import sanitize_for_display
from content_reviewer.services.review_service import ReviewService
from content_reviewer.services.validation import InputValidator
from content_reviewer.web.api import create_api_blueprint
from content_reviewer.web.routes import create_blueprint
from content_reviewer.web.security_headers import register_security_headers
from content_reviewer.web.session_store import ServerSideSessionInterface, create_session_store
from content_reviewer.web.uploads import create_upload_blueprint

# multipart framing on top of the file itself; anything past this never reaches the validator
UPLOAD_SLACK_BYTES = 1024 * 1024


def create_app(
    settings: Optional[AppSettings] = None,
    backend: Optional[BackendClient] = None,
    uploader: Optional[UploaderClient] = None,
    session_store=None,
) -> Flask:
    if settings is None:
        settings = IniConfig.from_env_or_default().load_settings()
        setup_logging(settings)

    validator = InputValidator.from_settings(settings)

    backend = backend or BackendClient(
        base_url=settings.backend_url,
        timeout_seconds=settings.backend_timeout_seconds,
    )
    uploader = uploader or UploaderClient(
        url=settings.uploader_url,
        s3_bucket=settings.uploader_s3_bucket,
        s3_path=settings.uploader_s3_path,
        max_bytes=settings.max_upload_bytes,
        mime_types=settings.allowed_mime_types,
        timeout_seconds=settings.backend_timeout_seconds,
    )

    review_service = ReviewService(backend=backend, validator=validator)

    app = Flask(__name__)
    app.secret_key = settings.session_secret_key
    app.config["MAX_CONTENT_LENGTH"] = settings.max_upload_bytes + UPLOAD_SLACK_BYTES
    if session_store is None:
        session_store = create_session_store(settings)
    app.session_interface = ServerSideSessionInterface(
        session_store,
        ttl_seconds=settings.session_ttl_seconds,
    )

    app.register_blueprint(create_blueprint(review_service, settings))
    app.register_blueprint(create_api_blueprint(review_service))
    app.register_blueprint(create_upload_blueprint(uploader))

    app.add_template_filter(sanitize_for_display, "redacted")
    register_security_headers(app, settings.backend_url, settings.uploader_url)

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(_e):
        message = validator.size_error(request.content_length or 0)
        app.logger.info("Rejected oversized request to %s (%s bytes)", request.path, request.content_length)
        if request.path.startswith("/api/"):
            return jsonify({"success": False, "message": message}), 400
        flash(message, "error")
        return redirect(url_for("web.index"))

    app.config["HOST"] = settings.flask_host
    app.config["PORT"] = settings.flask_port
    app.config["DEBUG"] = settings.flask_debug

    return app
