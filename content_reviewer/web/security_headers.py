from __future__ import annotations

from urllib.parse import urlsplit

from flask import Flask


def origin_of(url: str) -> str:
    parts = urlsplit(url or "")
    if not parts.scheme or not parts.netloc:
        return ""
    return f"{parts.scheme}://{parts.netloc}"


def _sources(*extra: str) -> str:
    return " ".join(x for x in ("'self'",) + extra if x)


def content_security_policy(backend_url: str, uploader_url: str = "") -> str:
    # the direct uploader is reached through a form redirect
    directives = [
        "default-src 'self'",
        f"connect-src {_sources(origin_of(backend_url))}",
        "object-src 'none'",
        "frame-ancestors 'none'",
        f"form-action {_sources(origin_of(uploader_url))}",
        "img-src 'self' data:",
        "style-src 'self' 'unsafe-inline'",
    ]
    return "; ".join(directives)


def register_security_headers(app: Flask, backend_url: str, uploader_url: str = "") -> None:
    policy = content_security_policy(backend_url, uploader_url)

    @app.after_request
    def _set_csp(response):
        response.headers.setdefault("Content-Security-Policy", policy)
        return response
