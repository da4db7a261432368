from __future__ import annotations

from content_reviewer.web.security_headers import content_security_policy, origin_of


def test_origin_of():
    assert origin_of("https://reviews.example:8443/api/v1") == "https://reviews.example:8443"
    assert origin_of("") == ""
    assert origin_of("not a url") == ""


def test_policy_includes_backend_and_uploader_origins():
    csp = content_security_policy("http://backend:3001", "https://uploader.example/path")
    assert "connect-src 'self' http://backend:3001" in csp
    assert "form-action 'self' https://uploader.example" in csp
    assert "object-src 'none'" in csp


def test_policy_without_uploader():
    assert "form-action 'self';" in content_security_policy("http://backend:3001")
