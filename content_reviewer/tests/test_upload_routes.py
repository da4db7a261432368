from __future__ import annotations

import pytest

from content_reviewer.app_factory import create_app
from content_reviewer.domain.models import UploadSession, UploadStatus
from content_reviewer.web.session_store import MemorySessionStore
from content_reviewer.web.uploads import UNAVAILABLE_MESSAGE


def _ready() -> UploadSession:
    return UploadSession("up-1", UploadStatus.READY, file_metadata={"filename": "policy.pdf"})


def test_initiate_redirects_to_uploader_and_remembers_upload(client, uploader):
    resp = client.post("/upload/initiate")

    assert resp.status_code == 302
    assert resp.headers["Location"] == "http://uploader.test/upload-and-scan/up-1"
    _name, redirect, callback = uploader.calls[0]
    assert redirect.endswith("/upload/complete")
    assert callback.endswith("/upload/callback")

    with client.session_transaction() as sess:
        assert sess["upload_id"] == "up-1"


def test_complete_ready_flashes_success(client, uploader):
    client.post("/upload/initiate")
    uploader.statuses = [_ready()]

    resp = client.get("/upload/complete", follow_redirects=True)

    assert b"policy.pdf uploaded successfully" in resp.data
    with client.session_transaction() as sess:
        assert "upload_id" not in sess


def test_complete_rejected_flashes_reason(client, uploader):
    client.post("/upload/initiate")
    uploader.statuses = [UploadSession("up-1", UploadStatus.REJECTED, error_message="The selected file contains a virus")]

    resp = client.get("/upload/complete", follow_redirects=True)

    assert b"The selected file contains a virus" in resp.data


def test_complete_still_pending_goes_to_status_page(client, uploader):
    client.post("/upload/initiate")

    resp = client.get("/upload/complete")

    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/upload/status-poller")


def test_status_poller_refreshes_then_finishes(client, uploader):
    client.post("/upload/initiate")

    pending = client.get("/upload/status-poller").get_data(as_text=True)
    assert "attempt=1" in pending

    uploader.statuses = [_ready()]
    assert client.get("/upload/status-poller?attempt=1").status_code == 302


def test_status_json(client, uploader):
    uploader.statuses = [_ready()]
    body = client.get("/upload/status/up-1").get_json()
    assert body["uploadStatus"] == "ready"
    assert body["fileMetadata"] == {"filename": "policy.pdf"}


def test_callback_acknowledges(client):
    assert client.post("/upload/callback", json={"uploadStatus": "ready"}).get_json() == {"received": True}


class UnconfiguredUploader:
    url = ""
    enabled = False


@pytest.fixture
def disabled_client(settings, backend):
    app = create_app(settings=settings, backend=backend, uploader=UnconfiguredUploader(), session_store=MemorySessionStore())
    return app.test_client()


def test_disabled_uploader_explains_itself(disabled_client):
    assert UNAVAILABLE_MESSAGE.encode() in disabled_client.get("/upload").data

    resp = disabled_client.post("/upload/initiate", follow_redirects=True)
    assert UNAVAILABLE_MESSAGE.encode() in resp.data
