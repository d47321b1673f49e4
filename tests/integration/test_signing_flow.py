"""Integration tests for a full signing session."""

import asyncio
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from docsign.core.errors import AuthError, NotFoundError
from docsign.main import app
from docsign.models.document import DocumentStatus
from docsign.models.signature import PlacementState
from docsign.services.signature_input import UploadedFile
from docsign.services.signing_session import SigningSession


@pytest.fixture
def session(store, auth, preview_store):
    session = SigningSession(
        "doc123", store, auth, container_width=600, preview_store=preview_store, settle_delay=0.01
    )
    yield session
    session.close()


class TestSigningSession:
    """Session lifecycle against a Document Store double."""

    async def test_open_loads_and_measures_twice(self, session, store):
        assert await session.open() is True

        assert session.document.id == "doc123"
        assert session.surface.page_count == 2
        assert session.surface.state.rendered_width == 0
        assert session.pending_callbacks == 2

        await asyncio.sleep(0)
        assert (session.surface.state.rendered_width, session.surface.state.rendered_height) == (600, 800)

        await asyncio.sleep(0.05)
        assert session.surface.commit_measurement() is False

    async def test_open_without_token_redirects(self, session, store, auth):
        auth.token = None
        assert await session.open() is False
        assert session.redirect_to == "/login"
        store.get_document.assert_not_awaited()

    async def test_open_not_found_is_inline(self, session, store):
        store.get_document.side_effect = NotFoundError()
        assert await session.open() is False
        assert session.error_message == NotFoundError.default_message
        assert not session.logged_out

    async def test_open_unauthorized_logs_out(self, session, store, auth):
        store.get_document.side_effect = AuthError()
        assert await session.open() is False
        assert session.logged_out
        assert auth.token is None

    async def test_resize_commits_new_measurement(self, session):
        await session.open()
        await asyncio.sleep(0)

        session.resize(450)

        assert (session.surface.state.rendered_width, session.surface.state.rendered_height) == (450, 600)

    async def test_text_signature_applied_after_resize(self, session, store):
        await session.open()
        await asyncio.sleep(0)
        session.select_mode("text")
        session.type_signature("Jane Doe")
        session.drop_signature(100, 100)
        session.resize(300)

        await session.apply_signature()

        request = store.sign_document.await_args.args[0]
        assert (request.pdf_page_dimensions.width, request.pdf_page_dimensions.height) == (300, 400)
        assert request.signature_type.value == "text"
        assert store.get_document.await_count == 1
        assert store.get_document_file.await_count == 2
        assert session.document.status == DocumentStatus.SIGNED
        assert session.state == PlacementState.IDLE

    async def test_snapshot_after_apply_is_idle(self, session):
        await session.open()
        session.select_mode("draw")
        session.draw_stroke([(10, 10), (80, 40)])

        await session.apply_signature()

        snapshot = session.snapshot()
        assert snapshot["state"] == "idle"
        assert snapshot["mode"] is None
        assert snapshot["can_submit"] is False
        assert snapshot["signature"] is None
        assert snapshot["document"]["status"] == "signed"

    async def test_snapshot_after_unauthorized_apply_is_idle(self, session, store):
        store.sign_document.side_effect = AuthError()
        await session.open()
        session.select_mode("text")
        session.type_signature("Jane Doe")

        await session.apply_signature()

        snapshot = session.snapshot()
        assert snapshot["state"] == "idle"
        assert snapshot["mode"] is None
        assert snapshot["can_submit"] is False
        assert snapshot["logged_out"] is True
        assert snapshot["redirect_to"] == "/login"

    async def test_mark_reviewed_leaves_signature_alone(self, session, store):
        await session.open()
        session.select_mode("draw")
        session.draw_stroke([(10, 10), (80, 40)])
        artifact = session.inputs.artifact

        document = await session.mark_reviewed()

        assert document.status == DocumentStatus.REVIEWED
        store.update_status.assert_awaited_once_with("doc123", DocumentStatus.REVIEWED)
        assert session.inputs.artifact == artifact
        assert session.state == PlacementState.READY
        assert not session.updating_status

    async def test_close_releases_everything(self, session, preview_store, png_bytes):
        await session.open()
        session.select_mode("upload")
        session.upload_signature(UploadedFile("sig.png", "image/png", png_bytes))
        preview = session.inputs.preview

        session.close()

        assert preview.released
        assert not preview.path.exists()
        assert preview_store.live_handles == 0
        assert session.pending_callbacks == 0
        assert session.surface.listener_count == 0
        assert not session.surface.is_loaded

    async def test_save_document(self, session, tmp_path, pdf_bytes):
        await session.open()
        path = session.save_document(tmp_path / "downloads")
        assert path.name == "signed_document_doc123.pdf"
        assert path.read_bytes() == pdf_bytes


@pytest.fixture
def client(store):
    with patch("docsign.api.routes._store_for", return_value=store):
        with TestClient(app) as test_client:
            yield test_client


HEADERS = {"Authorization": "Bearer test-token"}


class TestSigningApi:
    """Drive a session through the HTTP surface."""

    def _open(self, client) -> str:
        response = client.post(
            "/api/v1/sessions", json={"document_id": "doc123", "container_width": 600}, headers=HEADERS
        )
        assert response.status_code == 201
        return response.json()["session_id"]

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_open_requires_token(self, client):
        response = client.post("/api/v1/sessions", json={"document_id": "doc123"})
        assert response.status_code == 401
        assert response.json()["redirect"] == "/login"

    def test_draw_drag_apply(self, client, store):
        session_id = self._open(client)
        base = f"/api/v1/sessions/{session_id}"

        assert client.post(f"{base}/mode", json={"mode": "draw"}).json()["state"] == "capturing"
        body = client.post(f"{base}/strokes", json={"points": [[10, 10], [60, 40], [100, 20]]}).json()
        assert body["state"] == "ready"
        assert body["position"] == {"x": 50, "y": 50}

        body = client.post(f"{base}/drag", json={"x": 120, "y": 80}).json()
        assert body["position"] == {"x": 120, "y": 80}

        response = client.post(f"{base}/apply")
        assert response.status_code == 200
        body = response.json()
        assert body["state"] == "idle"
        assert body["mode"] is None
        assert body["can_submit"] is False
        assert body["document"]["status"] == "signed"
        assert client.get(base).json()["state"] == "idle"

        payload = store.sign_document.await_args.args[0].to_payload()
        assert payload["signaturePosition"] == {"x": 120, "y": 80}
        assert payload["pdfPageDimensions"] == {"width": 600, "height": 800}

    def test_page_image(self, client):
        session_id = self._open(client)
        response = client.get(f"/api/v1/sessions/{session_id}/page")
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"

    def test_upload_too_large(self, client):
        session_id = self._open(client)
        base = f"/api/v1/sessions/{session_id}"
        client.post(f"{base}/mode", json={"mode": "upload"})

        big = b"\x89PNG" + b"\0" * (6 * 1024 * 1024)
        response = client.post(f"{base}/upload", files={"file": ("big.png", big, "image/png")})

        assert response.status_code == 400
        assert response.json()["detail"] == "file too large"
        assert client.get(base).json()["signature"] is None

    def test_upload_then_fetch_signature(self, client, png_bytes):
        session_id = self._open(client)
        base = f"/api/v1/sessions/{session_id}"
        client.post(f"{base}/mode", json={"mode": "upload"})

        response = client.post(f"{base}/upload", files={"file": ("sig.png", png_bytes, "image/png")})
        assert response.status_code == 200
        assert response.json()["signature"]["file_extension"] == "png"

        image = client.get(f"{base}/signature")
        assert image.content == png_bytes

    def test_apply_without_signature_is_rejected(self, client, store):
        session_id = self._open(client)
        client.post(f"/api/v1/sessions/{session_id}/mode", json={"mode": "text"})

        response = client.post(f"/api/v1/sessions/{session_id}/apply")

        assert response.status_code == 400
        store.sign_document.assert_not_awaited()

    def test_unauthorized_apply_ends_session(self, client, store):
        store.sign_document.side_effect = AuthError()
        session_id = self._open(client)
        base = f"/api/v1/sessions/{session_id}"
        client.post(f"{base}/mode", json={"mode": "text"})
        client.put(f"{base}/text", json={"text": "Jane Doe"})

        response = client.post(f"{base}/apply")

        assert response.status_code == 401
        assert response.json()["redirect"] == "/login"
        assert client.get(base).status_code == 404

    def test_review(self, client, store):
        session_id = self._open(client)
        response = client.post(f"/api/v1/sessions/{session_id}/review")
        assert response.status_code == 200
        assert response.json()["document"]["status"] == "reviewed"

    def test_close_session(self, client):
        session_id = self._open(client)
        assert client.delete(f"/api/v1/sessions/{session_id}").status_code == 204
        assert client.get(f"/api/v1/sessions/{session_id}").status_code == 404
