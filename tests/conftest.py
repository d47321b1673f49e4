"""Shared fixtures: generated PDFs and images, a fake Document Store."""

import io
from unittest.mock import AsyncMock, MagicMock

import fitz
import pytest
from PIL import Image, ImageDraw

from docsign.core.auth import AuthContext
from docsign.models.document import DocumentMetadata, DocumentStatus
from docsign.services.preview import PreviewStore
from docsign.store.abstractions import IDocumentStore
from docsign.utils.audit import clear_audit_log


@pytest.fixture
def pdf_factory():
    """Build an in-memory PDF whose pages have the given point size."""

    def _make(pages: int = 2, width: float = 600, height: float = 800) -> bytes:
        doc = fitz.open()
        for i in range(pages):
            page = doc.new_page(width=width, height=height)
            page.insert_text((72, 72), f"Page {i + 1}")
        data = doc.tobytes()
        doc.close()
        return data

    return _make


@pytest.fixture
def pdf_bytes(pdf_factory) -> bytes:
    return pdf_factory()


@pytest.fixture
def png_bytes() -> bytes:
    img = Image.new("RGBA", (200, 100), (0, 0, 0, 0))
    ImageDraw.Draw(img).line([(10, 80), (190, 20)], fill=(0, 0, 0, 255), width=4)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def preview_store(tmp_path) -> PreviewStore:
    return PreviewStore(tmp_path / "previews")


@pytest.fixture
def auth() -> AuthContext:
    return AuthContext(token="test-token")


@pytest.fixture
def document() -> DocumentMetadata:
    return DocumentMetadata.model_validate(
        {
            "_id": "doc123",
            "fileName": "contract.pdf",
            "originalName": "contract.pdf",
            "fileType": "application/pdf",
            "status": "pending",
        }
    )


@pytest.fixture
def store(document, pdf_bytes):
    """Document Store double answering every call successfully."""
    mock_store = MagicMock(spec=IDocumentStore)
    mock_store.get_document = AsyncMock(return_value=document)
    mock_store.get_document_file = AsyncMock(return_value=pdf_bytes)
    mock_store.sign_document = AsyncMock(
        return_value=document.model_copy(update={"status": DocumentStatus.SIGNED})
    )
    mock_store.update_status = AsyncMock(
        return_value=document.model_copy(update={"status": DocumentStatus.REVIEWED})
    )
    return mock_store


@pytest.fixture(autouse=True)
def _clean_audit_log():
    clear_audit_log()
    yield
    clear_audit_log()
