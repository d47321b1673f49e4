"""Signing session: owns the capture/placement pipeline for one document."""

import asyncio
from pathlib import Path
from typing import Any, Optional

from docsign.config import settings
from docsign.core.auth import AuthContext
from docsign.core.errors import AuthError, DocSignError, ValidationError
from docsign.models.document import DocumentMetadata, DocumentStatus
from docsign.models.signature import PageDimensions, PlacementState, SignatureArtifact, SignatureMode
from docsign.services.overlay import OverlayPositioner
from docsign.services.page_surface import PageRenderSurface
from docsign.services.placement import PlacementSubmitter
from docsign.services.preview import PreviewStore
from docsign.services.signature_input import SignatureInputManager, UploadedFile
from docsign.store.abstractions import IDocumentStore
from docsign.utils.audit import log_operation
from docsign.utils.logger import logger
from docsign.utils.validators import validate_document_id


class SigningSession:
    """Lifecycle and resource manager of a signing page.

    Opening the session loads the document and schedules the two post-load
    measurements; closing it cancels pending callbacks, deregisters listeners,
    releases the live preview and drops any response still in flight.
    """

    def __init__(
        self,
        document_id: str,
        store: IDocumentStore,
        auth: AuthContext,
        container_width: int | None = None,
        preview_store: PreviewStore | None = None,
        settle_delay: float | None = None,
    ):
        if not validate_document_id(document_id):
            raise ValidationError("No valid document ID provided.")
        self.document_id = document_id
        self.store = store
        self.auth = auth
        self.settle_delay = settings.measurement_settle_delay if settle_delay is None else settle_delay

        self.surface = PageRenderSurface(container_width)
        self.inputs = SignatureInputManager(preview_store=preview_store)
        self.positioner = OverlayPositioner(lambda: self.surface.state.dimensions)
        self.submitter = PlacementSubmitter(
            document_id,
            store,
            auth,
            self.inputs,
            self.positioner,
            self.surface,
            on_success=self._after_signature,
        )

        self.document: DocumentMetadata | None = None
        self.pdf_bytes: bytes | None = None
        self.loading = False
        self.updating_status = False
        self.error: DocSignError | None = None
        self.redirect_to: str | None = None
        self.closed = False
        self._pending: list[asyncio.Handle] = []

        self.inputs.add_listener(self._on_artifact)
        self.surface.add_resize_listener(self._on_resize)
        self.auth.add_logout_listener(self._on_logout)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> bool:
        """Fetch and render the document; False when loading failed."""
        if not self.auth.is_authenticated:
            self._on_logout(self.auth.login_route)
            return False
        return await self._load()

    async def _load(self, document: DocumentMetadata | None = None) -> bool:
        """Fetch metadata (unless already known) and the PDF, then render it."""
        self.loading = True
        self.error = None
        try:
            if document is None:
                document = await self.store.get_document(self.document_id)
            pdf_bytes = await self.store.get_document_file(self.document_id)
            if self.closed:
                return False
            self.document = document
            self.pdf_bytes = pdf_bytes
            self.surface.load(pdf_bytes)
        except AuthError as e:
            self.error = e
            self.auth.clear()
            return False
        except DocSignError as e:
            logger.error(f"Error fetching document {self.document_id}: {e}")
            self.error = e
            return False
        finally:
            self.loading = False

        self._schedule_measurements()
        return True

    def _schedule_measurements(self) -> None:
        """Measure on the next loop iteration and again once layout settles."""
        self._cancel_pending()
        loop = asyncio.get_running_loop()
        self._pending = [
            loop.call_soon(self._measure),
            loop.call_later(self.settle_delay, self._measure),
        ]

    def _measure(self) -> None:
        if not self.closed:
            self.surface.commit_measurement()

    def _cancel_pending(self) -> None:
        for handle in self._pending:
            handle.cancel()
        self._pending = []

    def close(self) -> None:
        """Tear down the session and release everything it owns."""
        if self.closed:
            return
        self.closed = True
        self._cancel_pending()
        self.surface.remove_resize_listener(self._on_resize)
        self.inputs.remove_listener(self._on_artifact)
        self.auth.remove_logout_listener(self._on_logout)
        self.submitter.discard()
        self.inputs.reset()
        self.surface.close()
        logger.info(f"Signing session for {self.document_id} closed")

    @property
    def pending_callbacks(self) -> int:
        return sum(1 for handle in self._pending if not handle.cancelled())

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _on_artifact(self, artifact: Optional[SignatureArtifact], created: bool) -> None:
        self.positioner.place(artifact, created)
        self.submitter.artifact_changed(artifact)

    def _on_resize(self) -> None:
        self.surface.commit_measurement()

    def _on_logout(self, login_route: str) -> None:
        self.redirect_to = login_route
        if self.error is None:
            self.error = AuthError()

    @property
    def logged_out(self) -> bool:
        return self.redirect_to is not None

    # ------------------------------------------------------------------
    # Page
    # ------------------------------------------------------------------

    def resize(self, container_width: int) -> None:
        self.surface.resize(container_width)

    def go_to_page(self, page_number: int) -> None:
        self.surface.go_to_page(page_number)

    def render_page(self) -> bytes:
        return self.surface.render()

    # ------------------------------------------------------------------
    # Signature capture
    # ------------------------------------------------------------------

    def select_mode(self, mode: SignatureMode | str) -> None:
        if self.inputs.select_mode(mode):
            self.positioner.reset()
        self.submitter.mode_selected()

    def draw_stroke(self, points: list[tuple[float, float]]) -> Optional[SignatureArtifact]:
        return self.inputs.draw_stroke(points)

    def upload_signature(self, file: UploadedFile) -> SignatureArtifact:
        return self.inputs.upload(file)

    def type_signature(self, text: str) -> Optional[SignatureArtifact]:
        return self.inputs.set_text(text)

    def move_signature(self, x: float, y: float) -> None:
        self.positioner.drag(x, y)

    def drop_signature(self, x: float | None = None, y: float | None = None) -> None:
        self.positioner.drop(x, y)

    def clear_signature(self) -> None:
        self.inputs.clear()
        self.positioner.reset()

    # ------------------------------------------------------------------
    # Document actions
    # ------------------------------------------------------------------

    async def apply_signature(self) -> Optional[DocumentMetadata]:
        return await self.submitter.apply()

    async def _after_signature(self, document: DocumentMetadata) -> None:
        await self._load(document)

    async def mark_reviewed(self) -> Optional[DocumentMetadata]:
        """Set the document status to reviewed; independent of signing."""
        if self.updating_status:
            return None
        if not self.auth.is_authenticated:
            self._on_logout(self.auth.login_route)
            return None

        self.updating_status = True
        self.error = None
        try:
            document = await self.store.update_status(self.document_id, DocumentStatus.REVIEWED)
        except AuthError as e:
            self.error = e
            self.auth.clear()
            return None
        except DocSignError as e:
            logger.warning(f"Failed to mark {self.document_id} as reviewed: {e}")
            self.error = e
            return None
        finally:
            self.updating_status = False

        if self.closed:
            return None
        log_operation("document_reviewed", document_id=self.document_id)
        await self._load(document)
        return document

    def save_document(self, directory: str | Path) -> Path:
        """Write the currently loaded PDF to ``signed_document_<id>.pdf``."""
        if not self.pdf_bytes:
            raise ValidationError("No document loaded to download.")
        path = Path(directory) / f"signed_document_{self.document_id}.pdf"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.pdf_bytes)
        logger.info(f"Saved document {self.document_id} to {path}")
        return path

    # ------------------------------------------------------------------

    @property
    def state(self) -> PlacementState:
        return self.submitter.state

    @property
    def error_message(self) -> str | None:
        error = self.submitter.error or self.inputs.error or self.error
        return error.inline_message if error else None

    def snapshot(self) -> dict[str, Any]:
        """JSON-serializable view of the session."""
        artifact = self.inputs.artifact
        position = self.positioner.position
        dimensions: PageDimensions = self.surface.state.dimensions
        return {
            "document_id": self.document_id,
            "document": self.document.model_dump(mode="json") if self.document else None,
            "state": self.state.value,
            "can_submit": self.submitter.can_submit,
            "updating_status": self.updating_status,
            "mode": self.inputs.mode.value if self.inputs.mode else None,
            "signature": artifact.model_dump(mode="json", exclude={"image_data"}) if artifact else None,
            "position": position.model_dump() if position else None,
            "page": {
                "number": self.surface.page_number,
                "count": self.surface.page_count,
                "width": dimensions.width,
                "height": dimensions.height,
            },
            "error": self.error_message,
            "logged_out": self.logged_out,
            "redirect_to": self.redirect_to,
        }
