"""Placement state machine: turns the captured signature into a sign request."""

from typing import Awaitable, Callable, Optional

from docsign.core.auth import AuthContext
from docsign.core.errors import AuthError, DocSignError, PlacementError, ValidationError
from docsign.models.document import DocumentMetadata
from docsign.models.signature import PlacementRequest, PlacementState, SignatureArtifact
from docsign.services.overlay import OverlayPositioner
from docsign.services.page_surface import PageRenderSurface
from docsign.services.signature_input import SignatureInputManager
from docsign.store.abstractions import IDocumentStore
from docsign.utils.audit import log_operation
from docsign.utils.logger import logger

SuccessCallback = Callable[[DocumentMetadata], Awaitable[None]]


class PlacementSubmitter:
    """Drives Idle -> Capturing -> Ready -> Submitting -> Idle | Ready(error).

    Only one submission may be outstanding. The rendered page size is read
    from the live surface when the request is built, never from an earlier
    measurement, so a resize between capture and apply is honoured.
    """

    def __init__(
        self,
        document_id: str,
        store: IDocumentStore,
        auth: AuthContext,
        inputs: SignatureInputManager,
        positioner: OverlayPositioner,
        surface: PageRenderSurface,
        on_success: Optional[SuccessCallback] = None,
    ):
        self.document_id = document_id
        self.store = store
        self.auth = auth
        self.inputs = inputs
        self.positioner = positioner
        self.surface = surface
        self.on_success = on_success

        self.state = PlacementState.IDLE
        self.error: DocSignError | None = None
        self.last_request: PlacementRequest | None = None
        self._discarded = False

    @property
    def can_submit(self) -> bool:
        return self.state == PlacementState.READY and self.inputs.artifact is not None

    @property
    def submitting(self) -> bool:
        return self.state == PlacementState.SUBMITTING

    @property
    def error_message(self) -> str | None:
        return self.error.inline_message if self.error else None

    # ------------------------------------------------------------------
    # Capture events
    # ------------------------------------------------------------------

    def mode_selected(self) -> None:
        if self.submitting:
            return
        self.error = None
        self._settle()

    def artifact_changed(self, artifact: Optional[SignatureArtifact]) -> None:
        if self.submitting:
            return
        self._settle()

    def _settle(self) -> None:
        if self.inputs.mode is None:
            self.state = PlacementState.IDLE
        elif self.inputs.artifact is None:
            self.state = PlacementState.CAPTURING
        else:
            self.state = PlacementState.READY

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def build_request(self) -> PlacementRequest:
        """Package the artifact, position and submit-time page size."""
        artifact = self.inputs.artifact
        if artifact is None:
            raise ValidationError("Please draw, upload, or type a signature before applying.")
        if not self.auth.is_authenticated:
            raise AuthError("Authentication token not found. Please log in again.")

        dimensions = self.surface.live_dimensions()
        if dimensions.is_empty:
            raise PlacementError()

        return PlacementRequest(
            document_id=self.document_id,
            page_number=self.surface.page_number,
            signature_data=artifact.image_data,
            signature_position=self.positioner.position_within(dimensions),
            pdf_page_dimensions=dimensions,
            signature_type=artifact.source_mode,
            signature_file_extension=artifact.file_extension,
        )

    async def apply(self) -> Optional[DocumentMetadata]:
        """Apply the signature; returns the updated document on success."""
        if self.submitting:
            logger.debug("Signature submission already in flight, ignoring")
            return None

        self.error = None
        try:
            request = self.build_request()
        except DocSignError as e:
            self._fail(e)
            return None

        self.state = PlacementState.SUBMITTING
        try:
            document = await self.store.sign_document(request)
        except DocSignError as e:
            if self._discarded:
                logger.info("Discarding failed signature response for closed session")
                return None
            self._fail(e)
            return None
        except Exception as e:
            logger.error(f"Unexpected error applying signature: {e}", exc_info=True)
            self._fail(DocSignError("An unexpected error occurred while applying the signature."))
            return None

        if self._discarded:
            logger.info("Discarding signature response for closed session")
            return None

        self.last_request = request
        log_operation(
            "signature_applied",
            document_id=self.document_id,
            page_number=request.page_number,
            metadata={
                "signature_type": request.signature_type.value,
                "position": request.signature_position.model_dump(),
                "page_dimensions": request.pdf_page_dimensions.model_dump(),
            },
        )
        logger.info(f"Signature applied to document {self.document_id}")

        self.inputs.reset()
        self.positioner.clear()
        self.state = PlacementState.IDLE
        if self.on_success is not None:
            await self.on_success(document)
        return document

    def _fail(self, error: DocSignError) -> None:
        self.error = error
        log_operation(
            "signature_rejected",
            document_id=self.document_id,
            metadata={"error": type(error).__name__, "message": error.inline_message},
        )
        if isinstance(error, AuthError):
            logger.warning(f"Authentication failed while signing {self.document_id}, logging out")
            self.inputs.reset()
            self.positioner.clear()
            self.state = PlacementState.IDLE
            self.auth.clear()
            return
        logger.warning(f"Signature not applied to {self.document_id}: {error.inline_message}")
        self._settle()

    def discard(self) -> None:
        """Session teardown: any response still in flight is dropped."""
        self._discarded = True
