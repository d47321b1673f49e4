"""Signature capture: draw, upload and typed-text modes."""

from dataclasses import dataclass
from typing import Callable, Optional

from PIL import Image

from docsign.config import settings
from docsign.core.errors import ValidationError
from docsign.core.raster import StrokeCanvas, TextRasterizer, image_size, to_data_url
from docsign.models.signature import SignatureArtifact, SignatureMode
from docsign.services.preview import PreviewHandle, PreviewStore
from docsign.utils.logger import logger
from docsign.utils.validators import IMAGE_TOO_LARGE, file_extension_for, validate_signature_upload

# Called with (artifact, created); created is True when an artifact appears
# where there was none.
ArtifactListener = Callable[[Optional[SignatureArtifact], bool], None]


@dataclass(frozen=True)
class UploadedFile:
    """A file chosen by the user."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class SignatureInputManager:
    """Produces one normalized SignatureArtifact from the active input mode.

    Only one mode is active at a time. Switching modes discards whatever the
    previous mode captured, including its preview resource.
    """

    def __init__(
        self,
        preview_store: PreviewStore | None = None,
        canvas: StrokeCanvas | None = None,
        text_rasterizer: TextRasterizer | None = None,
        max_upload_bytes: int | None = None,
    ):
        self.preview_store = preview_store or PreviewStore()
        self.canvas = canvas or StrokeCanvas(
            settings.draw_canvas_width,
            settings.draw_canvas_height,
            settings.draw_stroke_width,
        )
        self.text_rasterizer = text_rasterizer or TextRasterizer(
            settings.signature_font_size,
            settings.signature_text_padding,
            settings.signature_font_path,
        )
        self.max_upload_bytes = max_upload_bytes or settings.max_signature_upload_bytes

        self.mode: SignatureMode | None = None
        self.artifact: SignatureArtifact | None = None
        self.text = ""
        self.error: ValidationError | None = None
        self._preview: PreviewHandle | None = None
        self._listeners: list[ArtifactListener] = []

    @property
    def preview(self) -> PreviewHandle | None:
        return self._preview

    def add_listener(self, listener: ArtifactListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ArtifactListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Mode handling
    # ------------------------------------------------------------------

    def select_mode(self, mode: SignatureMode | str) -> bool:
        """Activate a mode; returns False when it was already active."""
        mode = SignatureMode(mode)
        if mode == self.mode:
            return False
        self._discard_capture()
        self.mode = mode
        logger.debug(f"Signature mode switched to {mode.value}")
        return True

    def clear(self) -> None:
        """Discard the current capture but keep the active mode."""
        self._discard_capture()

    def reset(self) -> None:
        """Deselect the mode, then discard the capture."""
        self.mode = None
        self._discard_capture()

    def _discard_capture(self) -> None:
        self.canvas.clear()
        self.text = ""
        self.error = None
        self._release_preview()
        self._set_artifact(None)

    def _require_mode(self, mode: SignatureMode) -> None:
        if self.mode != mode:
            raise ValidationError(f"Signature mode '{mode.value}' is not active")

    # ------------------------------------------------------------------
    # Draw
    # ------------------------------------------------------------------

    def begin_stroke(self, x: float, y: float) -> None:
        self._require_mode(SignatureMode.DRAW)
        self.canvas.begin_stroke(x, y)

    def add_point(self, x: float, y: float) -> None:
        self._require_mode(SignatureMode.DRAW)
        self.canvas.add_point(x, y)

    def end_stroke(self) -> Optional[SignatureArtifact]:
        """Stroke-end event: rasterize the canvas unless it is empty."""
        self._require_mode(SignatureMode.DRAW)
        self.canvas.end_stroke()
        if self.canvas.is_empty():
            self._set_artifact(None)
            return None
        png = self.canvas.to_png()
        self._set_artifact(
            SignatureArtifact(
                image_data=to_data_url(png, "image/png"),
                source_mode=SignatureMode.DRAW,
                file_extension="png",
                width=self.canvas.width,
                height=self.canvas.height,
            )
        )
        return self.artifact

    def draw_stroke(self, points: list[tuple[float, float]]) -> Optional[SignatureArtifact]:
        """Feed a whole stroke and end it."""
        self._require_mode(SignatureMode.DRAW)
        for x, y in points:
            self.canvas.add_point(x, y)
        return self.end_stroke()

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def upload(self, file: UploadedFile) -> SignatureArtifact:
        """Accept an image file as the signature.

        A rejected file leaves the previous artifact and preview in place.
        """
        self._require_mode(SignatureMode.UPLOAD)
        try:
            validate_signature_upload(file.content_type, file.size, self.max_upload_bytes)
        except ValidationError as e:
            logger.warning(f"Rejected signature upload {file.filename!r}: {e}")
            self.error = e
            raise

        try:
            width, height = image_size(file.data)
        except Image.DecompressionBombError as e:
            logger.warning(f"Rejected signature upload {file.filename!r}: {e}")
            self.error = ValidationError(IMAGE_TOO_LARGE)
            raise self.error from e
        except OSError:
            logger.warning(f"Could not read dimensions of {file.filename!r}")
            width, height = 0, 0

        extension = file_extension_for(file.content_type)
        self._release_preview()
        self._preview = self.preview_store.acquire(file.data, suffix=extension)
        self.error = None
        self._set_artifact(
            SignatureArtifact(
                image_data=to_data_url(file.data, file.content_type.lower()),
                source_mode=SignatureMode.UPLOAD,
                file_extension=extension,
                width=width,
                height=height,
                preview_uri=self._preview.uri,
            )
        )
        logger.info(f"Signature image {file.filename!r} loaded ({file.size} bytes)")
        return self.artifact

    def _release_preview(self) -> None:
        if self._preview is not None:
            self._preview.release()
            self._preview = None

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def set_text(self, text: str) -> Optional[SignatureArtifact]:
        """Re-rasterize the typed signature; empty text clears the artifact."""
        self._require_mode(SignatureMode.TEXT)
        self.text = text
        if not text:
            self._set_artifact(None)
            return None
        png = self.text_rasterizer.render(text)
        width, height = self.text_rasterizer.size
        self._set_artifact(
            SignatureArtifact(
                image_data=to_data_url(png, "image/png"),
                source_mode=SignatureMode.TEXT,
                file_extension="png",
                width=width,
                height=height,
            )
        )
        return self.artifact

    # ------------------------------------------------------------------

    def _set_artifact(self, artifact: Optional[SignatureArtifact]) -> None:
        created = self.artifact is None and artifact is not None
        if artifact is None and self.artifact is None:
            return
        if artifact is not None and self.artifact is not None and artifact == self.artifact:
            return
        self.artifact = artifact
        for listener in list(self._listeners):
            listener(artifact, created)
