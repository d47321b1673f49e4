"""PDF page rasterization and rendered-size measurement."""

from typing import Callable

import fitz

from docsign.config import settings
from docsign.core.errors import PageRenderError, ValidationError
from docsign.models.signature import PageDimensions, PageRenderState
from docsign.utils.logger import logger

ResizeListener = Callable[[], None]
MeasurementListener = Callable[[PageRenderState], None]


class PageRenderSurface:
    """Adapter around PyMuPDF that renders one page into a display container.

    The page is rasterized to the container's pixel width. Placement
    coordinates live in this rendered pixel space, never in the page's
    intrinsic point space, so the surface reports the size of the raster it
    actually produced.
    """

    def __init__(self, container_width: int | None = None):
        self.container_width = container_width or settings.default_container_width
        self.state = PageRenderState()
        self._doc: fitz.Document | None = None
        self._pixmap: fitz.Pixmap | None = None
        self._resize_listeners: list[ResizeListener] = []
        self._measurement_listeners: list[MeasurementListener] = []

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------

    def load(self, pdf_bytes: bytes) -> int:
        """Load a PDF from bytes and rasterize its first page."""
        if not pdf_bytes:
            raise PageRenderError("Document is empty or is not a PDF.")
        try:
            doc = fitz.open(stream=pdf_bytes, filetype="pdf")
        except Exception as e:
            logger.error(f"Failed to open PDF: {e}")
            raise PageRenderError("Document could not be loaded or is not a PDF.") from e
        if doc.page_count == 0:
            doc.close()
            raise PageRenderError("Document has no pages.")

        self.close()
        self._doc = doc
        page_number = min(self.state.page_number, doc.page_count)
        self.state = PageRenderState(page_number=page_number)
        self._rasterize()
        logger.info(f"Loaded PDF with {doc.page_count} page(s)")
        return doc.page_count

    @property
    def is_loaded(self) -> bool:
        return self._doc is not None

    @property
    def page_count(self) -> int:
        return self._doc.page_count if self._doc is not None else 0

    @property
    def page_number(self) -> int:
        return self.state.page_number

    def go_to_page(self, page_number: int) -> None:
        """Rasterize another page (1-based)."""
        if not 1 <= page_number <= self.page_count:
            raise ValidationError(f"Page {page_number} is out of range (1-{self.page_count})")
        self.state = self.state.model_copy(update={"page_number": page_number})
        self._rasterize()
        self._notify_resize()

    def next_page(self) -> None:
        self.go_to_page(min(self.page_number + 1, self.page_count))

    def previous_page(self) -> None:
        self.go_to_page(max(self.page_number - 1, 1))

    def close(self) -> None:
        if self._doc is not None:
            self._doc.close()
        self._doc = None
        self._pixmap = None

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def resize(self, container_width: int) -> None:
        """Container resize event: re-rasterize and notify listeners."""
        if container_width <= 0:
            raise ValidationError("Container width must be positive")
        if container_width == self.container_width:
            return
        self.container_width = container_width
        if self._doc is not None:
            self._rasterize()
        self._notify_resize()

    def _rasterize(self) -> None:
        page = self._doc[self.state.page_number - 1]
        zoom = self.container_width / page.rect.width
        self._pixmap = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
        logger.debug(
            f"Rendered page {self.state.page_number} at {self._pixmap.width}x{self._pixmap.height}px"
        )

    def render(self) -> bytes:
        """Return the current page raster as PNG bytes."""
        if self._pixmap is None:
            raise PageRenderError("No page has been rendered yet.")
        return self._pixmap.tobytes("png")

    def live_dimensions(self) -> PageDimensions:
        """Read the rendered size straight from the current raster."""
        if self._pixmap is None:
            return PageDimensions(width=0, height=0)
        return PageDimensions(width=self._pixmap.width, height=self._pixmap.height)

    # ------------------------------------------------------------------
    # Measurement
    # ------------------------------------------------------------------

    def commit_measurement(self) -> bool:
        """Store the live size if it differs from the last committed one."""
        live = self.live_dimensions()
        if live.width == self.state.rendered_width and live.height == self.state.rendered_height:
            return False
        self.state = self.state.model_copy(
            update={"rendered_width": live.width, "rendered_height": live.height}
        )
        logger.debug(f"Committed page measurement {live.width}x{live.height}px")
        for listener in list(self._measurement_listeners):
            listener(self.state)
        return True

    def add_resize_listener(self, listener: ResizeListener) -> None:
        self._resize_listeners.append(listener)

    def remove_resize_listener(self, listener: ResizeListener) -> None:
        if listener in self._resize_listeners:
            self._resize_listeners.remove(listener)

    def add_measurement_listener(self, listener: MeasurementListener) -> None:
        self._measurement_listeners.append(listener)

    def remove_measurement_listener(self, listener: MeasurementListener) -> None:
        if listener in self._measurement_listeners:
            self._measurement_listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._resize_listeners) + len(self._measurement_listeners)

    def _notify_resize(self) -> None:
        for listener in list(self._resize_listeners):
            listener()
