"""Draggable signature overlay bounded to the rendered page."""

from typing import Callable, Optional

from docsign.models.signature import OverlayPosition, PageDimensions, SignatureArtifact, SignatureMode

# Display box of the overlay element, in pixels
OVERLAY_IMAGE_WIDTH = 120
OVERLAY_MAX_HEIGHT = 80
OVERLAY_MAX_WIDTH_RATIO = 0.8

BoundsProvider = Callable[[], PageDimensions]


def display_size(artifact: SignatureArtifact, page_width: float) -> tuple[float, float]:
    """Size at which the artifact is shown over the page.

    Drawn and uploaded images are shown 120px wide, typed signatures at their
    natural size; both are capped at 80px high and 80% of the page width with
    the aspect ratio kept.
    """
    if artifact.width <= 0 or artifact.height <= 0:
        width, height = float(OVERLAY_IMAGE_WIDTH), float(OVERLAY_MAX_HEIGHT)
    elif artifact.source_mode == SignatureMode.TEXT:
        width, height = float(artifact.width), float(artifact.height)
    else:
        width = float(OVERLAY_IMAGE_WIDTH)
        height = width * artifact.height / artifact.width

    if height > OVERLAY_MAX_HEIGHT:
        width, height = width * OVERLAY_MAX_HEIGHT / height, float(OVERLAY_MAX_HEIGHT)
    max_width = page_width * OVERLAY_MAX_WIDTH_RATIO
    if page_width > 0 and width > max_width:
        width, height = max_width, height * max_width / width
    return width, height


class OverlayPositioner:
    """Tracks where the signature sits over the rendered page.

    Intermediate drag movements are only recorded in ``dragging``; the
    committed ``position`` changes when the gesture ends.
    """

    def __init__(self, bounds: BoundsProvider):
        self._bounds = bounds
        self.artifact: Optional[SignatureArtifact] = None
        self.position: Optional[OverlayPosition] = None
        self.dragging: Optional[OverlayPosition] = None
        self.commit_count = 0

    @property
    def visible(self) -> bool:
        return self.artifact is not None

    def place(self, artifact: Optional[SignatureArtifact], created: bool = False) -> None:
        """Show a new or replaced artifact; fresh artifacts start at the default."""
        self.artifact = artifact
        if artifact is None:
            self.dragging = None
            return
        if created or self.position is None:
            self.reset()

    def reset(self) -> None:
        self.dragging = None
        self._commit(OverlayPosition.default())

    def clear(self) -> None:
        self.artifact = None
        self.position = None
        self.dragging = None

    def drag(self, x: float, y: float) -> None:
        """Intermediate drag movement."""
        if self.artifact is None:
            return
        self.dragging = self._bounded(OverlayPosition(x=x, y=y), self._bounds())

    def drop(self, x: float | None = None, y: float | None = None) -> Optional[OverlayPosition]:
        """Drag stop: commit the final position, bounded to the page."""
        if self.artifact is None:
            return None
        if x is None or y is None:
            if self.dragging is None:
                return self.position
            final = self.dragging
        else:
            final = OverlayPosition(x=x, y=y)
        self.dragging = None
        self._commit(self._bounded(final, self._bounds()))
        return self.position

    def position_within(self, dimensions: PageDimensions) -> OverlayPosition:
        """Committed position bounded to the given page size."""
        position = self.position or OverlayPosition.default()
        return self._bounded(position, dimensions)

    def _bounded(self, position: OverlayPosition, dimensions: PageDimensions) -> OverlayPosition:
        if dimensions.is_empty:
            return position
        element_w, element_h = (0.0, 0.0)
        if self.artifact is not None:
            element_w, element_h = display_size(self.artifact, dimensions.width)
        return position.clamped(dimensions.width, dimensions.height, element_w, element_h)

    def _commit(self, position: OverlayPosition) -> None:
        self.position = position
        self.commit_count += 1
