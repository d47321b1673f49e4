"""Signature capture and placement data models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_POSITION_X = 50.0
DEFAULT_POSITION_Y = 50.0


class SignatureMode(str, Enum):
    """Input mode that produced a signature."""

    DRAW = "draw"
    UPLOAD = "upload"
    TEXT = "text"


class PlacementState(str, Enum):
    """States of the placement state machine."""

    IDLE = "idle"
    CAPTURING = "capturing"
    READY = "ready"
    SUBMITTING = "submitting"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SignatureArtifact(_CamelModel):
    """Normalized signature image, whatever mode produced it."""

    image_data: str = Field(..., min_length=1, description="data: URL of the raster image")
    source_mode: SignatureMode
    file_extension: str = Field(default="png")
    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)
    preview_uri: Optional[str] = Field(default=None, description="Transient preview source (upload mode)")


class OverlayPosition(_CamelModel):
    """Pixel offset of the signature relative to the page's top-left corner."""

    x: float = Field(default=DEFAULT_POSITION_X)
    y: float = Field(default=DEFAULT_POSITION_Y)

    @classmethod
    def default(cls) -> "OverlayPosition":
        return cls(x=DEFAULT_POSITION_X, y=DEFAULT_POSITION_Y)

    def clamped(
        self,
        width: float,
        height: float,
        element_width: float = 0,
        element_height: float = 0,
    ) -> "OverlayPosition":
        """Return a copy bounded to the given rectangle."""
        max_x = max(0.0, width - element_width)
        max_y = max(0.0, height - element_height)
        return OverlayPosition(
            x=min(max(self.x, 0.0), max_x),
            y=min(max(self.y, 0.0), max_y),
        )


class PageDimensions(_CamelModel):
    """Rendered page size in on-screen pixels."""

    width: float = Field(default=0, ge=0)
    height: float = Field(default=0, ge=0)

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0


class PageRenderState(_CamelModel):
    """Last committed measurement of the rendered page."""

    page_number: int = Field(default=1, ge=1)
    rendered_width: float = Field(default=0, ge=0)
    rendered_height: float = Field(default=0, ge=0)

    @property
    def dimensions(self) -> PageDimensions:
        return PageDimensions(width=self.rendered_width, height=self.rendered_height)


class PlacementRequest(_CamelModel):
    """Request asking the backend to burn a signature into a page."""

    document_id: str = Field(..., min_length=1)
    page_number: int = Field(..., ge=1)
    signature_data: str = Field(..., min_length=1)
    signature_position: OverlayPosition
    pdf_page_dimensions: PageDimensions
    signature_type: SignatureMode
    signature_file_extension: str

    def to_payload(self) -> dict:
        """Return the JSON body for the sign endpoint."""
        return self.model_dump(mode="json", by_alias=True, exclude={"document_id"})

    def to_page_points(self, page_width_pt: float, page_height_pt: float) -> tuple[float, float]:
        """Map the pixel position onto the page's point space (top-left origin)."""
        dims = self.pdf_page_dimensions
        if dims.is_empty:
            raise ValueError("Rendered page dimensions are empty")
        return (
            self.signature_position.x * page_width_pt / dims.width,
            self.signature_position.y * page_height_pt / dims.height,
        )
