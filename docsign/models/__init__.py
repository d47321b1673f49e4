"""Signing client data models."""

from docsign.models.document import DocumentMetadata, DocumentStatus
from docsign.models.signature import (
    OverlayPosition,
    PageDimensions,
    PageRenderState,
    PlacementRequest,
    PlacementState,
    SignatureArtifact,
    SignatureMode,
)

__all__ = [
    "DocumentMetadata",
    "DocumentStatus",
    "OverlayPosition",
    "PageDimensions",
    "PageRenderState",
    "PlacementRequest",
    "PlacementState",
    "SignatureArtifact",
    "SignatureMode",
]
