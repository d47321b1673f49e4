"""Abstract interface for the Document Store backend."""

from abc import ABC, abstractmethod

from docsign.models.document import DocumentMetadata, DocumentStatus
from docsign.models.signature import PlacementRequest


class IDocumentStore(ABC):
    """Abstract interface for reading and updating stored documents."""

    @abstractmethod
    async def get_document(self, document_id: str) -> DocumentMetadata:
        """Fetch document metadata."""

    @abstractmethod
    async def get_document_file(self, document_id: str) -> bytes:
        """Fetch the raw PDF bytes."""

    @abstractmethod
    async def sign_document(self, request: PlacementRequest) -> DocumentMetadata:
        """
        Ask the backend to composite a signature into the document.

        :param request: Placement built at submit time.
        :return: The updated document metadata.
        """

    @abstractmethod
    async def update_status(self, document_id: str, status: DocumentStatus) -> DocumentMetadata:
        """Change the document status."""
