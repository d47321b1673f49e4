"""Document Store client over the backend REST API."""

from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from docsign.config import settings
from docsign.core.auth import AuthContext
from docsign.core.errors import (
    AuthError,
    NetworkError,
    RequestTimeoutError,
    ServerError,
    error_for_status,
)
from docsign.models.document import DocumentMetadata, DocumentStatus
from docsign.models.signature import PlacementRequest
from docsign.store.abstractions import IDocumentStore
from docsign.utils.logger import get_logger

logger = get_logger("store")


def _error_message(response: httpx.Response) -> str | None:
    """Extract the backend's ``message`` field, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        return str(message) if message else None
    return None


class HttpDocumentStore(IDocumentStore):
    """Talks to ``/api/docs`` with the bearer token from an AuthContext."""

    def __init__(
        self,
        auth: AuthContext,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.auth = auth
        self.base_url = (base_url or settings.backend_url).rstrip("/")
        self.timeout = timeout or settings.request_timeout
        self._transport = transport

    async def get_document(self, document_id: str) -> DocumentMetadata:
        response = await self._request("GET", f"/api/docs/{document_id}")
        return self._document_from(response, document_id)

    async def get_document_file(self, document_id: str) -> bytes:
        response = await self._request(
            "GET", f"/api/docs/view/{document_id}", accept="application/pdf"
        )
        return response.content

    async def sign_document(self, request: PlacementRequest) -> DocumentMetadata:
        logger.info(
            f"Submitting signature for document {request.document_id} "
            f"page {request.page_number} at ({request.signature_position.x}, "
            f"{request.signature_position.y}) on "
            f"{request.pdf_page_dimensions.width}x{request.pdf_page_dimensions.height}px"
        )
        response = await self._request(
            "POST", f"/api/docs/sign/{request.document_id}", json=request.to_payload()
        )
        return self._document_from(response, request.document_id)

    async def update_status(self, document_id: str, status: DocumentStatus) -> DocumentMetadata:
        response = await self._request(
            "PUT", f"/api/docs/{document_id}", json={"status": status.value}
        )
        return self._document_from(response, document_id)

    @staticmethod
    def _document_from(response: httpx.Response, document_id: str) -> DocumentMetadata:
        try:
            body = response.json()
        except ValueError as e:
            raise ServerError("Unexpected response from the server.") from e
        # Some backends wrap the document: {"message": ..., "document": {...}}
        if isinstance(body, dict) and isinstance(body.get("document"), dict):
            body = body["document"]
        if isinstance(body, dict) and "_id" not in body and "id" not in body:
            body = {**body, "_id": document_id}
        try:
            return DocumentMetadata.model_validate(body)
        except PydanticValidationError as e:
            logger.error(f"Unexpected document payload: {e}")
            raise ServerError("Unexpected response from the server.") from e

    async def _request(
        self, method: str, path: str, accept: str = "application/json", **kwargs: Any
    ) -> httpx.Response:
        if not self.auth.is_authenticated:
            raise AuthError("Authentication token not found. Please log in again.")

        headers = {**self.auth.authorization_header(), "Accept": accept}
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.request(method, path, headers=headers, **kwargs)
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            message = _error_message(e.response)
            logger.error(f"{method} {path} failed with status {status_code}: {message}")
            raise error_for_status(status_code, message) from e
        except httpx.TimeoutException as e:
            logger.error(f"{method} {path} timed out: {e}")
            raise RequestTimeoutError() from e
        except httpx.RequestError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise NetworkError() from e
