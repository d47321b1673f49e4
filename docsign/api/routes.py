"""API routes: drive a signing session from a thin UI."""

from uuid import uuid4

from fastapi import APIRouter, File, Header, HTTPException, Response, UploadFile, status
from pydantic import BaseModel, Field

from docsign.core.auth import AuthContext
from docsign.core.errors import AuthError, DocSignError
from docsign.core.raster import from_data_url
from docsign.models.signature import SignatureMode
from docsign.services.signing_session import SigningSession
from docsign.services.signature_input import UploadedFile
from docsign.store.abstractions import IDocumentStore
from docsign.store.http_store import HttpDocumentStore
from docsign.utils.logger import logger

router = APIRouter(tags=["signing"])

MAX_SIGNATURE_TEXT_LENGTH = 100

# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


class OpenSessionBody(BaseModel):
    document_id: str = Field(..., min_length=1)
    container_width: int | None = Field(default=None, gt=0)


class ModeBody(BaseModel):
    mode: SignatureMode


class StrokeBody(BaseModel):
    points: list[tuple[float, float]] = Field(default_factory=list)


class TextBody(BaseModel):
    text: str = Field(default="", max_length=MAX_SIGNATURE_TEXT_LENGTH)


class PositionBody(BaseModel):
    x: float
    y: float


class ResizeBody(BaseModel):
    width: int = Field(..., gt=0)


class PageBody(BaseModel):
    page_number: int = Field(..., ge=1)


# ---------------------------------------------------------------------------
# Session registry
# ---------------------------------------------------------------------------

_sessions: dict[str, SigningSession] = {}


def _store_for(auth: AuthContext) -> IDocumentStore:
    """Build the Document Store client for a request's credentials."""
    return HttpDocumentStore(auth)


def _get_session(session_id: str) -> SigningSession:
    session = _sessions.get(session_id)
    if session is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Signing session not found")
    return session


def _drop_session(session_id: str) -> None:
    session = _sessions.pop(session_id, None)
    if session is not None:
        session.close()


def open_session_count() -> int:
    return len(_sessions)


def close_all_sessions() -> None:
    """Close every open session (application shutdown)."""
    for session_id in list(_sessions):
        _drop_session(session_id)


def _snapshot(session_id: str, session: SigningSession) -> dict:
    """Return the session view, ending the session if the user was logged out."""
    if session.logged_out:
        _drop_session(session_id)
        raise AuthError(session.error_message)
    return {"session_id": session_id, **session.snapshot()}


def _raise_recorded(session_id: str, session: SigningSession, error: DocSignError | None) -> None:
    if session.logged_out:
        _drop_session(session_id)
        raise AuthError(session.error_message)
    if error is not None:
        raise error


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.post("/sessions", status_code=status.HTTP_201_CREATED)
async def open_session(
    body: OpenSessionBody,
    authorization: str | None = Header(default=None),
) -> dict:
    """Open a signing session for a document owned by the caller."""
    auth = AuthContext.from_authorization_header(authorization)
    if not auth.is_authenticated:
        raise AuthError("Authentication token not found. Please log in again.")

    session = SigningSession(
        body.document_id,
        _store_for(auth),
        auth,
        container_width=body.container_width,
    )
    if not await session.open():
        error = session.error
        session.close()
        raise error or DocSignError()

    session_id = uuid4().hex
    _sessions[session_id] = session
    logger.info(f"Opened signing session {session_id} for document {body.document_id}")
    return _snapshot(session_id, session)


@router.get("/sessions/{session_id}")
async def get_session(session_id: str) -> dict:
    return _snapshot(session_id, _get_session(session_id))


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(session_id: str) -> Response:
    _get_session(session_id)
    _drop_session(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/sessions/{session_id}/page")
async def get_page_image(session_id: str) -> Response:
    """Current page raster as PNG."""
    session = _get_session(session_id)
    return Response(content=session.render_page(), media_type="image/png")


@router.post("/sessions/{session_id}/page")
async def change_page(session_id: str, body: PageBody) -> dict:
    session = _get_session(session_id)
    session.go_to_page(body.page_number)
    return _snapshot(session_id, session)


@router.post("/sessions/{session_id}/resize")
async def resize_container(session_id: str, body: ResizeBody) -> dict:
    session = _get_session(session_id)
    session.resize(body.width)
    return _snapshot(session_id, session)


@router.post("/sessions/{session_id}/mode")
async def select_mode(session_id: str, body: ModeBody) -> dict:
    session = _get_session(session_id)
    session.select_mode(body.mode)
    return _snapshot(session_id, session)


@router.post("/sessions/{session_id}/strokes")
async def add_stroke(session_id: str, body: StrokeBody) -> dict:
    """Stroke-end event carrying the whole stroke."""
    session = _get_session(session_id)
    session.draw_stroke(body.points)
    return _snapshot(session_id, session)


@router.post("/sessions/{session_id}/upload")
async def upload_signature(
    session_id: str,
    file: UploadFile = File(..., description="Signature image"),
) -> dict:
    session = _get_session(session_id)
    data = await file.read()
    session.upload_signature(
        UploadedFile(
            filename=file.filename or "signature",
            content_type=file.content_type or "",
            data=data,
        )
    )
    return _snapshot(session_id, session)


@router.put("/sessions/{session_id}/text")
async def type_signature(session_id: str, body: TextBody) -> dict:
    session = _get_session(session_id)
    session.type_signature(body.text)
    return _snapshot(session_id, session)


@router.get("/sessions/{session_id}/signature")
async def get_signature_image(session_id: str) -> Response:
    """The captured signature image."""
    session = _get_session(session_id)
    artifact = session.inputs.artifact
    if artifact is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="No signature captured")
    mime, data = from_data_url(artifact.image_data)
    return Response(content=data, media_type=mime)


@router.post("/sessions/{session_id}/drag")
async def drop_signature(session_id: str, body: PositionBody) -> dict:
    """Drag-stop event with the final position."""
    session = _get_session(session_id)
    session.drop_signature(body.x, body.y)
    return _snapshot(session_id, session)


@router.post("/sessions/{session_id}/clear")
async def clear_signature(session_id: str) -> dict:
    session = _get_session(session_id)
    session.clear_signature()
    return _snapshot(session_id, session)


@router.post("/sessions/{session_id}/apply")
async def apply_signature(session_id: str) -> dict:
    """Submit the signature placement to the backend."""
    session = _get_session(session_id)
    document = await session.apply_signature()
    if document is None:
        _raise_recorded(session_id, session, session.submitter.error)
    return _snapshot(session_id, session)


@router.post("/sessions/{session_id}/review")
async def mark_reviewed(session_id: str) -> dict:
    session = _get_session(session_id)
    document = await session.mark_reviewed()
    if document is None:
        _raise_recorded(session_id, session, session.error)
    return _snapshot(session_id, session)
