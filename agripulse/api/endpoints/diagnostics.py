# agripulse/api/endpoints/diagnostics.py
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from typing import Annotated
from agripulse.api.deps import get_active_screen, get_session
from agripulse.core.config import settings
from agripulse.models.common import Tab
from agripulse.models.diagnostics import DiagnosticImage, DiagnosticsView, normalize_mime_type
from agripulse.services.screens import RequestPendingError, Session
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/{session_id}/diagnostics", response_model=DiagnosticsView)
async def read_diagnostics(session: Session = Depends(get_session)):
    return get_active_screen(session, Tab.DIAGNOSTICS).view()


@router.post("/{session_id}/diagnostics/image", response_model=DiagnosticsView)
async def upload_diagnostic_image(
    file: Annotated[UploadFile, File(...)],
    session: Session = Depends(get_session),
):
    """Replaces the screen's image with the uploaded one and clears the previous analysis."""
    screen = get_active_screen(session, Tab.DIAGNOSTICS)

    content_type = normalize_mime_type(file.content_type)
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail=f"Unsupported file type '{content_type}'. Upload an image.")
    try:
        # One byte past the limit is enough to tell an oversized upload
        contents = await file.read(settings.MAX_UPLOAD_BYTES + 1)
    finally:
        await file.close()
    if not contents:
        raise HTTPException(status_code=400, detail="Uploaded image is empty.")
    if len(contents) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"Image exceeds the upload limit of {settings.MAX_UPLOAD_BYTES} bytes.",
        )

    image = DiagnosticImage.from_bytes(contents, content_type)
    try:
        screen.upload(image)
    except RequestPendingError as e:
        raise HTTPException(status_code=409, detail=str(e))
    logger.info(f"Session {session.session_id[:8]} uploaded {content_type} image ({len(contents)} bytes).")
    return screen.view()


@router.post("/{session_id}/diagnostics/analyze", response_model=DiagnosticsView)
async def analyze_diagnostic_image(session: Session = Depends(get_session)):
    """Runs diagnostics on the uploaded image. Does nothing if no image has been uploaded."""
    screen = get_active_screen(session, Tab.DIAGNOSTICS)
    try:
        await screen.analyze()
    except RequestPendingError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return screen.view()
