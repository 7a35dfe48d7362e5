# agripulse/api/endpoints/sessions.py
from fastapi import APIRouter, Depends, HTTPException
from agripulse.api.deps import get_active_screen, get_session
from agripulse.models.common import Tab
from agripulse.models.dashboard import DashboardView
from agripulse.models.session import NavigateRequest, SessionView
from agripulse.services.screens import Session, SessionNotFoundError, session_store
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=SessionView, status_code=201)
async def create_session():
    """Opens a new dashboard session, starting on the Dashboard tab."""
    session = session_store.create()
    return session.view()


@router.get("/{session_id}", response_model=SessionView)
async def read_session(session: Session = Depends(get_session)):
    return session.view()


@router.post("/{session_id}/navigate", response_model=SessionView)
async def navigate(request: NavigateRequest, session: Session = Depends(get_session)):
    """Switches tab. The screen being left loses its transcript, image or form state."""
    session.navigate(request.tab)
    return session.view()


@router.get("/{session_id}/dashboard", response_model=DashboardView)
async def read_dashboard(session: Session = Depends(get_session)):
    return get_active_screen(session, Tab.DASHBOARD).view()


@router.delete("/{session_id}", status_code=204)
async def close_session(session_id: str):
    """Drops the session and everything its screens hold."""
    try:
        session_store.remove(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found.")
