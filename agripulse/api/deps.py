# agripulse/api/deps.py
from fastapi import HTTPException
from agripulse.models.common import Tab
from agripulse.services.screens import (
    ScreenController, ScreenNotActiveError, Session, SessionNotFoundError, session_store,
)
import logging

logger = logging.getLogger(__name__)


def get_session(session_id: str) -> Session:
    try:
        return session_store.get(session_id)
    except SessionNotFoundError:
        logger.warning(f"Unknown session requested: {session_id}")
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found.")


def get_active_screen(session: Session, tab: Tab) -> ScreenController:
    try:
        return session.get_screen(tab)
    except ScreenNotActiveError as e:
        raise HTTPException(status_code=409, detail=str(e))
