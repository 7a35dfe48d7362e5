# agripulse/api/endpoints/advisor.py
from fastapi import APIRouter, Depends, HTTPException
from agripulse.api.deps import get_active_screen, get_session
from agripulse.models.advisor import AdvisorContextRequest, AdvisorMessageRequest, AdvisorView
from agripulse.models.common import Tab
from agripulse.services.screens import RequestPendingError, Session
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/{session_id}/advisor", response_model=AdvisorView)
async def read_advisor(session: Session = Depends(get_session)):
    return get_active_screen(session, Tab.ADVISOR).view()


@router.put("/{session_id}/advisor/context", response_model=AdvisorView)
async def set_advisor_context(request: AdvisorContextRequest, session: Session = Depends(get_session)):
    screen = get_active_screen(session, Tab.ADVISOR)
    screen.set_context(request.context)
    return screen.view()


@router.post("/{session_id}/advisor/messages", response_model=AdvisorView)
async def send_advisor_message(request: AdvisorMessageRequest, session: Session = Depends(get_session)):
    """
    Sends a question to the AI advisor under the screen's current context and
    returns the updated transcript. Blank questions are ignored. Model failures
    appear as a fixed AI message in the transcript, never as an HTTP error.
    """
    screen = get_active_screen(session, Tab.ADVISOR)
    try:
        sent = await screen.send(request.content)
    except RequestPendingError as e:
        logger.info(f"Rejected advisor message for session {session.session_id[:8]}: {e}")
        raise HTTPException(status_code=409, detail=str(e))
    if not sent:
        logger.debug("Ignoring blank advisor message.")
    return screen.view()
