# agripulse/api/endpoints/hybrid.py
from fastapi import APIRouter, Depends, HTTPException
from agripulse.api.deps import get_active_screen, get_session
from agripulse.models.common import Tab
from agripulse.models.hybrid import HybridLabView, HybridQuery
from agripulse.services.screens import RequestPendingError, Session
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/{session_id}/hybrid", response_model=HybridLabView)
async def read_hybrid_lab(session: Session = Depends(get_session)):
    return get_active_screen(session, Tab.HYBRID).view()


@router.post("/{session_id}/hybrid/simulate", response_model=HybridLabView)
async def simulate_hybrid(query: HybridQuery, session: Session = Depends(get_session)):
    """Asks the hybrid agronomist to simulate a cross between two parent varieties."""
    screen = get_active_screen(session, Tab.HYBRID)
    try:
        started = await screen.simulate(query)
    except RequestPendingError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if started:
        logger.info(f"Hybrid simulation finished with status '{screen.status.value}'.")
    return screen.view()
