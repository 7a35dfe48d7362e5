# agripulse/models/session.py
from pydantic import BaseModel, Field
from agripulse.models.common import Tab
from agripulse.models.advisor import AdvisorView
from agripulse.models.dashboard import DashboardView
from agripulse.models.diagnostics import DiagnosticsView
from agripulse.models.hybrid import HybridLabView


class NavigateRequest(BaseModel):
    tab: Tab


class HeaderView(BaseModel):
    title: str # Active tab name, capitalised
    market_ticker: str


class SessionView(BaseModel):
    session_id: str
    active_tab: Tab
    header: HeaderView
    # Only the active screen is populated; the rest are unmounted
    screen: DashboardView | AdvisorView | DiagnosticsView | HybridLabView = Field(..., discriminator="tab")
