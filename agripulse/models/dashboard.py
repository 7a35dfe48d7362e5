# agripulse/models/dashboard.py
from typing import Literal
from pydantic import BaseModel
from agripulse.models.common import Tab


class StatCard(BaseModel):
    title: str
    value: str
    subtitle: str


class QuickAction(BaseModel):
    label: str
    target: Tab # Tab opened when the action is clicked


class SeasonalTip(BaseModel):
    title: str
    body: str
    target: Tab


class DashboardView(BaseModel):
    tab: Literal["dashboard"] = "dashboard"
    greeting: str
    summary: str
    stats: list[StatCard]
    quick_actions: list[QuickAction]
    seasonal_tip: SeasonalTip
