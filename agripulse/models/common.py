# agripulse/models/common.py
from enum import Enum
from pydantic import BaseModel


class Tab(str, Enum):
    """Screens reachable from the sidebar."""
    DASHBOARD = "dashboard"
    ADVISOR = "advisor"
    DIAGNOSTICS = "diagnostics"
    HYBRID = "hybrid"


class Context(str, Enum):
    """Advisory domain; selects the system instruction sent with a prompt."""
    MANAGEMENT = "management"
    MARKETING = "marketing"
    HYBRID = "hybrid"


class ScreenStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ScreenStatusView(BaseModel):
    """Request status shared by every interactive screen view."""
    status: ScreenStatus = ScreenStatus.IDLE
    error: str | None = None # Failure reason when status is FAILED
