# agripulse/models/advisor.py
from enum import Enum
from typing import Literal
from pydantic import BaseModel, Field
from agripulse.models.common import Context, ScreenStatusView


class ChatRole(str, Enum):
    USER = "user"
    AI = "ai"


class ChatMessage(BaseModel):
    role: ChatRole
    content: str


class AdvisorMessageRequest(BaseModel):
    content: str = Field(..., description="Question typed by the farmer. Blank input is ignored.")


class AdvisorContextRequest(BaseModel):
    context: Context


class AdvisorView(ScreenStatusView):
    tab: Literal["advisor"] = "advisor"
    context: Context = Context.MANAGEMENT
    messages: list[ChatMessage] = []
