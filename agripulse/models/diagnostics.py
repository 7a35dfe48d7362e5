# agripulse/models/diagnostics.py
import base64
from typing import Literal
from pydantic import BaseModel
from agripulse.models.common import ScreenStatusView


def normalize_mime_type(content_type: str | None) -> str:
    """'Image/PNG; name=x' -> 'image/png'. Parameters are dropped."""
    return (content_type or "").split(";", 1)[0].strip().lower()


class DiagnosticImage(BaseModel):
    """Uploaded image held by the diagnostics screen until the next upload."""
    mime_type: str
    data: str # base64 payload without the data URL header

    @classmethod
    def from_bytes(cls, content: bytes, content_type: str) -> "DiagnosticImage":
        return cls(
            mime_type=normalize_mime_type(content_type),
            data=base64.b64encode(content).decode("ascii"),
        )

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


class DiagnosticsView(ScreenStatusView):
    tab: Literal["diagnostics"] = "diagnostics"
    image_data_url: str | None = None
    mime_type: str | None = None
    analysis: str | None = None
