# agripulse/models/hybrid.py
from typing import Literal
from pydantic import BaseModel, Field
from agripulse.models.common import ScreenStatusView


class HybridQuery(BaseModel):
    parent_a: str = Field(..., description="Parent A variety, e.g. 'Heirloom Corn'.")
    parent_b: str = Field(..., description="Parent B variety, e.g. 'Drought Resistant Corn'.")

    def to_prompt(self) -> str:
        return (
            f"Simulate a hybrid cross between {self.parent_a.strip()} and {self.parent_b.strip()}. "
            "Describe the potential characteristics of the new hybrid, including yield potential, "
            "disease resistance, climate suitability, and any specific management requirements. "
            "Format as a professional agronomy report."
        )


class HybridLabView(ScreenStatusView):
    tab: Literal["hybrid"] = "hybrid"
    parent_a: str = ""
    parent_b: str = ""
    result: str | None = None
