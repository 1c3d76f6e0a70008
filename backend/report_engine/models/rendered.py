"""
Battle Report Engine - Rendered Output Models

What a recipient actually receives once the phase log has been rendered.
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class Delivery(str, Enum):
    """The owning system's verdict for one entry and one recipient."""
    FULL = "full"          # every value shown
    OBSCURED = "obscured"  # sensitive values masked
    NONE = "none"          # entry not delivered at all


class RenderedReport(BaseModel):
    message_id: int
    delivery: Delivery
    text: str
    error: Optional[str] = None


class RenderedLog(BaseModel):
    recipient: str
    reports: List[RenderedReport] = []

    @property
    def text(self) -> str:
        """The full log as one string, in entry order."""
        return "".join(report.text for report in self.reports)

    @property
    def obscured_count(self) -> int:
        return sum(1 for report in self.reports if report.delivery == Delivery.OBSCURED)
