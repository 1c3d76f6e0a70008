"""
Battle Report Engine - Configuration

Fixed markup constants plus environment-driven resolver settings.
"""
import os
from typing import Optional

from pydantic import BaseModel, Field

# The string that appears in a report in place of hidden information.
MASK_TOKEN = "????"

# Number of padding units per indentation level.
DEFAULT_INDENTATION = 4

# Hyperlink prefixes recognised by the client UI
ENTITY_LINK = "#entity:"
TOOLTIP_LINK = "#tooltip:"

# Wrapping markers for DEBUG-visibility reports
DEBUG_OPEN = "<hidden>"
DEBUG_CLOSE = "</hidden>"

MISSING_MESSAGE_PLACEHOLDER = "[Reporting Error for message ID {message_id}]"
EXHAUSTED_VALUES_PLACEHOLDER = "[Reporting Error: see log for details]"


class ResolverSettings(BaseModel):
    """Tunables for template resolution and per-recipient rendering."""
    indent_pad: str = "&nbsp;"
    max_msg_depth: int = Field(default=8, ge=1)
    catalog_path: Optional[str] = None
    render_workers: int = Field(default=4, ge=1)


def load_settings() -> ResolverSettings:
    """Build settings from REPORT_* environment variables."""
    return ResolverSettings(
        indent_pad=os.getenv("REPORT_INDENT_PAD", "&nbsp;"),
        max_msg_depth=int(os.getenv("REPORT_MAX_MSG_DEPTH", "8")),
        catalog_path=os.getenv("REPORT_CATALOG_PATH"),
        render_workers=int(os.getenv("REPORT_RENDER_WORKERS", "4")),
    )
