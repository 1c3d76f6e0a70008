"""Battle Report Engine - Models"""
from .report_entry import (
    Visibility,
    Shown,
    Redacted,
    ReportValue,
    ReportSubject,
    ReportEntry,
    add_newline,
    indent_all,
)
from .rendered import Delivery, RenderedReport, RenderedLog

__all__ = [
    "Visibility",
    "Shown",
    "Redacted",
    "ReportValue",
    "ReportSubject",
    "ReportEntry",
    "add_newline",
    "indent_all",
    "Delivery",
    "RenderedReport",
    "RenderedLog",
]
