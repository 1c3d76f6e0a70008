"""
Battle Report Engine

Turns simulation report entries and a message catalog into narrative text,
masking double-blind sensitive values for recipients who may not see them.

Pipeline:
- Simulation driver -> ReportEntry records -> PhaseLog
- PhaseLog + MessageCatalog -> TemplateResolver -> RenderedLog per recipient
"""
from .config import MASK_TOKEN, ResolverSettings, load_settings
from .models import (
    Visibility,
    Shown,
    Redacted,
    ReportEntry,
    add_newline,
    indent_all,
    Delivery,
    RenderedReport,
    RenderedLog,
)
from .services.catalog import MessageCatalog, TranslationBundle, CatalogFormatError
from .services.renderer import TemplateResolver, ResolutionContext, ResolvedText, tokenize
from .services.obscuration import ObscurationTracker
from .services.phase_log import PhaseLog, ReportRenderer

__version__ = "1.0.0"

__all__ = [
    "MASK_TOKEN",
    "ResolverSettings",
    "load_settings",
    "Visibility",
    "Shown",
    "Redacted",
    "ReportEntry",
    "add_newline",
    "indent_all",
    "Delivery",
    "RenderedReport",
    "RenderedLog",
    "MessageCatalog",
    "TranslationBundle",
    "CatalogFormatError",
    "TemplateResolver",
    "ResolutionContext",
    "ResolvedText",
    "tokenize",
    "ObscurationTracker",
    "PhaseLog",
    "ReportRenderer",
]
