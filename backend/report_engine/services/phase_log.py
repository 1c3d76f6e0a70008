"""
Battle Report Engine - Phase Log and Per-Recipient Rendering

The simulation driver appends entries to a PhaseLog while it processes a
phase. Once the phase is done, ReportRenderer turns the log into one
RenderedLog per recipient, masking what each recipient may not see.

The log is single-writer / multi-reader: renderers work on a snapshot taken
when they start, so entries appended afterwards are not picked up mid-pass.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from ..models.rendered import Delivery, RenderedLog, RenderedReport
from ..models.report_entry import ReportEntry, add_newline, indent_all
from .obscuration import ObscurationTracker
from .renderer import ResolutionContext, TemplateResolver

logger = logging.getLogger(__name__)

# (entry, recipient) -> what the recipient gets
VisibilityPolicy = Callable[[ReportEntry, str], Delivery]


class PhaseLog:
    """Ordered report entries for one phase."""

    def __init__(self, entries: Optional[Iterable[ReportEntry]] = None):
        self._entries: List[ReportEntry] = list(entries or [])
        self._lock = threading.Lock()

    def append(self, entry: ReportEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def extend(self, entries: Iterable[ReportEntry]) -> None:
        with self._lock:
            self._entries.extend(entries)

    def add_newline(self) -> None:
        """Add a blank line after the most recent entry."""
        with self._lock:
            add_newline(self._entries)

    def indent_all(self, amount: int) -> None:
        with self._lock:
            indent_all(self._entries, amount)

    def snapshot(self) -> Tuple[ReportEntry, ...]:
        with self._lock:
            return tuple(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[ReportEntry]:
        return iter(self.snapshot())


class ReportRenderer:
    """
    Render a phase log for individual recipients.

    Usage:
        renderer = ReportRenderer(TemplateResolver(catalog))
        log_text = renderer.render_for(phase_log, "Bob", policy).text
    """

    def __init__(self, resolver: TemplateResolver, tracker: Optional[ObscurationTracker] = None):
        self.resolver = resolver
        self.tracker = tracker or ObscurationTracker()

    def render_entry(self, entry: ReportEntry, recipient: str, delivery: Delivery) -> Optional[RenderedReport]:
        if delivery == Delivery.NONE:
            return None

        obscured = self.tracker.is_obscured_pass(entry, recipient, delivery == Delivery.FULL)
        if obscured:
            self.tracker.record_redacted_delivery(entry, recipient)

        outcome = self.resolver.resolve_outcome(
            entry, ResolutionContext(recipient=recipient, obscured=obscured)
        )
        return RenderedReport(
            message_id=entry.message_id,
            delivery=Delivery.OBSCURED if obscured else Delivery.FULL,
            text=outcome.text,
            error=outcome.error,
        )

    def render_for(self, log: PhaseLog, recipient: str, policy: VisibilityPolicy) -> RenderedLog:
        """Render every entry of ``log`` that ``policy`` lets ``recipient`` receive."""
        reports = []
        for entry in log.snapshot():
            report = self.render_entry(entry, recipient, policy(entry, recipient))
            if report is not None:
                reports.append(report)

        rendered = RenderedLog(recipient=recipient, reports=reports)
        logger.info(
            f"Rendered {len(reports)} reports for {recipient} "
            f"({rendered.obscured_count} obscured)"
        )
        return rendered

    def render_for_all(
        self,
        log: PhaseLog,
        recipients: Iterable[str],
        policy: VisibilityPolicy,
        max_workers: Optional[int] = None,
    ) -> Dict[str, RenderedLog]:
        """Render ``log`` for several recipients concurrently."""
        recipients = list(recipients)
        workers = max_workers or self.resolver.settings.render_workers
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = pool.map(lambda r: self.render_for(log, r, policy), recipients)
            return dict(zip(recipients, results))
