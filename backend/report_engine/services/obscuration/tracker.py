"""
Battle Report Engine - Obscuration Tracker

Remembers which recipients were sent a redacted version of each entry, so
that later re-renders of the log stay consistent for them even if the
simulation state that decided visibility has since changed.

Deciding who may see what is the owning system's job. The tracker only
executes that decision: it is told whether a recipient gets the full view
and which values are sensitive (marked on the entry itself).
"""
import logging

from ...models.report_entry import ReportEntry

logger = logging.getLogger(__name__)


class ObscurationTracker:
    """Per-entry bookkeeping of redacted deliveries."""

    def record_redacted_delivery(self, entry: ReportEntry, recipient: str) -> None:
        entry._add_obscured_recipient(recipient)

    def was_redacted_for(self, entry: ReportEntry, recipient: str) -> bool:
        return entry._has_obscured_recipient(recipient)

    def is_obscured_pass(self, entry: ReportEntry, recipient: str, can_see_full: bool) -> bool:
        """
        Decide whether this rendering of ``entry`` for ``recipient`` is masked.

        A recipient who was already sent a redacted version keeps getting
        one, whatever ``can_see_full`` says now.
        """
        if self.was_redacted_for(entry, recipient):
            return True
        return not can_see_full

    def redacted_copy(self, entry: ReportEntry, recipient: str) -> ReportEntry:
        """
        Build the copy of ``entry`` sent to a recipient who may not see it.

        Every sensitive value is permanently removed from the copy and the
        recipient is recorded on the original entry.
        """
        redacted = entry.copy()
        for index in entry.sensitive_indexes():
            redacted.redact(index)
        self.record_redacted_delivery(entry, recipient)
        logger.debug(f"Redacted {len(entry.sensitive_indexes())} values of {entry} for {recipient}")
        return redacted
