"""
Battle Report Engine - Template Resolver

Takes a ReportEntry plus its catalog template and renders the final text for
one recipient.

Each call owns its own substitution cursor, so the same entry can be
resolved repeatedly, or from several threads at once, with identical
results. The entry is never written to during resolution.

Failures stay local to the entry being resolved:
- unknown catalog id -> "[Reporting Error for message ID n]"
- a <data>/<msg> tag with no values left -> text so far followed by
  "[Reporting Error: see log for details]"; the rest of the template is
  dropped
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Mapping, Optional, Tuple

from ...config import (
    DEBUG_CLOSE,
    DEBUG_OPEN,
    DEFAULT_INDENTATION,
    EXHAUSTED_VALUES_PLACEHOLDER,
    MASK_TOKEN,
    MISSING_MESSAGE_PLACEHOLDER,
    ResolverSettings,
)
from ...models.report_entry import Redacted, ReportEntry, ReportValue, Visibility
from ..catalog import MessageCatalog, TranslationBundle
from .tokenizer import DataTag, ListTag, Literal, MsgTag, NewlineTag, Token, tokenize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionContext:
    """
    Who a resolution pass is for.

    obscured: mask every sensitive value with the masking token
    show_image: inject the sprite marker regardless of indentation
    """
    recipient: Optional[str] = None
    obscured: bool = False
    show_image: bool = False


FULL_VIEW = ResolutionContext()


@dataclass
class ResolvedText:
    text: str
    values_consumed: int
    value_count: int
    error: Optional[str] = None

    @property
    def complete(self) -> bool:
        """True when no error occurred and every value was used."""
        return self.error is None and self.values_consumed == self.value_count


class _ResolutionAborted(Exception):
    """Internal: stop expanding the current entry."""
    pass


@dataclass
class _Pass:
    """Per-call resolution state."""
    entry: ReportEntry
    context: ResolutionContext
    cursor: int = 0

    def take(self) -> ReportValue:
        if self.cursor >= self.entry.value_count():
            logger.error(
                f"Value index {self.cursor} out of range for report with ID "
                f"{self.entry.message_id}: the template has more tags than the "
                f"{self.entry.value_count()} values added"
            )
            raise _ResolutionAborted("values_exhausted")
        value = self.entry.value_at(self.cursor)
        self.cursor += 1
        return value


@lru_cache(maxsize=2048)
def _tokens(template: str) -> Tuple[Token, ...]:
    return tuple(tokenize(template))


class TemplateResolver:
    """
    Render report entries against a message catalog.

    Usage:
        resolver = TemplateResolver(catalog)
        text = resolver.resolve_entry(entry, ResolutionContext(obscured=True))
    """

    def __init__(
        self,
        catalog: MessageCatalog,
        translations: Optional[Mapping[str, TranslationBundle]] = None,
        settings: Optional[ResolverSettings] = None,
    ):
        self.catalog = catalog
        self.translations = dict(translations or {})
        self.settings = settings or ResolverSettings()

    def resolve_entry(self, entry: ReportEntry, context: ResolutionContext = FULL_VIEW) -> str:
        return self.resolve_outcome(entry, context).text

    def resolve(
        self, template: str, entry: ReportEntry, context: ResolutionContext = FULL_VIEW
    ) -> str:
        """Resolve ``entry`` against an explicit template instead of its catalog text."""
        return self.resolve_outcome(entry, context, template=template).text

    def resolve_outcome(
        self,
        entry: ReportEntry,
        context: ResolutionContext = FULL_VIEW,
        template: Optional[str] = None,
    ) -> ResolvedText:
        """
        Resolve one entry for one recipient.

        Args:
            entry: The report to render
            context: Recipient context (obscured pass or full view)
            template: Raw template; looked up in the catalog when omitted

        Returns:
            ResolvedText with the final string and cursor bookkeeping
        """
        if template is None:
            template = self.catalog.get(entry.message_id)
        if template is None:
            logger.error(f"No message found for ID {entry.message_id}")
            text = MISSING_MESSAGE_PLACEHOLDER.format(message_id=entry.message_id)
            return ResolvedText(
                text=self._mark_debug(entry, text),
                values_consumed=0,
                value_count=entry.value_count(),
                error="missing_message",
            )

        state = _Pass(entry=entry, context=context)
        parts: List[str] = []
        error = None
        try:
            self._expand(_tokens(template), state, parts, depth=0)
        except _ResolutionAborted as e:
            error = str(e)
            parts.append(EXHAUSTED_VALUES_PLACEHOLDER)

        if error is None and state.cursor < entry.value_count():
            logger.error(
                f"Report {entry.message_id} used {state.cursor} of "
                f"{entry.value_count()} values: the template has fewer tags than values added"
            )
            error = "values_unconsumed"

        text = "".join(parts)
        text = self._add_sprite(entry, context, text)
        text = self._add_indentation(entry, text)
        text += "\n" * max(0, entry.newlines)
        logger.debug(f"Resolved {entry} for recipient={context.recipient} obscured={context.obscured}")
        return ResolvedText(
            text=self._mark_debug(entry, text),
            values_consumed=state.cursor,
            value_count=entry.value_count(),
            error=error,
        )

    # -------------------------------------------------------------------------
    # Expansion
    # -------------------------------------------------------------------------

    def _expand(self, tokens, state: _Pass, parts: List[str], depth: int) -> None:
        for token in tokens:
            if isinstance(token, Literal):
                parts.append(token.text)
            elif isinstance(token, DataTag):
                parts.append(self._render_value(state.take(), state))
            elif isinstance(token, ListTag):
                remaining = state.entry.values[state.cursor:]
                parts.append(", ".join(self._render_value(v, state) for v in remaining))
                state.cursor = state.entry.value_count()
            elif isinstance(token, MsgTag):
                self._expand_choice(token, state, parts, depth)
            elif isinstance(token, NewlineTag):
                parts.append("\n")

    def _expand_choice(self, token: MsgTag, state: _Pass, parts: List[str], depth: int) -> None:
        selector = self._visible_text(state.take(), state)
        message_id = token.if_true if selector.lower() == "true" else token.if_false

        if depth + 1 > self.settings.max_msg_depth:
            logger.error(
                f"Nested <msg> depth exceeded {self.settings.max_msg_depth} "
                f"in report with ID {state.entry.message_id}"
            )
            raise _ResolutionAborted("msg_depth_exceeded")

        sub_template = self.catalog.get(message_id)
        if sub_template is None:
            logger.error(f"No message found for ID {message_id} (referenced by {state.entry.message_id})")
            parts.append(MISSING_MESSAGE_PLACEHOLDER.format(message_id=message_id))
            return
        self._expand(_tokens(sub_template), state, parts, depth + 1)

    def _is_masked(self, value: ReportValue, state: _Pass) -> bool:
        return isinstance(value, Redacted) or (state.context.obscured and value.obscured)

    def _visible_text(self, value: ReportValue, state: _Pass) -> str:
        return MASK_TOKEN if self._is_masked(value, state) else value.text

    def _render_value(self, value: ReportValue, state: _Pass) -> str:
        if self._is_masked(value, state):
            return MASK_TOKEN
        text = value.text
        key = state.entry.translation_key
        if key is None:
            return text
        bundle = self.translations.get(key)
        if bundle is None:
            logger.warning(f"Unknown translation bundle {key!r} on report {state.entry.message_id}")
            return text
        return bundle.get_string(text)

    # -------------------------------------------------------------------------
    # Post-processing
    # -------------------------------------------------------------------------

    def _add_sprite(self, entry: ReportEntry, context: ResolutionContext, text: str) -> str:
        if not entry.sprite_marker:
            return text
        if entry.indentation > DEFAULT_INDENTATION and not (entry.show_image or context.show_image):
            return text
        if text.startswith("\n"):
            return text[:1] + entry.sprite_marker + text[1:]
        return entry.sprite_marker + text

    def _add_indentation(self, entry: ReportEntry, text: str) -> str:
        """Pad once, after any leading line breaks."""
        if entry.indentation == 0 or not text:
            return text
        lead = len(text) - len(text.lstrip("\n"))
        return text[:lead] + self.settings.indent_pad * entry.indentation + text[lead:]

    def _mark_debug(self, entry: ReportEntry, text: str) -> str:
        if entry.visibility != Visibility.DEBUG:
            return text
        body = text.rstrip("\n")
        return DEBUG_OPEN + body + DEBUG_CLOSE + text[len(body):]
