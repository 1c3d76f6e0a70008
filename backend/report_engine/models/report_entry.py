"""
Battle Report Engine - Report Entry Model

One ReportEntry describes one simulation event: the catalog id of its
template, the ordered substitution values, and the double-blind metadata
used when the phase log is rendered for each player.

Example:

    entry = ReportEntry(3455)
    entry.subject = unit.id
    entry.indent()
    entry.add_description(unit)
    entry.append_value(6)
    entry.append_choice(True)
    phase_log.append(entry)

    3455::<data> (<data>) does <data> damage to the <msg:3456,3457>.
    3456::tank
    3457::building

renders as " Crusader (Bob) does 6 damage to the tank."
"""
from __future__ import annotations

import copy
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, FrozenSet, List, Optional, Protocol, Sequence, Set, Tuple, Union

from ..config import DEFAULT_INDENTATION, ENTITY_LINK, TOOLTIP_LINK


# =============================================================================
# ENUMS
# =============================================================================

class Visibility(str, Enum):
    """How an entry is handled when double-blind play is in effect."""
    PUBLIC = "public"        # visible to every player, nothing masked
    OBSCURED = "obscured"    # visible to every player, sensitive values masked
    HIDDEN = "hidden"        # only players who can see the subject
    PLAYER = "player"        # only the player named in ``player``
    DEBUG = "debug"          # testing only, wrapped in diagnostic markers


# =============================================================================
# VALUES
# =============================================================================

@dataclass(frozen=True)
class Shown:
    """A substitution value that still carries its payload."""
    text: str
    obscured: bool = False


@dataclass(frozen=True)
class Redacted:
    """A value whose payload has been removed for good."""
    obscured: bool = True


ReportValue = Union[Shown, Redacted]


class ReportSubject(Protocol):
    """What add_description() needs to know about a unit."""
    id: int
    short_name: str
    owner_name: str
    owner_colour: str


# =============================================================================
# REPORT ENTRY
# =============================================================================

@dataclass(eq=False)
class ReportEntry:
    """
    A single server report.

    Values must be added in the same order as the tags that consume them
    appear in the catalog template. ``obscured_recipients`` only ever grows.
    """
    message_id: int
    visibility: Visibility = Visibility.HIDDEN
    indentation: int = 0
    newlines: int = 1
    translation_key: Optional[str] = None
    subject: Any = None
    player: Any = None
    sprite_marker: Optional[str] = None
    show_image: bool = False

    _values: List[ReportValue] = field(default_factory=list, init=False, repr=False)
    _recipients: Set[str] = field(default_factory=set, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self):
        if isinstance(self.message_id, bool) or not isinstance(self.message_id, int):
            raise ValueError(f"message_id must be an int, got {self.message_id!r}")
        if self.message_id < 0:
            raise ValueError(f"message_id must be non-negative, got {self.message_id}")
        self.visibility = Visibility(self.visibility)

    def __str__(self) -> str:
        return f"ReportEntry(message_id={self.message_id})"

    # -------------------------------------------------------------------------
    # Adding values
    # -------------------------------------------------------------------------

    def append_value(
        self,
        payload: Union[str, int],
        obscure: bool = True,
        translation_key: Optional[str] = None,
    ) -> None:
        """
        Add a value for the next <data> tag.

        Args:
            payload: String or int to substitute
            obscure: Mark the value as double-blind sensitive
            translation_key: Name of the bundle used to translate string
                values at render time. Only the last keyed append counts;
                a later append without a key clears it.
        """
        if isinstance(payload, bool) or not isinstance(payload, (str, int)):
            raise TypeError(f"payload must be str or int, got {type(payload).__name__}")
        self._values.append(Shown(str(payload), obscured=obscure))
        self.translation_key = translation_key

    def append_choice(self, choice: bool) -> None:
        """Select the first (True) or second (False) message of a <msg:A,B> tag."""
        self._values.append(Shown("true" if choice else "false"))
        self.translation_key = None

    def append_with_tooltip(self, payload: str, tooltip: str) -> None:
        """Add a value rendered as a link whose hover text is ``tooltip``."""
        self._values.append(Shown(
            f"<font color='0xffffff'><a href='{TOOLTIP_LINK}{tooltip}'>{payload}</a></font>"
        ))
        self.translation_key = None

    def append_roll(self, value: Union[str, int], description: str) -> None:
        """Add a target roll, with its modifier breakdown as the tooltip."""
        self.append_with_tooltip(str(value), description)

    def add_description(self, subject: Optional[ReportSubject]) -> None:
        """
        Add a unit's name and its owner's name in one go.

        The unit name is sensitive, the owner is not. Also points the
        sprite marker at the unit.
        """
        if subject is None:
            return
        self.sprite_marker = f"<span id='{subject.id}'></span>"
        self.append_value(
            f"<font color='0xffffff'><a href=\"{ENTITY_LINK}{subject.id}\">"
            f"{subject.short_name}</a></font>",
            obscure=True,
        )
        self.append_value(
            f"<B><font color='{subject.owner_colour}'>{subject.owner_name}</font></B>",
            obscure=False,
        )

    # -------------------------------------------------------------------------
    # Layout
    # -------------------------------------------------------------------------

    def indent(self, n: int = 1) -> None:
        new_indentation = self.indentation + n * DEFAULT_INDENTATION
        if new_indentation < 0:
            raise ValueError(f"Indentation cannot go below zero (got {new_indentation})")
        self.indentation = new_indentation

    def add_blank_line(self) -> None:
        self.newlines += 1

    # -------------------------------------------------------------------------
    # Value access
    # -------------------------------------------------------------------------

    @property
    def values(self) -> Tuple[ReportValue, ...]:
        return tuple(self._values)

    def value_count(self) -> int:
        return len(self._values)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._values):
            raise IndexError(
                f"Value index {index} out of range for {self} with {len(self._values)} values"
            )

    def value_at(self, index: int) -> ReportValue:
        self._check_index(index)
        return self._values[index]

    def is_sensitive(self, index: int) -> bool:
        return self.value_at(index).obscured

    def sensitive_indexes(self) -> List[int]:
        return [i for i, value in enumerate(self._values) if value.obscured]

    def redact(self, index: int) -> None:
        """Remove the payload at ``index``. Irreversible."""
        value = self.value_at(index)
        if isinstance(value, Redacted):
            return
        self._values[index] = Redacted(obscured=value.obscured)

    # -------------------------------------------------------------------------
    # Recipients (see ObscurationTracker)
    # -------------------------------------------------------------------------

    @property
    def obscured_recipients(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._recipients)

    def _add_obscured_recipient(self, recipient: str) -> None:
        with self._lock:
            self._recipients.add(recipient)

    def _has_obscured_recipient(self, recipient: str) -> bool:
        with self._lock:
            return recipient in self._recipients

    # -------------------------------------------------------------------------
    # Copying
    # -------------------------------------------------------------------------

    def copy(self) -> "ReportEntry":
        """Independent copy: values and recipients are not shared."""
        clone = copy.copy(self)
        clone._values = list(self._values)
        clone._recipients = set(self.obscured_recipients)
        clone._lock = threading.Lock()
        return clone


def add_newline(entries: Sequence[ReportEntry]) -> None:
    """Add a blank line after the last entry in ``entries``, if there is one."""
    if not entries:
        return
    entries[-1].add_blank_line()


def indent_all(entries: Optional[Sequence[ReportEntry]], amount: int) -> None:
    if entries is None:
        return
    for entry in entries:
        entry.indent(amount)
