"""
Battle Report Engine - Message Catalog

Maps numeric report ids to raw template strings. The on-disk format is one
record per line:

    3455::<data> (<data>) does <data> damage to the <msg:3456,3457>.
    3456::tank
    3457::building

Blank lines and lines starting with '#' are ignored.

Also holds TranslationBundle, the secondary lookup applied to values of
entries that carry a translation key.
"""
import logging
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Union

logger = logging.getLogger(__name__)

RECORD_SEPARATOR = "::"


class CatalogFormatError(Exception):
    """Raised in strict mode when a catalog line cannot be parsed."""
    pass


def _significant_lines(lines: Iterable[str]):
    for line_no, raw_line in enumerate(lines, start=1):
        line = raw_line.rstrip("\r\n")
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        yield line_no, line


class MessageCatalog:
    """Read-only id -> template lookup."""

    def __init__(self, templates: Optional[Mapping[int, str]] = None):
        self._templates: Dict[int, str] = dict(templates or {})

    def get(self, message_id: int) -> Optional[str]:
        """Return the raw template for ``message_id``, or None if unknown."""
        return self._templates.get(message_id)

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    @classmethod
    def from_lines(cls, lines: Iterable[str], strict: bool = False) -> "MessageCatalog":
        """
        Parse ``id::template`` records.

        Args:
            lines: Catalog text, one record per line
            strict: Raise CatalogFormatError on a bad line instead of
                logging and skipping it

        Returns:
            MessageCatalog with one entry per valid record. A repeated id
            replaces the earlier template.
        """
        templates: Dict[int, str] = {}
        for line_no, line in _significant_lines(lines):
            key, sep, template = line.partition(RECORD_SEPARATOR)
            try:
                if not sep:
                    raise ValueError("missing '::' separator")
                message_id = int(key.strip())
            except ValueError as e:
                if strict:
                    raise CatalogFormatError(f"Line {line_no}: {e}: {line!r}") from e
                logger.warning(f"Skipping malformed catalog line {line_no}: {line!r}")
                continue
            templates[message_id] = template
        return cls(templates)

    @classmethod
    def load(cls, path: Union[str, Path], strict: bool = False) -> "MessageCatalog":
        path = Path(path)
        with path.open(encoding="utf-8") as f:
            catalog = cls.from_lines(f, strict=strict)
        logger.info(f"Loaded {len(catalog)} report messages from {path}")
        return catalog


class TranslationBundle:
    """Named key -> string lookup used to translate report values."""

    def __init__(self, name: str, strings: Optional[Mapping[str, str]] = None):
        self.name = name
        self._strings: Dict[str, str] = dict(strings or {})

    def get_string(self, key: str) -> str:
        """Return the translation, or ``!key!`` so missing keys stand out."""
        return self._strings.get(key, f"!{key}!")

    def __len__(self) -> int:
        return len(self._strings)

    @classmethod
    def from_lines(cls, name: str, lines: Iterable[str]) -> "TranslationBundle":
        strings: Dict[str, str] = {}
        for line_no, line in _significant_lines(lines):
            key, sep, value = line.partition("=")
            if not sep:
                logger.warning(f"Skipping malformed line {line_no} in bundle {name}: {line!r}")
                continue
            strings[key.strip()] = value.strip()
        return cls(name, strings)
