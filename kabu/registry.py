from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Iterator, Sequence

from kabu.errors import RegistryLoadError
from kabu.models import TickerEntry
from kabu.normalize import normalize

log = logging.getLogger(__name__)

CODE_RE = re.compile(r"^[0-9]{4}$")


def match_by_name(normalized_input: str, entries: Sequence[TickerEntry]) -> TickerEntry | None:
    """Find the entry whose normalized name equals, then contains, the input.

    Both passes scan in registry order, so the first listed entry wins a tie.
    An exact match anywhere beats a substring match earlier in the list.
    """
    if not normalized_input:
        return None
    for entry in entries:
        if normalize(entry.name) == normalized_input:
            return entry
    for entry in entries:
        if normalized_input in normalize(entry.name):
            return entry
    return None


def _coerce_entry(row: Any) -> TickerEntry | None:
    if not isinstance(row, dict):
        return None
    raw_code = row.get("code")
    raw_name = row.get("name")
    if raw_code is None or raw_name is None:
        return None
    code = str(raw_code).strip().zfill(4)
    name = str(raw_name).strip()
    if not CODE_RE.match(code) or not name:
        return None
    return TickerEntry(code=code, name=name)


class TickerRegistry:
    """Read-only list of listed companies with a precomputed name index."""

    def __init__(self, entries: Sequence[TickerEntry]) -> None:
        self._entries: tuple[TickerEntry, ...] = tuple(entries)
        self._normalized: tuple[str, ...] = tuple(normalize(e.name) for e in self._entries)
        self._by_name: dict[str, TickerEntry] = {}
        self._by_code: dict[str, TickerEntry] = {}
        for entry, key in zip(self._entries, self._normalized):
            self._by_name.setdefault(key, entry)
            self._by_code.setdefault(entry.code, entry)

    @classmethod
    def load(cls, path: Path) -> "TickerRegistry":
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise RegistryLoadError(f"ticker registry not found: {path}") from exc
        except (OSError, ValueError) as exc:
            raise RegistryLoadError(f"ticker registry unreadable: {path}: {exc}") from exc

        rows = raw.get("tickers", []) if isinstance(raw, dict) else raw
        if not isinstance(rows, list):
            raise RegistryLoadError(f"ticker registry must be a list: {path}")

        entries: list[TickerEntry] = []
        skipped = 0
        for row in rows:
            entry = _coerce_entry(row)
            if entry is None:
                skipped += 1
                continue
            entries.append(entry)
        if skipped:
            log.warning("Skipped %d malformed registry row(s) in %s", skipped, path)
        log.info("Loaded %d ticker(s) from %s", len(entries), path)
        return cls(entries)

    @property
    def entries(self) -> tuple[TickerEntry, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TickerEntry]:
        return iter(self._entries)

    def match(self, normalized_input: str) -> TickerEntry | None:
        """Indexed equivalent of :func:`match_by_name`."""
        if not normalized_input:
            return None
        exact = self._by_name.get(normalized_input)
        if exact is not None:
            return exact
        for entry, key in zip(self._entries, self._normalized):
            if normalized_input in key:
                return entry
        return None

    def by_code(self, code: str) -> TickerEntry | None:
        return self._by_code.get(code)

    def display_name(self, symbol: str, suffix: str) -> str:
        if symbol.endswith(suffix):
            entry = self.by_code(symbol[: -len(suffix)] if suffix else symbol)
            if entry is not None:
                return entry.name
        return symbol
