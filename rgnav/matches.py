"""Decoding of ``rg --json`` output into an ordered match store.

ripgrep emits a heterogeneous JSON Lines stream (begin/match/context/end/summary).
Only match events with a usable path and line number become records; every
other line is skipped without interrupting ingestion.
"""

from __future__ import annotations

import base64
import binascii
import io
import json
import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TextIO

from .errors import NoPipedInputError

logger = logging.getLogger(__name__)

NO_PIPED_INPUT_MESSAGE = "No piped input detected. Please pipe `rg --json` output to `rgnav`."


@dataclass(frozen=True)
class MatchRecord:
    path: str
    line_number: int  # 1-based

    @property
    def label(self) -> str:
        return f"{self.path}:{self.line_number}"


def _decode_path(path_data: object) -> str | None:
    """Return the path carried by ripgrep's ``{"text": ...}`` / ``{"bytes": ...}`` shape."""
    if isinstance(path_data, str):
        return path_data or None
    if not isinstance(path_data, dict):
        return None

    text = path_data.get("text")
    if isinstance(text, str) and text:
        return text

    encoded = path_data.get("bytes")
    if isinstance(encoded, str) and encoded:
        try:
            raw = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError):
            return None
        return os.fsdecode(raw) if raw else None
    return None


def _coerce_line_number(value: object) -> int | None:
    # bool is an int subclass; JSON true/false is never a line number.
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    if value <= 0:
        return None
    return value


def parse_record(line: str) -> MatchRecord | None:
    """Decode one JSON line into a ``MatchRecord``.

    Returns ``None`` for blank lines, undecodable JSON, non-object values,
    records without a ``data`` payload, records tagged with a ``type`` other
    than ``"match"``, and payloads missing a path or a positive line number.
    """
    text = line.strip()
    if not text:
        return None
    try:
        payload = json.loads(text)
    except ValueError:
        logger.debug("skipping undecodable line: %.80r", text)
        return None
    if not isinstance(payload, dict):
        return None

    record_type = payload.get("type")
    if record_type is not None and record_type != "match":
        return None

    data = payload.get("data")
    if not isinstance(data, dict):
        return None

    path = _decode_path(data.get("path"))
    if path is None:
        logger.debug("skipping match without a usable path")
        return None
    line_number = _coerce_line_number(data.get("line_number"))
    if line_number is None:
        logger.debug("skipping match in %s without a usable line number", path)
        return None
    return MatchRecord(path=path, line_number=line_number)


class MatchStore:
    """Ordered, read-only sequence of match records in arrival order."""

    def __init__(self, records: Iterable[MatchRecord] = ()) -> None:
        self._records: tuple[MatchRecord, ...] = tuple(records)

    @classmethod
    def build(cls, lines: Iterable[str]) -> MatchStore:
        """Parse every line in order and keep the accepted records.

        The whole input is consumed before returning.
        """
        records: list[MatchRecord] = []
        for line in lines:
            record = parse_record(line)
            if record is not None:
                records.append(record)
        return cls(records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[MatchRecord]:
        return iter(self._records)

    def get(self, index: int) -> MatchRecord | None:
        if 0 <= index < len(self._records):
            return self._records[index]
        return None

    def labels(self) -> list[str]:
        return [record.label for record in self._records]


def _is_interactive(stream: TextIO | None) -> bool:
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


def read_piped_matches(stream: TextIO | None) -> MatchStore:
    """Drain ``stream`` into a ``MatchStore``.

    Raises ``NoPipedInputError`` when ``stream`` is missing (stdin closed) or
    is an interactive terminal, since reading a terminal would block waiting
    for input that never arrives.
    """
    if stream is None or _is_interactive(stream):
        raise NoPipedInputError(NO_PIPED_INPUT_MESSAGE)

    raw = getattr(stream, "buffer", None)
    if raw is None:
        store = MatchStore.build(stream)
    else:
        # Decode leniently so one non-UTF-8 line cannot abort ingestion.
        lenient = io.TextIOWrapper(raw, encoding="utf-8", errors="replace")
        try:
            store = MatchStore.build(lenient)
        finally:
            lenient.detach()
    logger.debug("loaded %d matches", len(store))
    return store
