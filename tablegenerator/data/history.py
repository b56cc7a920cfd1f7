"""
Parsing and replaying the incumbent history of a single run.

A history field looks like ``[10:1.0;20:3.5;15:9.0]``: chronological
``value:time`` pairs, one per improvement found during the run.
"""
from typing import NamedTuple, Tuple

from tablegenerator.numeric import DecimalValue, ZERO


class HistoryEntry(NamedTuple):
    value: DecimalValue
    time: DecimalValue


History = Tuple[HistoryEntry, ...]


def parse_history(field: str, entry_separator: str = ";", pair_separator: str = ":") -> History:
    """
    Parse a history field into an immutable tuple of entries.

    Surrounding brackets are optional. An empty field gives an empty history.
    """
    if entry_separator == pair_separator:
        raise ValueError("History entry and pair separators must differ")

    body = field.strip()
    if body.startswith("["):
        body = body[1:]
    if body.endswith("]"):
        body = body[:-1]
    body = body.strip()
    if not body:
        return ()

    entries = []
    for token in body.split(entry_separator):
        token = token.strip()
        if not token:
            continue
        value, sep, time = token.partition(pair_separator)
        if not sep:
            raise ValueError(f"History entry {token!r} has no '{pair_separator}' separator")
        entries.append(HistoryEntry(DecimalValue(value), DecimalValue(time)))
    return tuple(entries)


def replay_history(history: History, limit: float) -> Tuple[DecimalValue, DecimalValue]:
    """
    Return the (value, time) incumbent at ``limit`` seconds.

    The history is scanned from the most recent entry backwards and the
    first entry found within the limit is kept. When even the first
    improvement came after the limit the run had nothing yet: (0, 0).
    """
    for entry in reversed(history):
        if entry.time.to_float() <= limit:
            return entry.value, entry.time
    return ZERO, ZERO
