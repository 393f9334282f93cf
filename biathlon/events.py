"""Reading the events log and running a race over it."""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Iterable, TextIO

from .handlers import Race
from .models import UNSET_TIME, Competitor, Config, Event, FinalReport, parse_clock

__all__ = ["parse_event", "parse_events"]

_log = logging.getLogger(__name__)

_INTEGER = re.compile(r"[+-]?[0-9]+")


def _split(line: str) -> list[str]:
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line.split(" ")


def _clock_text(part: str) -> str:
    text = part.strip().strip("[]")
    if len(text) == 8:
        text += ".000"
    return text


def _to_int(text: str, what: str) -> int:
    if _INTEGER.fullmatch(text) is None:
        raise ValueError(f"invalid {what} {text!r}")
    return int(text)


def _field(parts: list[str], index: int, what: str) -> str:
    if index >= len(parts):
        raise ValueError(f"event line has no {what}")
    return parts[index]


def _extra_params(parts: list[str]) -> str:
    rest = parts[3:]
    if len(rest) == 1:
        return rest[0]
    return "".join(f"{part} " for part in rest)


def parse_event(line: str) -> Event:
    """Parse one line of the events log: ``[HH:MM:SS.mmm] <event id> <competitor id> [extra ...]``.

    Raises ValueError when the line is malformed.
    """
    parts = _split(line)
    event_id = _field(parts, 1, "event id")
    competitor_id = _field(parts, 2, "competitor id")
    return Event(
        time=parse_clock(_clock_text(parts[0])),
        event_id=_to_int(event_id, "event id"),
        competitor_id=_to_int(competitor_id, "competitor id"),
        extra_params=_extra_params(parts),
    )


def _advance(previous: Event, line: str) -> Event:
    """Read a line over the previous event.

    A field that fails to parse is reset to its zero value and the fields after
    it keep what the previous line gave them. A line too short to hold an event
    id or competitor id raises ValueError.
    """
    event = replace(previous)
    parts = _split(line)

    try:
        event.time = parse_clock(_clock_text(parts[0]))
    except ValueError as exc:
        _log.warning("%s", exc)
        event.time = UNSET_TIME
        return event

    event_id = _field(parts, 1, "event id")
    try:
        event.event_id = _to_int(event_id, "event id")
    except ValueError as exc:
        _log.warning("%s", exc)
        event.event_id = 0
        return event

    competitor_id = _field(parts, 2, "competitor id")
    try:
        event.competitor_id = _to_int(competitor_id, "competitor id")
    except ValueError as exc:
        _log.warning("%s", exc)
        event.competitor_id = 0
        return event

    event.extra_params = _extra_params(parts)
    return event


def parse_events(
    lines: Iterable[str], config: Config, output: TextIO
) -> tuple[dict[int, FinalReport], dict[int, Competitor]]:
    """Run a race over the lines of an events log, writing its log to ``output``.

    Returns the final reports and the competitors, both keyed by competitor id.
    """
    race = Race(config, output)
    event = Event()
    for line in lines:
        event = _advance(event, line)
        race.control_starts(event)
        race.dispatch(event)
    return race.final_reports, race.competitors