"""Race data: configuration, events, competitor state, reports and their formatting."""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any, Mapping

# Clock values are offsets from midnight. An unset instant lies one leap year
# later: it compares after every clock value and formats as midnight.
UNSET_TIME = timedelta(days=366)

_CLOCK = re.compile(r"(\d{1,2}):(\d{2}):(\d{2})(?:[.,](\d+))?")


class Status(str, Enum):
    """Where a competitor stands in the race."""

    UNREGISTERED = ""
    NOT_STARTED = "NotStarted"
    NOT_FINISHED = "NotFinished"
    FINISHED = "Finished"

    def __str__(self) -> str:
        return self.value


_CONFIG_KEYS = {
    "laps": ("laps", int),
    "laplen": ("lap_len", int),
    "penaltylen": ("penalty_len", int),
    "firinglines": ("firing_lines", int),
    "start": ("start", str),
    "startdelta": ("start_delta", str),
}


@dataclass
class Config:
    """Race configuration as read from the JSON configuration file."""

    laps: int = 0
    lap_len: int = 0
    penalty_len: int = 0
    firing_lines: int = 0
    start: str = ""
    start_delta: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Config":
        """Build a configuration from decoded JSON; keys match case-insensitively."""
        if not isinstance(data, Mapping):
            raise ValueError("configuration must be a JSON object")
        values: dict[str, Any] = {}
        for key, value in data.items():
            target = _CONFIG_KEYS.get(str(key).lower())
            if target is None or value is None:
                continue
            name, kind = target
            if isinstance(value, bool) or not isinstance(value, kind):
                raise ValueError(f"configuration field {key!r} must be {kind.__name__}")
            values[name] = value
        return cls(**values)

    @classmethod
    def from_json(cls, text: str | bytes) -> "Config":
        """Decode a configuration from JSON text."""
        return cls.from_dict(json.loads(text))


@dataclass
class Event:
    """One line of the events log."""

    time: timedelta = UNSET_TIME
    event_id: int = 0
    competitor_id: int = 0
    extra_params: str = ""


@dataclass
class Competitor:
    """The running state of one competitor."""

    competitor_id: int = 0
    assigned_start: timedelta = UNSET_TIME
    start_time: timedelta = UNSET_TIME
    finish_time: timedelta = UNSET_TIME
    start_current_lap: timedelta = UNSET_TIME
    start_current_penalty_laps: timedelta = UNSET_TIME
    lap_numbers: int = 0
    status: Status = Status.UNREGISTERED

    def __str__(self) -> str:
        clocks = (
            self.assigned_start,
            self.start_time,
            self.finish_time,
            self.start_current_lap,
            self.start_current_penalty_laps,
        )
        return " ".join(
            [str(self.competitor_id), *map(format_clock, clocks),
             str(self.lap_numbers), str(self.status)]
        )


@dataclass
class LapInfo:
    """Time spent on a lap and the average speed over it."""

    time: timedelta = timedelta(0)
    average_speed: float = 0.0

    def __str__(self) -> str:
        if not self.time and self.average_speed == 0:
            return "{,}"
        speed = self.average_speed
        if math.isnan(speed):
            text = "NaN"
        elif math.isinf(speed):
            text = "+Inf" if speed > 0 else "-Inf"
        else:
            text = f"{speed:.3f}"
        return f"{{{format_duration(self.time)}, {text}}}"


@dataclass
class FinalReport:
    """Everything the result table shows for one competitor."""

    competitor_id: int = 0
    total_time: timedelta = timedelta(0)
    laps: list[LapInfo] = field(default_factory=list)
    penalty_laps: LapInfo = field(default_factory=LapInfo)
    hits_number: int = 0
    shots_number: int = 0

    def __str__(self) -> str:
        return (
            f"{{{self.competitor_id} {format_duration(self.total_time)} "
            f"{format_lap_list(self.laps)} {self.penalty_laps} "
            f"{self.hits_number} {self.shots_number}}}"
        )


@dataclass
class DetectStart:
    """A registered competitor who has yet to start, and the latest allowed start."""

    competitor_id: int = 0
    start_deadline: timedelta = UNSET_TIME


def _parse(text: str, fraction_required: bool) -> timedelta:
    match = _CLOCK.fullmatch(text)
    fraction = match.group(4) if match else None
    if match is None or (fraction_required and (fraction is None or len(fraction) != 3)):
        raise ValueError(f"cannot parse {text!r} as a time of day")
    hours, minutes, seconds = (int(match.group(i)) for i in (1, 2, 3))
    if hours > 23 or minutes > 59 or seconds > 59:
        raise ValueError(f"time of day out of range in {text!r}")
    micros = int((fraction or "")[:6].ljust(6, "0"))
    return timedelta(hours=hours, minutes=minutes, seconds=seconds, microseconds=micros)


def parse_clock(text: str) -> timedelta:
    """Parse ``HH:MM:SS.mmm`` into an offset from midnight; milliseconds are required."""
    return _parse(text, fraction_required=True)


def parse_duration(text: str) -> timedelta:
    """Parse ``HH:MM:SS`` (optionally with a fraction of a second) into a duration."""
    return _parse(text, fraction_required=False)


def _hms(micros: int) -> str:
    seconds, micros = divmod(micros, 1_000_000)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{micros // 1000:03d}"


def format_clock(value: timedelta) -> str:
    """Format a clock value as the time of day ``HH:MM:SS.mmm``."""
    return _hms((value % timedelta(days=1)) // timedelta(microseconds=1))


def format_duration(value: timedelta) -> str:
    """Format a duration as ``HH:MM:SS.mmm``, hours unbounded, signed if negative."""
    micros = value // timedelta(microseconds=1)
    return ("-" if micros < 0 else "") + _hms(abs(micros))


def format_lap_list(laps: list[LapInfo]) -> str:
    """Format laps as a bracketed, comma separated list."""
    return "[" + ", ".join(map(str, laps)) + "]"


def _truncated_speed(distance: int, elapsed: timedelta) -> float:
    seconds = elapsed.total_seconds()
    if seconds == 0:
        return math.nan if distance == 0 else math.copysign(math.inf, distance)
    speed = distance / seconds
    return math.trunc(speed * 1000) / 1000 if math.isfinite(speed * 1000) else speed


def lap_speed(lap_time: timedelta, config: Config) -> float:
    """Average speed over a main lap, truncated to three decimals."""
    return _truncated_speed(config.lap_len, lap_time)


def penalty_lap_speed(report: FinalReport, config: Config) -> float:
    """Average speed over all penalty laps so far, truncated to three decimals."""
    distance = config.penalty_len * (report.shots_number - report.hits_number)
    return _truncated_speed(distance, report.penalty_laps.time)