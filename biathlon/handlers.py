"""Event handlers that advance the state of a race and write its log."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Callable, TextIO

from .models import (
    Competitor,
    Config,
    DetectStart,
    Event,
    FinalReport,
    LapInfo,
    Status,
    format_clock,
    lap_speed,
    parse_clock,
    parse_duration,
    penalty_lap_speed,
)

__all__ = ["Race"]

_log = logging.getLogger(__name__)

_SHOTS_PER_FIRING_RANGE = 5


class Race:
    """The state of one race, advanced event by event, with a log written to ``output``."""

    def __init__(self, config: Config, output: TextIO) -> None:
        self.config = config
        self.output = output
        self.competitors: dict[int, Competitor] = {}
        self.final_reports: dict[int, FinalReport] = {}
        self.detect_starts: list[DetectStart] = []
        self._handlers: dict[int, Callable[[Event], None]] = {
            1: self.handle_registration,
            2: self.handle_start_draw,
            3: self.handle_start_line,
            4: self.handle_start,
            5: self.handle_enter_firing_range,
            6: self.handle_hit_target,
            7: self.handle_leave_firing_range,
            8: self.handle_enter_penalty_lap,
            9: self.handle_leave_penalty_lap,
            10: self.handle_finish_main_lap,
            11: self.handle_unable_to_continue,
        }

    def _write(self, event: Event, message: str) -> None:
        self.output.write(f"[{format_clock(event.time)}] {message}\n")

    def _competitor(self, competitor_id: int) -> Competitor:
        competitor = self.competitors.get(competitor_id)
        return Competitor() if competitor is None else competitor

    def _report(self, competitor_id: int) -> FinalReport:
        report = self.final_reports.get(competitor_id)
        return FinalReport() if report is None else report

    def _start_delta(self) -> timedelta:
        try:
            return parse_duration(self.config.start_delta)
        except ValueError as exc:
            _log.warning("%s", exc)
            return timedelta(0)

    def dispatch(self, event: Event) -> None:
        """Run the handler for the event's id; events with unknown ids are ignored."""
        handler = self._handlers.get(event.event_id)
        if handler is not None:
            handler(event)

    def control_starts(self, event: Event) -> None:
        """Report every pending competitor whose start deadline the event's time has passed.

        Overdue entries are compacted out of the front of the pending list while
        its length is kept, so its tail repeats earlier entries and an overdue
        competitor is reported again on later events until it starts.
        """
        pending = self.detect_starts
        length = len(pending)
        for index in reversed(range(length)):
            entry = pending[index]
            if event.time > entry.start_deadline:
                self._write(event, f"The competitor({entry.competitor_id}) is disqualified")
                pending[index : length - 1] = pending[index + 1 : length]
                length -= 1

    def handle_registration(self, event: Event) -> None:
        """Register a competitor, once; later registrations only reach the log."""
        cid = event.competitor_id
        self._write(event, f"The competitor({cid}) registered")
        if cid in self.competitors:
            return
        if self.config.laps < 0:
            raise ValueError(f"number of laps must not be negative, got {self.config.laps}")
        self.competitors[cid] = Competitor(competitor_id=cid, status=Status.NOT_STARTED)
        self.final_reports[cid] = FinalReport(
            competitor_id=cid, laps=[LapInfo() for _ in range(self.config.laps)]
        )
        self.detect_starts.append(DetectStart(competitor_id=cid))

    def handle_start_draw(self, event: Event) -> None:
        """Set the drawn start time and the deadline for actually starting."""
        cid = event.competitor_id
        self._write(
            event,
            f"The start time for the competitor({cid}) was set by a draw to {event.extra_params}",
        )
        try:
            start = parse_duration(event.extra_params)
        except ValueError as exc:
            _log.warning("%s", exc)
            return
        deadline = start + self._start_delta()
        for entry in self.detect_starts:
            if entry.competitor_id == cid:
                entry.start_deadline = deadline

        competitor = self._competitor(cid)
        try:
            assigned = parse_clock(event.extra_params)
        except ValueError as exc:
            _log.warning("%s", exc)
            return
        competitor.assigned_start = assigned
        competitor.start_current_lap = assigned
        self.competitors[cid] = competitor

    def handle_start_line(self, event: Event) -> None:
        """Log that a competitor is on the start line."""
        self._write(event, f"The competitor({event.competitor_id}) is on the start line")

    def handle_start(self, event: Event) -> None:
        """Start a competitor, or disqualify one who starts before the drawn time."""
        cid = event.competitor_id
        self._write(event, f"The competitor({cid}) has started")
        self.detect_starts[:] = [
            entry for entry in self.detect_starts if entry.competitor_id != cid
        ]
        competitor = self._competitor(cid)
        if event.time < competitor.assigned_start:
            self._write(event, f"The competitor({cid}) is disqualified")
            return
        competitor.start_time = event.time
        competitor.status = Status.NOT_FINISHED
        self.competitors[cid] = competitor

    def handle_enter_firing_range(self, event: Event) -> None:
        """Log entry to a firing range; each visit counts five shots."""
        cid = event.competitor_id
        self._write(
            event, f"The competitor({cid}) is on the firing range({event.extra_params})"
        )
        report = self._report(cid)
        report.shots_number += _SHOTS_PER_FIRING_RANGE
        self.final_reports[cid] = report

    def handle_hit_target(self, event: Event) -> None:
        """Count a hit target."""
        cid = event.competitor_id
        self._write(
            event, f"The target({event.extra_params}) has been hit by competitor({cid})"
        )
        report = self._report(cid)
        report.hits_number += 1
        self.final_reports[cid] = report

    def handle_leave_firing_range(self, event: Event) -> None:
        """Log that a competitor left the firing range."""
        self._write(event, f"The competitor({event.competitor_id}) left the firing range")

    def handle_enter_penalty_lap(self, event: Event) -> None:
        """Remember when the competitor entered the penalty laps."""
        cid = event.competitor_id
        self._write(event, f"The competitor({cid}) entered the penalty laps")
        competitor = self._competitor(cid)
        competitor.start_current_penalty_laps = event.time
        self.competitors[cid] = competitor

    def handle_leave_penalty_lap(self, event: Event) -> None:
        """Add the time spent on penalty laps and recompute their average speed."""
        cid = event.competitor_id
        self._write(event, f"The competitor({cid}) left the penalty laps")
        report = self._report(cid)
        competitor = self._competitor(cid)
        report.penalty_laps.time += event.time - competitor.start_current_penalty_laps
        report.penalty_laps.average_speed = penalty_lap_speed(report, self.config)
        self.final_reports[cid] = report

    def handle_finish_main_lap(self, event: Event) -> None:
        """Record a finished main lap; after the last lap the competitor has finished."""
        cid = event.competitor_id
        self._write(event, f"The competitor({cid}) ended the main lap")
        report = self._report(cid)
        competitor = self._competitor(cid)
        lap_index = competitor.lap_numbers
        if not 0 <= lap_index < len(report.laps):
            raise IndexError(
                f"competitor {cid} finished lap {lap_index + 1} of {len(report.laps)}"
            )
        lap_time = event.time - competitor.start_current_lap
        report.laps[lap_index] = LapInfo(time=lap_time, average_speed=lap_speed(lap_time, self.config))
        report.total_time += lap_time
        self.final_reports[cid] = report

        competitor.start_current_lap = event.time
        competitor.lap_numbers += 1
        if competitor.lap_numbers == self.config.laps:
            competitor.status = Status.FINISHED
            self._write(event, f"The competitor({cid}) has finished")
        self.competitors[cid] = competitor

    def handle_unable_to_continue(self, event: Event) -> None:
        """Log that a competitor cannot continue, with the reason given."""
        self._write(
            event,
            f"The competitor({event.competitor_id}) can`t continue: {event.extra_params}",
        )