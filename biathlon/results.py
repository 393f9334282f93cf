"""The result table: finished competitors by total time, then everyone else."""

from __future__ import annotations

import os
from typing import Mapping

from .models import Competitor, FinalReport, Status, format_duration, format_lap_list

__all__ = [
    "RESULT_TABLE_FILE",
    "sort_reports",
    "format_result_table",
    "write_result_table",
]

RESULT_TABLE_FILE = "Resulting Table.txt"


def _status(competitors: Mapping[int, Competitor], competitor_id: int) -> Status | str:
    competitor = competitors.get(competitor_id)
    return Status.UNREGISTERED if competitor is None else competitor.status


def sort_reports(
    reports: Mapping[int, FinalReport], competitors: Mapping[int, Competitor]
) -> list[FinalReport]:
    """Finished reports ordered by total time, followed by the rest in their original order."""
    finished: list[FinalReport] = []
    unfinished: list[FinalReport] = []
    for report in reports.values():
        if _status(competitors, report.competitor_id) == Status.FINISHED:
            finished.append(report)
        else:
            unfinished.append(report)
    finished.sort(key=lambda report: report.total_time)
    return finished + unfinished


def _row(report: FinalReport, competitors: Mapping[int, Competitor]) -> str:
    status = _status(competitors, report.competitor_id)
    if status == Status.FINISHED:
        head = format_duration(report.total_time)
    else:
        head = str(status)
    return (
        f"[{head}] {report.competitor_id} {format_lap_list(report.laps)} "
        f"{report.penalty_laps} {report.hits_number}/{report.shots_number}\n"
    )


def format_result_table(
    reports: Mapping[int, FinalReport], competitors: Mapping[int, Competitor]
) -> str:
    """Render the result table, one line per competitor."""
    return "".join(_row(report, competitors) for report in sort_reports(reports, competitors))


def write_result_table(
    reports: Mapping[int, FinalReport],
    competitors: Mapping[int, Competitor],
    path: str | os.PathLike[str] = RESULT_TABLE_FILE,
) -> None:
    """Write the result table to ``path``, replacing any existing file."""
    with open(path, "w", encoding="utf-8", newline="\n") as result_file:
        result_file.write(format_result_table(reports, competitors))