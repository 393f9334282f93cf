import io
from datetime import timedelta

import pytest

from biathlon.events import parse_event, parse_events
from biathlon.models import Config, Event, Status

GO_CASE_CONTENT = """[12:00:00.000] 1 101
\t\t\t\t[12:00:05.000] 2 101 12:01:00
\t\t\t\t[12:00:10.000] 3 101
\t\t\t\t[12:01:01.000] 4 101
\t\t\t\t[12:02:00.000] 5 101 1
\t\t\t\t[12:02:01.000] 6 101 1
\t\t\t\t[12:02:02.000] 6 101 2
\t\t\t\t[12:02:03.000] 7 101
\t\t\t\t[12:02:10.000] 8 101
\t\t\t\t[12:02:20.000] 9 101
\t\t\t\t[12:03:00.000] 10 101
\t\t\t\t[12:03:30.000] 11 101 injury"""


def _run(content, config):
    output = io.StringIO()
    reports, competitors = parse_events(io.StringIO(content), config, output)
    return reports, competitors, output.getvalue()


def test_parse_events_file_case():
    config = Config(start_delta="00:00:30", laps=1)
    reports, competitors, _ = _run(GO_CASE_CONTENT, config)

    assert len(competitors) == 1
    assert 101 in competitors
    assert competitors[101].competitor_id == 101

    assert 101 in reports
    report = reports[101]
    assert report.shots_number == 5
    assert report.hits_number == 2
    assert report.penalty_laps.time != timedelta(0)
    assert report.total_time != timedelta(0)


def test_parse_events_file_case_penalty_time_and_log():
    config = Config(start_delta="00:00:30", laps=1)
    reports, competitors, log = _run(GO_CASE_CONTENT, config)

    assert reports[101].penalty_laps.time == timedelta(seconds=10)
    assert competitors[101].status == Status.FINISHED
    lines = log.splitlines()
    assert lines[0] == "[12:00:00.000] The competitor(101) registered"
    assert lines[-1] == "[12:03:30.000] The competitor(101) can`t continue: injury"
    assert "[12:03:00.000] The competitor(101) has finished" in lines


def test_parse_event_full_line():
    event = parse_event("[12:00:05.000] 2 101 12:01:00")
    assert event == Event(
        time=timedelta(hours=12, seconds=5),
        event_id=2,
        competitor_id=101,
        extra_params="12:01:00",
    )


def test_parse_event_without_milliseconds_and_extras():
    event = parse_event("[09:05:59] 1 1\n")
    assert event.time == timedelta(hours=9, minutes=5, seconds=59)
    assert event.event_id == 1
    assert event.competitor_id == 1
    assert event.extra_params == ""


def test_parse_event_multiword_extra_keeps_trailing_space():
    event = parse_event("[10:00:00.000] 11 3 lost in the forest\r\n")
    assert event.extra_params == "lost in the forest "


@pytest.mark.parametrize(
    "line",
    [
        "garbage",
        "[10:00:00.000] x 1",
        "[10:00:00.000] 1 y",
        "[10:00:00.000] 1",
        "[25:00:00.000] 1 1",
        "",
    ],
)
def test_parse_event_rejects_malformed_lines(line):
    with pytest.raises(ValueError):
        parse_event(line)


def test_missed_start_deadline_disqualifies_before_next_event():
    content = "\n".join(
        [
            "[09:00:00.000] 1 1",
            "[09:00:01.000] 2 1 09:00:00.000",
            "[09:01:00.000] 3 1",
        ]
    )
    _, _, log = _run(content, Config(start_delta="00:00:30", laps=1))
    lines = log.splitlines()
    assert lines[2] == "[09:01:00.000] The competitor(1) is disqualified"
    assert lines[3] == "[09:01:00.000] The competitor(1) is on the start line"


def test_start_in_time_sets_not_finished():
    content = "\n".join(
        [
            "[09:00:00.000] 1 1",
            "[09:00:01.000] 2 1 09:00:10.000",
            "[09:00:11.000] 4 1",
        ]
    )
    _, competitors, log = _run(content, Config(start_delta="00:00:30", laps=2))
    assert competitors[1].status == Status.NOT_FINISHED
    assert competitors[1].start_time == timedelta(hours=9, seconds=11)
    assert "disqualified" not in log


def test_bad_event_id_resets_id_and_skips_dispatch():
    content = "[09:00:00.000] 1 1\n[09:00:01.000] x 1\n"
    _, competitors, log = _run(content, Config(laps=1))
    assert log.splitlines() == ["[09:00:00.000] The competitor(1) registered"]
    assert list(competitors) == [1]


def test_bad_time_repeats_previous_event_with_unset_time():
    content = "[09:00:00.000] 1 1\n\n"
    _, _, log = _run(content, Config(laps=1))
    assert log.splitlines() == [
        "[09:00:00.000] The competitor(1) registered",
        "[00:00:00.000] The competitor(1) registered",
    ]


def test_missing_fields_raise():
    with pytest.raises(ValueError):
        _run("[09:00:00.000]\n", Config(laps=1))


def test_unknown_event_id_is_ignored():
    _, competitors, log = _run("[09:00:00.000] 42 1\n", Config(laps=1))
    assert log == ""
    assert competitors == {}