# biathlon

Replays a biathlon competition from a log of timed events. Each event is
written to a human-readable race log. Once the whole log has been read, a
results table is produced. Finished competitors come first, ordered by total
time. Everyone else follows.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Usage

```
biathlon -c config.json -f events
```

Both options are required. If either one is missing, the command prints an
error and its usage and exits with status 1.

The command first prints the two file names. It then writes two files to the
current directory:

- the race log, `Output log.txt`
- the results table, `Resulting Table.txt`

Any existing files with those names are replaced.

If the configuration cannot be read or decoded, or the events cannot be
processed, the error is logged and the command exits with status 1.

### Configuration

The configuration is a JSON object. Keys are matched without regard to case.

```json
{
    "laps": 2,
    "lapLen": 3651,
    "penaltyLen": 50,
    "firingLines": 1,
    "start": "09:30:00",
    "startDelta": "00:00:30"
}
```

| Key           | Meaning                                                     |
|---------------|-------------------------------------------------------------|
| `laps`        | number of main laps in the race                             |
| `lapLen`      | length of one main lap, in metres                           |
| `penaltyLen`  | length of one penalty lap, in metres                        |
| `firingLines` | number of firing lines on the range                         |
| `start`       | planned start of the race, `HH:MM:SS`                       |
| `startDelta`  | how long after the drawn start time a start is still allowed, `HH:MM:SS` |

### Events

The file holds one event per line. Each line has these parts, separated by
single spaces:

1. a time stamp in brackets
2. the event number
3. the competitor's number
4. for some events, an extra parameter

A time stamp of the form `HH:MM:SS` is read as `HH:MM:SS.000`.

```
[09:05:59.867] 1 1
[09:15:00.841] 2 1 09:30:00.000
[09:29:45.734] 3 1
[09:30:01.005] 4 1
[09:49:31.659] 5 1 1
[09:49:33.123] 6 1 1
[09:49:38.339] 7 1
[09:49:55.915] 8 1
[09:51:48.391] 9 1
[09:59:03.872] 10 1
[09:59:05.321] 11 1 Lost in the forest
```

| Event | Meaning                                      | Extra parameter          |
|-------|----------------------------------------------|--------------------------|
| 1     | the competitor registered                    |                          |
| 2     | the start time was set by a draw             | start time, `HH:MM:SS.mmm` |
| 3     | the competitor is on the start line          |                          |
| 4     | the competitor has started                   |                          |
| 5     | the competitor is on the firing range        | firing line              |
| 6     | a target has been hit                        | target                   |
| 7     | the competitor left the firing range         |                          |
| 8     | the competitor entered the penalty laps      |                          |
| 9     | the competitor left the penalty laps         |                          |
| 10    | the competitor ended a main lap              |                          |
| 11    | the competitor cannot continue               | reason                   |

Lines with any other event number are ignored.

#### Disqualification

A competitor who has not started by the drawn start time plus `startDelta`
is reported as disqualified in the race log. The line is repeated on later
events until the competitor starts.

A competitor who starts before the drawn time is also reported as
disqualified, and is not marked as started.

#### Shots and penalty laps

Each visit to the firing range counts as five shots. Each missed shot counts
as one penalty lap of `penaltyLen` metres.

### Results

Each line of the results table reads:

```
[total time or status] number [{lap time, speed}, ...] {penalty time, speed} hits/shots
```

- Speeds are in metres per second, truncated to three decimals.
- Laps that were not completed are shown as `{,}`.
- A competitor who did not finish is shown with the status `NotStarted` or
  `NotFinished` in place of the total time.

## Library use

The same steps are available from Python.

`biathlon.models`:

- `Config`, built with `Config.from_json` or `Config.from_dict`
- `Event`, `Competitor`, `LapInfo`, `FinalReport`, `DetectStart` and the
  `Status` enum
- the time helpers `parse_clock`, `parse_duration`, `format_clock`,
  `format_duration` and `format_lap_list`
- the speed helpers `lap_speed` and `penalty_lap_speed`

`biathlon.events`:

- `parse_event` parses one event line and raises `ValueError` if the line is
  malformed.
- `parse_events` replays a whole log onto a text stream. It returns the final
  reports and the competitors, both keyed by competitor number.

`biathlon.handlers`:

- `Race` keeps the state of the competition.
- `Race.control_starts` checks start deadlines.
- `Race.dispatch` applies one event.

`biathlon.results`:

- `sort_reports` orders the reports.
- `format_result_table` renders them as text.
- `write_result_table` writes them to a file, `Resulting Table.txt` by
  default.

`biathlon.cli`:

- `main` is the command's entry point. It returns the exit status.

## Limitations

- The `firingLines` and `start` settings are read from the configuration but
  have no effect on the race.
- A competitor's finish time is not recorded. The results use the sum of the
  lap times.
- Output file names are fixed, and the files are always written to the
  current directory.