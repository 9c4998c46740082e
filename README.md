# dining

A threaded simulation of the dining philosophers problem. Philosophers sit
around a round table with one fork between each pair of neighbours. Each
philosopher runs on its own thread and repeatedly thinks, picks up two
forks, eats, then sleeps. A watcher thread reports the first philosopher
who goes too long without eating, and the simulation then stops.

## Installation

```
pip install .
```

## Usage

```
dining NUMBER_OF_PHILOSOPHERS TIME_TO_DIE TIME_TO_EAT TIME_TO_SLEEP [MEALS]
```

All times are in milliseconds. Every argument must be made of digits only,
with no sign and no leading zero, and must not exceed 2147483647. If the
optional `MEALS` is given, the simulation also stops once every philosopher
has eaten at least that many times. With the wrong number of arguments, or
an argument that breaks these rules, the command prints `Invalid Argument`
and exits with status 1; otherwise it runs to the end and exits with
status 0.

Example:

```
dining 5 800 200 200 7
```

Each event is printed on its own line, prefixed with the number of
milliseconds since the table was set:

```
At 0 Philosopher 1 Is Thinking
At 0 Philosopher 1 Took a Fork
At 0 Philosopher 1 Took a Fork
At 0 Philosopher 1 Is Eating
At 200 Philosopher 1 Is Sleeping
...
```

The possible events are `Is Thinking`, `Took a Fork`, `Is Eating`,
`Is Sleeping` and `Died`. Once a philosopher has died, every philosopher
is stopped and nothing more is printed. A lone philosopher has only one
fork, so they take it, cannot eat, and eventually die.

## Using it from Python

```python
import io

from dining.args import parse_settings
from dining.table import Table

settings = parse_settings(["4", "410", "200", "200", "3"])
log = io.StringIO()
Table(settings, output=log).run()
print(log.getvalue())
```

- `dining.args.parse_settings(args)` validates the arguments that follow
  the program name and returns a frozen `Settings` with `philosophers`,
  `time_to_die`, `time_to_eat`, `time_to_sleep` and `meals` (`None` when
  not given).
- `dining.args.validate_args(args)` raises `dining.args.ArgumentError` (a
  `ValueError`) when the arguments are not acceptable.
- `dining.table.Table(settings, output=None)` builds the table; events go
  to `output`, or to standard output when it is `None`. `start()` launches
  the threads, `join()` waits for them, and `run()` does both.
- `dining.table.Event` lists the reported events; `Event.format(timestamp,
  philosopher_id)` renders a report line.
- `dining.cli.main(argv=None)` takes the same arguments as the command and
  returns its exit status.

## Running the tests

```
pip install .[test]
pytest
```