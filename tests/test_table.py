import io
import re

import pytest

from dining.args import Settings
from dining.clock import now_ms
from dining.table import Event, Table

LINE = re.compile(r"^At (\d+) Philosopher (\d+) (.+)$")


def _lines(stream):
    return stream.getvalue().splitlines()


def _parsed(stream):
    result = []
    for line in _lines(stream):
        match = LINE.match(line)
        assert match is not None, line
        result.append((int(match.group(1)), int(match.group(2)), match.group(3)))
    return result


def test_event_format():
    assert Event.EAT.format(5, 3) == "At 5 Philosopher 3 Is Eating"
    assert Event.DEAD.format(0, 1) == "At 0 Philosopher 1 Died"


@pytest.mark.parametrize("count", [2, 3, 5])
def test_fork_assignment(count):
    table = Table(Settings(count, 800, 200, 200), output=io.StringIO())
    assert [p.ident for p in table.philosophers] == list(range(1, count + 1))
    for index, philosopher in enumerate(table.philosophers):
        own = table.forks[index]
        neighbour = table.forks[(index + 1) % count]
        if index % 2 == 0:
            assert philosopher.fork_right is own
            assert philosopher.fork_left is neighbour
        else:
            assert philosopher.fork_left is own
            assert philosopher.fork_right is neighbour


def test_announce_writes_then_stop_silences():
    out = io.StringIO()
    table = Table(Settings(2, 800, 200, 200), output=out)
    first = table.philosophers[0]
    assert table.announce(first, Event.THINK) is True
    table.stop_all()
    assert all(p.stopped for p in table.philosophers)
    assert table.announce(first, Event.EAT) is False
    lines = _lines(out)
    assert len(lines) == 1
    assert lines[0].endswith("Philosopher 1 Is Thinking")


def test_death_announcement_stops_everyone():
    out = io.StringIO()
    table = Table(Settings(3, 800, 200, 200), output=out)
    table.announce(table.philosophers[1], Event.DEAD)
    assert all(p.stopped for p in table.philosophers)
    assert table.announce(table.philosophers[2], Event.DEAD) is False
    assert _lines(out)[-1].endswith("Philosopher 2 Died")
    assert len(_lines(out)) == 1


def test_wait_completes_when_healthy():
    table = Table(Settings(2, 10_000, 200, 200), output=io.StringIO())
    philosopher = table.philosophers[0]
    before = now_ms()
    assert philosopher.wait(20) is False
    assert now_ms() - before >= 20


def test_wait_interrupted_by_stop():
    table = Table(Settings(2, 10_000, 200, 200), output=io.StringIO())
    table.stop_all()
    assert table.philosophers[0].wait(5_000) is True


def test_wait_reports_starvation():
    out = io.StringIO()
    table = Table(Settings(2, 10, 200, 200), output=out)
    philosopher = table.philosophers[0]
    philosopher.last_eat = now_ms() - 1_000
    assert philosopher.wait(5_000) is True
    assert _lines(out)[-1].endswith("Philosopher 1 Died")
    assert all(p.stopped for p in table.philosophers)


def test_single_philosopher_cannot_take_two_forks():
    out = io.StringIO()
    table = Table(Settings(1, 800, 200, 200), output=out)
    philosopher = table.philosophers[0]
    assert philosopher.fork_left is philosopher.fork_right
    assert philosopher.take_forks() is False
    assert philosopher.fork_right.acquire(blocking=False)
    philosopher.fork_right.release()
    assert [entry[2] for entry in _parsed(out)] == ["Took a Fork"]


def test_eat_records_meal_and_releases_forks():
    out = io.StringIO()
    table = Table(Settings(2, 10_000, 10, 10), output=out)
    philosopher = table.philosophers[0]
    before = now_ms()
    assert philosopher.eat() is True
    assert philosopher.last_eat >= before
    for fork in table.forks:
        assert fork.acquire(blocking=False)
        fork.release()
    assert [entry[2] for entry in _parsed(out)] == [
        "Took a Fork",
        "Took a Fork",
        "Is Eating",
    ]


def test_watch_meals_stops_when_all_have_eaten():
    table = Table(Settings(3, 10_000, 200, 200, meals=2), output=io.StringIO())
    for philosopher in table.philosophers:
        philosopher.meals_eaten = 2
    table.watch_meals()
    assert all(p.stopped for p in table.philosophers)


def test_watch_deaths_reports_starving_philosopher():
    out = io.StringIO()
    table = Table(Settings(2, 10, 200, 200), output=out)
    for philosopher in table.philosophers:
        philosopher.last_eat = now_ms() - 1_000
    table.watch_deaths()
    assert all(p.stopped for p in table.philosophers)
    entries = _parsed(out)
    assert len(entries) == 1
    assert entries[0][2] == "Died"


def test_single_philosopher_dies():
    out = io.StringIO()
    table = Table(Settings(1, 50, 20, 20), output=out)
    table.run()
    entries = _parsed(out)
    assert [entry[2] for entry in entries] == ["Is Thinking", "Took a Fork", "Died"]
    assert all(entry[1] == 1 for entry in entries)
    assert entries[-1][0] >= 50


def test_run_with_meal_limit_finishes_without_death():
    out = io.StringIO()
    table = Table(Settings(2, 800, 20, 20, meals=2), output=out)
    table.run()
    assert all(p.meals_eaten >= 2 for p in table.philosophers)
    assert all(p.stopped for p in table.philosophers)
    entries = _parsed(out)
    assert all(entry[2] != "Died" for entry in entries)
    timestamps = [entry[0] for entry in entries]
    assert timestamps == sorted(timestamps)
    for ident in (1, 2):
        eats = [e for e in entries if e[1] == ident and e[2] == "Is Eating"]
        assert len(eats) >= 2