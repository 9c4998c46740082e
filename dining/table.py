"""The dining table: philosophers, forks and the threads that watch them."""

from __future__ import annotations

import itertools
import sys
import threading
import time
from enum import Enum
from typing import List, Optional, TextIO

from .args import Settings
from .clock import now_ms

__all__ = ["Event", "Philosopher", "Table"]

_STAGGER = 0.0001
_POLL = 0.001


class Event(Enum):
    """Things a philosopher can be reported doing."""

    FORK = "Took a Fork"
    EAT = "Is Eating"
    SLEEP = "Is Sleeping"
    THINK = "Is Thinking"
    DEAD = "Died"

    def format(self, timestamp: int, philosopher_id: int) -> str:
        """Render the report line for this event."""
        return f"At {timestamp} Philosopher {philosopher_id} {self.value}"


class Philosopher:
    """One diner, holding two forks in turn and living on its own thread."""

    def __init__(
        self,
        table: "Table",
        ident: int,
        fork_left: threading.Lock,
        fork_right: threading.Lock,
    ) -> None:
        self.table = table
        self.ident = ident
        self.fork_left = fork_left
        self.fork_right = fork_right
        self.last_eat = table.start_time
        self.meals_eaten = 0
        self._lock = threading.Lock()
        self._stop = threading.Event()

    @property
    def stopped(self) -> bool:
        """Whether this philosopher has been told to stop."""
        return self._stop.is_set()

    def _starving(self, current: int, margin: int = 0) -> bool:
        with self._lock:
            return current - self.last_eat > self.table.settings.time_to_die + margin

    def run(self) -> None:
        """Think, eat and sleep until stopped or dead."""
        table = self.table
        while not self.stopped:
            table.announce(self, Event.THINK)
            if self.ident % 2 == 0:
                time.sleep(_STAGGER)
            if not self.eat():
                return
            with self._lock:
                self.meals_eaten += 1
            table.announce(self, Event.SLEEP)
            if self.wait(table.settings.time_to_sleep):
                return

    def wait(self, duration: int) -> bool:
        """Pass ``duration`` milliseconds; return True if cut short by death or stop."""
        deadline = now_ms() + duration
        current = now_ms()
        while current < deadline:
            if self._starving(current):
                self.table.announce(self, Event.DEAD)
                return True
            if self.stopped:
                return True
            time.sleep(_POLL)
            current = now_ms()
        return False

    def take_forks(self) -> bool:
        """Pick up the right fork, then the left; return False if only one exists."""
        self.fork_right.acquire()
        self.table.announce(self, Event.FORK)
        if self.fork_left is self.fork_right:
            self.fork_right.release()
            return False
        self.fork_left.acquire()
        self.table.announce(self, Event.FORK)
        return True

    def eat(self) -> bool:
        """Take both forks and eat; return False if the meal could not finish."""
        if not self.take_forks():
            return False
        try:
            self.table.announce(self, Event.EAT)
            with self._lock:
                self.last_eat = now_ms()
            return not self.wait(self.table.settings.time_to_eat)
        finally:
            self.fork_left.release()
            self.fork_right.release()


class Table:
    """A round table of philosophers sharing one fork between each pair."""

    def __init__(self, settings: Settings, output: Optional[TextIO] = None) -> None:
        self.settings = settings
        self.output = output
        self.start_time = now_ms()
        self._message_lock = threading.Lock()
        count = settings.philosophers
        self.forks: List[threading.Lock] = [threading.Lock() for _ in range(count)]
        self.philosophers: List[Philosopher] = []
        for index in range(count):
            neighbour = self.forks[(index + 1) % count]
            own = self.forks[index]
            if index % 2 == 0:
                left, right = neighbour, own
            else:
                left, right = own, neighbour
            self.philosophers.append(Philosopher(self, index + 1, left, right))
        self._threads: List[threading.Thread] = []
        self._meal_watcher: Optional[threading.Thread] = None
        self._death_watcher: Optional[threading.Thread] = None

    def _write(self, line: str) -> None:
        stream = self.output if self.output is not None else sys.stdout
        print(line, file=stream, flush=True)

    def announce(self, philosopher: Philosopher, event: Event) -> bool:
        """Report an event; return True if the line was written.

        Nothing is written once the philosopher has stopped. A death stops
        everyone at the table.
        """
        with self._message_lock:
            if philosopher.stopped:
                return False
            self._write(event.format(now_ms() - self.start_time, philosopher.ident))
            if event is Event.DEAD:
                self.stop_all()
            return True

    def stop_all(self) -> None:
        """Tell every philosopher to stop, unless that has already happened."""
        if not self.philosophers or self.philosophers[0].stopped:
            return
        for philosopher in self.philosophers:
            philosopher._stop.set()

    def watch_meals(self) -> None:
        """Stop the table once every philosopher has eaten the required meals."""
        meals = self.settings.meals
        if meals is None:
            return
        while True:
            time.sleep(_STAGGER)
            all_ate = True
            for philosopher in self.philosophers:
                with philosopher._lock:
                    if philosopher.meals_eaten < meals:
                        all_ate = False
                if philosopher.stopped:
                    return
            if all_ate:
                self.stop_all()
                return

    def watch_deaths(self) -> None:
        """Cycle over the philosophers and report the first one that starves."""
        for philosopher in itertools.cycle(self.philosophers):
            time.sleep(_STAGGER)
            if philosopher._starving(now_ms(), margin=1):
                self.announce(philosopher, Event.DEAD)
                self.stop_all()
                return
            if philosopher.stopped:
                return

    def start(self) -> None:
        """Launch the philosopher threads and the watchers."""
        for philosopher in self.philosophers:
            thread = threading.Thread(target=philosopher.run, daemon=True)
            thread.start()
            self._threads.append(thread)
            time.sleep(_STAGGER)
        if self.settings.meals is not None:
            self._meal_watcher = threading.Thread(target=self.watch_meals, daemon=True)
            self._meal_watcher.start()
        self._death_watcher = threading.Thread(target=self.watch_deaths, daemon=True)
        self._death_watcher.start()

    def join(self) -> None:
        """Wait for the philosophers and then the watchers to finish."""
        for thread in self._threads:
            thread.join()
        if self._meal_watcher is not None:
            self._meal_watcher.join()
        if self._death_watcher is not None:
            self._death_watcher.join()

    def run(self) -> None:
        """Run the whole simulation to its end."""
        self.start()
        self.join()