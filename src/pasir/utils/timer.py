"""Wall-clock timer for pipeline sections."""

import time
from contextlib import contextmanager
from typing import Dict


class Timer:
    """
    Accumulating wall-clock timer.

    Example:
        >>> timer = Timer()
        >>> timer.start("total")
        >>> with timer.time_section("groundwater"):
        ...     result = solver.solve(grid, forcing)
        >>> timer.stop("total")
        >>> timer.get_times()
    """

    def __init__(self):
        self.times: Dict[str, float] = {}
        self._starts: Dict[str, float] = {}

    def start(self, name: str):
        """Start (or restart) the named clock."""
        self._starts[name] = time.perf_counter()

    def stop(self, name: str) -> float:
        """
        Stop the named clock and add the elapsed time to its total.

        Returns:
            Elapsed time of this interval [s]
        """
        if name not in self._starts:
            raise KeyError(f"Timer '{name}' was never started")
        elapsed = time.perf_counter() - self._starts.pop(name)
        self.times[name] = self.times.get(name, 0.0) + elapsed
        return elapsed

    @contextmanager
    def time_section(self, name: str):
        """Time the enclosed block under the given name."""
        self.start(name)
        try:
            yield
        finally:
            self.stop(name)

    def get_times(self) -> Dict[str, float]:
        return dict(self.times)
