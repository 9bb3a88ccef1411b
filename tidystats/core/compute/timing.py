"""
Execution timing utilities.

Section timings are attached to fit results so slow fits (many
iterations, expensive model functions) can be diagnosed after the fact.
"""

import time
from contextlib import contextmanager
from typing import Iterator


class Timer:
    """
    Accumulating wall-clock timer.
    
    Usage:
        timer = Timer()
        timer.start()
        
        with timer.section('optimize'):
            sol = least_squares(fun, x0)
            
        with timer.section('covariance'):
            cov = np.linalg.inv(J.T @ J)
            
        timer.stop()
        result = timer.result()
        # {'total_seconds': 0.05, 'optimize': 0.04, 'covariance': 0.001}
    """
    
    def __init__(self):
        self._sections: dict[str, float] = {}
        self._start_time: float | None = None
        self._total: float | None = None
    
    def start(self) -> None:
        """Start the overall timer."""
        self._start_time = time.perf_counter()
        
    def stop(self) -> None:
        """Stop the overall timer."""
        if self._start_time is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._total = time.perf_counter() - self._start_time
        
    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """
        Time a named section.
        
        Repeated sections with the same name accumulate.
        
        Args:
            name: Section identifier (used as key in result dict)
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            self._sections[name] = self._sections.get(name, 0.0) + elapsed
    
    def result(self) -> dict[str, float]:
        """
        Timing breakdown.
        
        Returns:
            Dict with 'total_seconds' plus one key per section
            
        Raises:
            RuntimeError: If the timer was never stopped
        """
        if self._total is None:
            raise RuntimeError("Timer.result() called before stop()")
        out = {'total_seconds': self._total}
        out.update(self._sections)
        return out
