"""
Shore falloff: sine-shaped slopes around every shore candidate.

Every shore cell of the classified mask stamps a bump of radius ``r`` into
the elevation buffer. The work runs on a background thread so the owner can
poll progress and cancel between rows.
"""

import math
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

import numpy as np
import structlog

from .boundary import SHORE
from .errors import JobInProgressError

logger = structlog.get_logger()

# Height given to land cells by the base pipeline. Bumps never touch cells
# at or above it, so shores blend into flat land instead of overwriting it.
LAND_HEIGHT = np.float32(0.1)
SHORE_CEILING = np.float32(0.1)


@dataclass
class JobState:
    """Progress record shared between a shore job's worker and its owner."""

    total: int
    processed: int = 0
    rows_completed: int = 0
    abort: threading.Event = field(default_factory=threading.Event)
    done: threading.Event = field(default_factory=threading.Event)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def advance_to(self, processed: int) -> None:
        with self._lock:
            if processed > self.processed:
                self.processed = processed

    def finish_row(self, processed: int) -> None:
        with self._lock:
            if processed > self.processed:
                self.processed = processed
            self.rows_completed += 1

    def request_abort(self) -> None:
        """Raise the abort flag unless the worker has already exited."""
        with self._lock:
            if not self.done.is_set():
                self.abort.set()

    def close(self) -> None:
        """Mark the job ended and reset the abort flag for the next run."""
        with self._lock:
            self.abort.clear()
            self.done.set()

    @property
    def fraction(self) -> float:
        with self._lock:
            if self.total == 0:
                return 1.0
            return self.processed / self.total


def effective_radius(x: int, y: int, width: int, height: int, max_radius: int) -> int:
    """Largest radius that keeps the bump window inside the buffer, capped at ``max_radius``."""
    return min(width, width - x, height - y, x, y, max_radius)


def bump_table(radius: int) -> np.ndarray:
    """
    Sine-product bump over a ``2 * radius`` square window.

    A single arch along each axis, peaking at 0.1 in the window centre.
    """
    u = np.arange(2 * radius, dtype=np.float64) / radius / 2
    wave = np.sin(u * math.pi)
    return (np.outer(wave / 10.0, wave)).astype(np.float32)


def apply_bump(heights: np.ndarray, x: int, y: int, radius: int, bump: np.ndarray) -> None:
    """Raise cells around (x, y) to the bump, leaving cells at or above the ceiling alone."""
    window = heights[x - radius:x + radius, y - radius:y + radius]
    raise_mask = (window < SHORE_CEILING) & (window <= bump)
    window[raise_mask] = bump[raise_mask]


class ShoreFalloffJob:
    """
    One shore falloff pass over an elevation buffer.

    Call ``start()`` to run on a worker thread or ``run()`` to run in the
    calling thread. Cancellation is checked once per mask row, so rows are
    either fully processed or not touched by the job at all. A cancelled job
    leaves a valid, partially shored buffer behind.
    """

    def __init__(
        self,
        mask: np.ndarray,
        heights: np.ndarray,
        max_radius: int,
        on_row: Optional[Callable[[int], None]] = None,
    ):
        """
        Args:
            mask: Classified mask, shore candidates marked with ``SHORE``
            heights: Elevation buffer written in place
            max_radius: Radius cap in pixels, already scaled to the resolution
            on_row: Called with the row index after each completed row
        """
        self.mask = mask
        self.heights = heights
        self.max_radius = max_radius
        self.on_row = on_row

        self.state = JobState(total=int(mask.size))
        self.cancelled = False
        self.error: Optional[BaseException] = None

        self._bumps: Dict[int, np.ndarray] = {}
        self._thread: Optional[threading.Thread] = None
        self._started = False

    def start(self) -> "ShoreFalloffJob":
        """Launch the worker thread."""
        self._claim()
        self._thread = threading.Thread(target=self._work, name="shore-falloff", daemon=True)
        self._thread.start()
        return self

    def run(self) -> None:
        """Run the whole job in the calling thread."""
        self._claim()
        self._process()

    def _claim(self) -> None:
        if self._started:
            raise JobInProgressError("shore falloff job has already been started")
        self._started = True

    def _work(self) -> None:
        try:
            self._process()
        except Exception as e:
            self.error = e
            logger.error("Shore falloff failed", error=str(e))
            raise

    def _process(self) -> None:
        width, height = self.mask.shape
        buffer_width, buffer_height = self.heights.shape
        logger.info(
            "Shore falloff started",
            mask_shape=self.mask.shape,
            max_radius=self.max_radius,
            shore_cells=int(np.count_nonzero(self.mask == SHORE)),
        )

        try:
            for x in range(width):
                if self.state.abort.is_set():
                    self.cancelled = True
                    break

                row_start = x * height
                for y in np.flatnonzero(self.mask[x] == SHORE):
                    y = int(y)
                    self.state.advance_to(row_start + y + 1)
                    radius = effective_radius(x, y, buffer_width, buffer_height, self.max_radius)
                    if radius > 0:
                        apply_bump(self.heights, x, y, radius, self._bump(radius))

                self.state.finish_row(row_start + height)
                if self.on_row is not None:
                    self.on_row(x)
        finally:
            self.state.close()

        if self.cancelled:
            logger.info("Shore falloff cancelled", progress=self.poll_progress(),
                        rows_completed=self.state.rows_completed)
        else:
            logger.info("Shore falloff finished", rows_completed=self.state.rows_completed)

    def _bump(self, radius: int) -> np.ndarray:
        bump = self._bumps.get(radius)
        if bump is None:
            bump = bump_table(radius)
            self._bumps[radius] = bump
        return bump

    @property
    def progress(self) -> float:
        """Percentage of mask cells processed, 0-100."""
        return self.state.fraction * 100.0

    def poll_progress(self) -> str:
        """Progress formatted for display, e.g. ``"42%"``."""
        return f"{self.progress:.0f}%"

    def request_cancel(self) -> None:
        """Ask the worker to stop at the next row boundary."""
        self.state.request_abort()

    def is_running(self) -> bool:
        return self._started and not self.state.done.is_set()

    def is_done(self) -> bool:
        return self.state.done.is_set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the worker; returns True once the job has ended."""
        if self._thread is not None:
            self._thread.join(timeout)
        return self.is_done()
