"""
Tests for shore falloff and its background job.
"""

import threading

import numpy as np
import pytest

from py_island.core.boundary import LAND, SHORE, WATER, classify_shores
from py_island.core.errors import JobInProgressError
from py_island.core.shore_falloff import (
    JobState,
    LAND_HEIGHT,
    SHORE_CEILING,
    ShoreFalloffJob,
    apply_bump,
    bump_table,
    effective_radius,
)

SIZE = 48
MAX_RADIUS = 6


@pytest.fixture
def shore_mask():
    """A square island in the middle of a 48x48 mask, shores classified."""
    mask = np.zeros((SIZE, SIZE), dtype=np.int8)
    mask[14:34, 12:36] = LAND
    return classify_shores(mask)


@pytest.fixture
def base_heights(shore_mask):
    """Elevation buffer as written by the base pipeline."""
    return np.where(shore_mask == LAND, LAND_HEIGHT, np.float32(0.0)).astype(np.float32)


class TestBump:
    """Test the sine-product bump."""

    def test_bump_shape_and_peak(self):
        bump = bump_table(5)
        assert bump.shape == (10, 10)
        assert bump.dtype == np.float32
        assert bump[5, 5] == pytest.approx(0.1)
        assert np.all(bump <= np.float32(0.1))
        assert np.all(bump >= 0)

    def test_bump_zero_on_leading_edge(self):
        bump = bump_table(4)
        assert np.all(bump[0, :] == 0)
        assert np.all(bump[:, 0] == 0)

    def test_bump_symmetric(self):
        bump = bump_table(6)
        np.testing.assert_allclose(bump, bump.T)

    def test_effective_radius(self):
        assert effective_radius(10, 10, 100, 100, 50) == 10
        assert effective_radius(50, 50, 100, 100, 20) == 20
        assert effective_radius(95, 50, 100, 100, 20) == 5
        assert effective_radius(50, 97, 100, 100, 20) == 3
        assert effective_radius(0, 50, 100, 100, 20) == 0
        assert effective_radius(120, 50, 100, 100, 20) < 0

    def test_apply_bump_only_raises(self):
        heights = np.full((20, 20), 0.05, dtype=np.float32)
        heights[10, 10] = LAND_HEIGHT
        before = heights.copy()
        apply_bump(heights, 10, 10, 5, bump_table(5))

        assert np.all(heights >= before)
        assert heights[10, 10] == LAND_HEIGHT
        # Outside the window nothing changes
        np.testing.assert_array_equal(heights[:5, :], before[:5, :])
        np.testing.assert_array_equal(heights[:, 15:], before[:, 15:])

    def test_apply_bump_skips_cells_above_ceiling(self):
        heights = np.full((10, 10), 0.5, dtype=np.float32)
        apply_bump(heights, 5, 5, 3, bump_table(3))
        assert np.all(heights == np.float32(0.5))


class TestShoreFalloffJob:
    """Test running, polling and cancelling shore jobs."""

    def test_run_raises_and_caps(self, shore_mask, base_heights):
        """Heights only go up, and cells that started below the ceiling stay under it."""
        heights = base_heights.copy()
        job = ShoreFalloffJob(shore_mask, heights, MAX_RADIUS)
        job.run()

        assert job.is_done()
        assert not job.cancelled
        assert np.all(heights >= base_heights)
        below = base_heights < SHORE_CEILING
        assert np.all(heights[below] <= SHORE_CEILING)
        assert np.any(heights[shore_mask == SHORE] > 0)

    def test_land_untouched(self, shore_mask, base_heights):
        heights = base_heights.copy()
        ShoreFalloffJob(shore_mask, heights, MAX_RADIUS).run()
        np.testing.assert_array_equal(heights[shore_mask == LAND], base_heights[shore_mask == LAND])

    def test_progress_completes(self, shore_mask, base_heights):
        job = ShoreFalloffJob(shore_mask, base_heights.copy(), MAX_RADIUS)
        assert job.poll_progress() == "0%"
        job.run()
        assert job.poll_progress() == "100%"
        assert job.state.processed == SIZE * SIZE
        assert job.state.rows_completed == SIZE

    def test_progress_monotonic(self, shore_mask, base_heights):
        seen = []
        job = ShoreFalloffJob(shore_mask, base_heights.copy(), MAX_RADIUS,
                              on_row=lambda row: seen.append(job.progress))
        job.run()
        assert seen == sorted(seen)
        assert seen[-1] == pytest.approx(100.0)

    def test_heights_never_drop_between_rows(self, shore_mask, base_heights):
        """Each row leaves every cell at or above its value after the previous row."""
        heights = base_heights.copy()
        snapshots = [heights.copy()]

        job = ShoreFalloffJob(shore_mask, heights, MAX_RADIUS,
                              on_row=lambda row: snapshots.append(heights.copy()))
        job.run()

        assert len(snapshots) == SIZE + 1
        for previous, current in zip(snapshots, snapshots[1:]):
            assert np.all(current >= previous)
        assert not np.array_equal(snapshots[0], snapshots[-1])

    def test_threaded_run(self, shore_mask, base_heights):
        """The worker thread produces the same buffer as a synchronous run."""
        expected = base_heights.copy()
        ShoreFalloffJob(shore_mask, expected, MAX_RADIUS).run()

        heights = base_heights.copy()
        job = ShoreFalloffJob(shore_mask, heights, MAX_RADIUS).start()
        assert job.join(timeout=30)
        assert job.is_done()
        assert job.error is None
        assert job.poll_progress() == "100%"
        assert not job.state.abort.is_set()
        np.testing.assert_array_equal(heights, expected)

    def test_cancel_is_row_atomic(self, shore_mask, base_heights):
        """Cancelling after row k equals running a job that only has shore rows up to k."""
        k = 20
        heights = base_heights.copy()

        def cancel_after(row):
            if row == k:
                job.request_cancel()

        job = ShoreFalloffJob(shore_mask, heights, MAX_RADIUS, on_row=cancel_after)
        job.run()

        assert job.cancelled
        assert job.state.rows_completed == k + 1
        assert job.progress < 100.0
        assert job.poll_progress() == f"{(k + 1) * 100 / SIZE:.0f}%"
        assert not job.state.abort.is_set()

        truncated = shore_mask.copy()
        tail = truncated[k + 1:]
        tail[tail == SHORE] = WATER
        expected = base_heights.copy()
        ShoreFalloffJob(truncated, expected, MAX_RADIUS).run()
        np.testing.assert_array_equal(heights, expected)

    def test_cancel_before_start(self, shore_mask, base_heights):
        heights = base_heights.copy()
        job = ShoreFalloffJob(shore_mask, heights, MAX_RADIUS)
        job.request_cancel()
        job.run()

        assert job.cancelled
        assert job.state.rows_completed == 0
        np.testing.assert_array_equal(heights, base_heights)

    def test_cancel_threaded(self, shore_mask, base_heights):
        gate = threading.Event()
        job = ShoreFalloffJob(shore_mask, base_heights.copy(), MAX_RADIUS,
                              on_row=lambda row: gate.wait(timeout=10))
        job.start()
        assert job.is_running()
        job.request_cancel()
        gate.set()
        assert job.join(timeout=30)
        assert job.cancelled
        assert job.progress < 100.0
        assert not job.state.abort.is_set()

    def test_cancel_after_finish_leaves_flag_clear(self, shore_mask, base_heights):
        job = ShoreFalloffJob(shore_mask, base_heights.copy(), MAX_RADIUS)
        job.run()
        job.request_cancel()
        assert not job.state.abort.is_set()
        assert not job.cancelled

    def test_cannot_start_twice(self, shore_mask, base_heights):
        job = ShoreFalloffJob(shore_mask, base_heights.copy(), MAX_RADIUS)
        job.run()
        with pytest.raises(JobInProgressError):
            job.start()

    def test_overshooting_mask(self, base_heights):
        """Mask cells beyond the buffer edge are counted but produce no bump."""
        mask = np.zeros((SIZE * 2, SIZE * 2), dtype=np.int8)
        mask[SIZE + 5:SIZE + 10, 10:20] = SHORE
        heights = base_heights.copy()
        job = ShoreFalloffJob(mask, heights, MAX_RADIUS)
        job.run()
        assert job.poll_progress() == "100%"
        np.testing.assert_array_equal(heights, base_heights)


class TestJobState:
    """Test the shared progress record."""

    def test_abort_ignored_once_closed(self):
        state = JobState(total=10)
        state.close()
        state.request_abort()
        assert state.done.is_set()
        assert not state.abort.is_set()

    def test_close_resets_abort(self):
        state = JobState(total=10)
        state.request_abort()
        assert state.abort.is_set()
        state.close()
        assert not state.abort.is_set()

    def test_abort_and_close_serialised(self):
        """Racing cancel requests against the worker exit never leave the flag raised."""
        for _ in range(200):
            state = JobState(total=1)
            start = threading.Barrier(2)

            def cancel():
                start.wait()
                state.request_abort()

            canceller = threading.Thread(target=cancel)
            canceller.start()
            start.wait()
            state.close()
            canceller.join()

            assert state.done.is_set()
            # Either the request landed first and was cleared, or it saw the job closed
            assert not state.abort.is_set()

    def test_processed_monotonic(self):
        state = JobState(total=100)
        state.advance_to(40)
        state.advance_to(10)
        assert state.processed == 40
        state.finish_row(60)
        assert state.processed == 60
        assert state.rows_completed == 1
        assert state.fraction == pytest.approx(0.6)
