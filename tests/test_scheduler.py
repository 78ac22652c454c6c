"""
Tests for polyarb/scheduler.py
"""
import logging

import pytest

from polyarb.scheduler import IntervalScheduler


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestIntervalScheduler:
    def test_runs_immediately_then_repeats(self):
        calls = []
        scheduler = IntervalScheduler(0)

        scheduler.run(lambda: calls.append(len(calls)), max_runs=3)

        assert calls == [0, 1, 2]
        assert scheduler.runs == 3

    def test_stop_from_inside_job(self):
        scheduler = IntervalScheduler(3600)
        calls = []

        def job():
            calls.append(1)
            scheduler.stop()

        scheduler.run(job)

        assert calls == [1]
        assert scheduler.stopped is True

    def test_stopped_before_start_runs_nothing(self):
        scheduler = IntervalScheduler(0)
        scheduler.stop()
        calls = []

        scheduler.run(lambda: calls.append(1))

        assert calls == []

    def test_overrun_does_not_overlap(self, caplog):
        clock = FakeClock()
        scheduler = IntervalScheduler(1.0, clock=clock)
        starts = []

        def slow_job():
            starts.append(clock.now)
            clock.now += 5.0

        with caplog.at_level(logging.WARNING):
            scheduler.run(slow_job, max_runs=2)

        assert starts == [0.0, 5.0]
        assert "overran" in caplog.text

    def test_negative_interval_rejected(self):
        with pytest.raises(ValueError):
            IntervalScheduler(-1)
