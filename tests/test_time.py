"""Tests for the frame scheduler and the command queue."""
from __future__ import annotations

import pytest

from flyover_engine.core.time import FrameScheduler
from flyover_engine.input.command_queue import CommandKind, CommandQueue


class FakeClock:
    def __init__(self, times):
        self.times = list(times)
        self.last = self.times[-1]

    def __call__(self):
        return self.times.pop(0) if self.times else self.last


def test_step_measures_and_clamps_delta():
    deltas = []
    scheduler = FrameScheduler(deltas.append, max_frame_delta=0.25, clock=FakeClock([0.0, 0.016, 2.0]))
    scheduler.step()
    scheduler.step()
    scheduler.step()
    assert deltas == [0.0, pytest.approx(0.016), 0.25]
    assert scheduler.frame_count == 3


def test_run_stops_after_max_frames():
    calls = []
    ticks = iter(range(1000))
    scheduler = FrameScheduler(calls.append, clock=lambda: next(ticks) * 0.01)
    scheduler.run(max_frames=5)
    assert len(calls) == 5
    assert not scheduler.running


def test_stop_from_callback():
    ticks = iter(range(1000))

    def callback(dt):
        if scheduler.frame_count == 2:
            scheduler.stop()

    scheduler = FrameScheduler(callback, clock=lambda: next(ticks) * 0.01)
    scheduler.run()
    assert scheduler.frame_count == 3


def test_run_sleeps_to_frame_rate():
    sleeps = []
    ticks = iter(range(1000))
    scheduler = FrameScheduler(lambda dt: None, frame_rate=10, clock=lambda: next(ticks) * 0.01,
                               sleep=sleeps.append)
    scheduler.run(max_frames=2)
    assert len(sleeps) == 2
    assert all(0.0 < s <= 0.1 for s in sleeps)


def test_command_queue_drains_in_order():
    queue = CommandQueue()
    queue.push(CommandKind.SEEK, 0.5)
    queue.push(CommandKind.PLAY)
    assert len(queue) == 2

    drained = queue.drain()
    assert [c.kind for c in drained] == [CommandKind.SEEK, CommandKind.PLAY]
    assert drained[0].value == 0.5
    assert len(queue) == 0
    assert queue.drain() == []
