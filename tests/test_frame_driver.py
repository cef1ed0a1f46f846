import numpy as np
import pytest

from snowplow.components.frame_clock import DriverState
from snowplow.errors import SimulationStepFailure
from snowplow.events.bus import EVENT_FRAME_STEPPED, EVENT_SIMULATION_HALTED, EVENT_TICK
from snowplow.systems.frame_driver import FrameDriver
from snowplow.systems.playfield_ops import get_frame_clock, get_playfield
from tests.helpers import make_session


class _RecordingStep:
    def __init__(self):
        self.calls = []

    def __call__(self, generation, grid, width, height, aux):
        self.calls.append((generation, width, height, aux is not None))
        # Mark the first cell with the generation so the frame is observable.
        grid[0] = 0xFF000000 | generation


def test_driver_starts_idle_and_runs_after_first_tick():
    step = _RecordingStep()
    session = make_session(step=step)
    driver = FrameDriver(session.world, session.bus)

    assert driver.state == DriverState.IDLE
    session.bus.emit(EVENT_TICK, dt=1 / 60)

    assert driver.state == DriverState.RUNNING
    assert driver.generation == 1
    assert step.calls == [(0, 6, 8, True)]


def test_generation_counter_increases_each_step():
    step = _RecordingStep()
    session = make_session(step=step)
    FrameDriver(session.world, session.bus)

    for _ in range(3):
        session.bus.emit(EVENT_TICK, dt=1 / 60)

    assert [call[0] for call in step.calls] == [0, 1, 2]
    assert get_playfield(session.world).cell(0, 0) == 0xFF000002


def test_step_marks_playfield_dirty_and_publishes_pixels():
    session = make_session(step=_RecordingStep())
    FrameDriver(session.world, session.bus)
    frames = []
    session.bus.subscribe(EVENT_FRAME_STEPPED, lambda sender, **p: frames.append(p))

    playfield = get_playfield(session.world)
    assert playfield.dirty is False
    session.bus.emit(EVENT_TICK, dt=1 / 60)

    assert playfield.dirty is True
    assert len(frames) == 1
    pixels = frames[0]["pixels"]
    assert pixels.shape == (8, 6, 4)
    assert pixels.dtype == np.uint8
    assert pixels[0, 0].tolist() == [0, 0, 0, 0xFF]


def test_skip_factor_steps_every_nth_callback():
    step = _RecordingStep()
    session = make_session(step=step, skip_frames=3)
    driver = FrameDriver(session.world, session.bus)

    for _ in range(7):
        session.bus.emit(EVENT_TICK, dt=1 / 60)

    # Callbacks 0, 3 and 6 step.
    assert len(step.calls) == 3
    assert driver.generation == 3
    assert get_frame_clock(session.world).callbacks == 7


def test_step_failure_halts_and_propagates():
    def failing_step(generation, grid, width, height, aux):
        if generation == 1:
            raise RuntimeError("kaboom")

    session = make_session(step=failing_step)
    driver = FrameDriver(session.world, session.bus)
    halted = []
    session.bus.subscribe(EVENT_SIMULATION_HALTED, lambda sender, **p: halted.append(p))

    session.bus.emit(EVENT_TICK, dt=1 / 60)
    with pytest.raises(SimulationStepFailure) as excinfo:
        session.bus.emit(EVENT_TICK, dt=1 / 60)

    assert excinfo.value.generation == 1
    assert isinstance(excinfo.value.cause, RuntimeError)
    assert driver.state == DriverState.HALTED
    assert driver.generation == 1
    assert halted and halted[0]["generation"] == 1

    # Later ticks are ignored rather than retried.
    session.bus.emit(EVENT_TICK, dt=1 / 60)
    assert driver.generation == 1


def test_stop_prevents_further_steps():
    step = _RecordingStep()
    session = make_session(step=step)
    driver = FrameDriver(session.world, session.bus)

    session.bus.emit(EVENT_TICK, dt=1 / 60)
    driver.stop()
    session.bus.emit(EVENT_TICK, dt=1 / 60)

    assert len(step.calls) == 1
    assert driver.state == DriverState.HALTED
