"""Frame clock resource describing where the driver is in its lifecycle."""
from dataclasses import dataclass
from enum import Enum, auto


class DriverState(Enum):
    IDLE = auto()
    RUNNING = auto()
    HALTED = auto()


@dataclass
class FrameClock:
    """Singleton component counting generations and raw tick callbacks."""
    generation: int = 0
    skip_frames: int = 1
    callbacks: int = 0
    state: DriverState = DriverState.IDLE
