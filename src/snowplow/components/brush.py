from dataclasses import dataclass

from snowplow.constants import PRESSURE_THRESHOLD


@dataclass(slots=True)
class Brush:
    angle: int = 0
    pressure_threshold: float = PRESSURE_THRESHOLD
    last_color: int | None = None
