from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from snowplow.memory.allocator import Region

if TYPE_CHECKING:
    from snowplow.simulation.module import SimulationModule


@dataclass(slots=True)
class SimulationHandle:
    """Capability granted once at startup: the module plus the regions it may write."""

    module: "SimulationModule"
    aux_region: Region | None = None
