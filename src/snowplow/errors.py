"""Failure kinds shared across the allocator, codec, loader and frame driver."""
from __future__ import annotations


class SnowplowError(Exception):
    """Base class for all snowplow failures."""


class AllocationExhausted(SnowplowError):
    """A region request would run past the end of the linear memory buffer."""

    def __init__(self, offset: int, size: int, capacity: int) -> None:
        super().__init__(f"Out of memory: {offset}+{size} > {capacity}")
        self.offset = offset
        self.size = size
        self.capacity = capacity


class ModuleLoadFailure(SnowplowError):
    """The simulation module could not be located, loaded or bound."""


class DecodeCorruption(SnowplowError):
    """A persisted playfield blob failed structural validation."""


class SimulationStepFailure(SnowplowError):
    """The external step routine raised while advancing a generation."""

    def __init__(self, generation: int, cause: BaseException | None = None) -> None:
        message = f"Simulation step failed at generation {generation}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.generation = generation
        self.cause = cause
