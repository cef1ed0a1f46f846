from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Use weak=False to retain strong reference to bound methods so systems not kept in a variable still receive events.
        sig.connect(fn, weak=False)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                  # payload: dt=float


# ============================================================================
# INPUT & DISPLAY
# ============================================================================
EVENT_POINTER_MOVE = "pointer_move"                  # payload: x, y, pressure (display coords, origin top-left)
EVENT_DISPLAY_RESIZED = "display_resized"            # payload: width=int, height=int
EVENT_FULLSCREEN_CHANGED = "fullscreen_changed"      # payload: fullscreen=bool


# ============================================================================
# PAGE LIFECYCLE
# ============================================================================
EVENT_VISIBILITY_CHANGED = "visibility_changed"      # payload: visible=bool
EVENT_PAGE_HIDE = "page_hide"                        # payload: None


# ============================================================================
# SIMULATION
# ============================================================================
EVENT_FRAME_STEPPED = "frame_stepped"                # payload: generation=int, pixels=ndarray(H, W, 4)
EVENT_SIMULATION_HALTED = "simulation_halted"        # payload: generation=int, error=SimulationStepFailure|None


# ============================================================================
# PLAYFIELD
# ============================================================================
EVENT_PLAYFIELD_PAINTED = "playfield_painted"        # payload: x=int, y=int, color=int
EVENT_PLAYFIELD_SAVED = "playfield_saved"            # payload: key=str, size=int
EVENT_PLAYFIELD_LOADED = "playfield_loaded"          # payload: key=str, mode=int
EVENT_PLAYFIELD_LOAD_FAILED = "playfield_load_failed"  # payload: key=str, error=DecodeCorruption
