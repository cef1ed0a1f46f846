from dataclasses import dataclass


@dataclass(slots=True)
class DisplayState:
    width: int
    height: int
    rotated: bool = False
    fullscreen: bool = False
