from __future__ import annotations

import math


def hsl_to_rgb(h: float, s: float, l: float) -> tuple[float, float, float]:
    """Convert hue in degrees plus saturation/lightness in [0, 1] to RGB floats."""
    def k(n: float) -> float:
        return (n + h / 30) % 12

    a = s * min(l, 1 - l)

    def f(n: float) -> float:
        return l - a * max(-1.0, min(k(n) - 3, min(9 - k(n), 1.0)))

    return f(0), f(8), f(4)


def pack_rgba(r: int, g: int, b: int, a: int = 255) -> int:
    """Pack byte channels into a cell value whose little-endian bytes read R, G, B, A."""
    return (r & 0xFF) | (g & 0xFF) << 8 | (b & 0xFF) << 16 | (a & 0xFF) << 24


def unpack_rgba(color: int) -> tuple[int, int, int, int]:
    return color & 0xFF, (color >> 8) & 0xFF, (color >> 16) & 0xFF, (color >> 24) & 0xFF


def brush_color(angle: int) -> int:
    """Color of the ``angle``-th painted cell: a slowly breathing rainbow."""
    saturation = (1 - 0.125) + math.cos(angle / 180 / 4 * math.pi) * 0.125
    r, g, b = hsl_to_rgb(angle, saturation, 0.5)
    return pack_rgba(int(r * 255), int(g * 255), int(b * 255), 255)
