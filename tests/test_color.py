import pytest

from snowplow.utils.color import brush_color, hsl_to_rgb, pack_rgba, unpack_rgba


@pytest.mark.parametrize(
    "hue, expected",
    [
        (0, (1.0, 0.0, 0.0)),
        (120, (0.0, 1.0, 0.0)),
        (240, (0.0, 0.0, 1.0)),
    ],
)
def test_hsl_primaries(hue, expected):
    assert hsl_to_rgb(hue, 1.0, 0.5) == pytest.approx(expected)


def test_pack_rgba_is_little_endian_bytes():
    color = pack_rgba(0x11, 0x22, 0x33, 0x44)
    assert color == 0x44332211
    assert color.to_bytes(4, "little") == bytes([0x11, 0x22, 0x33, 0x44])
    assert unpack_rgba(color) == (0x11, 0x22, 0x33, 0x44)


def test_first_brush_color_is_opaque_red():
    assert brush_color(0) == pack_rgba(255, 0, 0, 255)


def test_brush_colors_are_opaque_and_vary():
    colors = [brush_color(angle) for angle in range(0, 360, 30)]
    assert all(unpack_rgba(c)[3] == 255 for c in colors)
    assert len(set(colors)) == len(colors)
