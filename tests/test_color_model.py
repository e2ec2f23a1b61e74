import itertools

import pytest
from image_to_sound.color_model import describe_color, hsv_to_rgb, rgb_to_hex, rgb_to_hsv
from image_to_sound.models import HSV, RGB


@pytest.mark.parametrize(
    "rgb, expected",
    [
        ((255, 0, 0), (0.0, 100.0, 100.0)),
        ((0, 255, 0), (120.0, 100.0, 100.0)),
        ((0, 0, 255), (240.0, 100.0, 100.0)),
        ((255, 255, 255), (0.0, 0.0, 100.0)),
        ((0, 0, 0), (0.0, 0.0, 0.0)),
        ((255, 0, 255), (300.0, 100.0, 100.0)),
    ],
)
def test_rgb_to_hsv_primaries(rgb, expected):
    hsv = rgb_to_hsv(*rgb)
    assert (hsv.h, hsv.s, hsv.v) == pytest.approx(expected)


def test_rgb_to_hsv_gray_has_no_saturation():
    hsv = rgb_to_hsv(128, 128, 128)
    assert hsv.h == 0.0
    assert hsv.s == 0.0
    assert hsv.v == pytest.approx(128 / 255 * 100)


def test_rgb_to_hsv_clamps_out_of_range_input():
    assert rgb_to_hsv(300, -20, 0) == rgb_to_hsv(255, 0, 0)


def test_rgb_to_hsv_hue_stays_below_360():
    # Red dominant with blue > green gives a negative raw hue
    hsv = rgb_to_hsv(255, 0, 1)
    assert 0.0 <= hsv.h < 360.0
    assert hsv.h > 359.0


def test_round_trip_within_one_per_channel():
    values = [0, 1, 37, 64, 127, 128, 200, 254, 255]
    for r, g, b in itertools.product(values, repeat=3):
        hsv = rgb_to_hsv(r, g, b)
        back = hsv_to_rgb(hsv.h, hsv.s, hsv.v)
        assert abs(back.r - r) <= 1
        assert abs(back.g - g) <= 1
        assert abs(back.b - b) <= 1


def test_round_trip_of_rounded_hsv_stays_close():
    # Integer display values still land within a few steps
    h, s, v = rgb_to_hsv(200, 100, 50).rounded()
    back = hsv_to_rgb(h, s, v)
    assert abs(back.r - 200) <= 3
    assert abs(back.g - 100) <= 3
    assert abs(back.b - 50) <= 3


def test_hsv_to_rgb_gray_when_unsaturated():
    assert hsv_to_rgb(123.0, 0.0, 50.0) == RGB(r=128, g=128, b=128)


def test_hsv_to_rgb_clamps_input():
    assert hsv_to_rgb(-10.0, 150.0, 150.0) == RGB(r=255, g=0, b=0)


def test_describe_color():
    assert describe_color(HSV(h=0.0, s=100.0, v=100.0)) == "bright vivid Red"
    assert describe_color(HSV(h=200.0, s=60.0, v=60.0)) == "medium moderate Cyan"
    assert describe_color(HSV(h=359.0, s=10.0, v=10.0)) == "dark muted Pink"


def test_rgb_to_hex():
    assert rgb_to_hex(RGB(r=255, g=128, b=0)) == "#FF8000"
