"""Conversions between RGB and HSV color representations.

All functions are pure. Hue is expressed in degrees in [0, 360), saturation
and value in percent in [0, 100], RGB channels as integers in [0, 255].
"""

import math

from image_to_sound.models import RGB, HSV

HUE_NAMES = [
    "Red",
    "Orange",
    "Yellow",
    "Lime",
    "Green",
    "Cyan",
    "Blue",
    "Purple",
    "Magenta",
    "Pink",
]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def rgb_to_hsv(r: int, g: int, b: int) -> HSV:
    """Convert an RGB color to HSV using the max/min/diff algorithm.

    The hue is taken from whichever channel is largest and wrapped into
    [0, 360). Saturation is diff/max (0 for black) and value is max.

    Args:
        r: Red channel (0-255).
        g: Green channel (0-255).
        b: Blue channel (0-255).

    Returns:
        HSV with float components, not rounded.
    """
    red = _clamp(r, 0, 255) / 255.0
    green = _clamp(g, 0, 255) / 255.0
    blue = _clamp(b, 0, 255) / 255.0

    high = max(red, green, blue)
    low = min(red, green, blue)
    diff = high - low

    hue = 0.0
    if diff != 0:
        if high == red:
            hue = ((green - blue) / diff) % 6
        elif high == green:
            hue = (blue - red) / diff + 2
        else:
            hue = (red - green) / diff + 4
    hue *= 60.0
    if hue < 0:
        hue += 360.0
    # float modulo can land exactly on 360 for tiny negative inputs
    if hue >= 360.0:
        hue -= 360.0

    saturation = 0.0 if high == 0 else diff / high
    return HSV(h=hue, s=saturation * 100.0, v=high * 100.0)


def hsv_to_rgb(h: float, s: float, v: float) -> RGB:
    """Convert an HSV color to RGB using six-sector interpolation.

    Inputs are clamped to their valid ranges first, so the function is total.
    A saturation of zero yields a gray at brightness ``v``.

    Args:
        h: Hue in degrees (0-360).
        s: Saturation in percent (0-100).
        v: Value in percent (0-100).

    Returns:
        RGB with channels rounded half up.
    """
    hue = _clamp(h, 0.0, 360.0) / 360.0
    sat = _clamp(s, 0.0, 100.0) / 100.0
    val = _clamp(v, 0.0, 100.0) / 100.0

    if sat == 0:
        red = green = blue = val
    else:
        sector = int(math.floor(hue * 6))
        fraction = hue * 6 - sector
        p = val * (1 - sat)
        q = val * (1 - sat * fraction)
        t = val * (1 - sat * (1 - fraction))

        sector %= 6
        if sector == 0:
            red, green, blue = val, t, p
        elif sector == 1:
            red, green, blue = q, val, p
        elif sector == 2:
            red, green, blue = p, val, t
        elif sector == 3:
            red, green, blue = p, q, val
        elif sector == 4:
            red, green, blue = t, p, val
        else:
            red, green, blue = val, p, q

    return RGB(
        r=_round_half_up(red * 255),
        g=_round_half_up(green * 255),
        b=_round_half_up(blue * 255),
    )


def describe_color(hsv: HSV) -> str:
    """Build a short human-readable name such as "bright vivid Red".

    Args:
        hsv: Color to describe.

    Returns:
        Brightness word, saturation word and hue name separated by spaces.
    """
    hue_index = int(hsv.h // 36)
    hue_name = HUE_NAMES[hue_index] if 0 <= hue_index < len(HUE_NAMES) else "Red"

    if hsv.s > 80:
        saturation_desc = "vivid"
    elif hsv.s > 50:
        saturation_desc = "moderate"
    else:
        saturation_desc = "muted"

    if hsv.v > 80:
        brightness_desc = "bright"
    elif hsv.v > 50:
        brightness_desc = "medium"
    else:
        brightness_desc = "dark"

    return f"{brightness_desc} {saturation_desc} {hue_name}"


def rgb_to_hex(rgb: RGB) -> str:
    return f"#{rgb.r:02X}{rgb.g:02X}{rgb.b:02X}"
