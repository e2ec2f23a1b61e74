"""Image-to-sound instrument library.

This package turns a still image into a playable instrument. Every location in
the image maps deterministically to a pitch, timbre, loudness and envelope,
and pointer interaction triggers or sustains the matching sound.

The processing pipeline consists of:
1. Fitting the image into the canvas and averaging it into a grid of cells
2. Converting each cell's average color from RGB to HSV
3. Mapping HSV to audio parameters quantized to a musical scale
4. Playing those parameters through a bounded pool of voices
5. Translating pointer events into grid lookups and voice-pool commands

Example:
    Basic usage through the instrument facade:

    >>> from image_to_sound.instrument import Instrument
    >>>
    >>> instrument = Instrument()
    >>> instrument.load_image_bytes(open("photo.png", "rb").read())
    >>> instrument.toggle_playing()
    >>> instrument.pointer_press(120, 80)
"""
