"""Exception hierarchy for the image-to-sound instrument.

Most invalid input is clamped or ignored rather than raised, so the classes
here only cover the boundaries where a caller has to react: undecodable image
data and an audio output that cannot start.
"""


class InstrumentError(Exception):
    """Base exception for instrument errors."""

    pass


class ImageLoadError(InstrumentError):
    """Exception raised when image data cannot be decoded."""

    pass


class AudioBackendError(InstrumentError):
    """Exception raised when the audio output cannot be started."""

    pass
