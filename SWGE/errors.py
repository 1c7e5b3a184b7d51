from __future__ import annotations


class WaveSynthError(Exception):
    """Base error for the SWGE package."""


class ConfigurationError(WaveSynthError, ValueError):
    """Raised when synthesis or container parameters are out of range."""


class RingSizeError(ConfigurationError):
    """Raised when a frequency leaves fewer than two cells in the string ring."""


class ChannelLengthError(WaveSynthError, ValueError):
    """Raised when channel sequences cannot be interleaved."""


class BufferTooSmallError(WaveSynthError, ValueError):
    """Raised when a fill() destination cannot hold the record's minimum chunk."""


class WavFormatError(WaveSynthError, ValueError):
    """Raised when bytes do not follow the RIFF/WAVE layout this package writes."""
