"""
Errors raised while loading a capture file.

Every failure is fatal to the whole load; there are no partial results.
"""
from typing import Optional


class PcapError(Exception):
    """Base class for all capture loading errors."""
    stage = 'unknown'


class PcapAccessError(PcapError):
    """The capture path could not be opened or stat'ed."""
    stage = 'access'

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot access capture file {path}: {reason}")


class PcapFormatError(PcapError):
    """
    The byte stream does not hold a complete capture structure.

    offset is where the failing structure starts, expected/received are
    byte counts for the read that came up short.
    """

    def __init__(self, message: str, offset: int = 0,
                 expected: Optional[int] = None, received: Optional[int] = None):
        self.offset = offset
        self.expected = expected
        self.received = received
        super().__init__(message)


class PcapHeaderError(PcapFormatError):
    """Fewer than 24 bytes at the start of the stream."""
    stage = 'global_header'


class PcapTruncatedError(PcapFormatError):
    """A packet record header or its data was cut short."""

    def __init__(self, message: str, stage: str, offset: int = 0,
                 expected: Optional[int] = None, received: Optional[int] = None):
        self.stage = stage
        super().__init__(message, offset=offset, expected=expected, received=received)
