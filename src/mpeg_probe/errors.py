"""
Exceptions raised while reading MPEG audio data and tags.

Timestamp parsing never raises; an unparseable value yields an empty Timestamp.
"""
from __future__ import annotations


class MPEGError(Exception):
    """Base exception for all mpeg_probe errors"""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class MalformedHeader(MPEGError):
    """
    Raised when four bytes don't form a usable frame header

    Frame scanning treats this as "try the next offset".
    """
    pass


class InvalidSync(MalformedHeader):
    pass


class UnsupportedVersion(MalformedHeader):
    pass


class InvalidBitrate(MalformedHeader):
    pass


class InvalidSampleRate(MalformedHeader):
    pass


class UnsupportedLayer(MPEGError):
    """
    Raised when a frame header describes a layer other than Layer III

    Scanning stops as soon as this is seen since a later offset won't help.
    """
    pass


class TruncatedData(MPEGError):
    """Raised when fewer bytes than required could be read"""
    pass


class NoFrameFound(MPEGError):
    """Raised when no valid frame header appears within the search window"""
    pass


class MissingFrameCount(MPEGError):
    """
    Raised when a Xing/Info header omits its frame count

    Distinct from "no VBR header", which is normal for CBR files.
    """
    pass


class TagReadError(MPEGError):
    """Raised when a tag's text frames can't be read"""
    pass
