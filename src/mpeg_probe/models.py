from __future__ import annotations

import enum
from dataclasses import dataclass, field

from mpeg_probe.timestamp import Timestamp


class MPEGVersion(enum.Enum):
    MPEG1 = "1"
    MPEG2 = "2"
    MPEG2_5 = "2.5"  # unofficial extension of MPEG2
    RESERVED = "reserved"


class Layer(enum.Enum):
    LAYER1 = 1
    LAYER2 = 2
    LAYER3 = 3
    RESERVED = 0


class ChannelMode(enum.IntEnum):
    STEREO = 0
    JOINT_STEREO = 1
    DUAL_CHANNEL = 2
    MONO = 3


class VBRHeaderID(str, enum.Enum):
    XING = "Xing"  # typically VBR or ABR
    INFO = "Info"  # typically CBR


class EncodingMethod(enum.IntEnum):
    """Encoding method stored in the low nibble of a LAME tag."""

    UNKNOWN = 0
    CBR = 1
    ABR = 2
    VBR1 = 3  # VBR old / VBR RH
    VBR2 = 4  # VBR MTRH
    VBR3 = 5  # VBR MT
    VBR4 = 6
    CBR_2PASS = 8
    ABR_2PASS = 9


_METHOD_NAMES = {
    EncodingMethod.UNKNOWN: "unknown",
    EncodingMethod.CBR: "CBR",
    EncodingMethod.ABR: "ABR",
    EncodingMethod.VBR1: "VBR1",
    EncodingMethod.VBR2: "VBR2",
    EncodingMethod.VBR3: "VBR3",
    EncodingMethod.VBR4: "VBR4",
    EncodingMethod.CBR_2PASS: "CBR 2-pass",
    EncodingMethod.ABR_2PASS: "ABR 2-pass",
}


def describe_method(raw: int) -> str:
    """Return a display name for a raw encoding method value.

    Values outside the known set render as "invalid (n)".
    """
    try:
        return _METHOD_NAMES[EncodingMethod(raw)]
    except ValueError:
        return "invalid ({})".format(raw)


@dataclass(frozen=True)
class FrameHeader:
    """A decoded MPEG audio Layer III frame header."""

    version: MPEGVersion
    bitrate_kbps: int  # multiples of 1000 bits, not 1024
    sample_rate_hz: int
    samples_per_frame: int
    channel_mode: ChannelMode
    has_crc: bool  # 16-bit CRC follows the header
    has_padding: bool

    @property
    def byte_size(self) -> int:
        """Frame length in bytes, including the header.

        Only approximate; callers re-check the header found at the next offset.
        """
        size = self.samples_per_frame // 8 * self.bitrate_kbps * 1000 // self.sample_rate_hz
        if self.has_padding:
            size += 1
        return size


@dataclass(frozen=True)
class VBRInfo:
    """Information from a Xing or Info header in the first frame."""

    header_id: VBRHeaderID
    frames: int
    bytes: int = 0
    quality: int = 0  # loosely defined, nominally [0, 100]
    encoder: str = ""  # e.g. "LAME3.99r"
    method: int = EncodingMethod.UNKNOWN

    @property
    def method_name(self) -> str:
        return describe_method(self.method)


@dataclass(frozen=True)
class ID3v1Tag:
    """Fields from a 128-byte ID3v1 footer."""

    title: str = ""
    artist: str = ""
    album: str = ""
    year: str = ""
    comment: str = ""
    genre: int = 0
    track: int = 0


@dataclass
class AudioFile:
    """Represents a probed MP3 file with its metadata."""

    path: str
    filename: str
    file_size: int
    header_len: int  # ID3v2 tag bytes at the start of the file
    footer_len: int  # ID3v1 tag bytes at the end of the file
    duration_ms: int
    bitrate: int  # of the first frame, in kbps
    sample_rate: int
    channel_mode: ChannelMode
    audio_sha1: str
    vbr: VBRInfo | None = None
    id3v1: ID3v1Tag | None = None
    recording_time: Timestamp = field(default_factory=Timestamp)
    original_release_time: Timestamp = field(default_factory=Timestamp)
    release_time: Timestamp = field(default_factory=Timestamp)


def format_duration(ms: int) -> str:
    """Format milliseconds as M:SS or H:MM:SS."""
    total_seconds = ms // 1000
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    if hours > 0:
        return "{}:{:02d}:{:02d}".format(hours, minutes, seconds)
    return "{}:{:02d}".format(minutes, seconds)
