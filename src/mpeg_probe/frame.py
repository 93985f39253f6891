"""MPEG audio Layer III frame header decoding and scanning.

Header layout: http://www.codeproject.com/Articles/8295/MPEG-Audio-Frame-Header
"""

from __future__ import annotations

import logging
import struct
from typing import BinaryIO

from mpeg_probe.errors import (
    InvalidBitrate,
    InvalidSampleRate,
    InvalidSync,
    MalformedHeader,
    NoFrameFound,
    TruncatedData,
    UnsupportedLayer,
    UnsupportedVersion,
)
from mpeg_probe.models import ChannelMode, FrameHeader, Layer, MPEGVersion

logger = logging.getLogger(__name__)

HEADER_LEN = 4

# Some files have junk between the end of the ID3v2 tag and the first frame.
MAX_FRAME_SEARCH_BYTES = 8192

# Indexed by the 2-bit version and layer fields.
_VERSIONS = (MPEGVersion.MPEG2_5, MPEGVersion.RESERVED, MPEGVersion.MPEG2, MPEGVersion.MPEG1)
_LAYERS = (Layer.RESERVED, Layer.LAYER3, Layer.LAYER2, Layer.LAYER1)

# The tables below are specific to Layer III.
_SAMPLES_PER_FRAME = {
    MPEGVersion.MPEG1: 1152,
    MPEGVersion.MPEG2: 576,
    MPEGVersion.MPEG2_5: 576,
}

_MPEG2_KBPS = (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160, 0)
_KBIT_RATES = {
    MPEGVersion.MPEG1: (0, 32, 40, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320, 0),
    MPEGVersion.MPEG2: _MPEG2_KBPS,
    MPEGVersion.MPEG2_5: _MPEG2_KBPS,
}

_SAMPLE_RATES = {
    MPEGVersion.MPEG1: (44100, 48000, 32000, 0),
    MPEGVersion.MPEG2: (22050, 24000, 16000, 0),
    MPEGVersion.MPEG2_5: (11025, 12000, 8000, 0),
}


def decode_frame_header(data: bytes) -> FrameHeader:
    """Decode the first four bytes of data as a Layer III frame header."""
    if len(data) < HEADER_LEN:
        raise TruncatedData(
            "frame header needs {} bytes, got {}".format(HEADER_LEN, len(data))
        )
    (header,) = struct.unpack(">I", data[:HEADER_LEN])

    def bits(start: int, count: int) -> int:
        return (header >> (32 - start - count)) & ((1 << count) - 1)

    if bits(0, 11) != 0x7FF:
        raise InvalidSync("no 0x7ff sync")
    version = _VERSIONS[bits(11, 2)]
    if version is MPEGVersion.RESERVED:
        raise UnsupportedVersion("invalid MPEG version")
    layer = _LAYERS[bits(13, 2)]
    if layer is not Layer.LAYER3:
        raise UnsupportedLayer(
            "unsupported layer", details={"layer": layer.name}
        )

    bitrate = _KBIT_RATES[version][bits(16, 4)]
    if bitrate == 0:
        raise InvalidBitrate("invalid bitrate", details={"index": bits(16, 4)})
    sample_rate = _SAMPLE_RATES[version][bits(20, 2)]
    if sample_rate == 0:
        raise InvalidSampleRate("invalid sampling rate", details={"index": bits(20, 2)})

    return FrameHeader(
        version=version,
        bitrate_kbps=bitrate,
        sample_rate_hz=sample_rate,
        samples_per_frame=_SAMPLES_PER_FRAME[version],
        channel_mode=ChannelMode(bits(24, 2)),
        has_crc=bits(15, 1) == 0,
        has_padding=bits(22, 1) == 1,
    )


def read_frame_header(f: BinaryIO, offset: int) -> FrameHeader:
    """Read and decode the frame header at offset in f."""
    f.seek(offset)
    return decode_frame_header(f.read(HEADER_LEN))


def find_first_frame(
    f: BinaryIO,
    start: int,
    max_search: int = MAX_FRAME_SEARCH_BYTES,
) -> tuple[int, FrameHeader]:
    """Scan forward from start for the first decodable frame header.

    Returns the header's offset and the header. Malformed headers move the
    scan on by one byte; an unsupported layer stops it immediately.
    """
    f.seek(start)
    # One read covers every candidate offset in the window.
    window = f.read(max_search + HEADER_LEN - 1)
    for i in range(min(max_search, len(window))):
        try:
            header = decode_frame_header(window[i:i + HEADER_LEN])
        except (MalformedHeader, TruncatedData):
            continue
        if i:
            logger.debug("Skipped %d bytes before first frame at %#x", i, start + i)
        return start + i, header
    raise NoFrameFound(
        "didn't find header after {:#x}".format(start),
        details={"start": start, "max_search": max_search},
    )

