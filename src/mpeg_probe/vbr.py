"""Xing/Info VBR header parsing.

See https://www.codeproject.com/Articles/8295/MPEG-Audio-Frame-Header#XINGHeader
and, for the LAME extension, http://gabriel.mp3-tech.org/mp3infotag.html.
"""

from __future__ import annotations

import logging
import struct
from typing import BinaryIO

from mpeg_probe.errors import MissingFrameCount, TruncatedData
from mpeg_probe.frame import HEADER_LEN
from mpeg_probe.models import ChannelMode, EncodingMethod, FrameHeader, VBRHeaderID, VBRInfo

logger = logging.getLogger(__name__)

FRAMES_FLAG = 0x1
BYTES_FLAG = 0x2
TOC_FLAG = 0x4
QUALITY_FLAG = 0x8

TOC_LEN = 100
LAME_ENCODER_LEN = 9


def vbr_header_offset(frame_offset: int, header: FrameHeader) -> int:
    """Return where a Xing/Info header would start within the frame at frame_offset.

    It follows the side information, whose length depends on the channel mode.
    """
    offset = frame_offset + HEADER_LEN
    offset += 17 if header.channel_mode == ChannelMode.MONO else 32
    if header.has_crc:
        offset += 2
    return offset


def _read_exact(f: BinaryIO, n: int, what: str) -> bytes:
    data = f.read(n)
    if len(data) < n:
        raise TruncatedData("short read of {}".format(what), details={"wanted": n, "got": len(data)})
    return data


def _read_u32(f: BinaryIO, what: str) -> int:
    return struct.unpack(">I", _read_exact(f, 4, what))[0]


def _is_encoder_string(data: bytes) -> bool:
    """Return True if data contains only printable ASCII."""
    return all(0x20 <= b <= 0x7E for b in data)


def read_vbr_header(f: BinaryIO, frame_offset: int, header: FrameHeader) -> VBRInfo | None:
    """Read the Xing or Info header from the first frame, if there is one.

    Returns None when the frame has no such header, in which case the stream
    should be treated as constant-bitrate. Raises MissingFrameCount if the
    header is present but doesn't record the number of frames.
    """
    start = vbr_header_offset(frame_offset, header)
    f.seek(start)
    magic = f.read(4)
    try:
        header_id = VBRHeaderID(magic.decode("ascii"))
    except (UnicodeDecodeError, ValueError):
        return None
    logger.debug("Found %s header at %#x", header_id.value, start)

    flags = _read_u32(f, "VBR flags")
    # Optional per the format, but it's the only way to get the duration.
    if not flags & FRAMES_FLAG:
        raise MissingFrameCount(
            "{} header lacks number of frames".format(header_id.value),
            details={"offset": start, "flags": flags},
        )
    frames = _read_u32(f, "frame count")

    num_bytes = 0
    if flags & BYTES_FLAG:
        num_bytes = _read_u32(f, "byte count")

    if flags & TOC_FLAG:
        _read_exact(f, TOC_LEN, "TOC")

    quality = 0
    if flags & QUALITY_FLAG:
        quality = _read_u32(f, "quality")

    encoder, method = _read_lame_record(f)
    return VBRInfo(
        header_id=header_id,
        frames=frames,
        bytes=num_bytes,
        quality=quality,
        encoder=encoder,
        method=method,
    )


def _read_lame_record(f: BinaryIO) -> tuple[str, int]:
    """Read the encoder string and method from the start of a LAME tag.

    Returns ("", EncodingMethod.UNKNOWN) if the bytes don't look like one.
    """
    data = f.read(LAME_ENCODER_LEN + 1)
    if len(data) < LAME_ENCODER_LEN + 1:
        return "", EncodingMethod.UNKNOWN
    enc, info = data[:LAME_ENCODER_LEN], data[LAME_ENCODER_LEN]
    revision = (info & 0xF0) >> 4
    if revision not in (0, 1) or not _is_encoder_string(enc):
        logger.debug("Ignoring unrecognized encoder record %r", data)
        return "", EncodingMethod.UNKNOWN

    raw_method = info & 0x0F
    try:
        method = EncodingMethod(raw_method)
    except ValueError:
        method = raw_method
    return enc.decode("ascii").strip(), method
