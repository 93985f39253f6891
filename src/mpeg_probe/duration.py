"""Audio duration estimation from the first frame and its VBR header."""

from __future__ import annotations

import logging
from typing import BinaryIO

from mpeg_probe.frame import MAX_FRAME_SEARCH_BYTES, find_first_frame
from mpeg_probe.models import FrameHeader, VBRInfo
from mpeg_probe.vbr import read_vbr_header

logger = logging.getLogger(__name__)


def cbr_duration_ms(audio_bytes: int, bitrate_kbps: int) -> int:
    """Duration of audio_bytes of constant-bitrate audio."""
    return audio_bytes * 8 // bitrate_kbps


def vbr_duration_ms(frames: int, header: FrameHeader) -> int:
    """Duration of frames frames shaped like header."""
    return header.samples_per_frame * frames * 1000 // header.sample_rate_hz


def compute_audio_duration(
    f: BinaryIO,
    file_size: int,
    header_len: int,
    footer_len: int,
    max_search: int = MAX_FRAME_SEARCH_BYTES,
) -> tuple[int, VBRInfo | None, FrameHeader]:
    """Return the audio duration in milliseconds along with the VBR info and first frame.

    header_len and footer_len are the sizes of the tags at the start and end
    of the file. If the first frame has no Xing/Info header the file is
    assumed to have a constant bitrate and the VBR info is None; the whole
    file is never scanned to count frames.
    """
    offset, header = find_first_frame(f, header_len, max_search)
    vbr = read_vbr_header(f, offset, header)
    if vbr is None:
        audio_bytes = max(file_size - offset - footer_len, 0)
        logger.debug(
            "No VBR header; assuming %d kbps over %d bytes", header.bitrate_kbps, audio_bytes
        )
        return cbr_duration_ms(audio_bytes, header.bitrate_kbps), None, header
    return vbr_duration_ms(vbr.frames, header), vbr, header
