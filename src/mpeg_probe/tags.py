"""ID3 tag access: ID3v2 text frames, ID3v1 footers and timestamps."""

from __future__ import annotations

import os
from typing import BinaryIO, Callable

from mutagen.id3 import ID3, ID3TimeStamp

from mpeg_probe.errors import TagReadError
from mpeg_probe.models import ID3v1Tag
from mpeg_probe.timestamp import Timestamp, TimeType, parse_id3v23_time, parse_id3v24_time

ID3V1_LENGTH = 128
_ID3V1_MAGIC = b"TAG"

# v2.4 frames:
#   TDRC (Recording time): when the audio was recorded
#   TDOR (Original release time): when the original recording was released
#   TDRL (Release time): when the audio was first released
_V24_TIME_FRAMES = {
    TimeType.RECORDING_TIME: "TDRC",
    TimeType.ORIGINAL_RELEASE_TIME: "TDOR",
    TimeType.RELEASE_TIME: "TDRL",
}

# v2.3 frames as (year, date, time): TYER holds YYYY, TDAT MMDD and TIME
# HHMM. TORY only has a year and v2.3 has no release time.
_V23_TIME_FRAMES = {
    TimeType.RECORDING_TIME: ("TYER", "TDAT", "TIME"),
    TimeType.ORIGINAL_RELEASE_TIME: ("TORY", None, None),
}


def get_id3v2_text_frame(tag: ID3, frame_id: str) -> str:
    """Return the first value of the first text frame with frame_id in tag.

    An empty string is returned if the frame isn't present.
    """
    if not isinstance(tag, ID3):
        raise TagReadError(
            "unsupported tag type {}".format(type(tag).__name__),
            details={"frame_id": frame_id},
        )
    frames = tag.getall(frame_id)
    if not frames:
        return ""
    text = getattr(frames[0], "text", None)
    if not text:
        return ""
    value = text[0]
    # mutagen renders timestamps with a space between the date and the hour.
    if isinstance(value, ID3TimeStamp):
        return value.text.replace(" ", "T")
    return str(value)


def _v24_time(get_frame: Callable[[str], str], typ: TimeType) -> Timestamp:
    value = get_frame(_V24_TIME_FRAMES[typ])
    if len(value) < 4:
        return Timestamp()
    return parse_id3v24_time(value)


def _v23_time(get_frame: Callable[[str], str], typ: TimeType) -> Timestamp:
    ids = _V23_TIME_FRAMES.get(typ)
    if ids is None:
        return Timestamp()
    values = [get_frame(frame_id) if frame_id else "" for frame_id in ids]
    return parse_id3v23_time(*values)


# Tried in order; newer tag versions first.
_TIME_STRATEGIES = (_v24_time, _v23_time)


def resolve_time(get_frame: Callable[[str], str], typ: TimeType) -> Timestamp:
    """Return the typ timestamp using get_frame to look up text frames.

    get_frame returns "" for missing frames. Errors it raises are propagated.
    An empty Timestamp is returned if no frame holds a usable value.
    """
    for strategy in _TIME_STRATEGIES:
        ts = strategy(get_frame, typ)
        if not ts.empty:
            return ts
    return Timestamp()


def get_id3v2_time(tag: ID3, typ: TimeType) -> Timestamp:
    """Return the requested timestamp from tag, preferring v2.4 frames."""
    return resolve_time(lambda frame_id: get_id3v2_text_frame(tag, frame_id), typ)


def _clean(data: bytes) -> str:
    return data.rstrip(b"\x00").decode("latin-1").strip()


def read_id3v1_footer(f: BinaryIO, file_size: int | None = None) -> ID3v1Tag | None:
    """Read an ID3v1 footer from the final 128 bytes of f.

    Returns None if the footer isn't present. See https://id3.org/ID3v1.
    """
    if file_size is None:
        file_size = os.fstat(f.fileno()).st_size
    if file_size < ID3V1_LENGTH:
        return None
    f.seek(file_size - ID3V1_LENGTH)
    buf = f.read(ID3V1_LENGTH)
    if len(buf) < ID3V1_LENGTH or not buf.startswith(_ID3V1_MAGIC):
        return None

    comment = bytearray(buf[97:127])
    track = 0
    # ID3v1.1: a zero byte followed by a non-zero byte at the end of the
    # comment holds the track number.
    if comment[-1] != 0 and comment[-2] == 0:
        track = comment[-1]
        comment[-1] = 0

    return ID3v1Tag(
        title=_clean(buf[3:33]),
        artist=_clean(buf[33:63]),
        album=_clean(buf[63:93]),
        year=_clean(buf[93:97]),
        comment=_clean(bytes(comment)),
        genre=buf[127],
        track=track,
    )
