"""File-level MP3 probing: tags, duration and audio hash."""

from __future__ import annotations

import hashlib
import logging
import os
from typing import BinaryIO

from mutagen import MutagenError
from mutagen.id3 import ID3, ID3NoHeaderError

from mpeg_probe.duration import compute_audio_duration
from mpeg_probe.errors import MPEGError, TagReadError, TruncatedData
from mpeg_probe.frame import MAX_FRAME_SEARCH_BYTES
from mpeg_probe.models import AudioFile
from mpeg_probe.tags import ID3V1_LENGTH, get_id3v2_time, read_id3v1_footer
from mpeg_probe.timestamp import Timestamp, TimeType

logger = logging.getLogger(__name__)

_HASH_CHUNK = 64 * 1024


def read_id3v2_tag(filepath: str) -> ID3 | None:
    """Load the ID3v2 tag at the start of filepath, or None if there isn't one.

    Frames are kept as stored so that v2.3 date frames aren't merged into
    their v2.4 equivalents.
    """
    try:
        return ID3(filepath, translate=False, load_v1=False)
    except ID3NoHeaderError:
        return None
    except MutagenError as e:
        raise TagReadError(
            "failed reading ID3v2 tag: {}".format(e), details={"path": filepath}
        ) from e


def compute_audio_sha1(f: BinaryIO, file_size: int, header_len: int, footer_len: int) -> str:
    """Return a hex SHA-1 of the audio (i.e. non-tag) portion of f."""
    remaining = file_size - header_len - footer_len
    f.seek(header_len)
    hasher = hashlib.sha1()
    while remaining > 0:
        chunk = f.read(min(_HASH_CHUNK, remaining))
        if not chunk:
            raise TruncatedData(
                "file ended {} bytes before audio end".format(remaining),
                details={"file_size": file_size},
            )
        hasher.update(chunk)
        remaining -= len(chunk)
    return hasher.hexdigest()


def probe_file(filepath: str, max_search: int = MAX_FRAME_SEARCH_BYTES) -> AudioFile:
    """Probe a single MP3 file and return an AudioFile."""
    tag = read_id3v2_tag(filepath)
    header_len = tag.size if tag is not None else 0

    times = {}
    for typ in TimeType:
        times[typ] = get_id3v2_time(tag, typ) if tag is not None else Timestamp()

    file_size = os.path.getsize(filepath)
    with open(filepath, "rb") as f:
        id3v1 = read_id3v1_footer(f, file_size)
        footer_len = ID3V1_LENGTH if id3v1 is not None else 0
        duration_ms, vbr, header = compute_audio_duration(
            f, file_size, header_len, footer_len, max_search
        )
        sha1 = compute_audio_sha1(f, file_size, header_len, footer_len)

    logger.debug(
        "Probed %s: %d ms, %d kbps, %s", filepath, duration_ms, header.bitrate_kbps,
        vbr.header_id.value if vbr else "no VBR header",
    )
    return AudioFile(
        path=os.path.abspath(filepath),
        filename=os.path.basename(filepath),
        file_size=file_size,
        header_len=header_len,
        footer_len=footer_len,
        duration_ms=duration_ms,
        bitrate=header.bitrate_kbps,
        sample_rate=header.sample_rate_hz,
        channel_mode=header.channel_mode,
        audio_sha1=sha1,
        vbr=vbr,
        id3v1=id3v1,
        recording_time=times[TimeType.RECORDING_TIME],
        original_release_time=times[TimeType.ORIGINAL_RELEASE_TIME],
        release_time=times[TimeType.RELEASE_TIME],
    )


def _probe_or_error(filepath: str, max_search: int) -> AudioFile | Exception:
    try:
        return probe_file(filepath, max_search)
    except (MPEGError, OSError) as e:
        logger.warning("Failed to probe %s: %s", filepath, e)
        return e


def probe_files(
    filepaths: list[str],
    max_workers: int | None = None,
    max_search: int = MAX_FRAME_SEARCH_BYTES,
    return_errors: bool = False,
) -> list:
    """Probe multiple files in parallel and return a list of AudioFiles.

    Preserves input ordering. If return_errors is set, a file that can't be
    probed contributes its exception to the list instead of aborting the batch.
    """
    from concurrent.futures import ThreadPoolExecutor

    if not filepaths:
        return []
    if max_workers is None:
        max_workers = min(8, len(filepaths))

    fn = _probe_or_error if return_errors else probe_file
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        results = list(pool.map(lambda p: fn(p, max_search), filepaths))
    return results
