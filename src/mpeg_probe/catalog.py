"""Directory scanning and YAML catalog generation."""

from __future__ import annotations

import os

import click
import yaml
from natsort import natsorted

from mpeg_probe.frame import MAX_FRAME_SEARCH_BYTES
from mpeg_probe.models import AudioFile, format_duration
from mpeg_probe.probe import probe_files


def discover_mp3s(input_path: str) -> list[str]:
    """Return the MP3 files directly inside input_path in natural filename order.

    Subdirectories aren't descended into.
    """
    try:
        with os.scandir(input_path) as it:
            entries = [e for e in it if e.is_file()]
    except NotADirectoryError:
        raise click.ClickException("cannot scan {}: not a directory".format(input_path))

    mp3s = natsorted(
        (e.path for e in entries if e.name.lower().endswith(".mp3")),
        key=os.path.basename,
    )
    if not mp3s:
        raise click.ClickException("nothing to catalog: no .mp3 files in {}".format(input_path))
    return mp3s


def audio_file_entry(af: AudioFile) -> dict:
    """Convert an AudioFile into a plain dict for the catalog."""
    entry = {
        "file": af.filename,
        "duration": format_duration(af.duration_ms),
        "duration_ms": af.duration_ms,
        "bitrate": af.bitrate,
        "sample_rate": af.sample_rate,
        "channel_mode": af.channel_mode.name.lower(),
        "audio_sha1": af.audio_sha1,
    }
    if af.vbr is not None:
        entry["vbr"] = {
            "header": af.vbr.header_id.value,
            "frames": af.vbr.frames,
            "bytes": af.vbr.bytes,
            "quality": af.vbr.quality,
            "encoder": af.vbr.encoder,
            "method": af.vbr.method_name,
        }
    # Timestamps keep their original precision as strings.
    for key in ("recording_time", "original_release_time", "release_time"):
        ts = getattr(af, key)
        if not ts.empty:
            entry[key] = str(ts)
    if af.id3v1 is not None:
        entry["id3v1"] = {
            "title": af.id3v1.title,
            "artist": af.id3v1.artist,
            "album": af.id3v1.album,
            "year": af.id3v1.year,
        }
    return entry


def build_catalog(
    input_path: str,
    max_search: int = MAX_FRAME_SEARCH_BYTES,
) -> dict:
    """Probe every MP3 in input_path and return the catalog as a dict.

    Files that can't be probed are listed with an "error" key.
    """
    paths = discover_mp3s(input_path)
    results = probe_files(paths, max_search=max_search, return_errors=True)

    files = []
    for path, result in zip(paths, results):
        if isinstance(result, Exception):
            files.append({"file": os.path.basename(path), "error": str(result)})
        else:
            files.append(audio_file_entry(result))
    return {"directory": os.path.abspath(input_path), "files": files}


def generate_catalog_yaml(catalog: dict) -> str:
    """Serialize a catalog dict to YAML, preserving key order."""
    return yaml.safe_dump(catalog, sort_keys=False, allow_unicode=True)


def load_catalog(path: str) -> dict:
    """Load a YAML catalog written by generate_catalog_yaml."""
    with open(path) as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise click.ClickException("{} is not a valid catalog".format(path))
    data.setdefault("files", [])
    return data
