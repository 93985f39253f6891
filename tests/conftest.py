"""Shared test fixtures."""

from __future__ import annotations

import os
import struct
import tempfile

import pytest
from mutagen.id3 import ID3, Frames


@pytest.fixture
def tmp_dir():
    """Create a temporary directory that's cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


def _header_bytes(
    version: int = 0b11,
    layer: int = 0b01,
    crc: bool = False,
    bitrate_index: int = 9,
    sample_rate_index: int = 0,
    padding: bool = False,
    channel_mode: int = 0,
) -> bytes:
    b1 = 0xE0 | (version << 3) | (layer << 1) | (0 if crc else 1)
    b2 = (bitrate_index << 4) | (sample_rate_index << 2) | (int(padding) << 1)
    return bytes([0xFF, b1, b2, channel_mode << 6])


def _xing_bytes(
    header_id: bytes = b"Xing",
    frames: int | None = 1000,
    num_bytes: int | None = None,
    toc: bool = False,
    quality: int | None = None,
    encoder: bytes | None = b"LAME3.99r",
    info_byte: int = 0x03,
) -> bytes:
    flags = 0
    body = b""
    if frames is not None:
        flags |= 0x1
        body += struct.pack(">I", frames)
    if num_bytes is not None:
        flags |= 0x2
        body += struct.pack(">I", num_bytes)
    if toc:
        flags |= 0x4
        body += bytes(range(100))
    if quality is not None:
        flags |= 0x8
        body += struct.pack(">I", quality)
    if encoder is not None:
        body += encoder.ljust(9)[:9] + bytes([info_byte])
    return header_id + struct.pack(">I", flags) + body


def _audio_bytes(
    num_frames: int = 10,
    frame_size: int = 417,  # MPEG1 Layer III, 128 kbps, 44.1 kHz, unpadded
    vbr: bytes = b"",
    junk: bytes = b"",
    crc: bool = False,
    channel_mode: int = 0,
    **header_kw,
) -> bytes:
    header = _header_bytes(crc=crc, channel_mode=channel_mode, **header_kw)
    side_info = bytes(17 if channel_mode == 3 else 32)
    first = header + (b"\x00\x00" if crc else b"") + side_info + vbr
    first = first.ljust(frame_size, b"\x00")
    rest = (header + bytes(frame_size - len(header))) * (num_frames - 1)
    return junk + first + rest


def _id3v1_bytes(
    title: str = "Title",
    artist: str = "Artist",
    album: str = "Album",
    year: str = "1999",
    comment: str = "Comment",
    track: int = 5,
    genre: int = 17,
) -> bytes:
    def field(s: str, n: int) -> bytes:
        return s.encode("latin-1").ljust(n, b"\x00")[:n]

    return (
        b"TAG" + field(title, 30) + field(artist, 30) + field(album, 30)
        + field(year, 4) + field(comment, 28) + b"\x00" + bytes([track, genre])
    )


@pytest.fixture
def frame_header():
    """Factory for raw 4-byte frame headers (MPEG1 Layer III, 128 kbps, 44.1 kHz by default)."""
    return _header_bytes


@pytest.fixture
def xing_header():
    """Factory for Xing/Info header blocks."""
    return _xing_bytes


@pytest.fixture
def audio_bytes():
    """Factory for a run of synthetic Layer III frames."""
    return _audio_bytes


@pytest.fixture
def id3v1_footer():
    """Factory for 128-byte ID3v1.1 footers."""
    return _id3v1_bytes


@pytest.fixture
def make_mp3(tmp_dir):
    """Factory fixture that writes synthetic MP3 files for testing.

    tags maps ID3v2.4 text frame IDs to values and is saved through mutagen.
    """

    def _make(
        filename: str,
        tags: dict[str, str] | None = None,
        id3v1: bool = False,
        **audio_kw,
    ) -> str:
        path = os.path.join(tmp_dir, filename)
        with open(path, "wb") as f:
            f.write(_audio_bytes(**audio_kw))
        if tags:
            id3 = ID3()
            for frame_id, text in tags.items():
                id3.add(Frames[frame_id](encoding=3, text=[text]))
            id3.save(path)
        # Appended after mutagen has saved so it doesn't rewrite the footer.
        if id3v1:
            with open(path, "ab") as f:
                f.write(_id3v1_bytes())
        return path

    return _make


@pytest.fixture
def sample_mp3s(make_mp3, xing_header, tmp_dir):
    """Create a set of 3 short MP3 files for integration tests."""
    make_mp3("01_intro.mp3", num_frames=10, tags={"TIT2": "Introduction", "TDRC": "2022-04-25"})
    make_mp3("2_chapter.mp3", num_frames=20, vbr=xing_header(frames=20))
    make_mp3("10_outro.mp3", num_frames=5, id3v1=True)
    return tmp_dir
