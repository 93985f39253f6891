"""Tests for frame header decoding and scanning."""

import io

import pytest

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
from mpeg_probe.frame import decode_frame_header, find_first_frame, read_frame_header
from mpeg_probe.models import ChannelMode, MPEGVersion


def test_decode_mpeg1_layer3(frame_header):
    header = decode_frame_header(frame_header())
    assert header.version is MPEGVersion.MPEG1
    assert header.bitrate_kbps == 128
    assert header.sample_rate_hz == 44100
    assert header.samples_per_frame == 1152
    assert header.channel_mode is ChannelMode.STEREO
    assert not header.has_crc
    assert not header.has_padding


def test_decode_known_bytes():
    header = decode_frame_header(b"\xff\xfb\x90\x64")
    assert header.bitrate_kbps == 128
    assert header.sample_rate_hz == 44100
    assert header.channel_mode is ChannelMode.JOINT_STEREO


@pytest.mark.parametrize(
    "version, bitrate_index, sample_rate_index, want_version, want_kbps, want_hz, want_samples",
    [
        (0b11, 1, 0, MPEGVersion.MPEG1, 32, 44100, 1152),
        (0b11, 14, 1, MPEGVersion.MPEG1, 320, 48000, 1152),
        (0b11, 5, 2, MPEGVersion.MPEG1, 64, 32000, 1152),
        (0b10, 1, 0, MPEGVersion.MPEG2, 8, 22050, 576),
        (0b10, 13, 1, MPEGVersion.MPEG2, 144, 24000, 576),
        (0b10, 14, 2, MPEGVersion.MPEG2, 160, 16000, 576),
        (0b00, 8, 0, MPEGVersion.MPEG2_5, 64, 11025, 576),
        (0b00, 12, 1, MPEGVersion.MPEG2_5, 128, 12000, 576),
        (0b00, 2, 2, MPEGVersion.MPEG2_5, 16, 8000, 576),
    ],
)
def test_decode_tables(
    frame_header, version, bitrate_index, sample_rate_index,
    want_version, want_kbps, want_hz, want_samples,
):
    header = decode_frame_header(
        frame_header(version=version, bitrate_index=bitrate_index, sample_rate_index=sample_rate_index)
    )
    assert header.version is want_version
    assert header.bitrate_kbps == want_kbps
    assert header.sample_rate_hz == want_hz
    assert header.samples_per_frame == want_samples


def test_decode_distinct_headers_give_distinct_values(frame_header):
    seen = set()
    for bitrate_index in range(1, 15):
        for sample_rate_index in range(3):
            h = decode_frame_header(
                frame_header(bitrate_index=bitrate_index, sample_rate_index=sample_rate_index)
            )
            seen.add((h.bitrate_kbps, h.sample_rate_hz))
    assert len(seen) == 14 * 3


def test_decode_flags(frame_header):
    header = decode_frame_header(frame_header(crc=True, padding=True, channel_mode=3))
    assert header.has_crc
    assert header.has_padding
    assert header.channel_mode is ChannelMode.MONO


def test_decode_errors(frame_header):
    with pytest.raises(InvalidSync):
        decode_frame_header(b"\x00\x00\x00\x00")
    with pytest.raises(InvalidSync):
        decode_frame_header(b"\xff\x1b\x90\x00")
    with pytest.raises(UnsupportedVersion):
        decode_frame_header(frame_header(version=0b01))
    with pytest.raises(UnsupportedLayer):
        decode_frame_header(frame_header(layer=0b10))  # Layer II
    with pytest.raises(UnsupportedLayer):
        decode_frame_header(frame_header(layer=0b00))
    with pytest.raises(InvalidBitrate):
        decode_frame_header(frame_header(bitrate_index=0))
    with pytest.raises(InvalidBitrate):
        decode_frame_header(frame_header(bitrate_index=15))
    with pytest.raises(InvalidSampleRate):
        decode_frame_header(frame_header(sample_rate_index=3))
    with pytest.raises(TruncatedData):
        decode_frame_header(b"\xff\xfb")


def test_unsupported_layer_is_not_malformed(frame_header):
    with pytest.raises(UnsupportedLayer) as excinfo:
        decode_frame_header(frame_header(layer=0b11))
    assert not isinstance(excinfo.value, MalformedHeader)
    assert excinfo.value.details == {"layer": "LAYER1"}


def test_byte_size(frame_header):
    assert decode_frame_header(frame_header()).byte_size == 417
    assert decode_frame_header(frame_header(padding=True)).byte_size == 418
    # MPEG1, 320 kbps, 48 kHz
    assert decode_frame_header(frame_header(bitrate_index=14, sample_rate_index=1)).byte_size == 960
    # MPEG2, 64 kbps, 22.05 kHz
    h = decode_frame_header(frame_header(version=0b10, bitrate_index=8))
    assert h.byte_size == 72 * 64000 // 22050


def test_read_frame_header_at_offset(frame_header):
    f = io.BytesIO(b"\x00" * 10 + frame_header(bitrate_index=11))
    assert read_frame_header(f, 10).bitrate_kbps == 192
    with pytest.raises(InvalidSync):
        read_frame_header(f, 0)


def test_find_first_frame_skips_junk(frame_header):
    f = io.BytesIO(b"junk" * 25 + frame_header())
    offset, header = find_first_frame(f, 0)
    assert offset == 100
    assert header.bitrate_kbps == 128


def test_find_first_frame_skips_bad_sync_candidates(frame_header):
    # 0xff bytes that never start a sync, then a reserved bitrate.
    data = b"\xff\x00\xff\x00" + frame_header(bitrate_index=15) + frame_header()
    offset, header = find_first_frame(io.BytesIO(data), 0)
    assert offset == 8
    assert header.bitrate_kbps == 128


def test_find_first_frame_starts_at_offset(frame_header):
    data = frame_header(bitrate_index=1) + b"\x00" * 6 + frame_header()
    offset, header = find_first_frame(io.BytesIO(data), 4)
    assert offset == 10
    assert header.bitrate_kbps == 128


def test_find_first_frame_stops_on_unsupported_layer(frame_header):
    data = b"\x00" * 5 + frame_header(layer=0b10) + frame_header()
    with pytest.raises(UnsupportedLayer):
        find_first_frame(io.BytesIO(data), 0)


def test_find_first_frame_gives_up(frame_header):
    with pytest.raises(NoFrameFound):
        find_first_frame(io.BytesIO(b"\x00" * 9000 + frame_header()), 0)
    with pytest.raises(NoFrameFound):
        find_first_frame(io.BytesIO(b"\x00" * 20 + frame_header()), 0, max_search=20)
    with pytest.raises(NoFrameFound):
        find_first_frame(io.BytesIO(b""), 0)


def test_find_first_frame_window_is_inclusive_of_last_offset(frame_header):
    offset, _ = find_first_frame(io.BytesIO(b"\x00" * 19 + frame_header()), 0, max_search=20)
    assert offset == 19


@pytest.mark.parametrize("junk_len", [0, 1, 2, 3, 31, 417])
def test_find_first_frame_returns_synced_offset(audio_bytes, junk_len):
    data = audio_bytes(num_frames=3, junk=bytes([0xFF, 0x00]) * (junk_len // 2) + b"\x00" * (junk_len % 2))
    offset, _ = find_first_frame(io.BytesIO(data), 0)
    word = int.from_bytes(data[offset:offset + 4], "big")
    assert word >> 21 == 0x7FF
    assert offset == junk_len
