"""Click CLI entry point for the MP3 probe."""

from __future__ import annotations

import logging
import os

import click

from mpeg_probe.catalog import build_catalog, generate_catalog_yaml
from mpeg_probe.errors import MPEGError
from mpeg_probe.frame import MAX_FRAME_SEARCH_BYTES
from mpeg_probe.models import AudioFile, format_duration
from mpeg_probe.probe import probe_file


@click.group()
@click.version_option(package_name="mpeg-probe")
@click.option("--verbose", is_flag=True, help="Log debugging details")
def cli(verbose: bool):
    """Inspect MPEG audio frames, VBR headers and ID3 timestamps in MP3 files."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--max-search",
    default=MAX_FRAME_SEARCH_BYTES,
    show_default=True,
    type=click.IntRange(min=1),
    help="Bytes to scan for the first frame header",
)
def info(files: tuple[str, ...], max_search: int):
    """Print frame, VBR and timestamp details for each of FILES."""
    for i, path in enumerate(files):
        try:
            af = probe_file(path, max_search=max_search)
        except MPEGError as e:
            raise click.ClickException("{}: {}".format(path, e.message))
        if i:
            click.echo("")
        _print_audio_file(af)


def _print_audio_file(af: AudioFile) -> None:
    click.echo(af.filename)
    click.echo("  Duration:     {} ({} ms)".format(format_duration(af.duration_ms), af.duration_ms))
    click.echo("  Bitrate:      {} kbps".format(af.bitrate))
    click.echo("  Sample rate:  {} Hz".format(af.sample_rate))
    click.echo("  Channels:     {}".format(af.channel_mode.name.lower()))
    click.echo("  Tags:         {} header bytes, {} footer bytes".format(af.header_len, af.footer_len))
    click.echo("  Audio SHA-1:  {}".format(af.audio_sha1))
    if af.vbr:
        click.echo(
            "  {} header: {} frames, {} bytes, quality {}".format(
                af.vbr.header_id.value, af.vbr.frames, af.vbr.bytes, af.vbr.quality
            )
        )
        if af.vbr.encoder:
            click.echo("  Encoder:      {} ({})".format(af.vbr.encoder, af.vbr.method_name))
    for label, ts in (
        ("Recorded", af.recording_time),
        ("Orig. release", af.original_release_time),
        ("Released", af.release_time),
    ):
        if not ts.empty:
            click.echo("  {:<13} {}".format(label + ":", ts))


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, file_okay=False))
@click.option(
    "-o", "--output",
    default=None,
    help="Output catalog path (default: INPUT_PATH/catalog.yml)",
)
@click.option(
    "--max-search",
    default=MAX_FRAME_SEARCH_BYTES,
    show_default=True,
    type=click.IntRange(min=1),
    help="Bytes to scan for the first frame header",
)
def scan(input_path: str, output: str | None, max_search: int):
    """Probe every MP3 in INPUT_PATH and write a YAML catalog."""
    input_path = os.path.abspath(input_path)
    catalog = build_catalog(input_path, max_search=max_search)

    failed = [e for e in catalog["files"] if "error" in e]
    click.echo("Probed {} MP3 files".format(len(catalog["files"])))
    for entry in failed:
        click.echo("  {}: {}".format(entry["file"], entry["error"]), err=True)

    output_path = output or os.path.join(input_path, "catalog.yml")
    with open(output_path, "w") as f:
        f.write(generate_catalog_yaml(catalog))

    click.echo("Wrote {}".format(output_path))
