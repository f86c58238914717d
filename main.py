#!/usr/bin/env python3
"""Main CLI entry point for Local Files."""

import click
import json
import sys
from tqdm import tqdm

from local_files import Config, LocalFiles
from local_files.metadata.models import TrackRecord
from local_files.utils.errors import LocalFilesError
from local_files.utils.file_utils import format_file_size
from local_files.utils.logger import setup_logger_from_config
from local_files.utils.uri import ROOT_URI


@click.group()
@click.option('--config', type=click.Path(exists=True), help='Path to configuration file')
@click.option('--log-level', default=None, help='Logging level (DEBUG, INFO, WARNING, ERROR)')
@click.pass_context
def cli(ctx, config, log_level):
    """Local Files - find and inspect playable media on this machine."""
    ctx.ensure_object(dict)

    # Load configuration
    try:
        ctx.obj['config'] = Config(config_path=config)
    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    ctx.obj['logger'] = setup_logger_from_config(ctx.obj['config'], level=log_level)
    ctx.obj['source'] = LocalFiles(ctx.obj['config'], ctx.obj['logger'])


@cli.command()
@click.argument('directories', nargs=-1, type=click.Path(exists=True, file_okay=False))
@click.option('--include-video', is_flag=True, help='Include video files that have an audio track')
@click.pass_context
def scan(ctx, directories, include_video):
    """Scan directories (default: library.paths) for playable files."""
    config = ctx.obj['config']
    source = ctx.obj['source']

    if directories:
        uri_list = source.scanner.scan(directories, include_video or config.include_video())
    else:
        uri_list = source.get_uri_list()
        if isinstance(uri_list, list):
            click.echo("No directories given and no library.paths configured.")
            return

    progress = tqdm(desc="Playable files", unit="file", ncols=100)
    unsubscribe = uri_list.subscribe(lambda uri: progress.update(1))
    uri_list.wait()
    unsubscribe()
    progress.close()

    for uri in uri_list:
        click.echo(uri)
    click.echo(f"\nFound {len(uri_list)} playable files")


def _load_details(source, uri):
    """Existence check followed by the detail lookup, exiting on failure."""
    try:
        if uri != ROOT_URI and not source.can_play_uri(uri):
            click.echo(f"Error: not a local file uri: {uri}", err=True)
            sys.exit(1)
        return source.get_uri_details(uri)
    except LocalFilesError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument('uri')
@click.pass_context
def details(ctx, uri):
    """Show metadata for a file: uri (or absolute path)."""
    entry = _load_details(ctx.obj['source'], uri)

    click.echo(json.dumps(entry.to_dict(), indent=2, ensure_ascii=False))
    if isinstance(entry, TrackRecord) and entry.size is not None:
        click.echo(f"\nSize: {format_file_size(entry.size)}")


@cli.command()
@click.argument('uri')
@click.pass_context
def stream(ctx, uri):
    """Print the path the playback pipeline should open for a uri."""
    source = ctx.obj['source']
    entry = _load_details(source, uri)

    if not isinstance(entry, TrackRecord):
        click.echo(f"Error: {uri} is a folder, not a track", err=True)
        sys.exit(1)

    try:
        click.echo(source.get_stream(entry))
    except LocalFilesError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.pass_context
def info(ctx):
    """Display configuration information."""
    config = ctx.obj['config']
    source = ctx.obj['source']

    click.echo("Local Files Configuration\n")
    click.echo("Library Paths:")

    paths = config.get_library_paths()
    for path in paths:
        click.echo(f"  {path}")
    if not paths:
        click.echo("  (not configured)")

    click.echo(f"\nInclude Video: {config.include_video()}")
    click.echo(f"Known Extensions: {len(config.get_all_extensions())}")

    available = source.prober.check_probe_available()
    click.echo(f"Probe Command: {source.prober.command} ({'found' if available else 'NOT FOUND'})")


if __name__ == '__main__':
    cli()
