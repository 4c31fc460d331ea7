"""Command line interface for inspecting and editing pack files."""

from __future__ import annotations

import os
from typing import Optional

import click

from packfile import __version__
from packfile.config.config import PackConfig
from packfile.core.errors import PackError
from packfile.core.pack_file import PackFile
from packfile.monitoring.metrics import generate_latest
from packfile.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def _open(ctx: click.Context, path: str, create: bool = False) -> PackFile:
    pack = PackFile(path, config=ctx.obj["config"])
    if create and not os.path.exists(path):
        return pack
    try:
        pack.load()
    except FileNotFoundError as exc:
        raise click.ClickException(f"Pack not found: {path}") from exc
    except PackError as exc:
        raise click.ClickException(str(exc)) from exc
    return pack


def _save(pack: PackFile) -> None:
    try:
        pack.save()
    except PackError as exc:
        raise click.ClickException(str(exc)) from exc


def _read_source(source: str) -> bytes:
    with open(source, "rb") as f:
        return f.read()


def _write_metrics(path: str) -> None:
    with open(path, "wb") as f:
        f.write(generate_latest())


@click.group()
@click.version_option(__version__, prog_name="packfile")
@click.option(
    "--log-level",
    default=lambda: os.getenv("LOG_LEVEL", "WARNING"),
    show_default="WARNING",
    help="Logging level.",
)
@click.option("--json-logs/--console-logs", default=False, help="Log renderer.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML config file (defaults to PACKFILE_* environment variables).",
)
@click.option(
    "--metrics-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write Prometheus metrics here when the command finishes.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    log_level: str,
    json_logs: bool,
    config_path: Optional[str],
    metrics_file: Optional[str],
) -> None:
    """Inspect and edit pack files."""
    try:
        configure_logging(level=log_level, json_output=json_logs)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--log-level") from exc

    config = PackConfig.from_yaml(config_path) if config_path else PackConfig.from_env()
    ctx.obj = {"config": config}

    if metrics_file:
        ctx.call_on_close(lambda: _write_metrics(metrics_file))


@cli.command("list")
@click.argument("path")
@click.pass_context
def list_cmd(ctx: click.Context, path: str) -> None:
    """List entries with their lengths."""
    pack = _open(ctx, path)
    for name in sorted(pack.get_files()):
        click.echo(f"{pack.file_length(name)}\t{name}")


@cli.command()
@click.argument("path")
@click.pass_context
def info(ctx: click.Context, path: str) -> None:
    """Show pack statistics."""
    pack = _open(ctx, path)
    stats = pack.get_stats()
    click.echo(f"entries: {stats.total_files}")
    click.echo(f"content_bytes: {stats.content_size_bytes}")
    click.echo(f"archive_bytes: {stats.archive_size_bytes}")
    click.echo(f"overhead_bytes: {stats.overhead_bytes}")


@cli.command()
@click.argument("path")
@click.argument("name")
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.option("--create", is_flag=True, help="Create the pack if it does not exist.")
@click.pass_context
def add(ctx: click.Context, path: str, name: str, source: str, create: bool) -> None:
    """Add SOURCE to the pack as NAME."""
    pack = _open(ctx, path, create=create)
    if not pack.add_file(name, _read_source(source)):
        raise click.ClickException(f"Entry already exists: {name}")
    _save(pack)
    logger.info("entry_added", path=path, entry=name)


@cli.command()
@click.argument("path")
@click.argument("name")
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def update(ctx: click.Context, path: str, name: str, source: str) -> None:
    """Replace the content of NAME with SOURCE."""
    pack = _open(ctx, path)
    if not pack.update_file(name, _read_source(source)):
        raise click.ClickException(f"Entry not found: {name}")
    _save(pack)
    logger.info("entry_updated", path=path, entry=name)


@cli.command()
@click.argument("path")
@click.argument("name")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Output file (defaults to stdout).",
)
@click.pass_context
def extract(ctx: click.Context, path: str, name: str, output: Optional[str]) -> None:
    """Write the content of NAME to OUTPUT or stdout."""
    pack = _open(ctx, path)
    stream, length = pack.get_file(name)
    if stream is None:
        raise click.ClickException(f"Entry not found: {name}")

    chunk_size = pack.config.read_chunk_size
    with stream, click.open_file(output or "-", "wb") as out:
        remaining = length
        while remaining > 0:
            chunk = stream.read(min(chunk_size, remaining))
            if not chunk:
                raise click.ClickException(f"Pack truncated while reading {name}")
            out.write(chunk)
            remaining -= len(chunk)


@cli.command()
@click.argument("path")
@click.argument("name")
@click.pass_context
def remove(ctx: click.Context, path: str, name: str) -> None:
    """Remove NAME from the pack."""
    pack = _open(ctx, path)
    if not pack.remove_file(name):
        raise click.ClickException(f"Entry not found: {name}")
    _save(pack)
    logger.info("entry_removed", path=path, entry=name)


@cli.command()
@click.argument("path")
@click.argument("name")
@click.argument("new_name")
@click.pass_context
def move(ctx: click.Context, path: str, name: str, new_name: str) -> None:
    """Rename NAME to NEW_NAME."""
    pack = _open(ctx, path)
    if not pack.move_file(name, new_name):
        raise click.ClickException(f"Cannot move {name} to {new_name}")
    _save(pack)
    logger.info("entry_moved", path=path, entry=name, new_name=new_name)


def main() -> None:
    cli(prog_name="packfile")


if __name__ == "__main__":
    main()
