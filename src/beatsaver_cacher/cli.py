"""BeatSaver cacher CLI using Typer."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from .config import AppSettings, get_settings
from .errors import HarvestAbortedError, SnapshotError

app = typer.Typer(help="BeatSaver map metadata harvesting CLI")

VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@app.command()
def harvest(
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Snapshot destination (defaults to OUTPUT_PATH)")] = None,
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="Override LOG_LEVEL")] = None,
):
    """Walk the whole catalog and write a fresh snapshot."""
    if log_level and log_level.upper() not in VALID_LOG_LEVELS:
        typer.echo(f"Error: --log-level must be one of {', '.join(VALID_LOG_LEVELS)}", err=True)
        raise typer.Exit(2)

    from .cacher_logging import configure_logging

    settings = get_settings()
    configure_logging(level=log_level)

    output_path = output or settings.OUTPUT_PATH
    if not asyncio.run(_run_harvest(output_path, settings)):
        raise typer.Exit(1)


async def _run_harvest(output_path: Path, settings: AppSettings) -> bool:
    """Execute the harvest and persist the result."""

    # Import at runtime so tests can substitute the client
    from .io_clients.beatsaver import BeatSaverClient
    from .pipelines.harvest import MapHarvester
    from .snapshot.writer import write_snapshot

    typer.echo("🎵 Harvesting maps from the catalog...")

    async with BeatSaverClient.from_settings(settings) as client:
        harvester = MapHarvester.from_settings(client, settings)
        try:
            snapshot = await harvester.run()
        except HarvestAbortedError as e:
            typer.echo(f"❌ Harvest aborted, snapshot not written: {e}", err=True)
            return False

    stats = harvester.stats
    typer.echo("\n📊 Harvest Summary:")
    typer.echo(f"   Pages: {stats.pages}")
    typer.echo(f"   Maps seen: {stats.entries_seen}")
    typer.echo(f"   Cached: {len(snapshot)}")
    typer.echo(f"   Rejected: {stats.rejected}")
    typer.echo(f"   Invalid: {stats.invalid}")
    typer.echo(f"   Retries: {stats.transient_retries}")

    if not write_snapshot(snapshot, output_path):
        typer.echo(f"❌ Failed to write snapshot to {output_path}", err=True)
        return False

    typer.echo(f"\n✅ Saved {len(snapshot)} maps to {output_path}")
    return True


@app.command()
def inspect(
    path: Annotated[Path, typer.Argument(help="Snapshot file to read")],
    limit: Annotated[int, typer.Option(help="Records to list")] = 10,
):
    """Print a summary of an existing snapshot."""
    from .snapshot.writer import read_snapshot

    try:
        snapshot = read_snapshot(path)
    except (OSError, SnapshotError) as e:
        typer.echo(f"❌ Could not read {path}: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"{len(snapshot)} maps in {path}")
    records = sorted(snapshot.items(), key=lambda item: item[1].key)
    for map_id, record in records[:max(limit, 0)]:
        typer.echo(
            f"   {map_id}: {record.song_name} by {record.level_author_name} "
            f"[{len(record.difficulties)} diffs, mods={record.mods:05b}]"
        )


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
