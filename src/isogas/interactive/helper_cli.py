"""
CLI helper tool for isogas project files.

This module provides a command-line interface for inspecting diagrams:
- resolve: Show the absolute coordinates of every segment
- snap: Find the snap point nearest to a world position
- pick: Find the segment a click at a world position would select
- takeoff: Show the material takeoff
- validate: Check that every segment connects to ROOT

Usage:
    isogas resolve house.json
    isogas snap house.json 210 -120 --zoom 2
    isogas pick house.json 100 -60 --touch
    isogas takeoff house.json
    isogas validate house.json
"""

import warnings
from pathlib import Path

import click

from ..bom import aggregate_takeoff, total_pipe_length
from ..config_schema import EditorConfig
from ..isometric.spatial_query import closest_segment, drawing_extents, nearest_snap_point
from ..project_state import PipeProject


def _load(project_file: Path, config_file: Path | None = None) -> PipeProject:
    try:
        config = EditorConfig.from_yaml(config_file) if config_file else EditorConfig()
    except ValueError as e:
        click.echo(f"Error: invalid config {config_file}: {e}", err=True)
        raise SystemExit(1) from None
    # Commands report unresolved segments themselves.
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        return PipeProject.load(project_file, config)


project_argument = click.argument("project_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
config_option = click.option(
    "--config", "-c", "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Editor configuration YAML (scale, tilt angle, thresholds).",
)


@click.group()
@click.version_option(version="0.1.0")
def cli():
    """isogas - isometric gas-piping diagram tools."""
    pass


@cli.command()
@project_argument
@config_option
def resolve(project_file: Path, config_file: Path | None):
    """
    Resolve and print the absolute coordinates of every segment.

    Segments that do not connect to ROOT are listed separately.
    """
    project = _load(project_file, config_file)
    report = project.report

    click.echo(f"\nProject: {project_file}")
    click.echo("-" * 72)
    click.echo(f"{'ID':<12} {'PARENT':<12} {'DIR':<6} {'START':>20} {'END':>20}")
    for segment in project.segments:
        coords = report.coordinates.get(segment.id)
        if coords is None:
            continue
        click.echo(
            f"{segment.id:<12} {segment.parent_id:<12} {segment.direction:<6} "
            f"{_format_point(coords.start):>20} {_format_point(coords.end):>20}"
        )

    extents = drawing_extents(report.coordinates)
    click.echo("-" * 72)
    click.echo(f"Resolved: {len(report.coordinates)} of {len(project)} segments")
    click.echo(
        f"Extents:  {_format_point((extents.min_x, extents.min_y))} .. "
        f"{_format_point((extents.max_x, extents.max_y))}"
    )

    if report.unresolved:
        click.echo("\nNot connected to ROOT:")
        for segment_id, reason in report.unresolved.items():
            click.echo(f"  {segment_id}: {reason.value}")


@cli.command()
@project_argument
@click.argument("x", type=float)
@click.argument("y", type=float)
@click.option("--threshold", "-t", type=float, default=None, help="World-space snap radius.")
@click.option("--zoom", "-z", type=float, default=1.0, show_default=True, help="Zoom used to scale the pixel radius.")
@config_option
def snap(project_file: Path, x: float, y: float, threshold: float | None, zoom: float, config_file: Path | None):
    """Find the snap point (ROOT or a segment end) nearest to X, Y."""
    project = _load(project_file, config_file)
    if threshold is None:
        threshold = project.config.snap_threshold(zoom)

    point = nearest_snap_point(x, y, project.coordinates, threshold)
    if point is None:
        click.echo(f"No snap point within {threshold:g}")
        return
    click.echo(f"Snap point: {_format_point(point)}")


@cli.command()
@project_argument
@click.argument("x", type=float)
@click.argument("y", type=float)
@click.option("--threshold", "-t", type=float, default=None, help="World-space pick radius.")
@click.option("--zoom", "-z", type=float, default=1.0, show_default=True, help="Zoom used to scale the pixel radius.")
@click.option("--touch", is_flag=True, help="Use the larger touch pick radius.")
@config_option
def pick(
    project_file: Path,
    x: float,
    y: float,
    threshold: float | None,
    zoom: float,
    touch: bool,
    config_file: Path | None,
):
    """Show which segment a click at X, Y selects (ROOT when nothing is hit)."""
    project = _load(project_file, config_file)
    if threshold is None:
        threshold = project.config.pick_threshold(zoom, touch)

    click.echo(closest_segment(x, y, project.coordinates, threshold))


@cli.command()
@project_argument
def takeoff(project_file: Path):
    """Print the material takeoff (pipe per size, fittings per type)."""
    project = _load(project_file)
    entries = aggregate_takeoff(project.segments)

    if not entries:
        click.echo("No material in project.")
        return

    click.echo(f"{'ITEM':<5} {'QTY':>4} {'SIZE':<8} {'DESCRIPTION':<28} {'LENGTH':>10}")
    for entry in entries:
        click.echo(
            f"{entry.item_number:<5} {entry.quantity:>4} {entry.size:<8} "
            f"{entry.description:<28} {entry.length_display:>10}"
        )
    click.echo(f"\nTotal pipe: {total_pipe_length(project.segments):g} cm")


@cli.command()
@project_argument
def validate(project_file: Path):
    """
    Check that every segment connects to ROOT.

    Exits with status 1 when any segment is orphaned or part of a cycle.
    """
    project = _load(project_file)
    report = project.report

    if report.ok:
        click.echo(f"OK: all {len(project)} segments connect to ROOT")
        return

    click.echo(f"Found {len(report.unresolved)} unresolved segment(s):")
    for segment_id, reason in report.unresolved.items():
        click.echo(f"  {segment_id}: {reason.value}")
    raise SystemExit(1)


def _format_point(point: tuple[float, float]) -> str:
    """Format a 2D point for display."""
    return f"({point[0]:.2f}, {point[1]:.2f})"


if __name__ == "__main__":
    cli()
