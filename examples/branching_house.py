#!/usr/bin/env python3
"""
Example: Branching Gas Line for a Small House

This example builds a diagram with a meter, a riser and three appliance
branches, then resolves coordinates, runs a few canvas queries and writes
the project file.
"""

from pathlib import Path

from isogas.bom import aggregate_takeoff
from isogas.isometric import drawing_extents, measure_distance
from isogas.project_state import PipeProject

# Output directory for project files
OUTPUT_DIR = Path(__file__).parent / "output" / "projects"
OUTPUT_DIR.mkdir(parents=True, exist_ok=True)


def build_house() -> PipeProject:
    """Service entry -> meter -> riser -> kitchen, heater and boiler branches."""
    print("Building house example...")

    project = PipeProject()
    main = project.new_segment(length=300, direction="EAST", size='1"', label="Service")
    project.new_segment(length=0, direction="EAST", size='1"', fitting="METER")
    riser = project.new_segment(length=250, direction="UP", size='3/4"')

    project.new_segment(parent_id=riser.id, length=120, direction="NORTH", size='1/2"')
    project.new_segment(length=0, direction="NORTH", size='1/2"', fitting="VALVE_GC", label="Kitchen")

    project.new_segment(parent_id=riser.id, length=200, direction="WEST", size='1/2"')
    project.new_segment(length=30, direction="DOWN", size='1/2"', fitting="VALVE_H", label="Heater")

    project.new_segment(parent_id=main.id, length=150, direction="SOUTH", size='3/4"', installation_type="UNDER")
    project.new_segment(length=0, direction="SOUTH", size='3/4"', fitting="VALVE_PC", label="Boiler")

    print(f"  Segments: {len(project)}")
    return project


def query_example(project: PipeProject):
    """Resolve the diagram and run canvas queries."""
    coords = project.coordinates
    extents = drawing_extents(coords)
    print(f"  Resolved: {len(coords)} segments")
    print(f"  Extents: {extents.width:.1f} x {extents.height:.1f} world units")

    riser_end = next(c.end for s, c in zip(project.segments, coords.values()) if s.direction == "UP")
    print(f"  Snap near riser top: {project.snap_at(riser_end[0] + 4, riser_end[1] - 3)}")
    print(f"  Click near riser top selects: {project.select_at(riser_end[0] + 4, riser_end[1] + 20)}")
    print(f"  Ruler origin -> riser top: {measure_distance((0.0, 0.0), riser_end):.0f} cm")


def takeoff_example(project: PipeProject):
    """Print the material takeoff."""
    for entry in aggregate_takeoff(project.segments):
        print(f"  {entry.item_number:>2}  {entry.quantity:>2} x {entry.size:<7} {entry.description:<28} {entry.length_display}")


def main():
    print("=" * 60)
    print("isogas - Branching House Example")
    print("=" * 60)
    print()

    try:
        project = build_house()
        query_example(project)
        print()
        takeoff_example(project)

        path = OUTPUT_DIR / "house.json"
        project.save(path)
        print(f"\n  Saved to {path}")
    except (ValueError, KeyError) as e:
        print(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    import sys
    sys.exit(main())
