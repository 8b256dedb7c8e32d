"""
IsoProjection for mapping logical pipe directions onto the drawing plane.

This module turns a (length, direction) pair into a 2D displacement using
the fixed piping isometric projection: risers are vertical on paper and the
four compass directions are drawn at 30 degrees from horizontal.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from ..route_nodes import Direction
from .constants import ISO_ANGLE, SCALE


@dataclass(frozen=True)
class IsoProjection:
    """
    Projection of logical pipe directions onto 2D world coordinates.

    Screen Y grows downward, so UP is negative Y.

    Attributes:
        scale: World units per centimeter of pipe
        iso_angle: Tilt of horizontal runs from the X axis, in radians
    """

    scale: float = SCALE
    iso_angle: float = ISO_ANGLE

    # Cached trigonometry (computed from iso_angle)
    _cos: float = field(init=False, repr=False, compare=False)
    _sin: float = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_cos", math.cos(self.iso_angle))
        object.__setattr__(self, "_sin", math.sin(self.iso_angle))

    @classmethod
    def from_degrees(cls, scale: float = SCALE, iso_angle_deg: float = 30.0) -> IsoProjection:
        """Create a projection with the tilt angle given in degrees."""
        return cls(scale=scale, iso_angle=math.radians(iso_angle_deg))

    def vector_for(self, length: float, direction: Direction) -> tuple[float, float]:
        """
        Project a pipe run onto the drawing plane.

        Args:
            length: Run length in centimeters (>= 0)
            direction: NORTH, SOUTH, EAST, WEST, UP or DOWN

        Returns:
            (dx, dy): Displacement in world units

        Raises:
            ValueError: If direction is not one of the six symbols
        """
        if length == 0:
            return (0.0, 0.0)

        run = length * self.scale
        cos_a = self._cos
        sin_a = self._sin

        if direction == "UP":
            return (0.0, -run)
        if direction == "DOWN":
            return (0.0, run)
        if direction == "NORTH":
            return (run * cos_a, -run * sin_a)
        if direction == "SOUTH":
            return (-run * cos_a, run * sin_a)
        if direction == "EAST":
            return (run * cos_a, run * sin_a)
        if direction == "WEST":
            return (-run * cos_a, -run * sin_a)
        raise ValueError(
            f"Unknown direction: {direction}. "
            "Valid directions: ['NORTH', 'SOUTH', 'EAST', 'WEST', 'UP', 'DOWN']"
        )

    def world_to_cm(self, distance: float) -> float:
        """Convert a world-space distance back to centimeters of pipe."""
        return distance / self.scale


DEFAULT_PROJECTION = IsoProjection()


def vector_for(length: float, direction: Direction) -> tuple[float, float]:
    """Project a pipe run with the standard scale and 30 degree tilt."""
    return DEFAULT_PROJECTION.vector_for(length, direction)
