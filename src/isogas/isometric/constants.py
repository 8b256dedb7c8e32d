"""
Isometric editor constants.

Projection scale, tilt angle and default hit-test thresholds for the
isometric piping canvas.
"""

import math

from ..route_nodes import ROOT_ID

# =============================================================================
# PIPING ISOMETRIC PROJECTION
# =============================================================================

# Standard gas-piping isometric convention (screen Y grows downward):
# - Risers (UP/DOWN) go straight up/down on paper
# - NORTH runs to the upper-right, SOUTH to the lower-left
# - EAST runs to the lower-right, WEST to the upper-left
SCALE = 2.5                  # world units per centimeter
ISO_ANGLE = math.pi / 6      # 30 degrees from horizontal

ORIGIN = (0.0, 0.0)

ROOT = ROOT_ID


# =============================================================================
# HIT TESTING (screen pixels, divide by zoom for world units)
# =============================================================================

PICK_THRESHOLD_PX = 20
PICK_THRESHOLD_TOUCH_PX = 35
HOVER_THRESHOLD_PX = 15
HOVER_THRESHOLD_TOUCH_PX = 25
SNAP_THRESHOLD_PX = 20

MIN_ZOOM = 0.1
MAX_ZOOM = 10.0


# =============================================================================
# DRAWING EXTENTS
# =============================================================================

# Extents reported for an empty diagram
EMPTY_EXTENT_HALF_SIZE = 50.0
