#!/usr/bin/env python3
"""
Project State for the Isometric Piping Editor

Holds the editable segment list together with the current selection and a
bounded undo/redo history, and hands the segment list to the coordinate
resolver whenever geometry is needed.

Example usage:
    project = PipeProject()
    riser = project.new_segment(length=100, direction="NORTH")
    project.new_segment(length=50, direction="UP", fitting="VALVE_GC")
    coords = project.coordinates
    project.select_at(210.0, -120.0, zoom=1.0)
    project.undo()
    project.save("house.json")

Conventions:
- Lengths in centimeters, coordinates in world units
- New segments extend from the selected segment (or ROOT)
- Deleting a segment leaves its children orphaned unless cascade=True
"""

from __future__ import annotations

import json
import uuid
import warnings
from collections.abc import Iterable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from .config_schema import EditorConfig
from .isometric.coordinate_resolver import CoordinateMap, ResolveReport, resolve_with_report
from .isometric.spatial_query import closest_segment, hovered_segment, nearest_snap_point
from .isometric.view_projection import IsoProjection
from .route_nodes import (
    ROOT_ID,
    Segment,
    find_segment,
    iter_descendants,
    segments_from_data,
    segments_to_data,
)


@dataclass(frozen=True)
class HistoryState:
    """Snapshot of the editable state for undo/redo."""

    segments: tuple[Segment, ...]
    selected_id: str


def _copy_segments(segments: Iterable[Segment]) -> list[Segment]:
    return [replace(s) for s in segments]


class PipeProject:
    """
    Editable pipe diagram.

    Every mutation records an undo step, clears the redo stack and
    invalidates the cached coordinate map.
    """

    def __init__(self, segments: Iterable[Segment] | None = None, config: EditorConfig | None = None):
        self.config = config or EditorConfig()
        self._segments: list[Segment] = _copy_segments(segments or [])
        self._selected_id = ROOT_ID
        self._history: list[HistoryState] = []
        self._redo_stack: list[HistoryState] = []
        self._revision = 0
        self._report: ResolveReport | None = None
        self._report_key: tuple[int, IsoProjection] | None = None

    # -------------------------------------------------------------------------
    # State access
    # -------------------------------------------------------------------------

    @property
    def segments(self) -> tuple[Segment, ...]:
        return tuple(self._segments)

    @property
    def selected_id(self) -> str:
        return self._selected_id

    @property
    def selected_segment(self) -> Segment | None:
        return self.get(self._selected_id)

    @property
    def can_undo(self) -> bool:
        return bool(self._history)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    def _resolved(self) -> ResolveReport:
        """Cached resolve result, recomputed after edits or a projection change."""
        key = (self._revision, self.config.projection)
        if self._report is None or self._report_key != key:
            self._report = resolve_with_report(self._segments, key[1])
            self._report_key = key
        return self._report

    @property
    def report(self) -> ResolveReport:
        """Resolve result for the current segments (a copy callers may modify)."""
        report = self._resolved()
        return ResolveReport(dict(report.coordinates), dict(report.unresolved))

    @property
    def coordinates(self) -> CoordinateMap:
        return dict(self._resolved().coordinates)

    def get(self, segment_id: str) -> Segment | None:
        return find_segment(self._segments, segment_id)

    def __len__(self) -> int:
        return len(self._segments)

    def __contains__(self, segment_id: object) -> bool:
        return any(s.id == segment_id for s in self._segments)

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def _snapshot(self) -> HistoryState:
        return HistoryState(tuple(_copy_segments(self._segments)), self._selected_id)

    def _restore(self, state: HistoryState) -> None:
        self._segments = _copy_segments(state.segments)
        self._selected_id = state.selected_id
        self._revision += 1

    def _commit(self) -> None:
        """Record the current state as an undo step."""
        limit = self.config.history_limit
        if limit > 0:
            self._history.append(self._snapshot())
            del self._history[:-limit]
        self._redo_stack.clear()

    def undo(self) -> bool:
        """Restore the previous state. Returns False when there is nothing to undo."""
        if not self._history:
            return False
        self._redo_stack.append(self._snapshot())
        self._restore(self._history.pop())
        return True

    def redo(self) -> bool:
        """Re-apply the last undone change. Returns False when there is nothing to redo."""
        if not self._redo_stack:
            return False
        self._history.append(self._snapshot())
        self._restore(self._redo_stack.pop())
        return True

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def _generate_id(self) -> str:
        while True:
            candidate = uuid.uuid4().hex[:9]
            if candidate != ROOT_ID and candidate not in self:
                return candidate

    def add_segment(self, segment: Segment, select: bool = True) -> Segment:
        """
        Append a segment to the diagram.

        Args:
            segment: Segment to add; its parent must be ROOT or an existing segment
            select: Make the new segment the active selection

        Returns:
            The added segment

        Raises:
            ValueError: If the id is reserved or already used
            KeyError: If the parent does not exist
        """
        if segment.id == ROOT_ID:
            raise ValueError(f"'{ROOT_ID}' is reserved and cannot be used as a segment id")
        if segment.id in self:
            raise ValueError(f"Segment id '{segment.id}' already exists")
        if segment.parent_id != ROOT_ID and segment.parent_id not in self:
            raise KeyError(f"Parent segment '{segment.parent_id}' not found")

        self._commit()
        segment = replace(segment)
        self._segments.append(segment)
        if select:
            self._selected_id = segment.id
        self._revision += 1
        return segment

    def new_segment(self, parent_id: str | None = None, **attributes: Any) -> Segment:
        """
        Create a segment with a fresh id extending from `parent_id`.

        The parent defaults to the current selection.
        """
        segment = Segment(
            id=self._generate_id(),
            parent_id=self._selected_id if parent_id is None else parent_id,
            **attributes,
        )
        return self.add_segment(segment)

    def update_segment(self, segment_id: str, **changes: Any) -> Segment:
        """
        Change attributes of an existing segment.

        Raises:
            KeyError: If the segment or the new parent does not exist
            ValueError: If the id would change, the new parent is the segment
                itself or one of its descendants, or the new values are invalid
        """
        position = self._position(segment_id)
        if "id" in changes and changes["id"] != segment_id:
            raise ValueError("Segment ids cannot be changed")
        if "parent_id" in changes:
            self._check_reparent(segment_id, changes["parent_id"])
        updated = replace(self._segments[position], **changes)

        self._commit()
        self._segments[position] = updated
        self._revision += 1
        return updated

    def delete_segment(self, segment_id: str, cascade: bool = False) -> list[str]:
        """
        Remove a segment and select ROOT.

        Without cascade, children of the removed segment stay in the list
        and drop out of the coordinate map as orphans.

        Returns:
            Ids of the removed segments (empty when segment_id is ROOT)
        """
        if segment_id == ROOT_ID:
            return []
        self._position(segment_id)

        removed = {segment_id}
        if cascade:
            removed.update(s.id for s in iter_descendants(self._segments, segment_id))

        self._commit()
        self._segments = [s for s in self._segments if s.id not in removed]
        self._selected_id = ROOT_ID
        self._revision += 1
        return [segment_id] + sorted(removed - {segment_id})

    def _check_reparent(self, segment_id: str, parent_id: str) -> None:
        if parent_id == ROOT_ID:
            return
        if parent_id not in self:
            raise KeyError(f"Parent segment '{parent_id}' not found")
        if parent_id == segment_id or any(s.id == parent_id for s in iter_descendants(self._segments, segment_id)):
            raise ValueError(f"Segment '{segment_id}' cannot be moved under '{parent_id}': it would form a cycle")

    def _position(self, segment_id: str) -> int:
        for i, segment in enumerate(self._segments):
            if segment.id == segment_id:
                return i
        raise KeyError(f"Segment '{segment_id}' not found")

    # -------------------------------------------------------------------------
    # Canvas interaction
    # -------------------------------------------------------------------------

    def select(self, segment_id: str) -> None:
        if segment_id != ROOT_ID:
            self._position(segment_id)
        self._selected_id = segment_id

    def select_at(self, x: float, y: float, zoom: float = 1.0, touch: bool = False) -> str:
        """Select the segment under a world point; falls back to ROOT."""
        threshold = self.config.pick_threshold(zoom, touch)
        self._selected_id = closest_segment(x, y, self._resolved().coordinates, threshold)
        return self._selected_id

    def hover_at(self, x: float, y: float, zoom: float = 1.0, touch: bool = False) -> str | None:
        return hovered_segment(x, y, self._resolved().coordinates, self.config.hover_threshold(zoom, touch))

    def snap_at(self, x: float, y: float, zoom: float = 1.0) -> tuple[float, float] | None:
        return nearest_snap_point(x, y, self._resolved().coordinates, self.config.snap_threshold(zoom))

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_json(self) -> str:
        return json.dumps(segments_to_data(self._segments), indent=2, ensure_ascii=False)

    def save(self, path: str | Path) -> None:
        """Write the project file."""
        Path(path).write_text(self.to_json(), encoding="utf-8")

    @classmethod
    def from_json(cls, text: str, config: EditorConfig | None = None) -> PipeProject:
        """
        Build a project from project-file text.

        Unreadable content yields an empty project with a warning; segments
        that cannot be placed on the diagram are reported with a warning.
        """
        try:
            segments = segments_from_data(json.loads(text))
        except (ValueError, KeyError, TypeError) as e:
            warnings.warn(f"Could not read project data, starting empty: {e}", stacklevel=2)
            segments = []

        project = cls(segments, config)
        unresolved = project.report.unresolved
        if unresolved:
            details = ", ".join(f"{sid} ({reason.value})" for sid, reason in unresolved.items())
            warnings.warn(f"Segments not connected to ROOT: {details}", stacklevel=2)
        return project

    @classmethod
    def load(cls, path: str | Path, config: EditorConfig | None = None) -> PipeProject:
        """Open a project file."""
        text = Path(path).read_text(encoding="utf-8")
        return cls.from_json(text, config)
