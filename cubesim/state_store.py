# SPDX-License-Identifier: LicenseRef-CubeAlarm-Custom-Attribution
# Copyright (c) 2025 Paul Shapiro
"""
Save and restore cube state as JSON.

A snapshot holds the derived facelet grids (for quick inspection), every
cubelet's position, quaternion and colors, and the applied move history.
"""

from __future__ import annotations
import json
import logging
import os
import time
from typing import Any, Dict, Optional

import numpy as np

try:
    from .cube import TwistyCube, FACE_GRID_ORDER
    from .cubelet import Cubelet
    from .errors import EmptyStateError, SnapshotError
    from .geometry import lattice_coordinates
    from .notation import CubeMove
except ImportError:
    from cube import TwistyCube, FACE_GRID_ORDER
    from cubelet import Cubelet
    from errors import EmptyStateError, SnapshotError
    from geometry import lattice_coordinates
    from notation import CubeMove

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = "1.0"
LATTICE_TOLERANCE = 0.05


def snapshot_cube(cube: TwistyCube) -> Dict[str, Any]:
    """Build a JSON-serialisable snapshot of the cube."""
    return {
        'version': SNAPSHOT_VERSION,
        'cube_type': cube.get_cube_type(),
        'cube_size': cube.size,
        'timestamp': time.time(),
        'cube_state': cube.get_cube_state(),
        'cubelets': cube.snapshot_cubelets(),
        'history': [move.to_dict() for move in cube.get_move_history()],
    }


def validate_snapshot(data: Any, cube: TwistyCube) -> None:
    """Raise SnapshotError unless `data` can be loaded into `cube`."""
    if not isinstance(data, dict):
        raise SnapshotError("Snapshot must be a JSON object")
    if data.get('version') != SNAPSHOT_VERSION:
        raise SnapshotError(f"Unsupported snapshot version: {data.get('version')!r}")
    n = cube.size
    if data.get('cube_size') != n:
        raise SnapshotError(f"Snapshot is for size {data.get('cube_size')}, cube is {n}")

    cubelets = data.get('cubelets')
    if not isinstance(cubelets, list) or len(cubelets) != n ** 3:
        count = len(cubelets) if isinstance(cubelets, list) else 0
        raise SnapshotError(f"Expected {n ** 3} cubelets, found {count}")

    coords = lattice_coordinates(cube.rules)
    for i, entry in enumerate(cubelets):
        if not isinstance(entry, dict):
            raise SnapshotError(f"Cubelet {i} is not an object")
        position = entry.get('position')
        quaternion = entry.get('quaternion')
        colors = entry.get('colors')
        if not isinstance(position, list) or len(position) != 3:
            raise SnapshotError(f"Cubelet {i} has an invalid position")
        if not isinstance(quaternion, list) or len(quaternion) != 4:
            raise SnapshotError(f"Cubelet {i} has an invalid quaternion")
        if not isinstance(colors, list) or len(colors) != 6:
            raise SnapshotError(f"Cubelet {i} must have 6 colors")
        try:
            values = [float(v) for v in position + quaternion]
        except (TypeError, ValueError):
            raise SnapshotError(f"Cubelet {i} has non-numeric coordinates") from None
        for value in values[:3]:
            if not any(abs(value - c) < LATTICE_TOLERANCE for c in coords):
                raise SnapshotError(f"Cubelet {i} is off the lattice: {position}")
        if np.linalg.norm(np.array(values[3:])) < 1e-6:
            raise SnapshotError(f"Cubelet {i} has a zero quaternion")

    state = data.get('cube_state')
    if not isinstance(state, dict):
        raise SnapshotError("Snapshot has no facelet grids")
    for face in FACE_GRID_ORDER:
        grid = state.get(face)
        if not isinstance(grid, list) or len(grid) != n or any(
                not isinstance(row, list) or len(row) != n for row in grid):
            raise SnapshotError(f"Face {face} must be a {n}x{n} grid")

    if not isinstance(data.get('history', []), list):
        raise SnapshotError("History must be a list")


def restore_cube(cube: TwistyCube, data: Dict[str, Any]) -> None:
    """Validate a snapshot and load it into the cube."""
    validate_snapshot(data, cube)
    try:
        cubelets = [Cubelet.from_dict(entry) for entry in data['cubelets']]
        history = [CubeMove.from_dict(entry) for entry in data.get('history', [])]
    except (KeyError, TypeError, ValueError) as e:
        raise SnapshotError(f"Malformed snapshot: {e}") from e
    cube.restore(cubelets, history)
    logger.info(f"Restored {cube.get_cube_type()} cube with {len(history)} moves of history")


class CubeStateStore:
    """Keeps one saved cube state in a JSON file."""

    def __init__(self, path: str = "cube_state.json"):
        self.path = path

    def save(self, cube: TwistyCube) -> bool:
        return self.export_state(cube, self.path)

    def load(self, cube: TwistyCube) -> bool:
        return self.import_state(cube, self.path)

    def export_state(self, cube: TwistyCube, path: str) -> bool:
        try:
            snapshot = snapshot_cube(cube)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(snapshot, f, indent=2)
            logger.info(f"💾 Saved {snapshot['cube_type']} cube state to {path}")
            return True
        except OSError as e:
            logger.error(f"❌ Failed to save cube state to {path}: {e}")
            return False

    def import_state(self, cube: TwistyCube, path: str) -> bool:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            restore_cube(cube, data)
            return True
        except FileNotFoundError:
            logger.info(f"No saved cube state at {path}")
            return False
        except (OSError, json.JSONDecodeError, SnapshotError, EmptyStateError) as e:
            logger.error(f"❌ Failed to load cube state from {path}: {e}")
            return False

    def read(self) -> Optional[Dict[str, Any]]:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError):
            return None

    def has_saved_state(self, size: Optional[int] = None) -> bool:
        """True if a readable snapshot exists (for `size`, when given)."""
        data = self.read()
        if not isinstance(data, dict):
            return False
        return size is None or data.get('cube_size') == size

    def clear(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)
            logger.info(f"Cleared saved cube state at {self.path}")

    def saved_at(self) -> Optional[float]:
        data = self.read()
        return data.get('timestamp') if isinstance(data, dict) else None
