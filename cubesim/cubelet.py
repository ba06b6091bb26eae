# SPDX-License-Identifier: LicenseRef-CubeAlarm-Custom-Attribution
# Copyright (c) 2025 Paul Shapiro
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

try:
    from .config import HIDDEN_COLOR, POSITION_DECIMALS
    from .geometry import (
        axis_angle_quaternion, canonical_quaternion, identity_quaternion,
        quaternion_matrix, quaternion_multiply, side_index, side_vector,
    )
except ImportError:
    from config import HIDDEN_COLOR, POSITION_DECIMALS
    from geometry import (
        axis_angle_quaternion, canonical_quaternion, identity_quaternion,
        quaternion_matrix, quaternion_multiply, side_index, side_vector,
    )


@dataclass(eq=False)
class Cubelet:
    """One piece of the puzzle: where it is, how it is turned, what it shows."""
    position: np.ndarray
    colors: Tuple[str, ...]  # +X, -X, +Y, -Y, +Z, -Z in the piece's own frame
    orientation: np.ndarray = field(default_factory=identity_quaternion)
    handle: Optional[Any] = None  # opaque visual node owned by the scene

    def __post_init__(self):
        self.position = np.asarray(self.position, dtype=float)
        self.orientation = np.asarray(self.orientation, dtype=float)
        self.colors = tuple(self.colors)
        if len(self.colors) != 6:
            raise ValueError(f"Cubelet needs 6 side colors, got {len(self.colors)}")

    def rotate(self, axis: int, angle: float) -> None:
        """Turn the piece about a world axis through the origin."""
        q = axis_angle_quaternion(axis, angle)
        rotated = quaternion_matrix(q) @ self.position
        # +0.0 folds -0.0 into 0.0
        self.position = np.round(rotated, POSITION_DECIMALS) + 0.0
        self.orientation = canonical_quaternion(quaternion_multiply(q, self.orientation))

    @property
    def visible_sides(self) -> List[int]:
        return [i for i, color in enumerate(self.colors) if color != HIDDEN_COLOR]

    @property
    def is_corner(self) -> bool:
        return len(self.visible_sides) == 3

    def facing_color(self, world_side: int) -> str:
        """Color this piece currently shows toward a world side."""
        local = quaternion_matrix(self.orientation).T @ side_vector(world_side)
        return self.colors[side_index(np.round(local))]

    def twist_colors(self, clockwise: bool) -> None:
        """Cycle the three visible colors of a corner piece in place."""
        sides = self.visible_sides
        if len(sides) != 3:
            raise ValueError(f"Only corner pieces can be twisted (piece shows {len(sides)} colors)")
        f1, f2, f3 = sides
        colors = list(self.colors)
        if clockwise:
            colors[f1], colors[f2], colors[f3] = colors[f3], colors[f1], colors[f2]
        else:
            colors[f1], colors[f2], colors[f3] = colors[f2], colors[f3], colors[f1]
        self.colors = tuple(colors)

    def to_dict(self) -> Dict:
        return {
            'position': [float(v) for v in self.position],
            'quaternion': [float(v) for v in self.orientation],
            'colors': list(self.colors),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Cubelet':
        return cls(
            position=np.array(data['position'], dtype=float),
            colors=tuple(data['colors']),
            orientation=canonical_quaternion(np.array(data['quaternion'], dtype=float)),
        )


def build_colors(index: Sequence[int], size: int, scheme: Sequence[str]) -> Tuple[str, ...]:
    """Color tuple for the lattice cell at `index`; only outward sides are colored."""
    x, y, z = index
    last = size - 1
    colors = [HIDDEN_COLOR] * 6
    if x == last:
        colors[0] = scheme[0]
    if x == 0:
        colors[1] = scheme[1]
    if y == last:
        colors[2] = scheme[2]
    if y == 0:
        colors[3] = scheme[3]
    if z == last:
        colors[4] = scheme[4]
    if z == 0:
        colors[5] = scheme[5]
    return tuple(colors)
