# SPDX-License-Identifier: LicenseRef-CubeAlarm-Custom-Attribution
# Copyright (c) 2025 Paul Shapiro
"""
Lattice geometry, layer selection and quaternion helpers.

Quaternions are numpy arrays in [w, x, y, z] order.
"""

from __future__ import annotations
import math
from typing import Dict, List, Sequence, Tuple

import numpy as np

try:
    from .config import CubeSizeRules, FACE_LAYER_TOLERANCE, SLICE_LAYER_TOLERANCE
except ImportError:
    from config import CubeSizeRules, FACE_LAYER_TOLERANCE, SLICE_LAYER_TOLERANCE

AXIS_X, AXIS_Y, AXIS_Z = 0, 1, 2

FACE_LETTERS = ('F', 'B', 'R', 'L', 'U', 'D')

# Face letter -> (axis, +1 for the positive side / -1 for the negative side)
FACE_AXIS: Dict[str, Tuple[int, int]] = {
    'R': (AXIS_X, 1), 'L': (AXIS_X, -1),
    'U': (AXIS_Y, 1), 'D': (AXIS_Y, -1),
    'F': (AXIS_Z, 1), 'B': (AXIS_Z, -1),
}

QUARTER_TURN = math.pi / 2

# Signed angle about the positive axis for a clockwise turn seen from
# outside the named face. M follows L, E follows D, S follows F.
CLOCKWISE_ANGLE: Dict[str, float] = {
    'R': -QUARTER_TURN, 'L': QUARTER_TURN,
    'U': -QUARTER_TURN, 'D': QUARTER_TURN,
    'F': -QUARTER_TURN, 'B': QUARTER_TURN,
    'M': QUARTER_TURN, 'E': QUARTER_TURN, 'S': -QUARTER_TURN,
    'X': -QUARTER_TURN, 'Y': -QUARTER_TURN, 'Z': -QUARTER_TURN,
}

SLICE_AXIS = {'M': AXIS_X, 'E': AXIS_Y, 'S': AXIS_Z}
WHOLE_CUBE_AXIS = {'X': AXIS_X, 'Y': AXIS_Y, 'Z': AXIS_Z}


def lattice_coordinates(rules: CubeSizeRules) -> List[float]:
    """The N evenly spaced coordinates along one axis, centred on zero."""
    step = rules.step
    offset = (rules.size - 1) * step / 2
    return [i * step - offset for i in range(rules.size)]


def lattice_index(value: float, rules: CubeSizeRules) -> int:
    """Nearest lattice index for a coordinate."""
    return int(round(value / rules.step + (rules.size - 1) / 2))


def face_layer_index(face: str, depth: int, size: int) -> int:
    """Lattice index of the layer `depth` steps in from `face` (0 = the face itself)."""
    if depth < 0 or depth >= size:
        raise ValueError(f"Layer depth {depth} out of range for size {size}")
    _, side = FACE_AXIS[face]
    return size - 1 - depth if side > 0 else depth


def middle_layer_index(size: int) -> int:
    return size // 2


def select_layer(positions: Sequence[np.ndarray], axis: int, index: int,
                 rules: CubeSizeRules, tolerance: float) -> List[int]:
    """Indices of the positions lying on lattice layer `index` along `axis`."""
    target = lattice_coordinates(rules)[index]
    return [i for i, pos in enumerate(positions) if abs(pos[axis] - target) < tolerance]


def tolerance_for(depth: int) -> float:
    return FACE_LAYER_TOLERANCE if depth == 0 else SLICE_LAYER_TOLERANCE


# Quaternions

def identity_quaternion() -> np.ndarray:
    return np.array([1.0, 0.0, 0.0, 0.0])


def axis_angle_quaternion(axis: int, angle: float) -> np.ndarray:
    half = angle / 2
    q = np.zeros(4)
    q[0] = math.cos(half)
    q[1 + axis] = math.sin(half)
    return q


def quaternion_multiply(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Hamilton product a * b (apply b first, then a)."""
    aw, ax, ay, az = a
    bw, bx, by, bz = b
    return np.array([
        aw * bw - ax * bx - ay * by - az * bz,
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
    ])


def canonical_quaternion(q: np.ndarray) -> np.ndarray:
    """Normalize and flip sign so the first non-zero component is positive."""
    q = q / np.linalg.norm(q)
    for component in q:
        if abs(component) > 1e-9:
            if component < 0:
                q = -q
            break
    return q


def quaternion_matrix(q: np.ndarray) -> np.ndarray:
    w, x, y, z = q
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
        [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
        [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
    ])


def same_rotation(a: np.ndarray, b: np.ndarray, atol: float = 1e-6) -> bool:
    """True when both quaternions describe the same rotation (q and -q agree)."""
    return abs(abs(float(np.dot(a, b))) - 1.0) < atol


def side_index(direction: np.ndarray) -> int:
    """Map an axis-aligned unit vector to its side index (+X,-X,+Y,-Y,+Z,-Z)."""
    axis = int(np.argmax(np.abs(direction)))
    return axis * 2 + (0 if direction[axis] > 0 else 1)


def side_vector(side: int) -> np.ndarray:
    vec = np.zeros(3)
    vec[side // 2] = 1.0 if side % 2 == 0 else -1.0
    return vec
