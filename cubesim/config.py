# SPDX-License-Identifier: LicenseRef-CubeAlarm-Custom-Attribution
# Copyright (c) 2025 Paul Shapiro
"""
Cube size rules and runtime settings.

Every cube instance receives one immutable CubeSizeRules value at
construction; nothing here is mutated after import.
"""

from __future__ import annotations
import os
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Tuple

# Color per side, in side order +X, -X, +Y, -Y, +Z, -Z
RIGHT_COLOR = "#ff3333"
LEFT_COLOR = "#ff9900"
TOP_COLOR = "#ffff33"
BOTTOM_COLOR = "#ffffff"
FRONT_COLOR = "#3366ff"
BACK_COLOR = "#33cc33"
HIDDEN_COLOR = "#333333"  # internal faces

DEFAULT_COLOR_SCHEME: Tuple[str, ...] = (
    RIGHT_COLOR, LEFT_COLOR, TOP_COLOR, BOTTOM_COLOR, FRONT_COLOR, BACK_COLOR,
)

# Layer selection tolerances, in world units
FACE_LAYER_TOLERANCE = 0.1
SLICE_LAYER_TOLERANCE = 0.05
POSITION_DECIMALS = 2

IDENTITY_PROFILE = "identity"
INVERTED_PROFILE = "inverted"

SUPPORTED_SIZES = (2, 3, 4, 5, 6)


@dataclass(frozen=True)
class CubeSizeRules:
    """Immutable per-size rule table."""
    size: int
    cube_unit: float
    gap: float
    direction_profile: str
    inner_depths: Tuple[int, ...]
    has_middle_slices: bool
    complexity_level: int
    scramble_moves: int
    display_name: str
    animation_duration: float  # seconds per quarter turn
    colors: Tuple[str, ...] = field(default=DEFAULT_COLOR_SCHEME)

    def __post_init__(self):
        if self.size < 2:
            raise ValueError(f"Cube size must be at least 2, got {self.size}")
        if len(self.colors) != 6:
            raise ValueError(f"Color scheme needs 6 colors, got {len(self.colors)}")
        if self.direction_profile not in (IDENTITY_PROFILE, INVERTED_PROFILE):
            raise ValueError(f"Unknown direction profile: {self.direction_profile}")

    @property
    def step(self) -> float:
        """Distance between neighbouring lattice points."""
        return self.cube_unit + self.gap

    @property
    def engine_sign(self) -> int:
        """Sign of the engine's clockwise angle relative to standard notation.

        Inverted-profile sizes turn the opposite way internally; the direction
        handler flips the requested direction back, so notation stays standard.
        """
        return -1 if self.direction_profile == INVERTED_PROFILE else 1

    @property
    def cube_type(self) -> str:
        return f"{self.size}x{self.size}x{self.size}"

    def with_gap(self, gap: float) -> 'CubeSizeRules':
        return replace(self, gap=gap)


def _duration_for(size: int) -> float:
    return min(1000, 400 + (size - 2) * 50) / 1000.0


STANDARD_RULES: Dict[int, CubeSizeRules] = {
    2: CubeSizeRules(
        size=2, cube_unit=2.24, gap=0.02, direction_profile=INVERTED_PROFILE,
        inner_depths=(), has_middle_slices=False, complexity_level=1,
        scramble_moves=15, display_name="Pocket Cube (2x2x2)",
        animation_duration=_duration_for(2),
    ),
    3: CubeSizeRules(
        size=3, cube_unit=1.7, gap=0.02, direction_profile=IDENTITY_PROFILE,
        inner_depths=(), has_middle_slices=True, complexity_level=2,
        scramble_moves=25, display_name="Rubik's Cube (3x3x3)",
        animation_duration=_duration_for(3),
    ),
    4: CubeSizeRules(
        size=4, cube_unit=1.34, gap=0.015, direction_profile=INVERTED_PROFILE,
        inner_depths=(1,), has_middle_slices=False, complexity_level=3,
        scramble_moves=35, display_name="Rubik's Revenge (4x4x4)",
        animation_duration=_duration_for(4),
    ),
    5: CubeSizeRules(
        size=5, cube_unit=1.11, gap=0.015, direction_profile=IDENTITY_PROFILE,
        inner_depths=(1,), has_middle_slices=True, complexity_level=4,
        scramble_moves=50, display_name="Professor's Cube (5x5x5)",
        animation_duration=_duration_for(5),
    ),
    6: CubeSizeRules(
        size=6, cube_unit=0.97, gap=0.012, direction_profile=INVERTED_PROFILE,
        inner_depths=(1, 2), has_middle_slices=False, complexity_level=5,
        scramble_moves=35, display_name="V-Cube 6 (6x6x6)",
        animation_duration=_duration_for(6),
    ),
}


def rules_for(size: int) -> CubeSizeRules:
    """Return the standard rules for a supported cube size."""
    try:
        return STANDARD_RULES[int(size)]
    except (KeyError, TypeError, ValueError):
        raise ValueError(
            f"Unsupported cube size: {size} (supported: {', '.join(map(str, SUPPORTED_SIZES))})"
        ) from None


@dataclass(frozen=True)
class ServerSettings:
    """Settings for the REST/WebSocket server, read from the environment."""
    cube_size: int = 3
    host: str = "0.0.0.0"
    port: int = 5001
    animated: bool = True
    state_file: str = "cube_state.json"

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> 'ServerSettings':
        env = os.environ if environ is None else environ
        size = int(env.get("CUBE_SIZE", cls.cube_size))
        rules_for(size)  # reject unsupported sizes early
        return cls(
            cube_size=size,
            host=env.get("CUBE_SERVER_HOST", cls.host),
            port=int(env.get("CUBE_SERVER_PORT", cls.port)),
            animated=env.get("CUBE_ANIMATED", "1").lower() not in ("0", "false", "no"),
            state_file=env.get("CUBE_STATE_FILE", cls.state_file),
        )
