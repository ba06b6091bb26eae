# SPDX-License-Identifier: LicenseRef-CubeAlarm-Custom-Attribution
# Copyright (c) 2025 Paul Shapiro
"""NxNxN twisty cube simulator (2x2x2 through 6x6x6)."""

from .adapters import (
    Animator, AsyncioAnimator, FrameAnimator, InstantAnimator, MemoryScene,
    RotationRequest, Scene, ease_in_out_back,
)
from .config import CubeSizeRules, ServerSettings, rules_for
from .cube import MoveOutcome, TwistyCube
from .cubelet import Cubelet
from .direction import InvertedDirectionHandler, StandardDirectionHandler, resolve
from .errors import (
    CubeBusyError, CubeError, EmptyStateError, InvalidMoveError, SnapshotError, UnsupportedMoveError,
)
from .notation import CubeMove, available_moves, parse_move
from .state_store import CubeStateStore, restore_cube, snapshot_cube

__version__ = "1.0.0"
