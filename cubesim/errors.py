# SPDX-License-Identifier: LicenseRef-CubeAlarm-Custom-Attribution
# Copyright (c) 2025 Paul Shapiro
"""Error types raised by the cube engine."""


class CubeError(Exception):
    """Base class for all cube engine errors."""


class InvalidMoveError(CubeError, ValueError):
    """Notation does not parse to any move in the grammar."""

    def __init__(self, notation: str, reason: str = ""):
        self.notation = notation
        message = f"Invalid move notation: {notation!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class UnsupportedMoveError(CubeError, ValueError):
    """Move is grammatically valid but not legal for this cube size."""

    def __init__(self, notation: str, size: int):
        self.notation = notation
        self.size = size
        super().__init__(f"Invalid move for {size}x{size}x{size} cube: {notation}")


class EmptyStateError(CubeError):
    """Operation needs cubelets but the cube has none (disposed)."""


class SnapshotError(CubeError, ValueError):
    """Saved cube state failed validation."""


class CubeBusyError(CubeError):
    """A rotation or move sequence is still running."""
