# SPDX-License-Identifier: LicenseRef-CubeAlarm-Custom-Attribution
# Copyright (c) 2025 Paul Shapiro
"""
Direction convention adapter.

Even-layer cubes were authored with the opposite rotation sign to odd-layer
cubes. Rather than duplicating the rotation math, each cube picks a handler
once and every notation-level direction passes through it.
"""

from abc import ABC, abstractmethod
from typing import Dict

try:
    from .config import IDENTITY_PROFILE, INVERTED_PROFILE
except ImportError:
    from config import IDENTITY_PROFILE, INVERTED_PROFILE


class DirectionHandler(ABC):
    """Maps a notation clockwise flag to the engine's clockwise flag."""

    @abstractmethod
    def convert(self, clockwise: bool) -> bool:
        pass


class StandardDirectionHandler(DirectionHandler):
    def convert(self, clockwise: bool) -> bool:
        return clockwise


class InvertedDirectionHandler(DirectionHandler):
    def convert(self, clockwise: bool) -> bool:
        return not clockwise


_HANDLERS: Dict[str, DirectionHandler] = {
    IDENTITY_PROFILE: StandardDirectionHandler(),
    INVERTED_PROFILE: InvertedDirectionHandler(),
}


def handler_for(profile: str) -> DirectionHandler:
    try:
        return _HANDLERS[profile]
    except KeyError:
        raise ValueError(f"Unknown direction profile: {profile}") from None


def resolve(profile: str, requested_clockwise: bool) -> bool:
    """Engine clockwise flag for a requested (notation) clockwise flag."""
    return handler_for(profile).convert(requested_clockwise)
