# SPDX-License-Identifier: LicenseRef-CubeAlarm-Custom-Attribution
# Copyright (c) 2025 Paul Shapiro
"""
Contracts for the collaborators a cube talks to: an animator that owns the
timing of each rotation and a scene that holds the per-cubelet visual nodes.

The cube issues one RotationRequest at a time and resumes only when the
animator calls request.complete().
"""

from __future__ import annotations
import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

import numpy as np

try:
    from .geometry import axis_angle_quaternion, identity_quaternion
except ImportError:
    from geometry import axis_angle_quaternion, identity_quaternion

logger = logging.getLogger(__name__)

EASE_C1 = 1.70158
EASE_C2 = EASE_C1 * 1.525


def ease_in_out_back(t: float) -> float:
    """Ease curve with a slight overshoot at both ends."""
    if t < 0.5:
        return ((2 * t) ** 2 * ((EASE_C2 + 1) * 2 * t - EASE_C2)) / 2
    return ((2 * t - 2) ** 2 * ((EASE_C2 + 1) * (t * 2 - 2) + EASE_C2) + 2) / 2


@dataclass(eq=False)
class RotationRequest:
    """One rotation handed to the animator."""
    move: Any  # CubeMove
    axis: int
    angle: float
    cubelets: List[Any]
    duration: float
    play_sound: bool = False
    start_quaternion: np.ndarray = field(default_factory=identity_quaternion)
    _on_complete: Optional[Callable[['RotationRequest'], None]] = field(default=None, repr=False)
    _done_callbacks: List[Callable[['RotationRequest'], None]] = field(default_factory=list, repr=False)
    _completed: bool = field(default=False, repr=False)

    @property
    def end_quaternion(self) -> np.ndarray:
        return axis_angle_quaternion(self.axis, self.angle)

    @property
    def completed(self) -> bool:
        return self._completed

    def interpolated_quaternion(self, progress: float) -> np.ndarray:
        """Group rotation at `progress` (0..1, eased values may overshoot)."""
        return axis_angle_quaternion(self.axis, self.angle * progress)

    def add_done_callback(self, callback: Callable[['RotationRequest'], None]) -> None:
        if self._completed:
            callback(self)
        else:
            self._done_callbacks.append(callback)

    def complete(self) -> None:
        """Report the rotation finished. Only the first call has any effect."""
        if self._completed:
            return
        self._completed = True
        if self._on_complete:
            self._on_complete(self)
        callbacks, self._done_callbacks = self._done_callbacks, []
        for callback in callbacks:
            callback(self)


class Animator(ABC):
    """Owns the timing between a rotation being issued and completing."""

    @abstractmethod
    def start(self, request: RotationRequest) -> None:
        pass


class InstantAnimator(Animator):
    """Completes every rotation immediately."""

    def start(self, request: RotationRequest) -> None:
        request.complete()


class AsyncioAnimator(Animator):
    """Completes each rotation after its duration on the running event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None, speed: float = 1.0):
        self._loop = loop
        self.speed = speed

    def start(self, request: RotationRequest) -> None:
        loop = self._loop or asyncio.get_running_loop()
        loop.call_later(request.duration / self.speed, request.complete)


class FrameAnimator(Animator):
    """
    Animator driven by an external render loop.

    The render loop calls tick(dt) once per frame; progress follows
    ease_in_out_back and the request completes once its duration elapses.
    """

    def __init__(self):
        self.active: Optional[RotationRequest] = None
        self.elapsed = 0.0
        self.progress = 0.0

    def start(self, request: RotationRequest) -> None:
        if self.active is not None and not self.active.completed:
            logger.warning(f"Frame animator replaced an unfinished rotation ({self.active.move})")
        self.active = request
        self.elapsed = 0.0
        self.progress = 0.0

    def tick(self, dt: float) -> Optional[np.ndarray]:
        """Advance the active rotation; returns the group quaternion for this frame."""
        request = self.active
        if request is None:
            return None
        self.elapsed += dt
        t = 1.0 if request.duration <= 0 else min(self.elapsed / request.duration, 1.0)
        self.progress = ease_in_out_back(t)
        frame = request.interpolated_quaternion(self.progress)
        if t >= 1.0:
            self.active = None
            request.complete()
        return frame


class Scene(ABC):
    """Container for per-cubelet visual nodes."""

    @abstractmethod
    def add(self, cubelet: Any) -> None:
        pass

    @abstractmethod
    def remove(self, cubelet: Any) -> None:
        pass


class MemoryScene(Scene):
    """Scene that just keeps the cubelets it was given."""

    def __init__(self):
        self.nodes: List[Any] = []

    def add(self, cubelet: Any) -> None:
        self.nodes.append(cubelet)

    def remove(self, cubelet: Any) -> None:
        if cubelet in self.nodes:
            self.nodes.remove(cubelet)

    def __len__(self) -> int:
        return len(self.nodes)
