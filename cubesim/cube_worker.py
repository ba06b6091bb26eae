#!/usr/bin/env python3
# SPDX-License-Identifier: LicenseRef-CubeAlarm-Custom-Attribution
# Copyright (c) 2025 Paul Shapiro
"""
Cube worker for the REST/WebSocket server.

Runs a TwistyCube on its own asyncio event loop in a daemon thread so that
synchronous callers (Flask routes) can drive moves, scrambles and solves.
All access to the cube happens on that loop's thread.
"""

import asyncio
import inspect
import logging
import random
import threading
from typing import Any, Callable, Dict, List, Optional

try:
    from .adapters import AsyncioAnimator, InstantAnimator
    from .cube import TwistyCube
    from .notation import CubeMove
    from .state_store import restore_cube, snapshot_cube
except ImportError:
    from adapters import AsyncioAnimator, InstantAnimator
    from cube import TwistyCube
    from notation import CubeMove
    from state_store import restore_cube, snapshot_cube

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120.0  # seconds; long scrambles on big cubes take a while
STARTUP_TIMEOUT = 5.0


class CubeWorker:
    """Owns one cube and the event loop thread it lives on."""

    def __init__(self, size: int = 3, animated: bool = True, speed: float = 1.0,
                 rng: Optional[random.Random] = None):
        self.size = size
        self.animated = animated
        self.speed = speed
        self.cube: Optional[TwistyCube] = None
        self.running = False

        self._rng = rng
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._ready = threading.Event()
        self._move_callbacks: List[Callable[[dict], None]] = []
        self._solve_callbacks: List[Callable[[], None]] = []

    def add_move_callback(self, callback: Callable[[dict], None]) -> None:
        """Add a callback to be called with each move as a dict."""
        self._move_callbacks.append(callback)

    def add_solve_callback(self, callback: Callable[[], None]) -> None:
        """Add a callback to be called when the cube becomes solved."""
        self._solve_callbacks.append(callback)

    def start(self) -> None:
        """Start the event loop thread and build the cube."""
        if self.running:
            return
        self._ready.clear()
        self._thread = threading.Thread(target=self._run_loop, daemon=True)
        self._thread.start()
        if not self._ready.wait(STARTUP_TIMEOUT):
            raise RuntimeError("Cube worker failed to start")
        self.running = True
        logger.info(f"🚀 Started cube worker for {self.cube.get_display_name()}")

    def stop(self) -> None:
        """Dispose the cube and stop the loop thread."""
        if not self.running:
            return
        self.running = False
        logger.info("🛑 Stopping cube worker...")
        self._loop.call_soon_threadsafe(self._loop.stop)
        if self._thread:
            self._thread.join(timeout=5.0)

    def _run_loop(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        animator = AsyncioAnimator(loop, speed=self.speed) if self.animated else InstantAnimator()
        self.cube = TwistyCube(
            self.size, animator=animator, rng=self._rng,
            on_move=self._handle_move, on_solve_complete=self._handle_solved,
        )
        self._ready.set()
        try:
            loop.run_forever()
        finally:
            self.cube.dispose()
            loop.close()

    def _handle_move(self, move: CubeMove) -> None:
        move_dict = move.to_dict()
        logger.info(f"🔄 Move: {move.notation}")
        for callback in self._move_callbacks:
            try:
                callback(move_dict)
            except Exception as e:
                logger.error(f"❌ Error in move callback: {e}")

    def _handle_solved(self) -> None:
        for callback in self._solve_callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(f"❌ Error in solve callback: {e}")

    def run(self, action: Callable[[TwistyCube], Any], timeout: Optional[float] = DEFAULT_TIMEOUT) -> Any:
        """Run `action(cube)` on the loop thread and return its (awaited) result."""
        if not self.running or self._loop is None:
            raise RuntimeError("Cube worker is not running")

        async def _call():
            result = action(self.cube)
            if inspect.isawaitable(result):
                result = await result
            return result

        future = asyncio.run_coroutine_threadsafe(_call(), self._loop)
        return future.result(timeout)

    # Synchronous helpers used by the server

    def execute_move(self, notation: str) -> Dict[str, Any]:
        outcome = self.run(lambda cube: cube.move(notation))
        return {
            'move': outcome.move.notation if outcome.move else notation,
            'accepted': outcome.accepted,
            'solved': outcome.solved,
        }

    def scramble(self, move_count: Optional[int] = None) -> List[str]:
        return self.run(lambda cube: cube.scramble(move_count))

    def solve(self) -> List[str]:
        return self.run(lambda cube: cube.solve())

    def undo(self) -> Optional[str]:
        move = self.run(lambda cube: cube.undo())
        return move.notation if move else None

    def redo(self) -> Optional[str]:
        move = self.run(lambda cube: cube.redo())
        return move.notation if move else None

    def reset(self) -> None:
        self.run(lambda cube: cube.reset())

    def twist_corner(self, index: int, clockwise: bool = True) -> Optional[str]:
        move = self.run(lambda cube: cube.twist_corner(index, clockwise))
        return move.notation if move else None

    def state(self) -> Dict[str, List[List[str]]]:
        return self.run(lambda cube: cube.get_cube_state())

    def available_moves(self) -> List[str]:
        return self.run(lambda cube: cube.get_available_moves())

    def snapshot(self) -> Dict[str, Any]:
        return self.run(snapshot_cube)

    def restore(self, data: Dict[str, Any]) -> None:
        self.run(lambda cube: restore_cube(cube, data))

    def status(self) -> Dict[str, Any]:
        def _status(cube: TwistyCube) -> Dict[str, Any]:
            return {
                'size': cube.size,
                'cube_type': cube.get_cube_type(),
                'name': cube.get_display_name(),
                'complexity': cube.get_complexity_level(),
                'solved': cube.is_solved(),
                'history_length': len(cube.get_move_history()),
                'can_undo': cube.can_undo,
                'can_redo': cube.can_redo,
                'status': cube.status,
            }
        return self.run(_status)
