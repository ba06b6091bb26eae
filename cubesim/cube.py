# SPDX-License-Identifier: LicenseRef-CubeAlarm-Custom-Attribution
# Copyright (c) 2025 Paul Shapiro
"""
Size-parameterised twisty cube engine.

One TwistyCube covers every supported size; the differences between the
2x2x2 and the 6x6x6 live in the CubeSizeRules value it is built with.

A cube is either idle or animating. A move issued while a rotation is in
flight is dropped, never queued. Cubelets are only mutated when the
animator reports the rotation complete, and not at all once the cube has
been disposed.
"""

from __future__ import annotations
import asyncio
import functools
import inspect
import logging
import random
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

try:
    from .adapters import Animator, InstantAnimator, RotationRequest, Scene
    from .config import CubeSizeRules, SLICE_LAYER_TOLERANCE, rules_for
    from .cubelet import Cubelet, build_colors
    from .direction import handler_for
    from .errors import CubeBusyError, EmptyStateError, InvalidMoveError
    from .geometry import (
        CLOCKWISE_ANGLE, FACE_AXIS, SLICE_AXIS, WHOLE_CUBE_AXIS,
        face_layer_index, lattice_coordinates, lattice_index, middle_layer_index,
        select_layer, tolerance_for,
    )
    from .notation import (
        CORNER_TWIST, EQUATOR, FACE, INNER_SLICE, KIND_LETTERS, MIDDLE, STANDING,
        THIRD_LAYER_SLICE, WHOLE_CUBE_X, WHOLE_CUBE_Y, WHOLE_CUBE_Z, CubeMove,
        available_moves, check_legal, parse_move, scramble_catalog,
    )
except ImportError:
    from adapters import Animator, InstantAnimator, RotationRequest, Scene
    from config import CubeSizeRules, SLICE_LAYER_TOLERANCE, rules_for
    from cubelet import Cubelet, build_colors
    from direction import handler_for
    from errors import CubeBusyError, EmptyStateError, InvalidMoveError
    from geometry import (
        CLOCKWISE_ANGLE, FACE_AXIS, SLICE_AXIS, WHOLE_CUBE_AXIS,
        face_layer_index, lattice_coordinates, lattice_index, middle_layer_index,
        select_layer, tolerance_for,
    )
    from notation import (
        CORNER_TWIST, EQUATOR, FACE, INNER_SLICE, KIND_LETTERS, MIDDLE, STANDING,
        THIRD_LAYER_SLICE, WHOLE_CUBE_X, WHOLE_CUBE_Y, WHOLE_CUBE_Z, CubeMove,
        available_moves, check_legal, parse_move, scramble_catalog,
    )

logger = logging.getLogger(__name__)

IDLE = "idle"
ANIMATING = "animating"

FACE_GRID_ORDER = ('U', 'D', 'L', 'R', 'F', 'B')

# Long face names accepted by the rotate_* methods
FACE_NAMES = {
    'FRONT': 'F', 'BACK': 'B', 'RIGHT': 'R', 'LEFT': 'L', 'TOP': 'U', 'BOTTOM': 'D',
    'UP': 'U', 'DOWN': 'D',
}


@dataclass
class MoveOutcome:
    """Result of issuing a move."""
    move: Optional[CubeMove]
    accepted: bool
    request: Optional[RotationRequest] = None
    solved: Optional[bool] = None  # set once the rotation completes

    @property
    def completed(self) -> bool:
        return self.request is not None and self.request.completed


def _empty_on_disposed(default_factory: Callable):
    """Log EmptyStateError and return an empty result instead of raising."""
    def decorator(method):
        if inspect.iscoroutinefunction(method):
            @functools.wraps(method)
            async def async_wrapper(self, *args, **kwargs):
                try:
                    return await method(self, *args, **kwargs)
                except EmptyStateError as e:
                    logger.warning(f"{method.__name__} ignored: {e}")
                    return default_factory()
            return async_wrapper

        @functools.wraps(method)
        def wrapper(self, *args, **kwargs):
            try:
                return method(self, *args, **kwargs)
            except EmptyStateError as e:
                logger.warning(f"{method.__name__} ignored: {e}")
                return default_factory()
        return wrapper
    return decorator


def _dropped_outcome() -> MoveOutcome:
    return MoveOutcome(move=None, accepted=False)


class TwistyCube:
    """An NxNxN twisty cube: cubelets, move history and the rotation gate."""

    def __init__(self, size: int = 3, rules: Optional[CubeSizeRules] = None,
                 animator: Optional[Animator] = None, scene: Optional[Scene] = None,
                 on_move: Optional[Callable[[CubeMove], None]] = None,
                 on_solve_complete: Optional[Callable[[], None]] = None,
                 sound_enabled: Optional[Callable[[], bool]] = None,
                 rng: Optional[random.Random] = None):
        self.rules = rules or rules_for(size)
        self.size = self.rules.size
        self.animator = animator or InstantAnimator()
        self.scene = scene
        self.on_move = on_move
        self.on_solve_complete = on_solve_complete
        self.sound_enabled = sound_enabled
        self._direction = handler_for(self.rules.direction_profile)
        self._rng = rng or random.Random()

        self._cubelets: List[Cubelet] = []
        self._history: List[CubeMove] = []
        self._cursor = 0  # number of history entries currently applied
        self._status = IDLE
        self._sequence_active = False
        self._disposed = False
        self._pending: Optional[RotationRequest] = None
        self._generation = 0  # bumped whenever the cubelet set is replaced

        self._build()
        logger.info(f"Created {self.rules.display_name} with {len(self._cubelets)} cubelets")

    # Lifecycle

    def _build(self) -> None:
        coords = lattice_coordinates(self.rules)
        n = self.size
        for x in range(n):
            for y in range(n):
                for z in range(n):
                    cubelet = Cubelet(
                        position=[coords[x], coords[y], coords[z]],
                        colors=build_colors((x, y, z), n, self.rules.colors),
                    )
                    self._cubelets.append(cubelet)
                    if self.scene is not None:
                        self.scene.add(cubelet)

    def _clear_cubelets(self) -> None:
        if self.scene is not None:
            for cubelet in self._cubelets:
                self.scene.remove(cubelet)
        self._cubelets = []

    @_empty_on_disposed(lambda: None)
    def reset(self) -> None:
        """Rebuild a solved cube and forget all history."""
        if self._disposed:
            raise EmptyStateError("cannot reset a disposed cube")
        self._clear_cubelets()
        self._generation += 1
        self._history.clear()
        self._cursor = 0
        self._pending = None
        self._status = IDLE
        self._build()
        logger.info(f"Reset {self.get_cube_type()} cube")

    def dispose(self) -> None:
        """Release the cubelets; a rotation still in flight will not touch them."""
        if self._disposed:
            return
        self._disposed = True
        self._generation += 1
        self._clear_cubelets()
        self._history.clear()
        self._cursor = 0
        if self._pending is not None:
            logger.info(f"Disposed {self.get_cube_type()} cube with {self._pending.move.notation} in flight")
        self._status = IDLE
        logger.info(f"Disposed {self.get_cube_type()} cube")

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def status(self) -> str:
        return self._status

    @property
    def is_animating(self) -> bool:
        return self._status == ANIMATING

    def _interrupted(self, generation: int) -> bool:
        return self._disposed or generation != self._generation

    def _require_cubelets(self) -> None:
        if not self._cubelets:
            reason = "cube has been disposed" if self._disposed else "cube has no cubelets"
            raise EmptyStateError(reason)

    # Callbacks

    def set_move_callback(self, callback: Optional[Callable[[CubeMove], None]]) -> None:
        self.on_move = callback

    def set_solve_callback(self, callback: Optional[Callable[[], None]]) -> None:
        self.on_solve_complete = callback

    def set_sound_enabled_callback(self, callback: Optional[Callable[[], bool]]) -> None:
        self.sound_enabled = callback

    def _notify_move(self, move: CubeMove) -> None:
        if self.on_move:
            self.on_move(move)

    def _notify_solved(self) -> None:
        logger.info(f"🎉 {self.get_cube_type()} cube solved")
        if self.on_solve_complete:
            self.on_solve_complete()

    def _sound_on(self) -> bool:
        return bool(self.sound_enabled()) if self.sound_enabled else False

    # Layer planning

    def _plan(self, move: CubeMove) -> Tuple[int, float, List[Cubelet]]:
        """Axis, signed angle and affected cubelets for a move."""
        positions = [c.position for c in self._cubelets]
        if move.kind in (FACE, INNER_SLICE, THIRD_LAYER_SLICE):
            axis, _ = FACE_AXIS[move.face]
            index = face_layer_index(move.face, move.depth, self.size)
            selected = select_layer(positions, axis, index, self.rules, tolerance_for(move.depth))
            clockwise = self._direction.convert(move.clockwise)
            base_angle = CLOCKWISE_ANGLE[move.face] * self.rules.engine_sign
        elif move.kind in (MIDDLE, EQUATOR, STANDING):
            letter = KIND_LETTERS[move.kind]
            axis = SLICE_AXIS[letter]
            index = middle_layer_index(self.size)
            selected = select_layer(positions, axis, index, self.rules, SLICE_LAYER_TOLERANCE)
            clockwise = move.clockwise
            base_angle = CLOCKWISE_ANGLE[letter]
        elif move.kind in (WHOLE_CUBE_X, WHOLE_CUBE_Y, WHOLE_CUBE_Z):
            letter = KIND_LETTERS[move.kind]
            axis = WHOLE_CUBE_AXIS[letter]
            selected = list(range(len(self._cubelets)))
            clockwise = self._direction.convert(move.clockwise)
            base_angle = CLOCKWISE_ANGLE[letter] * self.rules.engine_sign
        else:
            raise ValueError(f"{move.kind} moves are not rotations")
        angle = base_angle if clockwise else -base_angle
        return axis, angle, [self._cubelets[i] for i in selected]

    # Rotation gate

    def _issue(self, move: CubeMove, record: bool = True, from_sequence: bool = False,
               announce_solved: bool = True) -> MoveOutcome:
        self._require_cubelets()
        if self._status == ANIMATING or (self._sequence_active and not from_sequence):
            logger.info(f"Dropped {move.notation}: rotation already in progress")
            return MoveOutcome(move=move, accepted=False)

        axis, angle, cubelets = self._plan(move)
        request = RotationRequest(
            move=move, axis=axis, angle=angle, cubelets=cubelets,
            duration=self.rules.animation_duration, play_sound=self._sound_on(),
        )
        outcome = MoveOutcome(move=move, accepted=True, request=request)
        request._on_complete = lambda r: self._finish_rotation(r, outcome, record, announce_solved)

        self._status = ANIMATING
        self._pending = request
        self._notify_move(move)
        self.animator.start(request)
        return outcome

    def _finish_rotation(self, request: RotationRequest, outcome: MoveOutcome,
                         record: bool, announce_solved: bool) -> None:
        if self._disposed or self._pending is not request:
            logger.debug(f"Ignoring stale completion of {request.move.notation}")
            return
        self._pending = None
        for cubelet in request.cubelets:
            cubelet.rotate(request.axis, request.angle)
        if record:
            self._record(request.move)
        self._status = IDLE
        outcome.solved = self.is_solved()
        if outcome.solved and announce_solved:
            self._notify_solved()

    def _record(self, move: CubeMove) -> None:
        del self._history[self._cursor:]
        self._history.append(move)
        self._cursor = len(self._history)

    async def _wait(self, outcome: MoveOutcome) -> None:
        request = outcome.request
        if request is None or request.completed:
            return
        future = asyncio.get_running_loop().create_future()

        def _resolve(_request):
            if not future.done():
                future.set_result(None)

        request.add_done_callback(_resolve)
        await future

    # Moves

    @_empty_on_disposed(_dropped_outcome)
    def execute_move(self, notation: str) -> MoveOutcome:
        """
        Parse and issue one move.

        Raises InvalidMoveError / UnsupportedMoveError before anything changes.
        Returns an outcome with accepted=False when the move was dropped by
        the rotation gate.
        """
        move = parse_move(notation)
        check_legal(move, self.rules)
        return self._issue(move)

    async def move(self, notation: str) -> MoveOutcome:
        """Issue a move and wait for its rotation to complete."""
        outcome = self.execute_move(notation)
        await self._wait(outcome)
        return outcome

    def _face_letter(self, face: str) -> str:
        letter = FACE_NAMES.get(str(face).upper(), str(face).upper())
        if letter not in FACE_AXIS:
            raise InvalidMoveError(str(face), "unknown face")
        return letter

    @_empty_on_disposed(_dropped_outcome)
    def _rotate(self, move: CubeMove) -> MoveOutcome:
        check_legal(move, self.rules)
        return self._issue(move)

    def rotate_face(self, face: str, clockwise: bool = True) -> MoveOutcome:
        return self._rotate(CubeMove(FACE, self._face_letter(face), clockwise))

    def rotate_inner_slice(self, face: str, clockwise: bool = True) -> MoveOutcome:
        return self._rotate(CubeMove(INNER_SLICE, self._face_letter(face), clockwise, depth=1))

    def rotate_third_layer_slice(self, face: str, clockwise: bool = True) -> MoveOutcome:
        return self._rotate(CubeMove(THIRD_LAYER_SLICE, self._face_letter(face), clockwise, depth=2))

    def rotate_middle(self, clockwise: bool = True) -> MoveOutcome:
        return self._rotate(CubeMove(MIDDLE, None, clockwise))

    def rotate_equator(self, clockwise: bool = True) -> MoveOutcome:
        return self._rotate(CubeMove(EQUATOR, None, clockwise))

    def rotate_standing(self, clockwise: bool = True) -> MoveOutcome:
        return self._rotate(CubeMove(STANDING, None, clockwise))

    def rotate_whole_cube_x(self, clockwise: bool = True) -> MoveOutcome:
        return self._rotate(CubeMove(WHOLE_CUBE_X, None, clockwise))

    def rotate_whole_cube_y(self, clockwise: bool = True) -> MoveOutcome:
        return self._rotate(CubeMove(WHOLE_CUBE_Y, None, clockwise))

    def rotate_whole_cube_z(self, clockwise: bool = True) -> MoveOutcome:
        return self._rotate(CubeMove(WHOLE_CUBE_Z, None, clockwise))

    def _corners(self) -> List[Cubelet]:
        return [c for c in self._cubelets if c.is_corner]

    def _apply_twist(self, move: CubeMove) -> None:
        self._corners()[move.corner - 1].twist_colors(move.clockwise)

    @_empty_on_disposed(lambda: None)
    def twist_corner(self, index: int, clockwise: bool = True) -> Optional[CubeMove]:
        """Cycle the stickers of one corner piece (1-8) without turning anything."""
        self._require_cubelets()
        if not 1 <= index <= 8:
            raise ValueError(f"Corner index must be between 1 and 8, got {index}")
        if self._status == ANIMATING or self._sequence_active:
            logger.info(f"Dropped corner twist {index}: rotation already in progress")
            return None
        move = CubeMove(CORNER_TWIST, None, clockwise, corner=index)
        self._notify_move(move)
        self._apply_twist(move)
        self._record(move)
        if self.is_solved():
            self._notify_solved()
        return move

    # Sequences

    def _sequence_blocked(self, name: str) -> bool:
        if self._status == ANIMATING or self._sequence_active:
            logger.info(f"{name} ignored: rotation already in progress")
            return True
        return False

    async def _replay(self, move: CubeMove) -> None:
        """Apply a move without recording it."""
        if move.kind == CORNER_TWIST:
            self._notify_move(move)
            self._apply_twist(move)
            return
        outcome = self._issue(move, record=False, from_sequence=True, announce_solved=False)
        await self._wait(outcome)

    @_empty_on_disposed(list)
    async def scramble(self, move_count: Optional[int] = None) -> List[str]:
        """Apply random moves, never the same letter twice in a row."""
        self._require_cubelets()
        if self._sequence_blocked("scramble"):
            return []
        count = self.rules.scramble_moves if move_count is None else int(move_count)
        if count < 0:
            raise ValueError(f"Scramble length must not be negative, got {count}")

        catalog = scramble_catalog(self.rules)
        generation = self._generation
        generated: List[str] = []
        last: Optional[str] = None
        self._sequence_active = True
        try:
            for _ in range(count):
                if self._interrupted(generation):
                    break
                notation = self._rng.choice(catalog)
                while last is not None and notation[0] == last[0]:
                    notation = self._rng.choice(catalog)
                outcome = self._issue(parse_move(notation), from_sequence=True, announce_solved=False)
                generated.append(notation)
                last = notation
                await self._wait(outcome)
        finally:
            self._sequence_active = False
        logger.info(f"Scrambled {self.get_cube_type()} cube with {len(generated)} moves: {' '.join(generated)}")
        return generated

    @_empty_on_disposed(list)
    async def solve(self) -> List[str]:
        """Undo the whole applied history, newest move first, then clear it."""
        self._require_cubelets()
        if self._sequence_blocked("solve"):
            return []
        applied = self._history[:self._cursor]
        if not applied:
            self._history.clear()
            self._cursor = 0
            return []

        replayed: List[str] = []
        generation = self._generation
        self._sequence_active = True
        try:
            for move in reversed(applied):
                if self._interrupted(generation):
                    break
                inverse = move.inverse()
                await self._replay(inverse)
                replayed.append(inverse.notation)
        finally:
            self._sequence_active = False
        if self._interrupted(generation):
            return replayed

        self._history.clear()
        self._cursor = 0
        logger.info(f"Solve replayed {len(replayed)} moves")
        if self.is_solved():
            self._notify_solved()
        return replayed

    @_empty_on_disposed(lambda: None)
    async def undo(self) -> Optional[CubeMove]:
        """Reverse the most recent applied move."""
        self._require_cubelets()
        if self._sequence_blocked("undo") or self._cursor == 0:
            return None
        inverse = self._history[self._cursor - 1].inverse()
        generation = self._generation
        self._sequence_active = True
        try:
            await self._replay(inverse)
        finally:
            self._sequence_active = False
        if not self._interrupted(generation):
            self._cursor -= 1
        return inverse

    @_empty_on_disposed(lambda: None)
    async def redo(self) -> Optional[CubeMove]:
        """Re-apply the move most recently undone."""
        self._require_cubelets()
        if self._sequence_blocked("redo") or self._cursor >= len(self._history):
            return None
        move = self._history[self._cursor]
        generation = self._generation
        self._sequence_active = True
        try:
            await self._replay(move)
        finally:
            self._sequence_active = False
        if not self._interrupted(generation):
            self._cursor += 1
        return move

    # Queries

    @_empty_on_disposed(dict)
    def get_cube_state(self) -> Dict[str, List[List[str]]]:
        """Facelet grid for each face, derived from the cubelets."""
        self._require_cubelets()
        n = self.size
        last = n - 1
        state = {face: [[''] * n for _ in range(n)] for face in FACE_GRID_ORDER}
        for cubelet in self._cubelets:
            x, y, z = (lattice_index(v, self.rules) for v in cubelet.position)
            if y == last:
                state['U'][z][x] = cubelet.facing_color(2)
            if y == 0:
                state['D'][last - z][x] = cubelet.facing_color(3)
            if x == 0:
                state['L'][last - y][last - z] = cubelet.facing_color(1)
            if x == last:
                state['R'][last - y][z] = cubelet.facing_color(0)
            if z == last:
                state['F'][last - y][last - x] = cubelet.facing_color(4)
            if z == 0:
                state['B'][last - y][x] = cubelet.facing_color(5)
        return state

    @_empty_on_disposed(lambda: False)
    def is_solved(self) -> bool:
        state = self.get_cube_state()
        if not state:
            return False
        for face in FACE_GRID_ORDER:
            first = state[face][0][0]
            if any(color != first for row in state[face] for color in row):
                return False
        return True

    def get_available_moves(self) -> List[str]:
        return available_moves(self.rules)

    def get_cube_type(self) -> str:
        return self.rules.cube_type

    def get_complexity_level(self) -> int:
        return self.rules.complexity_level

    def get_display_name(self) -> str:
        return self.rules.display_name

    def get_cubelets(self) -> List[Cubelet]:
        return list(self._cubelets)

    def get_move_history(self) -> List[CubeMove]:
        """Moves currently applied, oldest first."""
        return list(self._history[:self._cursor])

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._history)

    # Snapshot contract

    def snapshot_cubelets(self) -> List[Dict]:
        return [c.to_dict() for c in self._cubelets]

    def restore(self, cubelets: List[Cubelet], history: List[CubeMove]) -> None:
        """Replace cubelets and history wholesale (used when loading saved state)."""
        if self._disposed:
            raise EmptyStateError("cannot restore into a disposed cube")
        if self._status == ANIMATING or self._sequence_active:
            raise CubeBusyError("cannot restore while a rotation is in progress")
        self._generation += 1
        self._clear_cubelets()
        self._cubelets = list(cubelets)
        if self.scene is not None:
            for cubelet in self._cubelets:
                self.scene.add(cubelet)
        self._history = list(history)
        self._cursor = len(self._history)
