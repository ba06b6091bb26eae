#!/usr/bin/env python3
"""
Lifecycle tests: scramble, solve-by-reversal, undo/redo, the rotation gate,
disposal mid-rotation, corner twists and the callbacks a host app relies on.
"""

import asyncio
import random

import pytest

from cubesim import (
    AsyncioAnimator, FrameAnimator, MemoryScene, TwistyCube,
)
from cubesim.config import SUPPORTED_SIZES
from cubesim.notation import CORNER_TWIST


@pytest.mark.parametrize("size", SUPPORTED_SIZES)
def test_fresh_and_reset_cubes_are_solved(size):
    cube = TwistyCube(size)
    assert cube.is_solved()
    assert len(cube.get_cubelets()) == size ** 3
    cube.execute_move("R")
    cube.execute_move("U")
    assert not cube.is_solved()
    cube.reset()
    assert cube.is_solved()
    assert cube.get_move_history() == []


def test_scramble_never_repeats_a_letter():
    cube = TwistyCube(3, rng=random.Random(42))
    moves = asyncio.run(cube.scramble(25))
    assert len(moves) == 25
    for previous, current in zip(moves, moves[1:]):
        assert previous[0] != current[0]
    assert not any(m[0] in "XYZ" for m in moves)
    assert not cube.is_solved()
    assert [m.notation for m in cube.get_move_history()] == moves


@pytest.mark.parametrize("size", SUPPORTED_SIZES)
def test_scramble_uses_size_default_length(size):
    cube = TwistyCube(size, rng=random.Random(size))
    moves = asyncio.run(cube.scramble())
    assert len(moves) == cube.rules.scramble_moves
    assert set(moves) <= set(cube.get_available_moves())


@pytest.mark.parametrize("size", SUPPORTED_SIZES)
def test_solve_reverses_history(size):
    solved_calls = []
    cube = TwistyCube(size, rng=random.Random(7), on_solve_complete=lambda: solved_calls.append(True))
    asyncio.run(cube.scramble(12))
    cube.execute_move("X")
    replayed = asyncio.run(cube.solve())
    assert len(replayed) == 13
    assert replayed[0] == "X'"
    assert cube.is_solved()
    assert cube.get_move_history() == []
    assert solved_calls == [True]


def test_solve_with_empty_history_does_nothing():
    cube = TwistyCube(3)
    assert asyncio.run(cube.solve()) == []
    assert cube.is_solved()


def test_move_callback_fires_per_move():
    moves = []
    cube = TwistyCube(3, on_move=lambda move: moves.append(move.notation))
    for notation in ("R", "U'"):
        cube.execute_move(notation)
    assert moves == ["R", "U'"]


def test_solve_callback_after_every_move_that_leaves_cube_solved():
    calls = []
    cube = TwistyCube(3)
    cube.set_solve_callback(lambda: calls.append(True))
    cube.execute_move("X")
    assert calls == [True]
    cube.execute_move("R")
    assert calls == [True]
    cube.execute_move("R'")
    assert calls == [True, True]
    for _ in range(4):
        cube.execute_move("M")
    assert calls == [True, True, True]


def test_undo_redo_cursor():
    async def run():
        cube = TwistyCube(3)
        cube.execute_move("R")
        cube.execute_move("U")
        undone = await cube.undo()
        assert undone.notation == "U'"
        assert [m.notation for m in cube.get_move_history()] == ["R"]
        assert cube.can_redo
        redone = await cube.redo()
        assert redone.notation == "U"
        assert [m.notation for m in cube.get_move_history()] == ["R", "U"]
        await cube.undo()
        cube.execute_move("F")
        assert [m.notation for m in cube.get_move_history()] == ["R", "F"]
        assert not cube.can_redo
        assert await cube.redo() is None
        await cube.undo()
        await cube.undo()
        assert await cube.undo() is None
        assert cube.is_solved()

    asyncio.run(run())


def test_second_move_during_rotation_is_dropped():
    animator = FrameAnimator()
    cube = TwistyCube(3, animator=animator)
    first = cube.execute_move("R")
    second = cube.execute_move("U")
    assert first.accepted
    assert not second.accepted
    assert cube.status == "animating"
    assert cube.is_solved()  # nothing applied until completion

    animator.tick(0.1)
    assert not first.completed
    animator.tick(1.0)
    assert first.completed
    assert cube.status == "idle"
    assert first.solved is False
    assert [m.notation for m in cube.get_move_history()] == ["R"]


def test_twist_corner_dropped_while_animating():
    animator = FrameAnimator()
    cube = TwistyCube(2, animator=animator)
    cube.execute_move("R")
    assert cube.twist_corner(1) is None
    animator.tick(1.0)
    assert cube.twist_corner(1) is not None


def test_dispose_mid_rotation_leaves_cubelets_untouched():
    animator = FrameAnimator()
    scene = MemoryScene()
    cube = TwistyCube(3, animator=animator, scene=scene)
    cubelets = cube.get_cubelets()
    before = [c.position.copy() for c in cubelets]

    outcome = cube.execute_move("R")
    cube.dispose()
    animator.tick(1.0)

    assert outcome.completed
    assert outcome.solved is None
    assert all((c.position == p).all() for c, p in zip(cubelets, before))
    assert len(scene) == 0
    assert cube.get_move_history() == []


def test_disposed_cube_is_a_no_op():
    cube = TwistyCube(3)
    cube.dispose()
    assert cube.get_cube_state() == {}
    assert cube.is_solved() is False
    assert cube.execute_move("R").accepted is False
    assert asyncio.run(cube.scramble(5)) == []
    assert asyncio.run(cube.solve()) == []
    assert asyncio.run(cube.undo()) is None
    assert cube.twist_corner(1) is None
    cube.reset()
    assert cube.get_cubelets() == []


def test_asyncio_animator_completes_each_move():
    async def run():
        cube = TwistyCube(4, animator=AsyncioAnimator(speed=100.0))
        first = cube.execute_move("R")
        assert not first.completed
        assert not cube.execute_move("U").accepted
        while not first.completed:
            await asyncio.sleep(0.001)
        outcome = await cube.move("R'")
        assert outcome.completed
        assert cube.is_solved()
        moves = await cube.scramble(5)
        assert len(moves) == 5
        await cube.solve()
        assert cube.is_solved()

    asyncio.run(run())


def test_sequence_blocks_outside_moves():
    async def run():
        animator = FrameAnimator()
        cube = TwistyCube(3, animator=animator, rng=random.Random(1))
        task = asyncio.ensure_future(cube.scramble(3))
        await asyncio.sleep(0)
        assert not cube.execute_move("R").accepted
        assert await cube.solve() == []
        while not task.done():
            animator.tick(1.0)
            await asyncio.sleep(0)
        assert len(task.result()) == 3
        assert len(cube.get_move_history()) == 3

    asyncio.run(run())


def test_reset_stops_a_running_scramble():
    async def run():
        animator = FrameAnimator()
        cube = TwistyCube(3, animator=animator, rng=random.Random(3))
        task = asyncio.ensure_future(cube.scramble(10))
        await asyncio.sleep(0)
        cube.reset()
        while not task.done():
            animator.tick(1.0)
            await asyncio.sleep(0)
        assert len(task.result()) == 1
        assert cube.is_solved()
        assert cube.get_move_history() == []

    asyncio.run(run())


def test_sound_flag_is_sampled_per_rotation():
    cube = TwistyCube(3, sound_enabled=lambda: True)
    assert cube.execute_move("R").request.play_sound
    cube.set_sound_enabled_callback(lambda: False)
    assert not cube.execute_move("R'").request.play_sound


def test_scene_tracks_cubelets():
    scene = MemoryScene()
    cube = TwistyCube(4, scene=scene)
    assert len(scene) == 64
    cube.reset()
    assert len(scene) == 64
    assert set(map(id, scene.nodes)) == set(map(id, cube.get_cubelets()))


@pytest.mark.parametrize("size", [2, 3])
def test_corner_twist_round_trip(size):
    cube = TwistyCube(size)
    move = cube.twist_corner(1)
    assert move.kind == CORNER_TWIST
    assert not cube.is_solved()
    cube.twist_corner(1)
    cube.twist_corner(1)
    assert cube.is_solved()
    cube.twist_corner(8, clockwise=False)
    assert not cube.is_solved()
    asyncio.run(cube.solve())
    assert cube.is_solved()
    assert cube.get_move_history() == []


def test_corner_twist_after_turns_is_undone_by_solve():
    cube = TwistyCube(2)
    cube.execute_move("R")
    cube.twist_corner(3)
    cube.execute_move("U'")
    asyncio.run(cube.solve())
    assert cube.is_solved()


def test_corner_twist_rejects_bad_index():
    cube = TwistyCube(2)
    with pytest.raises(ValueError):
        cube.twist_corner(0)
    with pytest.raises(ValueError):
        cube.twist_corner(9)


def test_cube_metadata():
    cube = TwistyCube(5)
    assert cube.get_cube_type() == "5x5x5"
    assert cube.get_complexity_level() == 4
    assert cube.get_display_name() == "Professor's Cube (5x5x5)"
    assert "M" in cube.get_available_moves()
    assert "R2'" in cube.get_available_moves()
