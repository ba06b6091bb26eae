#!/usr/bin/env python3
"""
Notation parsing, per-size legality and the move catalog.
"""

import pytest

from cubesim import InvalidMoveError, UnsupportedMoveError
from cubesim.config import SUPPORTED_SIZES, rules_for
from cubesim.notation import (
    CORNER_TWIST, EQUATOR, FACE, INNER_SLICE, MIDDLE, STANDING, THIRD_LAYER_SLICE,
    WHOLE_CUBE_X, CubeMove, available_moves, check_legal, parse_move, scramble_catalog,
)


@pytest.mark.parametrize("text, kind, face, clockwise, depth", [
    ("R", FACE, "R", True, 0),
    ("R'", FACE, "R", False, 0),
    ("f2", INNER_SLICE, "F", True, 1),
    ("U3'", THIRD_LAYER_SLICE, "U", False, 2),
    (" D ", FACE, "D", True, 0),
    ("M", MIDDLE, None, True, 0),
    ("E'", EQUATOR, None, False, 0),
    ("S", STANDING, None, True, 0),
    ("x'", WHOLE_CUBE_X, None, False, 0),
])
def test_parse_move(text, kind, face, clockwise, depth):
    move = parse_move(text)
    assert move.kind == kind
    assert move.face == face
    assert move.clockwise is clockwise
    assert move.depth == depth


@pytest.mark.parametrize("text", ["", "   ", "Q", "F4", "F1", "F''", "R2x", "RU", "'R", "2"])
def test_parse_rejects_bad_notation(text):
    with pytest.raises(InvalidMoveError):
        parse_move(text)


def test_parse_rejects_non_string():
    with pytest.raises(InvalidMoveError):
        parse_move(None)


def test_invalid_move_is_a_value_error():
    with pytest.raises(ValueError):
        parse_move("K")


@pytest.mark.parametrize("size, text", [
    (2, "R2"), (3, "R2"), (4, "R3"), (5, "U3'"),
    (2, "M"), (4, "E"), (6, "S'"),
    (3, "M2"), (5, "X2"), (6, "Y3"),
])
def test_unsupported_moves(size, text):
    with pytest.raises(UnsupportedMoveError) as info:
        check_legal(parse_move(text), rules_for(size))
    assert f"{size}x{size}x{size}" in str(info.value)


@pytest.mark.parametrize("size, expected", [(2, 18), (3, 24), (4, 30), (5, 36), (6, 42)])
def test_catalog_size(size, expected):
    assert len(available_moves(rules_for(size))) == expected


@pytest.mark.parametrize("size", SUPPORTED_SIZES)
def test_catalog_entries_are_legal_and_round_trip(size):
    rules = rules_for(size)
    for text in available_moves(rules):
        move = parse_move(text)
        check_legal(move, rules)
        assert move.notation == text


def test_catalog_order_for_6x6():
    moves = available_moves(rules_for(6))
    assert moves[:6] == ["F", "F'", "F2", "F2'", "F3", "F3'"]
    assert moves[-6:] == ["X", "X'", "Y", "Y'", "Z", "Z'"]


def test_scramble_catalog_skips_reorientation():
    catalog = scramble_catalog(rules_for(3))
    assert "X" not in catalog
    assert "M'" in catalog
    assert len(catalog) == 18


def test_inverse_and_dict_round_trip():
    move = parse_move("B2'")
    inverse = move.inverse()
    assert inverse.notation == "B2"
    assert inverse.inverse().notation == "B2'"
    restored = CubeMove.from_dict(move.to_dict())
    assert restored.notation == "B2'"
    assert restored.kind == INNER_SLICE


def test_corner_twist_record():
    move = CubeMove(CORNER_TWIST, None, False, corner=4)
    assert move.notation == "C4'"
    assert move.inverse().notation == "C4"
    assert move.to_dict()['corner'] == 4
    with pytest.raises(ValueError):
        CubeMove.from_dict({'kind': 'halfTurn'})
