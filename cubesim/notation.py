# SPDX-License-Identifier: LicenseRef-CubeAlarm-Custom-Attribution
# Copyright (c) 2025 Paul Shapiro
"""
Move notation: parsing, per-size legality and the move record kept in history.

Grammar:  Letter [Depth] [Prime]
  Letter ::= F|B|R|L|U|D|M|E|S|X|Y|Z
  Depth  ::= 2 | 3     (second / third layer in from the named face)
  Prime  ::= '         (counter-clockwise)

"F2" is the inner slice behind F, not a half turn.
"""

from __future__ import annotations
import re
import time
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

try:
    from .config import CubeSizeRules
    from .errors import InvalidMoveError, UnsupportedMoveError
    from .geometry import FACE_LETTERS
except ImportError:
    from config import CubeSizeRules
    from errors import InvalidMoveError, UnsupportedMoveError
    from geometry import FACE_LETTERS

FACE = "face"
INNER_SLICE = "innerSlice"
THIRD_LAYER_SLICE = "thirdLayerSlice"
MIDDLE = "middle"
EQUATOR = "equator"
STANDING = "standing"
WHOLE_CUBE_X = "wholeCubeX"
WHOLE_CUBE_Y = "wholeCubeY"
WHOLE_CUBE_Z = "wholeCubeZ"
CORNER_TWIST = "cornerTwist"

MOVE_KINDS = (
    FACE, INNER_SLICE, THIRD_LAYER_SLICE, MIDDLE, EQUATOR, STANDING,
    WHOLE_CUBE_X, WHOLE_CUBE_Y, WHOLE_CUBE_Z, CORNER_TWIST,
)

SLICE_KINDS = {'M': MIDDLE, 'E': EQUATOR, 'S': STANDING}
WHOLE_CUBE_KINDS = {'X': WHOLE_CUBE_X, 'Y': WHOLE_CUBE_Y, 'Z': WHOLE_CUBE_Z}
DEPTH_KINDS = {0: FACE, 1: INNER_SLICE, 2: THIRD_LAYER_SLICE}
KIND_LETTERS: Dict[str, str] = {
    **{kind: letter for letter, kind in SLICE_KINDS.items()},
    **{kind: letter for letter, kind in WHOLE_CUBE_KINDS.items()},
}

_MOVE_PATTERN = re.compile(r"^([A-Z])(\d)?(')?$")
_LETTERS = set(FACE_LETTERS) | set(SLICE_KINDS) | set(WHOLE_CUBE_KINDS)


@dataclass
class CubeMove:
    """A single move, as parsed from notation and as stored in history."""
    kind: str
    face: Optional[str]  # F/B/R/L/U/D for face-relative moves
    clockwise: bool  # in notation terms, before any direction profile
    depth: int = 0  # 0 = outer face, 1 = inner slice, 2 = third layer
    corner: Optional[int] = None  # 1-8, corner twists only
    timestamp: float = field(default_factory=time.time)

    @property
    def letter(self) -> str:
        if self.kind == CORNER_TWIST:
            return 'C'
        return self.face if self.face else KIND_LETTERS[self.kind]

    @property
    def notation(self) -> str:
        prime = "" if self.clockwise else "'"
        if self.kind == CORNER_TWIST:
            return f"C{self.corner}{prime}"
        depth = str(self.depth + 1) if self.depth else ""
        return f"{self.letter}{depth}{prime}"

    def inverse(self) -> 'CubeMove':
        return replace(self, clockwise=not self.clockwise, timestamp=time.time())

    def to_dict(self) -> Dict:
        return {
            'kind': self.kind,
            'face': self.face,
            'clockwise': self.clockwise,
            'depth': self.depth,
            'corner': self.corner,
            'move': self.notation,
            'timestamp': self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'CubeMove':
        kind = data.get('kind')
        if kind not in MOVE_KINDS:
            raise ValueError(f"Unknown move kind: {kind!r}")
        return cls(
            kind=kind,
            face=data.get('face'),
            clockwise=bool(data.get('clockwise', True)),
            depth=int(data.get('depth', 0)),
            corner=data.get('corner'),
            timestamp=float(data.get('timestamp') or time.time()),
        )


def parse_move(notation: str) -> CubeMove:
    """Parse notation into a move. Raises InvalidMoveError on bad syntax."""
    if not isinstance(notation, str):
        raise InvalidMoveError(repr(notation), "notation must be a string")
    text = notation.strip().upper()
    match = _MOVE_PATTERN.match(text)
    if not match:
        raise InvalidMoveError(notation)
    letter, digit, prime = match.groups()
    if letter not in _LETTERS:
        raise InvalidMoveError(notation, f"unknown letter {letter}")
    if digit is not None and digit not in ('2', '3'):
        raise InvalidMoveError(notation, f"unknown depth {digit}")
    depth = int(digit) - 1 if digit else 0
    clockwise = prime is None

    if letter in SLICE_KINDS:
        return CubeMove(kind=SLICE_KINDS[letter], face=None, clockwise=clockwise, depth=depth)
    if letter in WHOLE_CUBE_KINDS:
        return CubeMove(kind=WHOLE_CUBE_KINDS[letter], face=None, clockwise=clockwise, depth=depth)
    return CubeMove(kind=DEPTH_KINDS[depth], face=letter, clockwise=clockwise, depth=depth)


def check_legal(move: CubeMove, rules: CubeSizeRules) -> None:
    """Raise UnsupportedMoveError when the move does not exist on this size."""
    if move.kind in (FACE, INNER_SLICE, THIRD_LAYER_SLICE):
        if move.depth and move.depth not in rules.inner_depths:
            raise UnsupportedMoveError(move.notation, rules.size)
    elif move.kind in (MIDDLE, EQUATOR, STANDING):
        if move.depth or not rules.has_middle_slices:
            raise UnsupportedMoveError(move.notation, rules.size)
    elif move.kind in (WHOLE_CUBE_X, WHOLE_CUBE_Y, WHOLE_CUBE_Z):
        if move.depth:
            raise UnsupportedMoveError(move.notation, rules.size)
    else:
        raise UnsupportedMoveError(move.notation, rules.size)


def available_moves(rules: CubeSizeRules) -> List[str]:
    """Every legal move for the size, in catalog order."""
    moves = []
    for face in FACE_LETTERS:
        moves += [face, f"{face}'"]
        for depth in rules.inner_depths:
            moves += [f"{face}{depth + 1}", f"{face}{depth + 1}'"]
    if rules.has_middle_slices:
        for letter in SLICE_KINDS:
            moves += [letter, f"{letter}'"]
    for letter in WHOLE_CUBE_KINDS:
        moves += [letter, f"{letter}'"]
    return moves


def scramble_catalog(rules: CubeSizeRules) -> List[str]:
    """Legal moves that change the puzzle state (no whole-cube turns)."""
    return [m for m in available_moves(rules) if m[0] not in WHOLE_CUBE_KINDS]
