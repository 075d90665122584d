"""Scorecard value type and generator."""

import random
import uuid
from dataclasses import dataclass
from typing import Sequence, Tuple

from .errors import ArgumentError

FREE_SPACE = 'FREE SPACE'
GRID_SIZE = 5
CENTER = GRID_SIZE // 2
# Every cell but the center holds a phrase
MIN_PHRASES = GRID_SIZE * GRID_SIZE - 1


@dataclass(frozen=True)
class Scorecard:
    id: str
    rows: Tuple[Tuple[str, ...], ...]

    @property
    def size(self) -> int:
        return len(self.rows)

    def value(self, row: int, col: int) -> str:
        return self.rows[row][col]

    @property
    def fingerprint(self) -> str:
        """Row-major content key; two cards with equal fingerprints are the same card."""
        return '-'.join(cell for row in self.rows for cell in row)

    def to_dict(self):
        return {
            'id': self.id,
            'rows': [list(row) for row in self.rows],
        }

    @classmethod
    def from_dict(cls, data) -> 'Scorecard':
        return cls(id=str(data['id']), rows=tuple(tuple(str(c) for c in row) for row in data['rows']))


def generate_scorecard(phrases: Sequence[str], rng: random.Random) -> Scorecard:
    """Build a 5x5 card from a shuffled copy of ``phrases`` with FREE SPACE in the middle.

    ``rng`` should be unpredictable (``random.SystemRandom``); preview cards are
    visible to every player before selection.
    """
    pool = list(dict.fromkeys(phrases))
    if len(pool) < MIN_PHRASES:
        raise ArgumentError(f'At least {MIN_PHRASES} distinct phrases required to build a scorecard')

    rng.shuffle(pool)
    picked = iter(pool[:MIN_PHRASES])

    rows = []
    for r in range(GRID_SIZE):
        row = []
        for c in range(GRID_SIZE):
            if r == CENTER and c == CENTER:
                row.append(FREE_SPACE)
            else:
                row.append(next(picked))
        rows.append(tuple(row))
    return Scorecard(id=str(uuid.uuid4()), rows=tuple(rows))
