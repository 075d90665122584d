"""Win claim patterns and the rules that decide whether a claim is recorded.

Checks run in a fixed order: card present, pattern complete, duplicate,
full-card capacity, ranked full-card order. The first failing check decides
the rejection message.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Collection, Dict, Optional, Sequence, Tuple

from .scorecards import FREE_SPACE, Scorecard


class ClaimType(str, Enum):
    ROW = 'row'
    COLUMN = 'column'
    COLUMN_1 = 'column_1'
    COLUMN_2 = 'column_2'
    COLUMN_3 = 'column_3'
    DIAGONAL = 'diagonal'
    FULL_CARD = 'full_card'
    FULL_CARD_FIRST = 'full_card_first'
    FULL_CARD_SECOND = 'full_card_second'
    FULL_CARD_THIRD = 'full_card_third'


RANKED_FULL_CARD = (
    ClaimType.FULL_CARD_FIRST,
    ClaimType.FULL_CARD_SECOND,
    ClaimType.FULL_CARD_THIRD,
)


@dataclass(frozen=True)
class Winner:
    player_id: uuid.UUID
    display_name: str
    claim_type: ClaimType
    timestamp: datetime

    def to_dict(self):
        return {
            'player_id': str(self.player_id),
            'display_name': self.display_name,
            'claim_type': self.claim_type.value,
            'timestamp': self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class ClaimEvaluation:
    accepted: bool
    message: str
    winners: Tuple[Winner, ...]

    def to_dict(self):
        return {
            'accepted': self.accepted,
            'message': self.message,
            'winners': [w.to_dict() for w in self.winners],
        }


Marked = Callable[[str], bool]


def _line_complete(cells, is_marked: Marked) -> bool:
    return all(is_marked(cell) for cell in cells)


def _column(card: Scorecard, col: int):
    return [card.value(row, col) for row in range(card.size)]


def any_row(card: Scorecard, is_marked: Marked) -> bool:
    return any(_line_complete(row, is_marked) for row in card.rows)


def any_column(card: Scorecard, is_marked: Marked) -> bool:
    return any(_line_complete(_column(card, col), is_marked) for col in range(card.size))


def column(index: int) -> Callable[[Scorecard, Marked], bool]:
    def match(card: Scorecard, is_marked: Marked) -> bool:
        if index < 0 or index >= card.size:
            return False
        return _line_complete(_column(card, index), is_marked)
    return match


def any_diagonal(card: Scorecard, is_marked: Marked) -> bool:
    n = card.size
    down = [card.value(i, i) for i in range(n)]
    up = [card.value(i, n - i - 1) for i in range(n)]
    return _line_complete(down, is_marked) or _line_complete(up, is_marked)


def full_card(card: Scorecard, is_marked: Marked) -> bool:
    return all(_line_complete(row, is_marked) for row in card.rows)


# One entry per ClaimType: (pattern, human description)
PATTERNS: Dict[ClaimType, Tuple[Callable[[Scorecard, Marked], bool], str]] = {
    ClaimType.ROW: (any_row, 'row'),
    ClaimType.COLUMN: (any_column, 'column'),
    ClaimType.COLUMN_1: (column(0), 'first column'),
    ClaimType.COLUMN_2: (column(1), 'second column'),
    ClaimType.COLUMN_3: (column(2), 'third column'),
    ClaimType.DIAGONAL: (any_diagonal, 'diagonal'),
    ClaimType.FULL_CARD: (full_card, 'full card'),
    ClaimType.FULL_CARD_FIRST: (full_card, 'full card (first winner)'),
    ClaimType.FULL_CARD_SECOND: (full_card, 'full card (second winner)'),
    ClaimType.FULL_CARD_THIRD: (full_card, 'full card (third winner)'),
}


def describe(claim_type: ClaimType) -> str:
    return PATTERNS[claim_type][1]


def marker(called: Collection[str]) -> Marked:
    def is_marked(cell: str) -> bool:
        return cell == FREE_SPACE or cell in called
    return is_marked


def matches(card: Scorecard, claim_type: ClaimType, called: Collection[str]) -> bool:
    pattern, _ = PATTERNS[claim_type]
    return pattern(card, marker(called))


_NUMBER_WORDS = {1: 'One', 2: 'Two', 3: 'Three', 4: 'Four', 5: 'Five'}


def _recorded(winners: Sequence[Winner], claim_type: ClaimType) -> bool:
    return any(w.claim_type == claim_type for w in winners)


def _full_card_count(winners: Sequence[Winner]) -> int:
    return sum(1 for w in winners if w.claim_type == ClaimType.FULL_CARD)


def _ranking_violation(claim_type: ClaimType, winners: Sequence[Winner]) -> Optional[str]:
    first = _recorded(winners, ClaimType.FULL_CARD_FIRST)
    second = _recorded(winners, ClaimType.FULL_CARD_SECOND)
    third = _recorded(winners, ClaimType.FULL_CARD_THIRD)

    if claim_type == ClaimType.FULL_CARD_FIRST:
        return 'First full-card winner already recorded' if first else None
    if claim_type == ClaimType.FULL_CARD_SECOND:
        if not first:
            return 'Record the first full-card winner before the second'
        return 'Second full-card winner already recorded' if second else None
    if claim_type == ClaimType.FULL_CARD_THIRD:
        if not (first and second):
            return 'Record the first and second full-card winners before the third'
        return 'Third full-card winner already recorded' if third else None
    return None


def rejection_reason(
    card: Optional[Scorecard],
    claim_type: ClaimType,
    player_id: uuid.UUID,
    called: Collection[str],
    winners: Sequence[Winner],
    max_full_card_winners: int,
) -> Optional[str]:
    """Return why the claim must be rejected, or None when it should be recorded."""
    if card is None:
        return 'Select a scorecard before claiming'
    if not matches(card, claim_type, called):
        return f'Squares not complete for the {describe(claim_type)} pattern'
    if any(w.player_id == player_id and w.claim_type == claim_type for w in winners):
        return 'Claim already recorded'
    if claim_type == ClaimType.FULL_CARD:
        if _full_card_count(winners) >= max_full_card_winners:
            count = _NUMBER_WORDS.get(max_full_card_winners, str(max_full_card_winners))
            return f'{count} full-card winners already recorded'
        return None
    if claim_type in RANKED_FULL_CARD:
        return _ranking_violation(claim_type, winners)
    return None


def ends_round(claim_type: ClaimType, winners: Sequence[Winner], max_full_card_winners: int) -> bool:
    """True once an accepted claim (already appended to ``winners``) closes the round."""
    if claim_type == ClaimType.FULL_CARD_THIRD:
        return True
    if claim_type == ClaimType.FULL_CARD:
        return _full_card_count(winners) >= max_full_card_winners
    return False
