import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .scorecards import Scorecard


@dataclass(frozen=True)
class PlayerState:
    id: uuid.UUID
    display_name: str
    joined_at: datetime
    scorecard: Optional[Scorecard] = None

    def to_dict(self):
        return {
            'player_id': str(self.id),
            'display_name': self.display_name,
            'joined_at': self.joined_at.isoformat(),
            'scorecard': self.scorecard.to_dict() if self.scorecard else None,
        }


def placeholder_name(player_id: uuid.UUID) -> str:
    return f'Player-{player_id.hex[:4].upper()}'
