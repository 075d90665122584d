"""In-memory bingo session.

``Session`` owns every piece of round state: registered players, the scorecard
pool and the fingerprints of assigned cards, the draw queue, the called
phrases and the winners. Each public method holds ``self._lock`` for its whole
body, so callers see operations in a single total order and never observe a
half-applied change. Nothing in here does I/O; persisting players is left to
the caller once a method returns. Players are handed out as frozen values;
the stored entry is replaced, never mutated.
"""

import logging
import random
import threading
import uuid
from collections import deque
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Deque, Dict, List, Optional, Sequence, Set, Tuple

from . import claims
from .claims import ClaimEvaluation, ClaimType, Winner
from .errors import ArgumentError, CardUnavailable, PlayerNotFound, SessionStateError
from .players import PlayerState, placeholder_name
from .scorecards import Scorecard, generate_scorecard

logger = logging.getLogger(__name__)

SCORECARD_POOL_TARGET = 20
MAX_FULL_CARD_WINNERS = 3
# Attempts per missing pool card before giving up on distinct content
_GENERATION_ATTEMPTS = 50


class GameStatus(str, Enum):
    WAITING_FOR_HOST = 'waiting_for_host'
    IN_PROGRESS = 'in_progress'
    COMPLETE = 'complete'


@dataclass(frozen=True)
class GameSnapshot:
    status: GameStatus
    current_call: Optional[str]
    called_phrases: Tuple[str, ...]
    remaining_calls: int
    player_count: int
    winners: Tuple[Winner, ...]
    started_at: Optional[datetime] = None

    def to_dict(self):
        return {
            'status': self.status.value,
            'current_call': self.current_call,
            'called_phrases': list(self.called_phrases),
            'remaining_calls': self.remaining_calls,
            'player_count': self.player_count,
            'winners': [w.to_dict() for w in self.winners],
            'started_at': self.started_at.isoformat() if self.started_at else None,
        }


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Session:
    """The single live game. Construct once, ``reset(drop_players=True)`` to boot."""

    def __init__(
        self,
        phrases: Sequence[str],
        pool_target: int = SCORECARD_POOL_TARGET,
        max_full_card_winners: int = MAX_FULL_CARD_WINNERS,
        rng: Optional[random.Random] = None,
    ):
        if not phrases:
            raise ArgumentError('Phrase list is empty')
        self._phrases: Tuple[str, ...] = tuple(dict.fromkeys(phrases))
        self.pool_target = pool_target
        self.max_full_card_winners = max_full_card_winners
        self._rng = rng or random.SystemRandom()
        self._lock = threading.Lock()
        self._closed = False

        self._players: Dict[uuid.UUID, PlayerState] = {}
        self._card_pool: Dict[str, Scorecard] = {}
        self._assigned_fingerprints: Set[str] = set()
        # dict keeps draw order and gives O(1) membership for claim checks
        self._called: Dict[str, None] = {}
        self._call_queue: Deque[str] = deque()
        self._winners: List[Winner] = []

        self._status = GameStatus.WAITING_FOR_HOST
        self._current_call: Optional[str] = None
        self._started_at: Optional[datetime] = None

    # ---- players ----

    def register_player(self, requested_name: Optional[str], player_id: Optional[uuid.UUID] = None) -> PlayerState:
        with self._lock:
            self._ensure_open()
            if player_id is not None:
                existing = self._players.get(player_id)
                if existing is None:
                    raise PlayerNotFound('Unknown player id')
                return existing

            new_id = uuid.uuid4()
            name = (requested_name or '').strip() or placeholder_name(new_id)
            player = PlayerState(id=new_id, display_name=name, joined_at=_now())
            self._players[new_id] = player
            logger.info(f"[register] player={new_id} name={name!r} players={len(self._players)}")
            return player

    def restore_player(
        self,
        player_id: uuid.UUID,
        display_name: Optional[str],
        joined_at: Optional[datetime] = None,
        scorecard: Optional[Scorecard] = None,
    ) -> PlayerState:
        """Bring a player known to the durable directory back into this session."""
        with self._lock:
            self._ensure_open()
            existing = self._players.get(player_id)
            if existing is not None:
                return existing
            if not (display_name or '').strip():
                raise SessionStateError('Player record is missing a display name')

            if scorecard is not None and scorecard.fingerprint in self._assigned_fingerprints:
                logger.warning(f"[restore] player={player_id} card={scorecard.id} already live elsewhere, dropped")
                scorecard = None

            player = PlayerState(
                id=player_id,
                display_name=display_name.strip(),
                joined_at=joined_at or _now(),
                scorecard=scorecard,
            )
            self._players[player_id] = player
            if scorecard is not None:
                for card_id, pooled in list(self._card_pool.items()):
                    if pooled.fingerprint == scorecard.fingerprint:
                        del self._card_pool[card_id]
                self._assigned_fingerprints.add(scorecard.fingerprint)
            logger.info(f"[restore] player={player_id} has_card={scorecard is not None}")
            return player

    def get_player(self, player_id: uuid.UUID) -> PlayerState:
        with self._lock:
            self._ensure_open()
            return self._get_player(player_id)

    def list_players(self) -> Tuple[PlayerState, ...]:
        with self._lock:
            self._ensure_open()
            return tuple(self._players.values())

    # ---- scorecards ----

    def preview_scorecards(self, count: int) -> List[Scorecard]:
        """Return ``count`` random pool cards. Nothing is reserved; cards stay in the pool."""
        if count < 1:
            raise ArgumentError('count must be at least 1')
        with self._lock:
            self._ensure_open()
            self._fill_pool(max(count, self.pool_target))
            cards = list(self._card_pool.values())
            self._rng.shuffle(cards)
            return cards[:count]

    def assign_scorecard(self, player_id: uuid.UUID, card_id: str) -> PlayerState:
        with self._lock:
            self._ensure_open()
            player = self._get_player(player_id)
            if self._status == GameStatus.IN_PROGRESS and player.scorecard is not None:
                raise SessionStateError('The round already started, scorecards are locked')
            card = self._card_pool.pop(card_id, None)
            if card is None:
                raise CardUnavailable('Scorecard already taken, please pick another')

            if player.scorecard is not None:
                self._assigned_fingerprints.discard(player.scorecard.fingerprint)
            self._assigned_fingerprints.add(card.fingerprint)
            player = replace(player, scorecard=card)
            self._players[player_id] = player
            logger.info(f"[assign] player={player_id} card={card.id} pool={len(self._card_pool)}")
            return player

    # ---- round lifecycle ----

    def start(self) -> GameSnapshot:
        with self._lock:
            self._ensure_open()
            if self._status == GameStatus.IN_PROGRESS:
                return self._snapshot()
            if not self._call_queue:
                self._refill_call_queue()
            self._status = GameStatus.IN_PROGRESS
            self._started_at = _now()
            self._current_call = None
            self._called.clear()
            self._winners.clear()
            logger.info(f"[start] remaining={len(self._call_queue)} players={len(self._players)}")
            return self._snapshot()

    def reset(self, drop_players: bool = False) -> GameSnapshot:
        with self._lock:
            self._ensure_open()
            self._status = GameStatus.WAITING_FOR_HOST
            self._current_call = None
            self._called.clear()
            self._winners.clear()
            self._started_at = None
            self._card_pool.clear()
            self._assigned_fingerprints.clear()
            self._refill_call_queue()
            if drop_players:
                self._players.clear()
            else:
                self._players = {pid: replace(p, scorecard=None) for pid, p in self._players.items()}
            logger.info(f"[reset] drop_players={drop_players} players={len(self._players)}")
            return self._snapshot()

    def draw_next(self) -> GameSnapshot:
        with self._lock:
            self._ensure_open()
            if self._status == GameStatus.WAITING_FOR_HOST:
                raise SessionStateError('Start the game before drawing')
            if not self._call_queue:
                self._status = GameStatus.COMPLETE
                return self._snapshot()

            phrase = self._call_queue.popleft()
            self._current_call = phrase
            self._called[phrase] = None
            if not self._call_queue:
                self._status = GameStatus.COMPLETE
            logger.info(f"[draw] phrase={phrase!r} remaining={len(self._call_queue)} status={self._status.value}")
            return self._snapshot()

    def claim_win(self, player_id: uuid.UUID, claim_type: ClaimType) -> ClaimEvaluation:
        with self._lock:
            self._ensure_open()
            player = self._get_player(player_id)
            reason = claims.rejection_reason(
                player.scorecard,
                claim_type,
                player.id,
                self._called,
                self._winners,
                self.max_full_card_winners,
            )
            if reason is not None:
                logger.info(f"[claim-reject] player={player_id} type={claim_type.value} reason={reason!r}")
                return ClaimEvaluation(False, reason, tuple(self._winners))

            self._winners.append(Winner(player.id, player.display_name, claim_type, _now()))
            if claims.ends_round(claim_type, self._winners, self.max_full_card_winners):
                self._status = GameStatus.COMPLETE
            logger.info(
                f"[claim-accept] player={player_id} type={claim_type.value} "
                f"winners={len(self._winners)} status={self._status.value}"
            )
            return ClaimEvaluation(True, 'Claim accepted', tuple(self._winners))

    def snapshot(self) -> GameSnapshot:
        with self._lock:
            self._ensure_open()
            return self._snapshot()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._players.clear()
            self._card_pool.clear()
            self._assigned_fingerprints.clear()
            self._called.clear()
            self._call_queue.clear()
            self._winners.clear()
            logger.info("[close] session disposed")

    # ---- helpers (caller holds the lock) ----

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionStateError('Session is closed')

    def _get_player(self, player_id: uuid.UUID) -> PlayerState:
        player = self._players.get(player_id)
        if player is None:
            raise PlayerNotFound('Unknown player id')
        return player

    def _fill_pool(self, desired: int) -> None:
        live = self._assigned_fingerprints | {c.fingerprint for c in self._card_pool.values()}
        budget = (desired - len(self._card_pool)) * _GENERATION_ATTEMPTS
        while len(self._card_pool) < desired:
            if budget <= 0:
                raise ArgumentError('Phrase list too small to build enough distinct scorecards')
            budget -= 1
            candidate = generate_scorecard(self._phrases, self._rng)
            if candidate.fingerprint in live:
                logger.debug(f"[pool] fingerprint collision, card={candidate.id} discarded")
                continue
            live.add(candidate.fingerprint)
            self._card_pool[candidate.id] = candidate
        logger.debug(f"[pool] size={len(self._card_pool)} target={desired}")

    def _refill_call_queue(self) -> None:
        order = list(self._phrases)
        self._rng.shuffle(order)
        self._call_queue = deque(order)

    def _snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            status=self._status,
            current_call=self._current_call,
            called_phrases=tuple(self._called),
            remaining_calls=len(self._call_queue),
            player_count=len(self._players),
            winners=tuple(self._winners),
            started_at=self._started_at,
        )
