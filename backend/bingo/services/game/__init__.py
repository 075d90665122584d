"""Bingo game domain: session state, scorecards and win claims.

This package holds the pure game logic imported by the HTTP routes,
keeping transport and persistence concerns out of the core rules.
"""

from .claims import ClaimEvaluation, ClaimType, Winner
from .errors import ArgumentError, CardUnavailable, GameError, PlayerNotFound, SessionStateError
from .phrases import load_phrases
from .players import PlayerState
from .scorecards import FREE_SPACE, Scorecard, generate_scorecard
from .session import GameSnapshot, GameStatus, Session

__all__ = [
    'ArgumentError',
    'CardUnavailable',
    'ClaimEvaluation',
    'ClaimType',
    'FREE_SPACE',
    'GameError',
    'GameSnapshot',
    'GameStatus',
    'PlayerNotFound',
    'PlayerState',
    'Scorecard',
    'Session',
    'SessionStateError',
    'Winner',
    'generate_scorecard',
    'load_phrases',
]
