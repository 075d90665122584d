"""Errors raised by the bingo session.

Argument errors mean the caller sent something wrong (unknown player, a card
that is no longer in the pool). State errors mean the request is valid but not
allowed in the current phase of the round. Rejected win claims are not errors;
they come back as a ClaimEvaluation with accepted=False.
"""


class GameError(Exception):
    """Base class for everything the session raises on purpose."""


class ArgumentError(GameError, ValueError):
    pass


class PlayerNotFound(ArgumentError, LookupError):
    pass


class CardUnavailable(ArgumentError):
    pass


class SessionStateError(GameError, RuntimeError):
    pass
