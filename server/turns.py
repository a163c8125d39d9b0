"""
Turn order for UNO.

Seat order is turn order. `direction` is +1 (forward through the seats) or
-1 (backwards). All arithmetic adds the seat count before taking the modulo
so a negative direction never produces a negative index.

Action effects applied after a successful play:

    skip     advance twice (exactly one seat is skipped, at any table size)
    reverse  flip direction, then advance once
    draw2    advance once, then add 2 to the draw stack
    draw4    advance once, then add 4 to the draw stack
    other    advance once

With two seats a reverse still hands the turn to the other seat (both
directions lead there); only later turns see the new direction. A skip
with two seats comes back to the player who played it.
"""

from dataclasses import dataclass
from typing import Optional, Protocol

from constants import DRAW_PENALTIES
from deck import Card


class TurnState(Protocol):
    seats: list
    current_seat: int
    direction: int
    draw_stack: int


@dataclass
class TurnOutcome:
    """What a card effect did, for narration."""

    skipped_seat: Optional[int] = None
    reversed: bool = False
    penalty: int = 0


def advance(room: TurnState) -> int:
    """Move the turn one seat in the current direction and return the new seat."""
    seat_count = len(room.seats)
    room.current_seat = (room.current_seat + room.direction + seat_count) % seat_count
    return room.current_seat


def apply_card_effect(room: TurnState, card: Card) -> TurnOutcome:
    """Pass the turn on after `card` was played from the current seat."""
    outcome = TurnOutcome()

    if card.value == "skip":
        outcome.skipped_seat = advance(room)
        advance(room)
    elif card.value == "reverse":
        room.direction *= -1
        outcome.reversed = True
        advance(room)
    elif card.value in DRAW_PENALTIES:
        advance(room)
        outcome.penalty = DRAW_PENALTIES[card.value]
        room.draw_stack += outcome.penalty
    else:
        advance(room)

    return outcome


def apply_opening_effect(room: TurnState, card: Card) -> TurnOutcome:
    """
    Resolve the first card turned up against seat 0.

    Seat 0 is the one affected: a skip passes play to seat 1, a reverse
    turns play backwards so the last seat starts, and a Draw Two leaves a
    penalty of 2 pending with seat 1 to act. Wild cards never open a game.
    """
    seat_count = len(room.seats)
    outcome = TurnOutcome()
    room.current_seat = 0

    if card.value == "skip":
        outcome.skipped_seat = 0
        room.current_seat = 1 % seat_count
    elif card.value == "reverse":
        room.direction = -1
        outcome.reversed = True
        room.current_seat = seat_count - 1
    elif card.value == "draw2":
        outcome.penalty = DRAW_PENALTIES["draw2"]
        room.draw_stack = outcome.penalty
        room.current_seat = 1 % seat_count

    return outcome
