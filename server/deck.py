"""
Cards and deck lifecycle for UNO.

The deck is a closed system: once `generate()` has produced the 108 cards
for a game, cards only ever move between the draw pile, the discard pile
and player hands. Nothing here creates or destroys a card mid-game.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from constants import (
    ACTION_VALUES,
    COPIES_PER_ACTION,
    COPIES_PER_NUMBER,
    COPIES_PER_WILD,
    NUMBER_VALUES,
    PLAYABLE_COLORS,
    WILD_COLOR,
    WILD_VALUES,
)

logger = logging.getLogger(__name__)


class CardKind(str, Enum):
    """Broad category of a card, used by clients for rendering."""

    NUMBER = "number"
    ACTION = "action"
    WILD = "wild"


@dataclass(frozen=True)
class Card:
    """
    A single UNO card.

    Attributes:
        id: Unique identifier within one generated deck (1..108).
        color: red, blue, green, yellow, or "wild" for wild cards.
        value: "0"-"9", "skip", "reverse", "draw2", "wild", or "draw4".
        kind: number, action, or wild.
    """

    id: int
    color: str
    value: str
    kind: CardKind

    @property
    def is_wild(self) -> bool:
        return self.color == WILD_COLOR

    def label(self) -> str:
        """Short human-readable name, e.g. 'RED 5' or 'Wild Draw 4'."""
        if self.value == "draw4":
            return "Wild Draw 4"
        if self.value == "wild":
            return "Wild"
        return f"{self.color.upper()} {self.value.upper()}"

    def to_dict(self) -> dict:
        """Convert card to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "color": self.color,
            "value": self.value,
            "type": self.kind.value,
        }


class HasPiles(Protocol):
    """Anything holding a draw pile and a discard pile (a game room)."""

    draw_pile: list[Card]
    discard_pile: list[Card]


class DeckManager:
    """
    Builds, shuffles and recycles the cards of one game.

    A DeckManager owns its own random generator so that games can be
    replayed deterministically from a seed without touching the global
    `random` state.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        """
        Args:
            seed: Optional random seed for deterministic shuffles.
                  If None, a random seed is generated and stored.
        """
        self.seed: int = seed if seed is not None else random.randint(0, 2**31 - 1)
        self._rng = random.Random(self.seed)

    def generate(self) -> list[Card]:
        """
        Build the canonical 108-card set and return it shuffled.

        Returns:
            A new list of cards with unique ids.
        """
        cards: list[Card] = []
        next_id = 1

        def add(color: str, value: str, kind: CardKind, copies: int) -> None:
            nonlocal next_id
            for _ in range(copies):
                cards.append(Card(id=next_id, color=color, value=value, kind=kind))
                next_id += 1

        for color in PLAYABLE_COLORS:
            for value in NUMBER_VALUES:
                add(color, value, CardKind.NUMBER, 1 if value == "0" else COPIES_PER_NUMBER)
            for value in ACTION_VALUES:
                add(color, value, CardKind.ACTION, COPIES_PER_ACTION)

        for value in WILD_VALUES:
            add(WILD_COLOR, value, CardKind.WILD, COPIES_PER_WILD)

        return self.shuffle(cards)

    def shuffle(self, cards: list[Card]) -> list[Card]:
        """
        Return a uniformly shuffled copy of `cards` (Fisher-Yates).

        The input list is left untouched.
        """
        shuffled = list(cards)
        self._rng.shuffle(shuffled)
        return shuffled

    def reshuffle_from_discard(self, room: HasPiles) -> bool:
        """
        Turn the discard pile (minus its top card) into a new draw pile.

        The top discard stays where it is so the current color/value to
        match does not change.

        Returns:
            True if a reshuffle happened. False when the discard pile holds
            one card or fewer; in that case there is nothing left to draw
            and the caller simply draws fewer cards.
        """
        if len(room.discard_pile) <= 1:
            logger.warning("Reshuffle requested with %d discard card(s); deck exhausted",
                           len(room.discard_pile))
            return False

        top_card = room.discard_pile[-1]
        room.draw_pile = self.shuffle(room.discard_pile[:-1])
        room.discard_pile = [top_card]
        return True
