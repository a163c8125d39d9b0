"""
Game room state machine for UNO.

A GameRoom owns everything about one table: the seats, the draw and
discard piles, whose turn it is, the direction of play, the active color,
the pending draw penalty and the chat history. It is the only object that
mutates that state.

Every public operation returns a list of OutboundEvent. An empty list means
the command was rejected and nothing changed; rule violations never raise.

Lifecycle:
    WAITING -> PLAYING -> FINISHED

    WAITING   seats are being filled (1-4)
    PLAYING   cards dealt, turns in progress
    FINISHED  a seat emptied its hand; terminal for this room
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from constants import (
    CHAT_HISTORY_LIMIT,
    DEFAULT_WILD_COLOR,
    HAND_SIZE,
    MAX_CHAT_LENGTH,
    MAX_PLAYERS,
    MIN_PLAYERS_TO_START,
    PLAYABLE_COLORS,
)
from deck import Card, DeckManager
from errors import RoomFull
from models.events import (
    OutboundEvent,
    chat_message,
    game_started,
    game_update,
    game_won,
    player_left,
    uno_alert,
)
from rules import is_valid_play
from turns import TurnOutcome, advance, apply_card_effect, apply_opening_effect

logger = logging.getLogger(__name__)


class GamePhase(str, Enum):
    """Lifecycle state of a room."""

    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Seat:
    """
    A player's place at the table.

    Attributes:
        id: Stable player identifier (not the connection handle).
        name: Display name.
        hand: Cards held, in the order they were received.
    """

    id: str
    name: str
    hand: list[Card] = field(default_factory=list)

    @property
    def has_uno(self) -> bool:
        """Server-derived UNO status: exactly one card left."""
        return len(self.hand) == 1

    def find_card(self, card_id: int) -> Optional[int]:
        """Index of the card with `card_id` in the hand, or None."""
        for index, card in enumerate(self.hand):
            if card.id == card_id:
                return index
        return None

    def to_public_dict(self, is_current: bool = False) -> dict:
        """Seat summary visible to everyone (hand hidden)."""
        return {
            "id": self.id,
            "name": self.name,
            "cardCount": len(self.hand),
            "hasUno": self.has_uno,
            "isCurrentPlayer": is_current,
        }


@dataclass
class GameRoom:
    """
    One room's full game state.

    Attributes:
        room_id: 6-character room code.
        seats: Seats in turn order.
        draw_pile: Face-down cards; drawn from the front.
        discard_pile: Played cards; the last element is the top card.
        current_seat: Index into `seats` of the player to act.
        direction: +1 forward through the seats, -1 backwards.
        current_color: Color the next play must match (set by wilds).
        draw_stack: Pending forced-draw penalty from draw2/draw4 plays.
        phase: Lifecycle state.
        last_action: Summary of the latest play or draw for clients.
        winner_id: Seat id of the winner once FINISHED.
        chat_history: System narration and player chat, oldest first.
        lock: Serializes commands for this room (held by the handlers).
    """

    room_id: str
    seats: list[Seat] = field(default_factory=list)
    draw_pile: list[Card] = field(default_factory=list)
    discard_pile: list[Card] = field(default_factory=list)
    current_seat: int = 0
    direction: int = 1
    current_color: Optional[str] = None
    draw_stack: int = 0
    phase: GamePhase = GamePhase.WAITING
    last_action: Optional[dict] = None
    winner_id: Optional[str] = None
    chat_history: list[dict] = field(default_factory=list)
    deck_manager: DeckManager = field(default_factory=DeckManager, repr=False)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)
    _chat_seq: int = field(default=0, repr=False, compare=False)

    # -------------------------------------------------------------------------
    # Seats
    # -------------------------------------------------------------------------

    def is_full(self) -> bool:
        return len(self.seats) >= MAX_PLAYERS

    def is_empty(self) -> bool:
        return not self.seats

    def add_seat(self, player_id: str, name: str) -> Seat:
        """
        Append a seat at the end of the turn order.

        Raises:
            RoomFull: If the room already has the maximum number of seats.
        """
        if self.is_full():
            raise RoomFull(self.room_id)
        seat = Seat(id=player_id, name=name)
        self.seats.append(seat)
        return seat

    def seat_index(self, player_id: str) -> Optional[int]:
        for index, seat in enumerate(self.seats):
            if seat.id == player_id:
                return index
        return None

    def get_seat(self, player_id: str) -> Optional[Seat]:
        index = self.seat_index(player_id)
        return self.seats[index] if index is not None else None

    def current_player(self) -> Optional[Seat]:
        """The seat whose turn it is (None if the room is empty)."""
        if 0 <= self.current_seat < len(self.seats):
            return self.seats[self.current_seat]
        return None

    def top_card(self) -> Optional[Card]:
        return self.discard_pile[-1] if self.discard_pile else None

    def cards_in_play(self) -> int:
        """Total cards across draw pile, discard pile and hands."""
        return (
            len(self.draw_pile)
            + len(self.discard_pile)
            + sum(len(seat.hand) for seat in self.seats)
        )

    # -------------------------------------------------------------------------
    # Chat & narration
    # -------------------------------------------------------------------------

    def _record_chat(self, kind: str, author: str, text: str, player_id: Optional[str] = None) -> dict:
        self._chat_seq += 1
        entry = {
            "kind": kind,
            "player": author,
            "message": text,
            "timestamp": _now(),
            "id": self._chat_seq,
        }
        if player_id:
            entry["playerId"] = player_id
        self.chat_history.append(entry)
        if len(self.chat_history) > CHAT_HISTORY_LIMIT:
            del self.chat_history[:-CHAT_HISTORY_LIMIT]
        return entry

    def announce(self, text: str) -> OutboundEvent:
        """Record a system message and return it as a room broadcast."""
        logger.debug(f"[{self.room_id}] {text}")
        return chat_message(self.room_id, self._record_chat("system", "System", text))

    def add_chat_message(self, player_id: str, text: str) -> list[OutboundEvent]:
        """Relay a player's chat message to the room (no game rules apply)."""
        seat = self.get_seat(player_id)
        text = (text or "").strip()[:MAX_CHAT_LENGTH]
        if not seat or not text:
            return []
        entry = self._record_chat("player", seat.name, text, player_id=player_id)
        return [chat_message(self.room_id, entry)]

    # -------------------------------------------------------------------------
    # Game Lifecycle
    # -------------------------------------------------------------------------

    def can_start(self) -> bool:
        return self.phase == GamePhase.WAITING and len(self.seats) >= MIN_PLAYERS_TO_START

    def start_game(self) -> list[OutboundEvent]:
        """
        Deal a fresh game and move to PLAYING.

        Each seat receives HAND_SIZE cards from a newly generated deck. The
        first non-wild card is turned up and its action effect applied to
        seat 0 before anyone acts.
        """
        if not self.can_start():
            return []

        self.draw_pile = self.deck_manager.generate()
        self.discard_pile = []
        self.current_seat = 0
        self.direction = 1
        self.draw_stack = 0
        self.last_action = None
        self.winner_id = None

        for seat in self.seats:
            seat.hand = self.draw_pile[:HAND_SIZE]
            del self.draw_pile[:HAND_SIZE]

        opening = self._turn_up_opening_card()
        self.current_color = opening.color
        outcome = apply_opening_effect(self, opening)
        self.phase = GamePhase.PLAYING

        logger.info(
            f"Game started in room {self.room_id} with {len(self.seats)} players "
            f"(opening card {opening.label()}, seed {self.deck_manager.seed})"
        )

        events = self._narrate_opening(opening, outcome)
        events.append(self.announce("🎮 UNO Game Started! Cards dealt to all players!"))
        events.append(self.announce(f"🎯 {self.current_player().name}'s turn to play!"))
        events.append(game_started(self.room_id, "🎮 UNO Game Started! Cards dealt!"))
        events.extend(self._game_updates())
        return events

    def _turn_up_opening_card(self) -> Card:
        """Move the first non-wild card to the discard pile.

        Wilds turned up go back under the draw pile.
        """
        while True:
            card = self.draw_pile.pop(0)
            if card.is_wild:
                self.draw_pile.append(card)
                continue
            self.discard_pile.append(card)
            return card

    def _narrate_opening(self, card: Card, outcome: TurnOutcome) -> list[OutboundEvent]:
        first = self.seats[0].name
        if outcome.skipped_seat is not None:
            return [self.announce(f"⏭️ First card is Skip! {first} is skipped!")]
        if outcome.reversed:
            return [self.announce("🔄 First card is Reverse! Direction changed to counter-clockwise!")]
        if outcome.penalty:
            return [self.announce(f"📈 First card is Draw 2! {self.current_player().name} must draw 2 cards!")]
        return []

    # -------------------------------------------------------------------------
    # Turn Actions
    # -------------------------------------------------------------------------

    def _acting_seat(self, player_id: str) -> Optional[Seat]:
        """The current seat if `player_id` holds it during play, else None."""
        if self.phase != GamePhase.PLAYING:
            return None
        seat = self.current_player()
        if seat is None or seat.id != player_id:
            return None
        return seat

    def play_card(self, player_id: str, card_id: int, chosen_color: Optional[str] = None) -> list[OutboundEvent]:
        """
        Play a card from the acting player's hand.

        Silently rejected unless the game is in progress, `player_id` holds
        the current seat, the card is in their hand, and the play is legal
        against the top card, active color and pending draw stack.

        Args:
            player_id: The acting player.
            card_id: Id of the card to play.
            chosen_color: Color to switch to when playing a wild. Missing or
                unknown colors fall back to the default wild color.
        """
        seat = self._acting_seat(player_id)
        if seat is None:
            logger.debug(f"Ignoring play from {player_id} in {self.room_id}: not their turn")
            return []

        index = seat.find_card(card_id)
        if index is None:
            logger.debug(f"Ignoring play from {player_id} in {self.room_id}: card {card_id} not in hand")
            return []

        card = seat.hand[index]
        if not is_valid_play(card, self.top_card(), self.current_color, self.draw_stack):
            logger.debug(f"Ignoring illegal play of {card.label()} in {self.room_id}")
            return []

        seat.hand.pop(index)
        self.discard_pile.append(card)

        events: list[OutboundEvent] = []
        if card.is_wild:
            self.current_color = chosen_color if chosen_color in PLAYABLE_COLORS else DEFAULT_WILD_COLOR
            events.append(self.announce(
                f"🌈 {seat.name} played a {card.label()} card and chose {self.current_color.upper()}!"
            ))
        else:
            self.current_color = card.color
            events.append(self.announce(f"🃏 {seat.name} played {card.label()}!"))

        self.last_action = {
            "type": "cardPlayed",
            "player": seat.name,
            "card": card.to_dict(),
            "timestamp": _now(),
        }

        if seat.has_uno:
            events.append(self.announce(f"🚨 {seat.name} has UNO! (1 card remaining)"))
            events.append(uno_alert(self.room_id, seat.name))

        if not seat.hand:
            self.phase = GamePhase.FINISHED
            self.winner_id = seat.id
            logger.info(f"{seat.name} won the game in room {self.room_id}")
            events.append(self.announce(f"🏆 {seat.name} wins the game! Congratulations! 🎉"))
            events.append(game_won(self.room_id, seat.name))
            events.extend(self._game_updates())
            return events

        outcome = apply_card_effect(self, card)
        events.extend(self._narrate_effect(outcome, seat.name))
        events.append(self.announce(f"🎯 {self.current_player().name}'s turn!"))
        events.extend(self._game_updates())
        return events

    def _narrate_effect(self, outcome: TurnOutcome, actor: str) -> list[OutboundEvent]:
        events = []
        if outcome.skipped_seat is not None:
            skipped = self.seats[outcome.skipped_seat].name
            events.append(self.announce(f"⏭️ {skipped} was skipped by {actor}!"))
        if outcome.reversed:
            heading = "clockwise ⟲" if self.direction == 1 else "counter-clockwise ⟳"
            events.append(self.announce(f"🔄 {actor} played Reverse! Direction: {heading}"))
        if outcome.penalty:
            target = self.current_player().name
            events.append(self.announce(f"📈 +{outcome.penalty} cards penalty for {target} by {actor}!"))
        return events

    def draw_card(self, player_id: str) -> list[OutboundEvent]:
        """
        Draw for the acting player and pass the turn.

        Draws the pending penalty if one is stacked, otherwise a single
        card. The draw stack is cleared and the turn advances exactly once;
        a draw is never a play.
        """
        seat = self._acting_seat(player_id)
        if seat is None:
            logger.debug(f"Ignoring draw from {player_id} in {self.room_id}: not their turn")
            return []

        events: list[OutboundEvent] = []
        penalty = self.draw_stack
        count = max(penalty, 1)

        drawn = self._take_cards(count, events)
        seat.hand.extend(drawn)

        if penalty > 0:
            events.append(self.announce(f"📥 {seat.name} drew {len(drawn)} penalty cards!"))
        else:
            events.append(self.announce(f"📥 {seat.name} drew a card from the deck."))

        self.draw_stack = 0
        advance(self)

        self.last_action = {
            "type": "cardDrawn",
            "player": seat.name,
            "count": len(drawn),
            "timestamp": _now(),
        }

        events.append(self.announce(f"🎯 {self.current_player().name}'s turn!"))
        events.extend(self._game_updates())
        return events

    def deal_in(self, seat: Seat) -> list[OutboundEvent]:
        """Deal a full hand to a seat that joined a game in progress."""
        if self.phase != GamePhase.PLAYING:
            return []
        events: list[OutboundEvent] = []
        seat.hand.extend(self._take_cards(HAND_SIZE, events))
        events.append(self.announce(f"🃏 {seat.name} joins mid-game with {len(seat.hand)} cards."))
        events.extend(self._game_updates())
        return events

    def _take_cards(self, count: int, events: list[OutboundEvent]) -> list[Card]:
        """Take up to `count` cards from the draw pile, reshuffling as needed."""
        drawn: list[Card] = []
        for _ in range(count):
            if not self.draw_pile and self.deck_manager.reshuffle_from_discard(self):
                events.append(self.announce("🔄 Deck reshuffled from discard pile!"))
            if not self.draw_pile:
                break
            drawn.append(self.draw_pile.pop(0))
        return drawn

    def remove_player(self, player_id: str) -> list[OutboundEvent]:
        """
        Remove a seat (leave or disconnect).

        The turn pointer is clamped to seat 0 when it no longer points at a
        valid seat; the game carries on with the remaining players. The
        removed seat's hand leaves the table with it.
        """
        index = self.seat_index(player_id)
        if index is None:
            return []

        seat = self.seats.pop(index)
        logger.info(f"{seat.name} left room {self.room_id} ({len(self.seats)} seats remain)")
        if not self.seats:
            return []

        if self.current_seat >= len(self.seats):
            self.current_seat = 0

        events = [
            self.announce(f"👋 {seat.name} left the game."),
            player_left(self.room_id, seat.to_public_dict()),
        ]
        if self.phase == GamePhase.PLAYING:
            events.extend(self._game_updates())
        return events

    # -------------------------------------------------------------------------
    # State Queries
    # -------------------------------------------------------------------------

    def public_view(self) -> dict:
        """Room snapshot with every hand hidden."""
        current = self.current_player()
        top = self.top_card()
        return {
            "roomId": self.room_id,
            "players": [
                seat.to_public_dict(index == self.current_seat)
                for index, seat in enumerate(self.seats)
            ],
            "currentPlayer": self.current_seat,
            "currentPlayerName": current.name if current else "Unknown",
            "currentColor": self.current_color,
            "topCard": top.to_dict() if top else None,
            "direction": self.direction,
            "gameState": self.phase.value,
            "deckSize": len(self.draw_pile),
            "drawStack": self.draw_stack,
            "lastAction": self.last_action,
        }

    def private_view(self, player_id: str) -> dict:
        """Public snapshot plus `player_id`'s own hand and turn flag."""
        seat = self.get_seat(player_id)
        current = self.current_player()
        return {
            **self.public_view(),
            "myCards": [card.to_dict() for card in seat.hand] if seat else [],
            "isMyTurn": (
                self.phase == GamePhase.PLAYING
                and current is not None
                and current.id == player_id
            ),
        }

    def _game_updates(self) -> list[OutboundEvent]:
        return [game_update(self.room_id, seat.id, self.private_view(seat.id)) for seat in self.seats]
