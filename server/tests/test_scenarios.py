"""
End-to-end game scenarios.

These tests verify that:
1. Cards are conserved through whole seeded games
2. Only the current seat can ever change the table
3. The worked examples for turn order, stacking and reshuffling hold
"""

import random

import pytest

from deck import Card, CardKind, DeckManager
from game import GamePhase, GameRoom
from rules import is_valid_play

TOTAL_CARDS = 108


def card(card_id: int, color: str, value: str) -> Card:
    kind = CardKind.WILD if color == "wild" else (CardKind.NUMBER if value.isdigit() else CardKind.ACTION)
    return Card(id=card_id, color=color, value=value, kind=kind)


def new_room(players: int, seed: int) -> GameRoom:
    room = GameRoom(room_id="SCENE1", deck_manager=DeckManager(seed=seed))
    for i in range(players):
        room.add_seat(f"p{i}", f"P{i}")
    return room


def table_state(room: GameRoom) -> tuple:
    return (
        tuple(tuple(c.id for c in s.hand) for s in room.seats),
        tuple(c.id for c in room.draw_pile),
        tuple(c.id for c in room.discard_pile),
        room.current_seat,
        room.direction,
        room.current_color,
        room.draw_stack,
        room.phase,
    )


def play_out(room: GameRoom, rng: random.Random, max_turns: int = 3000) -> int:
    """Play greedy-random moves until someone wins; returns turns taken."""
    for turn in range(max_turns):
        if room.phase != GamePhase.PLAYING:
            return turn

        seat = room.current_player()
        legal = [
            c for c in seat.hand
            if is_valid_play(c, room.top_card(), room.current_color, room.draw_stack)
        ]

        # Someone else trying to act must never change anything
        bystander = rng.choice([s for s in room.seats if s is not seat])
        before = table_state(room)
        assert room.draw_card(bystander.id) == []
        if bystander.hand:
            assert room.play_card(bystander.id, bystander.hand[0].id) == []
        assert table_state(room) == before

        stack_before = room.draw_stack
        if legal:
            choice = rng.choice(legal)
            room.play_card(seat.id, choice.id, rng.choice(["red", "blue", "green", "yellow"]))
            assert room.top_card() == choice
            if room.phase == GamePhase.PLAYING:
                if choice.value in ("draw2", "draw4"):
                    assert room.draw_stack > stack_before
                else:
                    assert room.draw_stack == stack_before
        else:
            room.draw_card(seat.id)
            assert room.draw_stack == 0

        assert room.cards_in_play() == TOTAL_CARDS
        assert 0 <= room.current_seat < len(room.seats)
    return max_turns


class TestWholeGames:

    @pytest.mark.parametrize("players,seed", [(2, 1), (3, 2), (4, 3), (4, 4), (2, 5), (3, 6)])
    def test_conservation_and_single_turn(self, players, seed):
        room = new_room(players, seed)
        room.start_game()
        assert room.cards_in_play() == TOTAL_CARDS

        play_out(room, random.Random(seed))

        if room.phase == GamePhase.FINISHED:
            winner = room.get_seat(room.winner_id)
            assert winner.hand == []
            frozen = table_state(room)
            for seat in room.seats:
                assert room.draw_card(seat.id) == []
                for c in list(seat.hand):
                    assert room.play_card(seat.id, c.id, "red") == []
            assert table_state(room) == frozen

    def test_same_seed_same_game(self):
        a = new_room(3, seed=99)
        b = new_room(3, seed=99)
        a.start_game()
        b.start_game()
        play_out(a, random.Random(7), max_turns=40)
        play_out(b, random.Random(7), max_turns=40)
        assert table_state(a) == table_state(b)


class TestWorkedExamples:

    def test_two_player_reverse_then_skip(self):
        room = new_room(2, seed=1)
        room.seats[0].hand = [card(1, "red", "reverse"), card(2, "blue", "3")]
        room.seats[1].hand = [card(3, "red", "skip"), card(4, "green", "3"), card(5, "green", "4")]
        room.discard_pile = [card(6, "red", "1")]
        room.draw_pile = [card(7, "yellow", "1")]
        room.current_color = "red"
        room.phase = GamePhase.PLAYING

        room.play_card("p0", 1)
        assert room.direction == -1
        assert room.current_seat == 1

        room.play_card("p1", 3)
        assert room.current_seat == 1
        assert room.current_player().id == "p1"

    def test_stacking_four_seats(self):
        room = new_room(4, seed=1)
        hands = [
            [card(1, "blue", "draw2"), card(2, "blue", "1")],
            [card(3, "green", "draw2"), card(4, "green", "1")],
            [card(5, "yellow", "1")],
            [card(6, "red", "1")],
        ]
        for seat, hand in zip(room.seats, hands):
            seat.hand = hand
        room.discard_pile = [card(7, "red", "draw2")]
        room.draw_pile = [card(100 + i, "yellow", str(i)) for i in range(8)]
        room.current_color = "red"
        room.phase = GamePhase.PLAYING

        room.play_card("p0", 1)
        assert (room.draw_stack, room.current_seat) == (2, 1)
        room.play_card("p1", 3)
        assert (room.draw_stack, room.current_seat) == (4, 2)
        room.draw_card("p2")
        assert (room.draw_stack, room.current_seat) == (0, 3)
        assert len(room.seats[2].hand) == 5
        assert room.top_card().id == 3

    def test_reshuffle_mid_draw(self):
        room = new_room(2, seed=1)
        room.seats[0].hand = [card(1, "red", "1")]
        room.seats[1].hand = [card(2, "red", "2")]
        room.discard_pile = [card(10 + i, "blue", str(i)) for i in range(5)]
        room.draw_pile = []
        room.current_color = "blue"
        room.phase = GamePhase.PLAYING

        events = room.draw_card("p0")

        assert events
        assert [c.id for c in room.discard_pile] == [14]
        assert len(room.draw_pile) == 3
        assert len(room.seats[0].hand) == 2
        assert {c.id for c in room.draw_pile} | {room.seats[0].hand[1].id} == {10, 11, 12, 13}

    def test_penalty_larger_than_piles(self):
        """A penalty that cannot be fully paid hands over what exists."""
        room = new_room(2, seed=1)
        room.seats[0].hand = [card(1, "red", "1")]
        room.seats[1].hand = [card(2, "red", "2")]
        room.discard_pile = [card(3, "green", "5"), card(4, "wild", "draw4")]
        room.draw_pile = [card(5, "blue", "1")]
        room.current_color = "green"
        room.draw_stack = 4
        room.phase = GamePhase.PLAYING

        room.draw_card("p0")

        assert len(room.seats[0].hand) == 3
        assert room.draw_pile == []
        assert [c.id for c in room.discard_pile] == [4]
        assert room.draw_stack == 0
        assert room.current_seat == 1
