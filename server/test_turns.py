"""
Test suite for turn order and action-card effects.

Run with: pytest test_turns.py -v
"""

from dataclasses import dataclass, field

import pytest

from deck import Card, CardKind
from turns import advance, apply_card_effect, apply_opening_effect


@dataclass
class Table:
    seats: list = field(default_factory=list)
    current_seat: int = 0
    direction: int = 1
    draw_stack: int = 0


def table(n: int, current: int = 0, direction: int = 1) -> Table:
    return Table(seats=[f"P{i}" for i in range(n)], current_seat=current, direction=direction)


def c(value: str, color: str = "red") -> Card:
    if value in ("wild", "draw4"):
        return Card(id=1, color="wild", value=value, kind=CardKind.WILD)
    kind = CardKind.NUMBER if value.isdigit() else CardKind.ACTION
    return Card(id=1, color=color, value=value, kind=kind)


class TestAdvance:

    def test_forward_wraps(self):
        t = table(3, current=2)
        assert advance(t) == 0

    def test_backward_wraps_non_negative(self):
        t = table(3, current=0, direction=-1)
        assert advance(t) == 2
        assert advance(t) == 1

    def test_single_seat(self):
        t = table(1)
        assert advance(t) == 0


class TestCardEffects:

    def test_number_advances_once(self):
        t = table(4)
        apply_card_effect(t, c("5"))
        assert t.current_seat == 1

    def test_plain_wild_advances_once(self):
        t = table(4, current=3)
        apply_card_effect(t, c("wild"))
        assert t.current_seat == 0

    @pytest.mark.parametrize("seats,expected", [(3, 2), (4, 2)])
    def test_skip_skips_exactly_one_seat(self, seats, expected):
        t = table(seats)
        outcome = apply_card_effect(t, c("skip"))
        assert outcome.skipped_seat == 1
        assert t.current_seat == expected

    def test_reverse_with_four_seats(self):
        t = table(4, current=1)
        outcome = apply_card_effect(t, c("reverse"))
        assert outcome.reversed
        assert t.direction == -1
        assert t.current_seat == 0

    def test_reverse_twice_restores_direction(self):
        t = table(3)
        apply_card_effect(t, c("reverse"))
        apply_card_effect(t, c("reverse"))
        assert t.direction == 1

    def test_draw2_advances_then_stacks(self):
        t = table(3)
        outcome = apply_card_effect(t, c("draw2"))
        assert outcome.penalty == 2
        assert t.current_seat == 1
        assert t.draw_stack == 2

    def test_draw4_adds_to_existing_stack(self):
        t = table(3, current=1)
        t.draw_stack = 2
        apply_card_effect(t, c("draw4"))
        assert t.current_seat == 2
        assert t.draw_stack == 6


class TestTwoSeatArithmetic:

    def test_reverse_still_passes_turn(self):
        t = table(2)
        apply_card_effect(t, c("reverse"))
        assert t.direction == -1
        assert t.current_seat == 1

    def test_reverse_then_skip_returns_to_player(self):
        """(0 - 1 + 2) % 2 = 1, then skip: 1 -> 0 -> 1."""
        t = table(2)
        apply_card_effect(t, c("reverse"))
        apply_card_effect(t, c("skip"))
        assert t.current_seat == 1
        assert t.direction == -1


class TestOpeningEffect:

    def test_number_starts_at_seat_zero(self):
        t = table(3)
        outcome = apply_opening_effect(t, c("4"))
        assert t.current_seat == 0
        assert outcome.skipped_seat is None

    def test_skip_skips_seat_zero(self):
        t = table(3)
        outcome = apply_opening_effect(t, c("skip"))
        assert outcome.skipped_seat == 0
        assert t.current_seat == 1

    def test_reverse_starts_with_last_seat(self):
        t = table(4)
        apply_opening_effect(t, c("reverse"))
        assert t.direction == -1
        assert t.current_seat == 3

    def test_draw2_sets_penalty(self):
        t = table(2)
        outcome = apply_opening_effect(t, c("draw2"))
        assert outcome.penalty == 2
        assert t.draw_stack == 2
        assert t.current_seat == 1
