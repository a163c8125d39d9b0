"""
Test suite for deck generation, shuffling and discard recycling.

Run with: pytest test_deck.py -v
"""

from collections import Counter
from dataclasses import dataclass, field

import pytest

from constants import DECK_SIZE
from deck import Card, CardKind, DeckManager


def make_card(card_id: int, color: str, value: str) -> Card:
    if color == "wild":
        kind = CardKind.WILD
    elif value.isdigit():
        kind = CardKind.NUMBER
    else:
        kind = CardKind.ACTION
    return Card(id=card_id, color=color, value=value, kind=kind)


@dataclass
class Piles:
    draw_pile: list = field(default_factory=list)
    discard_pile: list = field(default_factory=list)


# =============================================================================
# Generation
# =============================================================================

class TestGenerate:

    def setup_method(self):
        self.cards = DeckManager(seed=1).generate()

    def test_has_108_cards(self):
        assert len(self.cards) == DECK_SIZE == 108

    def test_ids_unique(self):
        assert len({c.id for c in self.cards}) == 108

    def test_color_counts(self):
        colors = Counter(c.color for c in self.cards)
        assert colors == {"red": 25, "blue": 25, "green": 25, "yellow": 25, "wild": 8}

    def test_one_zero_per_color(self):
        zeros = [c for c in self.cards if c.value == "0"]
        assert sorted(c.color for c in zeros) == ["blue", "green", "red", "yellow"]

    def test_two_of_each_other_number_per_color(self):
        counts = Counter((c.color, c.value) for c in self.cards if c.kind == CardKind.NUMBER)
        for (color, value), count in counts.items():
            assert count == (1 if value == "0" else 2), (color, value)

    def test_action_cards(self):
        counts = Counter((c.color, c.value) for c in self.cards if c.kind == CardKind.ACTION)
        assert len(counts) == 12
        assert set(counts.values()) == {2}

    def test_wild_cards(self):
        wilds = Counter(c.value for c in self.cards if c.kind == CardKind.WILD)
        assert wilds == {"wild": 4, "draw4": 4}

    def test_same_seed_same_order(self):
        again = DeckManager(seed=1).generate()
        assert [c.id for c in again] == [c.id for c in self.cards]

    def test_generate_is_shuffled(self):
        assert [c.id for c in self.cards] != list(range(1, 109))


class TestCard:

    def test_label_for_colored_card(self):
        assert make_card(1, "red", "5").label() == "RED 5"
        assert make_card(2, "blue", "skip").label() == "BLUE SKIP"

    def test_label_for_wilds(self):
        assert make_card(3, "wild", "wild").label() == "Wild"
        assert make_card(4, "wild", "draw4").label() == "Wild Draw 4"

    def test_to_dict(self):
        assert make_card(7, "green", "draw2").to_dict() == {
            "id": 7, "color": "green", "value": "draw2", "type": "action",
        }

    def test_cards_are_immutable(self):
        card = make_card(1, "red", "5")
        with pytest.raises(Exception):
            card.color = "blue"


# =============================================================================
# Shuffle
# =============================================================================

class TestShuffle:

    def test_returns_permutation_and_leaves_input(self):
        dm = DeckManager(seed=3)
        cards = [make_card(i, "red", str(i % 10)) for i in range(1, 21)]
        before = list(cards)
        shuffled = dm.shuffle(cards)
        assert cards == before
        assert sorted(c.id for c in shuffled) == list(range(1, 21))

    def test_no_positional_bias(self):
        """Every ordering of three cards shows up about equally often."""
        dm = DeckManager(seed=42)
        cards = [make_card(i, "red", str(i)) for i in range(3)]
        counts = Counter(tuple(c.id for c in dm.shuffle(cards)) for _ in range(6000))
        assert len(counts) == 6
        for permutation, count in counts.items():
            assert 800 < count < 1200, permutation


# =============================================================================
# Reshuffle from discard
# =============================================================================

class TestReshuffleFromDiscard:

    def test_keeps_top_and_recycles_rest(self):
        discard = [make_card(i, "blue", str(i)) for i in range(1, 6)]
        piles = Piles(draw_pile=[], discard_pile=list(discard))

        assert DeckManager(seed=5).reshuffle_from_discard(piles) is True

        assert piles.discard_pile == [discard[-1]]
        assert sorted(c.id for c in piles.draw_pile) == [1, 2, 3, 4]

    def test_single_discard_is_noop(self):
        only = make_card(1, "blue", "3")
        piles = Piles(draw_pile=[], discard_pile=[only])

        assert DeckManager(seed=5).reshuffle_from_discard(piles) is False
        assert piles.discard_pile == [only]
        assert piles.draw_pile == []

    def test_empty_discard_is_noop(self):
        piles = Piles()
        assert DeckManager().reshuffle_from_discard(piles) is False
        assert piles.draw_pile == []
