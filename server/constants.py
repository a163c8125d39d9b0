"""
Card and table constants for UNO.

This module is the single source of truth for the deck composition.
Room-level limits that operators may tune live in config.py.

Standard UNO deck (108 cards):
    - Per color (red, blue, green, yellow): one 0, two each of 1-9
    - Per color: two each of Skip, Reverse, Draw Two
    - Four Wild and four Wild Draw Four
"""

from config import config

PLAYABLE_COLORS: tuple[str, ...] = ("red", "blue", "green", "yellow")
WILD_COLOR = "wild"

NUMBER_VALUES: tuple[str, ...] = tuple(str(n) for n in range(10))
ACTION_VALUES: tuple[str, ...] = ("skip", "reverse", "draw2")
WILD_VALUES: tuple[str, ...] = ("wild", "draw4")

COPIES_PER_NUMBER = 2          # "0" is the exception: one per color
COPIES_PER_ACTION = 2
COPIES_PER_WILD = 4

DECK_SIZE = 108

# Penalty added to the draw stack by each stacking card
DRAW_PENALTIES: dict[str, int] = {
    "draw2": 2,
    "draw4": 4,
}


# =============================================================================
# Table Constants
# =============================================================================

MAX_PLAYERS = config.MAX_PLAYERS_PER_ROOM
ROOM_CODE_LENGTH = config.ROOM_CODE_LENGTH
HAND_SIZE = config.game.hand_size
MIN_PLAYERS_TO_START = config.game.min_players_to_start
DEFAULT_WILD_COLOR = config.game.default_wild_color
CHAT_HISTORY_LIMIT = config.CHAT_HISTORY_LIMIT
MAX_CHAT_LENGTH = config.MAX_CHAT_LENGTH
