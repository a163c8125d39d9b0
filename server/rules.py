"""Play validity for UNO.

Kept free of room state so it can be exercised standalone.
"""

from deck import Card


def is_valid_play(card: Card, top_card: Card, current_color: str, draw_stack: int) -> bool:
    """
    Decide whether `card` may be played on `top_card`.

    While a draw penalty is pending only stacking cards are accepted: a
    Draw Two on a Draw Two, or any Wild Draw Four (regardless of what is
    on top). Otherwise wilds are always playable and colored cards must
    match the active color or the top card's value.
    """
    if draw_stack > 0:
        if card.value == "draw4":
            return True
        return card.value == "draw2" and top_card.value == "draw2"

    if card.is_wild:
        return True

    return card.color == current_color or card.value == top_card.value
