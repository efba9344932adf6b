"""
Card representation and deck construction.

A standard deck has 108 cards: for each of the four colors one "0" and two
each of "1".."9", Skip, Reverse and Draw2 (100 colored cards), plus four
Wild and four Wild4, both black.

Inside the stored record a card is packed into one byte:
    code = color_index * 16 + value_index
with colors ordered red, blue, green, yellow, black and values ordered
"0".."9", Skip, Reverse, Draw2, Wild, Wild4. Valid codes stay below 128 so
each card encodes as a single msgpack fixint.
"""

from pydantic import BaseModel, ConfigDict

from uno.logic.enums import PLAYABLE_COLORS, WILD_VALUES, CardColor, CardValue

DECK_SIZE = 108
HAND_SIZE = 7

_COLOR_ORDER: tuple[CardColor, ...] = (*PLAYABLE_COLORS, CardColor.BLACK)
_VALUE_ORDER: tuple[CardValue, ...] = tuple(CardValue)
_CODE_STRIDE = 16

# values dealt twice per color; "0" is dealt once
_DOUBLED_VALUES: tuple[CardValue, ...] = tuple(
    v for v in _VALUE_ORDER if v not in WILD_VALUES and v is not CardValue.ZERO
)
_WILDS_PER_KIND = 4


class UnoCard(BaseModel):
    """A single card. Black cards carry a chosen color once played."""

    model_config = ConfigDict(frozen=True)

    color: CardColor
    value: CardValue

    @property
    def is_wild(self) -> bool:
        return self.color is CardColor.BLACK

    def __str__(self) -> str:
        return f"{self.color.value}:{self.value.value}"


def card_to_code(card: UnoCard) -> int:
    """Pack a card into its one-byte record code."""
    return _COLOR_ORDER.index(card.color) * _CODE_STRIDE + _VALUE_ORDER.index(card.value)


def card_from_code(code: int) -> UnoCard:
    """Unpack a one-byte record code.

    Raises ValueError for codes outside the color/value grid.
    """
    if isinstance(code, bool) or not isinstance(code, int):
        raise TypeError(f"card code must be an integer, got {type(code).__name__}")
    color_index, value_index = divmod(code, _CODE_STRIDE)
    if not (0 <= color_index < len(_COLOR_ORDER)) or value_index >= len(_VALUE_ORDER):
        raise ValueError(f"invalid card code {code}")
    color = _COLOR_ORDER[color_index]
    value = _VALUE_ORDER[value_index]
    if color is CardColor.BLACK and value not in WILD_VALUES:
        raise ValueError(f"card code {code} is black but not a wild value")
    return UnoCard(color=color, value=value)


def build_deck() -> list[UnoCard]:
    """Return the 108-card deck in construction order (unshuffled)."""
    deck: list[UnoCard] = []
    for color in PLAYABLE_COLORS:
        for value in _VALUE_ORDER:
            if value in WILD_VALUES:
                continue
            deck.append(UnoCard(color=color, value=value))
            if value in _DOUBLED_VALUES:
                deck.append(UnoCard(color=color, value=value))
    for _ in range(_WILDS_PER_KIND):
        deck.append(UnoCard(color=CardColor.BLACK, value=CardValue.WILD))
        deck.append(UnoCard(color=CardColor.BLACK, value=CardValue.WILD4))
    return deck


def is_valid_move(card: UnoCard, current_card: UnoCard) -> bool:
    """Black cards always play; otherwise color or value must match."""
    if card.is_wild:
        return True
    return card.color == current_card.color or card.value == current_card.value
