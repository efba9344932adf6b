"""
String enum definitions for room and card concepts.
"""

from enum import Enum, IntEnum


class RoomStatus(str, Enum):
    """Lifecycle status of a room record."""

    WAITING_FOR_PLAYERS = "waiting_for_players"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class CardColor(str, Enum):
    """Card colors. BLACK is reserved for Wild and Wild4."""

    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    BLACK = "black"


# colors a player may name when playing a wild card, in record order
PLAYABLE_COLORS: tuple[CardColor, ...] = (
    CardColor.RED,
    CardColor.BLUE,
    CardColor.GREEN,
    CardColor.YELLOW,
)


class CardValue(str, Enum):
    """Card faces."""

    ZERO = "0"
    ONE = "1"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    SKIP = "Skip"
    REVERSE = "Reverse"
    DRAW2 = "Draw2"
    WILD = "Wild"
    WILD4 = "Wild4"


WILD_VALUES: frozenset[CardValue] = frozenset({CardValue.WILD, CardValue.WILD4})


class GameVariant(str, Enum):
    """Which lifecycle a deployment runs.

    ON_ENGINE enforces the card rules inside the engine (PlayCard/DrawCard).
    HYBRID delegates play to an external game server (StartGame/EndGame).
    """

    ON_ENGINE = "on_engine"
    HYBRID = "hybrid"


class ShuffleSource(str, Enum):
    """Seed material for the deck shuffle."""

    LEDGER_TIME = "ledger_time"  # seed = ledger timestamp, reproducible by anyone
    SECURE = "secure"  # seed drawn from the secrets module


class OperationType(str, Enum):
    """Closed set of operations accepted by the room service."""

    CREATE_ROOM = "create_room"
    JOIN_ROOM = "join_room"
    PLAY_CARD = "play_card"
    DRAW_CARD = "draw_card"
    START_GAME = "start_game"
    END_GAME = "end_game"
    CLAIM_PRIZE = "claim_prize"
    CANCEL_ROOM = "cancel_room"


ON_ENGINE_ONLY: frozenset[OperationType] = frozenset({OperationType.PLAY_CARD, OperationType.DRAW_CARD})
HYBRID_ONLY: frozenset[OperationType] = frozenset({OperationType.START_GAME, OperationType.END_GAME})


class WireRoomStatus(IntEnum):
    """Integer encoding of RoomStatus inside the stored record."""

    WAITING_FOR_PLAYERS = 0
    IN_PROGRESS = 1
    COMPLETED = 2


class EngineErrorCode(str, Enum):
    """Stable error codes surfaced to callers."""

    UNAUTHORIZED = "unauthorized"
    INVALID_STATE = "invalid_state"
    STALE_OPERATION = "stale_operation"
    INVALID_ARGUMENT = "invalid_argument"
    ADDRESS_MISMATCH = "address_mismatch"
    UNSUPPORTED_OPERATION = "unsupported_operation"
    INSUFFICIENT_RESOURCES = "insufficient_resources"
    RECORD_TOO_LARGE = "record_too_large"
    DECK_EXHAUSTED = "deck_exhausted"
    INSUFFICIENT_ESCROW = "insufficient_escrow"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    CORRUPT_RECORD = "corrupt_record"
