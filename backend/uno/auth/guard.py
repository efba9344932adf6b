"""Role checks applied to a verified signer before an operation touches the room.

Roles, from weakest to strongest binding:
- creator: the account that founded the room
- seated: any account on the roster
- winner: the account recorded as winner
Turn order is a game rule, not a role: a seated player acting out of turn
is rejected by the card engine with StateError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from uno.logic.enums import OperationType
from uno.logic.exceptions import AuthorizationError, StaleOperationError

if TYPE_CHECKING:
    from uno.auth.signing import OperationEnvelope
    from uno.logic.state import Room

# operation -> role check run against the decoded room; JOIN_ROOM is open to anyone
_CREATOR_OPERATIONS = frozenset(
    {OperationType.CANCEL_ROOM, OperationType.START_GAME, OperationType.END_GAME},
)
_SEATED_OPERATIONS = frozenset({OperationType.PLAY_CARD, OperationType.DRAW_CARD})


def require_creator(room: Room, signer: str) -> None:
    if signer != room.creator:
        raise AuthorizationError("operation requires the room creator's signature")


def require_seated(room: Room, signer: str) -> None:
    if room.seat_of(signer) is None:
        raise AuthorizationError("operation requires a seated player's signature")


def require_winner(room: Room, signer: str) -> None:
    if room.winner is None or signer != room.winner:
        raise AuthorizationError("operation requires the recorded winner's signature")


def require_current_sequence(room: Room | None, envelope: OperationEnvelope, *, closed_at: int = 0) -> None:
    """
    Envelope must be signed against the record's current sequence.

    With no live room the expected sequence is `closed_at`: 0 for an address
    never used, or the last sequence of a cancelled room created there before.
    """
    expected = room.sequence if room is not None else closed_at
    if envelope.sequence != expected:
        raise StaleOperationError(expected=expected, received=envelope.sequence)


def authorize(room: Room, envelope: OperationEnvelope) -> None:
    """Run the role check for the envelope's operation against an existing room."""
    operation_type = envelope.operation.type
    if operation_type in _CREATOR_OPERATIONS:
        require_creator(room, envelope.signer)
    elif operation_type in _SEATED_OPERATIONS:
        require_seated(room, envelope.signer)
    elif operation_type == OperationType.CLAIM_PRIZE and room.winner is not None:
        # no winner yet: the claim fails later as a state error, not a role error
        require_winner(room, envelope.signer)
