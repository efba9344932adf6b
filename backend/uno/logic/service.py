"""
Room service: the single entry point for room operations.

Each operation runs as one indivisible unit:

    verify envelope -> decode room -> role + sequence checks -> validate and
    mutate in memory -> encode -> move funds -> persist

all inside one ``ledger.atomic()`` block. Any failure raises before the
record is stored, and the ledger discards every transfer made in the
block, so no partially applied operation is ever observable. Errors are
logged and re-raised unchanged; nothing is retried here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from uno.auth.guard import authorize, require_current_sequence
from uno.auth.signing import verify_operation
from uno.ledger.addresses import room_seeds
from uno.logic.enums import HYBRID_ONLY, ON_ENGINE_ONLY, GameVariant, OperationType
from uno.logic.escrow import plan_claim, prize_pool
from uno.logic.events import PrizeClaimedEvent, RoomCancelledEvent, RoomEvent
from uno.logic.exceptions import EngineError, StateError, UnsupportedOperationError
from uno.logic.lifecycle import (
    cancel_room,
    check_room_address,
    create_room,
    end_external_game,
    join_room,
    start_external_game,
)
from uno.logic.rng import make_seed
from uno.logic.settings import EngineSettings
from uno.logic.turn import draw_card, play_card
from uno.logic.types import OperationResult, RoomView
from uno.record.codec import (
    closed_sequence,
    decode_record,
    encode_closed_record,
    encode_record,
    is_empty_record,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from uno.auth.signing import OperationEnvelope
    from uno.ledger.protocol import Ledger
    from uno.logic.state import Room
    from uno.logic.types import (
        CancelRoomOperation,
        ClaimPrizeOperation,
        CreateRoomOperation,
        DrawCardOperation,
        EndGameOperation,
        JoinRoomOperation,
        PlayCardOperation,
        StartGameOperation,
    )

logger = structlog.get_logger()


class RoomService:
    """Applies signed operations to room records held by the ledger."""

    def __init__(self, ledger: Ledger, signing_secret: str, settings: EngineSettings | None = None) -> None:
        if not signing_secret:
            raise ValueError("signing_secret must not be empty")
        self._ledger = ledger
        self._secret = signing_secret
        self._settings = settings or EngineSettings()
        self._handlers: dict[OperationType, Callable[[OperationEnvelope, Any], OperationResult]] = {
            OperationType.CREATE_ROOM: self._handle_create_room,
            OperationType.JOIN_ROOM: self._handle_join_room,
            OperationType.PLAY_CARD: self._handle_play_card,
            OperationType.DRAW_CARD: self._handle_draw_card,
            OperationType.START_GAME: self._handle_start_game,
            OperationType.END_GAME: self._handle_end_game,
            OperationType.CLAIM_PRIZE: self._handle_claim_prize,
            OperationType.CANCEL_ROOM: self._handle_cancel_room,
        }

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    def execute(self, token: str) -> OperationResult:
        """Verify and apply one signed operation."""
        with structlog.contextvars.bound_contextvars(room=None, operation=None, signer=None):
            try:
                envelope = verify_operation(
                    token,
                    self._secret,
                    now=self._ledger.now(),
                    ttl_seconds=self._settings.operation_ttl_seconds,
                )
                operation_type = OperationType(envelope.operation.type)
                structlog.contextvars.bind_contextvars(
                    room=envelope.room,
                    operation=operation_type,
                    signer=envelope.signer,
                )
                self._check_variant(operation_type)
                with self._ledger.atomic():
                    result = self._handlers[operation_type](envelope, envelope.operation)
            except EngineError as e:
                logger.info("operation rejected", code=e.code, reason=str(e))
                raise
            logger.info("operation applied", sequence=result.sequence, events=[ev.type for ev in result.events])
            return result

    def get_room(self, address: str) -> Room:
        """Decode the current record at address."""
        return self._load(address)

    def get_view(self, address: str, viewer: str | None = None) -> RoomView:
        """Read-only summary; the viewer's own hand is listed, others are counted."""
        room = self._load(address)
        seat = room.seat_of(viewer) if viewer is not None else None
        return RoomView(
            status=room.status,
            players=room.players,
            max_players=room.max_players,
            entry_fee=room.entry_fee,
            prize_pool=prize_pool(room),
            current_player_index=room.current_player_index,
            direction=room.direction,
            current_card=room.current_card,
            deck_size=len(room.deck),
            hand_counts=tuple(len(hand) for hand in room.hands),
            viewer_seat=seat,
            viewer_hand=room.hands[seat] if seat is not None else (),
            winner=room.winner,
            prize_claimed=room.prize_claimed,
            sequence=room.sequence,
            external_game_id=room.external_game_id,
        )

    # --- pipeline helpers ---

    def _check_variant(self, operation_type: OperationType) -> None:
        variant = self._settings.variant
        if variant is GameVariant.ON_ENGINE and operation_type in HYBRID_ONLY:
            raise UnsupportedOperationError(f"{operation_type.value} is not available in the {variant.value} variant")
        if variant is GameVariant.HYBRID and operation_type in ON_ENGINE_ONLY:
            raise UnsupportedOperationError(f"{operation_type.value} is not available in the {variant.value} variant")

    def _load(self, address: str) -> Room:
        data = self._ledger.load_data(address)
        if is_empty_record(data) or closed_sequence(data) is not None:
            raise StateError("room is closed")
        return decode_record(data)

    def _closed_at(self, address: str) -> int:
        """Last sequence of a room cancelled at address, 0 if none was."""
        try:
            data = self._ledger.load_data(address)
        except StateError:
            return 0
        sequence = closed_sequence(data)
        return 0 if sequence is None else sequence

    def _load_authorized(self, envelope: OperationEnvelope) -> Room:
        room = self._load(envelope.room)
        require_current_sequence(room, envelope)
        authorize(room, envelope)
        return room

    def _encode(self, room: Room, capacity: int) -> tuple[Room, bytes]:
        """Bump the sequence and encode; fails before any funds move if the record overflows."""
        room = room.model_copy(update={"sequence": room.sequence + 1})
        buffer = bytearray(capacity)
        encode_record(room, buffer)
        return room, bytes(buffer)

    def _persist(self, address: str, room: Room, events: list[RoomEvent]) -> OperationResult:
        capacity = len(self._ledger.load_data(address))
        room, buffer = self._encode(room, capacity)
        self._ledger.store_data(address, buffer)
        return OperationResult(room=address, sequence=room.sequence, events=tuple(events))

    # --- handlers ---

    def _handle_create_room(self, envelope: OperationEnvelope, op: CreateRoomOperation) -> OperationResult:
        closed_at = self._closed_at(envelope.room)
        require_current_sequence(None, envelope, closed_at=closed_at)
        now = self._ledger.now()
        room, events = create_room(
            envelope.signer,
            op.max_players,
            op.entry_fee,
            slot=op.slot,
            now=now,
            settings=self._settings,
        )
        check_room_address(envelope.room, self._ledger.derive_address(room_seeds(envelope.signer, op.slot)))
        # a room created again after a cancel continues the old sequence
        room = room.model_copy(update={"sequence": closed_at})

        capacity = self._settings.record_capacity
        room, buffer = self._encode(room, capacity)
        self._ledger.allocate_account(envelope.signer, envelope.room, capacity, self._ledger.min_balance(capacity))
        self._ledger.transfer(envelope.signer, envelope.room, room.entry_fee)
        self._ledger.store_data(envelope.room, buffer)
        return OperationResult(room=envelope.room, sequence=room.sequence, events=tuple(events))

    def _handle_join_room(self, envelope: OperationEnvelope, _op: JoinRoomOperation) -> OperationResult:
        room = self._load_authorized(envelope)
        now = self._ledger.now()
        new_room, events = join_room(
            room,
            envelope.signer,
            seed=make_seed(self._settings.shuffle_source, now),
            now=now,
            settings=self._settings,
        )
        self._ledger.transfer(envelope.signer, envelope.room, room.entry_fee)
        return self._persist(envelope.room, new_room, events)

    def _handle_play_card(self, envelope: OperationEnvelope, op: PlayCardOperation) -> OperationResult:
        room = self._load_authorized(envelope)
        new_room, events = play_card(room, envelope.signer, op.card_index, op.chosen_color, now=self._ledger.now())
        return self._persist(envelope.room, new_room, events)

    def _handle_draw_card(self, envelope: OperationEnvelope, _op: DrawCardOperation) -> OperationResult:
        room = self._load_authorized(envelope)
        new_room, events = draw_card(room, envelope.signer)
        return self._persist(envelope.room, new_room, events)

    def _handle_start_game(self, envelope: OperationEnvelope, op: StartGameOperation) -> OperationResult:
        room = self._load_authorized(envelope)
        new_room, events = start_external_game(
            room,
            envelope.signer,
            op.external_game_id,
            now=self._ledger.now(),
            settings=self._settings,
        )
        return self._persist(envelope.room, new_room, events)

    def _handle_end_game(self, envelope: OperationEnvelope, op: EndGameOperation) -> OperationResult:
        room = self._load_authorized(envelope)
        new_room, events = end_external_game(room, envelope.signer, op.winner, now=self._ledger.now())
        return self._persist(envelope.room, new_room, events)

    def _handle_claim_prize(self, envelope: OperationEnvelope, op: ClaimPrizeOperation) -> OperationResult:
        room = self._load_authorized(envelope)
        capacity = len(self._ledger.load_data(envelope.room))
        new_room, split = plan_claim(
            room,
            envelope.signer,
            op.platform_account,
            settings=self._settings,
            escrow_balance=self._ledger.balance(envelope.room),
            reserve=self._ledger.min_balance(capacity),
        )
        seeds = room_seeds(room.creator, room.slot)
        new_room, buffer = self._encode(new_room, capacity)
        if split.platform_fee:
            self._ledger.transfer_as(seeds, envelope.room, self._settings.platform_account, split.platform_fee)
        self._ledger.transfer_as(seeds, envelope.room, envelope.signer, split.winner_amount)
        self._ledger.store_data(envelope.room, buffer)
        logger.info("prize paid", winner_amount=split.winner_amount, platform_fee=split.platform_fee)
        event = PrizeClaimedEvent(
            winner=envelope.signer,
            winner_amount=split.winner_amount,
            platform_fee=split.platform_fee,
        )
        return OperationResult(room=envelope.room, sequence=new_room.sequence, events=(event,))

    def _handle_cancel_room(self, envelope: OperationEnvelope, _op: CancelRoomOperation) -> OperationResult:
        room = self._load_authorized(envelope)
        refunds = cancel_room(room, envelope.signer)
        seeds = room_seeds(room.creator, room.slot)
        for refund in refunds:
            self._ledger.transfer_as(seeds, envelope.room, refund.player, refund.amount)
        remainder = self._ledger.balance(envelope.room)
        self._ledger.transfer_as(seeds, envelope.room, room.creator, remainder)
        capacity = len(self._ledger.load_data(envelope.room))
        closed = bytearray(capacity)
        encode_closed_record(room.sequence + 1, closed)
        self._ledger.store_data(envelope.room, bytes(closed))
        event = RoomCancelledEvent(refunded=tuple(r.player for r in refunds), returned_to_creator=remainder)
        return OperationResult(room=envelope.room, sequence=room.sequence + 1, events=(event,))
