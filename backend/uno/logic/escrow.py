"""
Escrow accounting: prize pool, platform cut and settlement plans.

The room's storage account is the escrow. Every seated player paid exactly
``entry_fee`` into it, so the prize pool is ``entry_fee * len(players)``.
Functions here only validate and compute; the service performs the
transfers inside one ledger-atomic block and persists the record last.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from uno.logic.enums import RoomStatus
from uno.logic.exceptions import ArgumentError, AuthorizationError, InsufficientEscrowError, StateError
from uno.logic.settings import BASIS_POINTS, EngineSettings
from uno.logic.state import Room


class PrizeSplit(BaseModel):
    """How a prize pool is divided between the winner and the platform."""

    model_config = ConfigDict(frozen=True)

    pool: int
    platform_fee: int
    winner_amount: int


class Refund(BaseModel):
    model_config = ConfigDict(frozen=True)

    player: str
    amount: int


def prize_pool(room: Room) -> int:
    return room.entry_fee * room.player_count


def split_prize(pool: int, fee_bps: int) -> PrizeSplit:
    """Platform takes floor(pool * fee_bps / 10000); the winner takes the rest."""
    platform_fee = pool * fee_bps // BASIS_POINTS
    return PrizeSplit(pool=pool, platform_fee=platform_fee, winner_amount=pool - platform_fee)


def plan_claim(
    room: Room,
    caller: str,
    platform_account: str,
    *,
    settings: EngineSettings,
    escrow_balance: int,
    reserve: int,
) -> tuple[Room, PrizeSplit]:
    """
    Validate a prize claim and return the settled room plus the payout split.

    Checks run in order: game completed, caller is the recorded winner,
    prize not yet claimed, platform account matches, escrow can pay the
    pool without dipping into its storage reserve.
    """
    if room.status is not RoomStatus.COMPLETED:
        raise StateError(f"room is {room.status.value}, prize not claimable")
    if caller != room.winner:
        raise AuthorizationError("only the recorded winner may claim the prize")
    if room.prize_claimed:
        raise StateError("prize already claimed")
    if settings.platform_fee_bps and platform_account != settings.platform_account:
        raise ArgumentError("platform account does not match the configured operator")

    split = split_prize(prize_pool(room), settings.platform_fee_bps)
    spendable = escrow_balance - reserve
    if spendable < split.pool:
        raise InsufficientEscrowError(spendable=spendable, required=split.pool)

    return room.model_copy(update={"prize_claimed": True}), split


def plan_refunds(room: Room) -> list[Refund]:
    """Entry fee back to every seated player except the creator, in roster order."""
    return [Refund(player=player, amount=room.entry_fee) for player in room.players[1:]]
