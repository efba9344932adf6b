"""Typed domain exceptions for room operations.

Every rejected operation raises a subclass of EngineError. Errors are
raised before any persisted mutation and surface to the caller unchanged;
the engine never retries. Each class carries a stable ``code`` so callers
can branch on the failure without parsing messages.
"""

from uno.logic.enums import EngineErrorCode


class EngineError(Exception):
    """Base exception for all rejected room operations."""

    code: EngineErrorCode = EngineErrorCode.INVALID_STATE


class AuthorizationError(EngineError):
    """Missing or bad signature, or the signer lacks the required role."""

    code = EngineErrorCode.UNAUTHORIZED


class StateError(EngineError):
    """Operation is not valid for the room's current status."""

    code = EngineErrorCode.INVALID_STATE


class StaleOperationError(StateError):
    """Operation was signed against an older record sequence."""

    code = EngineErrorCode.STALE_OPERATION

    def __init__(self, *, expected: int, received: int) -> None:
        self.expected = expected
        self.received = received
        super().__init__(f"operation signed for sequence {received}, record is at {expected}")


class ArgumentError(EngineError):
    """Bad parameter: roster size, fee, card index, color, slot or address."""

    code = EngineErrorCode.INVALID_ARGUMENT


class AddressDerivationError(ArgumentError):
    """Supplied room address does not match the derived address."""

    code = EngineErrorCode.ADDRESS_MISMATCH


class UnsupportedOperationError(ArgumentError):
    """Operation belongs to the lifecycle variant this deployment does not run."""

    code = EngineErrorCode.UNSUPPORTED_OPERATION


class ResourceError(EngineError):
    """A bounded resource (funds, deck, buffer) is insufficient."""

    code = EngineErrorCode.INSUFFICIENT_RESOURCES


class CapacityError(ResourceError):
    """Encoded record does not fit the fixed-capacity buffer."""

    code = EngineErrorCode.RECORD_TOO_LARGE

    def __init__(self, *, required: int, capacity: int) -> None:
        self.required = required
        self.capacity = capacity
        super().__init__(f"record needs {required} bytes, buffer holds {capacity}")


class DeckExhaustedError(ResourceError):
    """Draw pile is empty; discards are never reshuffled."""

    code = EngineErrorCode.DECK_EXHAUSTED


class InsufficientEscrowError(ResourceError):
    """Escrow's spendable balance cannot cover the prize pool."""

    code = EngineErrorCode.INSUFFICIENT_ESCROW

    def __init__(self, *, spendable: int, required: int) -> None:
        self.spendable = spendable
        self.required = required
        super().__init__(f"escrow can spend {spendable}, prize pool is {required}")


class InsufficientFundsError(ResourceError):
    """A ledger transfer source cannot cover the amount."""

    code = EngineErrorCode.INSUFFICIENT_FUNDS


class CorruptionError(EngineError):
    """Stored record failed bounds or format checks."""

    code = EngineErrorCode.CORRUPT_RECORD
