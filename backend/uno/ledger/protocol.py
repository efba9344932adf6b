"""Contract for the host ledger the room engine runs against.

The ledger owns balances, account storage, time and atomicity. The engine
never reimplements any of these; it only calls through this protocol.
"""

from collections.abc import Sequence
from contextlib import AbstractContextManager
from typing import Protocol


class Ledger(Protocol):
    """Services supplied by the host ledger."""

    def derive_address(self, seeds: Sequence[bytes]) -> str:
        """Deterministic, collision-resistant address for the given seeds."""
        ...

    def allocate_account(self, payer: str, address: str, size: int, min_balance: int) -> None:
        """Create fixed-capacity storage at address, funded by payer to min_balance."""
        ...

    def transfer(self, source: str, destination: str, amount: int) -> None:
        """Move funds out of an account whose owner signed the operation."""
        ...

    def transfer_as(self, authority_seeds: Sequence[bytes], source: str, destination: str, amount: int) -> None:
        """Move funds out of a derived account, authorized by its seeds."""
        ...

    def balance(self, address: str) -> int: ...

    def min_balance(self, size: int) -> int:
        """Reserve a storage account of this size must retain."""
        ...

    def now(self) -> int:
        """Monotonic ledger time in whole seconds."""
        ...

    def load_data(self, address: str) -> bytes: ...

    def store_data(self, address: str, data: bytes) -> None: ...

    def atomic(self) -> AbstractContextManager[None]:
        """Block in which every transfer and store commits together or not at all."""
        ...
