"""In-memory ledger implementing the host contract for tests and local runs.

Rent follows the familiar storage-deposit formula: an account must hold
``(ACCOUNT_STORAGE_OVERHEAD + size) * LAMPORTS_PER_BYTE_YEAR *
EXEMPTION_THRESHOLD_YEARS`` to be retained indefinitely.
"""

from __future__ import annotations

import contextlib
import copy
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from uno.ledger.addresses import address_for_name, derive_program_address
from uno.logic.exceptions import AuthorizationError, InsufficientFundsError, StateError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence

logger = structlog.get_logger()

ACCOUNT_STORAGE_OVERHEAD = 128
LAMPORTS_PER_BYTE_YEAR = 3480
EXEMPTION_THRESHOLD_YEARS = 2

DEFAULT_PROGRAM_ID = address_for_name("uno-escrow-program")


@dataclass
class LedgerAccount:
    """Balance plus optional fixed-size storage."""

    lamports: int = 0
    data: bytearray = field(default_factory=bytearray)
    owner: str | None = None


class InMemoryLedger:
    """Dict-backed ledger with snapshot-based atomic blocks."""

    def __init__(
        self,
        program_id: str = DEFAULT_PROGRAM_ID,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self.program_id = program_id
        self._clock = clock or (lambda: int(time.time()))
        self._accounts: dict[str, LedgerAccount] = {}
        self._depth = 0

    # --- test/local helpers ---

    def fund(self, address: str, amount: int) -> None:
        """Mint funds into an account (airdrop)."""
        self._account(address).lamports += amount

    # --- contract ---

    def derive_address(self, seeds: Sequence[bytes]) -> str:
        return derive_program_address(seeds, self.program_id)

    def allocate_account(self, payer: str, address: str, size: int, min_balance: int) -> None:
        existing = self._accounts.get(address)
        if existing is not None and existing.lamports > 0:
            raise StateError(f"account {address} already allocated")
        self._debit(payer, min_balance)
        account = self._account(address)
        account.lamports += min_balance
        account.data = bytearray(size)
        account.owner = self.program_id
        logger.debug("account allocated", address=address, size=size, deposit=min_balance)

    def transfer(self, source: str, destination: str, amount: int) -> None:
        self._debit(source, amount)
        self._account(destination).lamports += amount

    def transfer_as(self, authority_seeds: Sequence[bytes], source: str, destination: str, amount: int) -> None:
        if self.derive_address(authority_seeds) != source:
            raise AuthorizationError(f"seeds do not derive {source}")
        self.transfer(source, destination, amount)

    def balance(self, address: str) -> int:
        account = self._accounts.get(address)
        return account.lamports if account is not None else 0

    def min_balance(self, size: int) -> int:
        return (ACCOUNT_STORAGE_OVERHEAD + size) * LAMPORTS_PER_BYTE_YEAR * EXEMPTION_THRESHOLD_YEARS

    def now(self) -> int:
        return self._clock()

    def load_data(self, address: str) -> bytes:
        account = self._accounts.get(address)
        if account is None or account.owner != self.program_id:
            raise StateError(f"no room storage at {address}")
        return bytes(account.data)

    def store_data(self, address: str, data: bytes) -> None:
        account = self._accounts.get(address)
        if account is None or account.owner != self.program_id:
            raise StateError(f"no room storage at {address}")
        if len(data) != len(account.data):
            raise ValueError(f"storage at {address} holds {len(account.data)} bytes, got {len(data)}")
        account.data[:] = data

    @contextlib.contextmanager
    def atomic(self) -> Iterator[None]:
        """Snapshot every account; restore the snapshot if the block raises.

        Nested blocks join the outermost one.
        """
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return
        snapshot = copy.deepcopy(self._accounts)
        self._depth = 1
        try:
            yield
        except BaseException:
            self._accounts = snapshot
            logger.debug("ledger block rolled back")
            raise
        finally:
            self._depth = 0

    def _account(self, address: str) -> LedgerAccount:
        return self._accounts.setdefault(address, LedgerAccount())

    def _debit(self, address: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"amount must be non-negative, got {amount}")
        account = self._account(address)
        if account.lamports < amount:
            raise InsufficientFundsError(f"{address} holds {account.lamports}, needs {amount}")
        account.lamports -= amount
