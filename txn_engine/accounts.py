"""
Account Management Module

Per-client account state (available, held, frozen) and the table that owns
it. Total is always derived as available + held and never stored.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .amount import Amount, MAX_MAGNITUDE
from .errors import AmountOverflowError
from .logging_config import get_logger, log_action


@dataclass(frozen=True)
class AccountSnapshot:
    """Read-only view of an account for reporting"""
    client: int
    available: Amount
    held: Amount
    total: Amount
    locked: bool

    def to_dict(self) -> Dict[str, str]:
        return {
            "client": str(self.client),
            "available": self.available.to_string(),
            "held": self.held.to_string(),
            "total": self.total.to_string(),
            "locked": "true" if self.locked else "false",
        }


@dataclass
class Account:
    """
    Client account.

    Every balance operation computes all new values before assigning any of
    them, so an operation that raises leaves the account unchanged.
    """
    client_id: int
    available: Amount = field(default_factory=Amount.zero)
    held: Amount = field(default_factory=Amount.zero)
    frozen: bool = False

    @property
    def total(self) -> Amount:
        return self.available + self.held

    def can_move_funds(self) -> bool:
        """Frozen accounts accept no new deposits or withdrawals"""
        return not self.frozen

    def credit_available(self, amount: Amount) -> None:
        """
        Add to available funds

        Raises:
            AmountOverflowError: If available or total would exceed the bound
        """
        new_available = self.available + amount
        if new_available.magnitude + self.held.magnitude > MAX_MAGNITUDE:
            raise AmountOverflowError(f"Account {self.client_id} total limit exceeded")
        self.available = new_available

    def debit_available(self, amount: Amount) -> None:
        """
        Remove from available funds

        Raises:
            AmountUnderflowError: If available funds are insufficient
        """
        self.available = self.available - amount

    def hold(self, amount: Amount) -> None:
        """Move funds from available to held"""
        new_available = self.available - amount
        new_held = self.held + amount
        self.available = new_available
        self.held = new_held

    def release(self, amount: Amount) -> None:
        """Move funds from held back to available"""
        new_held = self.held - amount
        new_available = self.available + amount
        self.held = new_held
        self.available = new_available

    def charge_back(self, amount: Amount) -> None:
        """Remove held funds and freeze the account"""
        self.held = self.held - amount
        self.freeze()

    def freeze(self) -> None:
        self.frozen = True

    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(
            client=self.client_id,
            available=self.available,
            held=self.held,
            total=self.total,
            locked=self.frozen
        )


class AccountTable:
    """
    Mapping from client id to Account, created lazily on first reference
    """

    def __init__(self):
        self._accounts: Dict[int, Account] = {}
        self.logger = get_logger("txn_engine.accounts")

    def get_or_create(self, client_id: int) -> Account:
        """Return the client's account, creating a zeroed one if needed"""
        account = self._accounts.get(client_id)
        if account is None:
            account = Account(client_id=client_id)
            self._accounts[client_id] = account
            log_action(
                self.logger, "debug", "Account created",
                action="create_account", resource=f"client:{client_id}"
            )
        return account

    def get(self, client_id: int) -> Optional[Account]:
        """Get account without creating it"""
        return self._accounts.get(client_id)

    def snapshot(self) -> List[AccountSnapshot]:
        """Snapshots of all known accounts ordered by client id"""
        return [self._accounts[client_id].snapshot() for client_id in sorted(self._accounts)]

    def __iter__(self) -> Iterator[Account]:
        return iter(self._accounts.values())

    def __contains__(self, client_id: int) -> bool:
        return client_id in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)
