"""
Transaction Ledger Module

Historical store of successfully applied deposits and withdrawals, keyed by
transaction id. Entries are never deleted; only their dispute state changes.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

from .amount import Amount
from .errors import LedgerError
from .records import TransactionType


@dataclass
class HistoricalTransaction:
    """
    Deposit or withdrawal that was applied to an account
    """
    transaction_type: TransactionType
    client_id: int
    amount: Amount
    disputed: bool = False
    charged_back: bool = False

    @property
    def is_deposit(self) -> bool:
        return self.transaction_type == TransactionType.DEPOSIT

    @property
    def can_be_disputed(self) -> bool:
        """Only deposits that are not under dispute and were never charged back"""
        return self.is_deposit and not self.disputed and not self.charged_back


class TransactionLedger:
    """
    Mapping from transaction id to HistoricalTransaction with O(1) lookup
    """

    def __init__(self):
        self._entries: Dict[int, HistoricalTransaction] = {}

    def get(self, tx_id: int) -> Optional[HistoricalTransaction]:
        """Get historical entry by transaction id"""
        return self._entries.get(tx_id)

    def contains(self, tx_id: int) -> bool:
        return tx_id in self._entries

    def insert(
        self,
        tx_id: int,
        transaction_type: TransactionType,
        client_id: int,
        amount: Amount
    ) -> HistoricalTransaction:
        """
        Record an applied deposit or withdrawal

        Args:
            tx_id: Transaction id, unique across deposits and withdrawals
            transaction_type: DEPOSIT or WITHDRAWAL
            client_id: Client whose account the transaction was applied to
            amount: Amount that was moved

        Returns:
            The stored HistoricalTransaction

        Raises:
            LedgerError: If the id is already recorded or the type does not move funds
        """
        if not transaction_type.moves_funds:
            raise LedgerError(f"Cannot record {transaction_type.value} transaction {tx_id} in ledger")

        if tx_id in self._entries:
            raise LedgerError(f"Transaction {tx_id} already recorded")

        entry = HistoricalTransaction(
            transaction_type=transaction_type,
            client_id=client_id,
            amount=amount
        )
        self._entries[tx_id] = entry
        return entry

    def set_disputed(self, tx_id: int, disputed: bool) -> HistoricalTransaction:
        """Set the disputed flag of an existing entry"""
        entry = self._entries.get(tx_id)
        if entry is None:
            raise LedgerError(f"Transaction {tx_id} not found")
        entry.disputed = disputed
        return entry

    def mark_charged_back(self, tx_id: int) -> HistoricalTransaction:
        """Close the dispute on an entry for good"""
        entry = self.set_disputed(tx_id, False)
        entry.charged_back = True
        return entry

    def items(self) -> Iterator[Tuple[int, HistoricalTransaction]]:
        return iter(self._entries.items())

    def __contains__(self, tx_id: int) -> bool:
        return tx_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
