"""
Transaction Processing Module

The account/ledger state machine. Records are applied strictly in arrival
order; each one is either applied, ignored (a non-fatal domain condition such
as insufficient funds), or aborts the run with an ExternalError (a
structurally malformed record). Ignored records never change state.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Union

from .accounts import Account, AccountSnapshot, AccountTable
from .errors import AmountError, AmountOverflowError, ExternalError
from .ledger import TransactionLedger
from .logging_config import get_logger, log_action
from .records import RawRecord, Transaction, TransactionType


class ProcessOutcome(Enum):
    """Result of processing a single record"""
    APPLIED = "applied"
    IGNORED = "ignored"


class IgnoreReason(Enum):
    """Domain conditions that cause a record to be skipped"""
    ACCOUNT_FROZEN = "account_frozen"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    LIMIT_EXCEEDED = "limit_exceeded"
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    NOT_A_DEPOSIT = "not_a_deposit"
    ALREADY_DISPUTED = "already_disputed"
    ALREADY_CHARGED_BACK = "already_charged_back"
    NOT_DISPUTED = "not_disputed"


@dataclass
class RunSummary:
    """Counters for one processing run"""
    processed: int = 0
    applied: int = 0
    ignored: int = 0
    ignore_reasons: Dict[IgnoreReason, int] = field(default_factory=dict)

    def record(self, outcome: ProcessOutcome, reason: Optional[IgnoreReason] = None) -> None:
        self.processed += 1
        if outcome == ProcessOutcome.APPLIED:
            self.applied += 1
        else:
            self.ignored += 1
            self.ignore_reasons[reason] = self.ignore_reasons.get(reason, 0) + 1

    def to_dict(self) -> Dict:
        return {
            "processed": self.processed,
            "applied": self.applied,
            "ignored": self.ignored,
            "ignore_reasons": {reason.value: count for reason, count in self.ignore_reasons.items()},
        }


Handler = Callable[[Transaction], Optional[IgnoreReason]]


class TransactionProcessor:
    """
    Applies transaction records to an exclusively owned ledger and account table
    """

    def __init__(
        self,
        ledger: Optional[TransactionLedger] = None,
        accounts: Optional[AccountTable] = None,
        progress_interval: int = 0
    ):
        self._ledger = ledger if ledger is not None else TransactionLedger()
        self._accounts = accounts if accounts is not None else AccountTable()
        self.progress_interval = progress_interval
        self.summary = RunSummary()
        self.logger = get_logger("txn_engine.processor")

        self._handlers: Dict[TransactionType, Handler] = {
            TransactionType.DEPOSIT: self._deposit,
            TransactionType.WITHDRAWAL: self._withdraw,
            TransactionType.DISPUTE: self._dispute,
            TransactionType.RESOLVE: self._resolve,
            TransactionType.CHARGEBACK: self._chargeback,
        }
        missing = set(TransactionType) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No handler for transaction types: {sorted(t.value for t in missing)}")

    @property
    def ledger(self) -> TransactionLedger:
        return self._ledger

    @property
    def accounts(self) -> AccountTable:
        return self._accounts

    def get_account(self, client_id: int) -> Optional[Account]:
        """Get a client's account if it has been referenced"""
        return self._accounts.get(client_id)

    def snapshot(self) -> List[AccountSnapshot]:
        """Final state of every known account, ordered by client id"""
        return self._accounts.snapshot()

    def process(self, record: Union[RawRecord, Transaction]) -> ProcessOutcome:
        """
        Apply a single record

        Args:
            record: A raw record from the stream or an already validated Transaction

        Returns:
            APPLIED if the record changed state, IGNORED otherwise

        Raises:
            ExternalError: If the record kind is unrecognised or a deposit
                or withdrawal carries no amount
        """
        if isinstance(record, Transaction):
            transaction = record
        else:
            transaction = Transaction.from_record(record)

        self._accounts.get_or_create(transaction.client_id)

        reason = self._handlers[transaction.transaction_type](transaction)
        if reason is None:
            outcome = ProcessOutcome.APPLIED
        else:
            outcome = ProcessOutcome.IGNORED
            log_action(
                self.logger, "debug", f"Ignored {transaction.transaction_type.value}: {reason.value}",
                action=transaction.transaction_type.value, resource=f"tx:{transaction.tx_id}",
                extra={
                    "client_id": transaction.client_id,
                    "tx_id": transaction.tx_id,
                    "reason": reason.value,
                }
            )

        self.summary.record(outcome, reason)
        return outcome

    def run(self, records: Iterable[Union[RawRecord, Transaction]]) -> RunSummary:
        """
        Consume records one at a time until exhausted

        Stops at the first structurally malformed record; everything applied
        before it is kept.

        Args:
            records: Lazy, single-pass sequence of records

        Returns:
            RunSummary for this processor

        Raises:
            ExternalError: On the first malformed record
        """
        try:
            for record in records:
                self.process(record)

                if self.progress_interval and self.summary.processed % self.progress_interval == 0:
                    log_action(
                        self.logger, "info", f"Processed {self.summary.processed} records",
                        action="progress", extra=self.summary.to_dict()
                    )
        except ExternalError as e:
            log_action(
                self.logger, "error", f"Processing aborted: {e}",
                action="abort_run",
                extra={"records_processed": self.summary.processed}
            )
            raise

        log_action(
            self.logger, "info", "Processing complete",
            action="complete_run",
            extra={**self.summary.to_dict(), "accounts": len(self._accounts)}
        )
        return self.summary

    def _deposit(self, transaction: Transaction) -> Optional[IgnoreReason]:
        account = self._accounts.get_or_create(transaction.client_id)
        if not account.can_move_funds():
            return IgnoreReason.ACCOUNT_FROZEN
        if transaction.tx_id in self._ledger:
            return IgnoreReason.DUPLICATE_TRANSACTION

        try:
            account.credit_available(transaction.amount)
        except AmountError as e:
            return self._reason_for(e)

        self._ledger.insert(
            transaction.tx_id, transaction.transaction_type,
            transaction.client_id, transaction.amount
        )
        return None

    def _withdraw(self, transaction: Transaction) -> Optional[IgnoreReason]:
        account = self._accounts.get_or_create(transaction.client_id)
        if not account.can_move_funds():
            return IgnoreReason.ACCOUNT_FROZEN
        if transaction.tx_id in self._ledger:
            return IgnoreReason.DUPLICATE_TRANSACTION

        try:
            account.debit_available(transaction.amount)
        except AmountError as e:
            return self._reason_for(e)

        self._ledger.insert(
            transaction.tx_id, transaction.transaction_type,
            transaction.client_id, transaction.amount
        )
        return None

    def _dispute(self, transaction: Transaction) -> Optional[IgnoreReason]:
        entry = self._ledger.get(transaction.tx_id)
        if entry is None:
            return IgnoreReason.UNKNOWN_TRANSACTION
        if not entry.is_deposit:
            return IgnoreReason.NOT_A_DEPOSIT
        if entry.disputed:
            return IgnoreReason.ALREADY_DISPUTED
        if entry.charged_back:
            return IgnoreReason.ALREADY_CHARGED_BACK

        # The dispute lifecycle acts on the account that owns the deposit
        account = self._accounts.get_or_create(entry.client_id)
        try:
            account.hold(entry.amount)
        except AmountError as e:
            return self._reason_for(e)

        self._ledger.set_disputed(transaction.tx_id, True)
        return None

    def _resolve(self, transaction: Transaction) -> Optional[IgnoreReason]:
        entry = self._ledger.get(transaction.tx_id)
        if entry is None:
            return IgnoreReason.UNKNOWN_TRANSACTION
        if not entry.disputed:
            return IgnoreReason.NOT_DISPUTED

        account = self._accounts.get_or_create(entry.client_id)
        try:
            account.release(entry.amount)
        except AmountError as e:
            return self._reason_for(e)

        self._ledger.set_disputed(transaction.tx_id, False)
        return None

    def _chargeback(self, transaction: Transaction) -> Optional[IgnoreReason]:
        entry = self._ledger.get(transaction.tx_id)
        if entry is None:
            return IgnoreReason.UNKNOWN_TRANSACTION
        if not entry.disputed:
            return IgnoreReason.NOT_DISPUTED

        account = self._accounts.get_or_create(entry.client_id)
        try:
            account.charge_back(entry.amount)
        except AmountError as e:
            return self._reason_for(e)

        self._ledger.mark_charged_back(transaction.tx_id)
        log_action(
            self.logger, "info", "Account frozen after chargeback",
            action="freeze_account", resource=f"client:{entry.client_id}",
            extra={"tx_id": transaction.tx_id, "amount": entry.amount.to_string()}
        )
        return None

    @staticmethod
    def _reason_for(error: AmountError) -> IgnoreReason:
        if isinstance(error, AmountOverflowError):
            return IgnoreReason.LIMIT_EXCEEDED
        return IgnoreReason.INSUFFICIENT_FUNDS
