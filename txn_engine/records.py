"""
Transaction Record Module

Defines the five transaction kinds, the raw record shape produced by the
record stream, and the validated Transaction the processor applies.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .amount import Amount
from .errors import ExternalError


MAX_CLIENT_ID = 2 ** 16 - 1
MAX_TX_ID = 2 ** 32 - 1


class TransactionType(Enum):
    """Kinds of transaction records"""
    DEPOSIT = "deposit"          # Credit available funds
    WITHDRAWAL = "withdrawal"    # Debit available funds
    DISPUTE = "dispute"          # Move a deposit's funds to held
    RESOLVE = "resolve"          # Release held funds back to available
    CHARGEBACK = "chargeback"    # Remove held funds and freeze the account

    @property
    def moves_funds(self) -> bool:
        """Deposits and withdrawals carry an amount and are kept in the ledger"""
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)

    @classmethod
    def from_label(cls, label: str) -> Optional['TransactionType']:
        """Look up a kind by its record label, None if unrecognised"""
        try:
            return cls(label)
        except ValueError:
            return None


class RawRecord(BaseModel):
    """
    One parsed input row. The type is kept as free text so that unknown
    kinds reach the processor's validation gate instead of failing parsing.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: str
    client: int = Field(..., ge=0, le=MAX_CLIENT_ID)
    tx: int = Field(..., ge=0, le=MAX_TX_ID)
    amount: Optional[Amount] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _parse_amount(cls, value):
        if value is None or isinstance(value, Amount):
            return value
        if isinstance(value, str):
            if value == "":
                return None
            return Amount.parse(value)
        raise ValueError("amount must be a decimal string")


@dataclass(frozen=True)
class Transaction:
    """
    Validated transaction record.
    Amount is present for deposits and withdrawals and None otherwise.
    """
    transaction_type: TransactionType
    client_id: int
    tx_id: int
    amount: Optional[Amount] = None

    def __post_init__(self):
        if self.transaction_type.moves_funds and self.amount is None:
            raise ExternalError(f"{self.transaction_type.value} needs an amount")
        if not self.transaction_type.moves_funds and self.amount is not None:
            raise ExternalError(f"{self.transaction_type.value} does not take an amount")

    @classmethod
    def from_record(cls, record: RawRecord) -> 'Transaction':
        """
        Validate a raw record into a Transaction

        Raises:
            ExternalError: If the kind is unrecognised, or a deposit or
                withdrawal has no amount
        """
        transaction_type = TransactionType.from_label(record.type)
        if transaction_type is None:
            raise ExternalError(f"unrecognised transaction type: {record.type!r}")

        # Amounts on dispute/resolve/chargeback rows are ignored
        amount = record.amount if transaction_type.moves_funds else None

        return cls(
            transaction_type=transaction_type,
            client_id=record.client,
            tx_id=record.tx,
            amount=amount
        )

    @classmethod
    def deposit(cls, client_id: int, tx_id: int, amount: Union[Amount, str]) -> 'Transaction':
        """Convenience constructor for deposits"""
        return cls(TransactionType.DEPOSIT, client_id, tx_id, _as_amount(amount))

    @classmethod
    def withdrawal(cls, client_id: int, tx_id: int, amount: Union[Amount, str]) -> 'Transaction':
        """Convenience constructor for withdrawals"""
        return cls(TransactionType.WITHDRAWAL, client_id, tx_id, _as_amount(amount))

    @classmethod
    def dispute(cls, client_id: int, tx_id: int) -> 'Transaction':
        return cls(TransactionType.DISPUTE, client_id, tx_id)

    @classmethod
    def resolve(cls, client_id: int, tx_id: int) -> 'Transaction':
        return cls(TransactionType.RESOLVE, client_id, tx_id)

    @classmethod
    def chargeback(cls, client_id: int, tx_id: int) -> 'Transaction':
        return cls(TransactionType.CHARGEBACK, client_id, tx_id)


def _as_amount(amount: Union[Amount, str]) -> Amount:
    if isinstance(amount, Amount):
        return amount
    return Amount.parse(amount)
