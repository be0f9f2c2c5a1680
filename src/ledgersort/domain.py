"""
Domain objects for ledgersort.

This module defines the core domain objects:
- Account: A bank account or credit card that transactions are imported from
- Transaction: One imported transaction plus its classification state
- CategoryType / AccountType: Enumerations shared by the rest of the package
"""

import hashlib
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional

from .detectors import NULL_DETECTOR, CategoryDetector


class CategoryType(Enum):
    """Type of category."""
    INCOME = 'INCOME'
    EXPENSE = 'EXPENSE'
    BALANCED = 'BALANCED'    # Transfers between two of the user's own accounts
    EXTERNAL = 'EXTERNAL'    # Money leaving the tracked accounts (cash, other people)

    def __str__(self):
        return self.value.capitalize()


class AccountType(Enum):
    """Type of account."""
    CHECKING_ACCOUNT = 'CHECKING_ACCOUNT'
    SAVINGS_ACCOUNT = 'SAVINGS_ACCOUNT'
    CREDIT_CARD = 'CREDIT_CARD'

    def __str__(self):
        return self.value.replace('_', ' ').title()


def hash_account_number(account_number: str) -> str:
    """Hash an account number so it can be stored without the number itself."""
    return hashlib.sha3_256(account_number.encode('utf-8')).hexdigest()


def parse_date(value) -> date:
    """Accept a date, a datetime, or a YYYY-MM-DD string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value, '%Y-%m-%d').date()
        except ValueError:
            raise ValueError(f"Invalid date format: {value}. Use YYYY-MM-DD")
    raise ValueError(f"Invalid date: {value!r}")


@dataclass
class Account:
    """
    An account transactions are imported from.

    Attributes:
        id: Unique identifier (e.g., "boa-checking")
        name: Display name (e.g., "Bank of America Checking")
        type: Account type
        short_name: Short name for tables and exports (defaults to name)
        institution: Bank or card issuer
        number_hashes: SHA3-256 hashes of the account numbers seen in imports
    """
    id: str
    name: str
    type: AccountType
    short_name: str = ''
    institution: str = ''
    number_hashes: list[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate account data."""
        if not self.id:
            raise ValueError("Account id cannot be empty")
        if not self.name:
            raise ValueError("Account name cannot be empty")

        if isinstance(self.type, str):
            self.type = AccountType(self.type.upper())

        if not self.short_name:
            self.short_name = self.name

    def has_number(self, account_number: str) -> bool:
        return hash_account_number(account_number) in self.number_hashes

    def add_number(self, account_number: str):
        digest = hash_account_number(account_number)
        if digest not in self.number_hashes:
            self.number_hashes.append(digest)

    def __str__(self):
        return self.name


@dataclass(eq=False)
class Transaction:
    """
    A transaction and its classification state.

    The fact fields (account, id, date, description, address, cents) come
    from the import and do not change. The classification fields are owned
    by the Categories registry and the TransactionList.

    Attributes:
        account: Account the transaction belongs to (may be None)
        id: Identifier, unique within the account
        date: Transaction date
        description: Free-text description from the statement
        address: Address or payee information
        cents: Signed amount in cents (negative = debit, positive = credit)
        note: User-supplied note
        category_detector: Rule that assigned the category (NULL_DETECTOR if none)
        candidate_detectors: All rules that matched at the last detection
        matching_transaction: Other half of a transfer, if linked
    """
    account: Optional[Account]
    id: str
    date: date
    description: str = ''
    address: str = ''
    cents: int = 0
    note: str = ''
    category_detector: CategoryDetector = NULL_DETECTOR
    candidate_detectors: list = field(default_factory=list)
    matching_transaction: Optional['Transaction'] = field(default=None, repr=False)

    def __post_init__(self):
        """Validate transaction data."""
        if not self.id:
            raise ValueError("Transaction id cannot be empty")
        if isinstance(self.cents, bool) or not isinstance(self.cents, int):
            raise ValueError(f"Transaction '{self.id}': cents must be an integer, got {self.cents!r}")

        self.date = parse_date(self.date)

        if self.description is None:
            self.description = ''
        if self.address is None:
            self.address = ''
        if self.note is None:
            self.note = ''
        if self.category_detector is None:
            self.category_detector = NULL_DETECTOR

    @property
    def key(self) -> tuple:
        """Identity within a transaction list: (account id, transaction id)."""
        return (self.account.id if self.account is not None else None, self.id)

    @property
    def category(self):
        return self.category_detector.category

    @property
    def month(self) -> str:
        return self.date.strftime('%Y-%m')

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, Transaction):
            return NotImplemented
        return self.key == other.key

    def __hash__(self):
        return hash(self.key)

    def __str__(self):
        return f"Transaction [id={self.id}, date={self.date}, description={self.description}, cents={self.cents}]"
