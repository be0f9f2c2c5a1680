"""
Shared fixtures for ledgersort tests.
"""

from datetime import date

import pytest

from ledgersort.categories import Categories
from ledgersort.domain import Account, AccountType, CategoryType, Transaction
from ledgersort.transactions import TransactionList


@pytest.fixture
def registry():
    """An empty registry (no built-in categories)."""
    return Categories()


@pytest.fixture
def expense(registry):
    return registry.add_category('dining', 'Dining', CategoryType.EXPENSE, '#d84315')


@pytest.fixture
def transfer(registry):
    return registry.add_category('transfer', 'Transfer', CategoryType.BALANCED, '#00838f')


@pytest.fixture
def transactions(registry):
    return TransactionList(lock=registry.lock)


@pytest.fixture
def checking():
    return Account(id='checking', name='Main Checking', type=AccountType.CHECKING_ACCOUNT)


@pytest.fixture
def card():
    return Account(id='visa', name='Visa Card', type=AccountType.CREDIT_CARD, short_name='Visa')


@pytest.fixture
def make_txn(checking):
    """Factory for transactions: make_txn(id, description, cents, day=date(2024, 1, 1), account=checking)."""
    def _make(id, description, cents, day=date(2024, 1, 1), account=None):
        return Transaction(
            account=account or checking,
            id=id,
            date=day,
            description=description,
            cents=cents,
        )
    return _make
