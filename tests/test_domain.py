"""
Tests for ledgersort domain objects (Account, Transaction).
"""

import pytest
from datetime import date, datetime

from ledgersort.detectors import NULL_DETECTOR
from ledgersort.domain import (
    Account, AccountType, CategoryType, Transaction,
    hash_account_number, parse_date,
)


class TestAccount:
    """Tests for Account domain object."""

    def test_create_checking_account(self):
        """Test creating a checking account."""
        account = Account(
            id='checking',
            name='Bank of America Checking',
            type=AccountType.CHECKING_ACCOUNT,
            institution='Bank of America'
        )
        assert account.id == 'checking'
        assert account.type == AccountType.CHECKING_ACCOUNT
        assert account.short_name == 'Bank of America Checking'
        assert str(account) == 'Bank of America Checking'

    def test_type_from_string(self):
        """Test creating account with type as string."""
        account = Account(id='visa', name='Visa', type='credit_card', short_name='Visa')
        assert account.type == AccountType.CREDIT_CARD
        assert str(account.type) == 'Credit Card'

    def test_empty_id_raises(self):
        """Test that empty id raises ValueError."""
        with pytest.raises(ValueError, match="id cannot be empty"):
            Account(id='', name='Checking', type=AccountType.CHECKING_ACCOUNT)

    def test_empty_name_raises(self):
        with pytest.raises(ValueError, match="name cannot be empty"):
            Account(id='checking', name='', type=AccountType.CHECKING_ACCOUNT)

    def test_invalid_type_raises(self):
        with pytest.raises(ValueError):
            Account(id='x', name='X', type='brokerage')

    def test_account_numbers_hashed(self):
        """Only hashes of account numbers are kept."""
        account = Account(id='checking', name='Checking', type=AccountType.CHECKING_ACCOUNT)
        account.add_number('0123456789')
        account.add_number('0123456789')

        assert account.number_hashes == [hash_account_number('0123456789')]
        assert '0123456789' not in account.number_hashes[0]
        assert account.has_number('0123456789')
        assert not account.has_number('9999')

    def test_hash_is_sha3_256_hex(self):
        assert len(hash_account_number('1')) == 64


class TestTransaction:
    """Tests for Transaction domain object."""

    def test_defaults(self):
        """A new transaction is unclassified."""
        t = Transaction(account=None, id='t1', date=date(2024, 3, 5), description='X', cents=-100)

        assert t.category_detector is NULL_DETECTOR
        assert t.category is None
        assert t.candidate_detectors == []
        assert t.matching_transaction is None
        assert t.note == ''
        assert t.month == '2024-03'

    def test_date_from_string(self):
        t = Transaction(account=None, id='t1', date='2024-02-29', cents=0)
        assert t.date == date(2024, 2, 29)

    def test_date_from_datetime(self):
        t = Transaction(account=None, id='t1', date=datetime(2024, 2, 29, 13, 30), cents=0)
        assert t.date == date(2024, 2, 29)

    def test_invalid_date(self):
        with pytest.raises(ValueError, match='Invalid date format'):
            Transaction(account=None, id='t1', date='02/29/2024', cents=0)

    def test_empty_id(self):
        with pytest.raises(ValueError, match='id cannot be empty'):
            Transaction(account=None, id='', date=date(2024, 1, 1))

    def test_cents_must_be_int(self):
        """Amounts are integer cents, never floats."""
        with pytest.raises(ValueError, match='cents must be an integer'):
            Transaction(account=None, id='t1', date=date(2024, 1, 1), cents=12.5)
        with pytest.raises(ValueError):
            Transaction(account=None, id='t1', date=date(2024, 1, 1), cents=True)

    def test_none_fields_normalized(self):
        t = Transaction(account=None, id='t1', date=date(2024, 1, 1), description=None,
                        address=None, note=None, category_detector=None)
        assert (t.description, t.address, t.note) == ('', '', '')
        assert t.category_detector is NULL_DETECTOR

    def test_identity(self):
        """Equality and hashing use (account id, transaction id)."""
        checking = Account(id='checking', name='Checking', type=AccountType.CHECKING_ACCOUNT)
        savings = Account(id='savings', name='Savings', type=AccountType.SAVINGS_ACCOUNT)

        a = Transaction(account=checking, id='1', date=date(2024, 1, 1), description='A', cents=1)
        b = Transaction(account=checking, id='1', date=date(2024, 1, 2), description='B', cents=2)
        c = Transaction(account=savings, id='1', date=date(2024, 1, 1), description='A', cents=1)

        assert a == b
        assert a != c
        assert len({a, b, c}) == 2
        assert a.key == ('checking', '1')


class TestHelpers:

    def test_parse_date(self):
        assert parse_date('2024-12-31') == date(2024, 12, 31)
        assert parse_date(date(2024, 1, 1)) == date(2024, 1, 1)
        with pytest.raises(ValueError):
            parse_date(20240101)

    def test_category_type_str(self):
        assert str(CategoryType.BALANCED) == 'Balanced'
        assert CategoryType('EXTERNAL') is CategoryType.EXTERNAL
