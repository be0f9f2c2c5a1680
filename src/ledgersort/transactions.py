"""
The transaction list - every known transaction, indexed for transfer matching.

Besides the ordered list, transactions are indexed by identity
(account id, transaction id) and by exact signed amount in cents, so that
"transactions with the opposite amount" is a dictionary lookup.
"""

import logging
import threading
from typing import Iterable, Optional

from .detectors import NULL_DETECTOR, CategoryDetector
from .domain import Transaction
from .events import Signal

logger = logging.getLogger(__name__)


class TransactionList:
    """
    Ordered, de-duplicated collection of transactions.

    Signals:
        transactions_added(list, from_index, to_index)
        transactions_removed(list, from_index, to_index)
        transactions_data_changed(list)
    """

    def __init__(self, lock=None):
        self._transactions: list[Transaction] = []
        self._positions: dict[tuple, int] = {}
        self._by_cents: dict[int, list[Transaction]] = {}

        self.lock = lock if lock is not None else threading.RLock()

        self.transactions_added = Signal('transactions_added')
        self.transactions_removed = Signal('transactions_removed')
        self.transactions_data_changed = Signal('transactions_data_changed')

    def __len__(self):
        with self.lock:
            return len(self._transactions)

    def __contains__(self, transaction):
        with self.lock:
            return isinstance(transaction, Transaction) and transaction.key in self._positions

    def __iter__(self):
        return iter(self.get_list())

    def get(self, index: int) -> Transaction:
        with self.lock:
            return self._transactions[index]

    def get_list(self) -> list[Transaction]:
        """Snapshot of the transactions in insertion order."""
        with self.lock:
            return list(self._transactions)

    def get_by_cents(self, cents: int) -> Optional[list[Transaction]]:
        """Transactions with exactly this signed amount, or None if there are none."""
        with self.lock:
            bucket = self._by_cents.get(cents)
            return list(bucket) if bucket else None

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def add(self, transaction: Transaction) -> bool:
        """
        Add a transaction unless one with the same identity is already present.

        Returns:
            True if the transaction was added
        """
        with self.lock:
            if transaction.key in self._positions:
                return False

            self._transactions.append(transaction)
            index = len(self._transactions) - 1
            self._positions[transaction.key] = index
            self._by_cents.setdefault(transaction.cents, []).append(transaction)

            self.transactions_added.emit(self, index, index)
            return True

    def add_all(self, transactions: Iterable[Transaction]) -> bool:
        """Add every transaction not already present. Returns True if any were added."""
        with self.lock:
            added = 0
            for transaction in transactions:
                if self.add(transaction):
                    added += 1
            return added > 0

    def remove(self, transaction: Transaction) -> bool:
        with self.lock:
            index = self._positions.get(transaction.key)
            if index is None:
                return False

            removed = self._transactions.pop(index)
            del self._positions[removed.key]
            for i in range(index, len(self._transactions)):
                self._positions[self._transactions[i].key] = i

            bucket = self._by_cents.get(removed.cents, [])
            bucket[:] = [t for t in bucket if t is not removed]
            if not bucket:
                self._by_cents.pop(removed.cents, None)

            partner = removed.matching_transaction
            if partner is not None and partner.matching_transaction is removed:
                partner.matching_transaction = None

            self.transactions_removed.emit(self, index, index)
            return True

    def clear(self):
        with self.lock:
            n = len(self._transactions)

            self._transactions.clear()
            self._positions.clear()
            self._by_cents.clear()

            if n > 0:
                self.transactions_removed.emit(self, 0, n - 1)

    def fire_transactions_data_changed(self):
        self.transactions_data_changed.emit(self)

    # -------------------------------------------------------------------------
    # Edits coming from the user interface
    # -------------------------------------------------------------------------

    def set_category_detector(self, transaction: Transaction, detector: Optional[CategoryDetector]):
        """Assign a rule by hand (None means the null detector)."""
        with self.lock:
            transaction.category_detector = detector if detector is not None else NULL_DETECTOR
            self.fire_transactions_data_changed()

    def set_note(self, transaction: Transaction, note: str):
        with self.lock:
            transaction.note = note or ''
            self.fire_transactions_data_changed()

    def set_matching_transaction(self, transaction: Transaction, other: Optional[Transaction]):
        """Link two transactions as a transfer pair, or unlink with other=None."""
        with self.lock:
            previous = transaction.matching_transaction
            if previous is not None and previous.matching_transaction is transaction:
                previous.matching_transaction = None

            transaction.matching_transaction = other
            if other is not None:
                other.matching_transaction = transaction
            self.fire_transactions_data_changed()

    # -------------------------------------------------------------------------
    # Re-validation after a rule edit
    # -------------------------------------------------------------------------

    def _reset(self, transaction: Transaction):
        transaction.category_detector = NULL_DETECTOR
        partner = transaction.matching_transaction
        if partner is not None:
            if partner.matching_transaction is transaction:
                partner.matching_transaction = None
            transaction.matching_transaction = None

    def category_detector_updated(self, detector: CategoryDetector):
        """
        Re-check transactions after a detector's pattern, range or matching
        pattern was edited.

        Transactions classified under the detector (or its mirror) that the
        classifying rule no longer accepts are reset to the null detector and
        classified again. Every uncategorized transaction is also classified
        again, since the edited rule may now match it.

        Raises:
            ValueError: For a detector without a category (null detector)
        """
        if detector.category is None:
            raise ValueError("Cannot update the null category detector")

        categories = detector.category.registry
        mirror = detector.mirror
        updated = False

        with self.lock:
            for transaction in list(self._transactions):
                current = transaction.category_detector

                if current is detector or (mirror is not None and current is mirror):
                    if not current.accepts(transaction, self):
                        logger.info(
                            "Transaction %s no longer matches '%s'; reclassifying",
                            transaction.id, current.id
                        )
                        self._reset(transaction)
                        categories.detect_categories(transaction, self)
                        updated = True

                elif transaction.category is None:
                    categories.detect_categories(transaction, self)
                    if transaction.category is not None:
                        updated = True

            if updated:
                self.fire_transactions_data_changed()

        return updated
