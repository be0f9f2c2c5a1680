"""
The document - accounts, categories and transactions kept together.

A Document owns one re-entrant lock shared by its Categories registry and
its TransactionList, so detection and list updates never interleave.
"""

import csv
import logging
import threading
from typing import Callable, Iterable, Optional

from .categories import Categories
from .detectors import CategoryDetector
from .domain import Account, Transaction, hash_account_number

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ['Date', 'Category', 'Category - Details', 'Amount', 'Description', 'Account', 'Note']


class Accounts:
    """Accounts keyed by id, in insertion order."""

    def __init__(self):
        self._accounts: dict[str, Account] = {}

    def add(self, account: Account) -> Account:
        if account.id in self._accounts:
            raise ValueError(f"Account id '{account.id}' is already registered")
        self._accounts[account.id] = account
        return account

    def get(self, id: str) -> Optional[Account]:
        return self._accounts.get(id)

    def find_by_number(self, account_number: str) -> Optional[Account]:
        """Find the account an imported statement belongs to by its account number."""
        digest = hash_account_number(account_number)
        for account in self._accounts.values():
            if digest in account.number_hashes:
                return account
        return None

    def __iter__(self):
        return iter(list(self._accounts.values()))

    def __len__(self):
        return len(self._accounts)

    def __contains__(self, id):
        return id in self._accounts


class Document:
    """
    A user's ledger.

    Attributes:
        accounts: Accounts transactions are imported from
        categories: Categories registry (built-in set plus user changes)
        transactions: All transactions
        baseline: Pristine built-in categories used when saving updates only
        path: File the document was loaded from or last saved to
    """

    def __init__(self, baseline: Optional[Categories] = None):
        self.lock = threading.RLock()
        self.baseline = baseline if baseline is not None else Categories.from_builtin()

        self.accounts = Accounts()
        self.categories = Categories.from_builtin(baseline=self.baseline, lock=self.lock)

        from .transactions import TransactionList
        self.transactions = TransactionList(lock=self.lock)

        self.path: Optional[str] = None

    def import_transactions(self, records: Iterable[Transaction]) -> list[Transaction]:
        """
        Add newly imported transactions and classify them.

        Transactions already in the document are skipped. New transactions
        are classified against the whole list, then anything still
        uncategorized gets another pass, since a new transaction may complete
        a transfer pair for an older one.

        Returns:
            The transactions that were actually added
        """
        with self.lock:
            added = [t for t in records if self.transactions.add(t)]
            self.categories.detect_categories_all(added, self.transactions)
            self.categories.detect_categories_for_uncategorized(self.transactions)
            if added:
                self.transactions.fire_transactions_data_changed()

        logger.info("Imported %d new transaction(s)", len(added))
        return added

    def reclassify_uncategorized(self) -> int:
        """Run detection for uncategorized transactions. Returns how many got a category."""
        with self.lock:
            before = sum(1 for t in self.transactions if t.category is None)
            self.categories.detect_categories_for_uncategorized(self.transactions)
            after = sum(1 for t in self.transactions if t.category is None)
            if before != after:
                self.transactions.fire_transactions_data_changed()
            return before - after

    def set_category_detector(self, transaction: Transaction, detector: Optional[CategoryDetector]):
        self.transactions.set_category_detector(transaction, detector)

    def set_note(self, transaction: Transaction, note: str):
        self.transactions.set_note(transaction, note)

    def detector_updated(self, detector: CategoryDetector) -> bool:
        """Re-validate transactions after a detector edit and notify category listeners."""
        with self.lock:
            updated = self.transactions.category_detector_updated(detector)
            self.categories.fire_categories_data_changed()
            return updated

    def export_csv(self, path: str,
                   predicate: Optional[Callable[[Transaction], bool]] = None) -> int:
        """
        Export transactions to CSV, newest first.

        Args:
            path: Output file
            predicate: Optional filter; only transactions it accepts are written

        Returns:
            Number of transactions written
        """
        rows = sorted(self.transactions, key=lambda t: t.date, reverse=True)
        written = 0

        with open(path, 'w', encoding='utf-8', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(EXPORT_COLUMNS)

            for t in rows:
                if predicate is not None and not predicate(t):
                    continue

                detector = t.category_detector
                category = detector.category.name if detector.category is not None else ''
                details = ' - '.join(s for s in (detector.vendor, detector.description) if s)

                writer.writerow([
                    t.date.strftime('%m/%d/%Y'),
                    category,
                    details,
                    f"{t.cents / 100:.2f}",
                    t.description,
                    t.account.short_name if t.account is not None else '',
                    t.note,
                ])
                written += 1

        return written
