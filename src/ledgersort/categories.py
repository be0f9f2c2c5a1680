"""
Categories and the category registry.

A Category owns an ordered set of detectors (rules) plus one null detector
used to mark a manual assignment to that category. The Categories registry
owns the ordered categories and a flat index of every detector by id, and
runs category detection for transactions.

Detection order is deterministic: categories in insertion order, then each
category's detectors in insertion order. The first accepting detector is the
one assigned to an unclassified transaction.
"""

import logging
import re
import threading
from typing import Iterable, Optional, TYPE_CHECKING

from .detectors import (
    NULL_DETECTOR, NULL_DETECTOR_ID, CategoryDetector,
    link_as_match, mirror_description, mirror_id_for,
)
from .domain import CategoryType, Transaction
from .events import Signal

if TYPE_CHECKING:
    from .transactions import TransactionList

logger = logging.getLogger(__name__)

_COLOR_RE = re.compile(r'#[0-9a-fA-F]{6}')

DEFAULT_COLOR = '#888888'


def _normalize_color(color: str) -> str:
    if not isinstance(color, str) or not _COLOR_RE.fullmatch(color):
        raise ValueError(f"Invalid color {color!r}. Use #rrggbb")
    return color.lower()


class Category:
    """
    A named, colored classification bucket.

    The category type is fixed at creation; there is no setter for it.
    """

    def __init__(self, registry: 'Categories', id: str, name: str,
                 type: CategoryType, color: str = DEFAULT_COLOR):
        if not id:
            raise ValueError("Category id cannot be empty")
        if not name:
            raise ValueError(f"Category '{id}': name cannot be empty")
        if registry.get(id) is not None:
            raise ValueError(f"Category id '{id}' is already registered")

        if isinstance(type, str):
            type = CategoryType(type.upper())

        self._registry = registry
        self._id = id
        self._name = name
        self._type = type
        self._color = _normalize_color(color)
        self._detectors: dict[str, CategoryDetector] = {}

        self.detector_added = Signal('detector_added')

        self._null_detector = CategoryDetector(id, registry, self, pattern='.*', null=True)

        registry._append_category(self)

    @property
    def registry(self) -> 'Categories':
        return self._registry

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, name: str):
        if not name:
            raise ValueError(f"Category '{self._id}': name cannot be empty")
        self._name = name

    @property
    def type(self) -> CategoryType:
        return self._type

    @property
    def is_balanced(self) -> bool:
        return self._type == CategoryType.BALANCED

    @property
    def color(self) -> str:
        return self._color

    @color.setter
    def color(self, color: str):
        self._color = _normalize_color(color)

    @property
    def null_detector(self) -> CategoryDetector:
        """Detector assigned when a user puts a transaction in this category by hand."""
        return self._null_detector

    @property
    def detectors(self) -> list[CategoryDetector]:
        return list(self._detectors.values())

    def get_detector(self, id: str) -> Optional[CategoryDetector]:
        return self._detectors.get(id)

    def _add_detector(self, detector: CategoryDetector):
        self._detectors[detector.id] = detector
        self.detector_added.emit(self, detector)

    def create_detector(self, id: str, vendor: str = '', description: str = '',
                        pattern: str = '.*', cents_min: int = 0, cents_max: int = 0,
                        matching_pattern: Optional[str] = None) -> CategoryDetector:
        """
        Create a detector in this category.

        For balanced categories a matching pattern is required, and the mirror
        rule is created first (id '<id>::m', negated range, "Match - "
        description, patterns swapped) and linked to the new primary rule.

        Returns:
            The primary detector
        """
        with self._registry.lock:
            if matching_pattern is None:
                return CategoryDetector(id, self._registry, self, vendor, description,
                                        pattern, cents_min, cents_max)

            if self._registry.get_detector(id) is not None:
                raise ValueError(f"Detector id '{id}' is already registered")

            low, high = sorted((int(cents_min), int(cents_max)))
            mirror = CategoryDetector(
                mirror_id_for(id), self._registry, self, vendor, mirror_description(description),
                matching_pattern, -high, -low, pattern
            )
            return CategoryDetector(id, self._registry, self, vendor, description,
                                    pattern, low, high, matching_pattern, mirror)

    def find_matching_detectors(self, transaction: Transaction,
                                transactions: Optional['TransactionList'] = None) -> list[CategoryDetector]:
        """All detectors of this category that accept the transaction (no side effects)."""
        return [d for d in self._detectors.values() if d.accepts(transaction, transactions)]

    def same_as(self, other: Optional['Category']) -> bool:
        """Compare everything: name, type, color and every rule definition."""
        if other is None:
            return False
        if (self._id, self._name, self._type, self._color) != (other._id, other._name, other._type, other._color):
            return False
        if self._detectors.keys() != other._detectors.keys():
            return False
        return all(d.same_definition(other._detectors[i]) for i, d in self._detectors.items())

    def __str__(self):
        return self._name

    def __repr__(self):
        return f"Category(id={self._id!r}, name={self._name!r}, type={self._type.name})"


class Categories:
    """
    The registry of all categories and detectors.

    Attributes:
        baseline: Built-in registry used to tell user changes from defaults
        lock: Re-entrant lock guarding detection (shared with the transaction list)
    """

    def __init__(self, baseline: Optional['Categories'] = None, lock=None):
        self._categories: list[Category] = []
        self._detectors: dict[str, CategoryDetector] = {NULL_DETECTOR_ID: NULL_DETECTOR}

        self.baseline = baseline
        self.lock = lock if lock is not None else threading.RLock()

        self.categories_added = Signal('categories_added')
        self.categories_data_changed = Signal('categories_data_changed')

    @classmethod
    def from_builtin(cls, baseline: Optional['Categories'] = None, lock=None) -> 'Categories':
        """Build a registry holding the bundled default categories."""
        import yaml

        from .builtin import BUILTIN_CATEGORIES
        from .storage import update_categories_from_dict

        categories = cls(baseline=baseline, lock=lock)
        update_categories_from_dict(categories, yaml.safe_load(BUILTIN_CATEGORIES))
        return categories

    # -------------------------------------------------------------------------
    # Collection access
    # -------------------------------------------------------------------------

    def __len__(self):
        return len(self._categories)

    def __iter__(self):
        return iter(list(self._categories))

    def __getitem__(self, index: int) -> Category:
        return self._categories[index]

    @property
    def categories(self) -> list[Category]:
        return list(self._categories)

    def get(self, id: str) -> Optional[Category]:
        for category in self._categories:
            if category.id == id:
                return category
        return None

    @property
    def null_detector(self) -> CategoryDetector:
        return NULL_DETECTOR

    def get_detector(self, id: str) -> Optional[CategoryDetector]:
        return self._detectors.get(id)

    @property
    def detectors(self) -> list[CategoryDetector]:
        return list(self._detectors.values())

    def _index_detector(self, detector: CategoryDetector):
        self._detectors[detector.id] = detector

    def _append_category(self, category: Category):
        with self.lock:
            index = len(self._categories)
            self._categories.append(category)
        self.categories_added.emit(self, index, index)

    def add_category(self, id: str, name: str, type: CategoryType, color: str = DEFAULT_COLOR) -> Category:
        return Category(self, id, name, type, color)

    def fire_categories_data_changed(self):
        self.categories_data_changed.emit(self)

    # -------------------------------------------------------------------------
    # Detection
    # -------------------------------------------------------------------------

    def detect_categories(self, transaction: Transaction,
                          transactions: Optional['TransactionList']) -> bool:
        """
        Recompute the candidate detectors of one transaction.

        Every detector of every category is tried. Transfer rules that find a
        partner link the two transactions. The first accepting detector is
        assigned only if the transaction still has the null detector, so a
        manual or earlier assignment is never overridden.

        Args:
            transaction: Transaction to classify
            transactions: All known transactions (searched for transfer partners)

        Returns:
            True if at least one detector matched
        """
        with self.lock:
            matches = []
            first_match = None

            for category in self._categories:
                for detector in category.detectors:
                    if not detector.matches_terms(transaction):
                        continue
                    if detector.is_matching:
                        partner = detector.find_mirror_candidate(transaction, transactions)
                        if partner is None:
                            continue
                        link_as_match(transaction, partner, detector.mirror)
                    matches.append(detector)
                    if first_match is None:
                        first_match = detector

            transaction.candidate_detectors = matches

            if first_match is not None and transaction.category_detector is NULL_DETECTOR:
                transaction.category_detector = first_match

            logger.debug(
                "Detected %d candidate(s) for %s, assigned '%s'",
                len(matches), transaction.id, transaction.category_detector.id
            )
            return bool(matches)

    def detect_categories_all(self, transactions: Iterable[Transaction],
                              existing: Optional['TransactionList']):
        """Run detection for every given transaction."""
        with self.lock:
            for transaction in transactions:
                self.detect_categories(transaction, existing)

    def detect_categories_for_uncategorized(self, transaction_list: 'TransactionList'):
        """Run detection only for transactions that currently have no category."""
        with self.lock:
            for transaction in transaction_list.get_list():
                if transaction.category is None:
                    self.detect_categories(transaction, transaction_list)

    # -------------------------------------------------------------------------
    # Baseline comparison
    # -------------------------------------------------------------------------

    def is_same_as_builtin(self, category: Category) -> bool:
        if self.baseline is None:
            return False
        return category.same_as(self.baseline.get(category.id))

    def is_detector_same_as_builtin(self, detector: CategoryDetector) -> bool:
        if self.baseline is None:
            return False
        return detector.same_definition(self.baseline.get_detector(detector.id))
