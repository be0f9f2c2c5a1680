"""
Category detectors - the rules that assign transactions to categories.

A detector accepts a transaction when:
- the signed amount falls inside its cents range (a 0/0 range disables the check)
- its pattern matches the whole transaction description (not a substring search)
- for transfer rules only: a transaction with the opposite amount, dated within
  MAX_MATCHING_DAYS_DELTA days, matches the detector's matching pattern

Transfer rules come in mirrored pairs. The primary rule classifies one side of
the transfer and its mirror classifies the other side. The pair is stored as
an id reference resolved through the owning Categories registry, so neither
rule holds the other directly.

Predicates in this module never mutate transactions. Linking two transactions
as a transfer pair is done explicitly through link_as_match().
"""

import contextlib
import logging
import re
from typing import Optional, TYPE_CHECKING

from .errors import InvalidRuleError, MirrorStateError

if TYPE_CHECKING:
    from .categories import Categories, Category
    from .domain import Transaction
    from .transactions import TransactionList

logger = logging.getLogger(__name__)

# Transfer halves must be dated within this many days of each other (inclusive)
MAX_MATCHING_DAYS_DELTA = 5

# Suffix used for the id of a mirror rule rebuilt from its primary
MIRROR_ID_SUFFIX = '::m'

NULL_DETECTOR_ID = ''


def _compile(pattern, what='pattern'):
    """Compile a rule regex, raising InvalidRuleError instead of re.error."""
    if not isinstance(pattern, str):
        raise InvalidRuleError(f"Invalid {what}: expected a string, got {pattern!r}")
    try:
        return re.compile(pattern)
    except re.error as e:
        raise InvalidRuleError(f"Invalid {what} {pattern!r}: {e}") from e


def mirror_description(description: str) -> str:
    """Description shown on the mirror half of a transfer rule."""
    if not description:
        return 'Match'
    return f'Match - {description}'


def mirror_id_for(primary_id: str) -> str:
    return primary_id + MIRROR_ID_SUFFIX


class CategoryDetector:
    """
    A single classification rule.

    Attributes are read through properties and changed through the set_*
    methods, which keep a mirrored pair consistent:
        set_vendor           vendor copied to the mirror
        set_description      mirror gets "Match - <description>" (primary only)
        set_cents_range      mirror gets the negated, swapped range
        set_pattern          becomes the mirror's matching pattern
        set_matching_pattern becomes the mirror's pattern

    Equality is identity. Use same_definition() to compare rule contents.
    """

    def __init__(self, id: str, registry: Optional['Categories'], category: Optional['Category'],
                 vendor: str = '', description: str = '', pattern: str = '.*',
                 cents_min: int = 0, cents_max: int = 0,
                 matching_pattern: Optional[str] = None,
                 mirror: Optional['CategoryDetector'] = None,
                 null: bool = False):
        """
        Create a detector and register it with its category and registry.

        Args:
            id: Unique rule id (unique across the whole registry)
            registry: Categories registry holding the flat rule index
            category: Owning category (None only for the global null detector)
            vendor: Vendor label
            description: Label for what was detected
            pattern: Regex that must match the full transaction description
            cents_min: Lower bound in signed cents (0 together with cents_max disables)
            cents_max: Upper bound in signed cents
            matching_pattern: Regex for the opposite transaction of a transfer
            mirror: Already constructed mirror rule, back-linked to this one
            null: Mark as a null detector (match-all, not used by detection)

        Raises:
            InvalidRuleError: On a malformed regex or a matching pattern that
                does not fit the category type
            MirrorStateError: If a mirror is given without a matching pattern,
                or its id does not sort after this id
            ValueError: If the id is already registered
        """
        compiled = _compile(pattern)
        compiled_matching = None
        if matching_pattern is not None:
            compiled_matching = _compile(matching_pattern, 'matching pattern')

        if mirror is not None and matching_pattern is None:
            raise MirrorStateError(f"Detector '{id}': a mirror requires a matching pattern")
        if mirror is not None and not id < mirror.id:
            raise MirrorStateError(
                f"Detector '{id}': the primary id must sort before its mirror '{mirror.id}'"
            )

        if category is not None and not null:
            if category.is_balanced and matching_pattern is None:
                raise InvalidRuleError(
                    f"Detector '{id}': rules of balanced category '{category.id}' need a matching pattern"
                )
            if not category.is_balanced and matching_pattern is not None:
                raise InvalidRuleError(
                    f"Detector '{id}': matching patterns are only supported for balanced categories"
                )

        if registry is not None and registry.get_detector(id) is not None:
            raise ValueError(f"Detector id '{id}' is already registered")

        self._id = id
        self._registry = registry
        self._category = category
        self._null = null

        self._vendor = vendor or ''
        self._description = description or ''
        self._pattern = pattern
        self._compiled = compiled
        self._cents_min, self._cents_max = sorted((int(cents_min), int(cents_max)))

        self._matching_pattern = matching_pattern
        self._compiled_matching = compiled_matching
        self._mirror_id = None

        if mirror is not None:
            self._mirror_id = mirror.id
            mirror._mirror_id = id

        if registry is not None:
            registry._index_detector(self)
        if category is not None and not null:
            category._add_detector(self)

    # -------------------------------------------------------------------------
    # Attributes
    # -------------------------------------------------------------------------

    @property
    def id(self) -> str:
        return self._id

    @property
    def category(self) -> Optional['Category']:
        return self._category

    @property
    def vendor(self) -> str:
        return self._vendor

    @property
    def description(self) -> str:
        return self._description

    @property
    def pattern(self) -> str:
        return self._pattern

    @property
    def cents_min(self) -> int:
        return self._cents_min

    @property
    def cents_max(self) -> int:
        return self._cents_max

    @property
    def matching_pattern(self) -> Optional[str]:
        return self._matching_pattern

    @property
    def mirror_id(self) -> Optional[str]:
        return self._mirror_id

    @property
    def mirror(self) -> Optional['CategoryDetector']:
        """The paired rule of a transfer, resolved through the registry."""
        if self._mirror_id is None or self._registry is None:
            return None
        return self._registry.get_detector(self._mirror_id)

    @property
    def is_null(self) -> bool:
        return self._null

    @property
    def has_amount_range(self) -> bool:
        return not (self._cents_min == 0 and self._cents_max == 0)

    @property
    def is_matching(self) -> bool:
        """True for transfer rules (matching pattern plus a linked mirror)."""
        return self._compiled_matching is not None and self.mirror is not None

    @property
    def is_derived(self) -> bool:
        """True for the mirror half of a pair (the lexicographically larger id)."""
        if self._mirror_id is None:
            return False
        return self._id > self._mirror_id

    # -------------------------------------------------------------------------
    # Setters
    # -------------------------------------------------------------------------

    def _check_mutable(self):
        if self._null:
            raise ValueError(f"Cannot modify the null category detector '{self._id}'")

    def _locked(self):
        if self._registry is None:
            return contextlib.nullcontext()
        return self._registry.lock

    def set_vendor(self, vendor: str):
        self._check_mutable()
        with self._locked():
            self._vendor = vendor or ''

            mirror = self.mirror
            if mirror is not None:
                mirror._vendor = self._vendor

    def set_description(self, description: str):
        """Set the label. A mirror's description always follows its primary."""
        self._check_mutable()
        if self.is_derived:
            raise ValueError(f"Detector '{self._id}' is a mirror; edit the description of '{self._mirror_id}'")
        with self._locked():
            self._description = description or ''

            mirror = self.mirror
            if mirror is not None:
                mirror._description = mirror_description(self._description)

    def set_pattern(self, pattern: str):
        """Set the description regex. The rule is unchanged if the regex is invalid."""
        self._check_mutable()
        compiled = _compile(pattern)
        with self._locked():
            self._pattern = pattern
            self._compiled = compiled

            mirror = self.mirror
            if mirror is not None:
                mirror._matching_pattern = pattern
                mirror._compiled_matching = compiled

    def set_cents_range(self, cents_min: int, cents_max: int):
        """Set the signed cents range; the bounds may be given in either order."""
        self._check_mutable()
        low, high = sorted((int(cents_min), int(cents_max)))
        with self._locked():
            self._cents_min = low
            self._cents_max = high

            mirror = self.mirror
            if mirror is not None:
                mirror._cents_min = -high
                mirror._cents_max = -low

    def set_matching_pattern(self, pattern: Optional[str]):
        """
        Set the regex for the opposite transaction of a transfer.

        Raises:
            MirrorStateError: If this rule (or its mirror) has a matching
                pattern and the new value is None, or the other way around
            InvalidRuleError: If the regex is malformed
        """
        self._check_mutable()
        mirror = self.mirror

        if (self._matching_pattern is None) != (pattern is None):
            raise MirrorStateError(
                f"Detector '{self._id}': cannot add or remove a matching pattern on an existing rule"
            )
        if mirror is not None and (mirror._matching_pattern is None) != (pattern is None):
            raise MirrorStateError(
                f"Detector '{self._id}': mirror '{mirror.id}' disagrees on having a matching pattern"
            )

        compiled = _compile(pattern, 'matching pattern') if pattern is not None else None
        with self._locked():
            self._matching_pattern = pattern
            self._compiled_matching = compiled

            if mirror is not None and pattern is not None:
                mirror._pattern = pattern
                mirror._compiled = compiled

    # -------------------------------------------------------------------------
    # Matching
    # -------------------------------------------------------------------------

    def matches_terms(self, transaction: 'Transaction') -> bool:
        """Check the amount range and the full-description pattern only."""
        if self.has_amount_range:
            if not self._cents_min <= transaction.cents <= self._cents_max:
                return False
        return self._compiled.fullmatch(transaction.description or '') is not None

    def find_mirror_candidate(self, transaction: 'Transaction',
                              transactions: Optional['TransactionList']) -> Optional['Transaction']:
        """
        Find the other half of a transfer for a transaction.

        Looks at transactions with exactly the opposite amount, in the order
        they were added, and returns the first one dated within
        MAX_MATCHING_DAYS_DELTA days whose description fully matches the
        matching pattern. The transaction itself is never its own partner.

        Returns:
            The partner transaction, or None (also for non-transfer rules)
        """
        if not self.is_matching or transactions is None:
            return None

        candidates = transactions.get_by_cents(-transaction.cents)
        if not candidates:
            return None

        for other in candidates:
            if other is transaction:
                continue
            if abs((transaction.date - other.date).days) > MAX_MATCHING_DAYS_DELTA:
                continue
            if self._compiled_matching.fullmatch(other.description or '') is not None:
                return other

        return None

    def accepts(self, transaction: 'Transaction',
                transactions: Optional['TransactionList'] = None) -> bool:
        """
        Does this detector accept the transaction?

        Transfer rules additionally require a partner transaction; a pattern
        hit without a partner is rejected. This method has no side effects.
        """
        if not self.matches_terms(transaction):
            return False
        if self._compiled_matching is not None and self.mirror is not None:
            return self.find_mirror_candidate(transaction, transactions) is not None
        return True

    # -------------------------------------------------------------------------
    # Comparison and display
    # -------------------------------------------------------------------------

    def same_definition(self, other: Optional['CategoryDetector']) -> bool:
        """Compare rule contents (used to diff against the built-in rules)."""
        if other is None:
            return False
        own_category = self._category.id if self._category is not None else None
        other_category = other._category.id if other._category is not None else None
        return (
            self._id == other._id
            and own_category == other_category
            and self._vendor == other._vendor
            and self._description == other._description
            and self._pattern == other._pattern
            and self._cents_min == other._cents_min
            and self._cents_max == other._cents_max
            and self._matching_pattern == other._matching_pattern
        )

    def __str__(self):
        if self._category is None:
            return '----------'

        s = self._category.name
        if self._description:
            if self._vendor:
                s += f" ({self._description} - {self._vendor})"
            else:
                s += f" ({self._description})"
        elif self._vendor:
            s += f" ({self._vendor})"
        return s

    def __repr__(self):
        return f"CategoryDetector(id={self._id!r}, pattern={self._pattern!r})"


def link_as_match(transaction: 'Transaction', partner: 'Transaction', mirror: CategoryDetector):
    """
    Record two transactions as the halves of one transfer.

    The partner is classified under the mirror rule and both transactions
    reference each other as their matching transaction. A previous
    partner of either side that still points back is unlinked.
    """
    for t, other in ((transaction, partner), (partner, transaction)):
        stale = t.matching_transaction
        if stale is not None and stale is not other and stale.matching_transaction is t:
            stale.matching_transaction = None

    if mirror not in partner.candidate_detectors:
        partner.candidate_detectors.append(mirror)
    partner.category_detector = mirror
    partner.matching_transaction = transaction
    transaction.matching_transaction = partner

    logger.debug(
        "Linked transfer %s <-> %s via '%s'",
        transaction.id, partner.id, mirror.id
    )


# Category-less sentinel assigned to every unclassified transaction
NULL_DETECTOR = CategoryDetector(NULL_DETECTOR_ID, None, None, pattern='.*', null=True)
