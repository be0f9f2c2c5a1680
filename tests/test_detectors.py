"""
Tests for category detectors (rules): matching, mirror pairs and propagation.
"""

import pytest

from ledgersort.detectors import NULL_DETECTOR, CategoryDetector, mirror_description
from ledgersort.errors import InvalidRuleError, MirrorStateError


class TestPatternMatching:
    """Patterns must match the whole description."""

    def test_full_match_required(self, expense, make_txn):
        """A prefix pattern matches from the start but not a substring."""
        rule = expense.create_detector('starbucks', pattern='STARBUCKS.*')

        assert rule.matches_terms(make_txn('1', 'STARBUCKS #123 SEATTLE', -450))
        assert not rule.matches_terms(make_txn('2', 'I LOVE STARBUCKS', -450))

    def test_exact_pattern(self, expense, make_txn):
        """A pattern without wildcards matches only the exact text."""
        rule = expense.create_detector('exact', pattern='NETFLIX')

        assert rule.matches_terms(make_txn('1', 'NETFLIX', -1599))
        assert not rule.matches_terms(make_txn('2', 'NETFLIX.COM', -1599))

    def test_empty_description(self, expense, make_txn):
        """'.*' matches an empty description."""
        rule = expense.create_detector('any')
        assert rule.matches_terms(make_txn('1', '', -100))


class TestAmountRange:
    """Signed cents ranges."""

    def test_zero_range_disables_check(self, expense, make_txn):
        """A 0/0 range accepts any amount."""
        rule = expense.create_detector('any', pattern='.*')

        assert not rule.has_amount_range
        assert rule.matches_terms(make_txn('1', 'X', -999999))
        assert rule.matches_terms(make_txn('2', 'X', 12345))

    def test_range_is_inclusive(self, expense, make_txn):
        """Both bounds are included."""
        rule = expense.create_detector('rent', pattern='.*', cents_min=-200000, cents_max=-100000)

        assert rule.matches_terms(make_txn('1', 'X', -200000))
        assert rule.matches_terms(make_txn('2', 'X', -100000))
        assert not rule.matches_terms(make_txn('3', 'X', -99999))
        assert not rule.matches_terms(make_txn('4', 'X', -200001))

    def test_range_normalized(self, expense):
        """Bounds given in the wrong order are swapped."""
        rule = expense.create_detector('r', cents_min=500, cents_max=100)
        assert (rule.cents_min, rule.cents_max) == (100, 500)

        rule.set_cents_range(-10, -50)
        assert (rule.cents_min, rule.cents_max) == (-50, -10)

    def test_one_sided_range(self, expense, make_txn):
        """A range with one zero bound is still checked."""
        rule = expense.create_detector('debits', cents_min=-5000, cents_max=0)

        assert rule.has_amount_range
        assert rule.matches_terms(make_txn('1', 'X', -100))
        assert not rule.matches_terms(make_txn('2', 'X', 100))


class TestInvalidRules:
    """Malformed rules are rejected without side effects."""

    def test_invalid_pattern_on_create(self, registry, expense):
        """A bad regex raises and nothing is registered."""
        with pytest.raises(InvalidRuleError):
            expense.create_detector('bad', pattern='[unclosed')

        assert registry.get_detector('bad') is None
        assert expense.get_detector('bad') is None

    def test_invalid_pattern_on_set_keeps_rule(self, expense):
        """A failed set_pattern leaves the old pattern in place."""
        rule = expense.create_detector('r', pattern='CAFE.*')

        with pytest.raises(InvalidRuleError):
            rule.set_pattern('(')

        assert rule.pattern == 'CAFE.*'

    def test_invalid_error_is_value_error(self, expense):
        """Rule errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            expense.create_detector('bad', pattern='*')

    def test_duplicate_id(self, registry, expense):
        """Detector ids are unique across the registry."""
        expense.create_detector('dup')
        other = registry.add_category('fun', 'Fun', 'EXPENSE')

        with pytest.raises(ValueError, match='already registered'):
            other.create_detector('dup')

    def test_balanced_requires_matching_pattern(self, transfer):
        """Rules in a balanced category need a matching pattern."""
        with pytest.raises(InvalidRuleError, match='matching pattern'):
            transfer.create_detector('t', pattern='TRANSFER.*')

    def test_matching_pattern_only_for_balanced(self, expense):
        """Other categories reject a matching pattern."""
        with pytest.raises(InvalidRuleError, match='balanced'):
            expense.create_detector('r', pattern='X', matching_pattern='Y')

    def test_mirror_without_matching_pattern(self, registry, transfer):
        """Passing a mirror without a matching pattern is a mirror state error."""
        mirror = transfer.create_detector('a', pattern='A.*', matching_pattern='B.*')

        with pytest.raises(MirrorStateError):
            CategoryDetector('b', registry, None, pattern='B.*', mirror=mirror)


class TestMirrorPairs:
    """Transfer rules are created as a primary plus a derived mirror."""

    @pytest.fixture
    def pair(self, transfer):
        primary = transfer.create_detector(
            'xfer', vendor='Bank', description='Rent', pattern='TRANSFER TO.*',
            cents_min=100, cents_max=500, matching_pattern='TRANSFER FROM.*'
        )
        return primary, primary.mirror

    def test_mirror_created(self, registry, pair):
        """The mirror has swapped patterns, negated range and a Match description."""
        primary, mirror = pair

        assert mirror is registry.get_detector('xfer::m')
        assert mirror.pattern == 'TRANSFER FROM.*'
        assert mirror.matching_pattern == 'TRANSFER TO.*'
        assert (mirror.cents_min, mirror.cents_max) == (-500, -100)
        assert mirror.description == 'Match - Rent'
        assert mirror.vendor == 'Bank'
        assert mirror.mirror is primary

    def test_derived_flag(self, pair):
        """Only the mirror (larger id) is derived."""
        primary, mirror = pair
        assert not primary.is_derived
        assert mirror.is_derived
        assert primary.is_matching and mirror.is_matching

    def test_both_halves_in_category(self, transfer, pair):
        """Primary and mirror are both rules of the category."""
        assert [d.id for d in transfer.detectors] == ['xfer::m', 'xfer']

    def test_empty_description_mirror(self, transfer):
        """An empty description gives the mirror plain 'Match'."""
        primary = transfer.create_detector('t', pattern='A', matching_pattern='B')
        assert primary.mirror.description == 'Match'
        assert mirror_description('') == 'Match'

    def test_description_propagates_from_primary(self, pair):
        primary, mirror = pair
        primary.set_description('Savings')
        assert mirror.description == 'Match - Savings'

    def test_description_on_mirror_rejected(self, pair):
        """A mirror's description is derived from the primary and cannot be edited."""
        primary, mirror = pair
        with pytest.raises(ValueError, match='is a mirror'):
            mirror.set_description('Something else')
        assert mirror.description == 'Match - Rent'
        assert primary.description == 'Rent'

    def test_mirror_id_must_sort_after_primary(self, registry, transfer):
        """A pair whose primary id sorts after the mirror id would mark the wrong half derived."""
        mirror = CategoryDetector('a', registry, transfer, pattern='B.*', matching_pattern='A.*')

        with pytest.raises(MirrorStateError, match='sort before'):
            CategoryDetector('b', registry, transfer, pattern='A.*', matching_pattern='B.*', mirror=mirror)
        assert registry.get_detector('b') is None

    def test_vendor_propagates_both_ways(self, pair):
        primary, mirror = pair
        primary.set_vendor('Chase')
        assert mirror.vendor == 'Chase'
        mirror.set_vendor('Wells')
        assert primary.vendor == 'Wells'

    def test_range_propagates_negated(self, pair):
        primary, mirror = pair
        primary.set_cents_range(-50, -10)
        assert (mirror.cents_min, mirror.cents_max) == (10, 50)

    def test_patterns_propagate_swapped(self, pair):
        primary, mirror = pair

        primary.set_pattern('XFER OUT.*')
        assert mirror.matching_pattern == 'XFER OUT.*'

        primary.set_matching_pattern('XFER IN.*')
        assert mirror.pattern == 'XFER IN.*'

    def test_cannot_remove_matching_pattern(self, pair):
        primary, _ = pair
        with pytest.raises(MirrorStateError):
            primary.set_matching_pattern(None)
        assert primary.matching_pattern == 'TRANSFER FROM.*'

    def test_cannot_add_matching_pattern(self, expense):
        rule = expense.create_detector('r', pattern='X')
        with pytest.raises(MirrorStateError):
            rule.set_matching_pattern('Y')


class TestNullDetectors:
    """The global null detector and per-category null detectors."""

    def test_global_null_detector(self, registry):
        assert NULL_DETECTOR.category is None
        assert NULL_DETECTOR.is_null
        assert registry.get_detector('') is NULL_DETECTOR
        assert registry.null_detector is NULL_DETECTOR
        assert str(NULL_DETECTOR) == '----------'

    def test_null_detector_immutable(self, expense):
        with pytest.raises(ValueError):
            NULL_DETECTOR.set_vendor('x')
        with pytest.raises(ValueError):
            expense.null_detector.set_pattern('X')

    def test_category_null_detector(self, registry, expense):
        """Indexed under the category id but not listed as a rule."""
        null = expense.null_detector
        assert null.category is expense
        assert registry.get_detector('dining') is null
        assert null not in expense.detectors


class TestDisplay:

    def test_str(self, expense):
        assert str(expense.create_detector('a')) == 'Dining'
        assert str(expense.create_detector('b', description='Coffee')) == 'Dining (Coffee)'
        assert str(expense.create_detector('c', vendor='Starbucks')) == 'Dining (Starbucks)'
        assert str(expense.create_detector('d', vendor='Starbucks', description='Coffee')) == 'Dining (Coffee - Starbucks)'

    def test_same_definition(self, expense):
        a = expense.create_detector('a', pattern='X')
        assert a.same_definition(a)
        assert not a.same_definition(None)
        assert a != expense.create_detector('b', pattern='X')
