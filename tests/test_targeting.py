"""
Tests for targeting rule evaluation.

Run with:
    pytest tests/test_targeting.py -v
"""

import pytest

from openfeature_appconfig.feature_flags.models import (
    Condition,
    EvaluationContext,
    TargetingRule,
)
from openfeature_appconfig.feature_flags.targeting import (
    Operator,
    condition_matches,
    evaluate_operator,
    rule_matches,
)


def _context(**attributes):
    return EvaluationContext(targeting_key="user-123", attributes=attributes)


# =============================================================================
# TESTS: OPERATORS
# =============================================================================


class TestOperatorParsing:
    """Test the closed operator vocabulary."""

    def test_all_operators_parse(self):
        names = [
            "equals",
            "not_equals",
            "contains",
            "not_contains",
            "starts_with",
            "ends_with",
            "greater_than",
            "greater_than_or_equal",
            "less_than",
            "less_than_or_equal",
        ]
        assert [Operator.parse(name).value for name in names] == names

    def test_unknown_operator(self):
        assert Operator.parse("matches_regex") is None
        assert Operator.parse("EQUALS") is None
        assert Operator.parse(None) is None

    def test_unknown_operator_never_matches(self):
        assert evaluate_operator(None, "a", "a") is False


class TestEqualityOperators:
    """Test equals / not_equals."""

    def test_equals(self):
        assert evaluate_operator(Operator.EQUALS, "ja", "ja") is True
        assert evaluate_operator(Operator.EQUALS, "ja", "en") is False
        assert evaluate_operator(Operator.EQUALS, 5, 5) is True

    def test_equals_compares_native_values(self):
        # "5" and 5 are different values
        assert evaluate_operator(Operator.EQUALS, "5", 5) is False

    def test_not_equals(self):
        assert evaluate_operator(Operator.NOT_EQUALS, "US", "CA") is True
        assert evaluate_operator(Operator.NOT_EQUALS, "US", "US") is False

    def test_booleans_are_not_numbers(self):
        # true and 1 are different values in either direction
        assert evaluate_operator(Operator.EQUALS, True, 1) is False
        assert evaluate_operator(Operator.EQUALS, 1, True) is False
        assert evaluate_operator(Operator.EQUALS, False, 0) is False
        assert evaluate_operator(Operator.NOT_EQUALS, True, 1) is True
        assert evaluate_operator(Operator.NOT_EQUALS, 0, False) is True

    def test_booleans_equal_booleans(self):
        assert evaluate_operator(Operator.EQUALS, True, True) is True
        assert evaluate_operator(Operator.NOT_EQUALS, True, False) is True
        assert evaluate_operator(Operator.EQUALS, 5, 5.0) is True


class TestStringOperators:
    """Test contains / not_contains / starts_with / ends_with."""

    def test_contains(self):
        assert evaluate_operator(Operator.CONTAINS, "user@example.com", "@example") is True
        assert evaluate_operator(Operator.CONTAINS, "user@other.com", "@example") is False

    def test_not_contains(self):
        assert evaluate_operator(Operator.NOT_CONTAINS, "user@other.com", "@example") is True
        assert evaluate_operator(Operator.NOT_CONTAINS, "user@example.com", "@example") is False

    def test_starts_with(self):
        assert evaluate_operator(Operator.STARTS_WITH, "beta-tester", "beta") is True
        assert evaluate_operator(Operator.STARTS_WITH, "tester-beta", "beta") is False

    def test_ends_with(self):
        assert evaluate_operator(Operator.ENDS_WITH, "admin@corp.io", ".io") is True
        assert evaluate_operator(Operator.ENDS_WITH, "admin@corp.com", ".io") is False

    def test_string_forms_of_numbers(self):
        assert evaluate_operator(Operator.CONTAINS, 12345, 234) is True
        assert evaluate_operator(Operator.STARTS_WITH, 3.14, "3.") is True


class TestNumericOperators:
    """Test greater_than / less_than and friends."""

    @pytest.mark.parametrize(
        "operator,left,right,expected",
        [
            (Operator.GREATER_THAN, 30, 25, True),
            (Operator.GREATER_THAN, 25, 25, False),
            (Operator.GREATER_THAN_OR_EQUAL, 25, 25, True),
            (Operator.LESS_THAN, 17, 18, True),
            (Operator.LESS_THAN, 18, 18, False),
            (Operator.LESS_THAN_OR_EQUAL, 18, 18, True),
        ],
    )
    def test_comparisons(self, operator, left, right, expected):
        assert evaluate_operator(operator, left, right) is expected

    def test_numeric_strings(self):
        assert evaluate_operator(Operator.GREATER_THAN, "30", "25.5") is True
        assert evaluate_operator(Operator.LESS_THAN, "2.5", 3) is True

    @pytest.mark.parametrize(
        "left,right",
        [("abc", 5), (5, "abc"), ("abc", "def"), (None, 5), ([1], 0), (True, 0)],
    )
    def test_non_numeric_operand_is_false(self, left, right):
        assert evaluate_operator(Operator.GREATER_THAN, left, right) is False
        assert evaluate_operator(Operator.LESS_THAN_OR_EQUAL, left, right) is False

    @pytest.mark.parametrize(
        "left,right",
        [(10**400, 5), (5, 10**400), (-(10**400), 0), ("1" * 400, 5)],
    )
    def test_huge_numbers_do_not_raise(self, left, right):
        assert evaluate_operator(Operator.GREATER_THAN, left, right) is False
        assert evaluate_operator(Operator.LESS_THAN, left, right) is False

    @pytest.mark.parametrize("text", ["inf", "-inf", "Infinity", "nan", "NaN"])
    def test_non_finite_strings_are_not_numbers(self, text):
        assert evaluate_operator(Operator.GREATER_THAN, text, 5) is False
        assert evaluate_operator(Operator.LESS_THAN, text, 5) is False
        assert evaluate_operator(Operator.GREATER_THAN, 5, text) is False

    def test_non_finite_floats_are_not_numbers(self):
        assert evaluate_operator(Operator.GREATER_THAN, float("inf"), 5) is False
        assert evaluate_operator(Operator.LESS_THAN, float("nan"), 5) is False


# =============================================================================
# TESTS: CONDITIONS AND RULES
# =============================================================================


class TestConditionMatches:
    """Test condition_matches against a context."""

    def test_matching_condition(self):
        condition = Condition(attribute="language", operator="equals", value="ja")
        assert condition_matches(condition, _context(language="ja")) is True

    def test_missing_attribute(self):
        condition = Condition(attribute="language", operator="not_equals", value="ja")
        assert condition_matches(condition, _context(country="JP")) is False

    def test_null_attribute(self):
        condition = Condition(attribute="language", operator="not_equals", value="ja")
        assert condition_matches(condition, _context(language=None)) is False

    def test_unknown_operator(self):
        condition = Condition(attribute="language", operator="like", value="ja")
        assert condition_matches(condition, _context(language="ja")) is False

    def test_no_context(self):
        condition = Condition(attribute="language", operator="equals", value="ja")
        assert condition_matches(condition, None) is False

    @pytest.mark.parametrize("attribute", [["language"], {"name": "language"}, 7, None])
    def test_non_string_attribute_is_absent(self, attribute):
        condition = Condition(attribute=attribute, operator="equals", value="ja")
        assert condition_matches(condition, _context(language="ja")) is False

    def test_huge_context_number(self):
        condition = Condition(attribute="n", operator="greater_than", value=5)
        assert condition_matches(condition, _context(n=10**400)) is False

    def test_boolean_attribute_against_number(self):
        condition = Condition(attribute="beta", operator="equals", value=1)
        assert condition_matches(condition, _context(beta=True)) is False


class TestRuleMatches:
    """Test rule_matches (logical AND)."""

    def test_all_conditions_must_match(self):
        rule = TargetingRule(
            conditions=[
                Condition("plan", "equals", "premium"),
                Condition("age", "greater_than_or_equal", 18),
            ],
            variant="premium",
        )
        assert rule_matches(rule, _context(plan="premium", age=30)) is True
        assert rule_matches(rule, _context(plan="premium", age=12)) is False
        assert rule_matches(rule, _context(plan="free", age=30)) is False

    def test_empty_conditions_match(self):
        rule = TargetingRule(conditions=[], variant="everyone")
        assert rule_matches(rule, _context(plan="free")) is True
