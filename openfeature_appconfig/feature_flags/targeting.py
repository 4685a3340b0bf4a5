"""
Targeting rule evaluation.

A condition compares one context attribute with an operand:

    {"attribute": "plan", "operator": "equals", "value": "premium"}

OPERATORS (case-sensitive):
    equals, not_equals                    native value comparison
    contains, not_contains,
    starts_with, ends_with                compare string forms
    greater_than, greater_than_or_equal,
    less_than, less_than_or_equal         compare as floats

Evaluation never raises. An unknown operator, a missing or null attribute,
or a numeric comparison on a non-numeric or non-finite operand is simply
"no match". Booleans are never equal to numbers.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any

from .coercion import coerce_string
from .models import Condition, EvaluationContext, TargetingRule


class Operator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    GREATER_THAN = "greater_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN = "less_than"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"

    @classmethod
    def parse(cls, name: Any) -> Operator | None:
        """Return the operator for `name`, or None if it is not one we know."""
        try:
            return cls(name)
        except ValueError:
            return None


def _to_float(value: Any) -> float | None:
    """Parse a finite number. Booleans, NaN and infinities are not numbers."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _values_equal(left: Any, right: Any) -> bool:
    # true and 1 are different values
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return left == right


def _compare_numbers(operator: Operator, left: Any, right: Any) -> bool:
    left_number = _to_float(left)
    right_number = _to_float(right)
    if left_number is None or right_number is None:
        return False

    if operator is Operator.GREATER_THAN:
        return left_number > right_number
    if operator is Operator.GREATER_THAN_OR_EQUAL:
        return left_number >= right_number
    if operator is Operator.LESS_THAN:
        return left_number < right_number
    return left_number <= right_number


def evaluate_operator(operator: Operator | None, context_value: Any, operand: Any) -> bool:
    """Apply one operator to a context value and a condition operand."""
    if operator is None:
        return False

    if operator is Operator.EQUALS:
        return _values_equal(context_value, operand)
    if operator is Operator.NOT_EQUALS:
        return not _values_equal(context_value, operand)

    if operator in (
        Operator.CONTAINS,
        Operator.NOT_CONTAINS,
        Operator.STARTS_WITH,
        Operator.ENDS_WITH,
    ):
        text = coerce_string(context_value)
        fragment = coerce_string(operand)
        if operator is Operator.CONTAINS:
            return fragment in text
        if operator is Operator.NOT_CONTAINS:
            return fragment not in text
        if operator is Operator.STARTS_WITH:
            return text.startswith(fragment)
        return text.endswith(fragment)

    if operator in (
        Operator.GREATER_THAN,
        Operator.GREATER_THAN_OR_EQUAL,
        Operator.LESS_THAN,
        Operator.LESS_THAN_OR_EQUAL,
    ):
        return _compare_numbers(operator, context_value, operand)

    return False


def condition_matches(condition: Condition, context: EvaluationContext | None) -> bool:
    if context is None or not context.attributes:
        return False

    if not isinstance(condition.attribute, str):
        return False

    context_value = context.attributes.get(condition.attribute)
    if context_value is None:
        return False

    return evaluate_operator(Operator.parse(condition.operator), context_value, condition.value)


def rule_matches(rule: TargetingRule, context: EvaluationContext | None) -> bool:
    """Check if every condition of a rule matches. A rule without conditions always matches."""
    return all(condition_matches(condition, context) for condition in rule.conditions)
