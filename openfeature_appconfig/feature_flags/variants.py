"""
Variant selection for multi-variant flags.

ALGORITHM:
    1. Look up the default variant by name
    2. No context or no attributes -> default variant
    3. First targeting rule (declaration order) that matches -> its variant
    4. Nothing matched -> default variant

A rule pointing at an undeclared variant is skipped. When the default
variant is needed but is not declared, selection fails instead of picking
an arbitrary variant.
"""

from __future__ import annotations

from .errors import NoMatchingVariantError
from .models import EvaluationContext, MultiVariantFlag, Variant
from .targeting import rule_matches


def has_usable_attributes(context: EvaluationContext | None) -> bool:
    return context is not None and context.has_attributes()


def _default_variant(flag: MultiVariantFlag) -> Variant:
    variant = flag.find_variant(flag.default_variant)
    if variant is None:
        raise NoMatchingVariantError(
            f"No matching variant found: default variant "
            f"'{flag.default_variant}' is not declared"
        )
    return variant


def evaluate_targeting_rules(
    flag: MultiVariantFlag,
    context: EvaluationContext,
) -> Variant | None:
    """Return the variant of the first matching rule, or None."""
    for rule in flag.targeting_rules:
        if not rule_matches(rule, context):
            continue
        variant = flag.find_variant(rule.variant)
        if variant is not None:
            return variant
    return None


def select_variant(flag: MultiVariantFlag, context: EvaluationContext | None) -> Variant:
    """
    Pick the variant to serve for a context.

    Raises:
        NoMatchingVariantError: If the default variant is needed but not declared
    """
    if not has_usable_attributes(context):
        return _default_variant(flag)

    selected = evaluate_targeting_rules(flag, context)
    if selected is not None:
        return selected

    return _default_variant(flag)


def targeting_matched(
    flag: MultiVariantFlag,
    context: EvaluationContext | None,
    variant: Variant,
) -> bool:
    """
    Check if some targeting rule naming `variant` matches the context.

    This is a re-check, not a record of which rule selected the variant:
    with overlapping rules it can report a match for a rule that did not
    make the selection.
    """
    if not has_usable_attributes(context):
        return False
    return any(
        rule.variant == variant.name and rule_matches(rule, context)
        for rule in flag.targeting_rules
    )
