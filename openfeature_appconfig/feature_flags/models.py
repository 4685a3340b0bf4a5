"""
Data model for flag resolution.

CONFIGURATION BLOB (JSON):
    {
        "simple-flag": true,
        "welcome-message": "Hello",
        "language-flag": {
            "variants": [
                {"name": "english", "value": "Hello"},
                {"name": "japanese", "value": "Konnichiwa"}
            ],
            "defaultVariant": "english",
            "targetingRules": [
                {
                    "conditions": [
                        {"attribute": "language", "operator": "equals", "value": "ja"}
                    ],
                    "variant": "japanese"
                }
            ]
        }
    }

A flag entry is a multi-variant flag when it is an object holding both
"variants" and "defaultVariant". Everything else is a scalar flag.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import ConfigurationDecodeError

# Variant name reported for scalar flags and for failed resolutions
DEFAULT_VARIANT_NAME = "default"
ERROR_VARIANT_NAME = "error"
# Reported when the selected variant has no usable name
SELECTED_VARIANT_NAME = "selected"


class FlagType(str, Enum):
    """Requested output type of a resolution."""

    BOOLEAN = "boolean"
    STRING = "string"
    NUMBER = "number"
    OBJECT = "object"

    @property
    def zero_value(self) -> Any:
        """Value served for this type when nothing better is available."""
        if self is FlagType.BOOLEAN:
            return False
        if self is FlagType.STRING:
            return ""
        if self is FlagType.NUMBER:
            return 0
        return {}


class Reason(str, Enum):
    """Why a resolution produced its value."""

    DEFAULT = "DEFAULT"
    TARGETING_MATCH = "TARGETING_MATCH"
    ERROR = "ERROR"


@dataclass(frozen=True)
class EvaluationContext:
    """
    Caller-supplied context for targeting.

    Attributes:
        targeting_key: Opaque subject identifier (passed through, not matched)
        attributes: Attribute map that targeting conditions are evaluated against
    """

    targeting_key: str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)

    def has_attributes(self) -> bool:
        return bool(self.attributes)


@dataclass(frozen=True)
class Condition:
    attribute: str
    operator: str
    value: Any = None

    @classmethod
    def from_dict(cls, data: Any) -> Condition:
        if not isinstance(data, dict):
            raise ConfigurationDecodeError(f"Invalid targeting condition: {data!r}")
        return cls(
            attribute=data.get("attribute"),
            operator=data.get("operator"),
            value=data.get("value"),
        )


@dataclass(frozen=True)
class TargetingRule:
    """A rule selects `variant` when all of its conditions match."""

    conditions: list[Condition]
    variant: str

    @classmethod
    def from_dict(cls, data: Any) -> TargetingRule:
        if not isinstance(data, dict):
            raise ConfigurationDecodeError(f"Invalid targeting rule: {data!r}")
        return cls(
            conditions=[Condition.from_dict(c) for c in data.get("conditions") or []],
            variant=data.get("variant"),
        )


@dataclass(frozen=True)
class Variant:
    name: str
    value: Any = None

    @classmethod
    def from_dict(cls, data: Any) -> Variant:
        if not isinstance(data, dict):
            raise ConfigurationDecodeError(f"Invalid variant: {data!r}")
        return cls(name=data.get("name"), value=data.get("value"))


@dataclass(frozen=True)
class MultiVariantFlag:
    """
    A flag with named variants, a default variant and ordered targeting rules.

    Rules are evaluated in declaration order and the first match wins.
    """

    variants: list[Variant]
    default_variant: str
    targeting_rules: list[TargetingRule] = field(default_factory=list)

    @staticmethod
    def is_multi_variant(data: Any) -> bool:
        """Check if a decoded flag entry has the multi-variant shape."""
        return isinstance(data, dict) and "variants" in data and "defaultVariant" in data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MultiVariantFlag:
        """
        Build a flag from its JSON form.

        Raises:
            ConfigurationDecodeError: If variants or rules are not lists of objects
        """
        variants = data.get("variants") or []
        rules = data.get("targetingRules") or []
        if not isinstance(variants, list) or not isinstance(rules, list):
            raise ConfigurationDecodeError(
                "Multi-variant flag 'variants' and 'targetingRules' must be lists"
            )
        return cls(
            variants=[Variant.from_dict(v) for v in variants],
            default_variant=data.get("defaultVariant"),
            targeting_rules=[TargetingRule.from_dict(r) for r in rules],
        )

    def find_variant(self, name: str | None) -> Variant | None:
        for variant in self.variants:
            if variant.name == name:
                return variant
        return None


@dataclass(frozen=True)
class ResolutionResult:
    """
    Outcome of resolving one flag.

    Attributes:
        value: The typed value (bool, str, int/float or dict)
        variant: "default" for scalar flags, the variant name for
            multi-variant flags, "error" on failure
        reason: DEFAULT, TARGETING_MATCH or ERROR
        error_code: Set only when reason is ERROR
        error_message: Set only when reason is ERROR
        flag_key: The flag that was resolved
    """

    value: Any
    variant: str
    reason: Reason
    error_code: str | None = None
    error_message: str | None = None
    flag_key: str | None = None

    @property
    def is_error(self) -> bool:
        return self.reason is Reason.ERROR
