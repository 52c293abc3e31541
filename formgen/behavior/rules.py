"""Conditional visibility rules.

A rule ties a target field to a controlling field: the target participates in
the form only while the controlling field's value equals (or differs from) a
configured value. Rules compile to ``toggle-visibility`` bindings for the
browser and are evaluated server-side so hidden fields are neither rendered
as active nor validated.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..config import RuleOptions
from ..core.logging import get_logger
from ..core.paths import MISSING, value_at
from ..core.schema import FieldDescriptor, FieldKind, MissingControllingField, find_descriptor
from .bindings import TOGGLE_VISIBILITY, Binding

logger = get_logger(__name__)

CHECKABLE_KINDS = frozenset({FieldKind.BOOLEAN.value, "checkbox"})


class Predicate(str, Enum):
    """Comparison applied to the controlling field's value."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"


def normalize_rule_value(value: Any) -> str:
    """Normalize a value to the string form used in comparisons.

    Booleans compare as ``"true"``/``"false"``, which is also what the
    interpreter reads from a checkbox.
    """
    if value is None or value is MISSING:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


@dataclass(frozen=True)
class ConditionalRule:
    """Show ``target_field`` only while ``controlling_field`` matches ``value``."""

    target_field: str
    controlling_field: str
    predicate: Predicate
    value: Any

    @classmethod
    def from_options(cls, target_field: str, options: RuleOptions) -> "ConditionalRule":
        """Build a rule from its configuration entry."""
        return cls(
            target_field=target_field,
            controlling_field=options.controlling_field,
            predicate=Predicate.NOT_EQUALS if options.negated else Predicate.EQUALS,
            value=options.value,
        )

    @property
    def expected(self) -> str:
        """Normalized comparison value."""
        return normalize_rule_value(self.value)

    def is_satisfied(self, controlling_value: Any) -> bool:
        """Whether the target should be visible for the given controlling value."""
        matches = normalize_rule_value(controlling_value) == self.expected
        return matches if self.predicate is Predicate.EQUALS else not matches


def parse_rules(
    conditional_logic: Mapping[str, RuleOptions | Mapping[str, Any]] | None,
) -> list[ConditionalRule]:
    """Parse a ``conditionalLogic`` mapping keyed by target field path."""
    rules = []
    for target, options in (conditional_logic or {}).items():
        if not isinstance(options, RuleOptions):
            options = RuleOptions.model_validate(options)
        rules.append(ConditionalRule.from_options(target, options))
    return rules


def coerce_rules(
    rules: Sequence[ConditionalRule] | Mapping[str, Any] | None,
) -> list[ConditionalRule]:
    """Accept either parsed rules or raw ``conditionalLogic`` configuration."""
    if rules is None:
        return []
    if isinstance(rules, Mapping):
        return parse_rules(rules)
    return list(rules)


class ConditionalRuleCompiler:
    """Compiles conditional rules into visibility bindings."""

    def compile(
        self,
        rules: Iterable[ConditionalRule],
        descriptors: Mapping[str, FieldDescriptor],
    ) -> tuple[Binding, ...]:
        """Compile rules against the descriptors of one form.

        Rules whose controlling or target field does not exist are skipped
        with a warning; the rest of the form is unaffected.

        Args:
            rules: Rules to compile
            descriptors: Top-level descriptors of the form

        Returns:
            One toggle-visibility binding per valid rule
        """
        bindings = []
        for rule in rules:
            controlling = find_descriptor(descriptors, rule.controlling_field)
            if controlling is None:
                error = MissingControllingField(rule.target_field, rule.controlling_field)
                logger.warning(
                    "Skipping conditional rule",
                    reason=str(error),
                    target=rule.target_field,
                    controlling=rule.controlling_field,
                )
                continue

            target = find_descriptor(descriptors, rule.target_field)
            if target is None:
                logger.warning(
                    "Skipping conditional rule",
                    reason=f"Unknown target field '{rule.target_field}'",
                    target=rule.target_field,
                    controlling=rule.controlling_field,
                )
                continue

            bindings.append(
                Binding(
                    path=controlling.path,
                    event="change",
                    effect=TOGGLE_VISIBILITY,
                    params={
                        "target": target.path,
                        "predicate": rule.predicate.value,
                        "value": rule.expected,
                        "checked": controlling.effective_kind in CHECKABLE_KINDS,
                    },
                )
            )
        return tuple(bindings)


def compile_rules(
    rules: Iterable[ConditionalRule], descriptors: Mapping[str, FieldDescriptor]
) -> tuple[Binding, ...]:
    """Compile rules with a default compiler."""
    return ConditionalRuleCompiler().compile(rules, descriptors)


def hidden_targets(
    rules: Iterable[ConditionalRule],
    data: Any,
    descriptors: Mapping[str, FieldDescriptor] | None = None,
) -> set[str]:
    """Target paths whose rule is not satisfied by the (nested) ``data``.

    When ``descriptors`` are given, rules naming unknown fields are ignored,
    matching what :class:`ConditionalRuleCompiler` compiles.
    """
    hidden = set()
    for rule in rules:
        if descriptors is not None and (
            find_descriptor(descriptors, rule.controlling_field) is None
            or find_descriptor(descriptors, rule.target_field) is None
        ):
            continue
        controlling_value = value_at(data, rule.controlling_field)
        if not rule.is_satisfied(controlling_value):
            hidden.add(rule.target_field)
    return hidden
