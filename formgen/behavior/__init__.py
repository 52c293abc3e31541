"""Declarative client behavior: bindings, conditional rules and the interpreter."""

from .bindings import EFFECTS, BehaviorScript, Binding, interpreter_source
from .rules import (
    ConditionalRule,
    ConditionalRuleCompiler,
    Predicate,
    compile_rules,
    hidden_targets,
    parse_rules,
)

__all__ = [
    "EFFECTS",
    "BehaviorScript",
    "Binding",
    "ConditionalRule",
    "ConditionalRuleCompiler",
    "Predicate",
    "compile_rules",
    "hidden_targets",
    "interpreter_source",
    "parse_rules",
]
