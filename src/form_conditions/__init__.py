"""
Conditional form rules.

A ConditionalRule decides whether a target form element is shown, hidden,
enabled or required depending on the values of a source element, and
serializes itself into the condition grammar of the client-side display
engine.

Main components:
- ConditionalRule: the rule (create, to_condition_grammar, evaluate)
- ValueType, Grouping, Effect, Condition, TargetState: enumerations
- negated_state: pure state inversion helper
- FormElement / TargetElement: target element representation
- EvaluationTrace: record of evaluations for debugging
- load_rules / rule_from_dict: rules from YAML and plain data
"""

from form_conditions.constants import (
    NEGATION_MARKER,
    ValueType,
    Grouping,
    Effect,
    Condition,
    TargetState,
)
from form_conditions.errors import (
    ConditionalRuleError,
    UnsupportedValueTypeError,
    InvalidPatternError,
    InvalidStateError,
    InvalidElementError,
    RuleLoadError,
)
from form_conditions.element import (
    TargetElement,
    FormElement,
    name_from_parents,
)
from form_conditions.states import (
    negated_state,
    is_negated,
    base_state,
    validate_state,
)
from form_conditions.trace import EvaluationTrace, RuleEvaluation
from form_conditions.rule import (
    ConditionalRule,
    ConditionGrammar,
    XOR_MARKER,
    flatten_values,
    normalize_values,
)
from form_conditions.loader import (
    rule_from_dict,
    rules_from_list,
    load_rules,
    dump_rules,
)


__all__ = [
    "NEGATION_MARKER",
    "ValueType",
    "Grouping",
    "Effect",
    "Condition",
    "TargetState",
    "ConditionalRuleError",
    "UnsupportedValueTypeError",
    "InvalidPatternError",
    "InvalidStateError",
    "InvalidElementError",
    "RuleLoadError",
    "TargetElement",
    "FormElement",
    "name_from_parents",
    "negated_state",
    "is_negated",
    "base_state",
    "validate_state",
    "EvaluationTrace",
    "RuleEvaluation",
    "ConditionalRule",
    "ConditionGrammar",
    "XOR_MARKER",
    "flatten_values",
    "normalize_values",
    "rule_from_dict",
    "rules_from_list",
    "load_rules",
    "dump_rules",
]
