"""
Conditional rule for a form element.

A ConditionalRule ties a target element to a source element: when the source
element's values satisfy the rule, the client-side display engine applies
`state` to the target. The rule can

- serialize itself into the nested condition grammar understood by the
  display engine (to_condition_grammar / states_entry)
- evaluate observed source values on the server side (evaluate)

Example:
    rule = ConditionalRule.create(
        FormElement(parents=["company"]), "visible", "account_type", "business"
    )
    rule.states_entry()     # ("visible", [{"value": "business"}])
    rule.evaluate(["business"])  # True
"""

from typing import Any, Callable, Collection, Dict, List, Mapping, Optional, Tuple, Union
from dataclasses import dataclass, field
import logging
import re
import time

from form_conditions.constants import (
    Condition, Effect, Grouping, ValueType, coerce_enum, enum_value
)
from form_conditions.element import describe_element
from form_conditions.errors import (
    InvalidPatternError, UnsupportedValueTypeError
)
from form_conditions.logger import logger
from form_conditions.settings import get_settings
from form_conditions.states import negated_state, validate_state
from form_conditions.trace import EvaluationTrace, RuleEvaluation


ConditionGrammar = Union[Dict[str, Any], List[Any]]

# Literal that marks an exclusive-or group in the condition grammar
XOR_MARKER = "xor"


def normalize_values(values: Any) -> List[Any]:
    """Wrap a scalar into a list; lists and tuples are copied into a new list."""
    if isinstance(values, (list, tuple)):
        return list(values)
    return [values]


def _is_collection(item: Any) -> bool:
    return isinstance(item, Collection) and not isinstance(item, (str, bytes, bytearray, Mapping))


def _first_item(item: Any) -> Any:
    # Multi-value items (e.g. a multi-select inside a field) only count their first entry
    if isinstance(item, Mapping):
        return next(iter(item.values()), None)
    if _is_collection(item):
        return next(iter(item), None)
    return item


def flatten_values(observed: Any) -> List[Any]:
    """
    Flatten observed source values into a list of scalars.

    None -> []; "a" -> ["a"]; ["a", ["b", "c"]] -> ["a", "b"]; {"x", "y"} -> ["x", "y"]
    in set iteration order.
    """
    if observed is None:
        return []
    if isinstance(observed, Mapping):
        items = list(observed.values())
    elif _is_collection(observed):
        items = list(observed)
    else:
        items = [observed]
    return [_first_item(item) for item in items]


def _all_present(values: List[Any], matched: List[Any]) -> bool:
    return len(matched) == len(values)


def _any_present(values: List[Any], matched: List[Any]) -> bool:
    return len(matched) > 0


def _one_present(values: List[Any], matched: List[Any]) -> bool:
    return len(matched) == 1


def _none_present(values: List[Any], matched: List[Any]) -> bool:
    return len(matched) == 0


# One evaluator per set-based value type: (reference values, matched values) -> bool.
# REGEX is handled separately, WIDGET has no evaluation semantics.
_SET_EVALUATORS: Dict[ValueType, Callable[[List[Any], List[Any]], bool]] = {
    ValueType.AND: _all_present,
    ValueType.OR: _any_present,
    ValueType.XOR: _one_present,
    ValueType.NOT: _none_present,
}


@dataclass
class ConditionalRule:
    """
    Rule controlling the state of a target element from a source element.

    Attributes:
        target_element_name: Name of the element the rule controls
        source_element_name: Name of the element whose value drives the rule
        state: Target state, optionally negated with "!"
        target_element_parents: Path from form root to the target element
        condition: Property of the source element that is compared
        grouping: How this rule combines with sibling rules (used by callers)
        effect: Presentation effect (passed through)
        effect_options: Effect options such as speed (passed through)
        state_selector: Selector refinement (passed through)
        value_type: Comparison mode
        values: Reference values (OR, AND, XOR, NOT)
        value_form: Widget value (WIDGET)
        value: Regular expression pattern (REGEX)
    """
    target_element_name: str
    source_element_name: str
    state: str
    target_element_parents: List[str] = field(default_factory=list)
    condition: Condition = Condition.VALUE
    grouping: Grouping = Grouping.AND
    effect: Effect = Effect.SLIDE
    effect_options: Dict[str, Any] = field(default_factory=lambda: {"speed": 300})
    state_selector: str = ""
    value_type: ValueType = ValueType.OR
    values: List[Any] = field(default_factory=list)
    value_form: Any = None
    value: Any = None

    def __post_init__(self):
        self.state = validate_state(self.state)
        self.condition = coerce_enum(Condition, self.condition)
        self.grouping = coerce_enum(Grouping, self.grouping)
        self.effect = coerce_enum(Effect, self.effect)
        self.value_type = self._value_type()
        self.values = normalize_values(self.values)

    @classmethod
    def create(
        cls,
        target_element: Any,
        state: str,
        source_element_name: str,
        values: Any
    ) -> "ConditionalRule":
        """
        Create a rule with defaults taken from settings.

        Args:
            target_element: TargetElement or render-array mapping
            state: Target state (e.g. "required", "!visible")
            source_element_name: Name of the source element
            values: Reference value or list of reference values

        Returns:
            A new ConditionalRule
        """
        name, parents = describe_element(target_element)
        defaults = get_settings().rules

        return cls(
            target_element_name=name,
            target_element_parents=parents,
            source_element_name=source_element_name,
            state=state,
            condition=defaults.condition,
            grouping=defaults.grouping,
            effect=defaults.effect,
            effect_options={"speed": defaults.effect_speed},
            state_selector="",
            value_type=defaults.value_type,
            values=values,
        )

    def _value_type(self) -> ValueType:
        try:
            return coerce_enum(ValueType, self.value_type)
        except ValueError:
            raise UnsupportedValueTypeError(self.value_type) from None

    @property
    def pattern(self) -> Optional[str]:
        """
        Regular expression used in REGEX mode.

        `value` is canonical; a rule created with a single reference value
        and no `value` uses that reference value.
        """
        if self.value is not None:
            return self.value
        values = normalize_values(self.values)
        if len(values) == 1 and isinstance(values[0], str):
            return values[0]
        return None

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_condition_grammar(self) -> ConditionGrammar:
        """
        Serialize the rule into the display engine's condition grammar.

        Pure: never changes the rule. NOT rules produce the same grammar as
        OR rules; pair them with resolved_state() (see states_entry()).
        """
        key = enum_value(self.condition)
        value_type = self._value_type()
        values = normalize_values(self.values)

        if value_type == ValueType.WIDGET:
            return {key: self.value_form}
        if value_type == ValueType.REGEX:
            return {key: self.pattern}
        if value_type == ValueType.AND:
            return {key: values[0] if len(values) == 1 else list(values)}

        grammar: List[Any] = [XOR_MARKER] if value_type == ValueType.XOR else []
        grammar.extend({key: value} for value in values)
        return grammar

    def resolved_state(self) -> str:
        """State the grammar must be attached to (inverted for NOT rules)."""
        if self._value_type() == ValueType.NOT:
            return negated_state(self.state)
        return self.state

    def states_entry(self) -> Tuple[str, ConditionGrammar]:
        """Return (state, grammar) ready to be attached to the target element."""
        return self.resolved_state(), self.to_condition_grammar()

    def get_condition_values(self) -> ConditionGrammar:
        """
        Serialize the rule and, for NOT rules, invert `state` in place.

        Calling it twice on a NOT rule restores the original state. Prefer
        states_entry() which does not mutate the rule.
        """
        grammar = self.to_condition_grammar()
        if self._value_type() == ValueType.NOT:
            self.state = negated_state(self.state)
        return grammar

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data representation, the inverse of loader.rule_from_dict()."""
        data = {
            "target": {
                "name": self.target_element_name,
                "parents": list(self.target_element_parents),
            },
            "source": self.source_element_name,
            "state": self.state,
            "condition": enum_value(self.condition),
            "grouping": enum_value(self.grouping),
            "effect": enum_value(self.effect),
            "effect_options": dict(self.effect_options),
            "state_selector": self.state_selector,
            "value_type": enum_value(self._value_type()),
            "values": list(normalize_values(self.values)),
        }
        if self.value_form is not None:
            data["value_form"] = self.value_form
        if self.value is not None:
            data["value"] = self.value
        return data

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(
        self,
        observed_values: Any,
        trace: Optional[EvaluationTrace] = None
    ) -> bool:
        """
        Check whether observed source values trigger the rule.

        Args:
            observed_values: Scalar or list of values of the source element.
                Nested lists contribute their first item only.
            trace: Optional trace to record the evaluation in

        Returns:
            True if the condition holds

        Raises:
            UnsupportedValueTypeError: For WIDGET rules
            InvalidPatternError: For REGEX rules with a missing or bad pattern
        """
        start = time.perf_counter()
        observed = flatten_values(observed_values)
        value_type = self._value_type()

        if value_type == ValueType.REGEX:
            matched = self._regex_matches(observed)
            result = len(matched) == len(observed)
        else:
            evaluator = _SET_EVALUATORS.get(value_type)
            if evaluator is None:
                raise UnsupportedValueTypeError(value_type)
            values = normalize_values(self.values)
            matched = [value for value in values if value in observed]
            result = evaluator(values, matched)

        elapsed_ms = (time.perf_counter() - start) * 1000
        self._log_evaluation(value_type, observed, result)

        if trace is not None:
            trace.record(RuleEvaluation(
                target=self.target_element_name,
                source=self.source_element_name,
                state=self.state,
                value_type=value_type.value,
                observed=observed,
                matched=matched,
                result=result,
                elapsed_ms=elapsed_ms,
            ))
        return result

    def _compiled_pattern(self) -> "re.Pattern":
        pattern = self.pattern
        if not isinstance(pattern, str):
            raise InvalidPatternError(pattern, "REGEX rules need a string pattern")
        try:
            return re.compile(pattern)
        except re.error as e:
            logger.warning(
                "Invalid rule pattern",
                target=self.target_element_name,
                source=self.source_element_name,
                pattern=pattern,
                reason=str(e),
            )
            raise InvalidPatternError(pattern, str(e)) from e

    def _regex_matches(self, observed: List[Any]) -> List[Any]:
        compiled = self._compiled_pattern()
        matched = []
        for item in observed:
            if not compiled.search("" if item is None else str(item)):
                break
            matched.append(item)
        return matched

    def _log_evaluation(self, value_type: ValueType, observed: List[Any], result: bool) -> None:
        if get_settings().get_nested("logging.log_evaluations", False):
            log = logger.info
        elif logger.is_enabled_for(logging.DEBUG):
            log = logger.debug
        else:
            return
        log(
            "Rule evaluated",
            target=self.target_element_name,
            source=self.source_element_name,
            value_type=value_type.value,
            observed=observed,
            result=result,
        )
