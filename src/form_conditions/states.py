"""
Helpers for target states and their negation.

A state is a TargetState name optionally prefixed with NEGATION_MARKER.
All helpers are pure: they return new strings and never touch a rule.
"""

from typing import Union

from form_conditions.constants import NEGATION_MARKER, TargetState, enum_value
from form_conditions.errors import InvalidStateError


StateLike = Union[str, TargetState]

_KNOWN_STATES = frozenset(s.value for s in TargetState)


def is_negated(state: StateLike) -> bool:
    """Check whether a state carries the negation marker."""
    return enum_value(state).startswith(NEGATION_MARKER)


def base_state(state: StateLike) -> str:
    """Strip the negation marker, if any."""
    state = enum_value(state)
    if state.startswith(NEGATION_MARKER):
        return state[len(NEGATION_MARKER):]
    return state


def negated_state(state: StateLike) -> str:
    """
    Invert a state.

    "required" -> "!required", "!required" -> "required".
    Applying it twice returns the original state.
    """
    if is_negated(state):
        return base_state(state)
    return NEGATION_MARKER + enum_value(state)


def validate_state(state: StateLike) -> str:
    """
    Normalize a state to a plain string and check it is known.

    Raises:
        InvalidStateError: If the base state is not a TargetState name
    """
    if not isinstance(state, str):
        raise InvalidStateError(state)
    state = enum_value(state)
    if base_state(state) not in _KNOWN_STATES:
        raise InvalidStateError(state)
    return state
