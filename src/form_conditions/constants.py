"""
Enumerations for conditional form rules.

String-valued enums so that serialized output (condition grammar, YAML rule
files) stays plain strings while invalid names are rejected at construction.
"""

from enum import Enum
from typing import Any, Type


# Prefix marking an inverted target state ("!visible" == "invisible").
NEGATION_MARKER = "!"


class ValueType(str, Enum):
    """
    How the reference values of a rule are compared to observed values.

    - OR: any reference value is present
    - AND: all reference values are present
    - XOR: exactly one reference value is present
    - NOT: no reference value is present
    - REGEX: every observed value matches a pattern
    - WIDGET: value is taken from a form widget (serialization only)
    """
    OR = "or"
    AND = "and"
    XOR = "xor"
    NOT = "not"
    REGEX = "regex"
    WIDGET = "widget"


class Grouping(str, Enum):
    """How a rule combines with sibling rules on the same target."""
    AND = "AND"
    OR = "OR"


class Effect(str, Enum):
    """Presentation effect used when the target is toggled."""
    SHOW = "show"
    SLIDE = "slide"
    FADE = "fade"


class Condition(str, Enum):
    """Property of the source element that is compared."""
    VALUE = "value"
    EMPTY = "empty"
    FILLED = "filled"
    CHECKED = "checked"
    UNCHECKED = "unchecked"
    EXPANDED = "expanded"
    COLLAPSED = "collapsed"


class TargetState(str, Enum):
    """States the client-side display engine can apply to a target element."""
    VISIBLE = "visible"
    INVISIBLE = "invisible"
    ENABLED = "enabled"
    DISABLED = "disabled"
    REQUIRED = "required"
    OPTIONAL = "optional"
    CHECKED = "checked"
    UNCHECKED = "unchecked"
    EXPANDED = "expanded"
    COLLAPSED = "collapsed"
    FILLED = "filled"
    EMPTY = "empty"
    READONLY = "readonly"
    READWRITE = "readwrite"
    RELEVANT = "relevant"
    IRRELEVANT = "irrelevant"
    VALID = "valid"
    INVALID = "invalid"
    TOUCHED = "touched"
    UNTOUCHED = "untouched"


def enum_value(member) -> str:
    """Return the plain string behind an enum member (or the string itself)."""
    return member.value if isinstance(member, Enum) else member


def coerce_enum(enum_cls: Type[Enum], value: Any) -> Enum:
    """
    Convert a member, a value ("or") or a name ("OR") into an enum member.

    Raises:
        ValueError: If nothing matches
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        if isinstance(value, str) and value.upper() in enum_cls.__members__:
            return enum_cls[value.upper()]
        raise
