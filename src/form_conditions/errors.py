"""
Exceptions raised by conditional form rules.
"""

from typing import Any


class ConditionalRuleError(Exception):
    """Base class for all conditional rule errors."""


class UnsupportedValueTypeError(ConditionalRuleError):
    """Raised when a rule's value type has no evaluation semantics."""

    def __init__(self, value_type: Any):
        self.value_type = value_type
        name = getattr(value_type, "value", value_type)
        message = f"Value type '{name}' cannot be evaluated"
        super().__init__(message)


class InvalidPatternError(ConditionalRuleError):
    """Raised when a REGEX rule has no pattern or the pattern does not compile."""

    def __init__(self, pattern: Any, reason: str):
        self.pattern = pattern
        self.reason = reason
        message = f"Invalid pattern {pattern!r}: {reason}"
        super().__init__(message)


class InvalidStateError(ConditionalRuleError):
    """Raised when a target state is not a known state."""

    def __init__(self, state: Any):
        self.state = state
        message = f"Unknown target state {state!r}"
        super().__init__(message)


class InvalidElementError(ConditionalRuleError):
    """Raised when a target element exposes no usable name or parent path."""

    def __init__(self, element: Any, reason: str):
        self.element = element
        self.reason = reason
        message = f"Invalid target element: {reason}"
        super().__init__(message)


class RuleLoadError(ConditionalRuleError):
    """Raised when a rule definition (mapping or YAML file) is malformed."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        message = f"Failed to load rule from '{source}': {reason}"
        super().__init__(message)
