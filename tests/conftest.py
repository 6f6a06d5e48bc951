"""
Shared pytest fixtures for form_conditions tests.

Provides fixtures for:
- Target elements (object and render-array style)
- Rule factory with per-test overrides
- Settings overrides
"""

import pytest
from pathlib import Path
from typing import Any, Callable
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from form_conditions import ConditionalRule, FormElement, ValueType  # noqa: E402
import form_conditions.settings as settings_module  # noqa: E402


# =============================================================================
# Element Fixtures
# =============================================================================

@pytest.fixture
def target_element():
    """Nested target element: company[name]."""
    return FormElement(parents=["company", "name"])


@pytest.fixture
def render_array_element():
    """Render-array style element, as produced by a form builder."""
    return {
        "#type": "textfield",
        "#parents": ["billing", "vat_id"],
        "#array_parents": ["billing_fieldset", "billing", "vat_id"],
    }


# =============================================================================
# Rule Fixtures
# =============================================================================

@pytest.fixture
def make_rule(target_element) -> Callable[..., ConditionalRule]:
    """
    Factory for rules.

    Usage:
        rule = make_rule(["a", "b"], value_type=ValueType.AND)
    """
    def _create(values: Any = ("a", "b"), state: str = "required",
                value_type: ValueType = ValueType.OR, **fields: Any) -> ConditionalRule:
        rule = ConditionalRule.create(target_element, state, "source", values)
        rule.value_type = value_type
        for name, value in fields.items():
            setattr(rule, name, value)
        return rule
    return _create


# =============================================================================
# Settings Fixtures
# =============================================================================

@pytest.fixture
def settings_file(tmp_path):
    """Write a settings.yaml and install it as the global settings."""

    def _write(content: str):
        path = tmp_path / "settings.yaml"
        path.write_text(content, encoding="utf-8")
        loaded = settings_module.load_settings(path)
        settings_module._settings = loaded
        return loaded

    yield _write

    settings_module.reload_settings()
