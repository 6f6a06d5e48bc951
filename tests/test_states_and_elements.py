"""
Tests for state helpers and target elements.

Run with: pytest tests/test_states_and_elements.py -v
"""

import pytest

from form_conditions import (
    FormElement,
    InvalidElementError,
    InvalidStateError,
    TargetElement,
    TargetState,
    base_state,
    is_negated,
    name_from_parents,
    negated_state,
    validate_state,
)
from form_conditions.element import describe_element


class TestStateHelpers:
    """Tests for negated_state(), is_negated(), base_state(), validate_state()."""

    def test_negated_state_adds_marker(self):
        assert negated_state("required") == "!required"

    def test_negated_state_strips_marker(self):
        assert negated_state("!required") == "required"

    def test_negated_state_twice_is_identity(self):
        assert negated_state(negated_state("visible")) == "visible"

    def test_negated_state_accepts_enum(self):
        assert negated_state(TargetState.CHECKED) == "!checked"

    def test_is_negated(self):
        assert is_negated("!visible") is True
        assert is_negated("visible") is False

    def test_base_state(self):
        assert base_state("!enabled") == "enabled"
        assert base_state("enabled") == "enabled"

    @pytest.mark.parametrize("state", ["visible", "!visible", "required", "!checked", "readonly"])
    def test_validate_known_states(self, state):
        assert validate_state(state) == state

    @pytest.mark.parametrize("state", ["", "!", "hidden", "!!visible", None, 3])
    def test_validate_unknown_states(self, state):
        with pytest.raises(InvalidStateError):
            validate_state(state)


class TestFormElement:
    """Tests for FormElement and name derivation."""

    def test_name_from_single_parent(self):
        assert name_from_parents(["email"]) == "email"

    def test_name_from_nested_parents(self):
        assert name_from_parents(["address", "0", "city"]) == "address[0][city]"

    def test_name_from_empty_parents(self):
        assert name_from_parents([]) == ""

    def test_array_parents_default_to_parents(self):
        element = FormElement(parents=["address", "city"])
        assert element.array_parents == ["address", "city"]
        assert element.name == "address[city]"

    def test_explicit_name_wins(self):
        element = FormElement(parents=["a"], explicit_name="files[a]")
        assert element.name == "files[a]"

    def test_from_mapping(self, render_array_element):
        element = FormElement.from_mapping(render_array_element)
        assert element.name == "billing[vat_id]"
        assert element.array_parents == ["billing_fieldset", "billing", "vat_id"]

    def test_protocol_compliance(self):
        assert isinstance(FormElement(parents=["a"]), TargetElement)

    def test_custom_element(self):
        class Field:
            name = "phone"
            array_parents = ["contact", "phone"]

        assert describe_element(Field()) == ("phone", ["contact", "phone"])

    def test_describe_mapping_without_parents_raises(self):
        with pytest.raises(InvalidElementError) as exc_info:
            describe_element({"#type": "markup"})
        assert "no derivable name" in str(exc_info.value)
