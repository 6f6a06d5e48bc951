"""
Tests for settings loading and the structured logger.

Run with: pytest tests/test_settings_and_logger.py -v
"""

import io
import json
import logging

import pytest

from form_conditions import ConditionalRule, Effect, ValueType
from form_conditions.settings import (
    DEFAULTS,
    SETTINGS_ENV_VAR,
    DotDict,
    get_settings,
    load_settings,
    settings_path,
    validate_settings,
)
from form_conditions.logger import StructuredLogger


# =============================================================================
# SETTINGS
# =============================================================================

class TestSettings:
    """Tests for settings.py."""

    def test_packaged_settings_are_valid(self):
        assert validate_settings(get_settings()) == []

    def test_packaged_settings_match_defaults(self):
        assert get_settings().rules == DEFAULTS["rules"]

    def test_missing_file_uses_defaults(self, tmp_path, capsys):
        loaded = load_settings(tmp_path / "absent.yaml")
        assert loaded.rules.effect == "slide"
        assert "not found" in capsys.readouterr().out

    def test_yaml_overrides_are_merged(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("rules:\n  effect: fade\n", encoding="utf-8")

        loaded = load_settings(path)

        assert loaded.rules.effect == "fade"
        assert loaded.rules.effect_speed == 300
        assert loaded.logging.level == "INFO"

    def test_get_nested(self):
        s = DotDict({"a": {"b": {"c": 1}}})
        assert s.get_nested("a.b.c") == 1
        assert s.get_nested("a.x", "default") == "default"

    def test_dot_access_missing_raises(self):
        with pytest.raises(AttributeError):
            DotDict({}).missing

    def test_validate_reports_invalid_values(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(
            "rules:\n"
            "  effect: bounce\n"
            "  value_type: maybe\n"
            "  effect_speed: -1\n",
            encoding="utf-8"
        )
        errors = validate_settings(load_settings(path))

        assert len(errors) == 3
        assert any(e.startswith("rules.effect ") for e in errors)
        assert any(e.startswith("rules.value_type ") for e in errors)
        assert any(e.startswith("rules.effect_speed ") for e in errors)

    def test_validate_accepts_name_and_value_spellings(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(
            "rules:\n"
            "  grouping: or\n"
            "  value_type: XOR\n"
            "  effect: SLIDE\n"
            "  condition: VALUE\n",
            encoding="utf-8"
        )
        assert validate_settings(load_settings(path)) == []

    def test_name_spellings_validate_and_create_alike(self, target_element, settings_file):
        loaded = settings_file("rules:\n  value_type: XOR\n  effect: SLIDE\n")

        assert validate_settings(loaded) == []
        rule = ConditionalRule.create(target_element, "visible", "src", "x")
        assert rule.value_type == ValueType.XOR
        assert rule.effect == Effect.SLIDE

    def test_env_var_selects_settings_file(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("rules:\n  effect: fade\n", encoding="utf-8")
        monkeypatch.setenv(SETTINGS_ENV_VAR, str(path))

        assert settings_path() == path
        assert load_settings().rules.effect == "fade"

    def test_non_mapping_document_uses_defaults(self, tmp_path, capsys):
        path = tmp_path / "settings.yaml"
        path.write_text("- effect: fade\n", encoding="utf-8")

        loaded = load_settings(path)

        assert loaded.rules.effect == "slide"
        assert "must contain a mapping" in capsys.readouterr().out

    def test_defaults_are_not_mutated_by_merge(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("rules:\n  effect_speed: 50\n", encoding="utf-8")

        load_settings(path)

        assert DEFAULTS["rules"]["effect_speed"] == 300


# =============================================================================
# LOGGER
# =============================================================================

@pytest.fixture
def captured_logger(request):
    """StructuredLogger writing to an in-memory stream."""
    log = StructuredLogger(f"form_conditions.test.{request.node.name}")
    stream = io.StringIO()
    handler = log.logger.handlers[0]
    handler.stream = stream
    handler.setFormatter(logging.Formatter("%(levelname)s - %(message)s"))
    handler.setLevel(logging.DEBUG)
    log.logger.setLevel(logging.DEBUG)
    yield log, stream
    log.clear_context()


class TestStructuredLogger:
    """Tests for logger.py."""

    def test_readable_format(self, captured_logger, monkeypatch):
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        log, stream = captured_logger

        log.info("Rule evaluated", target="email", result=True)

        line = stream.getvalue().strip()
        assert "INFO - Rule evaluated [target=email, result=True]" in line

    def test_json_format(self, captured_logger, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")
        log, stream = captured_logger

        log.warning("Pattern failed", pattern="(")

        entry = json.loads(stream.getvalue().strip().split(" - ", 1)[-1])
        assert entry["level"] == "WARNING"
        assert entry["message"] == "Pattern failed"
        assert entry["pattern"] == "("

    def test_context_is_added(self, captured_logger, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")
        log, stream = captured_logger

        log.set_context(form_id="signup")
        log.event("rules_loaded", count=2)

        entry = json.loads(stream.getvalue().strip().split(" - ", 1)[-1])
        assert entry["form_id"] == "signup"
        assert entry["level"] == "EVENT"
        assert entry["count"] == 2

    def test_clear_context(self, captured_logger, monkeypatch):
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        log, stream = captured_logger

        log.set_context(form_id="signup")
        log.clear_context()
        log.debug("plain")

        assert stream.getvalue().strip().endswith("DEBUG - plain")

    def test_evaluation_logged_at_info_when_enabled(self, make_rule, settings_file, monkeypatch):
        from form_conditions import rule as rule_module

        settings_file("logging:\n  log_evaluations: true\n")
        calls = []
        monkeypatch.setattr(rule_module.logger, "info", lambda message, **kw: calls.append((message, kw)))

        make_rule(["a"]).evaluate(["a"])

        assert calls == [("Rule evaluated", {
            "target": "company[name]",
            "source": "source",
            "value_type": "or",
            "observed": ["a"],
            "result": True,
        })]
