"""
Loading conditional rules from plain data and YAML files.

File format:

    rules:
      - target:
          name: "company[name]"
          parents: [company, name]
        state: visible
        source: account_type
        values: [business]
        value_type: or          # optional, settings default otherwise
        effect: fade            # optional
        effect_options: {speed: 150}

`target` may also be given as a parents list (`target: [company, name]`),
in which case the name is derived from it.
"""

from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Union
import yaml

from form_conditions.element import FormElement
from form_conditions.errors import ConditionalRuleError, RuleLoadError
from form_conditions.logger import logger
from form_conditions.rule import ConditionalRule


REQUIRED_KEYS = ("target", "state", "source")

# Optional keys copied onto the rule after create() applied settings defaults
OPTIONAL_KEYS = (
    "condition", "grouping", "effect", "effect_options",
    "state_selector", "value_type", "value_form", "value",
)


def _target_element(target: Any, source: str) -> FormElement:
    if isinstance(target, str):
        return FormElement(parents=[target])
    if isinstance(target, list):
        return FormElement(parents=[str(p) for p in target])
    if isinstance(target, Mapping):
        parents = list(target.get("parents") or [])
        return FormElement(
            parents=parents,
            array_parents=list(target.get("array_parents") or parents),
            explicit_name=target.get("name", "") or "",
        )
    raise RuleLoadError(source, f"unsupported target {target!r}")


def rule_from_dict(data: Mapping[str, Any], source: str = "<dict>") -> ConditionalRule:
    """
    Build a rule from its plain-data representation.

    Args:
        data: Mapping in the shape produced by ConditionalRule.to_dict()
        source: Where the data came from (used in error messages)

    Raises:
        RuleLoadError: If required keys are missing or a value is invalid
    """
    if not isinstance(data, Mapping):
        raise RuleLoadError(source, f"rule must be a mapping, got {type(data).__name__}")

    missing = [key for key in REQUIRED_KEYS if key not in data]
    if missing:
        raise RuleLoadError(source, f"missing keys: {', '.join(missing)}")

    try:
        rule = ConditionalRule.create(
            _target_element(data["target"], source),
            data["state"],
            data["source"],
            data.get("values", []),
        )
        overrides = {key: data[key] for key in OPTIONAL_KEYS if key in data}
        if overrides:
            # replace() re-runs field coercion and validation
            rule = replace(rule, **overrides)
    except RuleLoadError:
        raise
    except (ConditionalRuleError, ValueError) as e:
        raise RuleLoadError(source, str(e)) from e

    return rule


def rules_from_list(items: Iterable[Mapping[str, Any]], source: str = "<list>") -> List[ConditionalRule]:
    """Build rules from a list of mappings; errors name the failing index."""
    return [
        rule_from_dict(item, source=f"{source}[{index}]")
        for index, item in enumerate(items)
    ]


def load_rules(path: Union[str, Path]) -> List[ConditionalRule]:
    """
    Load rules from a YAML file.

    Raises:
        RuleLoadError: If the file cannot be read or parsed, or a rule is invalid
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = yaml.safe_load(f) or {}
    except OSError as e:
        logger.error("Rules file unreadable", source=str(path), reason=str(e))
        raise RuleLoadError(str(path), str(e)) from e
    except yaml.YAMLError as e:
        logger.error("Rules file is not valid YAML", source=str(path), reason=str(e))
        raise RuleLoadError(str(path), f"YAML parse error: {e}") from e

    if not isinstance(document, dict) or not isinstance(document.get("rules", []), list):
        raise RuleLoadError(str(path), "expected a mapping with a 'rules' list")

    rules = rules_from_list(document.get("rules", []), source=str(path))
    logger.event("rules_loaded", source=str(path), count=len(rules))
    return rules


def dump_rules(rules: Iterable[ConditionalRule]) -> str:
    """Serialize rules into a YAML document readable by load_rules()."""
    document: Dict[str, Any] = {"rules": [rule.to_dict() for rule in rules]}
    return yaml.safe_dump(document, sort_keys=False, allow_unicode=True)
