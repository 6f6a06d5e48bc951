"""
Evaluation trace for conditional rules.

Records every rule evaluation so that "why is this field hidden" can be
answered when debugging a form.
"""

from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class RuleEvaluation:
    """
    Record of a single rule evaluation.

    Attributes:
        target: Name of the target element
        source: Name of the source element
        state: Target state of the rule
        value_type: Comparison mode used
        observed: Flattened observed values
        matched: Reference values found among the observed values
        result: Boolean result of the evaluation
        elapsed_ms: Time taken to evaluate in milliseconds
        timestamp: When the evaluation occurred
    """
    target: str
    source: str
    state: str
    value_type: str
    observed: List[Any] = field(default_factory=list)
    matched: List[Any] = field(default_factory=list)
    result: bool = False
    elapsed_ms: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target,
            "source": self.source,
            "state": self.state,
            "value_type": self.value_type,
            "observed": self.observed,
            "matched": self.matched,
            "result": self.result,
            "elapsed_ms": round(self.elapsed_ms, 3),
            "timestamp": self.timestamp.isoformat()
        }

    def to_compact_string(self) -> str:
        """
        Format:
          email <- newsletter [or] required: PASS (matched=['yes'])
        """
        result_str = "PASS" if self.result else "FAIL"
        matched_str = f" (matched={self.matched!r})" if self.matched else ""
        return (
            f"  {self.target} <- {self.source} [{self.value_type}] "
            f"{self.state}: {result_str}{matched_str}"
        )


@dataclass
class EvaluationTrace:
    """
    Trace of rule evaluations for one form.

    Example:
        trace = EvaluationTrace(form_id="user_register")
        rule.evaluate(["yes"], trace=trace)
        print(trace.to_compact_string())
    """
    form_id: str = ""
    entries: List[RuleEvaluation] = field(default_factory=list)
    start_time: datetime = field(default_factory=datetime.now)

    def record(self, entry: RuleEvaluation) -> None:
        self.entries.append(entry)

    @property
    def rules_checked(self) -> int:
        """Number of evaluations recorded."""
        return len(self.entries)

    @property
    def rules_passed(self) -> int:
        """Number of evaluations that returned True."""
        return sum(1 for e in self.entries if e.result)

    @property
    def total_elapsed_ms(self) -> float:
        return sum(e.elapsed_ms for e in self.entries)

    def for_target(self, target: str) -> List[RuleEvaluation]:
        """All evaluations of rules controlling the given target."""
        return [e for e in self.entries if e.target == target]

    def last_result(self, target: str) -> Optional[bool]:
        """Result of the latest evaluation for a target, None if never evaluated."""
        entries = self.for_target(target)
        return entries[-1].result if entries else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "form_id": self.form_id,
            "rules_checked": self.rules_checked,
            "rules_passed": self.rules_passed,
            "total_elapsed_ms": round(self.total_elapsed_ms, 3),
            "entries": [e.to_dict() for e in self.entries],
            "start_time": self.start_time.isoformat(),
        }

    def to_compact_string(self) -> str:
        lines = [f"[FORM] {self.form_id or 'N/A'} ({self.rules_passed}/{self.rules_checked} passed)"]
        for entry in self.entries:
            lines.append(entry.to_compact_string())
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"EvaluationTrace(form={self.form_id!r}, "
            f"checked={self.rules_checked}, passed={self.rules_passed})"
        )
