"""
Target element protocol for conditional rules.

A rule only needs two things from the element it controls: a name and the
ordered path of keys from the form root down to the element. Elements may be
objects implementing TargetElement or render-array style mappings using
"#name", "#parents" and "#array_parents" keys.
"""

from typing import Protocol, List, Any, Mapping, Sequence, Tuple, runtime_checkable
from dataclasses import dataclass, field

from form_conditions.errors import InvalidElementError


@runtime_checkable
class TargetElement(Protocol):
    """
    Protocol for elements a rule can be attached to.

    Attributes:
        name: Element name as submitted by the form
        array_parents: Path of keys from the form root to the element
    """

    @property
    def name(self) -> str:
        ...

    @property
    def array_parents(self) -> List[str]:
        ...


def name_from_parents(parents: Sequence[str]) -> str:
    """
    Build a form input name from a parents path.

    ["address", "city"] -> "address[city]"; ["email"] -> "email".
    """
    if not parents:
        return ""
    head, *rest = [str(p) for p in parents]
    if not rest:
        return head
    return head + "[" + "][".join(rest) + "]"


@dataclass
class FormElement:
    """
    Simple concrete TargetElement.

    Example:
        element = FormElement(parents=["address", "city"])
        element.name  # "address[city]"
    """
    parents: List[str] = field(default_factory=list)
    array_parents: List[str] = field(default_factory=list)
    explicit_name: str = ""

    def __post_init__(self):
        if not self.array_parents:
            self.array_parents = list(self.parents)

    @property
    def name(self) -> str:
        return self.explicit_name or name_from_parents(self.parents)

    @classmethod
    def from_mapping(cls, element: Mapping[str, Any]) -> "FormElement":
        """Create an element from a render-array style mapping."""
        parents = list(element.get("#parents") or [])
        array_parents = list(element.get("#array_parents") or parents)
        return cls(
            parents=parents,
            array_parents=array_parents,
            explicit_name=element.get("#name", "") or "",
        )


def describe_element(element: Any) -> Tuple[str, List[str]]:
    """
    Extract (name, array_parents) from a target element.

    Raises:
        InvalidElementError: If no name can be derived
    """
    if isinstance(element, Mapping):
        element = FormElement.from_mapping(element)
    if not isinstance(element, TargetElement):
        raise InvalidElementError(element, "expected a name and array_parents")

    name = element.name
    if not name:
        raise InvalidElementError(element, "element has no derivable name")
    return name, list(element.array_parents)
