# ==============================================
# Decision (Data Classes)
# ==============================================
#
# PURPOSE:
#   Data classes that represent the OUTPUT of container
#   classification: which RDF list container a multi-valued
#   field is written with, and which rule decided it.
#
# ENUMS:
# ------
# - ContainerKind(Enum): ORDERED, UNORDERED
#     ORDERED   → rdf:Seq (hierarchy / progression matters)
#     UNORDERED → rdf:Bag (inventory / categorical values)
#
# - ContainerRule(Enum): UNORDERED_VOCABULARY, ORDERED_VOCABULARY,
#                        VALUE_PROGRESSION, NARRATIVE_NAME, DEFAULT
#
# CLASSES:
# --------
# - ContainerDecision (dataclass)
#     field_name: str        → element name the decision is for
#     original_key: str      → flattened key it came from
#     kind: ContainerKind
#     rule: ContainerRule    → which rule fired
#     matched: str | None    → vocabulary token / value cue that fired
#
#     Methods:
#     --------
#     - to_dict() -> dict
#     - from_dict(data: dict) -> ContainerDecision  (classmethod)
#
# ==============================================

from enum import Enum
from dataclasses import dataclass
from typing import Optional, Dict, Any


class ContainerKind(Enum):
    """
    RDF list container used for a multi-valued field.

    - ORDERED: rdf:Seq, item order carries meaning
    - UNORDERED: rdf:Bag, item order is incidental
    """
    ORDERED = "seq"
    UNORDERED = "bag"

    @property
    def rdf_tag(self) -> str:
        return "rdf:Seq" if self is ContainerKind.ORDERED else "rdf:Bag"


class ContainerRule(Enum):
    UNORDERED_VOCABULARY = "unordered_vocabulary"
    ORDERED_VOCABULARY = "ordered_vocabulary"
    VALUE_PROGRESSION = "value_progression"
    NARRATIVE_NAME = "narrative_name"
    DEFAULT = "default"


@dataclass(frozen=True)
class ContainerDecision:
    """Container chosen for one field, with the rule that chose it."""
    field_name: str
    original_key: str
    kind: ContainerKind
    rule: ContainerRule
    matched: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field_name": self.field_name,
            "original_key": self.original_key,
            "kind": self.kind.value,
            "rule": self.rule.value,
            "matched": self.matched,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContainerDecision":
        return cls(
            field_name=data["field_name"],
            original_key=data.get("original_key", ""),
            kind=ContainerKind(data["kind"]),
            rule=ContainerRule(data["rule"]),
            matched=data.get("matched"),
        )
