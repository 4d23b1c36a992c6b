"""
Result of analyzing a relation graph.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Union

from graph_ids.domain import VerdictType

PropertyValue = Union[float, int, str]


@dataclass(frozen=True)
class Verdict:
    """
    Classification of a query plus the diagnostics that led to it.

    Properties keep their numeric types; ``string_properties`` renders them
    for the audit trail.

    Example:
        verdict = Verdict(VerdictType.NORMAL).with_property("density", 0.8)
        verdict.string_properties()  # {"density": "0.8"}
    """

    classification: VerdictType
    properties: Mapping[str, PropertyValue] = field(default_factory=dict)

    # Properties live in a mapping proxy, which cannot be hashed.
    __hash__ = None

    def __post_init__(self):
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    def with_property(self, name: str, value: PropertyValue) -> "Verdict":
        """Return a copy with ``name`` set to ``value``."""
        properties = dict(self.properties)
        properties[name] = value
        return Verdict(self.classification, properties)

    def string_properties(self) -> Dict[str, str]:
        return {name: str(value) for name, value in self.properties.items()}

    @property
    def is_anomaly(self) -> bool:
        return self.classification == VerdictType.ANOMALY

    @classmethod
    def error(cls, description: str) -> "Verdict":
        return cls(VerdictType.ERROR, {"description": description})
