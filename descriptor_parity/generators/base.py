"""Generator base class and the field/ordering policies it enforces.

Each generator declares, for every optional descriptor field, whether its
format expresses it, omits it, or rejects it, and how it orders dependencies.
Rejected fields are checked before any text is produced.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import ClassVar
from xml.sax.saxutils import escape

from ..errors import UnsupportedFieldError
from ..models import Dependency, ModuleDescriptor

INDENT = "    "


class FieldPolicy(str, Enum):
    EXPRESS = "express"
    OMIT = "omit"
    REJECT = "reject"


class DependencyOrder(str, Enum):
    # Canonical declaration order (classpath order for both Maven and Ivy)
    DECLARED = "declared"
    # Total order on (group, name, version, scope)
    SORTED = "sorted"


OPTIONAL_FIELDS = (
    "packaging",
    "parent",
    "description",
    "properties",
    "dependency.classifier",
    "dependency.optional",
)


class Generator(ABC):
    """Base class: subclasses set format_name/field_policies and implement _render."""

    format_name: ClassVar[str] = ""
    field_policies: ClassVar[dict[str, FieldPolicy]] = {}
    dependency_order: ClassVar[DependencyOrder] = DependencyOrder.DECLARED

    def generate(self, descriptor: ModuleDescriptor) -> str:
        self.check_fields(descriptor)
        return self._render(descriptor)

    def check_fields(self, descriptor: ModuleDescriptor) -> None:
        """Raise UnsupportedFieldError for the first populated rejected field."""
        present = descriptor.present_fields()
        for field in OPTIONAL_FIELDS:
            if field in present and self.policy(field) is FieldPolicy.REJECT:
                raise UnsupportedFieldError(field, self.format_name)

    def policy(self, field: str) -> FieldPolicy:
        return self.field_policies.get(field, FieldPolicy.EXPRESS)

    def expresses(self, field: str) -> bool:
        return self.policy(field) is FieldPolicy.EXPRESS

    def ordered_dependencies(self, descriptor: ModuleDescriptor) -> list[Dependency]:
        deps = list(descriptor.dependencies)
        if self.dependency_order is DependencyOrder.SORTED:
            deps.sort(key=lambda d: (d.group, d.name, d.version, d.scope.value))
        return deps

    @abstractmethod
    def _render(self, descriptor: ModuleDescriptor) -> str:
        """Produce the file text; fields have already been checked."""


def element(depth: int, tag: str, text: str) -> str:
    return f"{INDENT * depth}<{tag}>{escape(text)}</{tag}>"


def _quote(value: str) -> str:
    # '>' is legal inside attribute values and Ivy conf mappings rely on it
    return '"' + value.replace("&", "&amp;").replace("<", "&lt;").replace('"', "&quot;") + '"'


def attributes(**attrs: str | None) -> str:
    """Render attributes in the given order, skipping None values."""
    return "".join(f" {name}={_quote(value)}" for name, value in attrs.items() if value is not None)
