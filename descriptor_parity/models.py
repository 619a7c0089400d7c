from contextvars import ContextVar
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Mapping, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
    model_validator,
)

from .errors import MalformedDescriptorError


class Scope(str, Enum):
    COMPILE = "compile"
    RUNTIME = "runtime"
    PROVIDED = "provided"
    TEST = "test"


def _check_identifier(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    if "/" in value or "\\" in value:
        raise ValueError("must not contain path separators")
    return value


Identifier = Annotated[str, AfterValidator(_check_identifier)]


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
        for err in exc.errors()
    )


# Set while the outermost model is validating; nested models leave their
# ValidationError to pydantic so it carries the full location.
_validating: ContextVar[bool] = ContextVar("_validating", default=False)


class _FrozenModel(BaseModel):
    """Immutable model whose construction failures surface as MalformedDescriptorError."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    def __init__(self, **data):
        if _validating.get():
            super().__init__(**data)
            return
        token = _validating.set(True)
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise MalformedDescriptorError(f"Invalid {type(self).__name__}: {_describe(e)}") from e
        finally:
            _validating.reset(token)


class ParentRef(_FrozenModel):
    group: Identifier
    name: Identifier
    version: Identifier

    @property
    def coordinates(self) -> str:
        return f"{self.group}:{self.name}:{self.version}"


class Dependency(_FrozenModel):
    group: Identifier = Field(description="Maven groupId / Ivy organisation")
    name: Identifier = Field(description="Maven artifactId / Ivy module")
    version: Identifier = Field(description="Literal version, range, or ${property} reference")
    scope: Scope = Field(default=Scope.COMPILE)
    classifier: Optional[Identifier] = None
    optional: bool = False

    @property
    def key(self) -> tuple[str, str]:
        return (self.group, self.name)

    @property
    def coordinates(self) -> str:
        return f"{self.group}:{self.name}:{self.version}"


class ModuleDescriptor(_FrozenModel):
    group: Identifier
    name: Identifier
    version: Identifier
    packaging: Optional[Identifier] = None
    parent: Optional[ParentRef] = None
    description: Optional[str] = None
    properties: Mapping[Identifier, str] = Field(
        default_factory=dict,
        validate_default=True,
        description="Build properties, in declaration order (read-only)",
    )
    dependencies: tuple[Dependency, ...] = Field(
        default=(),
        description="Dependency declarations, in declaration order",
    )

    @field_validator("properties", mode="after")
    @classmethod
    def _freeze_properties(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @field_serializer("properties")
    def _dump_properties(self, value: Mapping[str, str]) -> dict[str, str]:
        return dict(value)

    @model_validator(mode="after")
    def _no_conflicting_versions(self) -> "ModuleDescriptor":
        versions: dict[tuple[str, str], str] = {}
        for dep in self.dependencies:
            seen = versions.setdefault(dep.key, dep.version)
            if seen != dep.version:
                raise ValueError(
                    f"conflicting versions for {dep.group}:{dep.name}: {seen} and {dep.version}"
                )
        return self

    @property
    def coordinates(self) -> str:
        return f"{self.group}:{self.name}:{self.version}"

    def present_fields(self) -> set[str]:
        """Names of the optional fields this descriptor actually populates."""
        fields = {
            name for name in ("packaging", "parent", "description", "properties")
            if getattr(self, name)
        }
        if any(dep.classifier for dep in self.dependencies):
            fields.add("dependency.classifier")
        if any(dep.optional for dep in self.dependencies):
            fields.add("dependency.optional")
        return fields
