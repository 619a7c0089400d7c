"""Ivy module.ivy generation and reading."""

import re
import xml.etree.ElementTree as ET
from typing import Mapping

from ..errors import GenerationError, MalformedDescriptorError
from ..models import ModuleDescriptor, Scope
from .base import INDENT, DependencyOrder, FieldPolicy, Generator, attributes, element

IVY_EXTRA_NAMESPACE = "http://ant.apache.org/ivy/extra"

_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    f'<ivy-module version="2.0" xmlns:e="{IVY_EXTRA_NAMESPACE}">'
)

# One configuration per scope, mirroring Maven's scope visibility
_CONFIGURATIONS = (
    ("compile", None, None),
    ("runtime", "compile", None),
    ("provided", None, None),
    ("test", "runtime", "private"),
)

# Ivy conf mapping for every dependency: <scope>->default
_CONF_TARGET = "default"

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")
_MAX_EXPANSION_DEPTH = 10


class IvyGenerator(Generator):
    """Renders a module.ivy.

    Ivy has no parent inheritance and no build properties: both are omitted,
    and ${property} references are expanded from the descriptor's properties
    instead. Ivy has no notion of optional dependencies, so those are rejected.
    """

    format_name = "ivy"
    field_policies = {
        "packaging": FieldPolicy.EXPRESS,
        "parent": FieldPolicy.OMIT,
        "description": FieldPolicy.EXPRESS,
        "properties": FieldPolicy.OMIT,
        "dependency.classifier": FieldPolicy.EXPRESS,
        "dependency.optional": FieldPolicy.REJECT,
    }
    dependency_order = DependencyOrder.DECLARED

    def _render(self, descriptor: ModuleDescriptor) -> str:
        expand = _Expander(descriptor.properties)
        revision = expand(descriptor.version)
        status = "integration" if revision.endswith("-SNAPSHOT") else "release"

        info_attrs = attributes(
            organisation=expand(descriptor.group),
            module=expand(descriptor.name),
            revision=revision,
            status=status,
        )
        if descriptor.description:
            lines = [
                f"{INDENT}<info{info_attrs}>",
                element(2, "description", descriptor.description),
                f"{INDENT}</info>",
            ]
        else:
            lines = [f"{INDENT}<info{info_attrs}/>"]

        lines.append(f"{INDENT}<configurations>")
        for name, extends, visibility in _CONFIGURATIONS:
            lines.append(f"{INDENT * 2}<conf{attributes(name=name, extends=extends, visibility=visibility)}/>")
        lines.append(f"{INDENT}</configurations>")

        if descriptor.packaging == "pom":
            lines.append(f"{INDENT}<publications/>")
        elif descriptor.packaging:
            lines.append(f"{INDENT}<publications>")
            lines.append(f"{INDENT * 2}<artifact{attributes(type=descriptor.packaging)}/>")
            lines.append(f"{INDENT}</publications>")

        deps = self.ordered_dependencies(descriptor)
        if deps:
            lines.append(f"{INDENT}<dependencies>")
            for dep in deps:
                name = expand(dep.name)
                dep_attrs = attributes(
                    org=expand(dep.group),
                    name=name,
                    rev=expand(dep.version),
                    conf=f"{dep.scope.value}->{_CONF_TARGET}",
                )
                if dep.classifier:
                    artifact_attrs = attributes(name=name, type="jar", **{"e:classifier": dep.classifier})
                    lines.append(f"{INDENT * 2}<dependency{dep_attrs}>")
                    lines.append(f"{INDENT * 3}<artifact{artifact_attrs}/>")
                    lines.append(f"{INDENT * 2}</dependency>")
                else:
                    lines.append(f"{INDENT * 2}<dependency{dep_attrs}/>")
            lines.append(f"{INDENT}</dependencies>")

        body = "\n".join(lines)
        return f"{_HEADER}\n{body}\n</ivy-module>\n"


class _Expander:
    """Expands ${name} references against a property table."""

    def __init__(self, properties: Mapping[str, str]):
        self._properties = properties

    def __call__(self, value: str) -> str:
        for _ in range(_MAX_EXPANSION_DEPTH):
            if not _PLACEHOLDER.search(value):
                return value
            value = _PLACEHOLDER.sub(self._lookup, value)
        raise GenerationError(f"property references in {value!r} do not resolve (cycle?)")

    def _lookup(self, match: re.Match) -> str:
        key = match.group(1)
        if key not in self._properties:
            raise GenerationError(f"undefined property ${{{key}}}; Ivy descriptors cannot carry property references")
        return self._properties[key]


def read_ivy(text: str) -> ModuleDescriptor:
    """Read the subset of a module.ivy that IvyGenerator writes."""
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise MalformedDescriptorError(f"invalid module.ivy: {e}") from e

    info = root.find("info")
    if info is None:
        raise MalformedDescriptorError("module.ivy has no <info> element")

    fields: dict = {
        "group": info.get("organisation"),
        "name": info.get("module"),
        "version": info.get("revision"),
        "description": info.findtext("description"),
    }

    publications = root.find("publications")
    if publications is not None:
        artifact = publications.find("artifact")
        fields["packaging"] = artifact.get("type") if artifact is not None else "pom"

    deps_el = root.find("dependencies")
    if deps_el is not None:
        deps = []
        for dep_el in deps_el.findall("dependency"):
            artifact = dep_el.find("artifact")
            conf = dep_el.get("conf") or Scope.COMPILE.value
            deps.append({
                "group": dep_el.get("org"),
                "name": dep_el.get("name"),
                "version": dep_el.get("rev"),
                "scope": conf.split("->")[0],
                "classifier": artifact.get(f"{{{IVY_EXTRA_NAMESPACE}}}classifier") if artifact is not None else None,
            })
        fields["dependencies"] = deps

    return ModuleDescriptor(**fields)
