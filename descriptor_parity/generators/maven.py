"""Maven pom.xml generation and reading."""

import re
# stdlib ElementTree is not vulnerable to XXE (no external entity support)
import xml.etree.ElementTree as ET
from typing import Mapping, Optional

from ..errors import GenerationError, MalformedDescriptorError
from ..models import Dependency, ModuleDescriptor, Scope
from .base import INDENT, DependencyOrder, FieldPolicy, Generator, element

POM_NAMESPACE = "http://maven.apache.org/POM/4.0.0"
MODEL_VERSION = "4.0.0"

_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    f'<project xmlns="{POM_NAMESPACE}" xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"\n'
    f'         xsi:schemaLocation="{POM_NAMESPACE} http://maven.apache.org/xsd/maven-4.0.0.xsd">'
)

# Property names become element names
_XML_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9._-]*$")

# Ivy dynamic revisions: latest.integration, latest.release, 1.+
_DYNAMIC_REVISION = re.compile(r"^latest\.|\+$")


class MavenGenerator(Generator):
    """Renders a pom.xml.

    Every optional field is expressed. The compile scope is Maven's default
    and is left implicit; optional is only written when true.
    """

    format_name = "pom"
    field_policies = {
        "packaging": FieldPolicy.EXPRESS,
        "parent": FieldPolicy.EXPRESS,
        "description": FieldPolicy.EXPRESS,
        "properties": FieldPolicy.EXPRESS,
        "dependency.classifier": FieldPolicy.EXPRESS,
        "dependency.optional": FieldPolicy.EXPRESS,
    }
    dependency_order = DependencyOrder.DECLARED

    def _render(self, descriptor: ModuleDescriptor) -> str:
        sections: list[list[str]] = [[element(1, "modelVersion", MODEL_VERSION)]]

        if descriptor.parent:
            sections.append([
                f"{INDENT}<parent>",
                element(2, "groupId", descriptor.parent.group),
                element(2, "artifactId", descriptor.parent.name),
                element(2, "version", descriptor.parent.version),
                f"{INDENT}</parent>",
            ])

        identity = [
            element(1, "groupId", descriptor.group),
            element(1, "artifactId", descriptor.name),
            element(1, "version", descriptor.version),
        ]
        if descriptor.packaging:
            identity.append(element(1, "packaging", descriptor.packaging))
        if descriptor.description:
            identity.append(element(1, "description", descriptor.description))
        sections.append(identity)

        if descriptor.properties:
            sections.append(self._properties(descriptor.properties))

        deps = self.ordered_dependencies(descriptor)
        if deps:
            sections.append(self._dependencies(deps))

        body = "\n\n".join("\n".join(section) for section in sections)
        return f"{_HEADER}\n{body}\n</project>\n"

    def _properties(self, properties: Mapping[str, str]) -> list[str]:
        lines = [f"{INDENT}<properties>"]
        for key, value in properties.items():
            if not _XML_NAME.match(key):
                raise GenerationError(f"property name {key!r} is not a valid POM element name")
            lines.append(element(2, key, value))
        lines.append(f"{INDENT}</properties>")
        return lines

    def _dependencies(self, deps: list[Dependency]) -> list[str]:
        lines = [f"{INDENT}<dependencies>"]
        for dep in deps:
            if _DYNAMIC_REVISION.search(dep.version):
                raise GenerationError(
                    f"dependency {dep.coordinates} uses a dynamic revision Maven cannot express"
                )
            lines.append(f"{INDENT * 2}<dependency>")
            lines.append(element(3, "groupId", dep.group))
            lines.append(element(3, "artifactId", dep.name))
            lines.append(element(3, "version", dep.version))
            if dep.classifier:
                lines.append(element(3, "classifier", dep.classifier))
            if dep.scope is not Scope.COMPILE:
                lines.append(element(3, "scope", dep.scope.value))
            if dep.optional:
                lines.append(element(3, "optional", "true"))
            lines.append(f"{INDENT * 2}</dependency>")
        lines.append(f"{INDENT}</dependencies>")
        return lines


def _namespace(root: ET.Element) -> str:
    match = re.match(r"\{(.+)\}", root.tag)
    return f"{{{match.group(1)}}}" if match else ""


def _text(parent: ET.Element, tag: str) -> Optional[str]:
    value = parent.findtext(tag)
    return value.strip() if value is not None else None


def read_pom(text: str) -> ModuleDescriptor:
    """Read the subset of a pom.xml that MavenGenerator writes."""
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise MalformedDescriptorError(f"invalid pom.xml: {e}") from e
    ns = _namespace(root)

    fields: dict = {
        "group": _text(root, f"{ns}groupId"),
        "name": _text(root, f"{ns}artifactId"),
        "version": _text(root, f"{ns}version"),
        "packaging": _text(root, f"{ns}packaging"),
        "description": root.findtext(f"{ns}description"),
    }

    parent_el = root.find(f"{ns}parent")
    if parent_el is not None:
        fields["parent"] = {
            "group": _text(parent_el, f"{ns}groupId"),
            "name": _text(parent_el, f"{ns}artifactId"),
            "version": _text(parent_el, f"{ns}version"),
        }

    props_el = root.find(f"{ns}properties")
    if props_el is not None:
        fields["properties"] = {
            child.tag.split("}")[-1]: child.text or "" for child in props_el
        }

    deps_el = root.find(f"{ns}dependencies")
    if deps_el is not None:
        fields["dependencies"] = [
            {
                "group": _text(dep_el, f"{ns}groupId"),
                "name": _text(dep_el, f"{ns}artifactId"),
                "version": _text(dep_el, f"{ns}version"),
                "classifier": _text(dep_el, f"{ns}classifier"),
                "scope": _text(dep_el, f"{ns}scope") or Scope.COMPILE.value,
                "optional": _text(dep_el, f"{ns}optional") == "true",
            }
            for dep_el in deps_el.findall(f"{ns}dependency")
        ]

    return ModuleDescriptor(**fields)
