"""Renderers from ModuleDescriptor to each target build tool's syntax."""

from .base import DependencyOrder, FieldPolicy, Generator
from .ivy import IvyGenerator, read_ivy
from .maven import MavenGenerator, read_pom

__all__ = [
    "DependencyOrder",
    "FieldPolicy",
    "Generator",
    "IvyGenerator",
    "MavenGenerator",
    "read_ivy",
    "read_pom",
]
