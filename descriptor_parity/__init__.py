from .canonical import parse_descriptor
from .detector import compare, generate_descriptor
from .errors import (
    DescriptorError,
    DescriptorMismatchError,
    GenerationError,
    MalformedDescriptorError,
    ResolutionTimeoutError,
    ToolInvocationError,
    UnsupportedFieldError,
)
from .formats import DescriptorFormat, formats_for
from .models import Dependency, ModuleDescriptor, ParentRef, Scope

__all__ = [
    "compare",
    "formats_for",
    "generate_descriptor",
    "parse_descriptor",
    "Dependency",
    "DescriptorError",
    "DescriptorFormat",
    "DescriptorMismatchError",
    "GenerationError",
    "MalformedDescriptorError",
    "ModuleDescriptor",
    "ParentRef",
    "ResolutionTimeoutError",
    "Scope",
    "ToolInvocationError",
    "UnsupportedFieldError",
]
