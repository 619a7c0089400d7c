"""Tests for descriptor_parity models."""

import pytest
from pydantic import ValidationError

from descriptor_parity.errors import MalformedDescriptorError
from descriptor_parity.models import Dependency, ModuleDescriptor, ParentRef, Scope


def _descriptor(**overrides) -> ModuleDescriptor:
    fields = dict(group="io.example", name="core", version="1.0")
    fields.update(overrides)
    return ModuleDescriptor(**fields)


class TestIdentity:
    def test_creation(self):
        m = _descriptor()
        assert m.coordinates == "io.example:core:1.0"
        assert m.dependencies == ()
        assert m.properties == {}

    @pytest.mark.parametrize("field", ["group", "name", "version"])
    def test_empty_identity_rejected(self, field):
        with pytest.raises(MalformedDescriptorError, match=field):
            _descriptor(**{field: ""})

    def test_blank_identity_rejected(self):
        with pytest.raises(MalformedDescriptorError, match="empty"):
            _descriptor(name="   ")

    @pytest.mark.parametrize("value", ["a/b", "a\\b"])
    def test_path_separator_rejected(self, value):
        with pytest.raises(MalformedDescriptorError, match="path separators"):
            _descriptor(name=value)

    def test_missing_identity_rejected(self):
        with pytest.raises(MalformedDescriptorError, match="version"):
            ModuleDescriptor(group="g", name="n")

    def test_parent_identity_validated(self):
        with pytest.raises(MalformedDescriptorError):
            _descriptor(parent={"group": "g", "name": "", "version": "1"})

    def test_unknown_field_rejected(self):
        with pytest.raises(MalformedDescriptorError, match="licence"):
            _descriptor(licence="MIT")


class TestDependency:
    def test_default_scope_is_compile(self):
        dep = Dependency(group="g", name="n", version="1")
        assert dep.scope == Scope.COMPILE
        assert dep.optional is False
        assert dep.classifier is None

    def test_scope_from_string(self):
        assert Dependency(group="g", name="n", version="1", scope="test").scope == Scope.TEST

    def test_unknown_scope_rejected(self):
        with pytest.raises(MalformedDescriptorError, match="scope"):
            Dependency(group="g", name="n", version="1", scope="system")

    def test_unknown_scope_rejected_inside_descriptor(self):
        with pytest.raises(MalformedDescriptorError, match="dependencies"):
            _descriptor(dependencies=[{"group": "g", "name": "n", "version": "1", "scope": "bogus"}])

    def test_version_range_allowed(self):
        dep = Dependency(group="g", name="n", version="[1.0,2.0)")
        assert dep.coordinates == "g:n:[1.0,2.0)"


class TestConflicts:
    def test_conflicting_versions_rejected(self):
        with pytest.raises(MalformedDescriptorError, match="conflicting versions for g:n"):
            _descriptor(dependencies=[
                Dependency(group="g", name="n", version="1.0"),
                Dependency(group="g", name="n", version="2.0", scope="test"),
            ])

    def test_same_version_in_two_scopes_allowed(self):
        m = _descriptor(dependencies=[
            Dependency(group="g", name="n", version="1.0"),
            Dependency(group="g", name="n", version="1.0", scope="test", classifier="tests"),
        ])
        assert len(m.dependencies) == 2

    def test_same_name_other_group_allowed(self):
        m = _descriptor(dependencies=[
            Dependency(group="g1", name="n", version="1.0"),
            Dependency(group="g2", name="n", version="2.0"),
        ])
        assert [d.group for d in m.dependencies] == ["g1", "g2"]


class TestImmutability:
    def test_cannot_reassign(self):
        m = _descriptor()
        with pytest.raises(ValidationError):
            m.version = "2.0"

    def test_dependency_order_preserved(self):
        names = ["zeta", "alpha", "mid"]
        m = _descriptor(dependencies=[Dependency(group="g", name=n, version="1") for n in names])
        assert [d.name for d in m.dependencies] == names

    def test_properties_order_preserved(self):
        m = _descriptor(properties={"b": "2", "a": "1"})
        assert list(m.properties) == ["b", "a"]


class TestPresentFields:
    def test_minimal(self):
        assert _descriptor().present_fields() == set()

    def test_everything(self):
        m = _descriptor(
            packaging="jar",
            parent=ParentRef(group="g", name="parent", version="1"),
            description="d",
            properties={"k": "v"},
            dependencies=[Dependency(group="g", name="n", version="1", classifier="c", optional=True)],
        )
        assert m.present_fields() == {
            "packaging", "parent", "description", "properties",
            "dependency.classifier", "dependency.optional",
        }

    def test_serialization(self):
        m = _descriptor(dependencies=[Dependency(group="g", name="n", version="1", scope="runtime")])
        data = m.model_dump()
        assert data["dependencies"][0]["scope"] == "runtime"
        assert data["group"] == "io.example"

    def test_properties_serialize_as_dict(self):
        data = _descriptor(properties={"a": "1"}).model_dump()
        assert data["properties"] == {"a": "1"}
        assert type(data["properties"]) is dict


class TestReadOnlyProperties:
    def test_properties_cannot_be_mutated(self):
        m = _descriptor(properties={"a": "1"})
        with pytest.raises(TypeError):
            m.properties["a"] = "2"
        assert m.properties == {"a": "1"}

    def test_properties_copied_from_input(self):
        source = {"a": "1"}
        m = _descriptor(properties=source)
        source["a"] = "2"
        assert m.properties["a"] == "1"

    def test_default_properties_are_read_only(self):
        with pytest.raises(TypeError):
            _descriptor().properties["a"] = "1"


class TestNestedErrors:
    def test_every_bad_dependency_reported_with_location(self):
        with pytest.raises(MalformedDescriptorError) as exc_info:
            _descriptor(dependencies=[
                {"group": "g", "name": "a", "version": "1", "scope": "bogus"},
                {"group": "g", "name": "b", "version": "1"},
                {"group": "g", "name": "", "version": "1"},
            ])
        message = str(exc_info.value)
        assert message.startswith("Invalid ModuleDescriptor")
        assert "dependencies.0" in message
        assert "dependencies.2" in message
        assert "scope" in message

    def test_bad_parent_reported_with_location(self):
        with pytest.raises(MalformedDescriptorError, match="parent"):
            _descriptor(parent={"group": "g", "name": "", "version": "1"})

    def test_standalone_dependency_still_wrapped(self):
        with pytest.raises(MalformedDescriptorError, match="Invalid Dependency"):
            Dependency(group="g", name="n", version="1", scope="bogus")

    def test_later_construction_unaffected_by_earlier_failure(self):
        with pytest.raises(MalformedDescriptorError):
            _descriptor(dependencies=[{"group": "g", "name": "n", "version": "1", "scope": "bogus"}])
        with pytest.raises(MalformedDescriptorError):
            Dependency(group="g", name="n", version="1", scope="bogus")


class TestIdentifierWhitespace:
    def test_surrounding_whitespace_stripped(self):
        m = _descriptor(group=" io.example ", dependencies=[{"group": "g ", "name": "n", "version": " 1"}])
        assert m.group == "io.example"
        assert m.dependencies[0].coordinates == "g:n:1"
