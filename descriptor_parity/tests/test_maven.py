"""Tests for pom.xml generation and reading."""

import pytest

from descriptor_parity.errors import GenerationError, MalformedDescriptorError
from descriptor_parity.generators import MavenGenerator, read_pom
from descriptor_parity.models import Dependency, ModuleDescriptor, ParentRef


MINIMAL_POM = """\
<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0" xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
         xsi:schemaLocation="http://maven.apache.org/POM/4.0.0 http://maven.apache.org/xsd/maven-4.0.0.xsd">
    <modelVersion>4.0.0</modelVersion>

    <groupId>g</groupId>
    <artifactId>n</artifactId>
    <version>1.0</version>

    <dependencies>
        <dependency>
            <groupId>g2</groupId>
            <artifactId>n2</artifactId>
            <version>2.0</version>
        </dependency>
    </dependencies>
</project>
"""


def _full_descriptor() -> ModuleDescriptor:
    return ModuleDescriptor(
        group="io.example",
        name="core",
        version="${project.version}",
        packaging="jar",
        parent=ParentRef(group="io.example", name="parent", version="0.35"),
        description="Core & <friends>",
        properties={"project.version": "0.35", "java.version": "17"},
        dependencies=[
            Dependency(group="io.example", name="factory", version="${project.version}"),
            Dependency(group="org.slf4j", name="slf4j-api", version="[1.7,2.0)", scope="provided"),
            Dependency(group="junit", name="junit", version="4.13", scope="test", classifier="tests"),
            Dependency(group="com.acme", name="extras", version="1.0", scope="runtime", optional=True),
        ],
    )


class TestMavenGenerator:
    def test_minimal(self):
        m = ModuleDescriptor(
            group="g", name="n", version="1.0",
            dependencies=[Dependency(group="g2", name="n2", version="2.0", scope="compile")],
        )
        assert MavenGenerator().generate(m) == MINIMAL_POM

    def test_full_layout(self):
        text = MavenGenerator().generate(_full_descriptor())
        lines = text.splitlines()
        assert lines[3] == "    <modelVersion>4.0.0</modelVersion>"
        assert "    <parent>" in lines
        assert lines.index("    <parent>") < lines.index("    <groupId>io.example</groupId>")
        assert "    <packaging>jar</packaging>" in lines
        assert "    <description>Core &amp; &lt;friends&gt;</description>" in lines
        assert "        <project.version>0.35</project.version>" in lines
        assert "            <scope>provided</scope>" in lines
        assert "            <classifier>tests</classifier>" in lines
        assert "            <optional>true</optional>" in lines
        assert text.endswith("</project>\n")

    def test_compile_scope_is_implicit(self):
        text = MavenGenerator().generate(_full_descriptor())
        assert "<scope>compile</scope>" not in text

    def test_keeps_declared_order(self):
        text = MavenGenerator().generate(_full_descriptor())
        positions = [text.index(f"<artifactId>{n}</artifactId>") for n in ("factory", "slf4j-api", "junit", "extras")]
        assert positions == sorted(positions)

    def test_deterministic(self):
        m = _full_descriptor()
        assert MavenGenerator().generate(m) == MavenGenerator().generate(m)

    def test_no_sections_when_empty(self):
        text = MavenGenerator().generate(ModuleDescriptor(group="g", name="n", version="1"))
        assert "<dependencies>" not in text
        assert "<properties>" not in text
        assert "<parent>" not in text

    def test_invalid_property_name(self):
        m = ModuleDescriptor(group="g", name="n", version="1", properties={"1st.version": "1"})
        with pytest.raises(GenerationError, match="1st.version"):
            MavenGenerator().generate(m)

    @pytest.mark.parametrize("version", ["latest.release", "latest.integration", "1.+"])
    def test_dynamic_revision_rejected(self, version):
        m = ModuleDescriptor(
            group="g", name="n", version="1",
            dependencies=[Dependency(group="a", name="b", version=version)],
        )
        with pytest.raises(GenerationError, match="dynamic revision"):
            MavenGenerator().generate(m)


class TestReadPom:
    def test_round_trip_minimal(self):
        m = ModuleDescriptor(
            group="g", name="n", version="1.0",
            dependencies=[Dependency(group="g2", name="n2", version="2.0")],
        )
        assert read_pom(MavenGenerator().generate(m)) == m

    def test_round_trip_full(self):
        m = _full_descriptor()
        assert read_pom(MavenGenerator().generate(m)) == m

    def test_round_trip_padded_identity(self):
        m = ModuleDescriptor(group=" g", name="n ", version="1", dependencies=[{"group": " a", "name": "b", "version": "2 "}])
        assert read_pom(MavenGenerator().generate(m)) == m
        assert "<groupId>g</groupId>" in MavenGenerator().generate(m)

    def test_reads_hand_written_pom_without_namespace(self):
        m = read_pom("""<project>
    <groupId>com.example</groupId>
    <artifactId>my-app</artifactId>
    <version>1.0</version>
    <dependencies>
        <dependency>
            <groupId>junit</groupId>
            <artifactId>junit</artifactId>
            <version>4.13</version>
            <scope>test</scope>
        </dependency>
    </dependencies>
</project>""")
        assert m.coordinates == "com.example:my-app:1.0"
        assert m.dependencies[0].scope.value == "test"

    def test_invalid_xml(self):
        with pytest.raises(MalformedDescriptorError, match="invalid pom.xml"):
            read_pom("<project>")

    def test_missing_identity(self):
        with pytest.raises(MalformedDescriptorError):
            read_pom("<project><artifactId>x</artifactId></project>")
