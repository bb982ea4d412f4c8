"""
Tests for archgen.renderer module.

Tests ARCHITECTURE.md assembly from the workspace model.
"""

from archgen.normalizer import normalize_projects
from archgen.renderer import (
    ArchitectureDocument,
    ArchitectureRenderer,
    RenderOptions,
    build_document,
    render_architecture,
)


def sample_projects():
    return normalize_projects([
        {"name": "acme", "path": ""},
        {"name": "@acme/core", "path": "packages/core"},
        {"name": "@acme/web", "path": "apps/web", "dependencies": ["@acme/core", "react"]},
    ])


class TestRenderOptions:
    """Tests for the RenderOptions dataclass."""

    def test_default_options(self):
        """Test default render options."""
        options = RenderOptions()

        assert options.include_tech_stack is True
        assert options.include_project_structure is True
        assert options.include_dependency_graph is True
        assert options.include_generation_notice is False
        assert options.graph_direction == "TD"


class TestBuildDocument:
    """Tests for build_document."""

    def test_document_holds_core_output(self):
        """Tree and graph come fenced from the core."""
        document = build_document(sample_projects(), name="acme")

        assert document.name == "acme"
        assert document.tree.startswith("```\nacme\n")
        assert document.graph.startswith("```mermaid\ngraph TD")

    def test_default_name(self):
        """A missing name falls back to a generic title."""
        assert build_document(sample_projects()).name == "Project"

    def test_graph_direction_option(self):
        """The graph direction comes from the options."""
        document = build_document(sample_projects(), options=RenderOptions(graph_direction="LR"))
        assert "graph LR" in document.graph


class TestArchitectureRenderer:
    """Tests for the ArchitectureRenderer class."""

    def test_sections_in_order(self):
        """Title, description, stack, structure and graph appear in order."""
        output = render_architecture(
            sample_projects(),
            name="acme",
            description="A monorepo.",
            tech_stack="- **react**: UI library",
        )

        positions = [
            output.index("# acme Architecture"),
            output.index("A monorepo."),
            output.index("## Technical Stack"),
            output.index("## Project Structure"),
            output.index("## Dependency Graph"),
        ]
        assert positions == sorted(positions)
        assert "sg_apps --> sg_packages" in output
        assert output.endswith("```\n")

    def test_stack_section_skipped_when_empty(self):
        """No stack text means no stack heading."""
        output = render_architecture(sample_projects(), name="acme")
        assert "## Technical Stack" not in output

    def test_missing_description(self):
        """The document still renders without a description."""
        output = render_architecture(sample_projects(), name="acme")
        assert output.startswith("# acme Architecture\n\n## Project Structure")

    def test_sections_can_be_disabled(self):
        """Structure and graph sections follow the options."""
        options = RenderOptions(
            include_project_structure=False,
            include_dependency_graph=False,
            include_tech_stack=False,
        )
        output = render_architecture(
            sample_projects(), name="acme", tech_stack="- x", options=options
        )

        assert "## Project Structure" not in output
        assert "## Dependency Graph" not in output
        assert "## Technical Stack" not in output

    def test_generation_notice(self):
        """The optional notice is appended last."""
        options = RenderOptions(include_generation_notice=True)
        output = render_architecture(sample_projects(), name="acme", options=options)
        assert output.rstrip().endswith("workspace projects.*")

    def test_render_from_document(self):
        """The renderer works on a hand-built document."""
        document = ArchitectureDocument(
            name="demo",
            description=None,
            tree="```\n.\n```",
            graph="```mermaid\ngraph TD\n```",
        )
        output = ArchitectureRenderer(document).render()

        assert "# demo Architecture" in output
        assert "```\n.\n```" in output

    def test_render_is_deterministic(self):
        """Same projects, same document."""
        first = render_architecture(sample_projects(), name="acme")
        assert first == render_architecture(sample_projects(), name="acme")
