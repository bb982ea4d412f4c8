"""
archgen Markdown Renderer

This module assembles ARCHITECTURE.md from the workspace model. The tree
and the dependency graph come from the core builders; this module only
arranges them into sections.

Output Structure:
    1. Title ("<name> Architecture") and description
    2. Technical stack (only when a stack summary exists)
    3. Project structure tree
    4. Dependency graph (Mermaid)
    5. Generation notice (optional)
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from archgen.graph import generate_dependency_graph
from archgen.schema import Project
from archgen.tree import generate_folder_tree

DEFAULT_NAME = "Project"

STRUCTURE_INTRO = (
    "The following tree represents the organization of packages in this monorepo:"
)


@dataclass
class RenderOptions:
    """
    Configuration options for document rendering.

    Attributes:
        include_tech_stack: Add the technical stack section when text exists
        include_project_structure: Add the folder tree section
        include_dependency_graph: Add the Mermaid dependency graph section
        include_generation_notice: Add a notice that the file was generated
        graph_direction: Mermaid flow direction ("TD", "LR", ...)
    """
    include_tech_stack: bool = True
    include_project_structure: bool = True
    include_dependency_graph: bool = True
    include_generation_notice: bool = False
    graph_direction: str = "TD"


@dataclass
class ArchitectureDocument:
    """
    Everything the renderer needs for one document.

    ``tree`` and ``graph`` hold the fenced blocks produced by the core.
    """
    name: str
    description: Optional[str]
    tree: str
    graph: str
    tech_stack: str = ""


def build_document(
    projects: Iterable[Project],
    name: Optional[str] = None,
    description: Optional[str] = None,
    tech_stack: str = "",
    options: Optional[RenderOptions] = None,
) -> ArchitectureDocument:
    """
    Build an ArchitectureDocument from normalized projects.

    Args:
        projects: Workspace projects in discovery order
        name: Repository name (defaults to "Project")
        description: Text shown under the title
        tech_stack: Markdown bullet list of the stack, may be empty
        options: Used for the graph direction
    """
    projects = list(projects)
    options = options or RenderOptions()
    return ArchitectureDocument(
        name=name or DEFAULT_NAME,
        description=description,
        tree=generate_folder_tree(projects),
        graph=generate_dependency_graph(projects, options.graph_direction),
        tech_stack=tech_stack,
    )


class ArchitectureRenderer:
    """
    Renders an ArchitectureDocument into Markdown.

    Usage:
        renderer = ArchitectureRenderer(document)
        content = renderer.render()
    """

    def __init__(
        self,
        document: ArchitectureDocument,
        options: Optional[RenderOptions] = None,
    ):
        self.document = document
        self.options = options or RenderOptions()
        self._sections: list[str] = []

    def render(self) -> str:
        """
        Generate the complete document.

        Returns:
            The Markdown content, ending with a newline
        """
        self._sections = []

        self._add_title_section()
        self._add_description_section()
        self._add_tech_stack_section()
        self._add_project_structure_section()
        self._add_dependency_graph_section()
        self._add_generation_notice()

        return "\n\n".join(self._sections) + "\n"

    def _add_section(self, content: str) -> None:
        if content.strip():
            self._sections.append(content.strip("\n"))

    def _add_title_section(self) -> None:
        self._add_section(f"# {self.document.name} Architecture")

    def _add_description_section(self) -> None:
        if self.document.description:
            self._add_section(self.document.description.strip())

    def _add_tech_stack_section(self) -> None:
        if not self.options.include_tech_stack or not self.document.tech_stack.strip():
            return
        self._add_section("## Technical Stack\n\n" + self.document.tech_stack.strip())

    def _add_project_structure_section(self) -> None:
        if not self.options.include_project_structure:
            return
        self._add_section(
            f"## Project Structure\n\n{STRUCTURE_INTRO}\n\n{self.document.tree}"
        )

    def _add_dependency_graph_section(self) -> None:
        if not self.options.include_dependency_graph:
            return
        self._add_section(f"## Dependency Graph\n\n{self.document.graph}")

    def _add_generation_notice(self) -> None:
        if not self.options.include_generation_notice:
            return
        self._add_section(
            "---\n\n"
            "*This document was generated by archgen. "
            "Re-run it after adding or moving workspace projects.*"
        )


def render_architecture(
    projects: Iterable[Project],
    name: Optional[str] = None,
    description: Optional[str] = None,
    tech_stack: str = "",
    options: Optional[RenderOptions] = None,
) -> str:
    """
    Convenience function to build and render a document in one call.

    Returns:
        The rendered ARCHITECTURE.md content
    """
    options = options or RenderOptions()
    document = build_document(projects, name, description, tech_stack, options)
    return ArchitectureRenderer(document, options).render()
