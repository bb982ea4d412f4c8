"""
Dependency Graph Builder and Mermaid Renderer

Groups workspace projects by their top-level directory and computes which
groups depend on which. The result is rendered as a Mermaid flowchart:

    graph TD
      subgraph sg_packages [packages]
        _acme_core["@acme/core"]
      end
      subgraph sg_services [services]
        _acme_api["@acme/api"]
      end
      sg_services --> sg_packages

Resolution rules:
    - A dependency resolves only by exact project name
    - Names that match no project (external packages) are ignored
    - Edges inside the same group are dropped
    - The root project forms no group; dependencies on it are dropped
"""

import re
from typing import Iterable, Optional

from archgen.schema import DependencyGraph, Project, Subgraph

_UNSAFE_ID_CHARS = re.compile(r"[@/-]")

INDENT = "  "
SUBGRAPH_ID_PREFIX = "sg_"


def sanitize_identifier(name: str) -> str:
    """
    Make a name usable as a Mermaid identifier.

    Every "@", "/" and "-" becomes "_". Applying it twice is a no-op.

    Example:
        >>> sanitize_identifier("@acme/ui-kit")
        '_acme_ui_kit'
    """
    return _UNSAFE_ID_CHARS.sub("_", name)


def build_dependency_graph(projects: Iterable[Project]) -> DependencyGraph:
    """
    Group projects into subgraphs and compute inter-subgraph edges.

    Args:
        projects: Normalized workspace projects

    Returns:
        DependencyGraph with subgraphs in first-encounter order and the
        root project(s) kept apart
    """
    ordered = sorted(projects, key=lambda p: p.index)
    by_name: dict[str, Project] = {p.name: p for p in ordered}

    keys: list[str] = []
    members: dict[str, list[Project]] = {}
    targets: dict[str, dict[str, None]] = {}
    root_projects: list[Project] = []

    for project in ordered:
        key = project.top_segment
        if key is None:
            root_projects.append(project)
            continue
        if key not in members:
            keys.append(key)
            members[key] = []
            targets[key] = {}
        members[key].append(project)

    for project in ordered:
        source = project.top_segment
        if source is None:
            continue
        for dependency in project.all_dependencies:
            resolved = by_name.get(dependency)
            if resolved is None:
                continue
            target = resolved.top_segment
            if target is None or target == source:
                continue
            targets[source].setdefault(target, None)

    subgraphs = tuple(
        Subgraph(
            key=key,
            index=index,
            members=tuple(members[key]),
            depends_on=tuple(targets[key]),
        )
        for index, key in enumerate(keys)
    )
    return DependencyGraph(subgraphs=subgraphs, root_projects=tuple(root_projects))


def _node_line(project: Project, indent: str) -> str:
    return f'{indent}{sanitize_identifier(project.name)}["{project.name}"]'


def subgraph_identifier(key: str) -> str:
    """
    Mermaid identifier for a subgraph.

    The "sg_" prefix keeps subgraph ids apart from node ids (a project
    named "docs" living at "docs/") and from keywords such as "end".
    """
    return SUBGRAPH_ID_PREFIX + sanitize_identifier(key)


def _subgraph_header(key: str) -> str:
    return f"subgraph {subgraph_identifier(key)} [{key}]"


def render_graph(graph: DependencyGraph, direction: str = "TD") -> str:
    """
    Serialize a dependency graph as Mermaid source.

    Output order: header, standalone root nodes, one block per subgraph,
    then one fan-out edge line per subgraph with dependencies.
    """
    lines = [f"graph {direction}"]

    for project in sorted(graph.root_projects, key=lambda p: p.index):
        lines.append(_node_line(project, INDENT))

    subgraphs = sorted(graph.subgraphs, key=lambda s: s.index)
    for subgraph in subgraphs:
        lines.append(INDENT + _subgraph_header(subgraph.key))
        for project in sorted(subgraph.members, key=lambda p: p.index):
            lines.append(_node_line(project, INDENT * 2))
        lines.append(INDENT + "end")

    for subgraph in subgraphs:
        if not subgraph.depends_on:
            continue
        fan_out = " & ".join(subgraph_identifier(t) for t in subgraph.depends_on)
        lines.append(f"{INDENT}{subgraph_identifier(subgraph.key)} --> {fan_out}")

    return "\n".join(lines)


def generate_dependency_graph(
    projects: Iterable[Project],
    direction: Optional[str] = None,
) -> str:
    """Build and render the graph, wrapped in a mermaid code fence."""
    graph = build_dependency_graph(projects)
    return "```mermaid\n" + render_graph(graph, direction or "TD") + "\n```"
