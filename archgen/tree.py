"""
Folder Tree Builder and Renderer

Folds project paths into a forest of TreeNode values and renders it as a
conventional ASCII directory tree:

    root
    ├── apps
    │   └── web (@acme/web)
    └── packages
        └── core (@acme/core)

Building is a pure reduction: every insert returns a new forest and no
node visible to the caller is ever mutated. Siblings keep first-insertion
order so the output follows discovery order, except that the root node is
always placed first.
"""

from functools import reduce
from typing import Iterable, Sequence

from archgen.errors import AmbiguousPathError
from archgen.schema import ROOT_PATH, Project, TreeNode

Forest = tuple[TreeNode, ...]

BRANCH = "├── "
CORNER = "└── "
GUIDE = "│   "
BLANK = "    "
ROOT_PLACEHOLDER = "."


def _claim(node: TreeNode, project: Project) -> TreeNode:
    """Mark ``node`` as the end of ``project``'s path."""
    if node.project_name is not None and node.project_name != project.name:
        raise AmbiguousPathError(
            f"{project.name} and {node.project_name} share the path "
            f"'{project.path or ROOT_PATH}'"
        )
    return TreeNode(
        name=node.name,
        inner=node.inner,
        project_name=project.name,
        root=node.root,
    )


def _insert(
    forest: Forest,
    segments: Sequence[str],
    project: Project,
    is_root: bool,
) -> Forest:
    """Return a copy of ``forest`` with ``segments`` added under it."""
    head, rest = segments[0], segments[1:]

    for position, sibling in enumerate(forest):
        if sibling.name != head:
            continue
        if sibling.root != is_root:
            raise AmbiguousPathError(
                f"Path segment '{head}' of {project.name} collides with the "
                f"repository root node"
            )
        if rest:
            updated = TreeNode(
                name=sibling.name,
                inner=_insert(sibling.inner, rest, project, False),
                project_name=sibling.project_name,
                root=sibling.root,
            )
        else:
            updated = _claim(sibling, project)
        return forest[:position] + (updated,) + forest[position + 1:]

    if rest:
        created = TreeNode(name=head, inner=_insert((), rest, project, False), root=is_root)
    else:
        created = TreeNode(name=head, project_name=project.name, root=is_root)

    if is_root:
        return (created,) + forest
    return forest + (created,)


def add_project(forest: Forest, project: Project) -> Forest:
    """
    Add one project to the forest.

    The root project becomes a single top-level node named "" and flagged
    ``root``; every other project is walked segment by segment.

    Raises:
        AmbiguousPathError: If a segment collides with a sibling of the
            opposite root flag, or the node is already claimed by another
            project
    """
    if project.is_root:
        return _insert(forest, (ROOT_PATH,), project, True)
    return _insert(forest, project.segments, project, False)


def build_tree(projects: Iterable[Project]) -> Forest:
    """Fold the projects, in index order, into a fresh forest."""
    ordered = sorted(projects, key=lambda p: p.index)
    return reduce(add_project, ordered, ())


def _render_nodes(nodes: Sequence[TreeNode], prefix: str, lines: list[str]) -> None:
    total = len(nodes)
    for position, node in enumerate(nodes):
        is_last = position == total - 1
        lines.append(f"{prefix}{CORNER if is_last else BRANCH}{node.label}")
        if not node.is_leaf:
            _render_nodes(node.inner, prefix + (BLANK if is_last else GUIDE), lines)


def render_tree_lines(forest: Forest) -> list[str]:
    """
    Render the forest as a list of lines.

    Root nodes are written bare (project name or "."), and their children
    are rendered without any added prefix. All other top-level nodes get
    the usual branch and corner connectors.
    """
    lines: list[str] = []
    regular: list[TreeNode] = []

    for node in forest:
        if node.root:
            lines.append(node.project_name or ROOT_PLACEHOLDER)
            _render_nodes(node.inner, "", lines)
        else:
            regular.append(node)

    _render_nodes(regular, "", lines)
    return lines


def render_tree(forest: Forest) -> str:
    """Render the forest as newline-joined text without a trailing newline."""
    return "\n".join(render_tree_lines(forest))


def generate_folder_tree(projects: Iterable[Project]) -> str:
    """Build and render the tree, wrapped in a fenced code block."""
    return "```\n" + render_tree(build_tree(projects)) + "\n```"
