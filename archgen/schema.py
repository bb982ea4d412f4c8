"""
archgen Workspace Model

This module defines the data structures shared by the tree and graph
builders. Everything here is immutable: a run normalizes the discovered
packages into Project records once, and every later stage derives fresh
values from them.

Design Principles:
    1. Order is explicit: projects and subgraphs carry their own index
       instead of relying on container iteration order
    2. Paths are POSIX-style and relative to the repository root
    3. The root project is the one whose path is the empty string
"""

from dataclasses import dataclass, field
from typing import Optional

ROOT_PATH = ""
PATH_SEPARATOR = "/"


def namespace_prefix(name: str) -> str:
    """
    Return the part of a package name before its first "/".

    Scoped names such as "@acme/api" give "@acme"; unscoped names are
    returned whole.
    """
    return name.split("/", 1)[0]


@dataclass(frozen=True)
class Project:
    """
    A single workspace project.

    Attributes:
        name: Package name, unique within a run
        path: Path relative to the repository root ("" for the root project)
        dependencies: Runtime dependency names, in declaration order
        dev_dependencies: Development dependency names, in declaration order
        index: Position of the project in discovery order
        version: Version from the manifest, if any
        description: Description from the manifest, if any

    Example:
        >>> Project(name="@acme/api", path="services/api", dependencies=("@acme/core",))
    """
    name: str
    path: str = ROOT_PATH
    dependencies: tuple[str, ...] = ()
    dev_dependencies: tuple[str, ...] = ()
    index: int = 0
    version: Optional[str] = None
    description: Optional[str] = None
    namespace_prefix: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "namespace_prefix", namespace_prefix(self.name))

    @property
    def is_root(self) -> bool:
        """True for the project living at the repository root."""
        return self.path == ROOT_PATH

    @property
    def segments(self) -> tuple[str, ...]:
        """Path segments in order; empty for the root project."""
        if self.is_root:
            return ()
        return tuple(self.path.split(PATH_SEPARATOR))

    @property
    def top_segment(self) -> Optional[str]:
        """First path segment, or None for the root project."""
        segments = self.segments
        return segments[0] if segments else None

    @property
    def all_dependencies(self) -> tuple[str, ...]:
        """Runtime then dev dependency names, without repeats."""
        return tuple(dict.fromkeys(self.dependencies + self.dev_dependencies))


@dataclass(frozen=True)
class TreeNode:
    """
    One path segment in the folder tree.

    Attributes:
        name: The path segment ("" for the root node)
        inner: Child nodes in first-insertion order (empty for leaves)
        project_name: Name of the project whose path ends here, if any
        root: True only for the node standing for the repository root
    """
    name: str
    inner: tuple["TreeNode", ...] = ()
    project_name: Optional[str] = None
    root: bool = False

    @property
    def is_leaf(self) -> bool:
        return not self.inner

    @property
    def label(self) -> str:
        """Text shown for this node in the rendered tree."""
        if self.project_name and self.project_name != self.name:
            return f"{self.name} ({self.project_name})"
        return self.name

    def find(self, name: str) -> Optional["TreeNode"]:
        """Return the direct child with the given segment name, if any."""
        for child in self.inner:
            if child.name == name:
                return child
        return None


@dataclass(frozen=True)
class Subgraph:
    """
    Projects sharing a top-level directory, rendered as one diagram group.

    Attributes:
        key: The shared first path segment
        index: Order in which the key was first encountered
        members: Projects in the group, in discovery order
        depends_on: Keys of other subgraphs this one depends on, in the
            order they were first reached; never contains ``key``
    """
    key: str
    index: int = 0
    members: tuple[Project, ...] = ()
    depends_on: tuple[str, ...] = ()


@dataclass(frozen=True)
class DependencyGraph:
    """
    Grouped dependency graph of a workspace.

    Root projects belong to no subgraph; they are kept apart so the
    renderer can still declare them as standalone nodes.
    """
    subgraphs: tuple[Subgraph, ...] = ()
    root_projects: tuple[Project, ...] = ()

    def get(self, key: str) -> Optional[Subgraph]:
        for subgraph in self.subgraphs:
            if subgraph.key == key:
                return subgraph
        return None

    @property
    def edges(self) -> list[tuple[str, str]]:
        """All (source, target) subgraph key pairs, in render order."""
        return [
            (subgraph.key, target)
            for subgraph in self.subgraphs
            for target in subgraph.depends_on
        ]
