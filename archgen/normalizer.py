"""
Project Record Normalizer

Turns raw package records into canonical Project objects. Records come
either from `pnpm ls --json` (dependencies as name -> {version, from, path}
maps) or from callers that already hold plain name lists, so both shapes
are accepted for the dependency fields.

Malformed records raise MalformedInputError; nothing is skipped silently.
The caller decides whether to abort or report.
"""

from pathlib import Path, PurePosixPath
from typing import Any, Iterable, Mapping, Optional, Union

from archgen.errors import MalformedInputError
from archgen.schema import PATH_SEPARATOR, ROOT_PATH, Project


def dependency_names(value: Any, field_name: str, package: str) -> tuple[str, ...]:
    """
    Reduce a dependency field to its ordered list of names.

    Args:
        value: A name -> metadata mapping, a list of names, or None
        field_name: Field being read (for error messages)
        package: Owning package name (for error messages)

    Returns:
        Tuple of dependency names in declaration order

    Raises:
        MalformedInputError: If the value has any other shape
    """
    if value is None:
        return ()

    if isinstance(value, Mapping):
        names = list(value.keys())
    elif isinstance(value, (list, tuple)):
        names = list(value)
    else:
        raise MalformedInputError(
            f"{package}: '{field_name}' must be a mapping or a list, "
            f"got {type(value).__name__}"
        )

    for name in names:
        if not isinstance(name, str) or not name:
            raise MalformedInputError(
                f"{package}: '{field_name}' contains an invalid name: {name!r}"
            )
    return tuple(dict.fromkeys(names))


def relative_path(path: str, root: Optional[Union[str, Path]] = None) -> str:
    """
    Express a package path as a POSIX path relative to the repository root.

    The root itself, "." and "" all become the empty string. Absolute paths
    are only accepted together with a root they live under.

    Raises:
        MalformedInputError: If the path is absolute without a root, lies
            outside the root, or has an empty, "." or ".." segment
    """
    original = path
    path = path.replace("\\", PATH_SEPARATOR)

    if PurePosixPath(path).is_absolute():
        if root is None:
            raise MalformedInputError(
                f"Path {original} is absolute but no repository root was given"
            )
        root_posix = Path(root).as_posix()
        try:
            path = PurePosixPath(path).relative_to(root_posix).as_posix()
        except ValueError:
            raise MalformedInputError(
                f"Path {original} is outside the repository root {root_posix}"
            )

    path = path.rstrip(PATH_SEPARATOR)
    while path.startswith("./"):
        path = path[2:]
    if path in (".", ""):
        return ROOT_PATH

    for segment in path.split(PATH_SEPARATOR):
        if segment in ("", ".", ".."):
            raise MalformedInputError(f"Path {original} has an invalid segment {segment!r}")
    return path


def normalize_record(
    record: Any,
    index: int = 0,
    root: Optional[Union[str, Path]] = None,
) -> Project:
    """
    Convert one raw record into a Project.

    Args:
        record: Mapping with name, path, dependencies, devDependencies
        index: Position of the record in discovery order
        root: Repository root used to relativize absolute paths

    Raises:
        MalformedInputError: If the record lacks a non-empty name or any
            field has the wrong type
    """
    if not isinstance(record, Mapping):
        raise MalformedInputError(
            f"Project record #{index} must be an object, got {type(record).__name__}"
        )

    name = record.get("name")
    if not isinstance(name, str) or not name.strip():
        raise MalformedInputError(f"Project record #{index} has no name")

    raw_path = record.get("path", ROOT_PATH)
    if raw_path is None:
        raw_path = ROOT_PATH
    if not isinstance(raw_path, str):
        raise MalformedInputError(f"{name}: 'path' must be a string")

    version = record.get("version")
    description = record.get("description")
    if version is not None and not isinstance(version, str):
        raise MalformedInputError(f"{name}: 'version' must be a string")
    if description is not None and not isinstance(description, str):
        raise MalformedInputError(f"{name}: 'description' must be a string")

    return Project(
        name=name,
        path=relative_path(raw_path, root),
        dependencies=dependency_names(record.get("dependencies"), "dependencies", name),
        dev_dependencies=dependency_names(
            record.get("devDependencies"), "devDependencies", name
        ),
        index=index,
        version=version,
        description=description,
    )


def normalize_projects(
    records: Iterable[Any],
    root: Optional[Union[str, Path]] = None,
) -> list[Project]:
    """
    Normalize a list of raw records.

    Raises:
        MalformedInputError: On the first malformed record, or when two
            records share a name or more than one sits at the root
    """
    projects: list[Project] = []
    seen: set[str] = set()
    root_project: Optional[str] = None

    for index, record in enumerate(records):
        project = normalize_record(record, index=index, root=root)

        if project.name in seen:
            raise MalformedInputError(f"Duplicate project name: {project.name}")
        seen.add(project.name)

        if project.is_root:
            if root_project is not None:
                raise MalformedInputError(
                    f"Both {root_project} and {project.name} are at the repository root"
                )
            root_project = project.name

        projects.append(project)

    return projects
