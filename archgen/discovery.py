"""
archgen Workspace Discovery

This module asks pnpm for the list of workspace projects and reads each
project's package.json to learn its declared dependencies.

Key Responsibilities:
    1. Run `pnpm ls -r --json --only-projects --depth 1` in the repository
    2. Validate the listing (a JSON array of {name, path, ...} objects)
    3. Validate every project's package.json
    4. Hand the combined records to the normalizer

Design Notes:
    - Dependency names come from package.json, not from pnpm's resolved
      tree, so only what a project declares shows up in the graph
    - Every validation failure raises; nothing is skipped silently
"""

import json
import subprocess
from pathlib import Path
from typing import Any, Optional, Union

from archgen.errors import DiscoveryError, MalformedInputError
from archgen.normalizer import normalize_projects
from archgen.schema import Project

PNPM_LIST_COMMAND = ["pnpm", "ls", "-r", "--json", "--only-projects", "--depth", "1"]
PNPM_TIMEOUT_SECONDS = 60

MANIFEST_NAME = "package.json"
README_NAMES = ["README.md", "README.rst", "README.txt", "README"]


def list_workspace_packages(root_path: Union[str, Path]) -> list[dict[str, Any]]:
    """
    List workspace projects using pnpm.

    Args:
        root_path: The repository root

    Returns:
        The parsed pnpm listing, one dict per project

    Raises:
        DiscoveryError: If pnpm is missing, fails, times out or prints
            something other than JSON
        MalformedInputError: If the listing does not have the expected shape
    """
    try:
        completed = subprocess.run(
            PNPM_LIST_COMMAND,
            cwd=str(root_path),
            check=True,
            capture_output=True,
            text=True,
            timeout=PNPM_TIMEOUT_SECONDS,
        )
    except FileNotFoundError:
        raise DiscoveryError("pnpm is not installed or not on PATH")
    except subprocess.CalledProcessError as e:
        raise DiscoveryError(f"pnpm ls failed: {(e.stderr or '').strip()}")
    except subprocess.TimeoutExpired:
        raise DiscoveryError(f"pnpm ls timed out ({PNPM_TIMEOUT_SECONDS}s limit)")

    try:
        listing = json.loads(completed.stdout)
    except json.JSONDecodeError as e:
        raise DiscoveryError(f"pnpm ls returned invalid JSON: {e}")

    if not isinstance(listing, list):
        raise MalformedInputError("Workspace listing must be a JSON array")

    for position, entry in enumerate(listing):
        if not isinstance(entry, dict):
            raise MalformedInputError(f"Workspace entry #{position} is not an object")
        for key in ("name", "path"):
            value = entry.get(key)
            if not isinstance(value, str) or not value:
                raise MalformedInputError(
                    f"Workspace entry #{position}: '{key}' must be a non-empty string"
                )

    return listing


def _string_map(manifest: dict[str, Any], key: str, source: Path) -> dict[str, str]:
    value = manifest.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in value.items()
    ):
        raise MalformedInputError(f"{source}: '{key}' must map names to version strings")
    return value


def read_manifest(package_dir: Union[str, Path]) -> dict[str, Any]:
    """
    Read and validate a project's package.json.

    Args:
        package_dir: Directory containing the package.json

    Returns:
        Dict with name, version, description, dependencies, devDependencies

    Raises:
        MalformedInputError: If the file is missing, is not JSON, or does
            not have the expected shape
    """
    manifest_path = Path(package_dir) / MANIFEST_NAME

    try:
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise MalformedInputError(f"Cannot read {manifest_path}: {e}")
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"Invalid JSON in {manifest_path}: {e}")

    if not isinstance(manifest, dict):
        raise MalformedInputError(f"{manifest_path}: expected a JSON object")

    name = manifest.get("name")
    if not isinstance(name, str) or not name:
        raise MalformedInputError(f"{manifest_path}: 'name' must be a non-empty string")

    for key in ("version", "description"):
        if manifest.get(key) is not None and not isinstance(manifest[key], str):
            raise MalformedInputError(f"{manifest_path}: '{key}' must be a string")

    return {
        "name": name,
        "version": manifest.get("version"),
        "description": manifest.get("description"),
        "dependencies": _string_map(manifest, "dependencies", manifest_path),
        "devDependencies": _string_map(manifest, "devDependencies", manifest_path),
    }


def discover_projects(root_path: Union[str, Path]) -> list[Project]:
    """
    Discover and normalize all workspace projects under a repository.

    Args:
        root_path: The repository root

    Returns:
        Projects in the order pnpm listed them
    """
    root = Path(root_path).resolve()
    records = []

    for entry in list_workspace_packages(root):
        manifest = read_manifest(root / entry["path"])
        records.append({
            "name": entry["name"],
            "path": entry["path"],
            "version": manifest["version"],
            "description": manifest["description"],
            "dependencies": manifest["dependencies"],
            "devDependencies": manifest["devDependencies"],
        })

    return normalize_projects(records, root=root)


def read_root_manifest(root_path: Union[str, Path]) -> dict[str, Any]:
    """
    Read the repository's root package.json without validation.

    Returns an empty dict when the file does not exist.
    """
    manifest_path = Path(root_path) / MANIFEST_NAME
    if not manifest_path.exists():
        return {}

    try:
        data = json.loads(manifest_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise MalformedInputError(f"Cannot read {manifest_path}: {e}")
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"Invalid JSON in {manifest_path}: {e}")
    return data if isinstance(data, dict) else {}


def read_readme(root_path: Union[str, Path]) -> Optional[str]:
    """Read the repository README if present."""
    for name in README_NAMES:
        readme_path = Path(root_path) / name
        if readme_path.exists():
            return readme_path.read_text(encoding="utf-8", errors="ignore")
    return None
