"""
Tests for archgen.normalizer module.

Tests conversion of raw package records into Project objects.
"""

import pytest

from archgen.errors import MalformedInputError
from archgen.normalizer import (
    dependency_names,
    normalize_projects,
    normalize_record,
    relative_path,
)


class TestDependencyNames:
    """Tests for dependency_names."""

    def test_mapping_keeps_keys(self):
        """pnpm-style maps are reduced to their keys."""
        value = {
            "react": {"version": "18.2.0", "from": "react", "path": "/x"},
            "@acme/core": {"version": "link:../core", "from": "@acme/core", "path": "/y"},
        }
        assert dependency_names(value, "dependencies", "web") == ("react", "@acme/core")

    def test_list_of_names(self):
        """Plain name lists are accepted as-is."""
        assert dependency_names(["a", "b"], "dependencies", "web") == ("a", "b")

    def test_none_is_empty(self):
        """A missing field means no dependencies."""
        assert dependency_names(None, "dependencies", "web") == ()

    def test_invalid_shape(self):
        """Anything else is malformed."""
        with pytest.raises(MalformedInputError, match="dependencies"):
            dependency_names("react", "dependencies", "web")

    def test_invalid_name(self):
        """Non-string names are malformed."""
        with pytest.raises(MalformedInputError):
            dependency_names([1], "devDependencies", "web")


class TestRelativePath:
    """Tests for relative_path."""

    def test_absolute_path_under_root(self):
        """Absolute paths become relative to the root."""
        assert relative_path("/repo/packages/core", "/repo") == "packages/core"

    def test_root_itself(self):
        """The root directory maps to the empty path."""
        assert relative_path("/repo", "/repo") == ""

    def test_dot_and_trailing_slash(self):
        """'.' is the root and trailing slashes are dropped."""
        assert relative_path(".") == ""
        assert relative_path("./apps/web/") == "apps/web"

    def test_windows_separators(self):
        """Backslashes are turned into forward slashes."""
        assert relative_path("apps\\web") == "apps/web"

    def test_outside_root(self):
        """Paths outside the root are malformed."""
        with pytest.raises(MalformedInputError, match="outside"):
            relative_path("/elsewhere/pkg", "/repo")

    def test_absolute_without_root(self):
        """An absolute path needs a root to be relativized against."""
        with pytest.raises(MalformedInputError, match="absolute"):
            relative_path("/odd")

    def test_empty_segment(self):
        """Doubled separators leave an empty segment and are rejected."""
        with pytest.raises(MalformedInputError, match="invalid segment"):
            relative_path("packages//api")

    def test_parent_segment(self):
        """'..' cannot be placed in the tree."""
        with pytest.raises(MalformedInputError, match="invalid segment"):
            relative_path("packages/../api")

    def test_absolute_record_rejected(self):
        """normalize_projects refuses absolute paths when no root is known."""
        with pytest.raises(MalformedInputError):
            normalize_projects([{"name": "odd", "path": "/odd"}])


class TestNormalizeRecord:
    """Tests for normalize_record."""

    def test_full_record(self):
        """All fields are carried over."""
        project = normalize_record(
            {
                "name": "@acme/api",
                "path": "services/api",
                "version": "1.0.0",
                "description": "API service",
                "dependencies": {"@acme/core": {}},
                "devDependencies": ["vitest"],
            },
            index=3,
        )

        assert project.name == "@acme/api"
        assert project.namespace_prefix == "@acme"
        assert project.path == "services/api"
        assert project.dependencies == ("@acme/core",)
        assert project.dev_dependencies == ("vitest",)
        assert project.index == 3
        assert project.version == "1.0.0"
        assert project.description == "API service"

    def test_missing_name(self):
        """A record without a name is malformed."""
        with pytest.raises(MalformedInputError, match="no name"):
            normalize_record({"path": "packages/a"})

    def test_empty_name(self):
        """A blank name is malformed."""
        with pytest.raises(MalformedInputError):
            normalize_record({"name": "  ", "path": "packages/a"})

    def test_not_a_mapping(self):
        """Records must be objects."""
        with pytest.raises(MalformedInputError, match="object"):
            normalize_record(["name", "path"])

    def test_path_must_be_string(self):
        """A non-string path is malformed."""
        with pytest.raises(MalformedInputError, match="path"):
            normalize_record({"name": "a", "path": 5})

    def test_missing_path_is_root(self):
        """A record without a path sits at the root."""
        assert normalize_record({"name": "root"}).is_root


class TestNormalizeProjects:
    """Tests for normalize_projects."""

    def test_indexes_follow_input_order(self):
        """Each project gets its position as index."""
        projects = normalize_projects([
            {"name": "b", "path": "packages/b"},
            {"name": "a", "path": "packages/a"},
        ])
        assert [(p.name, p.index) for p in projects] == [("b", 0), ("a", 1)]

    def test_duplicate_names(self):
        """Names must be unique within a run."""
        with pytest.raises(MalformedInputError, match="Duplicate"):
            normalize_projects([
                {"name": "a", "path": "packages/a"},
                {"name": "a", "path": "packages/b"},
            ])

    def test_two_root_projects(self):
        """At most one project may sit at the root."""
        with pytest.raises(MalformedInputError, match="root"):
            normalize_projects([
                {"name": "one", "path": ""},
                {"name": "two", "path": "."},
            ])

    def test_relative_to_root(self):
        """A root argument relativizes absolute paths."""
        projects = normalize_projects(
            [
                {"name": "root", "path": "/repo"},
                {"name": "a", "path": "/repo/packages/a"},
            ],
            root="/repo",
        )
        assert [p.path for p in projects] == ["", "packages/a"]
