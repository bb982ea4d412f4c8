"""
Tests for archgen.cli module.

Discovery is patched so no pnpm process runs.
"""

import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from archgen.cli import create_parser, main, resolve_enhancer
from archgen.errors import ArchgenError, DiscoveryError
from archgen.normalizer import normalize_projects


def sample_projects():
    return normalize_projects([
        {"name": "acme", "path": ""},
        {"name": "@acme/core", "path": "packages/core"},
        {"name": "@acme/web", "path": "apps/web", "dependencies": ["@acme/core"]},
    ])


class TestParser:
    """Tests for the argument parser."""

    def test_defaults(self):
        """AI is off and prompts are on by default."""
        args = create_parser().parse_args([])

        assert args.ai is False
        assert args.yes is False
        assert args.dry_run is False

    def test_ai_without_key(self):
        """--ai alone means 'use the environment key'."""
        assert create_parser().parse_args(["--ai"]).ai is True

    def test_ai_with_key(self):
        """--ai can carry a key."""
        assert create_parser().parse_args(["--ai", "sk-123"]).ai == "sk-123"


class TestResolveEnhancer:
    """Tests for resolve_enhancer."""

    def test_no_ai(self):
        """No enhancer when AI is off."""
        assert resolve_enhancer(False) is None

    def test_missing_key(self):
        """Requesting AI without any key is an error."""
        with patch.dict("os.environ", {}, clear=True):
            with pytest.raises(ArchgenError, match="OPENAI_API_KEY"):
                resolve_enhancer(True, quiet=True)

    def test_key_from_flag(self):
        """A key given with --ai builds an enhancer through get_llm_enhancer."""
        with patch("archgen.cli.get_llm_enhancer") as factory:
            factory.return_value.is_available.return_value = True
            enhancer = resolve_enhancer("sk-123", quiet=True)

        factory.assert_called_once_with("sk-123")
        assert enhancer is factory.return_value

    def test_client_unavailable(self):
        """An enhancer without a client is an error."""
        with patch("archgen.cli.get_llm_enhancer") as factory:
            factory.return_value.is_available.return_value = False
            with pytest.raises(ArchgenError, match="could not be created"):
                resolve_enhancer("sk-123", quiet=True)


class TestMain:
    """Tests for the full CLI run."""

    def test_writes_document_with_yes(self):
        """--yes writes ARCHITECTURE.md without asking."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "package.json").write_text('{"name": "acme", "description": "Shop"}')

            with patch("archgen.cli.discover_projects", return_value=sample_projects()):
                code = main(["--root", tmpdir, "--yes", "--quiet"])

            content = (Path(tmpdir) / "ARCHITECTURE.md").read_text()

        assert code == 0
        assert content.startswith("# acme Architecture")
        assert "Shop" in content
        assert "sg_apps --> sg_packages" in content

    def test_dry_run_prints_only(self, capsys):
        """--dry-run prints the document and writes nothing."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with patch("archgen.cli.discover_projects", return_value=sample_projects()):
                code = main(["--root", tmpdir, "--dry-run", "--quiet"])

            assert not (Path(tmpdir) / "ARCHITECTURE.md").exists()

        assert code == 0
        assert "## Dependency Graph" in capsys.readouterr().out

    def test_declined_prompt(self):
        """Answering no leaves the repository untouched."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with patch("archgen.cli.discover_projects", return_value=sample_projects()), \
                    patch("builtins.input", return_value="n"):
                code = main(["--root", tmpdir])

            assert not (Path(tmpdir) / "ARCHITECTURE.md").exists()

        assert code == 0

    def test_no_projects(self):
        """An empty workspace is not an error."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with patch("archgen.cli.discover_projects", return_value=[]):
                assert main(["--root", tmpdir, "--yes", "--quiet"]) == 0
            assert not (Path(tmpdir) / "ARCHITECTURE.md").exists()

    def test_discovery_error(self, capsys):
        """Discovery failures exit with status 1."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with patch("archgen.cli.discover_projects", side_effect=DiscoveryError("pnpm ls failed")):
                assert main(["--root", tmpdir, "--yes"]) == 1

        assert "pnpm ls failed" in capsys.readouterr().err

    def test_missing_ai_key(self):
        """--ai without a key exits with status 1."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with patch.dict("os.environ", {}, clear=True):
                assert main(["--root", tmpdir, "--ai", "--quiet"]) == 1

    def test_not_a_directory(self):
        """A missing root exits with status 1."""
        assert main(["--root", "/nonexistent/archgen/root", "--yes", "--quiet"]) == 1

    def test_ai_text_used(self):
        """AI description and stack end up in the document."""

        class StubEnhancer:
            def describe_project(self, readme, package_json):
                return "AI description."

            def describe_tech_stack(self, projects):
                return "- **react**: UI library"

        with tempfile.TemporaryDirectory() as tmpdir:
            with patch("archgen.cli.discover_projects", return_value=sample_projects()), \
                    patch("archgen.cli.resolve_enhancer", return_value=StubEnhancer()):
                code = main(["--root", tmpdir, "--ai", "--yes", "--quiet"])

            content = (Path(tmpdir) / "ARCHITECTURE.md").read_text()

        assert code == 0
        assert "AI description." in content
        assert "## Technical Stack" in content
