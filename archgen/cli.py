"""
archgen Command-Line Interface

This module provides the CLI entry point for archgen. It orchestrates the
full pipeline: discovery -> (optional AI) -> rendering -> preview -> output.

Usage:
    archgen
    archgen --root /path/to/monorepo
    archgen --ai sk-... --yes
    archgen --dry-run --verbose
"""

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Optional

from archgen import __version__
from archgen.discovery import discover_projects, read_readme, read_root_manifest
from archgen.errors import ArchgenError
from archgen.llm import ArchitectureEnhancer, get_llm_enhancer
from archgen.renderer import RenderOptions, render_architecture

OUTPUT_FILENAME = "ARCHITECTURE.md"
RULE = "─" * 80


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="archgen",
        description="CLI tool for generating project architecture documentation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  archgen                        # Document the current directory\n"
            "  archgen -r ../monorepo         # Document another repository\n"
            "  archgen --ai --yes             # Use OPENAI_API_KEY, no prompt\n"
            "  archgen --dry-run              # Preview without writing\n"
        ),
    )

    parser.add_argument(
        "-r", "--root",
        type=str,
        default=os.getcwd(),
        help="Repo root (default: current directory)",
    )

    parser.add_argument(
        "--ai",
        nargs="?",
        const=True,
        default=False,
        metavar="OPENAI_KEY",
        help="Use AI to enhance descriptions (requires OPENAI_API_KEY or a key)",
    )

    parser.add_argument(
        "-y", "--yes",
        action="store_true",
        help="Auto confirm prompts",
    )

    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help=f"Output file path (default: {OUTPUT_FILENAME} in repository root)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the document to stdout instead of writing it",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show detailed progress information",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress all output except errors",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def log(message: str, quiet: bool = False) -> None:
    """Print a progress message to stderr."""
    if not quiet:
        print(f"[archgen] {message}", file=sys.stderr)


def log_verbose(message: str, verbose: bool, quiet: bool) -> None:
    """Print a message only in verbose mode."""
    if verbose and not quiet:
        print(f"  {message}", file=sys.stderr)


def resolve_enhancer(ai_option, quiet: bool = False) -> Optional[ArchitectureEnhancer]:
    """
    Build the AI enhancer requested by --ai.

    Args:
        ai_option: False (no AI), True (key from environment) or a key string

    Returns:
        An enhancer, or None when AI was not requested

    Raises:
        ArchgenError: If AI was requested but no key is available
    """
    if not ai_option:
        return None

    if isinstance(ai_option, str):
        log("Using key provided with --ai flag", quiet=quiet)
        api_key = ai_option
    elif os.environ.get("OPENAI_API_KEY"):
        log("Using OPENAI_API_KEY from environment", quiet=quiet)
        api_key = os.environ["OPENAI_API_KEY"]
    else:
        raise ArchgenError("OPENAI_API_KEY is required for AI enhancement")

    enhancer = get_llm_enhancer(api_key)
    if not enhancer.is_available():
        raise ArchgenError("OpenAI client could not be created (is 'openai' installed?)")
    return enhancer


def confirm(message: str, default: bool = True) -> bool:
    """Ask a yes/no question on the terminal."""
    suffix = " [Y/n] " if default else " [y/N] "
    try:
        answer = input(message + suffix).strip().lower()
    except EOFError:
        return default
    if not answer:
        return default
    return answer in ("y", "yes")


def run_pipeline(
    repo_path: Path,
    output_path: Optional[Path],
    options: RenderOptions,
    enhancer: Optional[ArchitectureEnhancer] = None,
    assume_yes: bool = False,
    dry_run: bool = False,
    verbose: bool = False,
    quiet: bool = False,
) -> int:
    """
    Run the full archgen pipeline.

    Args:
        repo_path: Path to the repository root
        output_path: Where to write the document (None = repo_path/ARCHITECTURE.md)
        options: Rendering options
        enhancer: AI enhancer, or None to skip AI text
        assume_yes: Write without asking
        dry_run: Print to stdout and write nothing
        verbose: Show detailed progress
        quiet: Suppress non-error output

    Returns:
        Exit code (0 = success, non-zero = error)
    """
    if not repo_path.is_dir():
        print(f"Error: Path is not a directory: {repo_path}", file=sys.stderr)
        return 1

    if output_path is None:
        output_path = repo_path / OUTPUT_FILENAME

    # Step 1: Discovery
    log("Analyzing workspace projects...", quiet=quiet)

    try:
        projects = discover_projects(repo_path)
        root_manifest = read_root_manifest(repo_path)
    except ArchgenError as e:
        print(f"Error reading workspace packages: {e}", file=sys.stderr)
        return 1

    if not projects:
        log("No workspace projects found.", quiet=quiet)
        return 0

    log_verbose(f"Found {len(projects)} projects", verbose, quiet)
    for project in projects:
        log_verbose(f"{project.name} ({project.path or '.'})", verbose, quiet)

    # Step 2: Optional AI text
    description = root_manifest.get("description")
    stack = ""

    if enhancer is not None:
        log("Enhancing description with AI...", quiet=quiet)
        description = enhancer.describe_project(
            read_readme(repo_path) or "",
            json.dumps(root_manifest),
        )
        log("Describing tech stack with AI...", quiet=quiet)
        stack = enhancer.describe_tech_stack(projects)
        if not stack:
            log("Warning: AI tech stack is empty", quiet=quiet)

    # Step 3: Render
    log("Generating architecture documentation...", quiet=quiet)

    try:
        documentation = render_architecture(
            projects,
            name=root_manifest.get("name") or repo_path.name,
            description=description,
            tech_stack=stack,
            options=options,
        )
    except ArchgenError as e:
        print(f"Error during rendering: {e}", file=sys.stderr)
        return 1

    # Step 4: Output
    if dry_run:
        print(documentation)
        log("(Dry run - no file written)", quiet=quiet)
        return 0

    if not quiet:
        print(f"\nPreview of {output_path.name}:")
        print(RULE)
        print(documentation)
        print(RULE)

    if assume_yes:
        log("Auto-confirming due to --yes flag", quiet=quiet)
    elif not confirm("Do you want to save this documentation?"):
        log("Documentation generation cancelled.", quiet=quiet)
        return 0

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(documentation)
    except OSError as e:
        print(f"Error writing file: {e}", file=sys.stderr)
        return 1

    log(f"Architecture documentation generated at {output_path}", quiet=quiet)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 = success, non-zero = error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    repo_path = Path(args.root).resolve()

    output_path = None
    if args.output:
        output_path = Path(args.output)
        if not output_path.is_absolute():
            output_path = repo_path / output_path

    try:
        enhancer = resolve_enhancer(args.ai, quiet=args.quiet)
    except ArchgenError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return run_pipeline(
        repo_path=repo_path,
        output_path=output_path,
        options=RenderOptions(),
        enhancer=enhancer,
        assume_yes=args.yes,
        dry_run=args.dry_run,
        verbose=args.verbose,
        quiet=args.quiet,
    )


if __name__ == "__main__":
    sys.exit(main())
