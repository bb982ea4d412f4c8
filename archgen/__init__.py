"""
archgen - Architecture documentation for pnpm workspaces.

Inspects a multi-project repository and writes an ARCHITECTURE.md with a
project tree and a Mermaid dependency graph.
"""

__version__ = "0.1.0"
__author__ = "Piotr Goszczynski"
