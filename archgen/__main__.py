"""
Entry point for running archgen as a module.

Usage:
    python -m archgen [--root PATH] [options]
"""

import sys

from archgen.cli import main

if __name__ == "__main__":
    sys.exit(main())
