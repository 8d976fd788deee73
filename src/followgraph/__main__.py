"""Main entry point for the followgraph package when run as a module.

This module enables running followgraph directly using 'python -m followgraph'
and backs the ``followgraph`` console script.
"""

import asyncio
import sys

from . import cli


def main():
    """Main entry point for the package."""
    sys.exit(asyncio.run(cli.main()))


if __name__ == "__main__":
    main()
