#!/usr/bin/env python3
"""
Enable running argmap commands via: python -m argmap

Usage:
    python -m argmap parse analysis.txt
    python -m argmap --help
"""

import sys


def main():
    """Route to the main CLI."""
    from argmap.cli.main import main as cli_main

    sys.exit(cli_main())


if __name__ == "__main__":
    main()
