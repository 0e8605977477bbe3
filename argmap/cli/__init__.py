"""Command line interface for argmap."""

from argmap.cli.main import build_parser, main

__all__ = ["build_parser", "main"]
