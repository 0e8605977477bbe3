#!/usr/bin/env python3
"""
argmap command line.

Usage:
    argmap parse analysis.txt              # argument tree as JSON
    argmap render analysis.txt             # argument tree as diagram DSL
    argmap validate diagram.mmd --strict   # check DSL text
    argmap diagram "AI in healthcare" --level 2
    argmap analyze "Should cities ban cars from downtown?"

Files default to stdin when omitted or given as "-". Live commands read the
API key from ARGMAP_API_KEY (or GROQ_API_KEY), including a local .env file.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from argmap.__version__ import __version__
from argmap.config import MAX_DETAIL_LEVEL, MIN_DETAIL_LEVEL, GeneratorSettings
from argmap.diagram.controller import DiagramEnhancementController
from argmap.diagram.generator import LLMDiagramGenerator
from argmap.diagram.prompts import DiagramType
from argmap.diagram.renderer import render_tree
from argmap.diagram.validator import DiagramSyntaxValidator, extract_diagram_code
from argmap.exceptions import ArgmapError, ConfigurationError
from argmap.extraction.builder import parse_arguments
from argmap.extraction.cleaning import clean_response
from argmap.extraction.models import ArgumentTree
from argmap.extraction.rules import RuleTable, resolve_rule_table
from argmap.generation.analysis import AnalysisService
from argmap.generation.client import ChatCompletionClient
from argmap.logging_config import configure_logging
from argmap.serialization import to_json
from argmap.session import AnalysisSession

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


def _read_input(path: Optional[str]) -> str:
    if path in (None, "-"):
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _load_rules(args: argparse.Namespace) -> RuleTable:
    return resolve_rule_table(args.rules)


def _parse_tree(args: argparse.Namespace) -> Optional[ArgumentTree]:
    text = clean_response(_read_input(args.file))
    return parse_arguments(text, _load_rules(args))


def _settings(args: argparse.Namespace) -> GeneratorSettings:
    return GeneratorSettings.from_env().with_overrides(
        diagram_model=getattr(args, "model", None),
        timeout_seconds=args.timeout,
    )


def tree_summary(tree: ArgumentTree) -> str:
    return f"Argument tree: {tree.total_nodes} nodes, depth {tree.max_depth}, {len(tree.sections)} sections"


# ============================================================================
# Commands
# ============================================================================


def cmd_parse(args: argparse.Namespace) -> int:
    tree = _parse_tree(args)
    if tree is None:
        print("Input could not be structured into an argument tree", file=sys.stderr)
        return EXIT_FAILURE
    print(to_json(tree, indent=args.indent))
    return EXIT_OK


def cmd_render(args: argparse.Namespace) -> int:
    tree = _parse_tree(args)
    if tree is None:
        print("Input could not be structured into an argument tree", file=sys.stderr)
        return EXIT_FAILURE
    print(render_tree(tree, max_label=args.max_label))
    return EXIT_OK


def cmd_validate(args: argparse.Namespace) -> int:
    code = extract_diagram_code(_read_input(args.file))
    result = DiagramSyntaxValidator(strict=args.strict).validate(code)
    for warning in result.warnings:
        print(f"warning: {warning}", file=sys.stderr)
    if not result.valid:
        print(f"invalid: {result.reason}")
        return EXIT_FAILURE
    print(f"valid: {result.node_count} node definitions, {len(result.referenced)} referenced")
    return EXIT_OK


async def _run_diagram(args: argparse.Namespace) -> int:
    client = ChatCompletionClient(_settings(args))
    controller = DiagramEnhancementController(
        LLMDiagramGenerator(client),
        diagram_type=DiagramType(args.type),
        timeout_seconds=client.settings.timeout_seconds,
    )
    outcome = await controller.generate_base(args.topic)
    if outcome.ok and args.level != 0:
        outcome = await controller.set_level(args.level)

    if outcome.failure is not None:
        hint = " (retry may succeed)" if outcome.failure.retryable else ""
        print(f"Diagram generation failed: {outcome.failure.message}{hint}", file=sys.stderr)
        if outcome.diagram:
            print(f"Showing level {outcome.current_level} instead", file=sys.stderr)
            print(outcome.diagram)
        return EXIT_FAILURE
    print(outcome.diagram)
    return EXIT_OK


async def _run_analyze(args: argparse.Namespace) -> int:
    client = ChatCompletionClient(_settings(args))
    session = AnalysisSession(AnalysisService(client), rules=_load_rules(args))
    message = await session.analyze(args.scenario)
    print(message.content)
    print()
    if message.argument_tree is None:
        print("No argument structure found in the response")
    else:
        print(tree_summary(message.argument_tree))
        if args.tree:
            print(to_json(message.argument_tree, indent=2))
    return EXIT_OK


def cmd_diagram(args: argparse.Namespace) -> int:
    return asyncio.run(_run_diagram(args))


def cmd_analyze(args: argparse.Namespace) -> int:
    return asyncio.run(_run_analyze(args))


# ============================================================================
# Parser
# ============================================================================


def _detail_level(value: str) -> int:
    level = int(value)
    if not MIN_DETAIL_LEVEL <= level <= MAX_DETAIL_LEVEL:
        raise argparse.ArgumentTypeError(
            f"level must be between {MIN_DETAIL_LEVEL} and {MAX_DETAIL_LEVEL}"
        )
    return level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="argmap",
        description="Argument-structure extraction and diagram synthesis",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--log-format", choices=["text", "json"], default=None)
    parser.add_argument("--rules", default=None, help="YAML keyword rule table")

    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_p = subparsers.add_parser("parse", help="Print the argument tree as JSON")
    parse_p.add_argument("file", nargs="?", help="Analysis text (default: stdin)")
    parse_p.add_argument("--indent", type=int, default=2)
    parse_p.set_defaults(func=cmd_parse)

    render_p = subparsers.add_parser("render", help="Render the argument tree as diagram DSL")
    render_p.add_argument("file", nargs="?", help="Analysis text (default: stdin)")
    render_p.add_argument("--max-label", type=int, default=40)
    render_p.set_defaults(func=cmd_render)

    validate_p = subparsers.add_parser("validate", help="Validate diagram DSL text")
    validate_p.add_argument("file", nargs="?", help="Diagram text (default: stdin)")
    validate_p.add_argument(
        "--strict", action="store_true", help="Require every referenced node to be defined"
    )
    validate_p.set_defaults(func=cmd_validate)

    diagram_p = subparsers.add_parser("diagram", help="Generate a diagram for a topic")
    diagram_p.add_argument("topic")
    diagram_p.add_argument("--level", type=_detail_level, default=0)
    diagram_p.add_argument(
        "--type",
        choices=[t.value for t in DiagramType],
        default=DiagramType.ARGUMENT_FLOW.value,
    )
    diagram_p.add_argument("--model", default=None)
    diagram_p.add_argument("--timeout", type=float, default=None)
    diagram_p.set_defaults(func=cmd_diagram)

    analyze_p = subparsers.add_parser("analyze", help="Analyze a scenario")
    analyze_p.add_argument("scenario")
    analyze_p.add_argument("--tree", action="store_true", help="Also print the tree JSON")
    analyze_p.add_argument("--timeout", type=float, default=None)
    analyze_p.set_defaults(func=cmd_analyze)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        level=args.log_level,
        json_output=(args.log_format == "json") if args.log_format else None,
    )

    try:
        return args.func(args)
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return EXIT_CONFIG
    except ArgmapError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_FAILURE
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
