#!/usr/bin/env python3
"""SpecGen command line — interview the user about an idea and write a spec.

Usage:
    specgen "a todo app"
    specgen --file idea.txt --output-dir specs/ --verbose
    python3 -m specgen.cli --extended --retry
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from specgen import __version__
from specgen.common.artifact import ArtifactWriter
from specgen.common.config import Settings, load_settings
from specgen.common.console import ConsoleUI
from specgen.common.errors import InvalidInput, SpecGenError
from specgen.common.llm_client import ChatCompletionClient
from specgen.common.logging_setup import build_logger
from specgen.interview.controller import InteractionController
from specgen.interview.prompts import TERMINATION_COMMAND

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="specgen",
        description="Turn a one-line idea into a developer-ready specification via an LLM interview",
    )
    parser.add_argument("idea", nargs="?", help="The idea to develop (prompted for if omitted)")
    parser.add_argument("-f", "--file", help="Read the idea from a text file")
    parser.add_argument("-o", "--output-dir", default=None, help="Directory for the spec file")
    parser.add_argument("-m", "--model", default=None, help="Model name to use")
    parser.add_argument("--config", default=None, help="YAML config file (default: ./specgen.yaml if present)")
    parser.add_argument("--extended", action="store_true", default=None,
                        help="Ask for requirements, architecture, data, errors and tests explicitly")
    parser.add_argument("--retry", action="store_true", help="Offer to retry a failed request instead of aborting")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def read_idea(args: argparse.Namespace, ui: ConsoleUI) -> str:
    """Take the idea from the argument, the file, or an interactive prompt, in that order."""
    if args.idea:
        idea = args.idea
    elif args.file:
        try:
            idea = Path(args.file).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise InvalidInput(f"Could not read idea file {args.file}: {e}") from e
    else:
        try:
            idea = ui.ask("What's your idea?")
        except EOFError:
            raise InvalidInput("No idea received") from None

    idea = idea.strip()
    if not idea:
        raise InvalidInput("The idea must not be empty")
    return idea


async def run_interview(settings: Settings, idea: str, ui: ConsoleUI, log, allow_retry: bool = False) -> Path:
    client = ChatCompletionClient(
        settings.api_key,
        model=settings.model,
        endpoint=settings.endpoint,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
        timeout=settings.timeout,
        logger=log,
    )
    controller = InteractionController(
        client,
        ui,
        ArtifactWriter(settings.output_dir, logger=log),
        logger=log,
        extended_synthesis=settings.extended_synthesis,
        allow_retry=allow_retry,
    )
    try:
        return await controller.run(idea)
    finally:
        await client.close()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    log = build_logger(args.verbose)
    ui = ConsoleUI()

    ui.console.print("SpecGen: developer-ready specs from a one-line idea", style="bold")
    log.debug("SpecGen started")

    try:
        settings = load_settings(
            config_path=args.config,
            overrides={
                "model": args.model,
                "output_dir": args.output_dir,
                "extended_synthesis": args.extended,
            },
            log=log,
        )
        log.debug("Resolved %r", settings)
        idea = read_idea(args, ui)
        ui.info(f"Answer each question, then type {TERMINATION_COMMAND} to generate the spec.")
        path = asyncio.run(run_interview(settings, idea, ui, log, allow_retry=args.retry))
    except SpecGenError as e:
        ui.error(e.user_message())
        return EXIT_FAILURE
    except KeyboardInterrupt:
        ui.warning("Interrupted, nothing was written.")
        return EXIT_INTERRUPTED

    ui.success(f"Specification written to {path}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
