"""Command-line interface for the promptly overlay.

Provides the main entry point for running the overlay runtime, plus
one-shot commands for exercising individual components.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="promptly",
        description="Caret-following prompt quality overlay",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/promptly.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Run the overlay (tracker, session, bridge)")
    run_parser.add_argument(
        "--no-bridge", action="store_true",
        help="Do not start the HTTP bridge for the overlay window",
    )

    analyze_parser = subparsers.add_parser("analyze", help="Analyze a prompt once and print the result")
    analyze_parser.add_argument("text", type=str, help="Prompt text to analyze")

    translate_parser = subparsers.add_parser("translate", help="Translate a prompt once")
    translate_parser.add_argument("text", type=str, help="Text to translate")

    map_parser = subparsers.add_parser("map", help="Map a physical caret point to logical pixels")
    map_parser.add_argument("x", type=int, help="Physical x-coordinate")
    map_parser.add_argument("y", type=int, help="Physical y-coordinate")
    map_parser.add_argument("--height", type=int, default=20, help="Physical caret height")

    return parser.parse_args(argv)


def build_analyzer(settings):
    from promptly.analysis.openai import OpenAIAnalyzer

    api_key, base_url = settings.resolve_api_credentials()
    return OpenAIAnalyzer(
        api_key=api_key,
        model=settings.analysis.model,
        base_url=base_url,
        system_prompt=settings.analysis.system_prompt_override,
        language=settings.analysis.output_language,
        max_tokens=settings.analysis.max_tokens,
    )


def build_translator(settings):
    from promptly.analysis.openai import OpenAITranslator

    api_key, base_url = settings.resolve_api_credentials()
    return OpenAITranslator(
        api_key=api_key,
        model=settings.translation.model or settings.analysis.model,
        base_url=base_url,
        target_language=settings.translation.target_language,
        max_tokens=settings.analysis.max_tokens,
    )


def build_inserter(settings):
    ins = settings.insertion
    if ins.backend == "http":
        from promptly.insertion.http_backend import HttpTextInserter
        return HttpTextInserter(base_url=ins.http_base_url, timeout=ins.http_timeout)
    from promptly.insertion.process_backend import ProcessTextInserter
    return ProcessTextInserter(command=ins.command)


def build_mapper(settings):
    from promptly.mapping.display import DisplayLayout
    from promptly.mapping.mapper import CoordinateMapper

    layout = DisplayLayout.from_config(settings.overlay.displays)
    return CoordinateMapper(layout.nearest, edge_clearance=settings.overlay.edge_clearance)


async def _run_overlay(settings, args) -> None:
    """Initialize all components and run the overlay runtime."""
    from promptly.insertion.base import InsertionError
    from promptly.session.machine import OverlaySession
    from promptly.session.runtime import OverlayRuntime
    from promptly.tracker.process import ProcessCaretSource

    translator = build_translator(settings) if settings.translation.enabled else None
    inserter = build_inserter(settings)
    try:
        await inserter.connect()
    except InsertionError as e:
        logger.warning("Text insertion disabled: %s", e)
        inserter = None
    session = OverlaySession(
        analyzer=build_analyzer(settings),
        translator=translator,
        inserter=inserter,
    )

    server = None
    if not args.no_bridge:
        from promptly.endpoint.server import create_app, create_server

        app = create_app(session, widget_offset_x=settings.overlay.widget_offset_x)
        server = create_server(app, host=settings.endpoint.host, port=settings.endpoint.port)
        logger.info("Bridge listening on http://%s:%d", settings.endpoint.host, settings.endpoint.port)

    source = ProcessCaretSource(
        command=settings.tracker.command,
        queue_size=settings.tracker.queue_size,
        line_limit=settings.tracker.line_limit,
    )
    runtime = OverlayRuntime(
        source=source,
        mapper=build_mapper(settings),
        session=session,
        server=server,
    )

    try:
        await runtime.run()
    finally:
        await runtime.dispose()
        if inserter is not None:
            await inserter.disconnect()

    print(f"\nObservations: {runtime.observation_count} ({runtime.dropped_count} dropped)")


async def _analyze_once(settings, text: str) -> int:
    from promptly.analysis.base import AnalysisError

    analyzer = build_analyzer(settings)
    try:
        result = await analyzer.analyze(text)
    except AnalysisError as e:
        print(f"Analysis failed: {e}")
        return 1

    print(f"Score:   {result.score:.0f} ({result.grade.value})")
    print(f"Summary: {result.summary}")
    for title, items in (
        ("Strengths", result.strengths),
        ("Weaknesses", result.weaknesses),
        ("Suggestions", result.suggestions),
    ):
        print(f"\n{title}:")
        for item in items:
            print(f"  - {item}")
    print("\nOptimized prompt:")
    print("-" * 40)
    print(result.optimized_prompt)
    print("-" * 40)
    return 0


async def _translate_once(settings, text: str) -> int:
    from promptly.analysis.base import TranslationError

    translator = build_translator(settings)
    try:
        print(await translator.translate(text))
    except TranslationError as e:
        print(f"Translation failed: {e}")
        return 1
    return 0


def _map_point(settings, args) -> None:
    from promptly.domain.models import CaretObservation

    mapper = build_mapper(settings)
    observation = CaretObservation(x=args.x, y=args.y, height=args.height)
    position = mapper.map(observation)
    anchor_x, anchor_y = position.widget_anchor(settings.overlay.widget_offset_x)
    print(f"Logical: x={position.x:g} y={position.y:g} height={position.height:g}")
    print(f"Widget:  x={anchor_x:g} y={anchor_y:g}")
    print(f"Clamped {mapper.edge_clearance:g}px from the right and bottom edges")


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the promptly CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return 0

    from promptly.config.settings import load_settings
    from promptly.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "run":
        logger.info("Starting overlay runtime")
        asyncio.run(_run_overlay(settings, args))
    elif args.command == "analyze":
        return asyncio.run(_analyze_once(settings, args.text))
    elif args.command == "translate":
        return asyncio.run(_translate_once(settings, args.text))
    elif args.command == "map":
        _map_point(settings, args)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
