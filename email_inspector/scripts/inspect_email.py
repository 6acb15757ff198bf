#!/usr/bin/env python3
"""CLI entrypoint for the work-order email inspector."""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from email_inspector.target_engine import loader, registry, renderer, rules, workorder
from email_inspector.target_engine.errors import RuleGenerationError

logger = logging.getLogger("email_inspector.target_engine.cli")


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def parse_encoding_list(value: str | None) -> list[str] | None:
    if not value:
        return None
    parts = [entry.strip() for entry in value.split(",") if entry.strip()]
    return parts or None


def load_session(args: argparse.Namespace) -> registry.DocumentSession:
    path = Path(args.path).expanduser().resolve()
    if not path.exists():
        raise SystemExit(f"Document not found: {path}")
    document = loader.load_document(path, encodings=parse_encoding_list(args.encodings))
    return registry.open_session(
        document.text,
        source=str(document.path),
        min_confidence=args.min_confidence,
    )


def command_detect(args: argparse.Namespace) -> None:
    session = load_session(args)
    if args.output:
        output_path = Path(args.output).expanduser().resolve()
        registry.save_export(output_path, session)
        logger.info("Exported %d targets to %s", len(session), output_path)
    else:
        print(json.dumps(session.export(), indent=2, ensure_ascii=False))


def command_report(args: argparse.Namespace) -> None:
    session = load_session(args)
    output_path = Path(args.output).expanduser().resolve() if args.output else None
    content = renderer.render_target_report(session, output_path)
    if output_path is None:
        print(content)
    else:
        logger.info("Report written to %s (%d characters)", output_path, len(content))


def command_rule(args: argparse.Namespace) -> None:
    session = load_session(args)
    text = session.text
    if args.start is not None and args.end is not None:
        selection = rules.make_selection(text, args.start, args.end)
    elif args.text:
        start = text.find(args.text)
        if start < 0:
            raise SystemExit(f"Selection not found in document: {args.text!r}")
        selection = rules.make_selection(text, start, start + len(args.text))
    else:
        raise SystemExit("Provide either --start/--end or --text")
    try:
        procedure = rules.generate_rule(args.strategy, args.name, selection.text, selection)
    except RuleGenerationError as exc:
        raise SystemExit(f"Rule generation failed: {exc}") from exc
    result = rules.self_test(procedure, text)
    if not result.passed:
        logger.warning("Self-test failed for %s: %s", procedure.name, result.reason)
    print(renderer.render_procedure(procedure, args.language))


def command_workorder(args: argparse.Namespace) -> None:
    path = Path(args.path).expanduser().resolve()
    if not path.exists():
        raise SystemExit(f"Document not found: {path}")
    document = loader.load_document(path, encodings=parse_encoding_list(args.encodings))
    order = workorder.extract_work_order(document.text)
    print(json.dumps(order.to_dict(), indent=2, ensure_ascii=False))


def build_parser() -> argparse.ArgumentParser:
    parser_obj = argparse.ArgumentParser(description="Inspect work-order emails")
    parser_obj.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser_obj.add_argument(
        "--min-confidence",
        type=float,
        help="Minimum target confidence (overrides INSPECTOR_MIN_CONFIDENCE)",
    )
    parser_obj.add_argument(
        "--encodings",
        help="Comma-separated decoding order (overrides INSPECTOR_ENCODINGS)",
    )
    subparsers = parser_obj.add_subparsers(dest="command")

    detect_parser = subparsers.add_parser("detect", help="Detect parser targets")
    detect_parser.add_argument("path", help="Message file (.eml, .msg, .txt, .html, .docx)")
    detect_parser.add_argument("--output", help="Write the JSON export to this file")
    detect_parser.set_defaults(func=command_detect)

    report_parser = subparsers.add_parser("report", help="Render a Markdown target report")
    report_parser.add_argument("path", help="Message file")
    report_parser.add_argument("--output", help="Write the report to this file")
    report_parser.set_defaults(func=command_report)

    rule_parser = subparsers.add_parser("rule", help="Generate an extraction rule")
    rule_parser.add_argument("path", help="Message file")
    rule_parser.add_argument("--name", required=True, help="Rule name")
    rule_parser.add_argument(
        "--strategy",
        default=rules.PATTERN,
        help="pattern, position, structural or anchored (aliases: regex, coordinates, css, xpath)",
    )
    rule_parser.add_argument("--start", type=int, help="Selection start offset")
    rule_parser.add_argument("--end", type=int, help="Selection end offset")
    rule_parser.add_argument("--text", help="Select the first occurrence of this text")
    rule_parser.add_argument(
        "--language", default="javascript", choices=renderer.LANGUAGES, help="Output syntax"
    )
    rule_parser.set_defaults(func=command_rule)

    workorder_parser = subparsers.add_parser("workorder", help="Extract labelled work-order fields")
    workorder_parser.add_argument("path", help="Message file")
    workorder_parser.set_defaults(func=command_workorder)

    return parser_obj


def main(argv: list[str] | None = None) -> None:
    parser_obj = build_parser()
    args = parser_obj.parse_args(argv)
    if not getattr(args, "command", None):
        parser_obj.print_help()
        return
    configure_logging(args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
