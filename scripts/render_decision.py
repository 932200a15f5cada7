#!/usr/bin/env python3
"""Render an AI Judge decision payload as a structured document.

Reads the decision JSON returned by the AI Judge service (either the bare
decision object or the ``{"decision": {...}}`` envelope), segments the
finding summary, links rule citations to the Rules of Procedure, and
prints the result.

Usage:
    # Render-ready JSON (sections, rule fragments, remedy, appeal notice)
    python3 scripts/render_decision.py --input decision.json

    # Plain-text document
    python3 scripts/render_decision.py --input decision.json --format text

    # Write the JSON to a file instead of stdout
    python3 scripts/render_decision.py --input decision.json --output rendered.json

    # Sections only, from a raw finding_summary text file
    python3 scripts/render_decision.py --text finding_summary.txt
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from tribunal.articles import ArticleCorpus, CorpusError, load_default_corpus
from tribunal.citations import resolve_citations
from tribunal.decision_parser import segment
from tribunal.document import build_document
from tribunal.io_utils import dump_json, load_json, save_json
from tribunal.payload import DecisionPayload, PayloadError

log = logging.getLogger("render_decision")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render an AI Judge decision with linked rule citations."
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--input", type=Path, default=None, help="Path to decision payload JSON"
    )
    source.add_argument(
        "--text",
        type=Path,
        default=None,
        help="Path to a raw finding_summary text file (sections + citations only)",
    )
    parser.add_argument(
        "--format",
        choices=("json", "text"),
        default="json",
        help="Output format (default: json). 'text' requires --input.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Optional JSON output path (default: stdout). Not used with --format text.",
    )
    parser.add_argument(
        "--rules",
        type=Path,
        default=None,
        help="Alternative rules dataset JSON (default: packaged v3.2 rules)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    return parser


def load_corpus(path: Path | None) -> ArticleCorpus:
    if path is None:
        return load_default_corpus()
    return ArticleCorpus.from_json(path)


def render_text_file(path: Path, corpus: ArticleCorpus) -> dict[str, object]:
    """Sections and resolved rule items for a bare finding_summary."""
    sections = segment(path.read_text(encoding="utf-8"))
    missing = sections.missing()
    if missing:
        log.warning("Sections not found: %s", ", ".join(missing))
    return {
        "sections": sections.as_dict(),
        "fact_items": sections.fact_items,
        "evidence_items": sections.evidence_items,
        "rule_items": [item.as_dict() for item in resolve_citations(sections.rules, corpus)],
    }


def emit(result: dict[str, object], output: Path | None) -> None:
    if output is None:
        dump_json(result)
        return
    save_json(result, output)
    log.info("Wrote %s", output)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.format == "text" and args.input is None:
        parser.error("--format text requires --input")
    if args.format == "text" and args.output is not None:
        parser.error("--output writes JSON; drop --format text")

    source = args.input or args.text
    if not source.exists():
        print(f"Error: file not found: {source}", file=sys.stderr)
        return 1

    try:
        corpus = load_corpus(args.rules)
    except CorpusError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    log.debug("Using rules v%s (%d articles)", corpus.version, len(corpus))

    if args.text is not None:
        emit(render_text_file(args.text, corpus), args.output)
        return 0

    try:
        payload = DecisionPayload.from_dict(load_json(args.input))
    except ValueError as e:
        # PayloadError and JSON decode errors are both ValueErrors
        print(f"Error: invalid decision payload: {e}", file=sys.stderr)
        return 1

    document = build_document(payload, corpus)
    missing = document.sections.missing()
    if missing:
        log.warning("Decision %s is missing sections: %s", payload.dispute_id, ", ".join(missing))
    if document.low_confidence:
        log.info("Decision %s is low confidence (%s)", payload.dispute_id, document.confidence_label)

    if args.format == "text":
        print(document.render_text())
    else:
        emit(document.as_dict(), args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
