#!/usr/bin/env python3
"""Look up a Rules of Procedure citation.

Resolves references such as "Article 5.3", "5.3" or "7" against the
rules corpus and prints the article (or subsection) or its hover preview.

Usage:
    python3 scripts/article_lookup.py "Article 5.3"
    python3 scripts/article_lookup.py 7 --preview
    python3 scripts/article_lookup.py --list
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from tribunal.articles import ArticleCorpus, CorpusError, article_modal, load_default_corpus
from tribunal.io_utils import dump_json

log = logging.getLogger("article_lookup")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Look up a Rules of Procedure citation.")
    parser.add_argument("ref", nargs="?", default=None, help='Citation, e.g. "Article 5.3"')
    parser.add_argument(
        "--preview", action="store_true", help="Print the hover preview text only."
    )
    parser.add_argument(
        "--list", action="store_true", help="List article ids and titles."
    )
    parser.add_argument(
        "--rules",
        type=Path,
        default=None,
        help="Alternative rules dataset JSON (default: packaged v3.2 rules)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.ref is None and not args.list:
        parser.error("a citation is required unless --list is given")

    try:
        corpus = ArticleCorpus.from_json(args.rules) if args.rules else load_default_corpus()
    except CorpusError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.list:
        dump_json([{"id": a.id, "title": a.title} for a in corpus])
        return 0

    if args.preview:
        print(corpus.get_preview(args.ref))
        return 0

    article = corpus.get_by_id(args.ref)
    if article is None:
        log.debug("No corpus entry for %r", args.ref)
        print(f"Error: article not found: {args.ref}", file=sys.stderr)
        return 1
    dump_json(article_modal(article, version=corpus.version))
    return 0


if __name__ == "__main__":
    sys.exit(main())
