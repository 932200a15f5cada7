"""Citation scanning and resolution for the APPLICABLE RULES section.

Two stages:
    1. Syntactic scan: split each rule item on "Article N[.N]" or a bare
       "N.N" pair, keeping both the matches and the text between them.
    2. Semantic validation: each candidate goes through
       ``ArticleCorpus.get_by_id``. Hits become linkable tokens; misses stay
       in place as plain text (``resolved_article_id is None``).

The scan is deliberately loose. Any "N.N" decimal is a candidate, so an
amount like "12.50" reaches stage 2 and is dropped there only because
Article 12 does not exist.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, TypeAlias

from tribunal.articles import ArticleCorpus, load_default_corpus, parse_ref
from tribunal.decision_parser import BULLET, split_bullets

_CITATION_SPLIT_RE = re.compile(r"(Article\s+\d+(?:\.\d+)?|\b\d+\.\d+\b)", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TextFragment:
    """Literal text between citations."""

    text: str

    @property
    def raw_text(self) -> str:
        return self.text

    def as_dict(self) -> dict[str, Any]:
        return {"kind": "text", "text": self.text}


@dataclass(frozen=True, slots=True)
class CitationToken:
    """A citation candidate; linkable only when ``resolved_article_id`` is set."""

    raw_text: str                       # "Article 5.3"
    resolved_article_id: str | None     # "5.3", or None when not in the corpus

    @property
    def is_resolved(self) -> bool:
        return self.resolved_article_id is not None

    def as_dict(self) -> dict[str, Any]:
        if self.resolved_article_id is None:
            return {"kind": "text", "text": self.raw_text}
        return {
            "kind": "citation",
            "text": self.raw_text,
            "article_id": self.resolved_article_id,
        }


Fragment: TypeAlias = TextFragment | CitationToken


@dataclass(frozen=True, slots=True)
class RuleItem:
    """One bullet of the rules section as ordered fragments."""

    fragments: tuple[Fragment, ...]

    def text(self) -> str:
        """The bullet line as displayed, glyph included."""
        return f"{BULLET} " + "".join(f.raw_text for f in self.fragments)

    def citations(self) -> list[CitationToken]:
        """Resolved (linkable) citations in reading order."""
        return [
            f for f in self.fragments
            if isinstance(f, CitationToken) and f.is_resolved
        ]

    def as_dict(self) -> dict[str, Any]:
        return {
            "text": self.text(),
            "fragments": [f.as_dict() for f in self.fragments],
        }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def scan_citations(text: str) -> list[tuple[str, bool]]:
    """Split text into ``(span, is_candidate)`` pairs, left to right.

    Empty plain spans produced by adjacent matches are dropped.
    """
    spans: list[tuple[str, bool]] = []
    for i, part in enumerate(_CITATION_SPLIT_RE.split(text)):
        is_candidate = i % 2 == 1
        if part or is_candidate:
            spans.append((part, is_candidate))
    return spans


def resolve_span(span: str, corpus: ArticleCorpus) -> CitationToken:
    """Validate one candidate span against the corpus."""
    parsed = parse_ref(span)
    if parsed is None or corpus.get_by_id(span) is None:
        return CitationToken(raw_text=span, resolved_article_id=None)
    main_id, sub_id = parsed
    article_id = f"{main_id}.{sub_id}" if sub_id else main_id
    return CitationToken(raw_text=span, resolved_article_id=article_id)


def resolve_rule_item(item: str, corpus: ArticleCorpus) -> RuleItem:
    """Tokenize one rule item into text fragments and citation tokens."""
    fragments: list[Fragment] = []
    for span, is_candidate in scan_citations(item):
        if is_candidate:
            fragments.append(resolve_span(span, corpus))
        else:
            fragments.append(TextFragment(span))
    return RuleItem(fragments=tuple(fragments))


def resolve_citations(
    rules_text: str,
    corpus: ArticleCorpus | None = None,
) -> list[RuleItem]:
    """Resolve every citation in the rules section, grouped by bullet item.

    Args:
        rules_text: ``DecisionSections.rules``.
        corpus: Article corpus; the packaged rules when omitted.

    Returns:
        One RuleItem per non-blank bullet, in order.
    """
    if corpus is None:
        corpus = load_default_corpus()
    return [resolve_rule_item(item, corpus) for item in split_bullets(rules_text)]
