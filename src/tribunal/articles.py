"""Article corpus for the AI Judge Rules of Procedure.

The corpus is a two-level hierarchy: top-level articles keyed by id
("5"), each owning an ordered tuple of subsections ("5.1", "5.2", ...).
Subsections are never indexed on their own; they are reached by scanning
the parent's tuple.

Lookups are total. A reference that carries no number, or a number that
is not in the corpus, resolves to ``None`` (or to the fixed
``"Article not found"`` preview) and is rendered as plain text upstream.

The dataset is loaded once from ``data/rules_of_procedure_v3_2.json``
(override with ``TRIBUNAL_RULES_PATH``) and never mutated.
"""
from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterator
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

from tribunal.io_utils import load_json

log = logging.getLogger(__name__)

RULES_VERSION = "3.2"
RULES_TITLE = "AI Judge™ Rules of Procedure"
DEFAULT_RULES_PATH = Path(__file__).resolve().parent / "data" / "rules_of_procedure_v3_2.json"
RULES_PATH_ENV = "TRIBUNAL_RULES_PATH"

PREVIEW_MAX_CHARS = 150
NOT_FOUND_PREVIEW = "Article not found"

# "Article 5.3", "article 5", "5.3", or the first number inside a sentence
_REF_RE = re.compile(r"(?:Article\s+)?(\d+(?:\.\d+)?)", re.IGNORECASE)


class CorpusError(RuntimeError):
    """Raised when the rules dataset cannot be loaded or is malformed."""


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Subsection:
    """A numbered provision inside an article (e.g., 5.3)."""

    id: str         # "5.3"
    content: str


@dataclass(frozen=True, slots=True)
class Article:
    """A top-level article, or the synthetic entry for a resolved subsection."""

    id: str
    title: str
    content: str
    subsections: tuple[Subsection, ...] = ()

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "subsections": [
                {"id": s.id, "content": s.content} for s in self.subsections
            ],
        }


def parse_ref(ref: str) -> tuple[str, str | None] | None:
    """Extract ``(main_id, sub_id)`` from a citation string.

    Returns None when the string has no numeric token.

    >>> parse_ref("see Article 5.3")
    ('5', '3')
    >>> parse_ref("Article 7")
    ('7', None)
    """
    if not ref:
        return None
    m = _REF_RE.search(ref)
    if m is None:
        return None
    main_id, _, sub_id = m.group(1).partition(".")
    return main_id, sub_id or None


# ---------------------------------------------------------------------------
# Corpus
# ---------------------------------------------------------------------------


class ArticleCorpus:
    """Immutable in-memory index of articles keyed by top-level id."""

    def __init__(
        self,
        articles: list[Article] | tuple[Article, ...],
        *,
        version: str = RULES_VERSION,
    ) -> None:
        index: dict[str, Article] = {}
        for article in articles:
            for sub in article.subsections:
                if not sub.id.startswith(f"{article.id}."):
                    raise CorpusError(
                        f"Subsection {sub.id!r} does not belong to article {article.id!r}"
                    )
            index[article.id] = article
        self._articles = index
        self.version = version

    @classmethod
    def from_dict(cls, raw: Any) -> ArticleCorpus:
        """Build a corpus from the decoded dataset.

        Accepts either ``{"version": ..., "articles": [...]}`` or a plain
        mapping of id -> article record.
        """
        if not isinstance(raw, dict):
            raise CorpusError("Rules dataset must be a JSON object")
        version = str(raw.get("version", RULES_VERSION))
        records = raw.get("articles")
        if records is None:
            records = list(raw.values())
        if not isinstance(records, list):
            raise CorpusError("Rules dataset 'articles' must be a list")

        articles: list[Article] = []
        for rec in records:
            if not isinstance(rec, dict) or "id" not in rec:
                raise CorpusError(f"Malformed article record: {rec!r}")
            subsections = tuple(
                Subsection(id=str(s["id"]).strip(), content=str(s.get("content", "")))
                for s in rec.get("subsections") or []
            )
            articles.append(Article(
                id=str(rec["id"]).strip(),
                title=str(rec.get("title", "")),
                content=str(rec.get("content", "")),
                subsections=subsections,
            ))
        return cls(articles, version=version)

    @classmethod
    def from_json(cls, path: Path) -> ArticleCorpus:
        """Load a corpus from a JSON dataset on disk."""
        if not path.exists():
            raise CorpusError(f"Rules dataset not found: {path}")
        try:
            raw = load_json(path)
        except ValueError as e:
            raise CorpusError(f"Rules dataset is not valid JSON: {path}: {e}") from e
        corpus = cls.from_dict(raw)
        log.debug("Loaded %d articles from %s", len(corpus), path)
        return corpus

    # -- container protocol --------------------------------------------------

    def __len__(self) -> int:
        return len(self._articles)

    def __contains__(self, article_id: object) -> bool:
        return article_id in self._articles

    def __iter__(self) -> Iterator[Article]:
        for article_id in self.ids():
            yield self._articles[article_id]

    def ids(self) -> list[str]:
        """Top-level article ids in numeric order."""
        return sorted(self._articles, key=lambda a: (len(a), a))

    def get(self, article_id: str) -> Article | None:
        """Exact top-level lookup, no reference parsing."""
        return self._articles.get(article_id)

    # -- lookups -------------------------------------------------------------

    def get_by_id(self, ref: str) -> Article | None:
        """Resolve a citation string to an article or subsection entry.

        Subsection hits come back as a synthetic ``Article`` titled
        ``"Article <id>"`` carrying only the subsection's content. A
        subsection id that the parent does not list resolves to None rather
        than falling back to the parent.
        """
        parsed = parse_ref(ref)
        if parsed is None:
            return None
        main_id, sub_id = parsed
        article = self.get(main_id)
        if article is None:
            return None
        if sub_id is None:
            return article

        full_id = f"{main_id}.{sub_id}"
        for sub in article.subsections:
            if sub.id == full_id:
                return Article(id=full_id, title=f"Article {full_id}", content=sub.content)
        return None

    def get_preview(self, ref: str) -> str:
        """Short hover text for a citation.

        Subsections preview their content verbatim. Articles preview as
        ``"<title>: <content>"``, cut at character 147 with ``"..."`` when
        longer than 150 characters.
        """
        article = self.get_by_id(ref)
        if article is None:
            return NOT_FOUND_PREVIEW
        if "." in ref:
            return article.content
        preview = f"{article.title}: {article.content}"
        if len(preview) > PREVIEW_MAX_CHARS:
            return preview[:PREVIEW_MAX_CHARS - 3] + "..."
        return preview


def article_modal(article: Article, *, version: str = RULES_VERSION) -> dict[str, Any]:
    """Modal view for a selected article: heading, body and provisions."""
    return {
        "heading": f"Article {article.id}: {article.title}",
        "content": article.content,
        "provisions": [
            {"id": s.id, "content": s.content} for s in article.subsections
        ],
        "source_note": f"{RULES_TITLE} v{version}",
    }


@lru_cache(maxsize=1)
def load_default_corpus() -> ArticleCorpus:
    """Process-wide corpus built from the packaged dataset.

    ``TRIBUNAL_RULES_PATH`` points at an alternative dataset. Call
    ``load_default_corpus.cache_clear()`` after changing it.
    """
    override = os.environ.get(RULES_PATH_ENV)
    path = Path(override) if override else DEFAULT_RULES_PATH
    return ArticleCorpus.from_json(path)
