"""Tests for tribunal.articles module."""
from __future__ import annotations

from pathlib import Path

import pytest

from tribunal.articles import (
    DEFAULT_RULES_PATH,
    NOT_FOUND_PREVIEW,
    RULES_PATH_ENV,
    Article,
    ArticleCorpus,
    CorpusError,
    Subsection,
    article_modal,
    load_default_corpus,
    parse_ref,
)
from tribunal.io_utils import save_json


LONG_CONTENT = (
    "The Tribunal shall apply these Rules to every Claim submitted through an "
    "integrated Platform, and shall construe them so as to secure the just, "
    "speedy and inexpensive determination of every dispute."
)


def _small_corpus() -> ArticleCorpus:
    return ArticleCorpus([
        Article(
            id="5",
            title="Evidence and Burden of Proof",
            content="Rules governing evidence submission and proof standards.",
            subsections=(
                Subsection("5.1", "All evidence files must carry a SHA-256 hash."),
                Subsection("5.3", "The party asserting a fact bears the burden of proving it."),
            ),
        ),
        Article(id="12", title="General Application", content=LONG_CONTENT),
    ])


@pytest.fixture
def corpus() -> ArticleCorpus:
    return load_default_corpus()


class TestParseRef:
    def test_article_prefix(self) -> None:
        assert parse_ref("Article 5.3") == ("5", "3")

    def test_bare_decimal(self) -> None:
        assert parse_ref("5.3") == ("5", "3")

    def test_top_level(self) -> None:
        assert parse_ref("article 7") == ("7", None)

    def test_first_number_in_sentence(self) -> None:
        assert parse_ref("as required by 4.2 and 4.3") == ("4", "2")

    def test_no_number(self) -> None:
        assert parse_ref("Article") is None
        assert parse_ref("") is None


class TestGetById:
    def test_top_level_article(self, corpus: ArticleCorpus) -> None:
        article = corpus.get_by_id("5")
        assert article is not None
        assert article.id == "5"
        assert article.title == "Evidence and Burden of Proof"
        assert len(article.subsections) == 6

    def test_subsection_forms_agree(self, corpus: ArticleCorpus) -> None:
        a = corpus.get_by_id("Article 5.3")
        b = corpus.get_by_id("5.3")
        c = corpus.get_by_id("the standard in 5.3 applies here")
        assert a is not None and b is not None and c is not None
        assert a.content == b.content == c.content
        assert a.content.startswith("The party asserting a fact bears the burden")

    def test_subsection_is_synthetic_entry(self, corpus: ArticleCorpus) -> None:
        sub = corpus.get_by_id("Article 5.3")
        parent = corpus.get_by_id("5")
        assert sub is not None and parent is not None
        assert sub.id == "5.3"
        assert sub.title == "Article 5.3"
        assert sub.subsections == ()
        assert sub.content != parent.content

    def test_case_insensitive_prefix(self, corpus: ArticleCorpus) -> None:
        assert corpus.get_by_id("ARTICLE 8.1") == corpus.get_by_id("8.1")

    def test_two_digit_subsection(self, corpus: ArticleCorpus) -> None:
        pod = corpus.get_by_id("Article 1.10")
        assert pod is not None
        assert pod.content.startswith("Proof of Delivery (POD)")

    def test_unknown_article(self, corpus: ArticleCorpus) -> None:
        assert corpus.get_by_id("99") is None
        assert corpus.get_by_id("Article 99") is None

    def test_unknown_subsection_does_not_fall_back_to_parent(self, corpus: ArticleCorpus) -> None:
        assert corpus.get_by_id("5.99") is None

    def test_currency_amount_is_unresolved(self, corpus: ArticleCorpus) -> None:
        assert corpus.get_by_id("12.50") is None

    def test_no_numeric_token(self, corpus: ArticleCorpus) -> None:
        assert corpus.get_by_id("the Rules of Procedure") is None
        assert corpus.get_by_id("") is None

    def test_gap_in_numbering(self, corpus: ArticleCorpus) -> None:
        assert corpus.get_by_id("12") is None
        assert corpus.get_by_id("13") is not None
        assert corpus.get_by_id("17.2") is not None


class TestGetPreview:
    def test_subsection_preview_is_verbatim(self, corpus: ArticleCorpus) -> None:
        sub = corpus.get_by_id("5.3")
        assert sub is not None
        assert corpus.get_preview("5.3") == sub.content

    def test_short_article_preview(self, corpus: ArticleCorpus) -> None:
        preview = corpus.get_preview("9")
        assert preview == "Compliance and Enforcement: Rules for enforcing tribunal decisions."

    def test_long_article_preview_truncated(self) -> None:
        small = _small_corpus()
        full = f"General Application: {LONG_CONTENT}"
        assert len(full) > 150
        preview = small.get_preview("12")
        assert len(preview) == 150
        assert preview == full[:147] + "..."

    def test_preview_exactly_at_limit_not_truncated(self) -> None:
        title = "T"
        content = "x" * (150 - len("T: "))
        small = ArticleCorpus([Article(id="3", title=title, content=content)])
        assert small.get_preview("3") == f"T: {content}"

    def test_unknown_preview(self, corpus: ArticleCorpus) -> None:
        assert corpus.get_preview("99") == NOT_FOUND_PREVIEW
        assert corpus.get_preview("no number here") == "Article not found"


class TestCorpusContainer:
    def test_ids_numeric_order(self, corpus: ArticleCorpus) -> None:
        assert corpus.ids() == ["1", "2", "3", "4", "5", "6", "7", "8", "9", "10", "11", "13", "17"]

    def test_iteration_and_len(self, corpus: ArticleCorpus) -> None:
        assert len(corpus) == 13
        assert [a.id for a in corpus] == corpus.ids()

    def test_contains_top_level_only(self, corpus: ArticleCorpus) -> None:
        assert "5" in corpus
        assert "5.3" not in corpus

    def test_subsection_ids_prefixed_by_parent(self, corpus: ArticleCorpus) -> None:
        for article in corpus:
            for sub in article.subsections:
                assert sub.id.startswith(f"{article.id}.")

    def test_version(self, corpus: ArticleCorpus) -> None:
        assert corpus.version == "3.2"


class TestLoading:
    def test_from_json_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.json"
        save_json({
            "version": "4.0",
            "articles": [
                {"id": "1", "title": "Scope", "content": "Scope text.",
                 "subsections": [{"id": "1.1", "content": "First."}]},
            ],
        }, path)
        loaded = ArticleCorpus.from_json(path)
        assert loaded.version == "4.0"
        sub = loaded.get_by_id("1.1")
        assert sub is not None and sub.content == "First."

    def test_mapping_form(self) -> None:
        loaded = ArticleCorpus.from_dict({
            "2": {"id": "2", "title": "Scope", "content": "Text."},
        })
        assert loaded.get("2") is not None

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(CorpusError):
            ArticleCorpus.from_json(tmp_path / "absent.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CorpusError):
            ArticleCorpus.from_json(path)

    def test_foreign_subsection_rejected(self) -> None:
        with pytest.raises(CorpusError):
            ArticleCorpus([
                Article(id="4", title="t", content="c", subsections=(Subsection("5.1", "x"),)),
            ])

    def test_non_object_dataset(self) -> None:
        with pytest.raises(CorpusError):
            ArticleCorpus.from_dict(["1", "2"])

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "rules.json"
        save_json({"version": "9.9", "articles": [{"id": "1", "title": "Only", "content": "c"}]}, path)
        monkeypatch.setenv(RULES_PATH_ENV, str(path))
        load_default_corpus.cache_clear()
        try:
            assert load_default_corpus().version == "9.9"
        finally:
            monkeypatch.delenv(RULES_PATH_ENV)
            load_default_corpus.cache_clear()
        assert len(load_default_corpus()) == 13

    def test_packaged_dataset_exists(self) -> None:
        assert DEFAULT_RULES_PATH.exists()


class TestArticleModal:
    def test_modal_for_article(self, corpus: ArticleCorpus) -> None:
        article = corpus.get_by_id("10")
        assert article is not None
        modal = article_modal(article)
        assert modal["heading"] == "Article 10: Correction and Appeal"
        assert [p["id"] for p in modal["provisions"]] == ["10.1", "10.2", "10.3"]
        assert modal["source_note"] == "AI Judge™ Rules of Procedure v3.2"

    def test_modal_for_subsection_has_no_provisions(self, corpus: ArticleCorpus) -> None:
        sub = corpus.get_by_id("6.4")
        assert sub is not None
        modal = article_modal(sub)
        assert modal["heading"] == "Article 6.4: Article 6.4"
        assert modal["provisions"] == []
