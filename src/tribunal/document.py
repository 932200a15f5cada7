"""Render-ready decision document.

Combines the typed payload, the parsed sections and the resolved rule
citations into one read-only snapshot for the presentation layer, and
renders it as plain text for the CLI.

The low-confidence appeal notice is decided here, on top of the core:
the segmenter and resolver never look at the confidence score.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from tribunal.articles import RULES_TITLE, ArticleCorpus, load_default_corpus
from tribunal.citations import RuleItem, resolve_citations
from tribunal.decision_parser import (
    BULLET,
    SECTION_HEADINGS,
    DecisionSections,
    segment,
)
from tribunal.payload import DecisionPayload, PayloadError, parse_timestamp

TRIBUNAL_NAME = "AI JUDGE™ TRIBUNAL"
DOCUMENT_TITLE = "BINDING ARBITRATION DECISION"
SIGNATORY = "AI Judge™ Tribunal"
EMPTY_SECTION_TEXT = "Not stated in the decision."
APPEAL_NOTICE = (
    "This decision may be appealed within 5 days pursuant to Article 6.4 "
    "of the AI Judge™ Rules of Procedure."
)
FINALITY_NOTICE = (
    "This decision is final and binding on all parties, subject only to "
    "appeal rights as stated above."
)

_TIMESTAMP_FORMATS = ("%B %d, %Y", "%Y-%m-%d %H:%M:%S %Z", "%m/%d/%Y")


def format_long_date(value: date) -> str:
    """Format as "January 5, 2025"."""
    return f"{value:%B} {value.day}, {value.year}"


def parse_decision_date(timestamp: str) -> date | None:
    """Best-effort date from the ``Decision Rendered:`` line."""
    if not timestamp:
        return None
    try:
        return parse_timestamp(timestamp).date()
    except PayloadError:
        pass
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(timestamp, fmt).date()
        except ValueError:
            continue
    return None


@dataclass(frozen=True, slots=True)
class RemedyDetails:
    type_label: str
    amount: str | None          # "USD $45.00", None when nothing is owed
    compliance_deadline: str
    return_required: bool
    notes: str


@dataclass(frozen=True, slots=True)
class DecisionDocument:
    """Everything the presentation layer needs to draw one decision."""

    case_number: str
    category: str
    decision_date: str
    sections: DecisionSections
    fact_items: tuple[str, ...]
    evidence_items: tuple[str, ...]
    rule_items: tuple[RuleItem, ...]
    remedy: RemedyDetails
    confidence_score: float
    low_confidence: bool
    appealable: bool
    rules_version: str

    @property
    def confidence_label(self) -> str:
        return f"{self.confidence_score:.2f}"

    @property
    def appeal_notice(self) -> str | None:
        return APPEAL_NOTICE if self.low_confidence else None

    @property
    def source_note(self) -> str:
        return f"Issued under the {RULES_TITLE} v{self.rules_version}"

    def as_dict(self) -> dict[str, Any]:
        return {
            "header": {
                "tribunal": TRIBUNAL_NAME,
                "title": DOCUMENT_TITLE,
                "case_number": self.case_number,
                "category": self.category,
                "date": self.decision_date,
            },
            "sections": self.sections.as_dict(),
            "fact_items": list(self.fact_items),
            "evidence_items": list(self.evidence_items),
            "rule_items": [item.as_dict() for item in self.rule_items],
            "remedy": {
                "type_label": self.remedy.type_label,
                "amount": self.remedy.amount,
                "compliance_deadline": self.remedy.compliance_deadline,
                "return_required": self.remedy.return_required,
                "notes": self.remedy.notes,
            },
            "confidence": {
                "score": self.confidence_score,
                "label": self.confidence_label,
                "low_confidence": self.low_confidence,
                "appeal_notice": self.appeal_notice,
            },
            "appealable": self.appealable,
            "footer": {
                "signatory": SIGNATORY,
                "finality": FINALITY_NOTICE,
                "source_note": self.source_note,
            },
        }

    def render_text(self) -> str:
        """Plain-text rendering with a fallback line for empty sections."""
        lines = [
            TRIBUNAL_NAME,
            DOCUMENT_TITLE,
            f"Case No: {self.case_number}",
            f"Date: {self.decision_date}",
            f"Category: {self.category}",
            "",
        ]
        bodies: dict[str, list[str]] = {
            "summary": [self.sections.summary],
            "facts": [f"{BULLET} {f}" for f in self.fact_items],
            "evidence": [f"{BULLET} {e}" for e in self.evidence_items],
            "rules": [item.text() for item in self.rule_items],
            "reasoning": [self.sections.reasoning],
            "remedy": [self.sections.remedy],
            "notes": [self.sections.notes],
        }
        for heading in SECTION_HEADINGS:
            lines.append(heading.title)
            body = [b for b in bodies[heading.field] if b]
            lines.extend(body or [EMPTY_SECTION_TEXT])
            if heading.field == "remedy":
                lines.append(f"Remedy Type: {self.remedy.type_label}")
                if self.remedy.amount:
                    lines.append(f"Amount: {self.remedy.amount}")
                lines.append(f"Compliance Deadline: {self.remedy.compliance_deadline}")
            if heading.field == "notes":
                lines.append(f"Confidence Score: {self.confidence_label}")
                if self.appeal_notice:
                    lines.append("LOW-CONFIDENCE DECISION")
                    lines.append(self.appeal_notice)
            lines.append("")
        lines.append(f"Electronically signed and issued by: {SIGNATORY}")
        lines.append(FINALITY_NOTICE)
        lines.append(self.source_note)
        return "\n".join(lines)


def build_document(
    payload: DecisionPayload,
    corpus: ArticleCorpus | None = None,
    *,
    today: date | None = None,
) -> DecisionDocument:
    """Segment, resolve and assemble a decision for display.

    Args:
        payload: Validated decision payload.
        corpus: Article corpus; the packaged rules when omitted.
        today: Fallback date when the text carries no usable timestamp.
    """
    if corpus is None:
        corpus = load_default_corpus()
    sections = segment(payload.finding_summary)
    rendered_on = parse_decision_date(sections.timestamp) or today or date.today()

    remedy = payload.remedy_awarded
    details = RemedyDetails(
        type_label=remedy.type_label,
        amount=f"USD ${remedy.amount_usd:.2f}" if remedy.amount_usd > 0 else None,
        compliance_deadline=format_long_date(payload.compliance_deadline.date()),
        return_required=remedy.return_required,
        notes=remedy.notes,
    )
    return DecisionDocument(
        case_number=payload.dispute_id,
        category=payload.dispute_category,
        decision_date=format_long_date(rendered_on),
        sections=sections,
        fact_items=tuple(sections.fact_items),
        evidence_items=tuple(sections.evidence_items),
        rule_items=tuple(resolve_citations(sections.rules, corpus)),
        remedy=details,
        confidence_score=payload.confidence_score,
        low_confidence=payload.is_low_confidence,
        appealable=payload.appealable,
        rules_version=corpus.version,
    )
