"""Section segmenter for AI Judge decision text.

Splits the free-text ``finding_summary`` of a decision into its seven
canonical sections plus the ``Decision Rendered:`` timestamp:

    I.   SUMMARY OF DISPUTE
    II.  ESTABLISHED FACTS
    III. EVIDENCE CONSIDERED
    IV.  APPLICABLE RULES
    V.   TRIBUNAL REASONING
    VI.  RULING AND REMEDY
    VII. ADDITIONAL NOTES

2-phase approach:
    1. Locate every heading that is present (numeral + exact label).
    2. Slice the text between consecutive headings; the last heading runs
       to a ``---`` separator or end of text.

The upstream text format is not guaranteed, so nothing here raises: a
missing heading leaves its field as "".
"""
from __future__ import annotations

import re
from dataclasses import dataclass


BULLET = "•"


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SectionHeading:
    """One canonical heading of a decision."""

    field: str      # DecisionSections attribute
    numeral: str    # "IV"
    label: str      # "APPLICABLE RULES"

    @property
    def title(self) -> str:
        return f"{self.numeral}. {self.label}"


SECTION_HEADINGS: tuple[SectionHeading, ...] = (
    SectionHeading("summary", "I", "SUMMARY OF DISPUTE"),
    SectionHeading("facts", "II", "ESTABLISHED FACTS"),
    SectionHeading("evidence", "III", "EVIDENCE CONSIDERED"),
    SectionHeading("rules", "IV", "APPLICABLE RULES"),
    SectionHeading("reasoning", "V", "TRIBUNAL REASONING"),
    SectionHeading("remedy", "VI", "RULING AND REMEDY"),
    SectionHeading("notes", "VII", "ADDITIONAL NOTES"),
)

SECTION_FIELDS: tuple[str, ...] = tuple(h.field for h in SECTION_HEADINGS)


@dataclass(frozen=True, slots=True)
class DecisionSections:
    """Parsed sections of one decision. Every field defaults to ""."""

    timestamp: str = ""
    summary: str = ""
    facts: str = ""
    evidence: str = ""
    rules: str = ""
    reasoning: str = ""
    remedy: str = ""
    notes: str = ""

    @property
    def fact_items(self) -> list[str]:
        return split_bullets(self.facts)

    @property
    def evidence_items(self) -> list[str]:
        return split_bullets(self.evidence)

    def missing(self) -> list[str]:
        """Section fields that came back empty, in canonical order."""
        return [f for f in SECTION_FIELDS if not getattr(self, f)]

    def as_dict(self) -> dict[str, str]:
        return {
            "timestamp": self.timestamp,
            **{f: getattr(self, f) for f in SECTION_FIELDS},
        }


@dataclass(frozen=True, slots=True)
class HeadingMatch:
    """A heading located in the raw text."""

    heading: SectionHeading
    char_start: int     # start of the numeral
    body_start: int     # first char after the label


# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

# Numeral must not be the tail of a longer numeral ("II." inside "VII.").
_HEADING_RES: dict[str, re.Pattern[str]] = {
    h.field: re.compile(
        rf"(?<![A-Za-z]){h.numeral}\.\s*{re.escape(h.label)}"
    )
    for h in SECTION_HEADINGS
}

# Any Roman-numeral heading at line start, canonical or not ("VIII. SIGNATURE",
# "V. Tribunal Reasoning"). Only used to close the preceding section.
_ANY_HEADING_RE = re.compile(r"^[ \t]*[IVXLC]+\.[ \t]+[A-Z]", re.MULTILINE)

# Value may sit on the line after the label.
_TIMESTAMP_RE = re.compile(r"Decision Rendered:[ \t]*(?:\n[ \t]*)?([^\n]*)")

# Closing rule ("---") after the final section.
_SEPARATOR_RE = re.compile(r"-{3,}")

# Lead-in sentences that precede the itemized content. Only text before
# the first bullet may be consumed.
_LEAD_IN_RES: dict[str, re.Pattern[str]] = {
    "facts": re.compile(r"\A[^•]*?\bfinds that:\s*"),
    "evidence": re.compile(r"\A[^•]*?\bassessed,\s*inter alia:\s*"),
    "rules": re.compile(r"\A[^•]*?\bthe\b[^•]*?\bRules of Procedure:\s*"),
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def find_headings(text: str) -> list[HeadingMatch]:
    """Locate the canonical headings present in ``text``, sorted by position.

    Only the first occurrence of each heading counts.
    """
    if not text:
        return []
    found: list[HeadingMatch] = []
    for heading in SECTION_HEADINGS:
        m = _HEADING_RES[heading.field].search(text)
        if m is None:
            continue
        found.append(HeadingMatch(heading=heading, char_start=m.start(), body_start=m.end()))
    found.sort(key=lambda h: h.char_start)
    return found


def segment(text: str) -> DecisionSections:
    """Parse decision text into ``DecisionSections``.

    Args:
        text: The raw ``finding_summary`` string.

    Returns:
        DecisionSections with every field populated ("" when absent).
    """
    if not text:
        return DecisionSections()

    headings = find_headings(text)
    first_heading = headings[0].char_start if headings else len(text)

    values: dict[str, str] = {"timestamp": _extract_timestamp(text[:first_heading])}
    for i, hm in enumerate(headings):
        if i + 1 < len(headings):
            end = headings[i + 1].char_start
        else:
            end = _final_section_end(text, hm.body_start)
        end = _section_end(text, hm.body_start, end)
        body = text[hm.body_start:end].strip()
        values[hm.heading.field] = strip_lead_in(hm.heading.field, body)

    return DecisionSections(**values)


def strip_lead_in(field: str, body: str) -> str:
    """Drop the known lead-in sentence of facts/evidence/rules, if present."""
    pattern = _LEAD_IN_RES.get(field)
    if pattern is None:
        return body
    m = pattern.search(body)
    if m is None:
        return body
    return body[m.end():].strip()


def split_bullets(text: str) -> list[str]:
    """Split a bulleted section on "•" into trimmed, non-blank items."""
    if not text:
        return []
    return [item.strip() for item in text.split(BULLET) if item.strip()]


def join_bullets(items: list[str]) -> str:
    """Render items one per line with a bullet prefix."""
    return "\n".join(f"{BULLET} {item}" for item in items)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _extract_timestamp(preamble: str) -> str:
    m = _TIMESTAMP_RE.search(preamble)
    return m.group(1).strip() if m else ""


def _section_end(text: str, body_start: int, limit: int) -> int:
    """Pull ``limit`` back to an unrecognised Roman-numeral heading, if any."""
    m = _ANY_HEADING_RE.search(text, body_start, limit)
    return m.start() if m else limit


def _final_section_end(text: str, body_start: int) -> int:
    m = _SEPARATOR_RE.search(text, body_start)
    return m.start() if m else len(text)
