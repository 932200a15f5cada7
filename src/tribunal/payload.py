"""Typed view of the decision object returned by the AI Judge service.

The service hands back ``{"decision": {...}}``; the inner object carries
the free-text ``finding_summary`` that feeds the section segmenter plus
the structured remedy and confidence fields. Validation happens here, at
the boundary, so the parsing core never sees a malformed value.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any

LOW_CONFIDENCE_THRESHOLD = 0.60


class PayloadError(ValueError):
    """Raised when a decision payload is missing or mistypes a field."""


def is_low_confidence(score: float) -> bool:
    """Below the appeal threshold. 0.60 itself is not low confidence."""
    return score < LOW_CONFIDENCE_THRESHOLD


@dataclass(frozen=True, slots=True)
class RemedyAwarded:
    type: str               # "full_refund", "partial_refund", ...
    amount_usd: float
    return_required: bool
    notes: str = ""

    @property
    def type_label(self) -> str:
        """Display label, e.g. "full_refund" -> "FULL REFUND"."""
        return self.type.replace("_", " ").upper()

    def as_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "amount_usd": self.amount_usd,
            "return_required": self.return_required,
            "notes": self.notes,
        }


@dataclass(frozen=True, slots=True)
class MisconductFlag:
    misleading_conduct: bool = False
    fraudulent_behavior: bool = False
    tier: str | None = None   # sanction tier under Article 17, e.g. "Tier I"

    @property
    def is_flagged(self) -> bool:
        return self.misleading_conduct or self.fraudulent_behavior

    def as_dict(self) -> dict[str, Any]:
        return {
            "misleading_conduct": self.misleading_conduct,
            "fraudulent_behavior": self.fraudulent_behavior,
            "tier": self.tier,
        }


@dataclass(frozen=True, slots=True)
class DecisionPayload:
    dispute_id: str
    dispute_category: str
    confidence_score: float
    finding_summary: str
    remedy_awarded: RemedyAwarded
    compliance_deadline: datetime
    appealable: bool
    rules_applied: tuple[str, ...] = ()
    misconduct_flag: MisconductFlag = MisconductFlag()

    @property
    def is_low_confidence(self) -> bool:
        return is_low_confidence(self.confidence_score)

    @classmethod
    def from_dict(cls, raw: Any) -> DecisionPayload:
        """Validate and convert a decoded payload.

        Accepts the bare decision object or the service envelope
        ``{"decision": {...}}``.

        Raises:
            PayloadError: naming the first offending field.
        """
        if isinstance(raw, dict) and isinstance(raw.get("decision"), dict):
            raw = raw["decision"]
        if not isinstance(raw, dict):
            raise PayloadError("decision payload must be a JSON object")

        remedy_raw = raw.get("remedy_awarded")
        if not isinstance(remedy_raw, dict):
            raise PayloadError("remedy_awarded: expected an object")

        score = _number(raw, "confidence_score")
        if not 0.0 <= score <= 1.0:
            raise PayloadError(f"confidence_score: {score} is outside [0, 1]")

        remedy = RemedyAwarded(
            type=_string(remedy_raw, "type", prefix="remedy_awarded."),
            amount_usd=_number(remedy_raw, "amount_usd", prefix="remedy_awarded."),
            return_required=_boolean(remedy_raw, "return_required", prefix="remedy_awarded."),
            notes=str(remedy_raw.get("notes") or ""),
        )
        return cls(
            dispute_id=_string(raw, "dispute_id"),
            dispute_category=_string(raw, "dispute_category"),
            confidence_score=score,
            finding_summary=_string(raw, "finding_summary", allow_empty=True),
            remedy_awarded=remedy,
            compliance_deadline=parse_timestamp(_string(raw, "compliance_deadline"), "compliance_deadline"),
            appealable=_boolean(raw, "appealable"),
            rules_applied=_string_list(raw, "rules_applied"),
            misconduct_flag=_misconduct(raw.get("misconduct_flag")),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "dispute_id": self.dispute_id,
            "dispute_category": self.dispute_category,
            "confidence_score": self.confidence_score,
            "finding_summary": self.finding_summary,
            "remedy_awarded": self.remedy_awarded.as_dict(),
            "compliance_deadline": self.compliance_deadline.isoformat(),
            "appealable": self.appealable,
            "rules_applied": list(self.rules_applied),
            "misconduct_flag": self.misconduct_flag.as_dict(),
        }


def parse_timestamp(value: str, field: str = "timestamp") -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing "Z"."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise PayloadError(f"{field}: not an ISO-8601 timestamp: {value!r}") from e


# ---------------------------------------------------------------------------
# Field readers
# ---------------------------------------------------------------------------


def _string(obj: dict[str, Any], key: str, *, prefix: str = "", allow_empty: bool = False) -> str:
    value = obj.get(key)
    if not isinstance(value, str):
        raise PayloadError(f"{prefix}{key}: expected a string")
    if not allow_empty and not value.strip():
        raise PayloadError(f"{prefix}{key}: must not be empty")
    return value


def _number(obj: dict[str, Any], key: str, *, prefix: str = "") -> float:
    value = obj.get(key)
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PayloadError(f"{prefix}{key}: expected a number")
    if not math.isfinite(value):
        raise PayloadError(f"{prefix}{key}: must be finite")
    return float(value)


def _boolean(obj: dict[str, Any], key: str, *, prefix: str = "") -> bool:
    value = obj.get(key)
    if not isinstance(value, bool):
        raise PayloadError(f"{prefix}{key}: expected a boolean")
    return value


def _string_list(obj: dict[str, Any], key: str) -> tuple[str, ...]:
    value = obj.get(key)
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise PayloadError(f"{key}: expected a list of strings")
    return tuple(value)


def _misconduct(value: Any) -> MisconductFlag:
    """Older payloads omit the flag entirely; treat that as no misconduct."""
    if value is None:
        return MisconductFlag()
    if not isinstance(value, dict):
        raise PayloadError("misconduct_flag: expected an object")
    prefix = "misconduct_flag."
    tier = value.get("tier")
    if tier is not None and not isinstance(tier, str):
        raise PayloadError(f"{prefix}tier: expected a string or null")
    return MisconductFlag(
        misleading_conduct=_boolean(value, "misleading_conduct", prefix=prefix),
        fraudulent_behavior=_boolean(value, "fraudulent_behavior", prefix=prefix),
        tier=tier,
    )
