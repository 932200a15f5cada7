"""Tests for the render_decision and article_lookup CLI scripts."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from scripts.article_lookup import main as lookup_main
from scripts.render_decision import main as render_main
from tribunal.io_utils import save_json


FINDING_SUMMARY = (
    "Decision Rendered: 2025-04-02T08:00:00Z\n"
    "I. SUMMARY OF DISPUTE\nUnauthorized charge on the Buyer's card.\n"
    "IV. APPLICABLE RULES\n• Article 7.6 - sixty-day window. • Article 12.50 is not a rule.\n"
    "VI. RULING AND REMEDY\nFull refund ordered."
)


def _write_decision(tmp_path: Path, **overrides: object) -> Path:
    raw: dict[str, object] = {
        "dispute_id": "AJT-300",
        "dispute_category": "unauthorized_charge",
        "confidence_score": 0.74,
        "finding_summary": FINDING_SUMMARY,
        "remedy_awarded": {"type": "full_refund", "amount_usd": 19.0, "return_required": False},
        "compliance_deadline": "2025-04-09T00:00:00Z",
        "appealable": False,
    }
    raw.update(overrides)
    path = tmp_path / "decision.json"
    save_json({"decision": raw}, path)
    return path


class TestRenderDecision:
    def test_json_output(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = _write_decision(tmp_path)
        assert render_main(["--input", str(path)]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["header"]["case_number"] == "AJT-300"
        assert out["header"]["date"] == "April 2, 2025"
        first, second = out["rule_items"]
        assert first["fragments"][0]["article_id"] == "7.6"
        assert second["fragments"][0] == {"kind": "text", "text": "Article 12.50"}

    def test_output_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = _write_decision(tmp_path)
        out_path = tmp_path / "out" / "rendered.json"
        assert render_main(["--input", str(path), "--output", str(out_path)]) == 0
        assert capsys.readouterr().out == ""
        rendered = json.loads(out_path.read_text(encoding="utf-8"))
        assert rendered["header"]["case_number"] == "AJT-300"

    def test_output_rejected_with_text_format(self, tmp_path: Path) -> None:
        path = _write_decision(tmp_path)
        with pytest.raises(SystemExit):
            render_main(["--input", str(path), "--format", "text", "--output", str(tmp_path / "x.json")])

    def test_text_output(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = _write_decision(tmp_path, confidence_score=0.4)
        assert render_main(["--input", str(path), "--format", "text"]) == 0
        out = capsys.readouterr().out
        assert "Case No: AJT-300" in out
        assert "LOW-CONFIDENCE DECISION" in out
        assert "Amount: USD $19.00" in out

    def test_raw_text_input(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = tmp_path / "summary.txt"
        path.write_text(FINDING_SUMMARY, encoding="utf-8")
        assert render_main(["--text", str(path)]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["sections"]["remedy"] == "Full refund ordered."
        assert out["fact_items"] == []

    def test_invalid_payload(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = _write_decision(tmp_path, appealable="maybe")
        assert render_main(["--input", str(path)]) == 1
        assert "appealable" in capsys.readouterr().err

    def test_invalid_json(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = tmp_path / "decision.json"
        path.write_text("{", encoding="utf-8")
        assert render_main(["--input", str(path)]) == 1
        assert "invalid decision payload" in capsys.readouterr().err

    def test_missing_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert render_main(["--input", str(tmp_path / "absent.json")]) == 1
        assert "file not found" in capsys.readouterr().err

    def test_bad_rules_dataset(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = _write_decision(tmp_path)
        assert render_main(["--input", str(path), "--rules", str(tmp_path / "none.json")]) == 1
        assert "Rules dataset not found" in capsys.readouterr().err

    def test_text_format_requires_input(self, tmp_path: Path) -> None:
        path = tmp_path / "summary.txt"
        path.write_text(FINDING_SUMMARY, encoding="utf-8")
        with pytest.raises(SystemExit):
            render_main(["--text", str(path), "--format", "text"])


class TestArticleLookup:
    def test_lookup_subsection(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert lookup_main(["Article 10.2"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["heading"] == "Article 10.2: Article 10.2"
        assert out["content"].startswith("Appeals allowed only")

    def test_preview(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert lookup_main(["11", "--preview"]) == 0
        assert capsys.readouterr().out.startswith("Fraud and Sanctions: ")

    def test_preview_not_found(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert lookup_main(["99", "--preview"]) == 0
        assert capsys.readouterr().out.strip() == "Article not found"

    def test_lookup_not_found(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert lookup_main(["Article 99"]) == 1
        assert "article not found" in capsys.readouterr().err

    def test_list(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert lookup_main(["--list"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert [a["id"] for a in out][-1] == "17"

    def test_ref_required(self) -> None:
        with pytest.raises(SystemExit):
            lookup_main([])
