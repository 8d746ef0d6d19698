import logging

import pandas as pd
import pytest

from applytrack.models.models import MatchStatus, ResumeDocument
from applytrack.services.graph import (
    PROCESSING_ERROR,
    build_graph,
    node_load,
    run_sequential,
    score_batch,
    write_reports,
)
from applytrack.utils.exceptions import ConfigurationError

JD = "We need 3+ years experience with Python and React. Bachelor degree required."

RESUMES = [
    "Skills: Python, React, AWS\nemail: a@b.com",
    "Skills: Java, Spring\nemail: java@dev.io",
    "Line cook with ten years in busy kitchens",
    "SKILLS\nPython, Django, React, Docker\n\nEDUCATION\nBachelor of Science in Computer Science, State University 2015",
    "Skills: Excel, Word\nemail: office@corp.com",
]


def _docs():
    return [ResumeDocument(resume_id=f"r{i}", file_name=f"r{i}.txt", text=t) for i, t in enumerate(RESUMES)]


class TestScoreBatch:
    """Parallel batch scoring"""

    def test_results_in_input_order(self):
        results = score_batch(_docs(), JD, max_workers=3)
        assert [r.index for r in results] == list(range(len(RESUMES)))
        assert [r.resume_id for r in results] == [f"r{i}" for i in range(len(RESUMES))]
        assert all(r.ok for r in results)

    def test_same_result_as_single_scoring(self):
        from applytrack.services.matching import score_resume

        results = score_batch(_docs(), JD, max_workers=4)
        for doc, item in zip(_docs(), results):
            profile, result = score_resume(doc.text, JD)
            assert item.profile == profile
            assert item.result == result

    def test_decode_errors_pass_through(self):
        docs = _docs()[:2] + [ResumeDocument(
            resume_id="scan", file_name="scan.pdf",
            error_kind="unsupported_format", error_message="PDF resumes must be converted",
        )]
        results = score_batch(docs, JD, max_workers=2)
        assert results[2].ok is False
        assert results[2].error_kind == "unsupported_format"
        assert results[2].profile is None
        assert results[0].ok and results[1].ok

    def test_empty_batch(self):
        assert score_batch([], JD) == []

    def test_extraction_failure_becomes_error_item(self, monkeypatch):
        def boom(text):
            raise RuntimeError("extractor blew up")

        monkeypatch.setattr("applytrack.services.graph.parse_resume", boom)
        results = score_batch(_docs()[:1], JD, max_workers=1)
        assert results[0].error_kind == PROCESSING_ERROR


class TestReports:
    """CSV and Markdown export"""

    def test_write_reports(self, tmp_path):
        results = score_batch(_docs(), JD, max_workers=2)
        csv_path, md_path = write_reports("job-1", results, JD, report_dir=str(tmp_path))

        df = pd.read_csv(csv_path)
        assert len(df) == len(RESUMES)
        assert list(df["match_score"]) == sorted(df["match_score"], reverse=True)

        md = (tmp_path / "job-1_top.md").read_text(encoding="utf-8")
        assert md.startswith("# Job job-1: Top Matches")
        assert "| Rank | Resume | Status | Match % | Matched | Missing |" in md

    def test_failed_items_listed_last(self, tmp_path):
        docs = _docs()[:1] + [ResumeDocument(
            resume_id="bad", file_name="bad.pdf", error_kind="unsupported_format", error_message="nope",
        )]
        csv_path, md_path = write_reports("job-2", score_batch(docs, JD, max_workers=1), JD, report_dir=str(tmp_path))

        df = pd.read_csv(csv_path, keep_default_na=False)
        assert list(df["status"]) == [MatchStatus.SHORTLISTED.value, "error"]
        assert "bad.pdf" in (tmp_path / "job-2_top.md").read_text(encoding="utf-8")

    def test_report_writing_is_logged(self, tmp_path, caplog):
        with caplog.at_level(logging.DEBUG, logger="applytrack.services.graph"):
            write_reports("job-3", [], "", report_dir=str(tmp_path))
        assert "Completed write_reports" in caplog.text
        assert write_reports.__name__ == "write_reports"

    def test_no_results(self, tmp_path):
        csv_path, md_path = write_reports("empty", [], "", report_dir=str(tmp_path))
        assert pd.read_csv(csv_path).empty
        assert "No resumes could be scored" in (tmp_path / "empty_top.md").read_text(encoding="utf-8")


class TestGraph:
    """load -> extract -> match -> report"""

    def _write_folder(self, folder):
        for i, text in enumerate(RESUMES):
            (folder / f"cand{i}.txt").write_text(text, encoding="utf-8")
        (folder / "cand9.docx").write_bytes(b"PK\x03\x04")

    def test_run_sequential(self, tmp_path):
        resumes = tmp_path / "resumes"
        resumes.mkdir()
        self._write_folder(resumes)

        out = run_sequential({
            "job_id": "seq",
            "job_description": JD,
            "resume_dir": str(resumes),
            "report_dir": str(tmp_path / "reports"),
            "max_workers": 2,
        })

        assert len(out["results"]) == len(RESUMES) + 1
        assert out["results"][-1].error_kind == "unsupported_format"
        csv_path, md_path = out["report_paths"]
        assert (tmp_path / "reports" / "seq_report.csv").exists()
        assert md_path.endswith("seq_top.md")

    def test_graph_matches_sequential(self, tmp_path):
        state = {
            "job_id": "graph",
            "job_description": JD,
            "documents": _docs(),
            "report_dir": str(tmp_path),
            "max_workers": 2,
        }
        graph_out = build_graph().invoke(state)
        seq_out = run_sequential(state)

        assert [r.result for r in graph_out["results"]] == [r.result for r in seq_out["results"]]
        assert (tmp_path / "graph_report.csv").exists()

    def test_missing_folder(self, tmp_path):
        with pytest.raises(ConfigurationError):
            node_load({"resume_dir": str(tmp_path / "nope")})
