import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, TypedDict

import pandas as pd
from langgraph.graph import StateGraph, END

from applytrack.helpers.parsing import load_folder
from applytrack.models.models import BatchItemResult, ResumeDocument, ResumeProfile
from applytrack.services.extractor import parse_resume
from applytrack.services.matching import match_resume_to_jd
from applytrack.utils import config
from applytrack.utils.exceptions import ConfigurationError
from applytrack.utils.logging_config import PerformanceMonitor, get_logger, log_function_call

logger = get_logger(__name__)

PROCESSING_ERROR = "processing_error"

REPORT_COLUMNS = [
    "index", "resume_id", "file_name", "email", "status", "match_percentage", "match_score",
    "matched_keywords", "missing_keywords", "error_kind", "error_message",
]


def _parallel(fn: Callable, items: Sequence, max_workers: Optional[int] = None) -> List:
    """Run ``fn(index, item)`` on a thread pool and return results in input order."""
    if not items:
        return []
    workers = max_workers or config.batch_workers()
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {pool.submit(fn, i, item): i for i, item in enumerate(items)}
        done = {}
        for future in as_completed(futures):
            done[futures[future]] = future.result()
    return [done[i] for i in range(len(items))]


def _error_item(index: int, doc: ResumeDocument, kind: str, message: str) -> BatchItemResult:
    return BatchItemResult(
        index=index, resume_id=doc.resume_id, file_name=doc.file_name,
        error_kind=kind, error_message=message,
    )


def _extract_one(index: int, doc: ResumeDocument) -> Optional[ResumeProfile]:
    if doc.error_kind:
        return None
    try:
        return parse_resume(doc.text or "")
    except Exception as e:
        logger.warning(f"Resume extraction failed for {doc.resume_id}: {e}")
        return None


def _match_one(index: int, doc: ResumeDocument, profile: Optional[ResumeProfile], job_description: str) -> BatchItemResult:
    if doc.error_kind:
        return _error_item(index, doc, doc.error_kind, doc.error_message or "")
    if profile is None:
        return _error_item(index, doc, PROCESSING_ERROR, "Resume could not be processed")
    try:
        result = match_resume_to_jd(profile.keywords, profile.skills, doc.text or "", job_description)
    except Exception as e:
        logger.warning(f"Matching failed for {doc.resume_id}: {e}")
        return _error_item(index, doc, PROCESSING_ERROR, str(e))
    return BatchItemResult(
        index=index, resume_id=doc.resume_id, file_name=doc.file_name, profile=profile, result=result,
    )


def score_batch(documents: Sequence[ResumeDocument], job_description: str,
                max_workers: Optional[int] = None) -> List[BatchItemResult]:
    """
    Extract and score every document against one job description.

    Each resume runs on a worker thread; results come back in input order.
    Documents that already carry a decode error are returned as error items
    without touching the extractor.
    """
    def work(index: int, doc: ResumeDocument) -> BatchItemResult:
        return _match_one(index, doc, _extract_one(index, doc), job_description)

    with PerformanceMonitor(f"score_batch ({len(documents)} resumes)", logger, threshold_ms=5000):
        return _parallel(work, documents, max_workers)


def _report_rows(results: Sequence[BatchItemResult]) -> List[dict]:
    rows = []
    for r in results:
        rows.append({
            "index": r.index,
            "resume_id": r.resume_id,
            "file_name": r.file_name,
            "email": r.profile.email if r.profile else "",
            "status": r.result.status.value if r.ok else "error",
            "match_percentage": r.result.match_percentage if r.ok else None,
            "match_score": round(r.result.match_score, 4) if r.ok else None,
            "matched_keywords": "; ".join(r.result.matched_keywords) if r.ok else "",
            "missing_keywords": "; ".join(r.result.missing_keywords) if r.ok else "",
            "error_kind": r.error_kind or "",
            "error_message": r.error_message or "",
        })
    return rows


@log_function_call
def write_reports(job_id: str, results: Sequence[BatchItemResult], job_description: str = "",
                  report_dir: Optional[str] = None, top_n: Optional[int] = None) -> Tuple[str, str]:
    report_dir = report_dir or config.REPORT_DIR
    top_n = top_n or config.DISPLAY_TOP_N
    Path(report_dir).mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(_report_rows(results), columns=REPORT_COLUMNS)
    scored = df[df["status"] != "error"].sort_values(["match_score", "index"], ascending=[False, True])
    failed = df[df["status"] == "error"]

    csv_path = os.path.join(report_dir, f"{job_id}_report.csv")
    pd.concat([scored, failed]).to_csv(csv_path, index=False)

    md_lines = [f"# Job {job_id}: Top Matches"]
    jd_excerpt = " ".join((job_description or "").split())[:300]
    if jd_excerpt:
        md_lines.append(f"**Job Description**: {jd_excerpt}\n")
    else:
        md_lines.append("*(No job description text available)*\n")

    if len(scored):
        by_index = {r.index: r for r in results}
        md_lines += [
            "| Rank | Resume | Status | Match % | Matched | Missing |",
            "|---:|---|---|---:|---|---|",
        ]
        for i, row in enumerate(scored.head(top_n).to_dict("records"), start=1):
            result = by_index[row["index"]].result
            md_lines.append(
                f"| {i} | {row['resume_id']} | {row['status']} | {int(row['match_percentage'])} | "
                f"{', '.join(result.top_matched(top_n))} | {', '.join(result.top_missing(top_n))} |"
            )
    else:
        md_lines.append("> No resumes could be scored for this job.\n")

    if len(failed):
        md_lines.append("\n---\nSkipped files:")
        for row in failed.to_dict("records"):
            md_lines.append(f"- **{row['file_name'] or row['resume_id']}** ({row['error_kind']}): {row['error_message']}")

    md_path = os.path.join(report_dir, f"{job_id}_top.md")
    Path(md_path).write_text("\n".join(md_lines), encoding="utf-8")
    logger.info(f"Reports written for job {job_id}: {csv_path}, {md_path}")
    return csv_path, md_path


# LangGraph state and nodes
class BatchState(TypedDict, total=False):
    job_id: str
    job_description: str
    resume_dir: str
    report_dir: str
    max_workers: int
    documents: List[ResumeDocument]
    profiles: List[Optional[ResumeProfile]]
    results: List[BatchItemResult]
    report_paths: Tuple[str, str]


def node_load(state: BatchState):
    if state.get("documents") is not None:
        return {"documents": list(state["documents"])}
    folder = state.get("resume_dir") or config.RESUME_DIR
    if not Path(folder).exists():
        raise ConfigurationError(f"Folder not found: {folder}. Update RESUME_DIR in .env",
                                 config_key="RESUME_DIR", config_value=folder)
    return {"documents": load_folder(folder)}


def node_extract(state: BatchState):
    documents = state.get("documents", [])
    return {"profiles": _parallel(_extract_one, documents, state.get("max_workers"))}


def node_match(state: BatchState):
    documents = state.get("documents", [])
    profiles = state.get("profiles", [])
    jd = state.get("job_description", "")

    def work(index: int, doc: ResumeDocument) -> BatchItemResult:
        profile = profiles[index] if index < len(profiles) else None
        return _match_one(index, doc, profile, jd)

    return {"results": _parallel(work, documents, state.get("max_workers"))}


def node_report(state: BatchState):
    paths = write_reports(
        state.get("job_id", "job"),
        state.get("results", []),
        state.get("job_description", ""),
        report_dir=state.get("report_dir"),
    )
    return {"report_paths": paths}


def build_graph():
    g = StateGraph(BatchState)
    g.add_node("load", node_load)
    g.add_node("extract", node_extract)
    g.add_node("match", node_match)
    g.add_node("report", node_report)
    g.set_entry_point("load")
    g.add_edge("load", "extract")
    g.add_edge("extract", "match")
    g.add_edge("match", "report")
    g.add_edge("report", END)
    return g.compile()


def run_sequential(state: BatchState):
    """Same pipeline as ``build_graph`` without LangGraph; returns the merged state."""
    state = dict(state)
    for node in (node_load, node_extract, node_match, node_report):
        state.update(node(state))
    return state
