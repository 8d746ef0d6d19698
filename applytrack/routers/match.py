import asyncio
import uuid
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter

from applytrack.helpers.parsing import clean_text, decode_base64_to_text
from applytrack.models.models import BatchItemResult, ResumeDocument, ResumeProfile
from applytrack.models.schemas import (
    BulkItemResponse,
    BulkMatchRequest,
    BulkMatchResponse,
    BulkResumeInput,
    MatchRequest,
    MatchResponse,
    ParseRequest,
)
from applytrack.services.extractor import parse_resume
from applytrack.services.graph import score_batch, write_reports
from applytrack.services.matching import score_resume
from applytrack.utils import config
from applytrack.utils.exceptions import DecodeError, ExceptionContext
from applytrack.utils.logging_config import PerformanceMonitor, get_logger

logger = get_logger(__name__)

router = APIRouter()


def _to_document(item: BulkResumeInput) -> ResumeDocument:
    resume_id = Path(item.file_name).stem or item.file_name
    try:
        if item.text is not None:
            text = clean_text(item.text)
        else:
            text = decode_base64_to_text(item.base64_content, file_name=item.file_name)
    except DecodeError as e:
        logger.warning(f"Skipping {item.file_name}: {e.message}")
        return ResumeDocument(resume_id=resume_id, file_name=item.file_name,
                              error_kind=e.kind, error_message=e.message)
    return ResumeDocument(resume_id=resume_id, file_name=item.file_name, text=text)


def _to_bulk_item(item: BatchItemResult) -> BulkItemResponse:
    if not item.ok:
        return BulkItemResponse(
            file_name=item.file_name, resume_id=item.resume_id,
            error=item.error_message, error_kind=item.error_kind,
        )
    top_n = config.DISPLAY_TOP_N
    return BulkItemResponse(
        file_name=item.file_name,
        resume_id=item.resume_id,
        match_percentage=item.result.match_percentage,
        status=item.result.status,
        email=item.profile.email,
        skills=item.profile.skills,
        matched_keywords=item.result.top_matched(top_n),
        missing_keywords=item.result.top_missing(top_n),
    )


@router.post("", response_model=MatchResponse)
async def match_resume(payload: MatchRequest):
    """Score one resume against one job description"""
    with PerformanceMonitor("match_resume", logger):
        with ExceptionContext("match_resume", logger):
            profile, result = score_resume(payload.resume_text, payload.job_description)

    return MatchResponse(
        score=result.match_score,
        match_percentage=result.match_percentage,
        decision=result.status,
        matched_keywords=result.matched_keywords,
        missing_keywords=result.missing_keywords,
        parsed_resume=profile,
    )


@router.post("/parse", response_model=ResumeProfile)
async def parse_resume_text(payload: ParseRequest):
    """Extract the structured profile without scoring"""
    with ExceptionContext("parse_resume", logger):
        return parse_resume(clean_text(payload.resume_text))


@router.post("/bulk", response_model=BulkMatchResponse)
async def bulk_match(payload: BulkMatchRequest):
    """
    Score many resumes against one job description.

    Undecodable resumes come back as per-file errors; the rest of the batch
    is still scored. With ``export`` the CSV and Markdown reports are written
    to REPORT_DIR.
    """
    documents = [_to_document(item) for item in payload.resumes]

    loop = asyncio.get_running_loop()
    # CPU-bound; keep it off the event loop
    results = await loop.run_in_executor(None, score_batch, documents, payload.job_description)

    report_paths: Optional[List[str]] = None
    if payload.export:
        job_id = payload.job_description_id or str(uuid.uuid4())
        csv_path, md_path = await loop.run_in_executor(
            None, write_reports, job_id, results, payload.job_description
        )
        report_paths = [csv_path, md_path]

    logger.info(f"Bulk match processed {len(results)} resumes")
    return BulkMatchResponse(
        processed=len(results),
        results=[_to_bulk_item(r) for r in results],
        report_paths=report_paths,
    )
