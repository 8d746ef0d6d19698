from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional

from applytrack.models.models import MatchStatus, ResumeProfile
from applytrack.services.matching import SHORTLIST_THRESHOLD
from applytrack.utils import config

_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -------- Single match --------
class MatchRequest(BaseModel):
    model_config = _camel

    resume_text: str = Field(..., min_length=10)
    job_description: str = Field(..., min_length=10)


class MatchResponse(BaseModel):
    model_config = _camel

    score: float
    match_percentage: int
    decision: MatchStatus
    threshold: int = SHORTLIST_THRESHOLD
    matched_keywords: List[str] = []
    missing_keywords: List[str] = []
    parsed_resume: ResumeProfile


class ParseRequest(BaseModel):
    model_config = _camel

    resume_text: str = Field(..., min_length=1)


# -------- Bulk match --------
class BulkResumeInput(BaseModel):
    model_config = _camel

    file_name: str
    text: Optional[str] = None
    base64_content: Optional[str] = None

    @model_validator(mode="after")
    def _needs_content(self):
        if self.text is None and self.base64_content is None:
            raise ValueError("either text or base64Content is required")
        return self


class BulkMatchRequest(BaseModel):
    model_config = _camel

    job_description: str = Field(..., min_length=10)
    job_description_id: Optional[str] = None
    resumes: List[BulkResumeInput] = Field(..., min_length=1, max_length=config.MAX_BULK_RESUMES)
    export: bool = False


class BulkItemResponse(BaseModel):
    model_config = _camel

    file_name: str
    resume_id: str
    match_percentage: Optional[int] = None
    status: Optional[MatchStatus] = None
    email: str = ""
    skills: List[str] = []
    matched_keywords: List[str] = []
    missing_keywords: List[str] = []
    error: Optional[str] = None
    error_kind: Optional[str] = None


class BulkMatchResponse(BaseModel):
    model_config = _camel

    success: bool = True
    processed: int
    results: List[BulkItemResponse] = []
    report_paths: Optional[List[str]] = None
