from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_frozen = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class MatchStatus(str, Enum):
    SHORTLISTED = "shortlisted"
    LOW_PRIORITY = "low_priority"
    REJECTED = "rejected"


class ExperienceEntry(BaseModel):
    model_config = _frozen

    company: str = "Unknown"
    position: str = "Unknown"
    duration: str = ""
    description: str = ""


class EducationEntry(BaseModel):
    model_config = _frozen

    degree: str = ""
    institution: str = ""
    year: str = ""
    field: str = ""


class ResumeProfile(BaseModel):
    """Structured view of one resume. Lists behave as ordered sets (no repeats)."""
    model_config = _frozen

    skills: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    email: str = ""
    experience: List[ExperienceEntry] = Field(default_factory=list)
    education: List[EducationEntry] = Field(default_factory=list)
    certificates: List[str] = Field(default_factory=list)


class MatchResult(BaseModel):
    model_config = _frozen

    match_score: float = Field(0.0, ge=0.0, le=1.0)
    match_percentage: int = Field(0, ge=0, le=100)
    matched_keywords: List[str] = Field(default_factory=list)
    missing_keywords: List[str] = Field(default_factory=list)
    status: MatchStatus = MatchStatus.REJECTED

    def top_matched(self, n: int = 10) -> List[str]:
        return self.matched_keywords[:n]

    def top_missing(self, n: int = 10) -> List[str]:
        return self.missing_keywords[:n]


class ResumeDocument(BaseModel):
    """A resume handed to the batch pipeline: decoded text, or the reason it could not be decoded."""
    resume_id: str
    file_name: str = ""
    text: Optional[str] = None
    error_kind: Optional[str] = None
    error_message: Optional[str] = None


class BatchItemResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    index: int
    resume_id: str
    file_name: str = ""
    profile: Optional[ResumeProfile] = None
    result: Optional[MatchResult] = None
    error_kind: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.result is not None
