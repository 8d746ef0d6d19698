import math
import re
from typing import Iterable, List, Tuple

from applytrack.helpers.lexicon import (
    CAPITALIZED_TERM_CAP,
    KEYWORD_CAP,
    REQUIREMENT_KEYWORDS,
    SKILL_PATTERNS,
    STOPWORDS,
)
from applytrack.helpers.text import CAPITALIZED_PHRASE, dedupe, normalize_tokens
from applytrack.models.models import MatchResult, MatchStatus, ResumeProfile
from applytrack.services.extractor import parse_resume
from applytrack.utils.logging_config import get_logger

logger = get_logger(__name__)

SHORTLIST_THRESHOLD = 80
LOW_PRIORITY_THRESHOLD = 50

KEYWORD_WEIGHT = 0.4
SKILL_WEIGHT = 0.4
TEXT_SIMILARITY_WEIGHT = 0.2

YEARS_OF_EXPERIENCE = re.compile(r"\b(\d+)\+?\s*(?:years?|yrs?)\s*(?:of\s*)?(?:experience|exp)", re.IGNORECASE)
DEGREE_LEVELS = (
    re.compile(r"\b(?:bachelor|master|phd|doctorate|diploma)\s*(?:degree|in|of)?", re.IGNORECASE),
    re.compile(r"\b(?:bs|ms|mba|phd|b\.?s\.?|m\.?s\.?|b\.?a\.?|m\.?a\.?)\b", re.IGNORECASE),
)


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def categorize(percentage: int) -> MatchStatus:
    if percentage >= SHORTLIST_THRESHOLD:
        return MatchStatus.SHORTLISTED
    if percentage >= LOW_PRIORITY_THRESHOLD:
        return MatchStatus.LOW_PRIORITY
    return MatchStatus.REJECTED


def extract_jd_keywords(jd: str) -> List[str]:
    """
    Requirement keywords of a job description.

    Capitalized terms come first (stopwords and very short words dropped, at
    most 20), then requirement vocabulary, years-of-experience phrases and
    degree levels. Deduplicated and capped.
    """
    lower = jd.lower()
    capitalized = dedupe(
        k for k in (p.lower() for p in CAPITALIZED_PHRASE.findall(jd))
        if len(k) > 2 and k not in STOPWORDS
    )
    keywords = capitalized[:CAPITALIZED_TERM_CAP]
    keywords += [kw for kw in REQUIREMENT_KEYWORDS if kw in lower]
    keywords += [m.group(0).lower() for m in YEARS_OF_EXPERIENCE.finditer(jd)]
    for pattern in DEGREE_LEVELS:
        keywords += [m.group(0).lower().strip() for m in pattern.finditer(jd)]
    return dedupe(keywords)[:KEYWORD_CAP]


def extract_jd_skills(jd: str) -> List[str]:
    return [skill for skill, pattern in SKILL_PATTERNS.items() if pattern.search(jd)]


def jaccard(a: Iterable[str], b: Iterable[str]) -> float:
    sa, sb = set(a), set(b)
    if not sa or not sb:
        return 0.0
    return len(sa & sb) / len(sa | sb)


def text_similarity(text1: str, text2: str) -> float:
    return jaccard(normalize_tokens(text1), normalize_tokens(text2))


def _contains_either_way(term: str, candidates: Iterable[str]) -> bool:
    return any(c and (c in term or term in c) for c in candidates)


def match_resume_to_jd(
    resume_keywords: List[str],
    resume_skills: List[str],
    resume_text: str,
    job_description: str,
) -> MatchResult:
    """
    Score a resume against a job description.

    A JD term counts as matched when a resume term contains it or is contained
    in it, or when it shows up anywhere in the resume text. This containment
    test is loose on purpose and will accept short terms found inside longer
    words.
    """
    resume_text = resume_text or ""
    job_description = job_description or ""
    resume_lower = resume_text.lower()

    jd_keywords = extract_jd_keywords(job_description)
    jd_skills = extract_jd_skills(job_description)

    matched, missing = [], []
    keyword_hits = 0
    for kw in jd_keywords:
        if _contains_either_way(kw, resume_keywords) or kw in resume_lower:
            keyword_hits += 1
            matched.append(kw)
        else:
            missing.append(kw)

    skill_hits = 0
    for skill in jd_skills:
        if _contains_either_way(skill, resume_skills) or skill in resume_lower:
            skill_hits += 1
            matched.append(skill)
        else:
            missing.append(skill)

    matched = dedupe(matched)
    matched_set = set(matched)
    missing = [kw for kw in dedupe(missing) if kw not in matched_set]

    keyword_ratio = keyword_hits / len(jd_keywords) if jd_keywords else 0.0
    skill_ratio = skill_hits / len(jd_skills) if jd_skills else 0.0
    similarity = text_similarity(resume_text, job_description)

    score = KEYWORD_WEIGHT * keyword_ratio + SKILL_WEIGHT * skill_ratio + TEXT_SIMILARITY_WEIGHT * similarity
    score = max(0.0, min(1.0, score))
    percentage = round_half_up(score * 100)
    status = categorize(percentage)

    logger.debug(
        f"keywords {keyword_hits}/{len(jd_keywords)}, skills {skill_hits}/{len(jd_skills)}, "
        f"similarity {similarity:.3f} -> {score:.4f}"
    )
    logger.info(f"Match decision: {status.value} ({percentage}%)")

    return MatchResult(
        match_score=score,
        match_percentage=percentage,
        matched_keywords=matched,
        missing_keywords=missing,
        status=status,
    )


def score_resume(resume_text: str, job_description: str) -> Tuple[ResumeProfile, MatchResult]:
    profile = parse_resume(resume_text)
    result = match_resume_to_jd(profile.keywords, profile.skills, resume_text or "", job_description)
    return profile, result
