"""
Rule-based resume extraction.

``parse_resume`` turns free text into a ``ResumeProfile``. Every sub-extractor
is a plain function over the raw text; none of them raise on odd input, they
just come back empty.
"""
import re
from typing import List, Optional

from applytrack.helpers.lexicon import (
    CAPITALIZED_TERM_CAP,
    CERT_KEYWORDS,
    CERT_VENDORS,
    CERTIFICATE_SECTION_HEADERS,
    DEGREE_KEYWORDS,
    EDUCATION_SECTION_HEADERS,
    EXPERIENCE_SECTION_HEADERS,
    INSTITUTION_KEYWORDS,
    KEYWORD_CAP,
    SKILL_PATTERNS,
    SKILL_SECTION_HEADERS,
    TECHNICAL_SKILLS,
)
from applytrack.helpers.text import (
    BULLET_LINE,
    CAPITALIZED_PHRASE,
    CAPITALIZED_WORD,
    YEAR,
    dedupe,
    find_section,
    first_match,
    lines_of,
    split_fragments,
    strip_bullet,
)
from applytrack.models.models import EducationEntry, ExperienceEntry, ResumeProfile
from applytrack.utils.logging_config import get_logger

logger = get_logger(__name__)

EMAIL = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")

SKILL_DELIMITERS = re.compile(r"\n|,|;|•|·|\||/")
CERT_DELIMITERS = re.compile(r"\n|,|;")

# --- experience ---

_RANGE_END = r"Present|Current|Now"
_MONTH = (
    r"\b(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|Aug(?:ust)?|"
    r"Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?|Spring|Summer|Fall|Autumn|Winter)\.?"
)

DURATION_PATTERNS = (
    re.compile(rf"({_MONTH}\s+\d{{4}})\s*[-–—]\s*({_MONTH}\s+\d{{4}}|{_RANGE_END})", re.IGNORECASE),
    re.compile(rf"(\d{{1,2}}/\d{{4}})\s*[-–—]\s*(\d{{1,2}}/\d{{4}}|{_RANGE_END})", re.IGNORECASE),
    re.compile(rf"(\d{{4}})\s*[-–—]\s*(\d{{4}}|{_RANGE_END})", re.IGNORECASE),
)

DATE_RANGE = re.compile(
    rf"({_MONTH}\s+\d{{4}}|\d{{1,2}}/\d{{4}}|\d{{4}})\s*[-–—]\s*({_MONTH}\s+\d{{4}}|\d{{1,2}}/\d{{4}}|\d{{4}}|{_RANGE_END})",
    re.IGNORECASE,
)

_SENIORITY = "Senior|Junior|Lead|Principal|Staff|Associate|Mid|Entry"
_ROLE_NOUNS = (
    "Engineer|Developer|Manager|Analyst|Designer|Specialist|Architect|Consultant|Programmer|"
    "Coordinator|Assistant|Director|Officer|Executive|Representative|Intern|Trainee|Scientist|Lead"
)

POSITION_PATTERNS = (
    re.compile(rf"\b(?=[A-Z])((?:(?:{_SENIORITY})[ \t]+)?(?:[A-Z][A-Za-z]*[ \t]+)*?(?i:{_ROLE_NOUNS}))\b"),
)

_CAP_WORD = r"[A-Z][A-Za-z&.'-]*"
_ORG_SUFFIX = "Incorporated|Inc|LLC|Ltd|Corporation|Corp|Company|Co|Technologies|Systems|Solutions|Group|Labs"
_ACADEMIC_SUFFIX = "University|College|Institute|School"

COMPANY_PATTERNS = (
    re.compile(rf"\b({_CAP_WORD}(?:[ \t]+(?:&[ \t]+)?{_CAP_WORD})*?(?:,?[ \t]+(?:{_ORG_SUFFIX})\b\.?)+)"),
    re.compile(rf"\b({_CAP_WORD}(?:[ \t]+(?:of[ \t]+)?{_CAP_WORD})*?[ \t]+(?:{_ACADEMIC_SUFFIX}))\b"),
)
COMPANY_FALLBACK = re.compile(r"^([A-Z][a-zA-Z\s&.,'-]{3,})")

# separators left behind once the duration or title is cut out of a line
_LINE_JUNK = " \t-–—|,@:"

MIN_COMPANY_LENGTH = 4
MAX_COMPANY_LENGTH = 49
LONG_LINE = 30

# --- education ---

DEGREE_PATTERNS = (
    re.compile(r"\b(?:Bachelor|Master|PhD|Ph\.D|Doctorate|Diploma|Certificate)(?:'s)?[ \t\w]*", re.IGNORECASE),
    re.compile(r"\b(?:M\.B\.A|MBA|B\.Tech|M\.Tech|B\.Sc|M\.Sc|B\.S|B\.A|M\.S|M\.A|B\.E|M\.E)\.?(?![A-Za-z])"),
)

_INST_WORD = r"[A-Z][\w.&'-]*"
_INST_NOUN = "University|College|Institute|School|Academy|Polytechnic"

INSTITUTION_PATTERNS = (
    re.compile(
        rf"\b(?:{_INST_WORD}[ \t]+(?:(?:of|and|for|the|&)[ \t]+)*)+(?:{_INST_NOUN})\b"
        rf"(?:[ \t]+of(?:[ \t]+{_INST_WORD})+)?"
    ),
    re.compile(rf"\b(?:{_INST_NOUN})[ \t]+of(?:[ \t]+(?:the[ \t]+)?{_INST_WORD})+"),
)

_DISCIPLINES = (
    "Engineering|Science|Sciences|Arts|Business|Management|Computer|Information|Technology|"
    "Mathematics|Physics|Chemistry|Biology|Economics|Finance|Marketing|Accounting|Law|Medicine|"
    "Education|Administration|Design|Studies"
)
_FIELD = rf"((?:[A-Z][a-zA-Z]*[ \t]+(?:(?:and|&)[ \t]+)?)*(?:{_DISCIPLINES}))\b"

FIELD_PATTERNS = (
    re.compile(rf"\b(?:[Mm]ajor(?:ing)?[ \t]+in|in)[ \t]+{_FIELD}"),
    re.compile(rf"\bof[ \t]+{_FIELD}"),
    re.compile(rf"\b{_FIELD}"),
)

# --- certificates ---

_CERT_ROLES = "Professional|Associate|Expert|Specialist|Developer|Architect|Administrator|Engineer|Practitioner"

CERT_PATTERNS = (
    re.compile(
        r"\b(?:AWS|Google|Microsoft|Oracle|Cisco|Salesforce|Adobe|IBM|Red Hat|VMware)\b[\s\w-]*?"
        rf"\b(?:Certified|Certification|Certificate)\b(?:[\s\w-]*?\b(?:{_CERT_ROLES})\b)?",
        re.IGNORECASE,
    ),
    re.compile(rf"(?i:\b(?:Certified|Certification|Certificate|License))[ \t]+[A-Z][a-zA-Z \t]*?\b(?:{_CERT_ROLES})\b"),
)
CERT_PREFIX = re.compile(r"^(?:certified|certification|certificate|licensed|license)\b\s*", re.IGNORECASE)

MIN_CERT_LENGTH = 5
MAX_CERT_LENGTH = 100
MIN_CERT_LINE = 10


def _sentence(parts: List[str]) -> str:
    return " ".join(p.rstrip(".").strip() + "." for p in parts if p.strip())


# --- skills / keywords / email ---

def extract_skills(text: str) -> List[str]:
    """
    Lexicon skills found in the text, first-found order.

    A dedicated skills section is read loosely (substring containment per
    fragment and per capitalized term), then the whole document is scanned
    with boundary-safe patterns.
    """
    found = []
    section = find_section(text, SKILL_SECTION_HEADERS)
    if section:
        fragments = [f.lower() for f in split_fragments(section, SKILL_DELIMITERS) if len(f) > 1]
        for skill in TECHNICAL_SKILLS:
            if any(skill in fragment for fragment in fragments):
                found.append(skill)

        for term in CAPITALIZED_WORD.findall(section):
            term_lower = term.lower()
            for skill in TECHNICAL_SKILLS:
                if skill == term_lower or skill in term_lower:
                    found.append(skill)
                    break

    for skill, pattern in SKILL_PATTERNS.items():
        if pattern.search(text):
            found.append(skill)

    return dedupe(found)


def extract_keywords(text: str) -> List[str]:
    lower = text.lower()
    keywords = [phrase.lower() for phrase in CAPITALIZED_PHRASE.findall(text)][:CAPITALIZED_TERM_CAP]
    keywords += [skill for skill in TECHNICAL_SKILLS if skill in lower]
    keywords += YEAR.findall(text)
    return dedupe(keywords)[:KEYWORD_CAP]


def extract_email(text: str) -> str:
    match = EMAIL.search(text)
    return match.group(0).lower() if match else ""


# --- experience ---

class ExperienceAccumulator:
    """
    Partially built experience entry for a left-to-right scan over section lines.

    ``flush`` emits the current entry when it has a company or a position and
    then resets. A duration line completes the entry being built unless that
    entry already has dates, in which case it opens a new one.
    """

    def __init__(self):
        self.entries: List[ExperienceEntry] = []
        self._reset()

    def _reset(self):
        self.company = ""
        self.position = ""
        self.duration = ""
        self.description: List[str] = []

    @property
    def has_identity(self) -> bool:
        return bool(self.company or self.position)

    def flush(self):
        if self.has_identity:
            self.entries.append(ExperienceEntry(
                company=self.company or "Unknown",
                position=self.position or "Unknown",
                duration=self.duration or "Unknown",
                description=_sentence(self.description),
            ))
        self._reset()

    def opens_new_role(self, segment: str, anchored: bool = False) -> bool:
        """
        A title or suffixed company whose field is already filled belongs to the next job.
        With ``anchored`` the name must open the segment, as on a heading line.
        """
        segment = segment.strip(_LINE_JUNK)
        if self.position:
            position = first_match(POSITION_PATTERNS, segment)
            if position and (position.start() == 0 or not anchored):
                return True
        if self.company:
            company = _match_company(segment, allow_fallback=False)
            return bool(company) and (segment.startswith(company) or not anchored)
        return False

    def start(self, duration: str, segment: str = ""):
        """
        Attach ``duration`` to the entry being built, or flush it first when it
        already has dates or ``segment`` (the rest of the line) names another role.
        """
        if self.duration or self.opens_new_role(segment):
            self.flush()
        self.duration = duration

    def feed(self, line: str):
        if BULLET_LINE.match(line):
            self.description.append(strip_bullet(line))
            return

        rest = line
        duration = first_match(DURATION_PATTERNS, line)
        if duration:
            rest = line.replace(duration.group(0), " ", 1)
            self.start(duration.group(0), rest)
        elif self.duration and self.opens_new_role(line, anchored=True):
            # company/title lines that come before their own dates
            self.flush()

        found_position = False
        if not self.position:
            position = first_match(POSITION_PATTERNS, rest)
            if position:
                self.position = position.group(1).strip()
                rest = rest.replace(position.group(1), " ", 1)
                found_position = True

        found_company = False
        if not self.company:
            company = _match_company(rest.strip(_LINE_JUNK), allow_fallback=not found_position)
            if company:
                self.company = company
                found_company = True

        if len(line) > LONG_LINE and not (duration or found_position or found_company):
            self.description.append(line)


def _match_company(segment: str, allow_fallback: bool = True) -> Optional[str]:
    patterns = COMPANY_PATTERNS + ((COMPANY_FALLBACK,) if allow_fallback else ())
    for pattern in patterns:
        match = pattern.search(segment)
        if match:
            candidate = match.group(1).strip().rstrip(",")
            if MIN_COMPANY_LENGTH <= len(candidate) <= MAX_COMPANY_LENGTH:
                return candidate
    return None


def extract_experience_from_text(text: str) -> List[ExperienceEntry]:
    """Whole-document pass: every date-range line becomes an entry titled by the rest of that line."""
    lines = lines_of(text, min_length=5)
    entries = []
    for i, line in enumerate(lines):
        match = DATE_RANGE.search(line)
        if not match:
            continue
        description = []
        for follow in lines[i + 1:i + 5]:
            if BULLET_LINE.match(follow) or len(follow) > 20:
                description.append(strip_bullet(follow))
            else:
                break
        entries.append(ExperienceEntry(
            company="Unknown",
            position=line.replace(match.group(0), "", 1).strip(_LINE_JUNK) or "Unknown",
            duration=match.group(0),
            description=_sentence(description),
        ))
    return entries


def extract_experience(text: str) -> List[ExperienceEntry]:
    section = find_section(text, EXPERIENCE_SECTION_HEADERS)
    if section:
        acc = ExperienceAccumulator()
        for line in lines_of(section, min_length=3):
            acc.feed(line)
        acc.flush()
        if acc.entries:
            return acc.entries
    return extract_experience_from_text(text)


# --- education ---

def _is_education_line(line: str) -> bool:
    lower = line.lower()
    return any(k in lower for k in DEGREE_KEYWORDS) or any(k in lower for k in INSTITUTION_KEYWORDS)


def extract_education(text: str) -> List[EducationEntry]:
    section = find_section(text, EDUCATION_SECTION_HEADERS)
    if section:
        candidates = lines_of(section, min_length=3)
    else:
        candidates = [
            line for line in lines_of(text)
            if any(k in line.lower() for k in DEGREE_KEYWORDS + ("university", "college"))
        ]

    entries = []
    for line in candidates:
        if not _is_education_line(line):
            continue

        degree = first_match(DEGREE_PATTERNS, line)
        institution = first_match(INSTITUTION_PATTERNS, line)
        if not (degree or institution):
            continue

        year = YEAR.search(line)
        field = first_match(FIELD_PATTERNS, line)

        if degree:
            degree_text = degree.group(0).strip()
        else:
            degree_text = line.split(",")[0].strip() or " ".join(line.split()[:3])

        entries.append(EducationEntry(
            degree=degree_text,
            institution=institution.group(0).strip() if institution else "",
            year=year.group(0) if year else "",
            field=field.group(1).strip() if field else "",
        ))
    return entries


# --- certificates ---

def _clean_certificate(fragment: str) -> str:
    return CERT_PREFIX.sub("", strip_bullet(fragment)).strip()


def _certificate_key(name: str) -> str:
    return " ".join(CERT_PREFIX.sub("", name.lower()).split())


def _valid_certificate(name: str) -> bool:
    return MIN_CERT_LENGTH < len(name) < MAX_CERT_LENGTH


def extract_certificates(text: str) -> List[str]:
    found = []

    section = find_section(text, CERTIFICATE_SECTION_HEADERS)
    if section:
        for fragment in split_fragments(section, CERT_DELIMITERS):
            if len(fragment) <= 3:
                continue
            lower = fragment.lower()
            if any(k in lower for k in CERT_KEYWORDS) or any(v in lower for v in CERT_VENDORS):
                name = _clean_certificate(fragment)
                if _valid_certificate(name):
                    found.append(name)

    headers = set(CERTIFICATE_SECTION_HEADERS)
    seen = {_certificate_key(name) for name in found}
    for line in lines_of(text, min_length=MIN_CERT_LINE):
        lower = line.lower()
        if not any(k in lower for k in CERT_KEYWORDS) or lower.rstrip(" :") in headers:
            continue
        # already taken whole from the section
        if _certificate_key(_clean_certificate(line)) in seen:
            continue
        match = first_match(CERT_PATTERNS, line)
        name = match.group(0).strip() if match else _clean_certificate(line)
        if _valid_certificate(name):
            found.append(name)

    return dedupe(found, key=_certificate_key)


def parse_resume(text: str) -> ResumeProfile:
    """Build a ``ResumeProfile`` from raw resume text. Empty or unreadable text gives an empty profile."""
    text = text if isinstance(text, str) else ""
    if not text.strip():
        return ResumeProfile()

    profile = ResumeProfile(
        skills=extract_skills(text),
        keywords=extract_keywords(text),
        email=extract_email(text),
        experience=extract_experience(text),
        education=extract_education(text),
        certificates=extract_certificates(text),
    )
    logger.debug(
        f"Parsed resume: {len(profile.skills)} skills, {len(profile.keywords)} keywords, "
        f"{len(profile.experience)} experience, {len(profile.education)} education, "
        f"{len(profile.certificates)} certificates"
    )
    return profile
