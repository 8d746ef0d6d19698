"""
Text utilities shared by the extractor and the matcher: section lookup,
fragment splitting, tokenization and ordered pattern lists.
"""
import re
from typing import Callable, Iterable, List, NamedTuple, Optional, Pattern, Sequence

from applytrack.helpers.lexicon import STOPWORDS

CAPITALIZED_PHRASE = re.compile(r"\b[A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)*\b")
CAPITALIZED_WORD = re.compile(r"\b[A-Z][a-zA-Z]+\b")
YEAR = re.compile(r"\b(?:19|20)\d{2}\b")
BULLET_PREFIX = re.compile(r"^[-•·*]\s*")
BULLET_LINE = re.compile(r"^[-•·*]\s")

# A section ends before a blank line followed by an ALL-CAPS header line, or at end of text
_SECTION_END = r"(?=\n[ \t]*\n[ \t]*[A-Z][A-Z &/]+:?[ \t]*(?:\n|\Z)|\Z)"

MIN_SECTION_LENGTH = 10


class SectionStrategy(NamedTuple):
    """One way of locating a section body after a header alias."""
    name: str
    template: str
    flags: int = 0

    def compile(self, header: str) -> Pattern[str]:
        return re.compile(self.template.format(header=re.escape(header), end=_SECTION_END), self.flags)


SECTION_STRATEGIES = (
    SectionStrategy("line_start", r"^(?i:{header})[\s:]*\n([\s\S]*?){end}", re.MULTILINE),
    SectionStrategy("anywhere", r"(?<!\w)(?i:{header})[\s:]*\n([\s\S]*?){end}"),
    SectionStrategy("inline", r"(?<!\w)(?i:{header})[\s:]*([\s\S]*?){end}"),
)


def find_section(text: str, headers: Sequence[str], strategies=SECTION_STRATEGIES) -> Optional[str]:
    """
    Locate the body of the first section whose header matches one of ``headers``.

    Headers are tried in order; for each header every strategy is tried from
    strictest to loosest. The first body longer than ``MIN_SECTION_LENGTH``
    characters wins.

    Returns:
        The stripped section body, or None when nothing qualifies.
    """
    if not text:
        return None
    for header in headers:
        for strategy in strategies:
            match = strategy.compile(header).search(text)
            if match and match.group(1):
                body = match.group(1).strip()
                if len(body) > MIN_SECTION_LENGTH:
                    return body
    return None


def first_match(patterns: Iterable[Pattern[str]], text: str):
    """Return the first successful match from an ordered pattern list, or None."""
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match
    return None


def split_fragments(text: str, delimiters: Pattern[str]) -> List[str]:
    return [part.strip() for part in delimiters.split(text) if part.strip()]


def strip_bullet(line: str) -> str:
    return BULLET_PREFIX.sub("", line).strip()


def dedupe(items: Iterable[str], key: Optional[Callable[[str], str]] = None) -> List[str]:
    """Drop repeats while keeping first-seen order."""
    seen = set()
    out = []
    for item in items:
        marker = key(item) if key else item
        if marker in seen:
            continue
        seen.add(marker)
        out.append(item)
    return out


def normalize_tokens(text: str) -> List[str]:
    """Lowercase, replace non-alphanumerics with spaces, drop short tokens and stopwords."""
    cleaned = re.sub(r"[^a-z0-9\s]", " ", (text or "").lower())
    return [w for w in cleaned.split() if len(w) > 2 and w not in STOPWORDS]


def lines_of(text: str, min_length: int = 0) -> List[str]:
    return [line.strip() for line in (text or "").split("\n") if len(line.strip()) > min_length]
