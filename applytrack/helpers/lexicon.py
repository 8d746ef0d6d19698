"""
Read-only lexicons shared by the resume extractor and the JD matcher.

Everything here is built once at import time and never mutated.
"""
import re
from typing import Dict, Pattern, Tuple

TECHNICAL_SKILLS: Tuple[str, ...] = (
    # Programming languages
    "javascript", "typescript", "python", "java", "c++", "c#", "go", "rust", "php", "ruby",
    "swift", "kotlin", "scala", "r", "matlab", "perl", "shell", "bash", "powershell",
    # Frontend
    "react", "vue", "angular", "svelte", "next.js", "nuxt", "gatsby", "remix",
    "html", "css", "sass", "scss", "less", "tailwind", "bootstrap", "material-ui", "ant design",
    # Backend
    "node", "express", "django", "flask", "fastapi", "spring", "spring boot", "laravel", "symfony",
    "nest.js", "koa", "hapi", "rails", "asp.net", "dotnet", ".net",
    # Databases
    "mongodb", "postgresql", "mysql", "mariadb", "sqlite", "oracle", "sql server", "redis",
    "elasticsearch", "cassandra", "dynamodb", "couchdb", "neo4j", "firebase", "supabase",
    # Cloud & DevOps
    "aws", "azure", "gcp", "google cloud", "docker", "kubernetes", "terraform", "ansible", "chef", "puppet",
    "jenkins", "github actions", "gitlab ci", "circleci", "travis ci", "azure devops",
    "git", "svn", "mercurial", "ci/cd", "continuous integration", "continuous deployment",
    # Tools & technologies
    "rest", "graphql", "soap", "microservices", "api", "web services", "json", "xml", "yaml",
    "linux", "unix", "windows", "macos", "nginx", "apache", "iis",
    # Data & analytics
    "machine learning", "ml", "ai", "artificial intelligence", "data science", "analytics", "big data",
    "tensorflow", "pytorch", "keras", "scikit-learn", "pandas", "numpy", "jupyter", "tableau", "power bi",
    # Methodologies & testing
    "agile", "scrum", "kanban", "devops", "testing", "tdd", "bdd", "unit testing", "integration testing",
    "selenium", "cypress", "jest", "mocha", "jasmine", "pytest", "junit",
    # Mobile
    "react native", "flutter", "ionic", "xamarin", "android", "ios",
    # Other
    "blockchain", "ethereum", "solidity", "web3", "cybersecurity", "penetration testing",
)


def _skill_pattern(skill: str) -> Pattern[str]:
    # \b fails next to symbols ("c++", ".net"), so bound on word characters instead
    return re.compile(r"(?<!\w)" + re.escape(skill) + r"(?!\w)", re.IGNORECASE)


SKILL_PATTERNS: Dict[str, Pattern[str]] = {skill: _skill_pattern(skill) for skill in TECHNICAL_SKILLS}

STOPWORDS = frozenset(["the", "and", "or", "but", "for", "with", "from", "this", "that"])

DEGREE_KEYWORDS: Tuple[str, ...] = ("bachelor", "master", "phd", "doctorate", "diploma", "certificate", "degree")
INSTITUTION_KEYWORDS: Tuple[str, ...] = ("university", "college", "institute", "school")

CERT_KEYWORDS: Tuple[str, ...] = ("certified", "certification", "certificate", "license", "accredited")
CERT_VENDORS: Tuple[str, ...] = ("aws", "google", "microsoft", "oracle", "cisco")

REQUIREMENT_KEYWORDS: Tuple[str, ...] = (
    "experience", "years", "required", "preferred", "must have", "should have", "nice to have",
    "knowledge", "understanding", "familiar", "proficient", "expert", "advanced", "intermediate",
    "bachelor", "master", "degree", "certification", "diploma", "phd", "doctorate",
    "responsibilities", "duties", "qualifications", "requirements", "skills", "abilities",
    "team", "collaboration", "communication", "leadership", "management", "problem solving",
)

# Section header aliases, tried in order
SKILL_SECTION_HEADERS: Tuple[str, ...] = (
    "skills", "technical skills", "core competencies", "expertise", "technologies",
    "tools", "programming languages", "languages",
)
EXPERIENCE_SECTION_HEADERS: Tuple[str, ...] = (
    "experience", "work experience", "employment", "professional experience",
    "work history", "career", "positions",
)
EDUCATION_SECTION_HEADERS: Tuple[str, ...] = (
    "education", "academic", "qualifications", "academic background", "educational background",
)
CERTIFICATE_SECTION_HEADERS: Tuple[str, ...] = (
    "certifications", "certificates", "licenses", "credentials",
    "professional certifications", "certifications & licenses",
)

KEYWORD_CAP = 30
CAPITALIZED_TERM_CAP = 20
