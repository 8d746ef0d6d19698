import pytest

from applytrack.models.models import EducationEntry, ExperienceEntry, ResumeProfile
from applytrack.services.extractor import (
    ExperienceAccumulator,
    extract_certificates,
    extract_education,
    extract_email,
    extract_experience,
    extract_keywords,
    extract_skills,
    parse_resume,
)

EXPERIENCE_SECTION = (
    "EXPERIENCE\n"
    "Senior Software Engineer at Acme Corp  Jan 2020 - Present\n"
    "- Built REST APIs for billing\n"
    "- Led migration to Kubernetes\n"
    "Software Developer, Beta Systems  2017 - 2019\n"
    "- Maintained internal tools\n"
)

DATES_BELOW_TITLE_SECTION = (
    "PROFESSIONAL EXPERIENCE\n"
    "Acme Technologies Inc.\n"
    "Senior Backend Engineer\n"
    "March 2019 – Present\n"
    "- Designed microservices in Python\n"
    "\n"
    "Globex LLC\n"
    "Software Developer\n"
    "06/2016 - 02/2019\n"
    "- Maintained Django monoliths\n"
)


class TestSkillsAndKeywords:
    """Skills, keywords and email"""

    def test_skills_from_inline_section(self):
        profile = parse_resume("Skills: Python, React, AWS\nemail: a@b.com")
        assert {"python", "react", "aws"} <= set(profile.skills)

    def test_skills_with_symbols(self):
        skills = extract_skills("Languages used daily: C++ and C#, plus .NET")
        assert {"c++", "c#", ".net"} <= set(skills)

    def test_skill_scan_respects_word_edges(self):
        skills = extract_skills("I like JavaScript")
        assert "javascript" in skills
        assert "java" not in skills

    def test_typescript_found_anywhere(self):
        assert "typescript" in extract_skills("Shipped front ends in TypeScript for five years")

    def test_skills_have_no_repeats(self):
        skills = extract_skills("SKILLS\nPython, python, PYTHON, Docker\n\nPython again with Docker")
        assert len(skills) == len(set(skills))

    def test_keywords(self):
        keywords = extract_keywords("Worked at Acme Corp in 2019 using python")
        assert "acme corp" in keywords
        assert "python" in keywords
        assert "2019" in keywords

    def test_keywords_capped(self):
        """Capitalized terms are limited to 20 and the whole list to 30"""
        words = " x ".join("Z" + "a" * i for i in range(1, 60))
        years = " ".join(str(1990 + i) for i in range(30))
        keywords = extract_keywords(f"{words}\n{years}")
        assert len(keywords) == 30
        assert keywords[0] == "za"
        assert keywords[19] == "z" + "a" * 20
        assert keywords[20] == "1990"

    def test_email_first_lowercased(self):
        assert extract_email("Contact: John.Doe@Example.COM or jd@x.org") == "john.doe@example.com"

    def test_email_missing(self):
        assert parse_resume("No contact details in this resume").email == ""


class TestExperience:
    """Experience section scanning and the whole-document fallback"""

    def test_section_entries(self):
        entries = extract_experience(EXPERIENCE_SECTION)
        assert entries == [
            ExperienceEntry(
                company="Acme Corp",
                position="Senior Software Engineer",
                duration="Jan 2020 - Present",
                description="Built REST APIs for billing. Led migration to Kubernetes.",
            ),
            ExperienceEntry(
                company="Beta Systems",
                position="Software Developer",
                duration="2017 - 2019",
                description="Maintained internal tools.",
            ),
        ]

    def test_entry_keeps_its_own_duration(self):
        """The first entry is flushed with its own dates, not the next entry's"""
        entries = extract_experience(EXPERIENCE_SECTION)
        assert [e.duration for e in entries] == ["Jan 2020 - Present", "2017 - 2019"]

    def test_last_entry_flushed_once(self):
        entries = extract_experience(EXPERIENCE_SECTION)
        assert len(entries) == 2

    def test_dates_below_company_and_title(self):
        """Each job keeps the dates and bullets listed under its own heading lines"""
        entries = extract_experience(DATES_BELOW_TITLE_SECTION)
        assert entries == [
            ExperienceEntry(
                company="Acme Technologies Inc.",
                position="Senior Backend Engineer",
                duration="March 2019 – Present",
                description="Designed microservices in Python.",
            ),
            ExperienceEntry(
                company="Globex LLC",
                position="Software Developer",
                duration="06/2016 - 02/2019",
                description="Maintained Django monoliths.",
            ),
        ]

    def test_company_keeps_trailing_suffixes(self):
        entries = extract_experience("EXPERIENCE\nData Analyst, Initech Solutions Group LLC 2014 - 2016\n")
        assert entries[0].company == "Initech Solutions Group LLC"
        assert entries[0].position == "Data Analyst"

    def test_fallback_without_header(self):
        entries = parse_resume("John Smith\nJan 2020 - Dec 2021 Senior Engineer\n").experience
        assert len(entries) == 1
        assert entries[0].duration == "Jan 2020 - Dec 2021"
        assert "Senior Engineer" in entries[0].position
        assert entries[0].company == "Unknown"

    def test_fallback_description_stops_at_short_line(self):
        text = (
            "2018 - 2020 Data Analyst\n"
            "- Automated weekly revenue reporting\n"
            "Built forecasting models in pandas for sales\n"
            "Hobbies\n"
            "- Climbing mountains on weekends\n"
        )
        entries = extract_experience(text)
        assert len(entries) == 1
        assert entries[0].position == "Data Analyst"
        assert entries[0].description == (
            "Automated weekly revenue reporting. Built forecasting models in pandas for sales."
        )

    def test_no_dates_no_entries(self):
        assert extract_experience("Just some words about me and nothing else") == []


class TestExperienceAccumulator:
    """Flush boundaries of the partial entry"""

    def test_entry_without_identity_is_dropped(self):
        acc = ExperienceAccumulator()
        acc.feed("Jan 2020 - Present")
        acc.flush()
        assert acc.entries == []

    def test_defaults_on_flush(self):
        acc = ExperienceAccumulator()
        acc.feed("Data Analyst")
        acc.flush()
        assert acc.entries == [ExperienceEntry(position="Data Analyst", duration="Unknown")]
        assert acc.entries[0].company == "Unknown"

    def test_long_line_goes_to_description(self):
        acc = ExperienceAccumulator()
        acc.feed("Data Analyst")
        acc.feed("responsible for quarterly revenue dashboards and forecasting")
        acc.flush()
        assert acc.entries[0].description == "responsible for quarterly revenue dashboards and forecasting."

    def test_first_position_wins(self):
        acc = ExperienceAccumulator()
        acc.feed("Data Analyst")
        acc.feed("Project Manager")
        acc.flush()
        assert acc.entries[0].position == "Data Analyst"

    def test_duration_line_starts_new_entry(self):
        acc = ExperienceAccumulator()
        acc.feed("Data Analyst")
        acc.feed("Mar 2015 - Jun 2016 Project Manager")
        acc.flush()
        assert [e.position for e in acc.entries] == ["Data Analyst", "Project Manager"]
        assert acc.entries[1].duration == "Mar 2015 - Jun 2016"

    def test_dates_line_completes_current_entry(self):
        acc = ExperienceAccumulator()
        acc.feed("Data Analyst")
        acc.feed("Mar 2015 - Jun 2016")
        acc.flush()
        assert acc.entries == [ExperienceEntry(position="Data Analyst", duration="Mar 2015 - Jun 2016")]

    def test_second_dates_line_opens_new_entry(self):
        acc = ExperienceAccumulator()
        acc.feed("Data Analyst")
        acc.feed("Mar 2015 - Jun 2016")
        acc.feed("2012 - 2015")
        acc.flush()
        assert [e.duration for e in acc.entries] == ["Mar 2015 - Jun 2016"]
        assert acc.duration == ""

    def test_company_mentioned_mid_line_stays_in_description(self):
        acc = ExperienceAccumulator()
        acc.feed("Data Analyst at Acme Corp")
        acc.feed("2015 - 2016")
        acc.feed("Partnered with Initech Corp on weekly revenue reports")
        acc.flush()
        assert acc.entries == [ExperienceEntry(
            company="Acme Corp",
            position="Data Analyst",
            duration="2015 - 2016",
            description="Partnered with Initech Corp on weekly revenue reports.",
        )]

    def test_title_after_dated_entry_opens_new_entry(self):
        acc = ExperienceAccumulator()
        acc.feed("Data Analyst")
        acc.feed("Mar 2015 - Jun 2016")
        acc.feed("Project Manager")
        acc.feed("2012 - 2015")
        acc.flush()
        assert [(e.position, e.duration) for e in acc.entries] == [
            ("Data Analyst", "Mar 2015 - Jun 2016"),
            ("Project Manager", "2012 - 2015"),
        ]


class TestEducation:
    """Education entries"""

    def test_section_entry(self):
        text = "EDUCATION\nBachelor of Science in Computer Science, Stanford University, 2018"
        assert extract_education(text) == [EducationEntry(
            degree="Bachelor of Science in Computer Science",
            institution="Stanford University",
            year="2018",
            field="Computer Science",
        )]

    def test_lines_outside_section(self):
        text = "Jane Doe\nB.S. Computer Science, University of Michigan 2016\nSkills: Python"
        assert extract_education(text) == [EducationEntry(
            degree="B.S.",
            institution="University of Michigan",
            year="2016",
            field="Computer Science",
        )]

    def test_degree_falls_back_to_first_segment(self):
        text = "EDUCATION\nGraduated top of class, Springfield College"
        entries = extract_education(text)
        assert len(entries) == 1
        assert entries[0].degree == "Graduated top of class"
        assert entries[0].institution == "Springfield College"
        assert entries[0].year == ""

    def test_line_needs_degree_or_institution(self):
        assert extract_education("EDUCATION\nSelf-taught through many online courses") == []


class TestCertificates:
    """Certificates from a section and from the whole document"""

    def test_dedup_across_casing(self):
        text = (
            "Jane Doe\n"
            "AWS Certified Solutions Architect\n"
            "Renewed the aws certified solutions architect credential in 2023\n"
        )
        assert extract_certificates(text) == ["AWS Certified Solutions Architect"]

    def test_section_fragments(self):
        text = (
            "CERTIFICATIONS\n"
            "- Certified Kubernetes Administrator\n"
            "- Google Cloud Professional Data Engineer\n"
        )
        assert extract_certificates(text) == [
            "Kubernetes Administrator",
            "Google Cloud Professional Data Engineer",
        ]

    def test_section_line_not_repeated_by_document_scan(self):
        text = "CERTIFICATIONS\nAWS Certified Solutions Architect - Associate\n"
        assert extract_certificates(text) == ["AWS Certified Solutions Architect - Associate"]

    def test_no_certificates(self):
        assert extract_certificates("Plain resume with nothing official") == []


class TestParseResume:
    """Whole-profile behavior"""

    @pytest.mark.parametrize("text", ["", "   \n\t", None])
    def test_empty_input(self, text):
        assert parse_resume(text) == ResumeProfile()

    def test_garbage_does_not_raise(self):
        profile = parse_resume("\x00\x01\x02ÿþ garbage ### @@@ ---\n\n\n")
        assert isinstance(profile, ResumeProfile)

    def test_deterministic(self):
        text = EXPERIENCE_SECTION + "\nSKILLS\nPython, Go, Docker\n\nEDUCATION\nMaster of Science, MIT Institute 2012"
        assert parse_resume(text).model_dump() == parse_resume(text).model_dump()

    def test_serializes_with_camel_case(self):
        profile = parse_resume(EXPERIENCE_SECTION)
        dumped = profile.model_dump(by_alias=True)
        assert set(dumped) == {"skills", "keywords", "email", "experience", "education", "certificates"}
