"""Tests for result projection helpers"""

from datetime import date

import pytest

from jurisai.models import (
    AuthorityType,
    CoachingFeedback,
    DocumentType,
    FoundAuthority,
    StructuredArgument,
)
from jurisai.services.projector import (
    ARGUMENT_SECTIONS,
    COACHING_SECTIONS,
    authority_record,
    default_document_title,
    derive_title,
    map_authority_type,
    project_sections,
)


class TestTitles:

    def test_derive_title_strips_heading(self):
        assert derive_title("\n## Skeleton Argument for the Claimant\nbody") == "Skeleton Argument for the Claimant"

    def test_derive_title_truncates(self):
        assert len(derive_title("# " + "x" * 300)) == 100

    def test_derive_title_empty(self):
        assert derive_title("") == ""

    def test_default_document_title(self):
        assert default_document_title(DocumentType.DEFENCE, date(2025, 12, 1)) == "Defence - 01/12/2025"


class TestAuthorityMapping:

    @pytest.mark.parametrize("source, expected", [
        ("Case Law", AuthorityType.CASE_LAW),
        ("case law", AuthorityType.OTHER),
        ("Statute", AuthorityType.STATUTE),
        ("Primary Statute", AuthorityType.STATUTE),
        ("Statutory Instrument", AuthorityType.OTHER),
        (None, AuthorityType.OTHER),
    ])
    def test_map_authority_type(self, source, expected):
        assert map_authority_type(source) == expected

    def test_authority_record_without_quote(self):
        record = authority_record(FoundAuthority(citation="[2000] 1 WLR 1"))
        assert record.title == "[2000] 1 WLR 1"
        assert record.key_quotes == []
        assert record.tags == []
        assert record.matter_id is None


class TestProjectSections:

    def test_empty_sections_suppressed(self):
        feedback = CoachingFeedback(strengths=["Clear"], overall_assessment="")
        sections = project_sections(feedback, COACHING_SECTIONS)
        assert [s.key for s in sections] == ["strengths"]
        assert sections[0].items == ["Clear"]

    def test_enum_rendered_as_value(self):
        result = StructuredArgument(overall_strength="Moderate", summary="Theory")
        sections = {s.key: s for s in project_sections(result, ARGUMENT_SECTIONS)}
        assert sections["overall_strength"].text == "Moderate"
        assert sections["summary"].title == "Summary"

    def test_nested_model_with_no_values_suppressed(self):
        feedback = CoachingFeedback(practice_direction_check={"issues": []})
        assert project_sections(feedback, COACHING_SECTIONS) == []
