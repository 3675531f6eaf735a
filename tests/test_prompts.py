"""Tests for context assembly and prompt compilation"""

import pytest

from conftest import create_authority, create_matter
from jurisai.errors import ActionValidationError, RecordNotFoundError, StorageError
from jurisai.models import DocumentType, FactExpansions, LegalAuthority, Position, ValidityStatus
from jurisai.services.context import ContextAssembler, Task, UploadedDocument
from jurisai.services.prompts import (
    COURT_LOCK_INSTRUCTION,
    compile_argument,
    compile_coaching,
    compile_document,
    compile_fact_correction,
    compile_judgment,
    compile_research,
    format_authority,
)


def _argument_context(store, matter, **kwargs):
    params = {
        "position": Position.CLAIMANT,
        "fact_pattern": "The roof leaked for six months.",
    }
    params.update(kwargs)
    return ContextAssembler(store).assemble(Task.ARGUMENT, matter_id=matter.id, **params)


class TestContextAssembler:

    def test_argument_requires_matter(self, store):
        with pytest.raises(ActionValidationError):
            ContextAssembler(store).assemble(Task.ARGUMENT)

    def test_document_requires_matter(self, store):
        with pytest.raises(ActionValidationError):
            ContextAssembler(store).assemble(Task.DOCUMENT, briefing_notes="notes")

    def test_research_without_matter(self, store):
        context = ContextAssembler(store).assemble(Task.RESEARCH, research_query="duty of care")
        assert context.matter is None
        assert context.authorities == []

    def test_missing_matter_raises(self, store):
        with pytest.raises(RecordNotFoundError):
            ContextAssembler(store).assemble(Task.ARGUMENT, matter_id="nope")

    def test_loads_matter_authorities(self, store, matter):
        create_authority(store, matter.id)
        create_authority(store, None, title="Unlinked")
        context = ContextAssembler(store).assemble(Task.RESEARCH, matter_id=matter.id)
        assert context.matter.id == matter.id
        assert [a.title for a in context.authorities] == ["Donoghue v Stevenson"]

    def test_latest_argument_by_version_number(self, store, matter):
        for n in (1, 3, 2):
            store.create("Argument", {
                "matter_id": matter.id, "version_number": n,
                "position": "Claimant", "argument_text": f"v{n}",
            })
        context = ContextAssembler(store).assemble(
            Task.ARGUMENT, matter_id=matter.id, load_latest_argument=True
        )
        assert context.latest_argument.version_number == 3
        assert context.latest_argument.argument_text == "v3"

    def test_failed_authority_read_degrades(self, store, matter, monkeypatch):
        original = store.filter

        def flaky_filter(collection, criteria, sort=None, limit=None):
            if collection == "LegalAuthority":
                raise StorageError("connection reset")
            return original(collection, criteria, sort=sort, limit=limit)

        monkeypatch.setattr(store, "filter", flaky_filter)
        context = ContextAssembler(store).assemble(Task.RESEARCH, matter_id=matter.id)
        assert context.matter is not None
        assert context.authorities == []

    def test_issue_id_narrows_issues(self, store, matter):
        store.create("LegalIssue", {"matter_id": matter.id, "question": "Was there a breach?"})
        chosen = store.create("LegalIssue", {"matter_id": matter.id, "question": "Is the loss too remote?"})

        context = _argument_context(store, matter, issue_id=chosen["id"])
        assert context.issue.question == "Is the loss too remote?"
        assert len(context.issues) == 2

        text = compile_argument(context).text
        assert "Is the loss too remote?" in text
        assert "Was there a breach?" not in text

    def test_uploaded_documents_truncated(self, store, matter):
        doc = UploadedDocument(name="lease.txt", text="x" * 5000)
        context = _argument_context(store, matter, documents=[doc])
        assert len(context.uploaded_documents[0].text) == 3000


class TestArgumentPrompt:

    def test_court_lock_instruction(self, store, matter):
        compiled = compile_argument(_argument_context(store, matter))
        assert COURT_LOCK_INSTRUCTION.format(court=matter.court) in compiled.text
        assert "Do not escalate or de-escalate the court level" in compiled.text

    def test_no_court_is_rejected(self, store):
        matter = create_matter(store, court="")
        with pytest.raises(ActionValidationError, match="no court"):
            compile_argument(_argument_context(store, matter))

    def test_position_required(self, store, matter):
        with pytest.raises(ActionValidationError):
            compile_argument(_argument_context(store, matter, position=None))

    def test_mandatory_sections_always_present(self, store, matter):
        text = compile_argument(_argument_context(store, matter)).text
        for heading in ("## Court", "## Matter", "## Position", "## Fact Pattern"):
            assert heading in text

    def test_empty_conditional_sections_omitted(self, store, matter):
        text = compile_argument(_argument_context(store, matter)).text
        assert "## Chronology" not in text
        assert "## Linked Authorities" not in text
        assert "## Uploaded Source Documents" not in text
        assert "## Legal Issues Identified" not in text

    def test_expansions_and_documents_rendered(self, store, matter):
        context = _argument_context(
            store, matter,
            fact_expansions=FactExpansions(chronology="Jan: notice served"),
            documents=[UploadedDocument(name="notice.txt", text="Notice of disrepair")],
        )
        text = compile_argument(context).text
        assert "## Chronology\nJan: notice served" in text
        assert "### notice.txt\nNotice of disrepair" in text

    def test_linked_authorities_rendered(self, store, matter):
        create_authority(store, matter.id, validity="Overruled")
        text = compile_argument(_argument_context(store, matter)).text
        assert "## Linked Authorities" in text
        assert "- Donoghue v Stevenson ([1932] AC 562): A manufacturer owes" in text
        assert "[Overruled]" in text

    def test_structured_mode_sets_schema(self, store, matter):
        compiled = compile_argument(_argument_context(store, matter), structured=True)
        assert compiled.structured
        assert compiled.allow_external_context

    def test_fact_correction_disables_internet(self, store, matter):
        context = _argument_context(store, matter, argument_text="Draft")
        compiled = compile_fact_correction(context)
        assert compiled.allow_external_context is False
        assert "## Current Draft\nDraft" in compiled.text

    def test_fact_correction_needs_draft(self, store, matter):
        with pytest.raises(ActionValidationError):
            compile_fact_correction(_argument_context(store, matter))


class TestOtherPrompts:

    def test_research_prompt(self, store):
        context = ContextAssembler(store).assemble(Task.RESEARCH, research_query="occupiers liability")
        compiled = compile_research(context)
        assert "## Legal Issue/Query\noccupiers liability" in compiled.text
        assert "## Matter Context" not in compiled.text
        assert compiled.allow_external_context
        assert compiled.structured

    def test_document_prompt_has_no_internet(self, store, matter):
        context = ContextAssembler(store).assemble(Task.DOCUMENT, matter_id=matter.id, briefing_notes="Claim for repairs")
        compiled = compile_document(context, DocumentType.DEFENCE)
        assert compiled.allow_external_context is False
        assert compiled.text.startswith("Draft a robust Defence")
        assert "Generate the complete Defence:" in compiled.text

    def test_judgment_requires_text(self, store):
        context = ContextAssembler(store).assemble(Task.JUDGMENT, judgment_text="   ")
        with pytest.raises(ActionValidationError):
            compile_judgment(context)

    def test_coaching_fallbacks(self, store):
        context = ContextAssembler(store).assemble(Task.COACHING, fact_pattern="Facts")
        text = compile_coaching(context).text
        assert "## Available Authorities\nNone linked" in text
        assert "## Generated Argument\nNo argument generated yet" in text
        assert "Court: Not specified" in text


class TestFormatAuthority:

    def test_minimal_authority(self):
        authority = LegalAuthority(title="Caparo v Dickman")
        assert format_authority(authority) == "- Caparo v Dickman [Active]"

    def test_overruled_authority(self):
        authority = LegalAuthority(
            title="Anns v Merton", citation="[1978] AC 728",
            legal_principle="Two-stage test", validity=ValidityStatus.OVERRULED,
        )
        assert format_authority(authority) == "- Anns v Merton ([1978] AC 728): Two-stage test [Overruled]"
