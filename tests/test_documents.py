"""Tests for the document generator flow"""

from datetime import date

import pytest

from jurisai.models import Document, DocumentStatus, DocumentType
from jurisai.services.documents import DocumentGenerator
from jurisai.services.workspace import FailureKind


@pytest.fixture
def generator(store, invoker):
    return DocumentGenerator(store, invoker)


class TestGenerate:

    async def test_generate_without_internet(self, generator, model, matter):
        model.queue("# DEFENCE\n1. The defendant denies liability.")
        outcome = await generator.generate(matter.id, "Defence", "Deny breach; notice never received")
        assert outcome.ok
        assert generator.document_type == DocumentType.DEFENCE
        assert model.last_kwargs["web_search"] is False
        assert "## Briefing Notes\nDeny breach" in model.last_prompt
        assert generator.workspace.has_unsaved_changes

    async def test_requires_notes(self, generator, model, matter):
        outcome = await generator.generate(matter.id, "Defence", "  ")
        assert outcome.failure == FailureKind.VALIDATION
        assert "briefing notes" in outcome.message
        assert model.calls == []

    async def test_requires_matter(self, generator, model):
        outcome = await generator.generate(None, "Defence", "notes")
        assert outcome.failure == FailureKind.VALIDATION
        assert model.calls == []

    async def test_invalid_document_type(self, generator, matter):
        outcome = await generator.generate(matter.id, "Limerick", "notes")
        assert outcome.failure == FailureKind.VALIDATION


class TestSave:

    async def test_default_title(self, generator, store, matter):
        await generator.generate(matter.id, "Skeleton Argument", "notes")
        outcome = await generator.save(today=date(2024, 3, 5))
        saved = outcome.value
        assert saved.title == "Skeleton Argument - 05/03/2024"
        assert saved.status == DocumentStatus.DRAFT
        assert Document.model_validate(store.get("Document", saved.id)).content == "Generated text"
        assert not generator.workspace.has_unsaved_changes

    async def test_custom_title_and_status(self, generator, matter):
        await generator.generate(matter.id, "Case Summary", "notes", title="Summary for counsel")
        saved = (await generator.save(status="Final")).value
        assert saved.title == "Summary for counsel"
        assert saved.status == DocumentStatus.FINAL

    async def test_one_record_per_generation(self, generator, store, matter):
        await generator.generate(matter.id, "Defence", "notes")
        assert (await generator.save()).ok
        second = await generator.save()
        assert second.failure == FailureKind.VALIDATION
        assert len(store.list("Document")) == 1

    async def test_save_before_generate(self, generator):
        outcome = await generator.save()
        assert outcome.failure == FailureKind.VALIDATION


class TestExport:

    async def test_export_pdf(self, generator, matter, tmp_path):
        await generator.generate(matter.id, "Defence", "notes")
        await generator.save(today=date(2024, 1, 2))
        path = generator.export_pdf(str(tmp_path / "defence.pdf"))
        assert path.exists()
        assert path.read_bytes().startswith(b"%PDF")

    async def test_export_unsaved_draft_to_export_dir(self, generator, model, matter):
        model.queue("# Heading\n\n- **Bold** point\n\nParagraph")
        await generator.generate(matter.id, "Legal Opinion", "notes")
        path = generator.export_pdf()
        assert path.exists()
        assert path.parent.name == "exports"

    async def test_untitled_draft_title_from_first_line(self, generator, model, matter, monkeypatch):
        monkeypatch.setenv("TITLE_MAX_LENGTH", "12")
        model.queue("\n## Skeleton Argument for the Claimant\n\n1. Introduction")
        await generator.generate(matter.id, "Skeleton Argument", "notes")
        assert generator.draft_title() == "Skeleton Arg"

    async def test_blank_draft_title_falls_back_to_type(self, generator, model, matter):
        model.queue("#\n\n")
        await generator.generate(matter.id, "Defence", "notes")
        assert generator.draft_title().startswith("Defence - ")
