"""Workspace API routes: stateful argument, document, judgment and coach pages"""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile
from fastapi.responses import FileResponse

from jurisai.api.deps import (
    check_outcome,
    get_entity_store,
    get_ingestion_service,
    get_invoker,
    get_workspace,
    get_workspaces,
    raise_http,
)
from jurisai.api.schemas import (
    AnalyzeJudgmentRequest,
    ArgumentDraftResponse,
    ArgumentHistoryResponse,
    CoachResponse,
    ControlInfo,
    DocumentDraftResponse,
    DraftUpdateRequest,
    GenerateArgumentRequest,
    GenerateDocumentRequest,
    JudgmentResponse,
    SaveDocumentRequest,
    SelectMatterRequest,
    WorkspaceInfo,
)
from jurisai.api.session_store import WorkspaceEntry, WorkspaceStore
from jurisai.errors import JurisError, UnsavedChangesError
from jurisai.models import Argument, Document
from jurisai.services.projector import (
    ARGUMENT_SECTIONS,
    COACHING_SECTIONS,
    JUDGMENT_SECTIONS,
    project_sections,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/workspaces", tags=["workspaces"])


def _workspace_info(entry: WorkspaceEntry) -> WorkspaceInfo:
    controls = {
        page_name: {
            name: ControlInfo(state=control.state.value, last_error=control.last_error)
            for name, control in page.workspace.controls.items()
        }
        for page_name, page in entry.pages.items()
    }
    return WorkspaceInfo(
        workspace_id=entry.workspace_id,
        has_unsaved_changes=entry.has_unsaved_changes,
        controls=controls,
        created_at=entry.created_at,
        last_active=entry.last_active,
    )


def _argument_view(entry: WorkspaceEntry) -> ArgumentDraftResponse:
    builder = entry.arguments
    draft = builder.draft
    return ArgumentDraftResponse(
        workspace_id=entry.workspace_id,
        matter_id=draft.matter_id,
        court=builder.matter.court if builder.matter else None,
        position=draft.position,
        fact_pattern=draft.fact_pattern,
        fact_expansions=draft.fact_expansions,
        argument_text=draft.argument_text,
        structured=draft.structured,
        sections=project_sections(draft.structured, ARGUMENT_SECTIONS) if draft.structured else [],
        authority_ids=draft.authority_ids,
        uploaded_documents=[d.name for d in draft.uploaded_documents],
        loaded_version=draft.loaded_version.version_number if draft.loaded_version else None,
        has_unsaved_changes=builder.workspace.has_unsaved_changes,
    )


def _document_view(entry: WorkspaceEntry) -> DocumentDraftResponse:
    generator = entry.documents
    return DocumentDraftResponse(
        workspace_id=entry.workspace_id,
        matter_id=generator.matter_id,
        document_type=generator.document_type.value if generator.document_type else None,
        title=generator.title,
        content=generator.content,
        saved=generator.saved,
        has_unsaved_changes=generator.workspace.has_unsaved_changes,
    )


def _judgment_view(entry: WorkspaceEntry) -> JudgmentResponse:
    analyzer = entry.judgments
    return JudgmentResponse(
        workspace_id=entry.workspace_id,
        filename=analyzer.filename,
        characters=len(analyzer.judgment_text),
        analysis=analyzer.analysis,
        sections=project_sections(analyzer.analysis, JUDGMENT_SECTIONS) if analyzer.analysis else [],
    )


# =========================================================
# Workspace lifecycle
# =========================================================

@router.post("", response_model=WorkspaceInfo, status_code=201)
async def create_workspace(
    workspaces: WorkspaceStore = Depends(get_workspaces),
    store=Depends(get_entity_store),
    invoker=Depends(get_invoker),
    ingestion=Depends(get_ingestion_service),
):
    entry = await workspaces.create(store, invoker, ingestion)
    logger.info(f"Opened workspace {entry.workspace_id}")
    return _workspace_info(entry)


@router.get("/{workspace_id}", response_model=WorkspaceInfo)
async def get_workspace_info(entry: WorkspaceEntry = Depends(get_workspace)):
    return _workspace_info(entry)


@router.delete("/{workspace_id}", status_code=204)
async def close_workspace(
    workspace_id: str,
    force: bool = Query(False, description="Discard unsaved work"),
    workspaces: WorkspaceStore = Depends(get_workspaces),
):
    try:
        found = await workspaces.delete(workspace_id, force=force)
    except UnsavedChangesError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not found:
        raise HTTPException(status_code=404, detail="Workspace not found")
    return Response(status_code=204)


# =========================================================
# Argument builder
# =========================================================

@router.get("/{workspace_id}/argument", response_model=ArgumentDraftResponse)
async def get_argument(entry: WorkspaceEntry = Depends(get_workspace)):
    return _argument_view(entry)


@router.post("/{workspace_id}/argument/matter", response_model=ArgumentDraftResponse)
async def select_matter(request: SelectMatterRequest, entry: WorkspaceEntry = Depends(get_workspace)):
    """Load a matter and resume its latest saved version"""
    try:
        outcome = await entry.arguments.select_matter(request.matter_id, force=request.force)
    except UnsavedChangesError as e:
        raise HTTPException(status_code=409, detail=str(e))
    check_outcome(outcome)
    return _argument_view(entry)


@router.patch("/{workspace_id}/argument", response_model=ArgumentDraftResponse)
async def update_argument(request: DraftUpdateRequest, entry: WorkspaceEntry = Depends(get_workspace)):
    try:
        entry.arguments.update_draft(
            position=request.position,
            fact_pattern=request.fact_pattern,
            **(request.fact_expansions or {}),
        )
    except JurisError as e:
        raise_http(e)
    return _argument_view(entry)


@router.post("/{workspace_id}/argument/documents", response_model=ArgumentDraftResponse)
async def attach_document(file: UploadFile = File(...), entry: WorkspaceEntry = Depends(get_workspace)):
    """Upload a source document to include in the next generation"""
    content = await file.read()
    check_outcome(await entry.arguments.attach_document(file.filename or "upload", content))
    return _argument_view(entry)


@router.post("/{workspace_id}/argument/generate", response_model=ArgumentDraftResponse)
async def generate_argument(
    request: GenerateArgumentRequest = GenerateArgumentRequest(),
    entry: WorkspaceEntry = Depends(get_workspace),
):
    check_outcome(await entry.arguments.generate(structured=request.structured))
    return _argument_view(entry)


@router.post("/{workspace_id}/argument/correct-facts", response_model=ArgumentDraftResponse)
async def correct_facts(entry: WorkspaceEntry = Depends(get_workspace)):
    check_outcome(await entry.arguments.correct_facts())
    return _argument_view(entry)


@router.post("/{workspace_id}/argument/save", response_model=Argument, status_code=201)
async def save_argument(entry: WorkspaceEntry = Depends(get_workspace)):
    """Save the draft as a new version"""
    outcome = check_outcome(await entry.arguments.save())
    return outcome.value


@router.get("/{workspace_id}/argument/history", response_model=ArgumentHistoryResponse)
async def argument_history(entry: WorkspaceEntry = Depends(get_workspace)):
    try:
        versions = entry.arguments.history()
    except JurisError as e:
        raise_http(e)
    return ArgumentHistoryResponse(matter_id=entry.arguments.draft.matter_id, versions=versions)


@router.post("/{workspace_id}/argument/coach", response_model=CoachResponse)
async def coach_argument(entry: WorkspaceEntry = Depends(get_workspace)):
    """Socratic feedback on the current draft"""
    check_outcome(await entry.arguments.coach(entry.coach))
    feedback = entry.coach.feedback
    return CoachResponse(
        workspace_id=entry.workspace_id,
        feedback=feedback,
        sections=project_sections(feedback, COACHING_SECTIONS) if feedback else [],
    )


# =========================================================
# Document generator
# =========================================================

@router.get("/{workspace_id}/document", response_model=DocumentDraftResponse)
async def get_document(entry: WorkspaceEntry = Depends(get_workspace)):
    return _document_view(entry)


@router.post("/{workspace_id}/document/generate", response_model=DocumentDraftResponse)
async def generate_document(request: GenerateDocumentRequest, entry: WorkspaceEntry = Depends(get_workspace)):
    check_outcome(await entry.documents.generate(
        request.matter_id, request.document_type, request.briefing_notes, title=request.title
    ))
    return _document_view(entry)


@router.post("/{workspace_id}/document/save", response_model=Document, status_code=201)
async def save_document(
    request: SaveDocumentRequest = SaveDocumentRequest(),
    entry: WorkspaceEntry = Depends(get_workspace),
):
    outcome = check_outcome(await entry.documents.save(status=request.status))
    return outcome.value


@router.get("/{workspace_id}/document/pdf")
async def export_document_pdf(entry: WorkspaceEntry = Depends(get_workspace)):
    """Render the current document to PDF and download it"""
    try:
        path = entry.documents.export_pdf()
    except JurisError as e:
        raise_http(e)
    return FileResponse(path=str(path), media_type="application/pdf", filename=path.name)


# =========================================================
# Judgment analyzer
# =========================================================

@router.get("/{workspace_id}/judgment", response_model=JudgmentResponse)
async def get_judgment(entry: WorkspaceEntry = Depends(get_workspace)):
    return _judgment_view(entry)


@router.post("/{workspace_id}/judgment/upload", response_model=JudgmentResponse)
async def upload_judgment(file: UploadFile = File(...), entry: WorkspaceEntry = Depends(get_workspace)):
    content = await file.read()
    check_outcome(await entry.judgments.load_file(file.filename or "judgment", content))
    return _judgment_view(entry)


@router.post("/{workspace_id}/judgment/analyze", response_model=JudgmentResponse)
async def analyze_judgment(request: AnalyzeJudgmentRequest, entry: WorkspaceEntry = Depends(get_workspace)):
    check_outcome(await entry.judgments.analyze(request.judgment_text, matter_id=request.matter_id))
    return _judgment_view(entry)
