"""Research API routes"""

from fastapi import APIRouter, Depends

from jurisai.api.deps import check_outcome, get_entity_store, get_invoker, raise_http
from jurisai.api.schemas import (
    ResearchRequest,
    ResearchResponse,
    SaveAuthorityRequest,
    SavedAuthorityResponse,
)
from jurisai.errors import JurisError, RecordNotFoundError
from jurisai.models import LegalIssue
from jurisai.services.projector import RESEARCH_SECTIONS, project_sections
from jurisai.services.research import ResearchService

router = APIRouter(prefix="/api/research", tags=["research"])


@router.post("", response_model=ResearchResponse)
async def research(request: ResearchRequest, store=Depends(get_entity_store), invoker=Depends(get_invoker)):
    """Find authorities for a legal issue (web search enabled)"""
    service = ResearchService(store, invoker)
    check_outcome(await service.research(request.query, matter_id=request.matter_id))
    return ResearchResponse(
        query=service.query,
        findings=service.findings,
        issue=service.issue,
        sections=project_sections(service.findings, RESEARCH_SECTIONS),
    )


@router.post("/authorities", response_model=SavedAuthorityResponse, status_code=201)
async def save_authority(request: SaveAuthorityRequest, store=Depends(get_entity_store)):
    """Save one found authority, linked to a matter when given"""
    service = ResearchService(store)
    try:
        if request.issue_id:
            record = store.get("LegalIssue", request.issue_id)
            if record is None:
                raise RecordNotFoundError("LegalIssue", request.issue_id)
            service.issue = LegalIssue.model_validate(record)
        saved = service.store_authority(request.authority, request.matter_id)
    except JurisError as e:
        raise_http(e)
    return SavedAuthorityResponse(authority=saved)
