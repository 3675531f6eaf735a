"""Request/response schemas for the HTTP API"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from jurisai.models import (
    Argument,
    CoachingFeedback,
    Document,
    DocumentStatus,
    FactExpansions,
    FoundAuthority,
    JudgmentAnalysis,
    LegalAuthority,
    LegalIssue,
    Position,
    ResearchFindings,
    StructuredArgument,
)
from jurisai.services.projector import ViewSection


class HealthResponse(BaseModel):
    status: str = "ok"
    store: dict = {}
    active_workspaces: int = 0
    timestamp: datetime = Field(default_factory=datetime.now)


# =========================================================
# Matters
# =========================================================

class MatterCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    client: str = ""
    court: str = ""
    matter_type: Optional[str] = None
    status: Optional[str] = None
    description: str = ""
    case_number: str = ""
    opposing_party: str = ""


class MatterUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    client: Optional[str] = None
    court: Optional[str] = None
    matter_type: Optional[str] = None
    status: Optional[str] = None
    description: Optional[str] = None
    case_number: Optional[str] = None
    opposing_party: Optional[str] = None


# =========================================================
# Research
# =========================================================

class ResearchRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=4000, description="Legal issue or research question")
    matter_id: Optional[str] = Field(None, description="Link the research to a matter")


class ResearchResponse(BaseModel):
    query: str
    findings: ResearchFindings
    issue: Optional[LegalIssue] = None
    sections: List[ViewSection] = []


class SaveAuthorityRequest(BaseModel):
    authority: FoundAuthority
    matter_id: Optional[str] = None
    issue_id: Optional[str] = Field(None, description="Research issue to link the authority to")


# =========================================================
# Workspaces
# =========================================================

class ControlInfo(BaseModel):
    state: str
    last_error: str = ""


class WorkspaceInfo(BaseModel):
    workspace_id: str
    has_unsaved_changes: bool = False
    controls: Dict[str, Dict[str, ControlInfo]] = {}
    created_at: Optional[datetime] = None
    last_active: Optional[datetime] = None


class SelectMatterRequest(BaseModel):
    matter_id: str
    force: bool = False


class DraftUpdateRequest(BaseModel):
    position: Optional[Position] = None
    fact_pattern: Optional[str] = None
    fact_expansions: Optional[Dict[str, str]] = None


class GenerateArgumentRequest(BaseModel):
    structured: bool = False


class ArgumentDraftResponse(BaseModel):
    workspace_id: str
    matter_id: Optional[str] = None
    court: Optional[str] = None
    position: Optional[Position] = None
    fact_pattern: str = ""
    fact_expansions: FactExpansions = Field(default_factory=FactExpansions)
    argument_text: str = ""
    structured: Optional[StructuredArgument] = None
    sections: List[ViewSection] = []
    authority_ids: List[str] = []
    uploaded_documents: List[str] = []
    loaded_version: Optional[int] = None
    has_unsaved_changes: bool = False


class ArgumentHistoryResponse(BaseModel):
    matter_id: Optional[str] = None
    versions: List[Argument] = []


class GenerateDocumentRequest(BaseModel):
    matter_id: str
    document_type: str
    briefing_notes: str = Field(..., min_length=1)
    title: str = ""


class SaveDocumentRequest(BaseModel):
    status: DocumentStatus = DocumentStatus.DRAFT


class DocumentDraftResponse(BaseModel):
    workspace_id: str
    matter_id: Optional[str] = None
    document_type: Optional[str] = None
    title: str = ""
    content: str = ""
    saved: Optional[Document] = None
    has_unsaved_changes: bool = False


class AnalyzeJudgmentRequest(BaseModel):
    judgment_text: Optional[str] = None
    matter_id: Optional[str] = None


class JudgmentResponse(BaseModel):
    workspace_id: str
    filename: Optional[str] = None
    characters: int = 0
    analysis: Optional[JudgmentAnalysis] = None
    sections: List[ViewSection] = []


class CoachResponse(BaseModel):
    workspace_id: str
    feedback: Optional[CoachingFeedback] = None
    sections: List[ViewSection] = []
    message: str = ""


class SavedAuthorityResponse(BaseModel):
    authority: LegalAuthority
