"""Result projector: turns generation output into view data and saved artifacts"""

import logging
import re
from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from jurisai.db.base import EntityStore
from jurisai.errors import ActionValidationError
from jurisai.models import (
    Argument,
    ArgumentStatus,
    AuthorityType,
    Document,
    DocumentStatus,
    DocumentType,
    FactExpansions,
    FoundAuthority,
    LegalAuthority,
    Position,
)

logger = logging.getLogger(__name__)

_HEADING_MARKERS = re.compile(r"^\s*#+\s*")


def derive_title(text: str, max_length: int = 100) -> str:
    """First non-empty line with leading '#' markers stripped, truncated."""
    for line in (text or "").splitlines():
        title = _HEADING_MARKERS.sub("", line).strip()
        if title:
            return title[:max_length]
    return ""


def default_document_title(document_type: DocumentType, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"{document_type.value} - {today.strftime('%d/%m/%Y')}"


def map_authority_type(source_type: Optional[str]) -> AuthorityType:
    """'Case Law' stays Case Law, anything mentioning 'Statute' is a Statute, else Other."""
    source_type = source_type or ""
    if source_type == "Case Law":
        return AuthorityType.CASE_LAW
    if "Statute" in source_type:
        return AuthorityType.STATUTE
    return AuthorityType.OTHER


def authority_record(found: FoundAuthority, matter_id: Optional[str] = None) -> LegalAuthority:
    """Research hit -> LegalAuthority ready to persist."""
    return LegalAuthority(
        matter_id=matter_id or None,
        authority_type=map_authority_type(found.type),
        citation=found.citation or "",
        title=found.title or found.citation or "Untitled authority",
        court=found.court or "",
        year=found.year or "",
        legal_principle=found.legal_principle or "",
        relevance=found.relevance or "",
        key_quotes=[found.key_quote] if found.key_quote else [],
        tags=[found.type] if found.type else [],
    )


def save_argument_version(
    store: EntityStore,
    matter_id: str,
    position: Position,
    fact_pattern: str,
    fact_expansions: FactExpansions,
    argument_text: str,
    authorities: List[str],
    status: ArgumentStatus = ArgumentStatus.DRAFT,
) -> Argument:
    """Append a new version: previous max version_number + 1, parented to it.

    Saved versions are never updated in place. A concurrent save that took
    the same number is rejected by the store's unique constraint.
    """
    if not argument_text.strip():
        raise ActionValidationError("Generate an argument before saving")

    rows = store.filter("Argument", {"matter_id": matter_id}, sort="-version_number", limit=1)
    previous = Argument.model_validate(rows[0]) if rows else None

    version = Argument(
        matter_id=matter_id,
        version_number=(previous.version_number if previous else 0) + 1,
        position=position,
        fact_pattern=fact_pattern,
        fact_expansions=fact_expansions,
        argument_text=argument_text,
        authorities=list(authorities),
        status=status,
        parent_version_id=previous.id if previous else None,
    )
    data = version.model_dump(mode="json", exclude={"id", "created_date", "updated_date"})
    saved = Argument.model_validate(store.create("Argument", data))
    logger.info(f"Saved argument v{saved.version_number} for matter {matter_id}")
    return saved


def save_document(
    store: EntityStore,
    matter_id: str,
    document_type: DocumentType,
    content: str,
    title: str = "",
    status: DocumentStatus = DocumentStatus.DRAFT,
    today: Optional[date] = None,
) -> Document:
    """Create exactly one Document record for a generation."""
    if not content or not matter_id:
        raise ActionValidationError("Please select a matter and generate content first")
    document = Document(
        matter_id=matter_id,
        document_type=document_type,
        title=title.strip() or default_document_title(document_type, today),
        content=content,
        status=status,
    )
    data = document.model_dump(mode="json", exclude={"id", "created_date", "updated_date"})
    saved = Document.model_validate(store.create("Document", data))
    logger.info(f"Saved document '{saved.title}' for matter {matter_id}")
    return saved


# =========================================================
# View models
# =========================================================

class ViewSection(BaseModel):
    """A titled block of rendered results"""
    key: str
    title: str
    items: list = []
    text: Optional[str] = None


def project_sections(result: BaseModel, titles: dict[str, str]) -> List[ViewSection]:
    """Map result fields to display sections in `titles` order.

    Empty arrays and empty values suppress their section.
    """
    sections = []
    for key, title in titles.items():
        value = getattr(result, key, None)
        if value is None or value == [] or value == "":
            continue
        if isinstance(value, list):
            items = [v.model_dump(mode="json", exclude_none=True) if isinstance(v, BaseModel) else v
                     for v in value]
            sections.append(ViewSection(key=key, title=title, items=items))
        elif isinstance(value, BaseModel):
            dumped = value.model_dump(mode="json", exclude_none=True)
            if any(v not in (None, [], "") for v in dumped.values()):
                sections.append(ViewSection(key=key, title=title, items=[dumped]))
        else:
            text = value.value if isinstance(value, Enum) else str(value)
            sections.append(ViewSection(key=key, title=title, text=text))
    return sections


JUDGMENT_SECTIONS = {
    "executive_summary": "Executive Summary",
    "case_information": "Case Information",
    "issues_decided": "Issues Decided",
    "issues_not_decided": "Issues Not Decided",
    "errors_of_law": "Errors of Law",
    "errors_of_fact": "Errors of Fact",
    "procedural_irregularities": "Procedural Irregularities",
    "misapplied_authorities": "Misapplied Authorities",
    "counter_authorities_ignored": "Counter-Authorities Ignored",
    "reasoning_weaknesses": "Reasoning Weaknesses",
    "clear_points_to_raise": "Clear Points to Raise",
    "strategic_recommendations": "Strategic Recommendations",
}

COACHING_SECTIONS = {
    "overall_assessment": "Overall Assessment",
    "strategic_questions": "Strategic Questions",
    "practice_direction_check": "Practice Direction Compliance",
    "weaknesses": "Weaknesses",
    "strengths": "Strengths",
    "immediate_improvements": "Immediate Improvements",
    "opponent_counter_arguments": "Opponent Counter-Arguments",
}

ARGUMENT_SECTIONS = {
    "summary": "Summary",
    "points": "Issues",
    "anticipated_counters": "Anticipated Counter-Arguments",
    "remedies_sought": "Remedies Sought",
    "overall_strength": "Overall Strength",
}

RESEARCH_SECTIONS = {
    "summary": "Summary",
    "authorities": "Authorities",
}
