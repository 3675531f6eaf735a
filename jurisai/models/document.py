"""Generated court document models"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class DocumentType(str, Enum):
    """Court documents the generator can draft"""
    PARTICULARS_OF_CLAIM = "Particulars of Claim"
    DEFENCE = "Defence"
    WITNESS_STATEMENT = "Witness Statement"
    SKELETON_ARGUMENT = "Skeleton Argument"
    APPEAL_GROUNDS = "Appeal Grounds"
    CASE_SUMMARY = "Case Summary"
    LEGAL_OPINION = "Legal Opinion"


class DocumentStatus(str, Enum):
    DRAFT = "Draft"
    REVIEW = "Review"
    FINAL = "Final"


class Document(BaseModel):
    """A generated legal document. One record per generate-and-save."""
    id: str = ""
    matter_id: str
    document_type: DocumentType
    title: str
    content: str = ""
    status: DocumentStatus = DocumentStatus.DRAFT
    created_date: Optional[datetime] = None
    updated_date: Optional[datetime] = None
