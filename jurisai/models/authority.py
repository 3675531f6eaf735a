"""Legal authority and legal issue models"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class AuthorityType(str, Enum):
    """Kind of authority stored against a matter"""
    CASE_LAW = "Case Law"
    STATUTE = "Statute"
    OTHER = "Other"


class ValidityStatus(str, Enum):
    """Whether an authority is still good law"""
    ACTIVE = "Active"
    OVERRULED = "Overruled"


class IssueStatus(str, Enum):
    OPEN = "Open"
    RESOLVED = "Resolved"


class LegalAuthority(BaseModel):
    """A case, statute or regulation cited in support of an argument"""
    id: str = ""
    matter_id: Optional[str] = None
    title: str
    citation: str = ""
    court: str = ""
    year: str = ""
    authority_type: AuthorityType = AuthorityType.OTHER
    legal_principle: str = ""
    relevance: str = ""
    key_quotes: List[str] = []
    validity: ValidityStatus = ValidityStatus.ACTIVE
    url: str = ""
    tags: List[str] = []
    created_date: Optional[datetime] = None
    updated_date: Optional[datetime] = None


class LegalIssue(BaseModel):
    """A question of law scoped to a matter"""
    id: str = ""
    matter_id: str
    question: str
    description: str = ""
    status: IssueStatus = IssueStatus.OPEN
    authority_ids: List[str] = []
    created_date: Optional[datetime] = None
    updated_date: Optional[datetime] = None
