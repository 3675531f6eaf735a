"""Matter models"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class MatterStatus(str, Enum):
    """Lifecycle status of a matter"""
    ACTIVE = "Active"
    ON_HOLD = "On Hold"
    CLOSED = "Closed"
    APPEAL_PENDING = "Appeal Pending"


class MatterType(str, Enum):
    """Practice area of a matter"""
    CIVIL_LITIGATION = "Civil Litigation"
    CRIMINAL_DEFENCE = "Criminal Defence"
    FAMILY_LAW = "Family Law"
    EMPLOYMENT = "Employment"
    CONTRACT_DISPUTE = "Contract Dispute"
    JUDICIAL_REVIEW = "Judicial Review"
    APPEAL = "Appeal"
    OTHER = "Other"


class Matter(BaseModel):
    """A tracked legal case"""
    id: str = ""
    name: str
    client: str = ""
    court: str = ""
    matter_type: MatterType = MatterType.CIVIL_LITIGATION
    status: MatterStatus = MatterStatus.ACTIVE
    description: str = ""
    case_number: str = ""
    opposing_party: str = ""
    created_date: Optional[datetime] = None
    updated_date: Optional[datetime] = None
