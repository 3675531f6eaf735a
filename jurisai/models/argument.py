"""Versioned argument models"""

from datetime import datetime
from enum import Enum
from typing import ClassVar, List, Optional

from pydantic import BaseModel, Field


class Position(str, Enum):
    """Side of the matter the argument is written for"""
    CLAIMANT = "Claimant"
    DEFENDANT = "Defendant"
    APPELLANT = "Appellant"
    RESPONDENT = "Respondent"


class ArgumentStatus(str, Enum):
    DRAFT = "Draft"
    FINAL = "Final"


class FactExpansions(BaseModel):
    """Optional structured sub-sections supplementing the core fact pattern"""
    chronology: str = ""
    disputed_facts: str = ""
    undisputed_facts: str = ""
    legal_issues_raised: str = ""
    procedural_history: str = ""
    loss_harm_risk: str = ""

    # (field, heading) in prompt order
    LABELS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("chronology", "Chronology"),
        ("disputed_facts", "Disputed Facts"),
        ("undisputed_facts", "Undisputed Facts"),
        ("legal_issues_raised", "Legal Issues Raised"),
        ("procedural_history", "Procedural History"),
        ("loss_harm_risk", "Loss, Harm and Risk"),
    )


class Argument(BaseModel):
    """One saved version of an argument. Saved versions are never edited."""
    id: str = ""
    matter_id: str
    version_number: int = Field(ge=1)
    position: Position
    fact_pattern: str = ""
    fact_expansions: FactExpansions = Field(default_factory=FactExpansions)
    argument_text: str = ""
    authorities: List[str] = []
    status: ArgumentStatus = ArgumentStatus.DRAFT
    parent_version_id: Optional[str] = None
    created_date: Optional[datetime] = None
    updated_date: Optional[datetime] = None
