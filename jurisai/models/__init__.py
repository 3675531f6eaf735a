"""Data models"""

from jurisai.models.matter import (
    MatterStatus,
    MatterType,
    Matter,
)
from jurisai.models.authority import (
    AuthorityType,
    ValidityStatus,
    IssueStatus,
    LegalAuthority,
    LegalIssue,
)
from jurisai.models.argument import (
    Position,
    ArgumentStatus,
    FactExpansions,
    Argument,
)
from jurisai.models.document import (
    DocumentType,
    DocumentStatus,
    Document,
)
from jurisai.models.results import (
    Strength,
    Impact,
    FoundAuthority,
    ResearchFindings,
    StructuredArgument,
    JudgmentAnalysis,
    CoachingFeedback,
)

__all__ = [
    "MatterStatus",
    "MatterType",
    "Matter",
    "AuthorityType",
    "ValidityStatus",
    "IssueStatus",
    "LegalAuthority",
    "LegalIssue",
    "Position",
    "ArgumentStatus",
    "FactExpansions",
    "Argument",
    "DocumentType",
    "DocumentStatus",
    "Document",
    "Strength",
    "Impact",
    "FoundAuthority",
    "ResearchFindings",
    "StructuredArgument",
    "JudgmentAnalysis",
    "CoachingFeedback",
    "coerce_choice",
]


def coerce_choice(enum_cls, value, label: str):
    """Parse a closed choice, rejecting anything outside the enumeration."""
    from jurisai.errors import ActionValidationError

    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        options = ", ".join(m.value for m in enum_cls)
        raise ActionValidationError(f"Invalid {label} '{value}'. Choose one of: {options}") from None
