"""Output contracts for schema-constrained generations.

Each model doubles as the schema descriptor sent to the model (via
``model_json_schema``) and as the validator for its reply. Arrays default
to empty and optional sub-fields stay ``None`` when the reply omits them.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class Strength(str, Enum):
    STRONG = "Strong"
    MODERATE = "Moderate"
    WEAK = "Weak"


class Impact(str, Enum):
    CRITICAL = "Critical"
    MODERATE = "Moderate"
    MINOR = "Minor"


# =========================================================
# Research
# =========================================================

class FoundAuthority(BaseModel):
    """An authority proposed by the research generation"""
    type: Optional[str] = None
    citation: Optional[str] = None
    title: Optional[str] = None
    court: Optional[str] = None
    year: Optional[str] = None
    legal_principle: Optional[str] = None
    relevance: Optional[str] = None
    key_quote: Optional[str] = None


class ResearchFindings(BaseModel):
    authorities: List[FoundAuthority] = []
    summary: Optional[str] = None


# =========================================================
# Argument (structured mode)
# =========================================================

class ArgumentPoint(BaseModel):
    """One issue worked through issue / rule / application / conclusion"""
    issue: Optional[str] = None
    rule: Optional[str] = None
    application: Optional[str] = None
    conclusion: Optional[str] = None
    authorities_cited: List[str] = []


class AnticipatedCounter(BaseModel):
    counter_argument: Optional[str] = None
    rebuttal: Optional[str] = None
    strength: Optional[Strength] = None


class StructuredArgument(BaseModel):
    full_argument_markdown: Optional[str] = None
    summary: Optional[str] = None
    points: List[ArgumentPoint] = []
    anticipated_counters: List[AnticipatedCounter] = []
    remedies_sought: List[str] = []
    overall_strength: Optional[Strength] = None


# =========================================================
# Judgment critique
# =========================================================

class CaseInformation(BaseModel):
    case_name: Optional[str] = None
    citation: Optional[str] = None
    court: Optional[str] = None
    judges: List[str] = []
    date: Optional[str] = None


class ErrorOfLaw(BaseModel):
    error: Optional[str] = None
    correct_position: Optional[str] = None
    supporting_authority: Optional[str] = None
    impact: Optional[str] = None
    strength: Optional[Strength] = None


class ErrorOfFact(BaseModel):
    finding: Optional[str] = None
    problem: Optional[str] = None
    evidence_issue: Optional[str] = None


class ProceduralIrregularity(BaseModel):
    irregularity: Optional[str] = None
    rule_breached: Optional[str] = None
    impact: Optional[str] = None


class MisappliedAuthority(BaseModel):
    case_name: Optional[str] = None
    citation: Optional[str] = None
    how_misapplied: Optional[str] = None
    correct_application: Optional[str] = None


class IgnoredAuthority(BaseModel):
    case_name: Optional[str] = None
    citation: Optional[str] = None
    why_relevant: Optional[str] = None
    impact_if_considered: Optional[str] = None


class PointToRaise(BaseModel):
    point_number: Optional[int] = None
    specific_error: Optional[str] = None
    why_it_matters: Optional[str] = None
    remedy_sought: Optional[str] = None


class StrategicRecommendations(BaseModel):
    should_appeal: Optional[str] = None
    best_grounds: List[str] = []
    alternative_remedies: List[str] = []
    risk_assessment: Optional[str] = None


class JudgmentAnalysis(BaseModel):
    case_information: Optional[CaseInformation] = None
    issues_decided: List[str] = []
    issues_not_decided: List[str] = []
    errors_of_law: List[ErrorOfLaw] = []
    errors_of_fact: List[ErrorOfFact] = []
    procedural_irregularities: List[ProceduralIrregularity] = []
    misapplied_authorities: List[MisappliedAuthority] = []
    counter_authorities_ignored: List[IgnoredAuthority] = []
    reasoning_weaknesses: List[str] = []
    clear_points_to_raise: List[PointToRaise] = []
    strategic_recommendations: Optional[StrategicRecommendations] = None
    executive_summary: Optional[str] = None


# =========================================================
# Coaching
# =========================================================

class PracticeDirectionCheck(BaseModel):
    compliant: Optional[bool] = None
    issues: List[str] = []
    suggestions: List[str] = []


class Weakness(BaseModel):
    weakness: Optional[str] = None
    impact: Optional[Impact] = None
    how_to_fix: Optional[str] = None


class OpponentCounter(BaseModel):
    counter: Optional[str] = None
    how_to_address: Optional[str] = None


class CoachingFeedback(BaseModel):
    strategic_questions: List[str] = []
    practice_direction_check: Optional[PracticeDirectionCheck] = None
    weaknesses: List[Weakness] = []
    strengths: List[str] = []
    immediate_improvements: List[str] = []
    opponent_counter_arguments: List[OpponentCounter] = []
    overall_assessment: Optional[str] = None
