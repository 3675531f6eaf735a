"""Prompt compiler: renders a TaskContext into the instruction sent to the model.

Each template is an intro, an ordered list of sections and a closing task
block. Mandatory sections always render (with a fallback when their data is
empty); conditional sections are dropped entirely when empty.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Type

from pydantic import BaseModel

from jurisai.errors import ActionValidationError
from jurisai.models import (
    CoachingFeedback,
    DocumentType,
    FactExpansions,
    JudgmentAnalysis,
    LegalAuthority,
    ResearchFindings,
    StructuredArgument,
)
from jurisai.services.context import Task, TaskContext

NOT_SPECIFIED = "Not specified"

COURT_LOCK_INSTRUCTION = (
    "This matter is before the {court}. Confine your reasoning strictly to the "
    "{court}: apply its procedure, practice directions and the authorities binding "
    "on it. Do not escalate or de-escalate the court level."
)


@dataclass
class Section:
    """One heading + body. `render` returns the body, or '' when there is no data."""
    title: str
    render: Callable[[TaskContext], str]
    mandatory: bool = False
    fallback: str = NOT_SPECIFIED

    def build(self, context: TaskContext) -> Optional[str]:
        body = (self.render(context) or "").strip()
        if not body:
            if not self.mandatory:
                return None
            body = self.fallback
        return f"## {self.title}\n{body}"


@dataclass
class PromptTemplate:
    intro: str
    sections: List[Section] = field(default_factory=list)
    closing: str = ""

    def render_sections(self, context: TaskContext) -> List[str]:
        return [s for s in (section.build(context) for section in self.sections) if s]

    def render(self, context: TaskContext, **fmt) -> str:
        parts = [self.intro.format(**fmt)]
        parts.extend(self.render_sections(context))
        if self.closing:
            parts.append(self.closing.format(**fmt))
        return "\n\n".join(parts)


@dataclass
class CompiledPrompt:
    """Prompt text plus the output contract it expects."""
    task: Task
    text: str
    output_schema: Optional[Type[BaseModel]] = None
    allow_external_context: bool = True

    @property
    def structured(self) -> bool:
        return self.output_schema is not None


# =========================================================
# Section renderers
# =========================================================

def format_authority(authority: LegalAuthority) -> str:
    """Compact line: title (citation): principle [status]."""
    line = f"- {authority.title}"
    if authority.citation:
        line += f" ({authority.citation})"
    if authority.legal_principle:
        line += f": {authority.legal_principle}"
    return f"{line} [{authority.validity.value}]"


def _authorities(context: TaskContext) -> str:
    return "\n".join(format_authority(a) for a in context.authorities)


def _matter_summary(context: TaskContext) -> str:
    matter = context.matter
    if matter is None:
        return ""
    lines = [f"Matter: {matter.name}"]
    if matter.client:
        lines.append(f"Client: {matter.client}")
    if matter.opposing_party:
        lines.append(f"Opposing Party: {matter.opposing_party}")
    if matter.court:
        lines.append(f"Court: {matter.court}")
    lines.append(f"Matter Type: {matter.matter_type.value}")
    if matter.description:
        lines.append(f"Description: {matter.description}")
    return "\n".join(lines)


def _issues(context: TaskContext) -> str:
    issues = [context.issue] if context.issue else context.issues
    lines = []
    for issue in issues:
        line = f"- {issue.question}"
        if issue.description:
            line += f": {issue.description}"
        lines.append(line)
    return "\n".join(lines)


def _documents(context: TaskContext) -> str:
    return "\n\n".join(
        f"### {doc.name}\n{doc.text}" for doc in context.uploaded_documents if doc.text.strip()
    )


def _expansion(name: str) -> Callable[[TaskContext], str]:
    return lambda context: getattr(context.fact_expansions, name)


def _position(context: TaskContext) -> str:
    return context.position.value if context.position else ""


def _court_lock(context: TaskContext) -> str:
    return COURT_LOCK_INSTRUCTION.format(court=context.matter.court)


def _expansion_sections() -> List[Section]:
    return [Section(label, _expansion(name)) for name, label in FactExpansions.LABELS]


# =========================================================
# Templates
# =========================================================

RESEARCH_TEMPLATE = PromptTemplate(
    intro=(
        "You are a UK legal research assistant. Analyze the following legal issue "
        "and identify relevant UK legal authorities (case law, statutes, regulations)."
    ),
    sections=[
        Section("Legal Issue/Query", lambda c: c.research_query, mandatory=True),
        Section("Matter Context", _matter_summary),
        Section("Authorities Already Linked", _authorities),
    ],
    closing="""Please provide:
1. A list of 5-8 relevant UK legal authorities
2. For each authority, include:
   - Type (Case Law, Statute, Statutory Instrument, etc.)
   - Full citation in proper UK legal format
   - Court (for cases) or year of enactment
   - Key legal principle or holding
   - Brief explanation of relevance (2-3 sentences)
   - One important quote if applicable
3. A short summary of the legal position

Focus on recent and binding authorities. Prioritize Supreme Court, Court of Appeal, and High Court decisions. Include relevant statutory provisions.""",
)


def _argument_sections() -> List[Section]:
    return [
        Section("Court", _court_lock, mandatory=True),
        Section("Matter", _matter_summary, mandatory=True),
        Section("Position", _position, mandatory=True),
        Section("Fact Pattern", lambda c: c.fact_pattern, mandatory=True),
        *_expansion_sections(),
        Section("Legal Issues Identified", _issues),
        Section("Uploaded Source Documents", _documents),
        Section("Linked Authorities", _authorities),
    ]


ARGUMENT_TEMPLATE = PromptTemplate(
    intro=(
        "You are a senior UK barrister drafting a persuasive legal argument on behalf "
        "of the {position}."
    ),
    sections=_argument_sections(),
    closing="""## YOUR TASK
Draft the complete argument for the {position}:
- Identify each legal issue and work through issue, rule, application and conclusion
- Support every proposition with UK authorities, citing the linked authorities where relevant
- Never rely on an authority marked [Overruled]
- Anticipate the opponent's strongest points and answer them
- State the remedy sought
- Use formal UK legal language, numbered paragraphs and markdown headings""",
)

STRUCTURED_ARGUMENT_TEMPLATE = PromptTemplate(
    intro=ARGUMENT_TEMPLATE.intro,
    sections=_argument_sections(),
    closing="""## YOUR TASK
Build a structured argument for the {position}:
- full_argument_markdown: the complete argument in markdown with numbered paragraphs
- summary: two or three sentences stating the case theory
- points: one entry per legal issue with issue, rule, application, conclusion and the authorities cited
- anticipated_counters: the opponent's likely arguments, your rebuttal and how strong the counter is (Strong/Moderate/Weak)
- remedies_sought: the orders or relief to ask for
- overall_strength: Strong, Moderate or Weak
Never rely on an authority marked [Overruled].""",
)

DOCUMENT_INSTRUCTIONS = {
    DocumentType.PARTICULARS_OF_CLAIM: (
        "Draft comprehensive Particulars of Claim following CPR rules for UK civil litigation. "
        "Include proper headings, numbered paragraphs, clear statement of facts, legal basis for "
        "claim, and prayer for relief."
    ),
    DocumentType.DEFENCE: (
        "Draft a robust Defence document following CPR rules. Include proper admissions, denials "
        "with reasons, counterclaim if applicable, and clear legal arguments."
    ),
    DocumentType.WITNESS_STATEMENT: (
        "Draft a formal Witness Statement complying with CPR Part 32 and Practice Direction 32. "
        "Include proper heading, statement of truth, chronological narrative, and exhibits references."
    ),
    DocumentType.SKELETON_ARGUMENT: (
        "Draft a persuasive Skeleton Argument for court submission. Include concise statement of "
        "issues, legal propositions with authorities, and structured submissions."
    ),
    DocumentType.APPEAL_GROUNDS: (
        "Draft comprehensive Grounds of Appeal. Include clear identification of errors, legal basis "
        "for appeal, and authorities supporting each ground."
    ),
    DocumentType.CASE_SUMMARY: (
        "Draft a detailed Case Summary covering factual background, legal issues, authorities, and "
        "case analysis."
    ),
    DocumentType.LEGAL_OPINION: (
        "Draft a formal Legal Opinion with clear structure: instructions, facts, issues, legal "
        "analysis, authorities, and advice."
    ),
}

DOCUMENT_TEMPLATE = PromptTemplate(
    intro="{instruction}",
    sections=[
        Section("Matter", _matter_summary),
        Section("Briefing Notes", lambda c: c.briefing_notes, mandatory=True),
        Section("Uploaded Source Documents", _documents),
        Section("Relevant Legal Authorities", _authorities),
    ],
    closing="""Requirements:
- Use formal UK legal language and formatting
- Include proper citations in UK format
- Structure with clear headings and numbered paragraphs
- Be comprehensive and professionally drafted
- Include statement of truth where appropriate
- Format in markdown with proper hierarchy

Generate the complete {document_type}:""",
)

JUDGMENT_TEMPLATE = PromptTemplate(
    intro=(
        "You are JurisAI - a UK legal expert performing CRITICAL ANALYSIS of a court judgment. "
        "This is NOT a summary - this is STRATEGIC LITIGATION ANALYSIS."
    ),
    sections=[
        Section("Judgment Text", lambda c: c.judgment_text, mandatory=True),
        Section("Our Matter", _matter_summary),
        Section("Our Authorities", _authorities),
    ],
    closing="""## YOUR TASK - CRITICAL ANALYSIS FOR LITIGATION
Analyze this judgment for ERRORS, WEAKNESSES, and APPEAL GROUNDS.

1. CASE INFORMATION: case name, citation, court, judges, date
2. ISSUES DECIDED vs ISSUES NOT DECIDED, including missing findings of fact
3. ERRORS OF LAW: the error, the correct legal position, supporting authority, impact on outcome, and strength of the appeal point (Strong/Moderate/Weak)
4. ERRORS OF FACT: findings not supported by evidence, material facts overlooked, mischaracterised evidence
5. PROCEDURAL IRREGULARITIES: breaches of natural justice, CPR/Practice Direction violations, denial of fair hearing
6. MISAPPLICATION OF AUTHORITIES: how each cited case was misapplied and the correct application
7. COUNTER-AUTHORITIES THE COURT IGNORED: why they were relevant and how they would change the outcome
8. REASONING WEAKNESSES: logical gaps, contradictions, failure to address key arguments
9. CLEAR POINTS TO RAISE: numbered, each with the specific error, why it matters and the remedy sought
10. STRATEGIC RECOMMENDATIONS: should this be appealed (YES/NO with reasoning), best grounds ranked by strength, alternative remedies, risk assessment
11. EXECUTIVE SUMMARY: 4-5 paragraphs on what went wrong, key vulnerabilities, recommended action and litigation strategy

CRITICAL: Be direct, specific, and litigation-focused. This analysis is for a lawyer preparing next steps.""",
)

COACHING_TEMPLATE = PromptTemplate(
    intro=(
        "You are a senior UK barrister coaching a junior colleague. Review this legal "
        "argument development and provide strategic guidance."
    ),
    sections=[
        Section(
            "Matter Context",
            lambda c: "\n".join([
                f"Court: {(c.matter.court if c.matter else '') or NOT_SPECIFIED}",
                f"Position: {_position(c) or NOT_SPECIFIED}",
                f"Matter Type: {c.matter.matter_type.value if c.matter else 'N/A'}",
            ]),
            mandatory=True,
        ),
        Section("Fact Pattern", lambda c: c.fact_pattern, mandatory=True,
                fallback="No facts provided yet"),
        Section("Generated Argument", lambda c: c.argument_text, mandatory=True,
                fallback="No argument generated yet"),
        Section("Available Authorities", _authorities, mandatory=True, fallback="None linked"),
    ],
    closing="""## YOUR COACHING TASK
Provide Socratic guidance to strengthen this argument:

1. STRATEGIC QUESTIONS: 3-5 probing questions about missing elements of the cause of action, weaknesses in reasoning, counter-arguments not addressed and evidential gaps
2. PRACTICE DIRECTION COMPLIANCE: check compliance with {court} practice directions, flag procedural issues, suggest improvements
3. LEGAL WEAKNESSES: logical gaps, missing legal steps, authority gaps and risk areas, each with its impact (Critical/Moderate/Minor) and how to fix it
4. STRENGTHS TO LEVERAGE: what is working well and should be expanded
5. IMMEDIATE IMPROVEMENTS: 3-5 specific, actionable suggestions
6. COUNTER-ARGUMENTS: what the opponent will say and how to pre-empt it

Be constructive but challenging. Guide, don't tell. Ask questions that prompt better thinking.""",
)

FACT_CORRECTION_TEMPLATE = PromptTemplate(
    intro=(
        "You are a meticulous UK litigation editor. Check the draft argument below against "
        "the fact pattern and correct every factual statement that is wrong, unsupported or "
        "inconsistent."
    ),
    sections=[
        Section("Fact Pattern", lambda c: c.fact_pattern, mandatory=True),
        *_expansion_sections(),
        Section("Current Draft", lambda c: c.argument_text, mandatory=True),
    ],
    closing="""## YOUR TASK
- Correct facts only; keep the legal reasoning and structure unless it depends on a corrected fact
- Do not introduce facts that are not in the fact pattern
- Return the complete corrected argument in markdown, with no commentary""",
)


# =========================================================
# Compilers
# =========================================================

def compile_research(context: TaskContext) -> CompiledPrompt:
    return CompiledPrompt(
        task=Task.RESEARCH,
        text=RESEARCH_TEMPLATE.render(context),
        output_schema=ResearchFindings,
        allow_external_context=True,
    )


def compile_argument(context: TaskContext, structured: bool = False) -> CompiledPrompt:
    """Argument prompt, court-locked to the matter's court.

    Raises ActionValidationError when the matter has no court or the draft
    lacks a position or fact pattern.
    """
    if context.matter is None:
        raise ActionValidationError("Please select a matter first")
    if not (context.matter.court or "").strip():
        raise ActionValidationError(
            "The selected matter has no court. Set the court on the matter before generating an argument."
        )
    if context.position is None:
        raise ActionValidationError("Please select a position")
    if not context.fact_pattern.strip():
        raise ActionValidationError("Please provide a fact pattern")

    template = STRUCTURED_ARGUMENT_TEMPLATE if structured else ARGUMENT_TEMPLATE
    return CompiledPrompt(
        task=Task.ARGUMENT,
        text=template.render(context, position=context.position.value),
        output_schema=StructuredArgument if structured else None,
        allow_external_context=True,
    )


def compile_fact_correction(context: TaskContext) -> CompiledPrompt:
    if not context.argument_text.strip():
        raise ActionValidationError("Generate an argument before correcting facts")
    if not context.fact_pattern.strip():
        raise ActionValidationError("Please provide a fact pattern")
    return CompiledPrompt(
        task=Task.ARGUMENT,
        text=FACT_CORRECTION_TEMPLATE.render(context),
        output_schema=None,
        allow_external_context=False,
    )


def compile_document(context: TaskContext, document_type: DocumentType) -> CompiledPrompt:
    if not context.briefing_notes.strip():
        raise ActionValidationError("Please select document type and provide briefing notes")
    return CompiledPrompt(
        task=Task.DOCUMENT,
        text=DOCUMENT_TEMPLATE.render(
            context,
            instruction=DOCUMENT_INSTRUCTIONS[document_type],
            document_type=document_type.value,
        ),
        output_schema=None,
        allow_external_context=False,
    )


def compile_judgment(context: TaskContext) -> CompiledPrompt:
    if not context.judgment_text.strip():
        raise ActionValidationError("Please provide judgment text or upload a file")
    return CompiledPrompt(
        task=Task.JUDGMENT,
        text=JUDGMENT_TEMPLATE.render(context),
        output_schema=JudgmentAnalysis,
        allow_external_context=True,
    )


def compile_coaching(context: TaskContext) -> CompiledPrompt:
    court = (context.matter.court if context.matter else "") or "court"
    return CompiledPrompt(
        task=Task.COACHING,
        text=COACHING_TEMPLATE.render(context, court=court),
        output_schema=CoachingFeedback,
        allow_external_context=True,
    )
