"""Main CLI application"""

import asyncio
import json
from contextlib import nullcontext
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from jurisai.cli.init_cmd import init_command
from jurisai.cli.render import buckets_table, render_markdown, render_sections
from jurisai.db import get_store
from jurisai.errors import JurisError
from jurisai.services.ingestion import get_ingestion
from jurisai.services.invoker import GenerationInvoker
from jurisai.services.workspace import ActionOutcome
from jurisai.utils.config import configure_logging

app = typer.Typer(
    name="jurisai",
    help="AI-assisted legal research, argument drafting and judgment analysis",
    add_completion=False,
)
matters_app = typer.Typer(help="Create, list and inspect matters")
app.add_typer(matters_app, name="matters")

console = Console(force_terminal=True)


@app.callback()
def main(
    log_level: str = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
):
    configure_logging(log_level)


def _print_json(data):
    print(json.dumps(data, ensure_ascii=False, indent=2, default=str))


def _check(outcome: ActionOutcome) -> ActionOutcome:
    """Print the failure and exit unless the action succeeded"""
    if not outcome.ok:
        console.print(f"[red]Error ({outcome.control}): {outcome.message or outcome.status.value}[/red]")
        raise typer.Exit(code=1)
    return outcome


def _working(message: str, quiet: bool = False):
    """Spinner while waiting on the model; suppressed for JSON output"""
    return nullcontext() if quiet else console.status(message)


def _fail(e: Exception):
    console.print(f"[red]Error: {e}[/red]")
    raise typer.Exit(code=1)


def _parse_expansions(values: Optional[List[str]]) -> dict:
    expansions = {}
    for value in values or []:
        name, sep, text = value.partition("=")
        if not sep:
            _fail(f"Expected name=text for --expand, got '{value}'")
        expansions[name.strip()] = text.strip()
    return expansions


@app.command("init")
def init():
    """Initialize the entity store and working directories"""
    if not init_command(get_store):
        raise typer.Exit(code=1)


@app.command("status")
def status():
    """Show entity store status"""
    try:
        info = get_store().get_status()
    except JurisError as e:
        _fail(e)
    table = Table(title=f"Entity Store Status ({info.get('mode')})")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")
    for k, v in info.items():
        table.add_row(str(k), str(v))
    console.print(table)


# =========================================================
# Matters
# =========================================================

@matters_app.command("list")
def matters_list(
    status: str = typer.Option("all", "--status", "-s", help="Matter status or 'all'"),
    matter_type: str = typer.Option("all", "--type", "-t", help="Matter type or 'all'"),
    search: str = typer.Option(None, "--search", "-q", help="Match name, client or case number"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """List matters, most recently updated first"""
    from jurisai.services.matters import MatterService

    try:
        matters = MatterService(get_store()).list_matters(status=status, matter_type=matter_type, search=search)
    except JurisError as e:
        _fail(e)

    if json_output:
        _print_json([m.model_dump(mode="json") for m in matters])
        return
    if not matters:
        console.print("[yellow]No matters found[/yellow]")
        return

    table = Table(title="Matters")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Client")
    table.add_column("Court", style="green")
    table.add_column("Type")
    table.add_column("Status")
    for m in matters:
        table.add_row(m.id, m.name, m.client, m.court, m.matter_type.value, m.status.value)
    console.print(table)


@matters_app.command("add")
def matters_add(
    name: str = typer.Option(..., "--name", "-n", help="Matter name"),
    court: str = typer.Option("", "--court", "-c", help="Court the matter is before"),
    client: str = typer.Option("", "--client", help="Client name"),
    matter_type: str = typer.Option(None, "--type", "-t", help="Matter type"),
    status: str = typer.Option(None, "--status", "-s", help="Matter status"),
    description: str = typer.Option("", "--description", "-d", help="Facts of the matter"),
    case_number: str = typer.Option("", "--case-number", help="Court case number"),
    opposing_party: str = typer.Option("", "--opposing-party", help="Opposing party"),
):
    """Create a matter"""
    from jurisai.services.matters import MatterService

    try:
        matter = MatterService(get_store()).create_matter(
            name=name, court=court, client=client, matter_type=matter_type, status=status,
            description=description, case_number=case_number, opposing_party=opposing_party,
        )
    except JurisError as e:
        _fail(e)
    console.print(f"[green][OK] Created matter '{matter.name}'[/green] [dim]{matter.id}[/dim]")


@matters_app.command("show")
def matters_show(
    matter_id: str = typer.Argument(..., help="Matter ID"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Show a matter with its authorities, arguments and documents"""
    from jurisai.services.matters import MatterService

    try:
        detail = MatterService(get_store()).matter_detail(matter_id)
    except JurisError as e:
        _fail(e)

    if json_output:
        _print_json(detail.model_dump(mode="json"))
        return

    m = detail.matter
    console.print(Panel(
        f"[bold]{m.name}[/bold]\n\n"
        f"Client: {m.client or '-'}\nCourt: {m.court or '-'}\n"
        f"Type: {m.matter_type.value}\nStatus: {m.status.value}\n"
        f"Case number: {m.case_number or '-'}\nOpposing party: {m.opposing_party or '-'}\n\n"
        f"{m.description}",
        title=f"Matter {m.id}",
        border_style="blue",
    ))
    console.print(f"[cyan]{len(detail.authorities)}[/cyan] authorities, "
                  f"[cyan]{len(detail.issues)}[/cyan] issues, "
                  f"[cyan]{len(detail.arguments)}[/cyan] argument versions, "
                  f"[cyan]{len(detail.documents)}[/cyan] documents")
    for authority in detail.authorities[:10]:
        console.print(f"  - {authority.title} ({authority.citation}) [{authority.validity.value}]")


# =========================================================
# Research
# =========================================================

@app.command("research")
def research(
    query: str = typer.Argument(..., help="Legal issue or research question"),
    matter_id: str = typer.Option(None, "--matter", "-m", help="Link results to a matter"),
    save: List[int] = typer.Option(None, "--save", help="Save the n-th authority (repeatable)"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Research authorities for a legal issue"""
    from jurisai.services.projector import RESEARCH_SECTIONS, project_sections
    from jurisai.services.research import ResearchService

    service = ResearchService(get_store(), GenerationInvoker())

    async def run_research():
        _check(await service.research(query, matter_id=matter_id))
        saved = []
        for n in save or []:
            saved.append(_check(await service.save_authority(n - 1, matter_id=matter_id)).value)
        return saved

    with _working("[blue]Researching...[/blue]", json_output):
        saved = asyncio.run(run_research())

    if json_output:
        _print_json({
            "findings": service.findings.model_dump(mode="json"),
            "issue_id": service.issue.id if service.issue else None,
            "saved": [a.model_dump(mode="json") for a in saved],
        })
        return

    render_sections(console, project_sections(service.findings, RESEARCH_SECTIONS))
    if not service.findings.authorities:
        console.print("[yellow]No authorities found[/yellow]")
    for authority in saved:
        console.print(f"[green][OK] Saved '{authority.title}'[/green]")


# =========================================================
# Arguments
# =========================================================

@app.command("argue")
def argue(
    matter_id: str = typer.Argument(..., help="Matter ID"),
    position: str = typer.Option(None, "--position", "-p", help="Claimant, Defendant, Appellant or Respondent"),
    facts: str = typer.Option(None, "--facts", "-f", help="Fact pattern (defaults to the matter's)"),
    expand: List[str] = typer.Option(None, "--expand", "-e", help="Fact expansion as name=text (repeatable)"),
    documents: List[Path] = typer.Option(None, "--document", "-d", help="Source document to include"),
    structured: bool = typer.Option(False, "--structured", help="Structured IRAC output"),
    correct: bool = typer.Option(False, "--correct-facts", help="Run a fact correction pass"),
    save: Optional[bool] = typer.Option(None, "--save/--no-save", help="Save without asking"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Draft a court-locked argument and save it as a new version"""
    from jurisai.services.arguments import ArgumentBuilder
    from jurisai.services.projector import ARGUMENT_SECTIONS, project_sections

    expansions = _parse_expansions(expand)
    builder = ArgumentBuilder(get_store(), GenerationInvoker(), get_ingestion())

    async def run_argue():
        _check(await builder.select_matter(matter_id))
        builder.update_draft(position=position, fact_pattern=facts, **expansions)
        for path in documents or []:
            _check(await builder.attach_document(path.name, path.read_bytes()))
        _check(await builder.generate(structured=structured))
        if correct:
            _check(await builder.correct_facts())

    try:
        with _working("[blue]Drafting argument...[/blue]", json_output):
            asyncio.run(run_argue())
    except JurisError as e:
        _fail(e)

    draft = builder.draft
    if not json_output:
        console.print(f"[dim]Court: {builder.matter.court} | Position: {draft.position.value}[/dim]")
        if draft.structured:
            render_sections(console, project_sections(draft.structured, ARGUMENT_SECTIONS))
        render_markdown(console, draft.argument_text, "Argument")

    if save is None:
        save = False if json_output else typer.confirm("Save this draft as a new version?", default=True)
    saved = _check(asyncio.run(builder.save())).value if save else None

    if json_output:
        _print_json({
            "matter_id": draft.matter_id,
            "court": builder.matter.court if builder.matter else None,
            "position": draft.position.value if draft.position else None,
            "argument_text": draft.argument_text,
            "structured": draft.structured.model_dump(mode="json") if draft.structured else None,
            "saved_version": saved.version_number if saved else None,
        })
    elif saved:
        console.print(f"[green][OK] Saved version {saved.version_number}[/green] [dim]{saved.id}[/dim]")
    else:
        console.print("[yellow]Draft not saved; unsaved changes were discarded.[/yellow]")


@app.command("history")
def history(
    matter_id: str = typer.Argument(..., help="Matter ID"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """List saved argument versions, newest first"""
    from jurisai.services.arguments import ArgumentBuilder
    from jurisai.services.projector import derive_title
    from jurisai.utils.config import get_settings

    try:
        versions = ArgumentBuilder(get_store()).history(matter_id)
    except JurisError as e:
        _fail(e)

    if json_output:
        _print_json([v.model_dump(mode="json") for v in versions])
        return
    if not versions:
        console.print("[yellow]No saved versions[/yellow]")
        return

    table = Table(title="Argument Versions")
    table.add_column("Version", justify="right", style="cyan")
    table.add_column("Position")
    table.add_column("Status")
    table.add_column("Saved", style="dim")
    table.add_column("Title")
    max_length = get_settings().title_max_length
    for v in versions:
        title = derive_title(v.argument_text, max_length)
        table.add_row(
            str(v.version_number),
            v.position.value,
            v.status.value,
            str(v.created_date or ""),
            title,
        )
    console.print(table)


@app.command("coach")
def coach(
    matter_id: str = typer.Argument(..., help="Matter ID (reviews its latest saved version)"),
    facts: str = typer.Option(None, "--facts", "-f", help="Override the fact pattern"),
    argument_file: Path = typer.Option(None, "--argument-file", "-a", help="Review this argument text instead"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Socratic coaching on an argument"""
    from jurisai.services.arguments import ArgumentBuilder
    from jurisai.services.coach import AICoach
    from jurisai.services.projector import COACHING_SECTIONS, project_sections

    store = get_store()
    invoker = GenerationInvoker()
    builder = ArgumentBuilder(store, invoker)
    reviewer = AICoach(store, invoker)

    async def run_coach():
        _check(await builder.select_matter(matter_id))
        builder.update_draft(fact_pattern=facts)
        if argument_file:
            builder.draft.argument_text = argument_file.read_text(encoding="utf-8")
        return await builder.coach(reviewer)

    try:
        with _working("[blue]Reviewing argument...[/blue]", json_output):
            outcome = asyncio.run(run_coach())
    except JurisError as e:
        _fail(e)
    _check(outcome)

    if json_output:
        _print_json(reviewer.feedback.model_dump(mode="json"))
        return
    render_sections(console, project_sections(reviewer.feedback, COACHING_SECTIONS))


# =========================================================
# Documents
# =========================================================

@app.command("draft")
def draft(
    matter_id: str = typer.Argument(..., help="Matter ID"),
    document_type: str = typer.Option(..., "--type", "-t", help="Document type, e.g. 'Skeleton Argument'"),
    notes: str = typer.Option(None, "--notes", "-n", help="Briefing notes"),
    notes_file: Path = typer.Option(None, "--notes-file", help="Read briefing notes from a file"),
    title: str = typer.Option("", "--title", help="Document title"),
    save: bool = typer.Option(False, "--save", help="Save the document record"),
    status: str = typer.Option("Draft", "--status", "-s", help="Draft, Review or Final"),
    pdf: Path = typer.Option(None, "--pdf", help="Export to this PDF path"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Generate a court document from briefing notes"""
    from jurisai.services.documents import DocumentGenerator

    if notes_file:
        notes = notes_file.read_text(encoding="utf-8")
    generator = DocumentGenerator(get_store(), GenerationInvoker())

    with _working(f"[blue]Drafting {document_type}...[/blue]", json_output):
        _check(asyncio.run(generator.generate(matter_id, document_type, notes or "", title=title)))

    if save:
        _check(asyncio.run(generator.save(status=status)))
    path = None
    if pdf:
        try:
            path = generator.export_pdf(str(pdf))
        except JurisError as e:
            _fail(e)

    if json_output:
        _print_json({
            "document_type": generator.document_type.value,
            "content": generator.content,
            "saved": generator.saved.model_dump(mode="json") if generator.saved else None,
            "pdf": str(path) if path else None,
        })
        return

    render_markdown(console, generator.content, generator.document_type.value)
    if generator.saved:
        console.print(f"[green][OK] Saved '{generator.saved.title}'[/green] [dim]{generator.saved.id}[/dim]")
    if path:
        console.print(f"[green][OK] Exported PDF: {path}[/green]")


# =========================================================
# Judgments
# =========================================================

@app.command("analyze")
def analyze(
    file: Path = typer.Argument(None, help="Judgment file (PDF, DOCX or text)"),
    text: str = typer.Option(None, "--text", help="Judgment text instead of a file"),
    matter_id: str = typer.Option(None, "--matter", "-m", help="Matter for context"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Analyze a judgment for errors and appeal points"""
    from jurisai.services.judgments import JudgmentAnalyzer
    from jurisai.services.projector import JUDGMENT_SECTIONS, project_sections

    analyzer = JudgmentAnalyzer(get_store(), GenerationInvoker(), get_ingestion())

    async def run_analysis():
        if file:
            _check(await analyzer.load_file(file.name, file.read_bytes()))
        return await analyzer.analyze(text if not file else None, matter_id=matter_id)

    with _working("[blue]Analyzing judgment...[/blue]", json_output):
        _check(asyncio.run(run_analysis()))

    if json_output:
        _print_json(analyzer.analysis.model_dump(mode="json"))
        return
    render_sections(console, project_sections(analyzer.analysis, JUDGMENT_SECTIONS))


# =========================================================
# Insights
# =========================================================

@app.command("dashboard")
def dashboard():
    """Active matters and recent activity"""
    from jurisai.services.matters import MatterService

    try:
        summary = MatterService(get_store()).dashboard()
    except JurisError as e:
        _fail(e)

    console.print(Panel.fit(
        f"Active matters: [bold cyan]{summary.active_matters}[/bold cyan]\n"
        f"Authorities: [bold cyan]{summary.total_authorities}[/bold cyan]",
        title="Dashboard",
        border_style="blue",
    ))
    for label, rows in (
        ("Recent matters", [f"{m.name} [dim]({m.court or 'no court'})[/dim]" for m in summary.recent_matters]),
        ("Recent authorities", [f"{a.title} ({a.citation})" for a in summary.recent_authorities]),
        ("Recent documents", [f"{d.title} [{d.status.value}]" for d in summary.recent_documents]),
    ):
        console.print(f"\n[bold]{label}[/bold]")
        for row in rows or ["[dim]none[/dim]"]:
            console.print(f"  - {row}")


@app.command("analytics")
def analytics(
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Citation trends and practice statistics"""
    from jurisai.services.analytics import build_report

    try:
        report = build_report(get_store())
    except JurisError as e:
        _fail(e)

    if json_output:
        _print_json(report.model_dump(mode="json"))
        return

    console.print(f"Matters: {report.total_matters}  Authorities: {report.total_authorities}  "
                  f"Documents: {report.total_documents}")
    for title, buckets in (
        ("Citation Trends", report.citation_trends),
        ("Authority Types", report.authority_types),
        ("Most Cited Authorities", report.top_authorities),
        ("Court Distribution", report.court_distribution),
        ("Matter Types", report.matter_types),
        ("Document Status", report.document_status),
        ("Legal Principles", report.legal_principles),
    ):
        if buckets:
            console.print(buckets_table(title, buckets))


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Port"),
):
    """Run the HTTP API"""
    import uvicorn

    from jurisai.api.app import create_app

    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    app()
