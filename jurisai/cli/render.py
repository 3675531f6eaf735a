"""Rich rendering for projected result sections"""

from typing import List

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from jurisai.services.projector import ViewSection


def _item_text(item) -> str:
    if not isinstance(item, dict):
        return str(item)
    lines = []
    for key, value in item.items():
        if value in (None, "", []):
            continue
        if isinstance(value, list):
            value = "; ".join(str(v) for v in value)
        lines.append(f"[bold]{key.replace('_', ' ').title()}:[/bold] {value}")
    return "\n".join(lines)


def render_sections(console: Console, sections: List[ViewSection]):
    """One panel per non-empty section"""
    for section in sections:
        if section.text is not None:
            body = section.text
        else:
            body = "\n\n".join(f"{n}. {_item_text(item)}" if len(section.items) > 1 else _item_text(item)
                               for n, item in enumerate(section.items, 1))
        console.print(Panel(body, title=f"[bold]{section.title}[/bold]", border_style="blue"))


def render_markdown(console: Console, text: str, title: str):
    console.print(Panel(Markdown(text or "_(empty)_"), title=f"[bold]{title}[/bold]", border_style="green"))


def buckets_table(title: str, buckets) -> Table:
    table = Table(title=title)
    table.add_column("Label", style="cyan")
    table.add_column("Count", justify="right", style="green")
    for bucket in buckets:
        table.add_row(bucket.label, str(bucket.count))
    return table
