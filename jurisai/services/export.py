"""PDF export of generated documents (markdown subset -> ReportLab)"""

import re
from datetime import datetime
from pathlib import Path
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

from jurisai.models import Document
from jurisai.utils.config import get_settings

_BOLD = re.compile(r"\*\*(.+?)\*\*")
_ITALIC = re.compile(r"(?<!\*)\*(?!\*)(.+?)(?<!\*)\*(?!\*)")
_BULLET = re.compile(r"^\s*[-*]\s+")
_HEADING = re.compile(r"^(#{1,6})\s+(.*)$")


def inline_markup(text: str) -> str:
    """Escape XML and convert **bold** / *italic* to ReportLab tags"""
    text = escape(text)
    text = _BOLD.sub(r"<b>\1</b>", text)
    return _ITALIC.sub(r"<i>\1</i>", text)


class DocumentPDFExporter:
    """Render a Document's markdown content into an A4 PDF"""

    def __init__(self):
        base = getSampleStyleSheet()
        self.styles = {
            "title": ParagraphStyle("DocTitle", parent=base["Title"], fontName="Times-Bold",
                                    fontSize=16, alignment=TA_CENTER, spaceAfter=16),
            "h1": ParagraphStyle("H1", parent=base["Heading1"], fontName="Times-Bold", fontSize=14),
            "h2": ParagraphStyle("H2", parent=base["Heading2"], fontName="Times-Bold", fontSize=12),
            "h3": ParagraphStyle("H3", parent=base["Heading3"], fontName="Times-Bold", fontSize=11),
            "body": ParagraphStyle("Body", parent=base["Normal"], fontName="Times-Roman",
                                   fontSize=11, leading=15, alignment=TA_JUSTIFY, spaceAfter=6),
            "bullet": ParagraphStyle("Bullet", parent=base["Normal"], fontName="Times-Roman",
                                     fontSize=11, leading=15, leftIndent=18, bulletIndent=6),
            "footer": ParagraphStyle("Footer", parent=base["Normal"], fontName="Times-Italic",
                                     fontSize=8, textColor=colors.gray),
        }

    def build_story(self, document: Document) -> list:
        story = [Paragraph(escape(document.title), self.styles["title"])]
        for line in document.content.splitlines():
            stripped = line.strip()
            if not stripped:
                story.append(Spacer(1, 6))
                continue
            heading = _HEADING.match(stripped)
            if heading:
                level = min(len(heading.group(1)), 3)
                story.append(Paragraph(inline_markup(heading.group(2)), self.styles[f"h{level}"]))
            elif _BULLET.match(stripped):
                story.append(Paragraph(inline_markup(_BULLET.sub("", stripped)),
                                       self.styles["bullet"], bulletText="•"))
            else:
                story.append(Paragraph(inline_markup(stripped), self.styles["body"]))
        story.append(Spacer(1, 20))
        story.append(Paragraph(
            f"{escape(document.document_type.value)} | {document.status.value} | "
            f"exported {datetime.now().strftime('%d/%m/%Y %H:%M')}",
            self.styles["footer"],
        ))
        return story

    def export(self, document: Document, output_path: Optional[str] = None) -> Path:
        if output_path is None:
            export_dir = Path(get_settings().export_dir)
            slug = re.sub(r"[^A-Za-z0-9]+", "_", document.title).strip("_")[:60] or "document"
            output_path = str(export_dir / f"{slug}.pdf")
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        doc = SimpleDocTemplate(
            str(path),
            pagesize=A4,
            rightMargin=2.5 * cm,
            leftMargin=2.5 * cm,
            topMargin=2 * cm,
            bottomMargin=2 * cm,
            title=document.title,
        )
        doc.build(self.build_story(document))
        return path
