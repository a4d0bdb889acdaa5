"""HTML preview of the document model rendered through a Jinja2 template."""

from __future__ import annotations

import html as _html
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape
from loguru import logger

from testgen.config.settings import settings
from testgen.services import document_model as dm


TEMPLATE_NAME = "assessment.html"


def _env(template_dir: Optional[Path] = None) -> Environment:
    loader = FileSystemLoader(str(template_dir or settings.html_template_dir))
    return Environment(loader=loader, autoescape=select_autoescape(["html", "xml"]))


def _text_to_html(text: str) -> str:
    """Escape text for HTML, keeping line breaks."""
    safe = _html.escape(text, quote=False)
    safe = safe.replace("\r\n", "\n").replace("\r", "\n").replace("\n", "<br/>")
    return safe


def _paragraph_context(p: dm.Paragraph) -> Dict[str, Any]:
    classes = [f"role-{p.role}", f"align-{p.align}"]
    if p.bold:
        classes.append("bold")
    if p.italic:
        classes.append("italic")
    style = f"margin-top:{p.space_before:g}pt; margin-bottom:{p.space_after:g}pt;"
    if p.indent_mm:
        style += f" margin-left:{p.indent_mm:g}mm;"
    return {
        "type": "paragraph",
        "html": _text_to_html(p.text) if p.text else "&nbsp;",
        "tag": {"title": "h1", "heading": "h2"}.get(p.role, "p"),
        "classes": " ".join(classes),
        "style": style,
    }


def _block_context(block: dm.Block) -> Dict[str, Any]:
    if isinstance(block, dm.Paragraph):
        return _paragraph_context(block)
    if isinstance(block, dm.PageBreak):
        return {"type": "page_break"}
    if isinstance(block, dm.HeaderRow):
        return {
            "type": "header_row",
            "left": [_paragraph_context(p) for p in block.left],
            "right": [_paragraph_context(p) for p in block.right],
        }
    if isinstance(block, dm.Table):
        return {
            "type": "table",
            "header": [_text_to_html(text) for text in block.header] if block.header else None,
            "header_fill": block.header_fill,
            "rows": [[_text_to_html(text) for text in row] for row in block.rows],
        }
    raise TypeError(f"Unsupported block type: {type(block).__name__}")


class HtmlWriter:
    extension = "html"
    media_type = "text/html; charset=utf-8"

    def __init__(self, template_dir: Optional[Path] = None) -> None:
        self.template_dir = template_dir

    def render(self, document: dm.Document) -> bytes:
        template = _env(self.template_dir).get_template(TEMPLATE_NAME)
        sections: List[Dict[str, Any]] = []
        for section in document.sections:
            blocks = [_block_context(block) for block in section.blocks]
            # A leading page break becomes a CSS break on the section itself.
            leading_break = bool(blocks) and blocks[0]["type"] == "page_break"
            sections.append(
                {
                    "page_break_before": leading_break,
                    "page_number_start": section.page_number_start,
                    "blocks": blocks[1:] if leading_break else blocks,
                }
            )
        style = document.style
        top, right, bottom, left = style.margins_mm
        rendered = template.render(
            metadata=document.metadata,
            font=style.font,
            font_size=style.font_size,
            line_spacing=style.line_spacing,
            margins=f"{top:g}mm {right:g}mm {bottom:g}mm {left:g}mm",
            sections=sections,
        )
        logger.info("HTML rendered", sections=len(sections), chars=len(rendered))
        return rendered.encode("utf-8")
