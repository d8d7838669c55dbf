from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.styles import ParagraphStyle
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import Flowable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from facturador.core.paths import resource_path

logger = logging.getLogger(__name__)

PAGE_SIZES = {"A4": A4, "LETTER": LETTER}
ALIGNMENTS = {"left": TA_LEFT, "center": TA_CENTER, "right": TA_RIGHT, "justify": TA_JUSTIFY}
GRID_WIDTH = 0.5

# Text properties a container passes down to its children
INHERITED = ("font_size", "color", "bold", "alignment", "line_height")


@dataclass
class FontConfig:
    """Fonts used by the renderer.

    TTF files are optional: when a path is missing the built-in Helvetica
    variants are used. Registration with ReportLab happens once, when a
    PdfRenderer is constructed with this config.
    """
    family: str = "Roboto"
    regular_path: Optional[str] = "assets/fonts/Roboto-Regular.ttf"
    bold_path: Optional[str] = "assets/fonts/Roboto-Medium.ttf"
    fallback_regular: str = "Helvetica"
    fallback_bold: str = "Helvetica-Bold"
    _resolved: Optional[Tuple[str, str]] = field(default=None, init=False, repr=False)

    def _register_one(self, name: str, rel: Optional[str], fallback: str) -> str:
        if not rel:
            return fallback
        if name in pdfmetrics.getRegisteredFontNames():
            return name
        path = resource_path(rel)
        if not path.exists():
            return fallback
        try:
            pdfmetrics.registerFont(TTFont(name, str(path)))
        except Exception:
            logger.warning("Could not register font %s from %s; using %s", name, path, fallback)
            return fallback
        return name

    def register(self) -> Tuple[str, str]:
        """Register the TTF fonts (first call only) and return (regular, bold) names."""
        if self._resolved is None:
            regular = self._register_one(self.family, self.regular_path, self.fallback_regular)
            bold = self._register_one(f"{self.family}-Bold", self.bold_path, self.fallback_bold)
            self._resolved = (regular, bold)
            logger.debug("PDF fonts: regular=%s bold=%s", regular, bold)
        return self._resolved


def _margin(node: Dict[str, Any]) -> Tuple[float, float, float, float]:
    m = node.get("margin") or [0, 0, 0, 0]
    if len(m) == 2:
        return (m[0], m[1], m[0], m[1])
    return (m[0], m[1], m[2], m[3])


def resolve_widths(widths: List[Any], available: float, gap: float = 0.0) -> List[float]:
    """Fixed widths as given; "*" columns share what is left equally."""
    fixed = sum(float(w) for w in widths if w != "*")
    stars = sum(1 for w in widths if w == "*")
    remaining = max(available - fixed - gap * max(len(widths) - 1, 0), 0.0)
    star_w = remaining / stars if stars else 0.0
    return [star_w if w == "*" else float(w) for w in widths]


class PdfRenderer:
    """Turn a document definition into a PDF with ReportLab Platypus."""

    def __init__(self, fonts: Optional[FontConfig] = None):
        self.fonts = fonts or FontConfig()
        self.regular_font, self.bold_font = self.fonts.register()
        self._styles: Dict[str, Dict[str, Any]] = {}
        self._frame_height = A4[1]
        self._regular, self._bold = self.regular_font, self.bold_font

    # ===== Public API =====
    def render(
        self,
        definition: Dict[str, Any],
        out_path: Path | str,
        on_complete: Optional[Callable[[Path], None]] = None,
    ) -> Path:
        out = Path(out_path)
        out.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Rendering PDF: %s", out)
        self._build(definition, str(out))
        logger.info("PDF rendered: %s", out)
        if on_complete is not None:
            on_complete(out)
        return out

    def render_bytes(self, definition: Dict[str, Any]) -> bytes:
        buf = io.BytesIO()
        self._build(definition, buf)
        return buf.getvalue()

    def resolve_fonts(self, family: Optional[str]) -> Tuple[str, str]:
        """(regular, bold) font names for a definition's default font family.

        The configured family maps to the fonts registered by FontConfig. Other
        families must already be known to ReportLab; unknown ones fall back to
        the configured fonts.
        """
        if not family or family == self.fonts.family:
            return self.regular_font, self.bold_font
        known = set(pdfmetrics.getRegisteredFontNames()) | set(pdfmetrics.standardFonts)
        if family not in known:
            logger.warning("Unknown PDF font %s; using %s", family, self.regular_font)
            return self.regular_font, self.bold_font
        bold = f"{family}-Bold"
        return family, bold if bold in known else family

    # ===== Internals =====
    def _build(self, definition: Dict[str, Any], target: Any) -> None:
        page_size = PAGE_SIZES.get(str(definition.get("page_size", "A4")).upper(), A4)
        left, top, right, bottom = _margin({"margin": definition.get("page_margins") or [40, 40, 40, 40]})
        doc = SimpleDocTemplate(
            target,
            pagesize=page_size,
            leftMargin=left,
            rightMargin=right,
            topMargin=top,
            bottomMargin=bottom,
            title=(definition.get("info") or {}).get("title", ""),
        )
        self._styles = definition.get("styles") or {}
        self._frame_height = doc.height
        self._regular, self._bold = self.resolve_fonts((definition.get("default_style") or {}).get("font"))
        base = {k: v for k, v in (definition.get("default_style") or {}).items() if k in INHERITED}
        story: List[Flowable] = []
        for node in definition.get("content") or []:
            story.extend(self._flowables(node, base, doc.width))
        doc.build(story)

    def _props(self, node: Dict[str, Any], inherited: Dict[str, Any]) -> Dict[str, Any]:
        props = dict(inherited)
        style_name = node.get("style")
        if style_name:
            props.update({k: v for k, v in self._styles.get(style_name, {}).items() if k in INHERITED})
        props.update({k: node[k] for k in INHERITED if k in node})
        return props

    def _margins_of(self, node: Dict[str, Any]) -> Tuple[float, float, float, float]:
        if "margin" in node:
            return _margin(node)
        style = self._styles.get(node.get("style") or "", {})
        return _margin(style)

    def _paragraph(self, node: Dict[str, Any], props: Dict[str, Any]) -> Paragraph:
        size = float(props.get("font_size", 8))
        _l, top, _r, bottom = self._margins_of(node)
        style = ParagraphStyle(
            "cell",
            fontName=self._bold if props.get("bold") else self._regular,
            fontSize=size,
            leading=size * float(props.get("line_height", 1.2)),
            textColor=colors.HexColor(props.get("color", "#000000")),
            alignment=ALIGNMENTS.get(props.get("alignment") or "left", TA_LEFT),
            spaceBefore=top,
            spaceAfter=bottom,
        )
        markup = escape(str(node.get("text", ""))).replace("\n", "<br/>")
        return Paragraph(markup, style)

    def _flowables(self, node: Dict[str, Any], inherited: Dict[str, Any], width: float) -> List[Flowable]:
        props = self._props(node, inherited)
        if "text" in node:
            return [self._paragraph(node, props)]

        _l, top, _r, bottom = _margin(node)
        out: List[Flowable] = []
        if top:
            out.append(Spacer(1, top))
        if "stack" in node:
            for child in node["stack"]:
                out.extend(self._flowables(child, props, width))
        elif "columns" in node:
            out.extend(self._columns(node, props, width))
        elif "table" in node:
            out.append(self._table(node, props, width))
        if bottom:
            out.append(Spacer(1, bottom))
        return out

    def _columns(self, node: Dict[str, Any], props: Dict[str, Any], width: float) -> List[Flowable]:
        cols = node["columns"]
        gap = float(node.get("column_gap", 0))
        widths = resolve_widths([c.get("width", "*") for c in cols], width, gap)
        row: List[Any] = []
        col_widths: List[float] = []
        for i, (col, w) in enumerate(zip(cols, widths)):
            if i:
                row.append("")
                col_widths.append(gap)
            row.append(self._flowables(col, props, w))
            col_widths.append(w)
        t = Table([row], colWidths=col_widths)
        t.setStyle(TableStyle([
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("LEFTPADDING", (0, 0), (-1, -1), 0),
            ("RIGHTPADDING", (0, 0), (-1, -1), 0),
            ("TOPPADDING", (0, 0), (-1, -1), 0),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 0),
        ]))
        _w, h = t.wrap(width, self._frame_height)
        if h > self._frame_height:
            # one table row cannot break across pages; stack the columns instead
            return [f for col in cols for f in self._flowables(col, props, width)]
        return [t]

    def _table(self, node: Dict[str, Any], props: Dict[str, Any], width: float) -> Table:
        tbl = node["table"]
        layout = node.get("layout") or {}
        pad_l, pad_t, pad_r, pad_b = _margin({"margin": layout.get("padding") or [4, 4, 4, 4]})
        col_widths = resolve_widths(tbl.get("widths") or ["*"], width)

        ts = TableStyle()
        line_color = colors.HexColor(layout.get("line_color", "#000000"))
        ts.add("GRID", (0, 0), (-1, -1), GRID_WIDTH, line_color)
        ts.add("VALIGN", (0, 0), (-1, -1), "MIDDLE")
        ts.add("LEFTPADDING", (0, 0), (-1, -1), pad_l)
        ts.add("RIGHTPADDING", (0, 0), (-1, -1), pad_r)
        ts.add("TOPPADDING", (0, 0), (-1, -1), pad_t)
        ts.add("BOTTOMPADDING", (0, 0), (-1, -1), pad_b)

        data: List[List[Any]] = []
        for r, cells in enumerate(tbl.get("body") or []):
            row: List[Any] = []
            for c, cell in enumerate(cells):
                inner = max(col_widths[c] - pad_l - pad_r, 1.0) if c < len(col_widths) else width
                row.append(self._flowables(cell, props, inner))
                fill = cell.get("fill_color")
                if fill:
                    ts.add("BACKGROUND", (c, r), (c, r), colors.HexColor(fill))
            data.append(row)

        # rows taller than a page (long notes) split between their lines
        t = Table(data, colWidths=col_widths, repeatRows=int(tbl.get("header_rows", 0)), splitInRow=1)
        t.setStyle(ts)
        return t
