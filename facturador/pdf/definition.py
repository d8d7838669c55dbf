from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional

from facturador.core.currency import (
    format_currency,
    format_percentage,
    format_quantity,
    sanitize_number,
)
from facturador.core.dates import format_date
from facturador.core.invoices import calculate_invoice_totals
from facturador.core.settings import Settings

# ===== Palette / page (tweak here) =====
PURPLE_DARK = "#4B2983"
PURPLE_LIGHT = "#EAE4F3"
BORDER_GRAY = "#D1D5DB"
TEXT_GRAY = "#1F2937"
HEADING_COLOR = "#111827"
LINK_COLOR = "#2563EB"
WHITE = "#FFFFFF"

PRIMARY_FONT = "Roboto"
DEFAULT_FONT_SIZE = 8
PAGE_MARGIN_HORIZONTAL = 20
PAGE_MARGIN_VERTICAL = 30

# Line-items table always shows at least this many body rows
MIN_ITEM_ROWS = 6

SHIPPING_HEADERS = ["SHIP VIA", "SHIPPING TERMS", "PAYMENT", "DELIVERY DATE", "-"]

STYLES: Dict[str, Dict[str, Any]] = {
    "tableLabel": {"color": TEXT_GRAY},
    "tableValue": {"color": WHITE, "bold": True, "alignment": "right"},
    "sectionHeading": {"color": HEADING_COLOR, "font_size": 12, "bold": True, "margin": [0, 0, 0, 4]},
    "itemHeader": {"color": WHITE, "bold": True, "alignment": "center"},
    "itemHeaderLeft": {"color": WHITE, "bold": True, "alignment": "left"},
    "itemHeaderRight": {"color": WHITE, "bold": True, "alignment": "right"},
    "totalsHeaderLabel": {"color": WHITE, "bold": True},
    "totalsHeaderValue": {"color": WHITE, "bold": True, "alignment": "right"},
    "totalsLabel": {"bold": False},
    "totalsValue": {"alignment": "right"},
    "totalsHighlightLabel": {"bold": True},
    "totalsHighlightValue": {"alignment": "right", "bold": True},
}


def _layout(padding: List[float]) -> Dict[str, Any]:
    """Grid layout: light gray rules and [left, top, right, bottom] padding."""
    return {"line_color": BORDER_GRAY, "padding": list(padding)}


def pdf_filename(invoice: Dict[str, Any]) -> str:
    return f"Factura-{invoice.get('invoice_number') or ''}.pdf"


# ===== Blocks =====
def split_address(address: Optional[str]) -> List[str]:
    """First comma-separated segment, then the rest rejoined with ", "."""
    parts = [seg.strip() for seg in str(address or "").split(",")]
    parts = [p for p in parts if p]
    lines: List[str] = []
    if parts:
        lines.append(parts[0])
    if len(parts) > 1:
        lines.append(", ".join(parts[1:]))
    return lines


def build_customer_block(customer: Optional[Dict[str, Any]], settings: Settings) -> List[Dict[str, Any]]:
    if not customer:
        lines = [
            {"text": f"Company Name: {settings.placeholder_customer_name}", "bold": True},
            {"text": settings.placeholder_customer_address},
        ]
    else:
        lines = [{"text": f"Company Name: {customer.get('name') or ''}", "bold": True}]
        lines.extend({"text": ln} for ln in split_address(customer.get("address")))
        lines.append({"text": f"Tax ID / EIN: {customer.get('tax_id') or ''}", "bold": True})
    return [{**entry, "margin": [0, 1, 0, 1]} for entry in lines]


def resolve_contact_person(customer: Optional[Dict[str, Any]], settings: Settings) -> str:
    candidate = (customer or {}).get("contact_person")
    if isinstance(candidate, str) and candidate.strip():
        return candidate
    return settings.contact_person


def _row_fill(index: int) -> Optional[str]:
    return PURPLE_LIGHT if index % 2 == 1 else None


def _with_fill(cell: Dict[str, Any], fill: Optional[str]) -> Dict[str, Any]:
    if fill:
        cell["fill_color"] = fill
    return cell


def build_item_row(item: Dict[str, Any], index: int) -> List[Dict[str, Any]]:
    fill = _row_fill(index)
    quantity = sanitize_number(item.get("quantity"))
    price = sanitize_number(item.get("price"))
    return [
        _with_fill({"text": str(index + 1), "alignment": "center"}, fill),
        _with_fill({"text": str(item.get("description") or "")}, fill),
        _with_fill({"text": format_quantity(quantity), "alignment": "center"}, fill),
        _with_fill({"text": format_currency(price), "alignment": "right"}, fill),
        _with_fill({"text": format_currency(quantity * price), "alignment": "right", "bold": True}, fill),
    ]


def build_filler_row(index: int) -> List[Dict[str, Any]]:
    fill = _row_fill(index)
    aligns = ["center", None, "center", "right", "right"]
    row = []
    for align in aligns:
        cell: Dict[str, Any] = {"text": " "}
        if align:
            cell["alignment"] = align
        row.append(_with_fill(cell, fill))
    return row


def build_item_rows(items: List[Dict[str, Any]]) -> List[List[Dict[str, Any]]]:
    """Data rows followed by blank filler rows up to MIN_ITEM_ROWS; tint continues across both."""
    rows = [build_item_row(item, i) for i, item in enumerate(items)]
    filler_count = max(MIN_ITEM_ROWS - len(items), 0)
    rows.extend(build_filler_row(len(items) + i) for i in range(filler_count))
    return rows


def normalize_notes(notes: Optional[str]) -> str:
    return str(notes or "").replace("\r\n", "\n").replace("\r", "\n")


def _header(invoice: Dict[str, Any], customer: Optional[Dict[str, Any]], settings: Settings) -> Dict[str, Any]:
    customer_no = (customer or {}).get("tax_id") or settings.default_customer_number
    return {
        "columns": [
            {
                "width": "*",
                "stack": [
                    {"text": "INVOICE", "font_size": 24, "bold": True, "color": HEADING_COLOR, "margin": [0, 0, 0, 4]},
                ],
            },
            {
                "width": 220,
                "table": {
                    "widths": [100, "*"],
                    "body": [
                        [
                            {"text": "DATE", "style": "tableLabel"},
                            {"text": format_date(invoice.get("date")), "style": "tableValue", "fill_color": PURPLE_DARK},
                        ],
                        [
                            {"text": "INVOICE NO.", "style": "tableLabel"},
                            {"text": invoice.get("invoice_number") or "N/A", "style": "tableValue", "fill_color": PURPLE_DARK},
                        ],
                        [
                            {"text": "CUSTOMER NO.", "style": "tableLabel"},
                            {"text": str(customer_no), "style": "tableValue", "fill_color": PURPLE_DARK},
                        ],
                    ],
                },
                "layout": _layout([8, 6, 8, 6]),
            },
        ],
        "column_gap": 20,
        "margin": [0, 0, 0, 16],
    }


def _issuer(settings: Settings) -> Dict[str, Any]:
    stack: List[Dict[str, Any]] = [{"text": f"Company Name: {settings.company_name}", "style": "sectionHeading"}]
    stack.extend({"text": ln} for ln in settings.company_address_lines)
    stack.append({"text": f"Email Address: {settings.company_email}"})
    stack.append({"text": settings.contact_label})
    return {"stack": stack, "margin": [0, 0, 0, 16]}


def _address_box(title: str, block: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "width": "*",
        "table": {
            "widths": ["*"],
            "body": [
                [{"text": title, "fill_color": PURPLE_DARK, "color": WHITE, "bold": True, "margin": [0, 2, 0, 2]}],
                [{"stack": block, "margin": [0, 4, 0, 4]}],
            ],
        },
        "layout": _layout([8, 4, 8, 4]),
    }


def _shipping_row() -> Dict[str, Any]:
    header = [
        {"text": h, "fill_color": PURPLE_DARK, "color": WHITE, "bold": True, "alignment": "center"}
        for h in SHIPPING_HEADERS
    ]
    values = [{"text": "-", "alignment": "center"} for _ in SHIPPING_HEADERS]
    return {
        "table": {"widths": ["*"] * len(SHIPPING_HEADERS), "body": [header, values]},
        "layout": _layout([4, 3, 4, 3]),
        "margin": [0, 0, 0, 16],
    }


def _items_and_totals(invoice: Dict[str, Any], totals: Dict[str, float], tax_rate: float) -> Dict[str, Any]:
    items = [it for it in (invoice.get("items") or []) if isinstance(it, dict)]
    header_row = [
        {"text": "ITEM NO.", "style": "itemHeader", "fill_color": PURPLE_DARK},
        {"text": "DESCRIPTION", "style": "itemHeaderLeft", "fill_color": PURPLE_DARK},
        {"text": "QTY", "style": "itemHeader", "fill_color": PURPLE_DARK},
        {"text": "UNIT PRICE", "style": "itemHeaderRight", "fill_color": PURPLE_DARK},
        {"text": "TOTAL", "style": "itemHeaderRight", "fill_color": PURPLE_DARK},
    ]
    items_table = {
        "table": {
            "header_rows": 1,
            "widths": [45, "*", 45, 65, 70],
            "body": [header_row, *build_item_rows(items)],
        },
        "layout": _layout([6, 6, 6, 6]),
    }
    notes = {
        "margin": [0, 12, 0, 0],
        "stack": [
            {"text": "Remarks / Instructions:", "bold": True, "margin": [0, 0, 0, 6]},
            {
                "table": {"widths": ["*"], "body": [[{"text": normalize_notes(invoice.get("notes")) or " ", "line_height": 1.3}]]},
                "layout": _layout([8, 10, 8, 40]),
            },
        ],
    }
    shipping_handling = 0.0
    other = 0.0
    totals_table = {
        "width": 185,
        "table": {
            "widths": ["*", 70],
            "body": [
                [
                    {"text": "SUBTOTAL", "style": "totalsHeaderLabel", "fill_color": PURPLE_DARK},
                    {"text": format_currency(totals["subtotal"]), "style": "totalsHeaderValue", "fill_color": PURPLE_DARK},
                ],
                [
                    {"text": f"TAX {format_percentage(tax_rate)}%", "style": "totalsLabel"},
                    {"text": format_currency(totals["tax"]), "style": "totalsValue"},
                ],
                [
                    {"text": "SHIPPING / HANDLING", "style": "totalsLabel"},
                    {"text": format_currency(shipping_handling), "style": "totalsValue"},
                ],
                [
                    {"text": "OTHER", "style": "totalsHighlightLabel", "fill_color": PURPLE_LIGHT},
                    {"text": format_currency(other), "style": "totalsHighlightValue", "fill_color": PURPLE_LIGHT},
                ],
                [
                    {"text": "TOTAL", "style": "totalsHeaderLabel", "fill_color": PURPLE_DARK, "font_size": 14},
                    {"text": format_currency(totals["total"]), "style": "totalsHeaderValue", "fill_color": PURPLE_DARK, "font_size": 14},
                ],
            ],
        },
        "layout": _layout([8, 10, 8, 10]),
    }
    return {
        "columns": [{"width": "*", "stack": [items_table, notes]}, totals_table],
        "column_gap": 14,
        "margin": [0, 0, 0, 24],
    }


def _signature(invoice: Dict[str, Any], customer: Optional[Dict[str, Any]], settings: Settings) -> Dict[str, Any]:
    band = {"fill_color": PURPLE_DARK, "color": WHITE, "bold": True, "alignment": "center"}
    return {
        "table": {
            "widths": ["*", "*"],
            "body": [
                [{"text": "DATE", **band}, {"text": "AUTHORIZED SIGNATURE", **band}],
                [
                    {"text": format_date(invoice.get("date")), "alignment": "center"},
                    {"text": resolve_contact_person(customer, settings), "alignment": "center", "bold": True},
                ],
            ],
        },
        "layout": _layout([6, 6, 6, 6]),
    }


def _contact_footer(settings: Settings) -> Dict[str, Any]:
    stack: List[Dict[str, Any]] = []
    for i, ln in enumerate(settings.footer_lines):
        stack.append({"text": ln, "bold": i > 0})
    if settings.website:
        stack.append({"text": settings.website, "bold": True, "color": LINK_COLOR, "margin": [0, 4, 0, 0]})
    return {"margin": [0, 16, 0, 0], "alignment": "center", "stack": stack}


# ===== Public API =====
def build_invoice_pdf_definition(
    invoice: Dict[str, Any],
    customer: Optional[Dict[str, Any]],
    settings: Optional[Settings] = None,
) -> Dict[str, Any]:
    """Describe the invoice document as plain data for the renderer.

    Expects a sanitized invoice; totals are recomputed from the items so the
    printed figures always match the printed rows. The result is plain
    dicts/lists/strings/numbers and shares no objects with the inputs.
    """
    settings = settings or Settings()
    totals = calculate_invoice_totals(invoice)
    tax_rate = sanitize_number(invoice.get("tax_rate"))

    return {
        "info": {"title": f"Factura-{invoice.get('invoice_number') or ''}"},
        "page_size": "A4",
        "page_margins": [PAGE_MARGIN_HORIZONTAL, PAGE_MARGIN_VERTICAL, PAGE_MARGIN_HORIZONTAL, PAGE_MARGIN_VERTICAL],
        "default_style": {"font": PRIMARY_FONT, "font_size": DEFAULT_FONT_SIZE, "color": TEXT_GRAY, "line_height": 1.25},
        "styles": copy.deepcopy(STYLES),
        "content": [
            _header(invoice, customer, settings),
            _issuer(settings),
            {
                "columns": [
                    _address_box("BILL TO:", build_customer_block(customer, settings)),
                    _address_box("SHIP TO:", build_customer_block(customer, settings)),
                ],
                "column_gap": 14,
                "margin": [0, 0, 0, 16],
            },
            _shipping_row(),
            _items_and_totals(invoice, totals, tax_rate),
            _signature(invoice, customer, settings),
            _contact_footer(settings),
        ],
    }
