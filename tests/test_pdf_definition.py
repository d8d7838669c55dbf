from __future__ import annotations

import copy
import json

import pytest

from facturador.core.settings import Settings
from facturador.pdf.definition import (
    MIN_ITEM_ROWS,
    PURPLE_DARK,
    PURPLE_LIGHT,
    build_customer_block,
    build_invoice_pdf_definition,
    normalize_notes,
    pdf_filename,
    split_address,
)


CUSTOMER = {
    "id": "c1",
    "name": "ACME Corp",
    "address": "123 Main St, Suite 4, Miami, FL",
    "email": "ap@acme.test",
    "tax_id": "99-1234567",
}


def _invoice(n_items: int, **extra) -> dict:
    inv = {
        "invoice_number": "FACT-007",
        "date": "2024-12-31",
        "due_date": "2025-01-30",
        "items": [
            {"id": str(i), "description": f"Item {i}", "quantity": 1, "price": 10.0}
            for i in range(n_items)
        ],
        "notes": "",
        "tax_rate": 21.0,
    }
    inv.update(extra)
    return inv


# Navigation helpers over the document structure
def _header_table(doc):
    return doc["content"][0]["columns"][1]["table"]["body"]


def _address_stacks(doc):
    cols = doc["content"][2]["columns"]
    return [col["table"]["body"][1][0]["stack"] for col in cols]


def _items_body(doc):
    return doc["content"][4]["columns"][0]["stack"][0]["table"]["body"]


def _notes_cell(doc):
    return doc["content"][4]["columns"][0]["stack"][1]["stack"][1]["table"]["body"][0][0]


def _totals_body(doc):
    return doc["content"][4]["columns"][1]["table"]["body"]


def _signature_body(doc):
    return doc["content"][5]["table"]["body"]


def _texts(rows):
    return [[cell["text"] for cell in row] for row in rows]


def test_empty_items_produce_six_filler_rows() -> None:
    doc = build_invoice_pdf_definition(_invoice(0), CUSTOMER)
    body = _items_body(doc)
    assert len(body) == 1 + MIN_ITEM_ROWS
    assert all(cell["text"] == " " for row in body[1:] for cell in row)


def test_eight_items_have_no_filler_rows() -> None:
    doc = build_invoice_pdf_definition(_invoice(8), CUSTOMER)
    body = _items_body(doc)
    assert len(body) == 1 + 8
    assert [row[0]["text"] for row in body[1:]] == [str(i) for i in range(1, 9)]
    assert all(row[1]["text"].startswith("Item ") for row in body[1:])


def test_item_rows_content_and_alternating_tint() -> None:
    inv = _invoice(0, items=[
        {"description": "Design", "quantity": 3, "price": 1234.5},
        {"description": "Hours", "quantity": 1.5, "price": 80},
    ])
    body = _items_body(build_invoice_pdf_definition(inv, CUSTOMER))
    assert _texts(body[1:3]) == [
        ["1", "Design", "3", "1,234.50", "3,703.50"],
        ["2", "Hours", "1.50", "80.00", "120.00"],
    ]
    # data rows: tint on 0-based index 1; fillers continue the same pattern (indices 2..5)
    fills = [row[0].get("fill_color") for row in body[1:]]
    assert fills == [None, PURPLE_LIGHT, None, PURPLE_LIGHT, None, PURPLE_LIGHT]
    assert all(cell["fill_color"] == PURPLE_DARK for cell in body[0])


def test_null_customer_renders_placeholder_in_both_blocks() -> None:
    doc = build_invoice_pdf_definition(_invoice(1), None)
    bill, ship = _address_stacks(doc)
    assert bill == ship
    assert bill[0]["text"] == "Company Name: 01infinito LLC placeholder"
    assert bill[0]["bold"] is True
    assert bill[1]["text"] == "123 Main Street"
    assert _header_table(doc)[2][1]["text"] == "001"


def test_customer_block_splits_address() -> None:
    block = build_customer_block(CUSTOMER, Settings())
    assert [b["text"] for b in block] == [
        "Company Name: ACME Corp",
        "123 Main St",
        "Suite 4, Miami, FL",
        "Tax ID / EIN: 99-1234567",
    ]
    assert block[0]["bold"] and block[-1]["bold"]


def test_split_address_edge_cases() -> None:
    assert split_address("") == []
    assert split_address(None) == []
    assert split_address("Single line") == ["Single line"]
    assert split_address("A, , B,") == ["A", "B"]


def test_customer_without_tax_id_or_address() -> None:
    doc = build_invoice_pdf_definition(_invoice(1), {"id": "c2", "name": "Bare"})
    bill, _ = _address_stacks(doc)
    assert [b["text"] for b in bill] == ["Company Name: Bare", "Tax ID / EIN: "]
    assert _header_table(doc)[2][1]["text"] == "001"


def test_header_table_values() -> None:
    doc = build_invoice_pdf_definition(_invoice(1), CUSTOMER)
    assert _texts(_header_table(doc)) == [
        ["DATE", "31/12/2024"],
        ["INVOICE NO.", "FACT-007"],
        ["CUSTOMER NO.", "99-1234567"],
    ]
    blank = build_invoice_pdf_definition(_invoice(1, invoice_number=""), CUSTOMER)
    assert _header_table(blank)[1][1]["text"] == "N/A"


def test_issuer_block_uses_settings() -> None:
    settings = Settings(company_name="Other Co", company_address_lines=["1 Road"], company_email="x@y.z")
    doc = build_invoice_pdf_definition(_invoice(1), None, settings)
    texts = [n["text"] for n in doc["content"][1]["stack"]]
    assert texts == ["Company Name: Other Co", "1 Road", "Email Address: x@y.z", "Point of Contact"]


def test_shipping_placeholder_row() -> None:
    doc = build_invoice_pdf_definition(_invoice(1), CUSTOMER)
    header, values = _texts(doc["content"][3]["table"]["body"])
    assert header[:4] == ["SHIP VIA", "SHIPPING TERMS", "PAYMENT", "DELIVERY DATE"]
    assert values == ["-"] * len(header)


def test_totals_block() -> None:
    inv = _invoice(0, items=[{"quantity": 2, "price": 10}, {"quantity": 1, "price": 5}], tax_rate=21)
    doc = build_invoice_pdf_definition(inv, CUSTOMER)
    body = _totals_body(doc)
    assert _texts(body) == [
        ["SUBTOTAL", "25.00"],
        ["TAX 21%", "5.25"],
        ["SHIPPING / HANDLING", "0.00"],
        ["OTHER", "0.00"],
        ["TOTAL", "30.25"],
    ]
    assert body[0][0]["fill_color"] == PURPLE_DARK
    assert body[3][0]["fill_color"] == PURPLE_LIGHT
    assert body[4][1]["font_size"] == 14


def test_tax_label_formats_fractional_rate() -> None:
    doc = build_invoice_pdf_definition(_invoice(1, tax_rate=10.5), CUSTOMER)
    assert _totals_body(doc)[1][0]["text"] == "TAX 10.5%"


def test_notes_keep_line_breaks() -> None:
    doc = build_invoice_pdf_definition(_invoice(1, notes="a\r\nb\rc\nd"), CUSTOMER)
    assert _notes_cell(doc)["text"] == "a\nb\nc\nd"
    assert normalize_notes(None) == ""


@pytest.mark.parametrize("notes", ["", None])
def test_empty_notes_render_blank_block(notes) -> None:
    inv = _invoice(1)
    inv["notes"] = notes
    doc = build_invoice_pdf_definition(inv, CUSTOMER)
    assert _notes_cell(doc)["text"] == " "


def test_missing_notes_key() -> None:
    inv = _invoice(1)
    del inv["notes"]
    assert _notes_cell(build_invoice_pdf_definition(inv, None))["text"] == " "


def test_signature_row_contact_person() -> None:
    default = build_invoice_pdf_definition(_invoice(1), CUSTOMER)
    assert _texts(_signature_body(default)) == [
        ["DATE", "AUTHORIZED SIGNATURE"],
        ["31/12/2024", "SEBASTIAN CECCONI"],
    ]
    with_contact = build_invoice_pdf_definition(_invoice(1), {**CUSTOMER, "contact_person": "Jane Roe"})
    assert _signature_body(with_contact)[1][1]["text"] == "Jane Roe"
    blank = build_invoice_pdf_definition(_invoice(1), {**CUSTOMER, "contact_person": "   "})
    assert _signature_body(blank)[1][1]["text"] == "SEBASTIAN CECCONI"


def test_footer_contact_text() -> None:
    doc = build_invoice_pdf_definition(_invoice(1), None)
    footer = doc["content"][6]
    assert footer["alignment"] == "center"
    assert [n["text"] for n in footer["stack"]][-1] == "www.01infinito.com"


def test_definition_is_deterministic_and_pure() -> None:
    inv = _invoice(3, notes="x\r\ny")
    cust = copy.deepcopy(CUSTOMER)
    before = (copy.deepcopy(inv), copy.deepcopy(cust))
    first = build_invoice_pdf_definition(inv, cust)
    second = build_invoice_pdf_definition(inv, cust)
    assert first == second
    assert (inv, cust) == before
    # plain data only
    json.dumps(first)
    # mutating one result must not leak into the next
    first["styles"]["tableValue"]["color"] = "#000000"
    assert build_invoice_pdf_definition(inv, cust)["styles"]["tableValue"]["color"] == "#FFFFFF"


def test_document_metadata_and_filename() -> None:
    doc = build_invoice_pdf_definition(_invoice(1), None)
    assert doc["info"]["title"] == "Factura-FACT-007"
    assert doc["page_size"] == "A4"
    assert pdf_filename({"invoice_number": "FACT-007"}) == "Factura-FACT-007.pdf"
