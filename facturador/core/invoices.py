from __future__ import annotations

import uuid
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from facturador.core.currency import sanitize_number
from facturador.core.dates import add_days_iso, normalize_date, today_iso
from facturador.core.numbering import generate_new_invoice_number

STATUS_DRAFT = "Borrador"
STATUS_SAVED = "Guardada"


def calculate_invoice_totals(invoice: Dict[str, Any]) -> Dict[str, float]:
	"""Derive subtotal, tax and total from an invoice's items and tax rate.

	subtotal = sum(quantity * price), tax = subtotal * tax_rate / 100,
	total = subtotal + tax. Malformed numbers count as 0; never raises.
	"""
	subtotal = 0.0
	for item in invoice.get("items") or []:
		if not isinstance(item, dict):
			continue
		subtotal += sanitize_number(item.get("quantity")) * sanitize_number(item.get("price"))
	tax_rate = sanitize_number(invoice.get("tax_rate"))
	tax = subtotal * (tax_rate / 100)
	return {"subtotal": subtotal, "tax": tax, "total": subtotal + tax}


def sanitize_item(item: Dict[str, Any]) -> Dict[str, Any]:
	return {
		**item,
		"quantity": sanitize_number(item.get("quantity")),
		"price": sanitize_number(item.get("price")),
	}


def sanitize_invoice(
	invoice: Dict[str, Any],
	*,
	today: Optional[date] = None,
	strict_dates: bool = False,
) -> Dict[str, Any]:
	"""Return a copy of the invoice with numbers and dates in canonical form.

	Items' quantity/price and tax_rate become floats; date falls back to today
	and due_date to the (normalized) invoice date when blank. Idempotent, and
	the input is left untouched.
	"""
	inv_date = normalize_date(invoice.get("date"), today_iso(today), strict=strict_dates)
	due_date = normalize_date(invoice.get("due_date"), inv_date, strict=strict_dates)
	items = [sanitize_item(it) for it in (invoice.get("items") or []) if isinstance(it, dict)]
	return {
		**invoice,
		"items": items,
		"tax_rate": sanitize_number(invoice.get("tax_rate")),
		"date": inv_date,
		"due_date": due_date,
	}


def finalize_invoice(
	invoice: Dict[str, Any],
	*,
	today: Optional[date] = None,
	strict_dates: bool = False,
) -> Dict[str, Any]:
	"""Prepare an edited invoice for persistence: normalize, recompute totals, mark saved."""
	clean = sanitize_invoice(invoice, today=today, strict_dates=strict_dates)
	clean.update(calculate_invoice_totals(clean))
	clean["status"] = STATUS_SAVED
	return clean


def blank_item(quantity: float = 1, price: float = 0) -> Dict[str, Any]:
	return {"id": str(uuid.uuid4()), "description": "", "quantity": quantity, "price": price}


def new_invoice_draft(
	existing_count: int,
	customers: Iterable[Dict[str, Any]] = (),
	settings: Any = None,
	*,
	today: Optional[date] = None,
) -> Dict[str, Any]:
	"""Build a fresh draft invoice with a temporary id.

	The draft carries one blank item and defaults (prefix, tax rate, notes,
	due days) from settings when given.
	"""
	prefix = getattr(settings, "invoice_prefix", "FACT-")
	width = getattr(settings, "invoice_number_width", 3)
	due_days = getattr(settings, "due_days", 30)
	tax_rate = getattr(settings, "default_tax_rate", 21.0)
	notes = getattr(settings, "default_notes", "")

	customer_list: List[Dict[str, Any]] = list(customers or [])
	return {
		"id": str(uuid.uuid4()),
		"invoice_number": generate_new_invoice_number(existing_count, prefix, width),
		"date": today_iso(today),
		"due_date": add_days_iso(due_days, today),
		"customer_id": customer_list[0].get("id") if customer_list else None,
		"items": [blank_item()],
		"notes": notes,
		"subtotal": 0.0,
		"tax": 0.0,
		"tax_rate": tax_rate,
		"total": 0.0,
		"status": STATUS_DRAFT,
	}
