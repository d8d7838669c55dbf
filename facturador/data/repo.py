from __future__ import annotations

import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from sqlmodel import select
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from facturador.core.catalog import normalize_category
from facturador.core.currency import sanitize_number
from facturador.core.invoices import STATUS_DRAFT, finalize_invoice
from facturador.data.db import session_scope, get_session
from facturador.data.errors import (
	CustomerInUseError,
	DuplicateServiceError,
	NotFoundError,
	ValidationError,
)
from facturador.data.models import Customer, Invoice, InvoiceItem, Service

logger = logging.getLogger(__name__)


# ===== Row -> dict =====
def customer_to_dict(c: Customer) -> Dict[str, Any]:
	return {
		"id": c.id,
		"name": c.name,
		"address": c.address or "",
		"email": c.email or "",
		"tax_id": c.tax_id or "",
		"contact_person": c.contact_person,
	}


def service_to_dict(sv: Service) -> Dict[str, Any]:
	return {
		"id": sv.id,
		"description": sv.description,
		"price": float(sv.price or 0.0),
		"category": normalize_category(sv.category),
	}


def invoice_to_dict(inv: Invoice, items: Iterable[InvoiceItem]) -> Dict[str, Any]:
	return {
		"id": inv.id,
		"invoice_number": inv.invoice_number,
		"date": inv.date,
		"due_date": inv.due_date,
		"customer_id": inv.customer_id,
		"notes": inv.notes or "",
		"tax_rate": float(inv.tax_rate or 0.0),
		"subtotal": float(inv.subtotal or 0.0),
		"tax": float(inv.tax or 0.0),
		"total": float(inv.total or 0.0),
		"status": inv.status,
		"items": [
			{
				"id": it.id,
				"description": it.description or "",
				"quantity": float(it.quantity or 0.0),
				"price": float(it.price or 0.0),
			}
			for it in items
		],
	}


# ===== Bulk load =====
def load_all() -> Dict[str, List[Dict[str, Any]]]:
	"""Everything the UI needs at start-up: invoices (with items), customers, services."""
	return {
		"invoices": list_invoices(),
		"customers": list_customers(),
		"services": list_services(),
	}


# ===== Customers =====
def list_customers() -> List[Dict[str, Any]]:
	with get_session() as s:
		rows = s.exec(select(Customer).order_by(Customer.name.asc(), Customer.id.asc())).all()
		return [customer_to_dict(c) for c in rows]


def get_customer(customer_id: Optional[str]) -> Optional[Dict[str, Any]]:
	"""Customer as a dict, or None for a missing/unassigned id."""
	if not customer_id:
		return None
	with get_session() as s:
		c = s.get(Customer, customer_id)
		return customer_to_dict(c) if c else None


def save_customer(data: Dict[str, Any], customer_id: Optional[str] = None) -> Dict[str, Any]:
	"""Create a customer, or update the one with `customer_id`."""
	name = str(data.get("name") or "").strip()
	if not name:
		raise ValidationError("Customer name is required")

	with session_scope() as s:
		if customer_id:
			c = s.get(Customer, customer_id)
			if c is None:
				raise NotFoundError(f"Customer not found: {customer_id}")
		else:
			c = Customer(name=name)
			s.add(c)
		c.name = name
		c.address = str(data.get("address") or "")
		c.email = str(data.get("email") or "")
		c.tax_id = str(data.get("tax_id") or "")
		c.contact_person = data.get("contact_person") or None
		s.flush()
		s.refresh(c)
		return customer_to_dict(c)


def invoices_count_for_customer(customer_id: str) -> int:
	"""Return number of invoices associated with a customer."""
	with get_session() as s:
		return int(s.exec(select(func.count(Invoice.id)).where(Invoice.customer_id == customer_id)).one())


def delete_customer(customer_id: str) -> None:
	"""Delete a customer that no invoice references.

	Raises CustomerInUseError when invoices still point at it, NotFoundError if absent.
	"""
	with session_scope() as s:
		c = s.get(Customer, customer_id)
		if c is None:
			raise NotFoundError(f"Customer not found: {customer_id}")
		count = int(s.exec(select(func.count(Invoice.id)).where(Invoice.customer_id == customer_id)).one())
		if count:
			raise CustomerInUseError(customer_id, count)
		s.delete(c)
	logger.info("Deleted customer %s", customer_id)


# ===== Services =====
def _parse_price(raw: Any) -> float:
	"""Strictly parse a catalog price; unlike item prices, garbage is rejected here."""
	if raw is None or isinstance(raw, bool):
		raise ValidationError("Price is required")
	try:
		price = float(raw.strip() if isinstance(raw, str) else raw)
	except (TypeError, ValueError):
		raise ValidationError(f"Price must be a number: {raw!r}")
	if not math.isfinite(price) or price < 0:
		raise ValidationError("Price must be a number greater than or equal to 0")
	return price


def list_services() -> List[Dict[str, Any]]:
	with get_session() as s:
		rows = s.exec(select(Service).order_by(Service.description.asc())).all()
		return [service_to_dict(sv) for sv in rows]


def save_service(data: Dict[str, Any], service_id: Optional[str] = None) -> Dict[str, Any]:
	"""Create or update a catalog entry.

	The description is trimmed and must be non-empty and unique; price must
	parse to a number >= 0; unknown categories become "service".
	"""
	description = str(data.get("description") or "").strip()
	if not description:
		raise ValidationError("Description is required")
	price = _parse_price(data.get("price"))

	try:
		with session_scope() as s:
			dup = s.exec(select(Service).where(Service.description == description)).first()
			if dup is not None and dup.id != service_id:
				raise DuplicateServiceError(description)
			if service_id:
				sv = s.get(Service, service_id)
				if sv is None:
					raise NotFoundError(f"Service not found: {service_id}")
			else:
				sv = Service(description=description)
				s.add(sv)
			sv.description = description
			sv.price = price
			sv.category = normalize_category(data.get("category"))
			s.flush()
			s.refresh(sv)
			return service_to_dict(sv)
	except IntegrityError as e:
		# lost a race against another writer on the unique index
		raise DuplicateServiceError(description) from e


def delete_service(service_id: str) -> None:
	with session_scope() as s:
		sv = s.get(Service, service_id)
		if sv is None:
			raise NotFoundError(f"Service not found: {service_id}")
		s.delete(sv)


# ===== Invoices =====
def _items_of(s, invoice_id: str) -> List[InvoiceItem]:
	return list(
		s.exec(select(InvoiceItem).where(InvoiceItem.invoice_id == invoice_id).order_by(InvoiceItem.position.asc())).all()
	)


def list_invoices() -> List[Dict[str, Any]]:
	"""Invoices ordered by date DESC, each with its items in line order."""
	with get_session() as s:
		rows = s.exec(select(Invoice).order_by(Invoice.date.desc(), Invoice.invoice_number.desc())).all()
		return [invoice_to_dict(inv, _items_of(s, inv.id)) for inv in rows]


def get_invoice(invoice_id: str) -> Optional[Dict[str, Any]]:
	with get_session() as s:
		inv = s.get(Invoice, invoice_id)
		if inv is None:
			return None
		return invoice_to_dict(inv, _items_of(s, inv.id))


def _apply_fields(inv: Invoice, data: Dict[str, Any]) -> None:
	inv.invoice_number = str(data.get("invoice_number") or "")
	inv.date = str(data.get("date") or "")
	inv.due_date = str(data.get("due_date") or "")
	inv.customer_id = data.get("customer_id") or None
	inv.notes = str(data.get("notes") or "")
	inv.tax_rate = sanitize_number(data.get("tax_rate"))
	inv.subtotal = sanitize_number(data.get("subtotal"))
	inv.tax = sanitize_number(data.get("tax"))
	inv.total = sanitize_number(data.get("total"))
	inv.status = str(data.get("status") or STATUS_DRAFT)


def save_invoice(invoice: Dict[str, Any], is_new: bool, *, strict_dates: bool = False) -> Dict[str, Any]:
	"""Insert or update an invoice and replace its items, in one transaction.

	The invoice is finalized first: dates normalized, totals recomputed from the
	items and status set to saved, whatever the caller passed. New invoices get a
	store-assigned id; the draft's temporary id is discarded.
	"""
	invoice = finalize_invoice(invoice, strict_dates=strict_dates)
	with session_scope() as s:
		customer_id = invoice.get("customer_id")
		if customer_id and s.get(Customer, customer_id) is None:
			raise ValidationError(f"Unknown customer: {customer_id}")

		if is_new:
			inv = Invoice(invoice_number="", date="", due_date="")
			s.add(inv)
		else:
			inv = s.get(Invoice, invoice.get("id"))
			if inv is None:
				raise NotFoundError(f"Invoice not found: {invoice.get('id')}")
			for old in _items_of(s, inv.id):
				s.delete(old)
		_apply_fields(inv, invoice)
		s.flush()

		for pos, item in enumerate(invoice.get("items") or []):
			s.add(InvoiceItem(
				invoice_id=inv.id,
				position=pos,
				description=str(item.get("description") or ""),
				quantity=sanitize_number(item.get("quantity")),
				price=sanitize_number(item.get("price")),
			))
		s.flush()
		saved = invoice_to_dict(inv, _items_of(s, inv.id))
	logger.info("Saved invoice %s (%s)", saved["invoice_number"], "new" if is_new else "update")
	return saved


def delete_invoice(invoice_id: str) -> None:
	"""Delete an invoice and all of its items."""
	with session_scope() as s:
		inv = s.get(Invoice, invoice_id)
		if inv is None:
			raise NotFoundError(f"Invoice not found: {invoice_id}")
		for it in _items_of(s, invoice_id):
			s.delete(it)
		s.delete(inv)
	logger.info("Deleted invoice %s", invoice_id)
