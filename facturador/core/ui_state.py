from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from facturador.core.currency import format_currency


class Section(str, Enum):
	INVOICES = "invoices"
	SERVICES = "services"
	CUSTOMERS = "customers"


class View(str, Enum):
	LIST = "list"
	EDITOR = "editor"


@dataclass(frozen=True)
class ModalState:
	"""An edit dialog for a customer or service.

	`context` is the section that opened it (a customer can be created from the
	invoice editor as well as from the customer list).
	"""
	is_open: bool = False
	initial: Optional[Dict[str, Any]] = None
	context: Optional[Section] = None

	@property
	def editing_id(self) -> Optional[str]:
		return (self.initial or {}).get("id")


@dataclass(frozen=True)
class UiState:
	"""Navigation and dialog state of the editor UI.

	Transitions return a new state; nothing here performs I/O.
	"""
	section: Section = Section.INVOICES
	view: View = View.LIST
	current_invoice: Optional[Dict[str, Any]] = None
	is_saving: bool = False
	customer_modal: ModalState = field(default_factory=ModalState)
	service_modal: ModalState = field(default_factory=ModalState)
	customer_search: str = ""
	service_search: str = ""

	def show_section(self, section: Section) -> "UiState":
		return replace(self, section=section, view=View.LIST, current_invoice=None)

	def edit_invoice(self, invoice: Dict[str, Any]) -> "UiState":
		return replace(self, section=Section.INVOICES, view=View.EDITOR, current_invoice=invoice)

	def update_invoice(self, invoice: Dict[str, Any]) -> "UiState":
		return replace(self, current_invoice=invoice)

	def back_to_list(self) -> "UiState":
		return replace(self, view=View.LIST, current_invoice=None, is_saving=False)

	def saving(self, flag: bool = True) -> "UiState":
		return replace(self, is_saving=flag)

	def open_customer_modal(self, customer: Optional[Dict[str, Any]] = None, context: Section = Section.CUSTOMERS) -> "UiState":
		return replace(self, customer_modal=ModalState(True, customer, context))

	def close_customer_modal(self) -> "UiState":
		return replace(self, customer_modal=ModalState())

	def open_service_modal(self, service: Optional[Dict[str, Any]] = None, context: Section = Section.SERVICES) -> "UiState":
		return replace(self, service_modal=ModalState(True, service, context))

	def close_service_modal(self) -> "UiState":
		return replace(self, service_modal=ModalState())

	def search_customers(self, term: str) -> "UiState":
		return replace(self, customer_search=term)

	def search_services(self, term: str) -> "UiState":
		return replace(self, service_search=term)


def _contains(query: str, *fields: object) -> bool:
	return any(query in str(f or "").lower() for f in fields)


def filter_customers(customers: Iterable[Dict[str, Any]], term: str) -> List[Dict[str, Any]]:
	"""Case-insensitive match on name, address, email, tax id or id."""
	rows = list(customers)
	q = (term or "").strip().lower()
	if not q:
		return rows
	return [
		c for c in rows
		if _contains(q, c.get("name"), c.get("address"), c.get("email"), c.get("tax_id"), c.get("id"))
	]


def filter_services(services: Iterable[Dict[str, Any]], term: str) -> List[Dict[str, Any]]:
	"""Case-insensitive match on description, category, id or formatted price."""
	rows = list(services)
	q = (term or "").strip().lower()
	if not q:
		return rows
	return [
		s for s in rows
		if _contains(q, s.get("description"), s.get("category"), s.get("id"), format_currency(s.get("price")))
	]
