from __future__ import annotations

import dataclasses

import pytest

from facturador.core.ui_state import Section, UiState, View, filter_customers, filter_services


CUSTOMERS = [
    {"id": "c1", "name": "ACME Corp", "address": "Miami", "email": "ap@acme.test", "tax_id": "99-1"},
    {"id": "c2", "name": "Globex", "address": "Springfield", "email": "", "tax_id": ""},
]
SERVICES = [
    {"id": "s1", "description": "Web hosting", "price": 1234.5, "category": "service"},
    {"id": "s2", "description": "Laptop", "price": 900, "category": "product"},
]


def test_initial_state() -> None:
    state = UiState()
    assert state.section is Section.INVOICES
    assert state.view is View.LIST
    assert state.current_invoice is None
    assert not state.customer_modal.is_open and not state.service_modal.is_open


def test_transitions_return_new_states() -> None:
    state = UiState()
    editing = state.edit_invoice({"id": "i1"})
    assert state.view is View.LIST
    assert editing.view is View.EDITOR and editing.current_invoice == {"id": "i1"}

    saving = editing.saving()
    assert saving.is_saving
    back = saving.back_to_list()
    assert back.view is View.LIST and back.current_invoice is None and not back.is_saving

    with pytest.raises(dataclasses.FrozenInstanceError):
        state.view = View.EDITOR  # type: ignore[misc]


def test_show_section_leaves_the_editor() -> None:
    state = UiState().edit_invoice({"id": "i1"}).show_section(Section.SERVICES)
    assert state.section is Section.SERVICES
    assert state.view is View.LIST and state.current_invoice is None


def test_customer_modal_from_invoice_editor() -> None:
    state = UiState().edit_invoice({"id": "i1"}).open_customer_modal(context=Section.INVOICES)
    assert state.customer_modal.is_open
    assert state.customer_modal.context is Section.INVOICES
    assert state.customer_modal.editing_id is None
    # the invoice being edited survives the dialog
    closed = state.close_customer_modal()
    assert not closed.customer_modal.is_open and closed.current_invoice == {"id": "i1"}


def test_service_modal_editing() -> None:
    state = UiState().open_service_modal(SERVICES[0])
    assert state.service_modal.editing_id == "s1"
    assert state.close_service_modal().service_modal.initial is None


def test_filter_customers() -> None:
    assert filter_customers(CUSTOMERS, "") == CUSTOMERS
    assert [c["id"] for c in filter_customers(CUSTOMERS, "acme")] == ["c1"]
    assert [c["id"] for c in filter_customers(CUSTOMERS, " SPRING ")] == ["c2"]
    assert [c["id"] for c in filter_customers(CUSTOMERS, "99-")] == ["c1"]
    assert filter_customers(CUSTOMERS, "zzz") == []


def test_filter_services() -> None:
    assert [s["id"] for s in filter_services(SERVICES, "PRODUCT")] == ["s2"]
    assert [s["id"] for s in filter_services(SERVICES, "1,234.50")] == ["s1"]
    assert [s["id"] for s in filter_services(SERVICES, "host")] == ["s1"]


def test_search_terms_are_stored() -> None:
    state = UiState().search_customers("ac").search_services("web")
    assert (state.customer_search, state.service_search) == ("ac", "web")
