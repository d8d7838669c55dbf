from __future__ import annotations

import uuid
from typing import Optional, List

from sqlmodel import Field, SQLModel, Relationship
from sqlalchemy.orm import relationship


def new_id() -> str:
	return str(uuid.uuid4())


class Customer(SQLModel, table=True):
	id: str = Field(default_factory=new_id, primary_key=True)
	name: str
	address: str = ""
	email: str = ""
	tax_id: str = ""
	contact_person: Optional[str] = None

	invoices: List["Invoice"] = Relationship(sa_relationship=relationship("Invoice", back_populates="customer"))


class Service(SQLModel, table=True):
	id: str = Field(default_factory=new_id, primary_key=True)
	description: str = Field(
		index=True,
		sa_column_kwargs={"unique": True},
	)
	price: float = 0.0
	# "service" | "product"
	category: str = "service"


class Invoice(SQLModel, table=True):
	id: str = Field(default_factory=new_id, primary_key=True)
	invoice_number: str = Field(index=True)
	# YYYY-MM-DD after normalization; kept as text so unrecognized input survives a round-trip
	date: str
	due_date: str
	customer_id: Optional[str] = Field(default=None, foreign_key="customer.id", index=True)
	notes: str = ""
	tax_rate: float = 0.0
	subtotal: float = 0.0
	tax: float = 0.0
	total: float = 0.0
	status: str = "Borrador"

	customer: Optional["Customer"] = Relationship(sa_relationship=relationship("Customer", back_populates="invoices"))
	items: List["InvoiceItem"] = Relationship(
		sa_relationship=relationship(
			"InvoiceItem",
			back_populates="invoice",
			cascade="all, delete-orphan",
			order_by="InvoiceItem.position",
		)
	)


class InvoiceItem(SQLModel, table=True):
	id: str = Field(default_factory=new_id, primary_key=True)
	invoice_id: str = Field(foreign_key="invoice.id", index=True, ondelete="CASCADE")
	# Order of the line on the invoice
	position: int = 0
	description: str = ""
	quantity: float = 0.0
	price: float = 0.0

	invoice: Optional["Invoice"] = Relationship(sa_relationship=relationship("Invoice", back_populates="items"))
