from __future__ import annotations


class RepositoryError(ValueError):
	"""Base class for persistence failures surfaced to the caller."""


class NotFoundError(RepositoryError):
	pass


class ValidationError(RepositoryError):
	pass


class ConflictError(RepositoryError):
	pass


class CustomerInUseError(ConflictError):
	def __init__(self, customer_id: str, invoice_count: int):
		super().__init__(f"Cannot delete: customer has {invoice_count} invoice(s).")
		self.customer_id = customer_id
		self.invoice_count = invoice_count


class DuplicateServiceError(ConflictError):
	def __init__(self, description: str):
		super().__init__(f"A service or product with this description already exists: {description}")
		self.description = description
