from __future__ import annotations

DEFAULT_PREFIX = "FACT-"


def _format(prefix: str, n: int, width: int = 3) -> str:
	return f"{prefix}{n:0{width}d}"


def generate_new_invoice_number(existing_count: int, prefix: str = DEFAULT_PREFIX, width: int = 3) -> str:
	"""Return the number for the next invoice, e.g. 2 existing -> 'FACT-003'.

	Numbers are derived from the invoice count and are not guaranteed unique
	after deletions.
	"""
	try:
		count = max(int(existing_count), 0)
	except (TypeError, ValueError):
		count = 0
	return _format(prefix, count + 1, width)
