from __future__ import annotations

import math
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation


def sanitize_number(value: object) -> float:
	"""Coerce loosely-typed numeric input to a finite float.

	Numbers, numeric strings and Decimals (as returned by some DB drivers) are
	accepted. None, blank strings, NaN, infinities and anything unparseable
	become 0. Never raises.
	"""
	if value is None:
		return 0.0
	if isinstance(value, str):
		value = value.strip()
		# float() also takes digit separators like "1_000"; form input does not
		if not value or "_" in value:
			return 0.0
	try:
		numeric = float(value)  # type: ignore[arg-type]
	except (TypeError, ValueError, OverflowError):
		return 0.0
	return numeric if math.isfinite(numeric) else 0.0


def to_decimal(x: object) -> Decimal:
	"""Best-effort conversion to Decimal via str to avoid binary float artifacts."""
	try:
		return Decimal(str(sanitize_number(x)))
	except (InvalidOperation, ValueError, TypeError):
		return Decimal("0")


def round_money(x: object, places: int = 2) -> float:
	"""Round half away from zero on the shortest decimal form and return float."""
	q = Decimal(1).scaleb(-places)
	return float(to_decimal(x).quantize(q, rounding=ROUND_HALF_UP))


def _grouped(x: object, places: int) -> str:
	q = Decimal(1).scaleb(-places)
	d = to_decimal(x).quantize(q, rounding=ROUND_HALF_UP)
	if d == 0:
		# avoid "-0.00"
		d = abs(d)
	return f"{d:,.{places}f}"


def format_quantity(value: object) -> str:
	"""Whole quantities without decimals ("3"), others with two ("3.50")."""
	numeric = sanitize_number(value)
	if numeric.is_integer():
		return str(int(numeric))
	return _grouped(numeric, 2)


def format_currency(value: object) -> str:
	"""Two decimals, thousands-grouped, no currency symbol."""
	return _grouped(value, 2)


def format_percentage(value: object) -> str:
	"""Zero to two decimals with trailing zeros dropped: 21 -> "21", 10.5 -> "10.5"."""
	s = _grouped(value, 2)
	if "." in s:
		s = s.rstrip("0").rstrip(".")
	return s
