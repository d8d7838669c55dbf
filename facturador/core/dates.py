from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta, timezone
from typing import Optional

logger = logging.getLogger(__name__)

_DMY_RE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")
_ISO_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")


def _calendar_date(value: date) -> date:
	"""Calendar date of a date/datetime; aware datetimes are read in UTC."""
	if isinstance(value, datetime):
		if value.tzinfo is not None:
			value = value.astimezone(timezone.utc)
		return value.date()
	return value


def parse_date(value: object) -> Optional[date]:
	"""Parse a date value, an ISO-like string or DD/MM/YYYY into a date.

	Returns None for absent or unparseable input.
	"""
	if value is None:
		return None
	if isinstance(value, date):
		return _calendar_date(value)
	if not isinstance(value, str):
		return None

	s = value.strip()
	if not s:
		return None

	m = _DMY_RE.match(s)
	if m:
		day, month, year = (int(g) for g in m.groups())
		try:
			return date(year, month, day)
		except ValueError:
			return None

	try:
		return _calendar_date(datetime.fromisoformat(s.replace("Z", "+00:00")))
	except ValueError:
		pass
	# Date-only prefix of a longer timestamp we could not parse as a whole
	if _ISO_PREFIX_RE.match(s):
		try:
			return date.fromisoformat(s[:10])
		except ValueError:
			return None
	return None


def format_date(value: object) -> str:
	"""Render as DD/MM/YYYY, or "" when absent/unparseable."""
	d = parse_date(value)
	if d is None:
		return ""
	return d.strftime("%d/%m/%Y")


def today_iso(today: Optional[date] = None) -> str:
	return (today or date.today()).isoformat()


def add_days_iso(days: int, today: Optional[date] = None) -> str:
	return ((today or date.today()) + timedelta(days=days)).isoformat()


def normalize_date(value: object, fallback: str, *, strict: bool = False) -> str:
	"""Normalize a stored/edited date to YYYY-MM-DD.

	- date/datetime: ISO calendar date.
	- blank string or non-string: fallback.
	- DD/MM/YYYY: rearranged to YYYY-MM-DD.
	- YYYY-MM-DD prefix: first 10 characters.
	- anything else: returned trimmed and unchanged, or fallback when strict.
	"""
	if isinstance(value, date):
		return _calendar_date(value).isoformat()
	if not isinstance(value, str):
		return fallback

	trimmed = value.strip()
	if not trimmed:
		return fallback
	if _ISO_PREFIX_RE.match(trimmed):
		return trimmed[:10]
	m = _DMY_RE.match(trimmed)
	if m:
		day, month, year = m.groups()
		return f"{year}-{month}-{day}"

	if strict:
		logger.warning("Unrecognized date %r replaced by %s", trimmed, fallback)
		return fallback
	logger.warning("Unrecognized date %r kept as-is", trimmed)
	return trimmed
