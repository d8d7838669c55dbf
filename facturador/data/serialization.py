from __future__ import annotations

import re
from typing import Any, Dict

_SNAKE_RE = re.compile(r"_([a-z0-9])")
_CAMEL_RE = re.compile(r"(?<!^)([A-Z])")


def camel_key(key: str) -> str:
	return _SNAKE_RE.sub(lambda m: m.group(1).upper(), key)


def snake_key(key: str) -> str:
	return _CAMEL_RE.sub(lambda m: "_" + m.group(1).lower(), key)


def snake_to_camel(obj: Any) -> Any:
	"""Recursively rename dict keys tax_id -> taxId; values are untouched."""
	if isinstance(obj, list):
		return [snake_to_camel(v) for v in obj]
	if isinstance(obj, dict):
		return {(camel_key(k) if isinstance(k, str) else k): snake_to_camel(v) for k, v in obj.items()}
	return obj


def camel_to_snake(obj: Any) -> Any:
	"""Recursively rename dict keys taxId -> tax_id; values are untouched."""
	if isinstance(obj, list):
		return [camel_to_snake(v) for v in obj]
	if isinstance(obj, dict):
		return {(snake_key(k) if isinstance(k, str) else k): camel_to_snake(v) for k, v in obj.items()}
	return obj


def invoice_to_payload(invoice: Dict[str, Any]) -> Dict[str, Any]:
	"""Invoice dict in the camelCase shape the web client exchanges."""
	return snake_to_camel(invoice)


def invoice_from_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
	return camel_to_snake(payload)


def data_to_payload(data: Dict[str, Any]) -> Dict[str, Any]:
	"""`repo.load_all()` result for the client: {invoices, customers, services}."""
	return snake_to_camel(data)
