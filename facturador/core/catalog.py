from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from facturador.core.currency import sanitize_number

SERVICE_CATEGORIES = ("service", "product")
DEFAULT_CATEGORY = "service"


def normalize_category(value: object) -> str:
	raw = value.strip().lower() if isinstance(value, str) else ""
	return raw if raw in SERVICE_CATEGORIES else DEFAULT_CATEGORY


def normalize_service(service: Dict[str, Any]) -> Dict[str, Any]:
	"""Copy of a catalog entry with a numeric price and a known category."""
	return {
		**service,
		"price": sanitize_number(service.get("price")),
		"category": normalize_category(service.get("category")),
	}


def find_service(services: Iterable[Dict[str, Any]], description: str) -> Optional[Dict[str, Any]]:
	"""First service whose description equals `description` exactly.

	Descriptions are unique in the store; if duplicates slip through, the first wins.
	"""
	for service in services:
		if service.get("description") == description:
			return service
	return None


def apply_service_autofill(item: Dict[str, Any], services: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
	"""Return the item with its price taken from a matching catalog entry.

	The item keeps its own copy; later catalog edits do not touch it.
	"""
	match = find_service(services, item.get("description") or "")
	if match is None:
		return dict(item)
	return {**item, "price": sanitize_number(match.get("price"))}
