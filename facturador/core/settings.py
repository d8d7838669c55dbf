from __future__ import annotations

from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json
import logging

from facturador.core.paths import settings_path

logger = logging.getLogger(__name__)

DEFAULT_NOTES = """Account details
01 INFINITO LLC
Bank Account Info - Wise US inc.
108 W 13th St, Wilmington, 19801, United States

Account Number: 219773714368
Routing Number: 101019628
Swift/BIC: TRWIUS35XXX"""


@dataclass
class Settings:
	# Issuer block printed on every invoice
	company_name: str = "01 INFINITO LLC"
	company_address_lines: List[str] = field(
		default_factory=lambda: ["407 LINCOLN RD SUITE 11K", "MIAMI BEACH, FL 33139"]
	)
	company_email: str = "secceconi@01infinito.com"
	contact_label: str = "Point of Contact"
	# Signature slot when the customer has no contact person
	contact_person: str = "SEBASTIAN CECCONI"
	footer_lines: List[str] = field(
		default_factory=lambda: [
			"For questions concerning this purchase order, please contact",
			"Sebastian Cecconi, secceconi@01infinito.com",
		]
	)
	website: str = "www.01infinito.com"
	# BILL TO / SHIP TO when no customer is selected
	placeholder_customer_name: str = "01infinito LLC placeholder"
	placeholder_customer_address: str = "123 Main Street"
	default_customer_number: str = "001"

	invoice_prefix: str = "FACT-"
	invoice_number_width: int = 3
	default_tax_rate: float = 21.0
	due_days: int = 30
	default_notes: str = DEFAULT_NOTES
	# Replace unrecognized date strings with the fallback instead of keeping them
	strict_dates: bool = False

	# Optional override for the SQLAlchemy URL; FACTURADOR_DB_URL and the default path apply otherwise
	db_url: Optional[str] = None
	# Remember last used folder for exported PDFs
	last_pdf_dir: Optional[str] = None

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "Settings":
		# Merge provided values over defaults, ignore unknown keys
		defaults = asdict(cls())
		merged: Dict[str, Any] = {**defaults, **{k: v for k, v in data.items() if k in defaults}}
		return cls(**merged)

	def to_dict(self) -> Dict[str, Any]:
		return asdict(self)


def _coerce_path(path: Optional[Union[str, Path]]) -> Path:
	return Path(path) if path is not None else settings_path()


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
	"""
	Load settings from JSON (UTF-8). If the file is missing, write defaults and return them.
	"""
	p = _coerce_path(path)
	if not p.exists():
		settings = Settings()
		save_settings(settings, p)
		return settings

	try:
		with p.open("r", encoding="utf-8") as f:
			raw: Dict[str, Any] = json.load(f)
	except (json.JSONDecodeError, OSError):
		# If unreadable/corrupt, fall back to defaults (do not overwrite automatically)
		logger.warning("Could not read settings from %s; using defaults", p)
		return Settings()

	return Settings.from_dict(raw if isinstance(raw, dict) else {})


def save_settings(settings: Settings, path: Optional[Union[str, Path]] = None) -> None:
	"""Save settings to JSON (UTF-8), creating parent dirs if needed."""
	p = _coerce_path(path)
	p.parent.mkdir(parents=True, exist_ok=True)
	tmp = p.with_suffix(p.suffix + ".tmp")
	with tmp.open("w", encoding="utf-8", newline="\n") as f:
		json.dump(settings.to_dict(), f, indent=2, ensure_ascii=False)
		f.write("\n")
	tmp.replace(p)
