from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from facturador.core.numbering import generate_new_invoice_number
from facturador.core.settings import Settings, load_settings, save_settings
from facturador.data import repo
from facturador.data.db import configure_engine, create_db_and_tables
from facturador.data.errors import RepositoryError
from facturador.data.serialization import camel_to_snake, data_to_payload
from facturador.pdf.export import PdfExportError, export_invoice_pdf

logger = logging.getLogger(__name__)

SAVE_DIR = Path.home() / "Documents" / "Facturas"


def _out_dir(settings: Settings, override: Optional[str]) -> Path:
	if override:
		return Path(override)
	if settings.last_pdf_dir:
		return Path(settings.last_pdf_dir)
	return SAVE_DIR


def cmd_init_db(args, settings: Settings) -> int:
	create_db_and_tables()
	print("Database ready")
	return 0


def cmd_next_number(args, settings: Settings) -> int:
	count = len(repo.list_invoices())
	print(generate_new_invoice_number(count, settings.invoice_prefix, settings.invoice_number_width))
	return 0


def cmd_export(args, settings: Settings) -> int:
	invoice = repo.get_invoice(args.invoice_id)
	if invoice is None:
		print(f"Invoice not found: {args.invoice_id}", file=sys.stderr)
		return 1
	customer = repo.get_customer(invoice.get("customer_id"))
	out_dir = _out_dir(settings, args.out)
	path = export_invoice_pdf(invoice, customer, out_dir, settings=settings)
	if args.out:
		settings.last_pdf_dir = str(out_dir)
		save_settings(settings, args.settings)
	print(path)
	return 0


def cmd_dump_json(args, settings: Settings) -> int:
	json.dump(data_to_payload(repo.load_all()), sys.stdout, indent=2, ensure_ascii=False)
	sys.stdout.write("\n")
	return 0


def import_payload(payload: Dict[str, Any], settings: Settings) -> Dict[str, int]:
	"""Load a client-shaped {customers, services, invoices} document into the store.

	Customer ids in the payload are remapped to the ids the store assigns.
	"""
	data = camel_to_snake(payload)
	id_map: Dict[str, str] = {}
	for c in data.get("customers") or []:
		saved = repo.save_customer(c)
		if c.get("id"):
			id_map[str(c["id"])] = saved["id"]
	for sv in data.get("services") or []:
		repo.save_service(sv)
	invoices: List[Dict[str, Any]] = data.get("invoices") or []
	for inv in invoices:
		inv = {**inv, "customer_id": id_map.get(str(inv.get("customer_id")), None)}
		repo.save_invoice(inv, is_new=True, strict_dates=settings.strict_dates)
	return {
		"customers": len(data.get("customers") or []),
		"services": len(data.get("services") or []),
		"invoices": len(invoices),
	}


def cmd_import_json(args, settings: Settings) -> int:
	with open(args.path, "r", encoding="utf-8") as f:
		payload = json.load(f)
	counts = import_payload(payload, settings)
	print(", ".join(f"{k}: {v}" for k, v in counts.items()))
	return 0


def build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="facturador", description="Invoices, totals and PDF export")
	p.add_argument("--settings", default=None, help="path to settings.json")
	p.add_argument("--db", default=None, help="SQLAlchemy URL (overrides settings/env)")
	p.add_argument("-v", "--verbose", action="store_true")
	sub = p.add_subparsers(dest="command", required=True)

	sub.add_parser("init-db", help="create tables").set_defaults(func=cmd_init_db)
	sub.add_parser("next-number", help="print the next invoice number").set_defaults(func=cmd_next_number)

	ex = sub.add_parser("export", help="render an invoice to PDF")
	ex.add_argument("invoice_id")
	ex.add_argument("--out", default=None, help="output directory")
	ex.set_defaults(func=cmd_export)

	sub.add_parser("dump-json", help="print all data in the client JSON shape").set_defaults(func=cmd_dump_json)

	im = sub.add_parser("import-json", help="load customers/services/invoices from client JSON")
	im.add_argument("path")
	im.set_defaults(func=cmd_import_json)
	return p


def main(argv: Optional[List[str]] = None) -> int:
	args = build_parser().parse_args(argv)
	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.INFO,
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)
	settings = load_settings(args.settings)
	configure_engine(args.db or settings.db_url)
	create_db_and_tables()
	try:
		return args.func(args, settings)
	except (RepositoryError, PdfExportError) as e:
		logger.debug("Command %s failed", args.command, exc_info=True)
		print(f"Error: {e}", file=sys.stderr)
		return 1


if __name__ == "__main__":
	sys.exit(main())
