from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from facturador.core.invoices import sanitize_invoice
from facturador.core.settings import Settings
from facturador.pdf.definition import build_invoice_pdf_definition, pdf_filename
from facturador.pdf.renderer import PdfRenderer

logger = logging.getLogger(__name__)


class PdfExportError(RuntimeError):
    """Raised when an invoice could not be rendered to PDF."""


def export_invoice_pdf(
    invoice: Dict[str, Any],
    customer: Optional[Dict[str, Any]],
    out_dir: Path | str,
    renderer: Optional[PdfRenderer] = None,
    settings: Optional[Settings] = None,
    on_complete: Optional[Callable[[Path], None]] = None,
) -> Path:
    """Sanitize, describe and render an invoice to `<out_dir>/Factura-<number>.pdf`."""
    settings = settings or Settings()
    clean = sanitize_invoice(invoice, strict_dates=settings.strict_dates)
    definition = build_invoice_pdf_definition(clean, customer, settings)
    out_path = Path(out_dir) / pdf_filename(clean)
    try:
        return (renderer or PdfRenderer()).render(definition, out_path, on_complete=on_complete)
    except Exception as e:
        logger.exception("Failed to render invoice %s", clean.get("invoice_number"))
        raise PdfExportError(f"Could not generate the PDF: {e}") from e
