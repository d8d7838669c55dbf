from __future__ import annotations

from pathlib import Path

import pytest

from facturador.data.db import configure_engine, create_db_and_tables


@pytest.fixture
def db(tmp_path: Path):
    """Point the engine at a fresh SQLite file for the duration of a test."""
    url = f"sqlite:///{(tmp_path / 'test.db').as_posix()}"
    engine = configure_engine(url)
    create_db_and_tables()
    yield url
    engine.dispose()


@pytest.fixture
def sample_invoice() -> dict:
    return {
        "id": "tmp-1",
        "invoice_number": "FACT-001",
        "date": "31/12/2024",
        "due_date": "",
        "customer_id": None,
        "items": [
            {"id": "a", "description": "Consulting", "quantity": 2, "price": 10},
            {"id": "b", "description": "Hosting", "quantity": "1", "price": "5"},
        ],
        "notes": "Line one\r\nLine two",
        "tax_rate": "21",
        "subtotal": 0,
        "tax": 0,
        "total": 0,
        "status": "Borrador",
    }
