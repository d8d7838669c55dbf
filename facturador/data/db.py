from __future__ import annotations

import logging
from typing import Generator, Optional
from contextlib import contextmanager

from sqlmodel import SQLModel, Session, create_engine
from sqlalchemy import event
from sqlalchemy.engine import Engine

from facturador.core.paths import default_db_url

logger = logging.getLogger(__name__)

_ENGINE: Optional[Engine] = None


def _enable_sqlite_fk(dbapi_conn, _record) -> None:
	# SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection
	cur = dbapi_conn.cursor()
	cur.execute("PRAGMA foreign_keys=ON")
	cur.close()


def configure_engine(url: Optional[str] = None, echo: bool = False) -> Engine:
	"""(Re)create the process-wide engine for `url` (defaults to the settings/env location)."""
	global _ENGINE
	if _ENGINE is not None:
		_ENGINE.dispose()
	url = url or default_db_url()
	connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
	_ENGINE = create_engine(url, echo=echo, connect_args=connect_args)
	if url.startswith("sqlite"):
		event.listen(_ENGINE, "connect", _enable_sqlite_fk)
	logger.debug("Database engine configured for %s", url)
	return _ENGINE


def get_engine(echo: bool = False) -> Engine:
	"""Return the singleton engine, creating it on first use."""
	if _ENGINE is None:
		return configure_engine(echo=echo)
	return _ENGINE


def create_db_and_tables(echo: bool = False) -> None:
	"""Create all SQLModel tables that are missing."""
	# Ensure models are imported so metadata has all tables
	import facturador.data.models  # noqa: F401

	SQLModel.metadata.create_all(get_engine(echo=echo))


def get_session(echo: bool = False) -> Session:
	"""Create a new Session bound to the engine.

	expire_on_commit=False so returned instances keep attribute values after commit.
	"""
	return Session(get_engine(echo=echo), expire_on_commit=False)


@contextmanager
def session_scope(echo: bool = False) -> Generator[Session, None, None]:
	"""One transaction: commit on success, roll back and re-raise on any error.

	Usage:
		with session_scope() as s:
			... use s ...
	"""
	session = get_session(echo=echo)
	try:
		yield session
		session.commit()
	except Exception:
		session.rollback()
		raise
	finally:
		session.close()
