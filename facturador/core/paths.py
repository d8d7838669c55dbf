from __future__ import annotations

import os
import sys
from pathlib import Path


def is_frozen() -> bool:
    return bool(getattr(sys, "frozen", False))


def base_path() -> Path:
    """Return the base path for bundled resources (fonts) depending on runtime.

    - In PyInstaller onefile, resources are extracted to sys._MEIPASS.
    - In dev, use the project root.
    """
    if is_frozen():
        meipass = getattr(sys, "_MEIPASS", None)
        if meipass:
            return Path(meipass)
    return Path(__file__).resolve().parents[2]


def resource_path(rel: str | Path) -> Path:
    """Resolve a resource path (e.g., 'assets/fonts/Roboto-Regular.ttf') for current runtime."""
    rel = Path(rel)
    if rel.is_absolute():
        return rel
    return base_path() / rel


def user_writable_dir() -> Path:
    """Directory for user-writable files (settings.json, the SQLite DB).

    FACTURADOR_HOME wins when set; otherwise the executable's folder when
    frozen, or the project root in dev.
    """
    env = os.environ.get("FACTURADOR_HOME")
    if env:
        return Path(env)
    if is_frozen():
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[2]


def settings_path() -> Path:
    return user_writable_dir() / "settings.json"


def default_db_url() -> str:
    env = os.environ.get("FACTURADOR_DB_URL")
    if env:
        return env
    # posix path for SQLAlchemy URL compatibility on Windows
    return f"sqlite:///{(user_writable_dir() / 'facturador.db').as_posix()}"
