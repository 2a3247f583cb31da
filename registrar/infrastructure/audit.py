"""Append-only audit logger for security-relevant events.

Writes newline-delimited JSON entries to `logs/audit.log` (or
``$AUDIT_LOG_DIR/audit.log``). A module-level lock keeps lines from
interleaving when several worker threads write at once.
"""
import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path

_LOCK = threading.Lock()

ROOT = Path(__file__).resolve().parent.parent.parent
LOG_DIR = Path(os.environ.get("AUDIT_LOG_DIR", ROOT / "logs"))
LOG_FILE = LOG_DIR / "audit.log"

logger = logging.getLogger("registrar.audit")


def _ensure_dir():
    LOG_DIR.mkdir(parents=True, exist_ok=True)


def log_event(action: str, actor_id: str | None, payload: dict | None = None) -> None:
    _ensure_dir()
    entry = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "action": action,
        "actor_id": actor_id,
        "payload": payload or {},
    }
    with _LOCK:
        with open(LOG_FILE, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, ensure_ascii=False, default=str) + "\n")


def try_log_event(action: str, actor_id: str | None, payload: dict | None = None) -> None:
    """Same as log_event but never raises; audit must not break a request."""
    try:
        log_event(action, actor_id, payload)
    except OSError as exc:
        logger.error("Audit write failed for %s: %s", action, exc)
