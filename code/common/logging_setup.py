# =============================================================================
#  Discord Delivery
#  Copyright (C) 2025 Discord Delivery contributors
#
#  This source code is released under the GNU Affero General Public License
#  version 3.0. A copy of the license is available at:
#  https://www.gnu.org/licenses/agpl-3.0.en.html
# =============================================================================

from __future__ import annotations
import logging
import os
import sys as _sys
import json as _json
import contextvars
from datetime import datetime, timezone

from common.constants import REDACT_KEYS


run_id_var = contextvars.ContextVar("run_id", default="-")
scope_var = contextvars.ContextVar("scope", default="-")

EXTRA_KEYS = (
    "channel_id",
    "outcome",
    "took_ms",
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _redact_value(val):
    try:
        s = str(val)
        for k in REDACT_KEYS:
            envv = os.getenv(k)
            if envv and envv in s:
                s = s.replace(envv, "***REDACTED***")
        return s
    except Exception:
        return "<unprintable>"


class RedactFilter(logging.Filter):
    """Injects run context and redacts the bot token from msg/args."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = run_id_var.get()
        record.scope = scope_var.get()
        if isinstance(record.args, (tuple, list)):
            redacted = [
                _redact_value(a) if isinstance(a, str) else a for a in record.args
            ]
            record.args = tuple(redacted) if isinstance(record.args, tuple) else redacted
        elif isinstance(record.args, dict):
            record.args = {
                k: _redact_value(v) if isinstance(v, str) else v
                for k, v in record.args.items()
            }
        if isinstance(record.msg, str):
            record.msg = _redact_value(record.msg)
        return True


LEVEL_MARK = {
    logging.DEBUG: "🧩",
    logging.INFO: "✅",
    logging.WARNING: "⚠️",
    logging.ERROR: "❌",
    logging.CRITICAL: "💥",
}


def _extras(record: logging.LogRecord) -> dict:
    out = {}
    for k in EXTRA_KEYS:
        v = getattr(record, k, None)
        if v not in (None, "", []):
            out[k] = v
    return out


class HumanFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        mark = LEVEL_MARK.get(record.levelno, "•")
        scope = getattr(record, "scope", "-")
        rid = getattr(record, "run_id", "-")
        msg = super().format(record)
        extras = " ".join(f"{k}={v}" for k, v in _extras(record).items())
        extras_s = f" | {extras}" if extras else ""
        return f"{_now_iso()} {mark} {record.levelname:<8} [{scope}] (run={rid}) {msg}{extras_s}"


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = {
            "time": _now_iso(),
            "lvl": record.levelname,
            "msg": super().format(record),
            "scope": getattr(record, "scope", "-"),
            "run_id": getattr(record, "run_id", "-"),
            "logger": record.name,
        }
        base.update(_extras(record))
        return _json.dumps(base, separators=(",", ":"), default=str)


class ContextAdapter(logging.LoggerAdapter):
    def process(self, msg, kwargs):
        extra = kwargs.setdefault("extra", {})
        for k, v in self.extra.items():
            extra.setdefault(k, v)
        return msg, kwargs


def get_logger(name="delivery", **ctx) -> ContextAdapter:
    logger = logging.getLogger(name)
    return ContextAdapter(logger, dict(ctx))


def configure_app_logging(level: str | None = None, fmt: str | None = None):
    """
    Unified logging config with:
    - LOG_FORMAT: HUMAN (default) or JSON
    - LOG_LEVEL: DEBUG/INFO/etc.
    - token redaction + run context
    """
    fmt = (fmt or os.getenv("LOG_FORMAT", "HUMAN")).strip().upper()
    lvl = (level or os.getenv("LOG_LEVEL", "INFO")).strip().upper()

    root = logging.getLogger("delivery")
    root.handlers.clear()
    h = logging.StreamHandler(stream=_sys.stdout)
    if fmt == "JSON":
        h.setFormatter(JSONFormatter("%(message)s"))
    else:
        h.setFormatter(HumanFormatter("%(message)s"))
    h.addFilter(RedactFilter())
    root.addHandler(h)

    root.propagate = False
    root.setLevel(getattr(logging, lvl, logging.INFO))

    for lib in ("aiohttp", "discord"):
        logging.getLogger(lib).setLevel(logging.WARNING)
    return get_logger("delivery")
