from __future__ import annotations

import logging
import sys
from typing import Any


def preview(s: str | bytes | Any, n: int = 300) -> str:
    """Shorten long payloads (prompts, raw model output) for log lines."""
    if isinstance(s, bytes):
        s = s.decode("utf-8", "replace")
    s = str(s).strip()
    return s if len(s) <= n else (s[: n - 20] + "... <truncated>")


def setup_logging(level: str = "INFO") -> None:
    lvl = getattr(logging, str(level).upper(), logging.INFO)
    if not isinstance(lvl, int):
        lvl = logging.INFO

    root = logging.getLogger()
    if getattr(root, "_cloudarch_logging_configured", False):
        return

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    )
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(lvl)
    root._cloudarch_logging_configured = True  # type: ignore[attr-defined]
