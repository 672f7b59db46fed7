"""YAML parsing under a wall-clock budget using ruamel.yaml."""

from __future__ import annotations

import asyncio
import logging
import math
import time
from io import StringIO
from typing import Any

from ruamel.yaml import YAML, YAMLError

from guardian.errors import ParseSyntaxError, ParseTimeout

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 5000
MIN_TIMEOUT_MS = 1
MAX_TIMEOUT_MS = 10_000


def clamp_timeout(timeout_ms: float | None) -> int:
    """Clamp a requested budget into [1, 10000] ms, defaulting to 5000."""
    if timeout_ms is None or not math.isfinite(timeout_ms):
        return DEFAULT_TIMEOUT_MS
    return max(MIN_TIMEOUT_MS, min(MAX_TIMEOUT_MS, int(timeout_ms)))


def round_trip_yaml() -> YAML:
    """Return a round-trip loader/dumper (YAML 1.2 core, duplicate keys rejected).

    A fresh instance per call keeps concurrent parses from sharing state.
    """
    yaml = YAML()
    yaml.allow_duplicate_keys = False
    yaml.preserve_quotes = True
    yaml.default_flow_style = False
    yaml.indent(mapping=2, sequence=4, offset=2)
    return yaml


def load_document(content: str) -> Any:
    """Parse *content* synchronously, raising ParseSyntaxError on bad YAML."""
    try:
        return round_trip_yaml().load(StringIO(content))
    except YAMLError as e:
        line = column = None
        mark = getattr(e, "problem_mark", None)
        if mark is not None:
            line = mark.line + 1  # 0-indexed to 1-indexed
            column = mark.column + 1
        raise ParseSyntaxError(str(e), line=line, column=column) from e


def dump_document(document: Any) -> str:
    """Serialise a (round-trip or plain) document back to YAML text."""
    buf = StringIO()
    round_trip_yaml().dump(document, buf)
    return buf.getvalue()


def _parse_unit(content: str, simulate_delay_ms: int) -> Any:
    if simulate_delay_ms > 0:
        time.sleep(simulate_delay_ms / 1000)
    return load_document(content)


async def parse_bounded(
    content: str,
    timeout_ms: float | None = None,
    *,
    simulate_delay_ms: int = 0,
) -> Any:
    """Parse YAML in a worker thread raced against a cancellation timer.

    Raises ParseTimeout when the budget expires first; whatever the worker
    produces afterwards is dropped. Raises ParseSyntaxError for malformed
    YAML, including duplicate keys.
    """
    budget = clamp_timeout(timeout_ms)
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(_parse_unit, content, simulate_delay_ms),
            timeout=budget / 1000,
        )
    except asyncio.TimeoutError as e:
        logger.warning("YAML parse timed out after %d ms", budget)
        raise ParseTimeout(budget) from e
