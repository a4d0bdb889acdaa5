"""Extraction of the JSON payload from a free-form service reply."""

from __future__ import annotations

import json
import re
from typing import Any

from loguru import logger

from testgen.services.errors import ExtractionError


FENCED_JSON = re.compile(r"```json\s*\n?([\s\S]*?)\n?```", re.IGNORECASE)
BRACKETED_ARRAY = re.compile(r"\[[\s\S]*\]")


def locate_payload(reply_text: str) -> str:
    """Return the JSON text: a ```json fence first, else the outermost ``[...]``."""
    fenced = FENCED_JSON.search(reply_text)
    if fenced:
        return fenced.group(1)
    bracketed = BRACKETED_ARRAY.search(reply_text)
    if bracketed:
        return bracketed.group(0)
    raise ExtractionError("Failed to extract JSON from API response")


def parse_reply(reply_text: str) -> Any:
    """Parse the located payload. Only JSON well-formedness is checked here."""
    payload = locate_payload(reply_text or "")
    try:
        return json.loads(payload)
    except json.JSONDecodeError as exc:
        logger.warning(f"Reply payload is not valid JSON | preview={payload[:500]}")
        raise ExtractionError(f"Failed to parse JSON from API response: {exc.msg} at position {exc.pos}") from exc
