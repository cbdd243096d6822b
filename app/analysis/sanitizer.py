"""Heuristic repair of near-JSON text returned by the analysis model.

This is not a validating parser. Each stage is a pure ``str -> str``
function that fixes one malformation the model is known to emit and leaves
clean JSON untouched:

1. Keep only the first fenced code block, if any.
2. Collapse runs of backslashes into one.
3. Strip C0/C1 control characters.
4. Drop backslashes that do not start a valid JSON escape.

If the result still does not parse, the fallback stages run once and the
parse is retried exactly once. The fallback may damage values that
legitimately contain doubled backslashes.
"""

import json
import re
from collections.abc import Callable, Sequence
from typing import Any

from app.analysis.exceptions import MalformedResponseError
from app.logging.logger import Log

Stage = Callable[[str], str]

_FENCED_BLOCK_RE = re.compile(r"```(?:json)?([\s\S]*?)```")
_BACKSLASH_RUN_RE = re.compile(r"\\+")
_DOUBLED_BACKSLASH_RE = re.compile(r"\\\\+")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f-\x9f]")
_INVALID_ESCAPE_RE = re.compile(r'\\([^"\\/bfnrtu])')
_ESCAPED_DOCUMENT_RE = re.compile(r'^\s*[{\[]\s*\\"')


def extract_fenced_block(text: str) -> str:
    if "```" not in text:
        return text
    match = _FENCED_BLOCK_RE.search(text)
    if match and match.group(1):
        return match.group(1).strip()
    return text


def collapse_backslashes(text: str) -> str:
    return _BACKSLASH_RUN_RE.sub(lambda _: "\\", text)


def strip_control_characters(text: str) -> str:
    return _CONTROL_CHARS_RE.sub("", text)


def drop_invalid_escapes(text: str) -> str:
    return _INVALID_ESCAPE_RE.sub(r"\1", text)


def normalize_doubled_backslashes(text: str) -> str:
    """Turn any run of two or more backslashes into one escaped backslash."""
    return _DOUBLED_BACKSLASH_RE.sub(lambda _: "\\\\", text)


def unescape_quoted_document(text: str) -> str:
    """Unescape structural quotes of a document that was serialized twice.

    ``{\\"a\\":1}`` becomes ``{"a":1}``. Text that does not open with an
    escaped key or item is returned as is.
    """
    if not _ESCAPED_DOCUMENT_RE.match(text):
        return text
    return text.replace('\\"', '"')


def escape_literal_newlines(text: str) -> str:
    return text.replace("\n", "\\n")


REPAIR_STAGES: tuple[Stage, ...] = (
    extract_fenced_block,
    collapse_backslashes,
    strip_control_characters,
    drop_invalid_escapes,
)

FALLBACK_STAGES: tuple[Stage, ...] = (
    normalize_doubled_backslashes,
    unescape_quoted_document,
    escape_literal_newlines,
)


def apply_stages(text: str, stages: Sequence[Stage]) -> str:
    for stage in stages:
        text = stage(text)
    return text


def parse_structured(raw: str) -> dict[str, Any]:
    """Repair and parse the model reply into a JSON object.

    Raises:
        MalformedResponseError: if both parse attempts fail or the JSON is
                                not an object. Carries the unmodified reply.
    """
    cleaned = apply_stages(raw, REPAIR_STAGES)
    Log.debug(f"Sanitized response:\n{cleaned}")
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as first_exc:
        Log.warning(f"First parse attempt failed, applying fallback repair: {first_exc}")
        cleaned = apply_stages(cleaned, FALLBACK_STAGES)
        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise MalformedResponseError(
                f"Invalid JSON response: {exc}", raw_response=raw
            ) from exc

    if not isinstance(parsed, dict):
        raise MalformedResponseError("JSON response must be an object", raw_response=raw)
    return parsed
