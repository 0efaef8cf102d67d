import json
import logging
import re

from app.core.metrics import increment_json_parse_failure

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL | re.IGNORECASE)


def _strip_markdown_fences(text: str) -> str:
    match = _FENCE_RE.search(text)
    return match.group(1).strip() if match else text


def _extract_balanced(text: str, open_char: str, close_char: str) -> str | None:
    """Return the outermost bracketed span starting at the first ``open_char``."""
    start = text.find(open_char)
    if start == -1:
        return None

    depth = 0
    in_string = False
    escape_next = False
    for i, char in enumerate(text[start:], start):
        if escape_next:
            escape_next = False
            continue
        if char == "\\":
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if char == open_char:
            depth += 1
        elif char == close_char:
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def parse_json_response(text: str, operation: str) -> dict | list | None:
    """Parse model output as JSON, tolerating fences, prose and trailing commas.

    Returns None when nothing parseable is found.
    """
    candidates = [text, _strip_markdown_fences(text.strip())]
    stripped = candidates[1]
    pairs = sorted(
        (("{", "}"), ("[", "]")),
        key=lambda pair: stripped.find(pair[0]) if pair[0] in stripped else len(stripped),
    )
    for open_char, close_char in pairs:
        span = _extract_balanced(stripped, open_char, close_char)
        if span:
            candidates.append(span)
            candidates.append(re.sub(r",\s*([}\]])", r"\1", span))

    for candidate in candidates:
        try:
            return json.loads(candidate)
        except (TypeError, ValueError):
            continue

    increment_json_parse_failure(operation)
    logger.warning("json_parse_failed operation=%s preview=%r", operation, text[:200])
    return None
