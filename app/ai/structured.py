from __future__ import annotations

import json
import re
from typing import Any


def _extract_fenced_block(text: str) -> str | None:
    blocks = re.findall(r"```(?:json)?\s*(.*?)\s*```", text, re.DOTALL | re.IGNORECASE)
    return blocks[0].strip() if blocks else None


def _extract_balanced_object(text: str) -> str | None:
    """First balanced top-level JSON object in ``text``, string-literal aware."""
    start_idx = text.find("{")
    if start_idx == -1:
        return None

    depth = 0
    in_string = False
    escape = False
    for i in range(start_idx, len(text)):
        ch = text[i]
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start_idx:i + 1]
    return None


def _candidates(raw_text: str) -> list[str]:
    text = (raw_text or "").strip()
    if not text:
        return []

    candidates = [text]
    fenced = _extract_fenced_block(text)
    if fenced:
        candidates.append(fenced)
    balanced = _extract_balanced_object(text)
    if balanced:
        candidates.append(balanced)

    seen = set()
    unique: list[str] = []
    for candidate in candidates:
        if candidate in seen:
            continue
        seen.add(candidate)
        unique.append(candidate)
    return unique


def parse_json_object(raw_text: str) -> dict[str, Any]:
    """Parse a model reply into a JSON object, tolerating fences and surrounding prose.

    Raises ``ValueError`` when no candidate decodes to a mapping.
    """
    errors: list[str] = []
    for candidate in _candidates(raw_text):
        try:
            parsed = json.loads(candidate, strict=False)
        except json.JSONDecodeError as exc:
            errors.append(str(exc))
            continue
        if isinstance(parsed, dict):
            return parsed
        errors.append(f"expected a JSON object, got {type(parsed).__name__}")

    if not errors:
        raise ValueError("Model returned empty content")
    raise ValueError("Unable to parse JSON response: " + " | ".join(errors[:3]))
