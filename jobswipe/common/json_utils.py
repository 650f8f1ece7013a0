"""
JSON Utilities for LLM Response Parsing.

Compatibility responses are requested as a bare JSON object, but free-tier
models regularly wrap it in code fences or prose, or emit malformed JSON
(single quotes, trailing commas). Uses json-repair as a fallback when
json.loads() fails.
"""

import json
import re
from typing import Any, Dict

from json_repair import repair_json

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)


def parse_llm_json(text: str) -> Dict[str, Any]:
    """
    Parse a JSON object from an LLM response.

    Args:
        text: Raw LLM response text that may contain JSON

    Returns:
        Parsed dictionary

    Raises:
        ValueError: If no JSON object can be extracted or repaired

    Example:
        >>> parse_llm_json('```json\\n{"score": 82}\\n```')
        {'score': 82}
        >>> parse_llm_json("{'score': 82,}")
        {'score': 82}
    """
    if not text or not text.strip():
        raise ValueError("Empty input: no JSON content to parse")

    json_str = _strip_markdown_blocks(text.strip())
    json_str = _extract_json_object(json_str)

    try:
        parsed = json.loads(json_str)
    except json.JSONDecodeError:
        parsed = repair_json(json_str, return_objects=True)

    # LLM sometimes wraps the object in brackets: [{...}]
    if isinstance(parsed, list) and len(parsed) == 1:
        parsed = parsed[0]

    if not isinstance(parsed, dict) or not parsed:
        raise ValueError(
            f"No JSON object in LLM response (first 200 chars): {text[:200]}"
        )
    return parsed


def _strip_markdown_blocks(text: str) -> str:
    """Return the body of the first ``` or ```json fence, or the text itself."""
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text


def _extract_json_object(text: str) -> str:
    """
    Extract the outermost {...} span from surrounding prose.

    Returns the text unchanged when no braces are found so the repair step
    still gets a chance at it.
    """
    match = re.search(r'\{[\s\S]*\}', text)
    if match:
        return match.group(0)
    return text
