"""Text processing utilities.

Helpers for turning free-form LLM output into parseable JSON text.
"""

import re

# Patterns for removing thinking/reasoning blocks from LLM output
THINK_PATTERNS = [
    re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<thinking>.*?</thinking>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<analysis>.*?</analysis>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<reasoning>.*?</reasoning>", re.DOTALL | re.IGNORECASE),
]

# Greedy: first opening bracket to last closing bracket
JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
JSON_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")


def strip_think(text: str) -> str:
    """Remove thinking/reasoning tags from LLM output.

    Args:
        text: Raw LLM output text

    Returns:
        Cleaned text without thinking artifacts
    """
    result = text
    for pattern in THINK_PATTERNS:
        result = pattern.sub("", result)
    return result.strip()


def strip_code_fences(text: str) -> str:
    """Drop a leading ```json / ``` fence and a trailing ``` fence."""
    cleaned = text.strip()

    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]

    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]

    return cleaned.strip()


def clean_json_response(content: str) -> str:
    """Extract the JSON object or array embedded in an LLM reply.

    Strips thinking tags and markdown fences, then picks the outermost
    ``[...]`` or ``{...}`` span. When both are present the one that starts
    first wins, so a top-level array of objects is returned whole.

    Args:
        content: Raw completion text

    Returns:
        Candidate JSON text (may still be invalid JSON)
    """
    cleaned = strip_code_fences(strip_think(content))

    object_match = JSON_OBJECT_PATTERN.search(cleaned)
    array_match = JSON_ARRAY_PATTERN.search(cleaned)

    if array_match and (
        object_match is None or array_match.start() < object_match.start()
    ):
        return array_match.group(0)
    if object_match:
        return object_match.group(0)

    return cleaned
