import json
import re
from typing import Any, List, Optional

_FENCED_RE = re.compile(r"```(?:json)?\s*\n?(.*?)```", re.DOTALL | re.IGNORECASE)
_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return None


def parse_concepts(text: str) -> Optional[List[Any]]:
    """
    Extract the concept array from LLM output.

    Strategy:
    1. Direct json.loads (fast path)
    2. ```json fenced block
    3. First [...] span
    An object wrapping the array under "concepts" is unwrapped at each step.

    Returns None when no array can be recovered. NEVER throws.
    """
    if not text or not isinstance(text, str):
        return None

    candidates = [text.strip()]

    fenced = _FENCED_RE.search(text)
    if fenced:
        candidates.append(fenced.group(1).strip())

    array = _ARRAY_RE.search(text)
    if array:
        candidates.append(array.group(0))

    for candidate in candidates:
        data = _loads(candidate)
        if isinstance(data, dict):
            data = data.get("concepts")
        if isinstance(data, list):
            return data

    return None
