import json
import re
from typing import Any, Dict

from .errors import UnparseableResponse

_FENCE = re.compile(r"```[A-Za-z0-9_-]*[ \t]*\n?")
# Greedy: first "{" through last "}"
_OBJECT_SPAN = re.compile(r"\{[\s\S]*\}")


def _loads_object(candidate: str) -> Dict[str, Any] | None:
    try:
        value = json.loads(candidate)
    except (json.JSONDecodeError, RecursionError):
        return None
    return value if isinstance(value, dict) else None


def extract_json(raw: str) -> Dict[str, Any]:
    """Pull a JSON object out of a chat model's reply.

    Models often wrap the object in a markdown code fence or surround it
    with prose. A fenced reply has every fence marker removed before a
    strict parse; failing that, the widest ``{...}`` span of the original
    reply is tried. Raises ``UnparseableResponse`` when neither works.
    """
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE.sub("", cleaned).strip()

    result = _loads_object(cleaned)
    if result is not None:
        return result

    match = _OBJECT_SPAN.search(raw)
    if match:
        result = _loads_object(match.group(0))
        if result is not None:
            return result

    raise UnparseableResponse(raw)
