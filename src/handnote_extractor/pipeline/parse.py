from __future__ import annotations

import json

from handnote_extractor.engine.errors import MalformedOutputError
from handnote_extractor.schemas.pipeline import Document


def _reject_constant(name: str) -> float:
    raise ValueError(f"Non-standard JSON constant {name}")


def parse_model_json(raw_text: str) -> Document:
    """Parse a model response as a JSON object, tolerating a ```json fence.

    Raises MalformedOutputError if the text is not a strict JSON object
    (NaN and Infinity are rejected).
    """
    cleaned = raw_text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]

    try:
        data = json.loads(cleaned.strip(), parse_constant=_reject_constant)
    except ValueError as exc:
        raise MalformedOutputError(f"Response is not valid JSON: {exc}", raw_text) from exc

    if not isinstance(data, dict):
        raise MalformedOutputError(
            f"Expected a JSON object, got {type(data).__name__}", raw_text
        )
    return data
