from __future__ import annotations

import math
from typing import Any, Callable

from handnote_extractor.schemas.pipeline import Document

DEFAULT_CONFIDENCE = 0.5

GENERIC_CONFIDENCE_FIELDS = (
    "ocr_confidence",
    "classification_confidence",
    "overall_extraction_confidence",
    "overall_labs_confidence",
    "confidence",
    "confidence_score",
)

Accessor = Callable[[Document], Any]


def _at_root(field: str) -> Accessor:
    return lambda doc: doc.get(field)


def _in_metadata(field: str) -> Accessor:
    def access(doc: Document) -> Any:
        metadata = doc.get("metadata")
        return metadata.get(field) if isinstance(metadata, dict) else None

    return access


def confidence_accessors(primary_field: str) -> list[Accessor]:
    """Accessors in search order: primary field, then generic names, root before metadata."""
    accessors = [_at_root(primary_field), _in_metadata(primary_field)]
    for field in GENERIC_CONFIDENCE_FIELDS:
        accessors.extend((_at_root(field), _in_metadata(field)))
    return accessors


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def extract_confidence(doc: Document, primary_field: str) -> float:
    """Find the self-reported confidence in a parsed model result.

    Returns DEFAULT_CONFIDENCE when no accessor yields a number; absence of a
    confidence is the neutral case, not an error.
    """
    if not isinstance(doc, dict):
        return DEFAULT_CONFIDENCE
    for accessor in confidence_accessors(primary_field):
        value = _as_float(accessor(doc))
        if value is not None:
            return value
    return DEFAULT_CONFIDENCE
