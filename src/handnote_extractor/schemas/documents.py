"""Typed views over the free-form JSON documents models return.

A model's output schema is whatever its prompt asked for, so the pipeline
keeps every result as a plain dict. The few fields the pipeline reads are
validated through a view; anything that doesn't fit stays opaque.
"""
from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError


class _View(BaseModel):
    model_config = ConfigDict(extra="allow")


class OcrView(_View):
    raw_text: str | None = None


class ClassificationView(_View):
    scenario: str | None = None
    corrected_text: str | None = None


class ExtractionView(_View):
    soap_note: Any = None


class OpaqueDocument(BaseModel):
    """A document whose known fields failed validation; carried through untouched."""

    content: Any
    reason: str


ViewT = TypeVar("ViewT", bound=_View)


def read_document(view: type[ViewT], doc: Any) -> ViewT | OpaqueDocument:
    try:
        return view.model_validate(doc)
    except ValidationError as exc:
        return OpaqueDocument(
            content=doc, reason=f"{exc.error_count()} field error(s) for {view.__name__}"
        )
