from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, computed_field
from pydantic.alias_generators import to_camel

Document = dict[str, Any]


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


class ModelOutput(_CamelModel):
    name: str
    result: Document
    confidence: float
    processing_time_ms: int


class StageResult(_CamelModel):
    model_a: ModelOutput
    model_b: ModelOutput
    selected: Literal["A", "B"]
    selection_reason: str

    @computed_field(alias="selectedResult")  # type: ignore[prop-decorator]
    @property
    def selected_result(self) -> Document:
        # Always one of the two stored results, never a copy or a merge
        return self.model_a.result if self.selected == "A" else self.model_b.result

    @property
    def selected_name(self) -> str:
        return self.model_a.name if self.selected == "A" else self.model_b.name


class PipelineSteps(_CamelModel):
    ocr: StageResult
    classification: StageResult
    extraction: StageResult
    labs: StageResult | None = None


class FinalResult(_CamelModel):
    scenario: str
    raw_ocr_text: str
    corrected_text: str
    soap_note: Any
    labs: Document | None = None


class PipelineResult(_CamelModel):
    success: bool
    steps: PipelineSteps | None = None
    final_result: FinalResult | None = None
    total_processing_time: int
    pipeline_trace: list[str]
    error: str | None = None

    def to_response(self) -> dict[str, Any]:
        """Serialize to the camelCase document returned to callers.

        Absent parts (labs when skipped, steps and final result on failure,
        error on success) are left out rather than sent as null. Nulls inside
        model documents are kept as-is.
        """
        exclude: dict[str, Any] = {
            name: True
            for name in ("steps", "final_result", "error")
            if getattr(self, name) is None
        }
        if self.steps is not None and self.steps.labs is None:
            exclude["steps"] = {"labs"}
        if self.final_result is not None and self.final_result.labs is None:
            exclude["final_result"] = {"labs"}
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)
