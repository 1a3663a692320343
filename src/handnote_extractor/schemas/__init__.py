"""Schema definitions for the dual-model extraction pipeline."""
from handnote_extractor.schemas.config import ModelSpec, PipelineConfig
from handnote_extractor.schemas.documents import (
    ClassificationView,
    ExtractionView,
    OcrView,
    OpaqueDocument,
    read_document,
)
from handnote_extractor.schemas.pipeline import (
    Document,
    FinalResult,
    ModelOutput,
    PipelineResult,
    PipelineSteps,
    StageResult,
)

__all__ = [
    "ModelSpec", "PipelineConfig",
    "ClassificationView", "ExtractionView", "OcrView", "OpaqueDocument", "read_document",
    "Document", "FinalResult", "ModelOutput", "PipelineResult", "PipelineSteps", "StageResult",
]
