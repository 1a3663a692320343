from __future__ import annotations

from handnote_extractor.engine.base import ImagePayload
from handnote_extractor.engine.prompts import OCR_PROMPT
from handnote_extractor.engine.registry import ModelRegistry
from handnote_extractor.pipeline.confidence import DEFAULT_CONFIDENCE
from handnote_extractor.pipeline.stage import StageDefinition, run_dual_stage
from handnote_extractor.schemas.config import PipelineConfig
from handnote_extractor.schemas.pipeline import StageResult

OCR_STAGE = StageDefinition(
    key="ocr",
    prompt=OCR_PROMPT,
    confidence_field="ocr_confidence",
    # An unparseable transcription is still a transcription
    fallback=lambda raw: {"raw_text": raw, "ocr_confidence": DEFAULT_CONFIDENCE},
)


async def run_ocr_stage(
    registry: ModelRegistry, image: ImagePayload, config: PipelineConfig
) -> StageResult:
    """Stage 1: transcribe the photographed note verbatim with both OCR models."""
    adapter_a, adapter_b = registry.stage_pair(OCR_STAGE.key)
    return await run_dual_stage(
        OCR_STAGE,
        image,
        adapter_a,
        adapter_b,
        timeout=config.call_timeout_seconds,
        threshold=config.confidence_threshold,
    )
