from __future__ import annotations

from handnote_extractor.engine.prompts import CLEANED_TEXT_PLACEHOLDER, LABS_EXTRACTION_PROMPT
from handnote_extractor.engine.registry import ModelRegistry
from handnote_extractor.pipeline.stage import StageDefinition, run_dual_stage
from handnote_extractor.schemas.config import PipelineConfig
from handnote_extractor.schemas.pipeline import StageResult

LABS_STAGE = StageDefinition(
    key="labs",
    prompt=LABS_EXTRACTION_PROMPT,
    placeholder=CLEANED_TEXT_PLACEHOLDER,
    confidence_field="overall_labs_confidence",
    fallback=lambda raw: {"error": "Failed to parse", "raw": raw},
)


async def run_labs_stage(
    registry: ModelRegistry, corrected_text: str, config: PipelineConfig
) -> StageResult:
    """Stage 4: structure every lab and diagnostic value individually."""
    adapter_a, adapter_b = registry.stage_pair(LABS_STAGE.key)
    return await run_dual_stage(
        LABS_STAGE,
        corrected_text,
        adapter_a,
        adapter_b,
        upstream_text=corrected_text,
        timeout=config.call_timeout_seconds,
        threshold=config.confidence_threshold,
    )
