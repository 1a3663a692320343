from __future__ import annotations

from handnote_extractor.engine.prompts import CLASSIFICATION_PROMPT, RAW_OCR_PLACEHOLDER
from handnote_extractor.engine.registry import ModelRegistry
from handnote_extractor.pipeline.confidence import DEFAULT_CONFIDENCE
from handnote_extractor.pipeline.stage import StageDefinition, run_dual_stage
from handnote_extractor.schemas.config import PipelineConfig
from handnote_extractor.schemas.pipeline import StageResult

VALID_SCENARIOS = {
    "SOAP_NOTE",
    "LAB_REPORT",
    "PRESCRIPTION_ONLY",
    "DISCHARGE_SUMMARY",
    "UNKNOWN",
}

# Scenarios whose notes can carry lab values worth a labs pass
LABS_SCENARIOS = frozenset({"LAB_REPORT", "SOAP_NOTE"})

CLASSIFICATION_STAGE = StageDefinition(
    key="classification",
    prompt=CLASSIFICATION_PROMPT,
    placeholder=RAW_OCR_PLACEHOLDER,
    confidence_field="classification_confidence",
    fallback=lambda raw: {
        "scenario": "UNKNOWN",
        "classification_confidence": DEFAULT_CONFIDENCE,
    },
)


async def run_classification_stage(
    registry: ModelRegistry, raw_text: str, config: PipelineConfig
) -> StageResult:
    """Stage 2: correct OCR noise and classify the document scenario."""
    adapter_a, adapter_b = registry.stage_pair(CLASSIFICATION_STAGE.key)
    return await run_dual_stage(
        CLASSIFICATION_STAGE,
        raw_text,
        adapter_a,
        adapter_b,
        upstream_text=raw_text,
        timeout=config.call_timeout_seconds,
        threshold=config.confidence_threshold,
    )
