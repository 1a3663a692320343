from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path

from handnote_extractor.engine.base import ImagePayload
from handnote_extractor.engine.errors import ImageInputError
from handnote_extractor.engine.registry import ModelRegistry
from handnote_extractor.pipeline.classify import (
    LABS_SCENARIOS,
    VALID_SCENARIOS,
    run_classification_stage,
)
from handnote_extractor.pipeline.extract import run_extraction_stage
from handnote_extractor.pipeline.labs import run_labs_stage
from handnote_extractor.pipeline.ocr import run_ocr_stage
from handnote_extractor.preprocessing import load_image_payload
from handnote_extractor.schemas.config import PipelineConfig
from handnote_extractor.schemas.documents import (
    ClassificationView,
    ExtractionView,
    OcrView,
    read_document,
)
from handnote_extractor.schemas.pipeline import (
    FinalResult,
    PipelineResult,
    PipelineSteps,
    StageResult,
)

logger = logging.getLogger(__name__)

DEFAULT_SCENARIO = "SOAP_NOTE"


def _completed(step: int, stage: StageResult) -> str:
    return f"Step {step} Complete: Selected {stage.selected_name} - {stage.selection_reason}"


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _is_blank(value: object) -> bool:
    # empty containers still count as a note
    return value is None or (isinstance(value, (str, int, float)) and not value)


async def run_multi_agent_pipeline(
    image: ImagePayload, registry: ModelRegistry, config: PipelineConfig
) -> PipelineResult:
    """Run OCR -> classification -> extraction -> (labs) with two models per stage.

    A stage failure ends the run: the result carries success=False, the
    error and the trace collected so far.
    """
    if not image.data:
        raise ImageInputError("No image provided")

    pipeline_start = time.perf_counter()
    trace: list[str] = []

    try:
        trace.append("Starting multi-agent pipeline...")

        trace.append("Step 1: Running OCR extraction with dual models...")
        ocr_step = await run_ocr_stage(registry, image, config)
        trace.append(_completed(1, ocr_step))

        ocr_view = read_document(OcrView, ocr_step.selected_result)
        raw_text = (isinstance(ocr_view, OcrView) and ocr_view.raw_text) or ""

        trace.append("Step 2: Running scenario classification with dual models...")
        classification_step = await run_classification_stage(registry, raw_text, config)
        trace.append(_completed(2, classification_step))

        classification = read_document(ClassificationView, classification_step.selected_result)
        if isinstance(classification, ClassificationView):
            scenario = classification.scenario or DEFAULT_SCENARIO
            corrected_text = classification.corrected_text or raw_text
        else:
            logger.warning("pipeline: classification result unreadable (%s)", classification.reason)
            scenario, corrected_text = DEFAULT_SCENARIO, raw_text
        if scenario not in VALID_SCENARIOS:
            logger.warning("pipeline: unexpected scenario %r", scenario)

        trace.append("Step 3: Running entity extraction with dual models...")
        extraction_step = await run_extraction_stage(registry, corrected_text, config)
        trace.append(_completed(3, extraction_step))

        labs_step: StageResult | None = None
        if scenario in LABS_SCENARIOS:
            trace.append("Step 4: Running labs extraction with dual models...")
            labs_step = await run_labs_stage(registry, corrected_text, config)
            trace.append(_completed(4, labs_step))
        else:
            logger.info("pipeline: labs stage skipped for scenario %s", scenario)

        extraction = read_document(ExtractionView, extraction_step.selected_result)
        if isinstance(extraction, ExtractionView) and not _is_blank(extraction.soap_note):
            soap_note = extraction.soap_note
        else:
            soap_note = extraction_step.selected_result

        total_ms = _elapsed_ms(pipeline_start)
        trace.append(f"Pipeline complete in {total_ms}ms")
        logger.info(
            "pipeline: complete in %dms - scenario=%s, labs=%s",
            total_ms,
            scenario,
            "yes" if labs_step else "skipped",
        )

        return PipelineResult(
            success=True,
            steps=PipelineSteps(
                ocr=ocr_step,
                classification=classification_step,
                extraction=extraction_step,
                labs=labs_step,
            ),
            final_result=FinalResult(
                scenario=scenario,
                raw_ocr_text=raw_text,
                corrected_text=corrected_text,
                soap_note=soap_note,
                labs=labs_step.selected_result if labs_step else None,
            ),
            total_processing_time=total_ms,
            pipeline_trace=trace,
        )
    except Exception as exc:
        logger.error("pipeline: failed - %s", exc)
        return PipelineResult(
            success=False,
            total_processing_time=_elapsed_ms(pipeline_start),
            pipeline_trace=trace,
            error=str(exc) or type(exc).__name__,
        )


def run_pipeline(
    image_path: str | Path, config: PipelineConfig, registry: ModelRegistry | None = None
) -> PipelineResult:
    """Synchronous entry point: load an image file and run the pipeline on it."""
    image = load_image_payload(image_path)
    logger.info("pipeline: loaded image %s (%s, %d bytes)", image_path, image.mime_type, len(image.data))
    if registry is None:
        registry = ModelRegistry(config)
    return asyncio.run(run_multi_agent_pipeline(image, registry, config))
