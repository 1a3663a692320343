"""Shared shape of a dual-model stage.

Both models get the same prompt and content at the same time. Each side is
timed, parsed and scored on its own; a side that cannot be parsed or is not
configured degrades to the stage's fallback document at the default
confidence. A failed call on either side fails the stage, but only after
both calls have settled.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable

from handnote_extractor.engine.base import Content, ModelAdapter
from handnote_extractor.engine.errors import (
    MalformedOutputError,
    ProviderCallError,
    ProviderConfigurationError,
)
from handnote_extractor.engine.prompts import fill_template
from handnote_extractor.pipeline.arbitrate import DEFAULT_THRESHOLD, select_best
from handnote_extractor.pipeline.confidence import DEFAULT_CONFIDENCE, extract_confidence
from handnote_extractor.pipeline.parse import parse_model_json
from handnote_extractor.schemas.pipeline import Document, ModelOutput, StageResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StageDefinition:
    key: str  # "ocr", "classification", "extraction", "labs"
    prompt: str
    confidence_field: str
    fallback: Callable[[str], Document]  # raw response text -> substitute document
    placeholder: str | None = None  # upstream text goes here; None for image stages

    def build_prompt(self, upstream_text: str) -> str:
        if self.placeholder is None:
            return self.prompt
        return fill_template(self.prompt, self.placeholder, upstream_text)


async def _call_model(
    stage: StageDefinition,
    adapter: ModelAdapter,
    prompt: str,
    content: Content,
    timeout: float | None,
) -> ModelOutput:
    start = time.perf_counter()
    try:
        response = await asyncio.wait_for(adapter.invoke(prompt, content), timeout)
    except ProviderConfigurationError as exc:
        logger.warning("%s: %s not configured, using fallback (%s)", stage.key, adapter.display_name, exc)
        result = stage.fallback("")
        result["provider_error"] = str(exc)
        return ModelOutput(
            name=adapter.display_name,
            result=result,
            confidence=DEFAULT_CONFIDENCE,
            processing_time_ms=int((time.perf_counter() - start) * 1000),
        )
    except asyncio.TimeoutError as exc:
        raise ProviderCallError(
            adapter.provider, f"{adapter.display_name} timed out after {timeout}s"
        ) from exc
    elapsed_ms = int((time.perf_counter() - start) * 1000)

    try:
        result = parse_model_json(response.text)
        confidence = extract_confidence(result, stage.confidence_field)
    except MalformedOutputError as exc:
        logger.warning("%s: %s output unparseable: %s", stage.key, adapter.display_name, exc)
        result = stage.fallback(response.text)
        confidence = DEFAULT_CONFIDENCE

    return ModelOutput(
        name=adapter.display_name,
        result=result,
        confidence=confidence,
        processing_time_ms=elapsed_ms,
    )


async def run_dual_stage(
    stage: StageDefinition,
    content: Content,
    adapter_a: ModelAdapter,
    adapter_b: ModelAdapter,
    upstream_text: str = "",
    timeout: float | None = None,
    threshold: float = DEFAULT_THRESHOLD,
) -> StageResult:
    prompt = stage.build_prompt(upstream_text)

    outcomes = await asyncio.gather(
        _call_model(stage, adapter_a, prompt, content, timeout),
        _call_model(stage, adapter_b, prompt, content, timeout),
        return_exceptions=True,
    )
    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            raise outcome
    output_a, output_b = outcomes

    selection = select_best(
        output_a.result, output_a.confidence, output_b.result, output_b.confidence, threshold
    )
    logger.info(
        "%s: A=%s (%.2f, %dms) B=%s (%.2f, %dms) -> %s",
        stage.key,
        output_a.name,
        output_a.confidence,
        output_a.processing_time_ms,
        output_b.name,
        output_b.confidence,
        output_b.processing_time_ms,
        selection.selected,
    )

    return StageResult(
        model_a=output_a,
        model_b=output_b,
        selected=selection.selected,
        selection_reason=selection.reason,
    )
