"""Shared pytest fixtures for handnote_extractor tests."""

import asyncio
import io
import json

import pytest
from PIL import Image

from handnote_extractor.engine.base import ImagePayload, ModelAdapter, ModelResponse
from handnote_extractor.engine.registry import ModelRegistry
from handnote_extractor.schemas.config import PipelineConfig

STAGE_MARKERS = (
    ("labs", "overall_labs_confidence"),
    ("extraction", "overall_extraction_confidence"),
    ("classification", "classification_confidence"),
    ("ocr", "ocr_confidence"),
)


def stage_of(prompt: str) -> str:
    for stage, marker in STAGE_MARKERS:
        if marker in prompt:
            return stage
    raise AssertionError("prompt does not belong to a known stage")


class ScriptedAdapter(ModelAdapter):
    """Adapter answering from a per-stage script.

    Script values are either raw response text, a dict (sent as JSON) or an
    exception instance to raise.
    """

    provider = "scripted"

    def __init__(self, display_name, script, delay=0.0):
        super().__init__(display_name.lower().replace(" ", "-"), display_name)
        self.script = script
        self.delay = delay
        self.calls = []

    async def invoke(self, prompt, content):
        stage = stage_of(prompt)
        self.calls.append((stage, prompt, content))
        if self.delay:
            await asyncio.sleep(self.delay)
        answer = self.script[stage]
        if isinstance(answer, BaseException):
            raise answer
        if isinstance(answer, dict):
            answer = json.dumps(answer)
        return ModelResponse(text=answer, latency_ms=0)


class PairRegistry:
    """Registry stand-in that serves the same adapter pair for every stage."""

    def __init__(self, adapter_a, adapter_b):
        self.adapter_a = adapter_a
        self.adapter_b = adapter_b
        self.requested = []

    def stage_pair(self, stage):
        self.requested.append(stage)
        return self.adapter_a, self.adapter_b


def full_script(
    ocr_confidence=0.9,
    scenario="SOAP_NOTE",
    raw_text="BP 14O/9O c/o headache",
    corrected_text="BP 140/90 c/o headache",
    extraction_confidence=0.85,
    labs_confidence=0.8,
):
    return {
        "ocr": {"raw_text": raw_text, "ocr_confidence": ocr_confidence},
        "classification": {
            "scenario": scenario,
            "corrected_text": corrected_text,
            "classification_confidence": 0.88,
        },
        "extraction": {
            "soap_note": {"subjective": {"chief_complaint": "headache"}},
            "metadata": {"overall_extraction_confidence": extraction_confidence},
        },
        "labs": {
            "diagnostics_and_labs": [],
            "metadata": {"overall_labs_confidence": labs_confidence},
        },
    }


@pytest.fixture
def png_bytes() -> bytes:
    """Small white PNG standing in for a photographed note."""
    buffer = io.BytesIO()
    Image.new("RGB", (64, 48), "white").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def image_payload(png_bytes) -> ImagePayload:
    return ImagePayload(data=png_bytes, mime_type="image/png")


@pytest.fixture
def sample_image_path(tmp_path, png_bytes) -> str:
    path = tmp_path / "note.png"
    path.write_bytes(png_bytes)
    return str(path)


@pytest.fixture
def config() -> PipelineConfig:
    """Config with no credentials and a short call timeout."""
    return PipelineConfig(call_timeout_seconds=2.0)


@pytest.fixture
def dry_run_config() -> PipelineConfig:
    """PipelineConfig with dry_run=True (mock models, no API keys needed)."""
    return PipelineConfig(dry_run=True)


@pytest.fixture
def dry_run_registry(dry_run_config) -> ModelRegistry:
    return ModelRegistry(dry_run_config)
